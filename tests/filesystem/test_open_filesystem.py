from __future__ import annotations

import pytest

from logpurger.core.types import InvalidConfiguration
from logpurger.filesystem import LocalFileSystem, MemoryFileSystem, WebHdfsFileSystem, open_filesystem


def test_bare_path_uses_local_filesystem() -> None:
    fs, path = open_filesystem("/tmp/logs")

    assert isinstance(fs, LocalFileSystem)
    assert path == "/tmp/logs"


def test_file_uri_uses_local_filesystem() -> None:
    fs, path = open_filesystem("file:///var/log/apps")

    assert isinstance(fs, LocalFileSystem)
    assert path == "/var/log/apps"


def test_webhdfs_uri_builds_http_backend() -> None:
    fs, path = open_filesystem("webhdfs://namenode:50070/app-logs", user="yarn")

    assert isinstance(fs, WebHdfsFileSystem)
    assert path == "/app-logs"
    assert fs._url("/app-logs", "LISTSTATUS").startswith("http://namenode:50070/webhdfs/v1/app-logs?")


def test_swebhdfs_uri_defaults_port() -> None:
    fs, _ = open_filesystem("swebhdfs://namenode/app-logs")

    assert fs._url("/", "LISTSTATUS").startswith("https://namenode:9870/")  # type: ignore[attr-defined]


def test_scheme_less_path_resolves_against_default_fs() -> None:
    fs, path = open_filesystem("/tmp/logs", default_fs="webhdfs://nn:9870")

    assert isinstance(fs, WebHdfsFileSystem)
    assert path == "/tmp/logs"


def test_memory_uri() -> None:
    fs, path = open_filesystem("memory:///tmp/logs")

    assert isinstance(fs, MemoryFileSystem)
    assert path == "/tmp/logs"


@pytest.mark.parametrize("uri", ["hdfs://nn:8020/tmp/logs", "s3://bucket/logs", "webhdfs:///tmp/logs", "  "])
def test_unsupported_uris_are_configuration_errors(uri: str) -> None:
    with pytest.raises(InvalidConfiguration):
        open_filesystem(uri)
