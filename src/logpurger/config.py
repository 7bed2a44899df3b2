"""Hadoop-style configuration for purge runs.

Values come from ``core-site.xml`` and ``yarn-site.xml`` in the configuration
directory (``--conf-dir``, ``$YARN_CONF_DIR`` or ``$HADOOP_CONF_DIR``) and are
then overridden by ``-D key=value`` pairs, the same precedence the Hadoop
command-line tools use. Site files are parsed with ``defusedxml``.

>>> conf = Configuration({"deleteOlderThan": "300", "deleteFiles": "TRUE"})
>>> settings = PurgerConfig.from_configuration(conf)
>>> (settings.retention_days, settings.delete_enabled, settings.root_log_dir)
(300, True, '/tmp/logs')
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Dict, Iterable, Mapping, MutableMapping, Optional, Sequence
from xml.etree.ElementTree import ParseError
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from defusedxml import ElementTree as DefusedET
from defusedxml.common import DefusedXmlException

from .core.cutoff import validate_retention_days
from .core.types import InvalidConfiguration

DELETE_OLDER_THAN = "deleteOlderThan"
DELETE_FILES = "deleteFiles"
REMOTE_APP_LOG_DIR = "yarn.nodemanager.remote-app-log-dir"
DEFAULT_REMOTE_APP_LOG_DIR = "/tmp/logs"
REMOTE_APP_LOG_DIR_SUFFIX = "yarn.nodemanager.remote-app-log-dir-suffix"
DEFAULT_REMOTE_APP_LOG_DIR_SUFFIX = "logs"
DEFAULT_FS = "fs.defaultFS"
DEFAULT_DEFAULT_FS = "file:///"
TIMEZONE = "purger.timezone"
FAIL_FAST = "purger.fail-fast"
USER = "purger.user"

SITE_FILES = ("core-site.xml", "yarn-site.xml")
CONF_DIR_VARIABLES = ("YARN_CONF_DIR", "HADOOP_CONF_DIR")

_VARIABLE = re.compile(r"\$\{([^}$\s]+)\}")
_MAX_SUBSTITUTIONS = 20


def parse_site_xml(path: Path | str) -> Dict[str, str]:
    """Return the ``name -> value`` pairs declared in a Hadoop site file."""

    try:
        tree = DefusedET.parse(str(path))
    except (ParseError, DefusedXmlException) as exc:
        raise InvalidConfiguration(f"Unable to parse configuration file {path}: {exc}") from exc
    except OSError as exc:
        raise InvalidConfiguration(f"Unable to read configuration file {path}: {exc}") from exc

    root = tree.getroot()
    if root.tag != "configuration":
        raise InvalidConfiguration(
            f"{path}: expected <configuration> root element, found <{root.tag}>"
        )
    values: Dict[str, str] = {}
    for prop in root.iter("property"):
        name = (prop.findtext("name") or "").strip()
        value = prop.findtext("value")
        if not name or value is None:
            continue
        values[name] = value.strip()
    return values


def parse_overrides(pairs: Iterable[str]) -> Dict[str, str]:
    """Parse ``key=value`` strings as given to ``-D``."""

    values: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidConfiguration(f"Expected key=value for -D, got {pair!r}")
        values[key] = value.strip()
    return values


def resolve_conf_dir(
    explicit: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Optional[Path]:
    if explicit:
        return Path(explicit).expanduser()
    env = os.environ if environ is None else environ
    for variable in CONF_DIR_VARIABLES:
        value = env.get(variable)
        if value:
            return Path(value).expanduser()
    return None


class Configuration:
    """Flat key/value configuration with Hadoop ``${var}`` expansion."""

    def __init__(
        self,
        values: Mapping[str, str] | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._values: MutableMapping[str, str] = dict(values or {})
        self._environ = os.environ if environ is None else environ

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def update(self, values: Mapping[str, str]) -> None:
        self._values.update(values)

    def add_resource(self, path: Path | str) -> None:
        self.update(parse_site_xml(path))

    def get_raw(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def _expand(self, value: str) -> str:
        for _ in range(_MAX_SUBSTITUTIONS):
            match = _VARIABLE.search(value)
            if not match:
                return value
            name = match.group(1)
            if name.startswith("env."):
                replacement = self._environ.get(name[4:])
            else:
                replacement = self._values.get(name)
            if replacement is None:
                return value
            value = value[: match.start()] + replacement + value[match.end():]
        return value

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        raw = self._values.get(key)
        if raw is None:
            return default
        return self._expand(raw)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        text = self.get(key)
        if text is None or not text.strip():
            return default
        text = text.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text)
        except ValueError as exc:
            raise InvalidConfiguration(f"{key} must be an integer, got {text!r}") from exc

    def get_bool(self, key: str, default: bool = False) -> bool:
        text = (self.get(key) or "").strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
        return default

    def as_dict(self) -> Dict[str, str]:
        return {key: self.get(key) or "" for key in self._values}


def load_configuration(
    *,
    conf_dir: Path | str | None = None,
    overrides: Sequence[str] | Mapping[str, str] = (),
    environ: Mapping[str, str] | None = None,
) -> Configuration:
    """Build a :class:`Configuration` from site files and overrides."""

    conf = Configuration(environ=environ)
    directory = resolve_conf_dir(conf_dir, environ)
    if directory is not None:
        if conf_dir and not directory.is_dir():
            raise InvalidConfiguration(f"Configuration directory does not exist: {directory}")
        for name in SITE_FILES:
            candidate = directory / name
            if candidate.is_file():
                conf.add_resource(candidate)
    if isinstance(overrides, Mapping):
        conf.update(overrides)
    else:
        conf.update(parse_overrides(overrides))
    return conf


def resolve_zone(name: Optional[str]) -> Optional[tzinfo]:
    """Return ``ZoneInfo(name)``; ``None`` selects the system-local zone."""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidConfiguration(f"Unknown time zone: {name!r}") from exc


@dataclass(frozen=True)
class PurgerConfig:
    """Validated settings for one purge run."""

    retention_days: int
    delete_enabled: bool = False
    root_log_dir: str = DEFAULT_REMOTE_APP_LOG_DIR
    suffix: str = DEFAULT_REMOTE_APP_LOG_DIR_SUFFIX
    default_fs: str = DEFAULT_DEFAULT_FS
    timezone: Optional[str] = None
    fail_fast: bool = False
    user: Optional[str] = None

    def __post_init__(self) -> None:
        validate_retention_days(self.retention_days)
        if not self.root_log_dir.strip():
            raise InvalidConfiguration("Root log directory must not be empty.")
        if not self.suffix.strip("/ "):
            raise InvalidConfiguration("Remote app log dir suffix must not be empty.")
        resolve_zone(self.timezone)

    @property
    def zone(self) -> Optional[tzinfo]:
        return resolve_zone(self.timezone)

    @classmethod
    def from_configuration(cls, conf: Configuration) -> "PurgerConfig":
        retention_days = conf.get_int(DELETE_OLDER_THAN)
        if retention_days is None:
            raise InvalidConfiguration(
                "Missing deleteOlderThan. Usage: logpurger -D deleteOlderThan=300 "
                "[-D deleteFiles=true]"
            )
        return cls(
            retention_days=retention_days,
            delete_enabled=conf.get_bool(DELETE_FILES, False),
            root_log_dir=conf.get(REMOTE_APP_LOG_DIR) or DEFAULT_REMOTE_APP_LOG_DIR,
            suffix=conf.get(REMOTE_APP_LOG_DIR_SUFFIX) or DEFAULT_REMOTE_APP_LOG_DIR_SUFFIX,
            default_fs=conf.get(DEFAULT_FS) or DEFAULT_DEFAULT_FS,
            timezone=conf.get(TIMEZONE) or None,
            fail_fast=conf.get_bool(FAIL_FAST, False),
            user=conf.get(USER) or None,
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PurgerConfig":
        return cls.from_configuration(Configuration(values))


__all__ = [
    "Configuration",
    "DEFAULT_REMOTE_APP_LOG_DIR",
    "DEFAULT_REMOTE_APP_LOG_DIR_SUFFIX",
    "DELETE_FILES",
    "DELETE_OLDER_THAN",
    "InvalidConfiguration",
    "PurgerConfig",
    "load_configuration",
    "parse_overrides",
    "parse_site_xml",
    "resolve_conf_dir",
    "resolve_zone",
]
