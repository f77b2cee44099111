"""Settings loading for callergate.

Reads `.callergate/config.yaml` (or `~/.callergate/config.yaml`).
Raises SystemExit on parse errors or a missing `version` field.
If no settings file is found, returns default values (safe to run without one).

Search order:
  1. `config_path` argument (if provided, for testing or explicit override)
  2. CALLERGATE_CONFIG environment variable (if set)
  3. `.callergate/config.yaml` (working directory)
  4. `~/.callergate/config.yaml` (home directory)

Environment variable overrides:
  CALLERGATE_ALLOWLIST: allow-list XML file, replaces the packaged resource
  CALLERGATE_LOG_LEVEL: overrides logging.level

Example:

    version: 1
    allowlist:
      path: /etc/callergate/allowed_media_browser_callers.xml
    platform:
      system_uid: 1000
    logging:
      level: INFO
      json: true
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from callergate.constants import DEFAULT_ALLOWLIST_RESOURCE, DEFAULT_CONFIG_PATHS, SYSTEM_UID
from callergate.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_ENV_CONFIG = "CALLERGATE_CONFIG"
_ENV_ALLOWLIST = "CALLERGATE_ALLOWLIST"
_ENV_LOG_LEVEL = "CALLERGATE_LOG_LEVEL"


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class AllowlistConfig:
    """Where the allow-list XML comes from.

    path:     Explicit XML file. Takes precedence over the packaged resource.
    resource: Resource name inside the callergate.resources package.
    """

    path: Optional[str] = None
    resource: str = DEFAULT_ALLOWLIST_RESOURCE


@dataclass
class PlatformConfig:
    """Identity of the trusted platform process."""

    system_uid: int = SYSTEM_UID


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = True


@dataclass
class Config:
    """Root settings object populated from .callergate/config.yaml.

    All fields have safe defaults; callergate can start without any file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    allowlist: AllowlistConfig = field(default_factory=AllowlistConfig)
    platform: PlatformConfig = field(default_factory=PlatformConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Optional[str] = None  # Path to the loaded settings file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On a section that is not a mapping, a non-integer
                platform.system_uid, an unknown logging.level or a logging.json
                that is not a boolean.
        """
        # ── Allow-list ────────────────────────────────────────────────────────
        allowlist_raw = _section(raw, "allowlist")
        allowlist = AllowlistConfig(
            path=allowlist_raw.get("path"),
            resource=allowlist_raw.get("resource", DEFAULT_ALLOWLIST_RESOURCE),
        )

        # ── Platform ──────────────────────────────────────────────────────────
        platform_raw = _section(raw, "platform")
        system_uid = platform_raw.get("system_uid", SYSTEM_UID)
        if isinstance(system_uid, bool) or not isinstance(system_uid, int):
            _fail(
                f"CONFIG ERROR: platform.system_uid must be an integer, got {system_uid!r}."
            )

        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = _section(raw, "logging")
        level = str(logging_raw.get("level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            _fail(
                f"CONFIG ERROR: Invalid logging.level: '{level}'. "
                f"Supported values: {sorted(VALID_LOG_LEVELS)}."
            )
        json_output = _parse_json_flag(logging_raw.get("json", True))

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            allowlist=allowlist,
            platform=PlatformConfig(system_uid=system_uid),
            logging=LoggingConfig(level=level, json=json_output),
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate callergate settings.

    If no file is found at any search path, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).
    Environment overrides are applied last, whether or not a file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, or invalid field values.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get(_ENV_CONFIG)
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.debug("No settings file found, using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(f"CONFIG ERROR: Failed to parse {found_path}: {exc}")
    except OSError as exc:
        _fail(f"CONFIG ERROR: Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your settings file."
            )
        _fail(
            f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
            "The settings file must be a YAML dictionary at the top level."
        )

    version = raw.get("version")
    if version is None:
        _fail(
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your settings file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.info(
        "Settings loaded",
        path=found_path,
        allowlist_path=config.allowlist.path,
        allowlist_resource=config.allowlist.resource,
        system_uid=config.platform.system_uid,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(1): If CALLERGATE_LOG_LEVEL is not a known level.
    """
    env_allowlist = os.environ.get(_ENV_ALLOWLIST)
    if env_allowlist:
        config.allowlist.path = env_allowlist

    env_level = os.environ.get(_ENV_LOG_LEVEL)
    if env_level is not None:
        level = env_level.upper()
        if level not in VALID_LOG_LEVELS:
            _fail(
                f"CONFIG ERROR: {_ENV_LOG_LEVEL} environment variable is not a valid "
                f"log level: '{env_level}'"
            )
        config.logging.level = level


def _fail(msg: str) -> NoReturn:
    print(msg, file=sys.stderr)
    raise SystemExit(1)


def _section(raw: dict, key: str) -> dict:
    """Return a settings section, treating an absent or empty one as {}."""
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        _fail(f"CONFIG ERROR: '{key}' must be a mapping, got {section!r}.")
    return section


def _parse_json_flag(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "false", "0"):
        return value.strip().lower() in ("true", "1")
    _fail(f"CONFIG ERROR: logging.json must be true or false, got {value!r}.")
