"""Configuration loader for edenconf.

Application settings are read from multiple sources, later sources winning:

1. Built-in defaults.
2. ``~/.config/edenconf/config.yml`` (or an override path).
3. Environment variables prefixed with ``EDENCONF_``.
4. Explicit overrides supplied programmatically (reserved for CLI flags).

Environment keys use double underscores to express nesting, e.g.::

    export EDENCONF_OUTPUT_DIR=/srv/configs
    export EDENCONF_LOGGING__LEVEL=DEBUG

Values are coerced via PyYAML's ``safe_load`` so that booleans and numbers are
parsed naturally. The resulting configuration is exposed as immutable
``dataclasses``.

These settings describe how the tool runs; they are unrelated to the Eden
emulator configuration the tool produces.
"""
from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml

from .defaults import EDEN_ANDROID_BASE_PATH
from .generator import (
    DEFAULT_EMULATOR_NAME,
    DEFAULT_FILENAME_TEMPLATE,
    ConfigGenerationError,
    get_supported_emulators,
    is_config_generation_supported,
    render_filename,
)

ENV_PREFIX = "EDENCONF_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
RESERVED_ENV_KEYS = {CONFIG_ENV_VAR}

ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(RuntimeError):
    """Raised when configuration parsing fails."""


@dataclass(frozen=True)
class LoggingConfig:
    """Structured operation log settings."""

    enabled: bool = True
    level: str = "INFO"

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {"enabled": self.enabled, "level": self.level}


@dataclass(frozen=True)
class AppConfig:
    """Resolved configuration values for edenconf."""

    config_file: Path
    logs_dir: Path
    output_dir: Path
    emulator_name: str
    filename_template: str
    driver_base_path: str
    logging: LoggingConfig

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the config."""
        return {
            "config_file": str(self.config_file),
            "logs_dir": str(self.logs_dir),
            "output_dir": str(self.output_dir),
            "emulator_name": self.emulator_name,
            "filename_template": self.filename_template,
            "driver_base_path": self.driver_base_path,
            "logging": self.logging.to_dict(),
        }


DEFAULTS: dict[str, object] = {
    "config_file": "~/.config/edenconf/config.yml",
    "logs_dir": "~/.local/state/edenconf/logs",
    "output_dir": ".",
    "emulator_name": DEFAULT_EMULATOR_NAME,
    "filename_template": DEFAULT_FILENAME_TEMPLATE,
    "driver_base_path": EDEN_ANDROID_BASE_PATH,
    "logging": {
        "enabled": True,
        "level": "INFO",
    },
}

ALLOWED_TOP_LEVEL_KEYS = set(DEFAULTS.keys())


def load_config(
    config_file: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> AppConfig:
    """Load and merge configuration sources into an :class:`AppConfig`."""
    merged: dict[str, object] = _deep_copy(DEFAULTS)
    resolved_env = dict(os.environ if env is None else env)

    config_default = _expect_str(merged["config_file"], "config_file")
    config_path = _determine_config_path(config_default, config_file, resolved_env)

    file_values = _load_yaml_file(config_path)
    if file_values:
        _deep_merge(merged, file_values)

    env_values = _build_env_overrides(resolved_env)
    if env_values:
        _deep_merge(merged, env_values)

    if overrides:
        _deep_merge(merged, dict(overrides))

    merged["config_file"] = str(config_path)

    _validate_structure(merged)

    return _build_app_config(merged)


def _determine_config_path(
    default_path: str,
    cli_override: str | os.PathLike[str] | None,
    env: Mapping[str, str],
) -> Path:
    if cli_override:
        return Path(cli_override).expanduser()
    if CONFIG_ENV_VAR in env:
        return Path(env[CONFIG_ENV_VAR]).expanduser()
    return Path(default_path).expanduser()


def _load_yaml_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
    return _as_dict(data, f"file:{path}")


def _validate_structure(raw: Mapping[str, object]) -> None:
    unknown_keys = set(raw.keys()) - ALLOWED_TOP_LEVEL_KEYS
    if unknown_keys:
        joined = ", ".join(sorted(unknown_keys))
        raise ConfigError(f"Unknown configuration keys: {joined}.")

    logging_map = _as_dict(raw.get("logging"), "logging")
    unknown = set(logging_map.keys()) - {"enabled", "level"}
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown logging configuration keys: {joined}.")

    level = logging_map.get("level")
    if level is not None and str(level).upper() not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ConfigError(f"Unsupported logging level '{level}'. Allowed: {allowed}.")

    emulator_name = raw.get("emulator_name")
    if emulator_name is not None:
        name = _expect_str(emulator_name, "emulator_name")
        if not is_config_generation_supported(name):
            supported = ", ".join(get_supported_emulators())
            raise ConfigError(
                f"Unsupported emulator_name '{name}'. Supported emulators: {supported}."
            )

    driver_base_path = raw.get("driver_base_path")
    if driver_base_path is not None:
        base = _expect_str(driver_base_path, "driver_base_path")
        if not base.startswith("/"):
            raise ConfigError(f"driver_base_path must be an absolute path. Got {base!r}.")


def _build_app_config(raw: Mapping[str, object]) -> AppConfig:
    config_file = _to_path(raw.get("config_file"))
    logs_dir = _to_path(raw.get("logs_dir"))
    output_dir = _to_path(raw.get("output_dir"))
    emulator_name = _expect_str(raw.get("emulator_name", DEFAULT_EMULATOR_NAME), "emulator_name")

    filename_template = _expect_str(
        raw.get("filename_template", DEFAULT_FILENAME_TEMPLATE), "filename_template"
    )
    try:
        sample = render_filename(
            filename_template, emulator_name=emulator_name, listing_id="sample"
        )
    except ConfigGenerationError as exc:
        raise ConfigError(str(exc)) from exc
    if not sample.strip() or "/" in sample:
        raise ConfigError(
            f"filename_template must render a plain file name. Got {filename_template!r}."
        )

    logging_mapping = _as_dict(raw.get("logging"), "logging")
    logging_config = LoggingConfig(
        enabled=_expect_bool(logging_mapping.get("enabled"), "logging.enabled", default=True),
        level=str(logging_mapping.get("level", "INFO")).upper(),
    )

    return AppConfig(
        config_file=config_file,
        logs_dir=logs_dir,
        output_dir=output_dir,
        emulator_name=emulator_name,
        filename_template=filename_template,
        driver_base_path=_expect_str(
            raw.get("driver_base_path", EDEN_ANDROID_BASE_PATH), "driver_base_path"
        ).rstrip("/"),
        logging=logging_config,
    )


def _build_env_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for key, value in env.items():
        if key in RESERVED_ENV_KEYS:
            continue
        if not key.startswith(ENV_PREFIX):
            continue
        suffix = key[len(ENV_PREFIX) :]
        path_segments = [segment.lower() for segment in suffix.split("__") if segment]
        if not path_segments:
            continue
        _assign_nested(overrides, path_segments, _coerce_value(value))
    return overrides


def _assign_nested(tree: MutableMapping[str, object], path: list[str], value: object) -> None:
    current: MutableMapping[str, object] = tree
    for segment in path[:-1]:
        existing = current.get(segment)
        if existing is None:
            new_child: MutableMapping[str, object] = {}
            current[segment] = new_child
            current = new_child
            continue
        if isinstance(existing, MutableMapping):
            current = cast(MutableMapping[str, object], existing)
            continue
        raise ConfigError(
            "Environment overrides conflict with existing scalar value at "
            f"{'.'.join(path)}"
        )
    current[path[-1]] = value


def _deep_merge(target: MutableMapping[str, object], overrides: Mapping[str, object]) -> None:
    for key, value in overrides.items():
        existing = target.get(key)
        if isinstance(existing, MutableMapping) and isinstance(value, Mapping):
            _deep_merge(existing, _as_dict(value, f"merge.{key}"))
            continue
        target[key] = value


def _deep_copy(source: Mapping[str, object]) -> dict[str, object]:
    result: dict[str, object] = {}
    for key, value in source.items():
        if isinstance(value, Mapping):
            result[key] = _deep_copy(_as_dict(value, f"copy.{key}"))
        else:
            result[key] = value
    return result


def _coerce_value(raw: str) -> object:
    raw = raw.strip()
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    return parsed


def _to_path(value: object) -> Path:
    if value is None:
        raise ConfigError("Expected a filesystem path, received None.")
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise ConfigError(f"Cannot convert value {value!r} to Path.")


def _expect_bool(value: object | None, label: str, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ConfigError(f"Expected {label} to be a boolean. Got {value!r}.")


def _expect_str(value: object, key: str) -> str:
    if isinstance(value, str):
        return value
    raise ConfigError(f"Expected {key} to resolve to a string. Got {value!r}.")


def _as_dict(value: object | None, label: str) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"Expected {label} to be a mapping. Got {type(value).__name__}.")
    result: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigError(f"Mapping {label} must use string keys. Got {key!r}.")
        result[key] = item
    return result


__all__ = [
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "load_config",
]
