"""Read Eden per-game INI files back into the configuration model.

Only settings known to the baseline configuration are imported; unknown
sections and keys are ignored so that files written by newer emulator builds
still load. Values are coerced to the type of the baseline value.
"""
from __future__ import annotations

import configparser
import logging

from .defaults import get_default_config
from .mapping import FIELD_ALIASES, FIELD_MAPPINGS, config_value_to_custom_value
from .models import Config, ConfigValue, SettingValue

LOGGER = logging.getLogger(__name__)

USE_GLOBAL_SUFFIX = "\\use_global"
DEFAULT_SUFFIX = "\\default"

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


class IniParseError(RuntimeError):
    """Raised when text cannot be read as an INI document."""


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        delimiters=("=",),
        interpolation=None,
        strict=False,
        empty_lines_in_values=False,
        # Eden has no [DEFAULT] section; keep one from leaking into the others.
        default_section="\x00defaults",
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    return parser


def parse_bool(text: str) -> bool | None:
    """Return the boolean spelled by *text*, or ``None`` when ambiguous."""
    lowered = text.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    return None


def coerce_setting(text: str, baseline: SettingValue) -> SettingValue | None:
    """Coerce INI *text* to the type of *baseline*; ``None`` when impossible."""
    if isinstance(baseline, bool):
        return parse_bool(text)
    if isinstance(baseline, int):
        try:
            return int(text.strip())
        except ValueError:
            return None
    return text


def parse_ini(text: str) -> Config:
    """Return the configuration described by an Eden INI document.

    Settings absent from *text* keep their baseline value and state.
    """
    parser = _new_parser()
    try:
        parser.read_string(text)
    except configparser.Error as exc:
        raise IniParseError(f"Unable to parse INI content: {exc}") from exc

    config = get_default_config()
    for section_name in parser.sections():
        settings = config.get(section_name)
        if settings is None:
            LOGGER.debug("Ignoring unknown section [%s].", section_name)
            continue
        for option, raw in parser.items(section_name, raw=True):
            _apply_option(settings, section_name, option, raw)
    return config


def _apply_option(
    settings: dict[str, ConfigValue], section: str, option: str, raw: str
) -> None:
    key, suffix = _split_option(option)
    setting = settings.get(key)
    if setting is None:
        LOGGER.debug("Ignoring unknown setting %s.%s.", section, key)
        return

    if suffix == USE_GLOBAL_SUFFIX:
        flag = parse_bool(raw)
        if flag is not None:
            setting.use_global = flag
    elif suffix == DEFAULT_SUFFIX:
        flag = parse_bool(raw)
        if flag is not None:
            setting.default = flag
    elif not suffix:
        value = coerce_setting(raw, setting.value)
        if value is None:
            LOGGER.debug("Could not read %s.%s value %r; keeping baseline.", section, key, raw)
            return
        setting.value = value
    else:
        LOGGER.debug("Ignoring unsupported attribute %s.%s%s.", section, key, suffix)


def _split_option(option: str) -> tuple[str, str]:
    key, separator, attribute = option.partition("\\")
    if not separator:
        return option.strip(), ""
    return key.strip(), f"\\{attribute.strip()}"


def extract_custom_field_values(config: Config) -> dict[str, object]:
    """Return listing field values for every per-game override in *config*.

    Fields are keyed by the names the listings data producer uses. Settings
    still deferring to the global configuration are omitted.
    """
    values: dict[str, object] = {}
    for field_name, mapping in FIELD_MAPPINGS.items():
        if field_name in FIELD_ALIASES:
            continue
        setting = config.get(mapping.section, {}).get(mapping.key)
        if setting is None or setting.use_global:
            continue
        values[field_name] = config_value_to_custom_value(mapping.key, setting.value)
    return values


__all__ = [
    "DEFAULT_SUFFIX",
    "IniParseError",
    "USE_GLOBAL_SUFFIX",
    "coerce_setting",
    "extract_custom_field_values",
    "parse_bool",
    "parse_ini",
]
