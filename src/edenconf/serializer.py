"""Serialise an Eden configuration to the emulator's per-game INI dialect.

Each setting is written as up to three lines::

    key\\use_global=false
    key\\default=false
    key=value

Settings that defer to the global configuration only emit the ``use_global``
line. Sections follow :data:`~edenconf.defaults.SECTION_ORDER` and are
separated by two blank lines.
"""
from __future__ import annotations

from collections.abc import Mapping

from .defaults import DRIVER_PATH_KEY, SECTION_ORDER
from .models import ConfigValue

_LINE_BREAKS = str.maketrans("", "", "\r\n")


def format_ini_value(value: object) -> str:
    """Return the INI text for a setting value.

    Booleans are spelled ``true``/``false``. Line breaks are stripped from
    strings so a value cannot spill into the next line.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value).translate(_LINE_BREAKS)


def _writes_value(key: str, setting: ConfigValue) -> bool:
    if setting.use_global:
        return False
    return not (key == DRIVER_PATH_KEY and setting.value == "")


def serialize_section(name: str, settings: Mapping[str, ConfigValue]) -> list[str]:
    """Return the lines for one section, including the trailing separator."""
    lines = [f"[{name}]"]
    for key, setting in settings.items():
        lines.append(f"{key}\\use_global={format_ini_value(setting.use_global)}")
        if setting.default is False:
            lines.append(f"{key}\\default=false")
        if _writes_value(key, setting):
            lines.append(f"{key}={format_ini_value(setting.value)}")
    lines.extend(["", ""])
    return lines


def serialize(config: Mapping[str, Mapping[str, ConfigValue]]) -> str:
    """Return the INI document for *config*.

    Sections missing from *config* or without settings are omitted. The
    document never ends with blank lines.
    """
    lines: list[str] = []
    for name in SECTION_ORDER:
        settings = config.get(name)
        if not settings:
            continue
        lines.extend(serialize_section(name, settings))

    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines)


__all__ = ["format_ini_value", "serialize", "serialize_section"]
