"""Data models shared by the converter, serializer and importer.

The configuration model is deliberately plain: a :data:`Config` is an ordered
``dict`` of section name to an ordered ``dict`` of setting key to
:class:`ConfigValue`. Insertion order is declaration order and becomes the
serialization order of keys within a section.

Input records mirror what the listings data layer hands over: a custom field
definition (name, label, type, options) plus a JSON-compatible value.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]
SettingValue = Union[bool, int, str]


class InputError(RuntimeError):
    """Raised when a conversion request does not honour the caller contract."""


class CustomFieldType(str, Enum):
    """Field types offered by the listing form builder."""

    TEXT = "TEXT"
    TEXTAREA = "TEXTAREA"
    BOOLEAN = "BOOLEAN"
    SELECT = "SELECT"
    RANGE = "RANGE"
    URL = "URL"


@dataclass(slots=True)
class ConfigValue:
    """Tri-state configuration cell.

    ``use_global`` tells Eden to ignore the per-game value and fall back to the
    global setting. ``default`` is ``None`` until a listing overrides the
    setting, at which point it becomes ``False`` (Eden's "not the default"
    marker).
    """

    value: SettingValue
    use_global: bool = True
    default: bool | None = None

    @property
    def is_override(self) -> bool:
        """Return ``True`` when the cell carries a per-game override."""
        return not self.use_global and self.default is False

    def override(self, value: SettingValue) -> None:
        """Store *value* as a per-game override."""
        self.value = value
        self.use_global = False
        self.default = False

    def reset_to_global(self, value: SettingValue) -> None:
        """Mark the cell as deferring to the global setting."""
        self.value = value
        self.use_global = True
        self.default = None

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        payload: dict[str, object] = {"use_global": self.use_global, "value": self.value}
        if self.default is not None:
            payload["default"] = self.default
        return payload


ConfigSection = dict[str, ConfigValue]
Config = dict[str, ConfigSection]


def config_to_dict(config: Mapping[str, Mapping[str, ConfigValue]]) -> dict[str, object]:
    """Return a JSON-serialisable snapshot of *config*."""
    return {
        section: {key: setting.to_dict() for key, setting in settings.items()}
        for section, settings in config.items()
    }


@dataclass(frozen=True)
class CustomFieldDefinition:
    """Definition metadata attached to a custom field value."""

    name: str
    label: str = ""
    type: str = CustomFieldType.TEXT.value
    options: JSONValue = None


@dataclass(frozen=True)
class CustomFieldValue:
    """A single custom field value recorded against a listing."""

    definition: CustomFieldDefinition
    value: JSONValue = None

    @property
    def name(self) -> str:
        """Return the field name used as the mapping key."""
        return self.definition.name

    @classmethod
    def build(
        cls,
        name: str,
        value: JSONValue,
        *,
        type: str | CustomFieldType = CustomFieldType.TEXT,
        label: str | None = None,
        options: JSONValue = None,
    ) -> CustomFieldValue:
        """Convenience constructor used by callers that only know the field name."""
        field_type = type.value if isinstance(type, CustomFieldType) else str(type)
        definition = CustomFieldDefinition(
            name=name,
            label=label if label is not None else name,
            type=field_type,
            options=options,
        )
        return cls(definition=definition, value=value)


@dataclass(frozen=True)
class ConversionInput:
    """Listing identifiers plus the custom field values to convert."""

    listing_id: str
    game_id: str
    custom_field_values: tuple[CustomFieldValue, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> ConversionInput:
        """Build an input from a JSON payload (camelCase or snake_case keys)."""
        if not isinstance(payload, Mapping):
            raise InputError(
                f"Conversion input must be a mapping. Got {type(payload).__name__}."
            )
        raw_values = _first_present(payload, "customFieldValues", "custom_field_values")
        if raw_values is None:
            raw_values = []
        return cls(
            listing_id=str(_first_present(payload, "listingId", "listing_id") or ""),
            game_id=str(_first_present(payload, "gameId", "game_id") or ""),
            custom_field_values=coerce_field_values(raw_values),
        )


def coerce_field_value(record: object) -> CustomFieldValue | None:
    """Return a :class:`CustomFieldValue` for *record*, or ``None`` when malformed.

    Accepts existing instances, or mappings shaped like the data layer output::

        {"customFieldDefinition": {"name": ..., "label": ..., "type": ...}, "value": ...}
    """
    if isinstance(record, CustomFieldValue):
        return record
    if not isinstance(record, Mapping):
        return None
    definition_raw = _first_present(record, "customFieldDefinition", "custom_field_definition")
    if not isinstance(definition_raw, Mapping):
        return None
    name = definition_raw.get("name")
    if not isinstance(name, str):
        return None
    definition = CustomFieldDefinition(
        name=name,
        label=str(definition_raw.get("label") or ""),
        type=str(definition_raw.get("type") or CustomFieldType.TEXT.value),
        options=definition_raw.get("options"),  # type: ignore[arg-type]
    )
    return CustomFieldValue(definition=definition, value=record.get("value"))  # type: ignore[arg-type]


def coerce_field_values(records: object) -> tuple[CustomFieldValue, ...]:
    """Coerce a sequence of records, dropping malformed entries."""
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
        raise InputError(
            f"customFieldValues must be a sequence. Got {type(records).__name__}."
        )
    coerced: list[CustomFieldValue] = []
    for record in records:
        value = coerce_field_value(record)
        if value is not None:
            coerced.append(value)
    return tuple(coerced)


def _first_present(mapping: Mapping[str, object], *keys: str) -> object | None:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


__all__ = [
    "Config",
    "ConfigSection",
    "ConfigValue",
    "ConversionInput",
    "CustomFieldDefinition",
    "CustomFieldType",
    "CustomFieldValue",
    "InputError",
    "JSONValue",
    "SettingValue",
    "coerce_field_value",
    "coerce_field_values",
    "config_to_dict",
]
