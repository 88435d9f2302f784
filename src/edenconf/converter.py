"""Convert listing custom field values into an Eden per-game configuration."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .defaults import EDEN_ANDROID_BASE_PATH, get_default_config
from .mapping import FIELD_MAPPINGS, INFORMATIONAL_FIELDS, apply_mapping
from .models import (
    Config,
    ConversionInput,
    CustomFieldValue,
    coerce_field_values,
)
from .transforms import to_bool

LOGGER = logging.getLogger(__name__)

# field name -> (section, boolean key, companion integer key)
DERIVED_TIMING_FIELDS: tuple[tuple[str, str, str, str], ...] = (
    ("fast_cpu_time", "Cpu", "use_fast_cpu_time", "fast_cpu_time"),
    ("use_fast_gpu_time", "Renderer", "use_fast_gpu_time", "fast_gpu_time"),
)


def convert(
    source: ConversionInput | Mapping[str, object] | Iterable[object],
    *,
    driver_base_path: str = EDEN_ANDROID_BASE_PATH,
) -> Config:
    """Return the Eden configuration for a listing's custom field values.

    *source* may be a :class:`ConversionInput`, the JSON payload it is built
    from, or just the sequence of field-value records. Unknown fields and
    malformed records are ignored; the result always contains every baseline
    setting.
    """
    values = _field_values(source)
    config = get_default_config()

    for field_value in values:
        mapping = FIELD_MAPPINGS.get(field_value.name)
        if mapping is None:
            if field_value.name not in INFORMATIONAL_FIELDS:
                LOGGER.debug("Ignoring unmapped field %r.", field_value.name)
            continue
        transformed = mapping.transform_value(
            field_value.value, driver_base_path=driver_base_path
        )
        if transformed is None:
            LOGGER.debug(
                "Field %r produced no usable value; leaving %s.%s unchanged.",
                field_value.name,
                mapping.section,
                mapping.key,
            )
            continue
        apply_mapping(config, mapping, transformed)

    _apply_timing_flags(config, values)
    return config


def _apply_timing_flags(config: Config, values: tuple[CustomFieldValue, ...]) -> None:
    """Set the boolean/integer pairs driven by the fast CPU and GPU time fields.

    The first record for each field decides both settings.
    """
    for field_name, section, flag_key, companion_key in DERIVED_TIMING_FIELDS:
        source = next((value for value in values if value.name == field_name), None)
        if source is None:
            continue
        enabled = to_bool(source.value)
        settings = config[section]
        settings[flag_key].override(enabled)
        settings[companion_key].override(1 if enabled else 0)


def _field_values(
    source: ConversionInput | Mapping[str, object] | Iterable[object],
) -> tuple[CustomFieldValue, ...]:
    if isinstance(source, ConversionInput):
        return source.custom_field_values
    if isinstance(source, Mapping):
        return ConversionInput.from_mapping(source).custom_field_values
    return coerce_field_values(source)


__all__ = ["DERIVED_TIMING_FIELDS", "convert"]
