"""Per-field value transforms.

Every transform is a pure function taking the raw JSON value stored against a
listing and returning either a concrete setting value or ``None``. ``None``
means "no usable value": the converter leaves the target setting at its
baseline, still deferring to the global configuration.

Transforms never raise. Unrecognised select labels degrade to the setting's
documented default and malformed text degrades to the most conservative
interpretation (native resolution, system GPU driver).
"""
from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Mapping

from .defaults import (
    ANTI_ALIASING_MAPPING,
    ASTC_RECOMPRESSION_MAPPING,
    AUDIO_OUTPUT_ENGINE_MAPPING,
    CPU_ACCURACY_MAPPING,
    CPU_BACKEND_MAPPING,
    DEFAULT_ANTI_ALIASING,
    DEFAULT_ASTC_RECOMPRESSION,
    DEFAULT_AUDIO_OUTPUT_ENGINE,
    DEFAULT_CPU_ACCURACY,
    DEFAULT_CPU_BACKEND,
    DEFAULT_DYNAMIC_STATE,
    DEFAULT_GPU_ACCURACY,
    DEFAULT_GPU_BACKEND,
    DEFAULT_MAX_ANISOTROPY,
    DEFAULT_NVDEC_EMULATION,
    DEFAULT_OPTIMIZE_SPIRV_OUTPUT,
    DEFAULT_RESOLUTION_SETUP,
    DEFAULT_SCALING_FILTER,
    DEFAULT_VRAM_USAGE_MODE,
    DEFAULT_VSYNC_MODE,
    DRIVER_ARCHIVE_SUFFIX,
    DRIVER_DIRECTORY_MARKER,
    DRIVER_FIELD_SEPARATOR,
    DRIVER_PACKAGE_SUFFIX,
    DYNAMIC_STATE_MAPPING,
    EDEN_ANDROID_BASE_PATH,
    GPU_ACCURACY_MAPPING,
    GPU_BACKEND_MAPPING,
    MAX_ANISOTROPY_MAPPING,
    MAX_RESOLUTION_SETUP,
    NVDEC_EMULATION_MAPPING,
    OPTIMIZE_SPIRV_OUTPUT_MAPPING,
    RESOLUTION_BUCKET_BOUNDS,
    RESOLUTION_MULTIPLIER_MAPPING,
    SCALING_FILTER_MAPPING,
    VRAM_USAGE_MODE_MAPPING,
    VSYNC_MODE_MAPPING,
    is_common_driver_name,
    is_no_driver_value,
)

LOGGER = logging.getLogger(__name__)

Transform = Callable[[object], "bool | int | str | None"]

_MULTIPLIER_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*x(?:\s|$|\()", re.IGNORECASE)
_PIXEL_DIMENSIONS_PATTERN = re.compile(r"(?<!\d)\d+x\d+")
_PIXEL_LINES_PATTERN = re.compile(r"(?<!\d)\d+p")
_BARE_INTEGER_PATTERN = re.compile(r"[0-9]+")
# Matched only after the first "]" so long bracket runs stay linear.
_DRIVER_BRACKET_PATTERN = re.compile(r"\s*(.+\.adpkg)", re.IGNORECASE)


# ---------------------------------------------------------------------------
# JSON value coercion
# ---------------------------------------------------------------------------


def stringify(value: object) -> str:
    """Render a JSON value as text the way the listings front-end does.

    Booleans become ``"true"``/``"false"``, integral floats drop their ``.0``
    and ``None`` becomes ``"null"`` so lookups keyed by option labels behave
    the same no matter which layer produced the value.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else stringify(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def is_truthy(value: object) -> bool:
    """Return JSON truthiness: empty strings, zero, NaN and null are false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def to_bool(value: object) -> bool:
    """Transform for BOOLEAN fields."""
    return is_truthy(value)


# ---------------------------------------------------------------------------
# Select lookups
# ---------------------------------------------------------------------------


def lookup_enum(table: Mapping[str, int], value: object, default: int) -> int:
    """Look up the label for *value* in *table*, falling back to *default*."""
    label = stringify(value)
    mapped = table.get(label)
    if mapped is None:
        LOGGER.debug("Unrecognised option %r; using default %s.", label, default)
        return default
    return mapped


def enum_transform(table: Mapping[str, int], default: int) -> Callable[[object], int]:
    """Build a select transform bound to *table* and *default*."""

    def _transform(value: object) -> int:
        return lookup_enum(table, value, default)

    return _transform


transform_cpu_backend = enum_transform(CPU_BACKEND_MAPPING, DEFAULT_CPU_BACKEND)
transform_cpu_accuracy = enum_transform(CPU_ACCURACY_MAPPING, DEFAULT_CPU_ACCURACY)
transform_gpu_backend = enum_transform(GPU_BACKEND_MAPPING, DEFAULT_GPU_BACKEND)
transform_gpu_accuracy = enum_transform(GPU_ACCURACY_MAPPING, DEFAULT_GPU_ACCURACY)
transform_anti_aliasing = enum_transform(ANTI_ALIASING_MAPPING, DEFAULT_ANTI_ALIASING)
transform_max_anisotropy = enum_transform(MAX_ANISOTROPY_MAPPING, DEFAULT_MAX_ANISOTROPY)
transform_vsync_mode = enum_transform(VSYNC_MODE_MAPPING, DEFAULT_VSYNC_MODE)
transform_astc_recompression = enum_transform(
    ASTC_RECOMPRESSION_MAPPING, DEFAULT_ASTC_RECOMPRESSION
)
transform_nvdec_emulation = enum_transform(NVDEC_EMULATION_MAPPING, DEFAULT_NVDEC_EMULATION)
transform_vram_usage_mode = enum_transform(VRAM_USAGE_MODE_MAPPING, DEFAULT_VRAM_USAGE_MODE)
transform_scaling_filter = enum_transform(SCALING_FILTER_MAPPING, DEFAULT_SCALING_FILTER)
transform_optimize_spirv_output = enum_transform(
    OPTIMIZE_SPIRV_OUTPUT_MAPPING, DEFAULT_OPTIMIZE_SPIRV_OUTPUT
)
transform_audio_output_engine = enum_transform(
    AUDIO_OUTPUT_ENGINE_MAPPING, DEFAULT_AUDIO_OUTPUT_ENGINE
)


def transform_dynamic_state(value: object) -> int:
    """Transform for the extended dynamic state RANGE field.

    Only option labels are recognised. Numeric slider positions currently
    resolve to ``0`` (disabled).
    """
    return lookup_enum(DYNAMIC_STATE_MAPPING, value, DEFAULT_DYNAMIC_STATE)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def parse_resolution_multiplier(text: str) -> int | None:
    """Return the resolution setup for a multiplier string such as ``"2x"``.

    Tabulated multipliers map directly; other ``"<n>x"`` values round to the
    nearest bucket. Returns ``None`` when *text* is not a multiplier.
    """
    normalized = text.strip().lower()
    mapped = RESOLUTION_MULTIPLIER_MAPPING.get(normalized)
    if mapped is not None:
        return mapped

    match = _MULTIPLIER_PATTERN.match(normalized)
    if match is None:
        return None
    multiplier = float(match.group(1))
    for upper_bound, setup in RESOLUTION_BUCKET_BOUNDS:
        if multiplier <= upper_bound:
            return setup
    return MAX_RESOLUTION_SETUP


def is_pixel_resolution(text: str) -> bool:
    """Return ``True`` for pixel sizes such as ``"1280x720"`` or ``"720p"``."""
    normalized = text.strip().lower()
    return bool(
        _PIXEL_DIMENSIONS_PATTERN.search(normalized) or _PIXEL_LINES_PATTERN.search(normalized)
    )


def parse_resolution(value: object) -> int:
    """Transform for the resolution field.

    Resolution text is free-form, so the order of checks matters:

    1. multipliers (``"2x"``, ``"Native"``, ``"2X (1440p/4K)"``);
    2. pixel sizes, which cannot be converted without the screen size and
       therefore fall back to native;
    3. a bare setup index between 0 and 10;
    4. anything else falls back to native.
    """
    text = stringify(value)

    multiplier = parse_resolution_multiplier(text)
    if multiplier is not None:
        return multiplier

    if is_pixel_resolution(text):
        return DEFAULT_RESOLUTION_SETUP

    trimmed = text.strip()
    # Setup indexes have at most two significant digits; longer runs cannot match.
    if _BARE_INTEGER_PATTERN.fullmatch(trimmed) and len(trimmed.lstrip("0")) <= 2:
        direct = int(trimmed)
        if 0 <= direct <= MAX_RESOLUTION_SETUP:
            return direct

    LOGGER.debug("Unrecognised resolution %r; using native.", text)
    return DEFAULT_RESOLUTION_SETUP


# ---------------------------------------------------------------------------
# GPU driver
# ---------------------------------------------------------------------------


def transform_driver_path(value: object, *, base_path: str = EDEN_ANDROID_BASE_PATH) -> str | None:
    """Transform for the GPU driver field.

    Returns an absolute driver archive path, ``""`` when the listing
    explicitly uses the system driver, or ``None`` when the value cannot be
    interpreted. Historical encodings are tried newest first:

    1. ``"<display>|||<filename>"``
    2. JSON objects carrying ``filename`` or ``display``
    3. ``"[owner/repo] name.adpkg"``
    4. bare ``name.adpkg`` (possibly with a directory prefix)
    5. absolute paths inside the driver directory, passed through
    6. well-known driver family names
    """
    driver = stringify(value).strip()
    base = base_path.rstrip("/")

    if is_no_driver_value(driver):
        return ""

    if DRIVER_FIELD_SEPARATOR in driver:
        display, _, remainder = driver.partition(DRIVER_FIELD_SEPARATOR)
        filename = remainder.split(DRIVER_FIELD_SEPARATOR, 1)[0].strip()
        if filename:
            return f"{base}/{_ensure_archive_suffix(filename)}"
        return _path_from_display(display.strip(), base)

    parsed = _parse_json_object(driver)
    if parsed is not None:
        filename = parsed.get("filename")
        if isinstance(filename, str) and filename.strip():
            return f"{base}/{_ensure_archive_suffix(filename)}"
        display = parsed.get("display")
        if isinstance(display, str):
            return _path_from_display(display or driver, base)

    bracketed = _bracketed_package(driver)
    if bracketed is not None:
        return f"{base}/{bracketed}.zip"

    if driver.lower().endswith(DRIVER_PACKAGE_SUFFIX):
        filename = driver.rsplit("/", 1)[-1] or driver
        return f"{base}/{filename}.zip"

    if driver.startswith("/") and DRIVER_DIRECTORY_MARKER in driver:
        return driver

    if is_common_driver_name(driver):
        return f"{base}/{driver}{DRIVER_ARCHIVE_SUFFIX}"

    LOGGER.debug("Unrecognised driver value %r; leaving driver unset.", driver)
    return None


def _bracketed_package(text: str) -> str | None:
    """Return the package name following ``"[owner/repo]"``, if any."""
    _, bracket, remainder = text.partition("]")
    if not bracket:
        return None
    match = _DRIVER_BRACKET_PATTERN.match(remainder)
    return match.group(1) if match is not None else None


def _ensure_archive_suffix(filename: str) -> str:
    if filename.endswith(DRIVER_PACKAGE_SUFFIX):
        return f"{filename}.zip"
    return filename


def _path_from_display(display: str, base: str) -> str | None:
    bracketed = _bracketed_package(display)
    if bracketed is not None:
        return f"{base}/{bracketed}.zip"
    if not display:
        return None
    return f"{base}/{display}{DRIVER_ARCHIVE_SUFFIX}"


def _parse_json_object(text: str) -> dict[str, object] | None:
    if not text.startswith("{"):
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        # Not a usable JSON object; fall through to the legacy formats.
        return None
    if isinstance(parsed, dict):
        return parsed
    return None


__all__ = [
    "Transform",
    "enum_transform",
    "is_pixel_resolution",
    "is_truthy",
    "lookup_enum",
    "parse_resolution",
    "parse_resolution_multiplier",
    "stringify",
    "to_bool",
    "transform_anti_aliasing",
    "transform_astc_recompression",
    "transform_audio_output_engine",
    "transform_cpu_accuracy",
    "transform_cpu_backend",
    "transform_driver_path",
    "transform_dynamic_state",
    "transform_gpu_accuracy",
    "transform_gpu_backend",
    "transform_max_anisotropy",
    "transform_nvdec_emulation",
    "transform_optimize_spirv_output",
    "transform_scaling_filter",
    "transform_vram_usage_mode",
    "transform_vsync_mode",
]
