"""Custom field name -> Eden setting mapping table.

Field names are the contract with the listings data producer and are kept
verbatim, including the historical ``rosolution`` spelling. Fields that are
purely informational (emulator version, FPS notes, media links) are listed in
:data:`INFORMATIONAL_FIELDS` and intentionally have no mapping.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

from .defaults import (
    ANTI_ALIASING_MAPPING,
    ASTC_RECOMPRESSION_MAPPING,
    AUDIO_OUTPUT_ENGINE_MAPPING,
    CPU_ACCURACY_MAPPING,
    CPU_BACKEND_MAPPING,
    DRIVER_ARCHIVE_SUFFIX,
    DRIVER_PATH_KEY,
    DYNAMIC_STATE_MAPPING,
    EDEN_ANDROID_BASE_PATH,
    GPU_ACCURACY_MAPPING,
    GPU_BACKEND_MAPPING,
    MAX_ANISOTROPY_MAPPING,
    NVDEC_EMULATION_MAPPING,
    OPTIMIZE_SPIRV_OUTPUT_MAPPING,
    SCALING_FILTER_MAPPING,
    VRAM_USAGE_MODE_MAPPING,
    VSYNC_MODE_MAPPING,
)
from .models import Config, SettingValue
from .transforms import (
    is_truthy,
    parse_resolution,
    to_bool,
    transform_anti_aliasing,
    transform_astc_recompression,
    transform_audio_output_engine,
    transform_cpu_accuracy,
    transform_cpu_backend,
    transform_driver_path,
    transform_dynamic_state,
    transform_gpu_accuracy,
    transform_gpu_backend,
    transform_max_anisotropy,
    transform_nvdec_emulation,
    transform_optimize_spirv_output,
    transform_scaling_filter,
    transform_vram_usage_mode,
    transform_vsync_mode,
)

TransformKind = Literal["select", "boolean", "range", "resolution", "driver"]


@dataclass(frozen=True)
class FieldMapping:
    """Target location and transform for one custom field."""

    section: str
    key: str
    transform: Callable[[object], SettingValue | None]
    kind: TransformKind

    def transform_value(
        self,
        value: object,
        *,
        driver_base_path: str = EDEN_ANDROID_BASE_PATH,
    ) -> SettingValue | None:
        """Apply the field transform, honouring a custom driver directory."""
        if self.kind == "driver":
            return transform_driver_path(value, base_path=driver_base_path)
        return self.transform(value)


def _select(section: str, key: str, transform: Callable[[object], int]) -> FieldMapping:
    return FieldMapping(section=section, key=key, transform=transform, kind="select")


def _boolean(section: str, key: str) -> FieldMapping:
    return FieldMapping(section=section, key=key, transform=to_bool, kind="boolean")


FIELD_MAPPINGS: Mapping[str, FieldMapping] = MappingProxyType(
    {
        # Cpu
        "cpu_backend": _select("Cpu", "cpu_backend", transform_cpu_backend),
        "cpu_accuracy": _select("Cpu", "cpu_accuracy", transform_cpu_accuracy),
        "fast_cpu_time": _boolean("Cpu", "use_fast_cpu_time"),
        # Core
        "synchronize_core_speed": _boolean("Core", "sync_core_speed"),
        # Renderer
        "gpu_api": _select("Renderer", "backend", transform_gpu_backend),
        "disk_shader_cache": _boolean("Renderer", "use_disk_shader_cache"),
        "use_async_shaders": _boolean("Renderer", "use_asynchronous_shaders"),
        "use_reactive_flushing": _boolean("Renderer", "use_reactive_flushing"),
        "anti_aliasing_method": _select("Renderer", "anti_aliasing", transform_anti_aliasing),
        "anisotropic_filtering": _select("Renderer", "max_anisotropy", transform_max_anisotropy),
        "vsync_mode": _select("Renderer", "use_vsync", transform_vsync_mode),
        "astc_recompression_method": _select(
            "Renderer", "astc_recompression", transform_astc_recompression
        ),
        "nvdec_emulation": _select("Renderer", "nvdec_emulation", transform_nvdec_emulation),
        "vram_usage_mode": _select("Renderer", "vram_usage_mode", transform_vram_usage_mode),
        "use_fast_gpu_time": _boolean("Renderer", "use_fast_gpu_time"),
        "extended_dynamic_state": FieldMapping(
            section="Renderer",
            key="dyna_state",
            transform=transform_dynamic_state,
            kind="range",
        ),
        "provoking_vertex": _boolean("Renderer", "provoking_vertex"),
        "descriptor_indexing": _boolean("Renderer", "descriptor_indexing"),
        "accuracy_level": _select("Renderer", "gpu_accuracy", transform_gpu_accuracy),
        "rosolution": FieldMapping(
            section="Renderer",
            key="resolution_setup",
            transform=parse_resolution,
            kind="resolution",
        ),
        "resolution": FieldMapping(
            section="Renderer",
            key="resolution_setup",
            transform=parse_resolution,
            kind="resolution",
        ),
        "window_adapting_filter": _select("Renderer", "scaling_filter", transform_scaling_filter),
        "optimize_spirv_output": _select(
            "Renderer", "optimize_spirv_output", transform_optimize_spirv_output
        ),
        # Audio
        "audio_output_engine": _select("Audio", "output_engine", transform_audio_output_engine),
        # System
        "docked_mode": _boolean("System", "use_docked_mode"),
        "enable_lru_cache": _boolean("System", "use_lru_cache"),
        # GpuDriver
        "dynamic_driver_version": FieldMapping(
            section="GpuDriver",
            key=DRIVER_PATH_KEY,
            transform=transform_driver_path,
            kind="driver",
        ),
    }
)

# Field names kept for display on listings only.
INFORMATIONAL_FIELDS: frozenset[str] = frozenset(
    {
        "emulator_version",
        "game_version",
        "average_fps",
        "media_url",
        "youtube",
        "enhanced_frame_pacing",
    }
)

# Alternate spellings accepted on input, keyed by alias.
FIELD_ALIASES: Mapping[str, str] = MappingProxyType({"resolution": "rosolution"})


def apply_mapping(config: Config, mapping: FieldMapping, value: SettingValue) -> bool:
    """Write an already-transformed *value* into *config*.

    An empty driver path is the explicit "use the system driver" outcome and
    resets the setting to defer to the global value. Everything else becomes a
    per-game override. Returns ``False`` when the target is not part of the
    configuration.
    """
    setting = config.get(mapping.section, {}).get(mapping.key)
    if setting is None:
        return False
    if mapping.key == DRIVER_PATH_KEY and value == "":
        setting.reset_to_global("")
    else:
        setting.override(value)
    return True


# ---------------------------------------------------------------------------
# Reverse lookups (Eden value -> listing option label)
# ---------------------------------------------------------------------------


def _reverse_lookup(table: Mapping[str, int]) -> Mapping[str, str]:
    reverse: dict[str, str] = {}
    for label, encoded in table.items():
        reverse.setdefault(str(encoded), label)
    return MappingProxyType(reverse)


REVERSE_LOOKUPS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "cpu_backend": _reverse_lookup(CPU_BACKEND_MAPPING),
        "cpu_accuracy": _reverse_lookup(CPU_ACCURACY_MAPPING),
        "backend": _reverse_lookup(GPU_BACKEND_MAPPING),
        "gpu_accuracy": _reverse_lookup(GPU_ACCURACY_MAPPING),
        "anti_aliasing": _reverse_lookup(ANTI_ALIASING_MAPPING),
        "max_anisotropy": _reverse_lookup(MAX_ANISOTROPY_MAPPING),
        "use_vsync": _reverse_lookup(VSYNC_MODE_MAPPING),
        "astc_recompression": _reverse_lookup(ASTC_RECOMPRESSION_MAPPING),
        "nvdec_emulation": _reverse_lookup(NVDEC_EMULATION_MAPPING),
        "vram_usage_mode": _reverse_lookup(VRAM_USAGE_MODE_MAPPING),
        "dyna_state": _reverse_lookup(DYNAMIC_STATE_MAPPING),
        "scaling_filter": _reverse_lookup(SCALING_FILTER_MAPPING),
        "optimize_spirv_output": _reverse_lookup(OPTIMIZE_SPIRV_OUTPUT_MAPPING),
        "output_engine": _reverse_lookup(AUDIO_OUTPUT_ENGINE_MAPPING),
    }
)

_INTEGER_KEYS = frozenset({"resolution_setup", "fast_cpu_time", "fast_gpu_time"})


def config_value_to_custom_value(key: str, raw: object) -> object:
    """Translate an Eden setting value back into a listing field value.

    Select settings return the first option label declared for the encoded
    value, or ``None`` when no label exists. Driver paths become the
    ``"<display>|||<filename>"`` form understood by the forward transform.
    """
    numeric = _as_int(raw)
    if key == "dyna_state" and numeric is not None:
        return numeric
    reverse = REVERSE_LOOKUPS.get(key)
    if reverse is not None:
        return reverse.get(str(numeric if numeric is not None else raw))
    if key in _INTEGER_KEYS:
        return numeric
    if key == DRIVER_PATH_KEY:
        return _driver_field_value(str(raw or ""))
    if _is_boolean_target(key):
        return is_truthy(raw)
    return raw


def _is_boolean_target(key: str) -> bool:
    return any(
        mapping.key == key and mapping.kind == "boolean" for mapping in FIELD_MAPPINGS.values()
    )


def _as_int(raw: object) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


def _driver_field_value(path: str) -> str:
    filename = path.rsplit("/", 1)[-1]
    if not filename:
        return ""
    display = filename[: -len(".zip")] if filename.endswith(DRIVER_ARCHIVE_SUFFIX) else filename
    return f"{display}|||{filename}"


__all__ = [
    "FIELD_ALIASES",
    "FIELD_MAPPINGS",
    "INFORMATIONAL_FIELDS",
    "REVERSE_LOOKUPS",
    "FieldMapping",
    "TransformKind",
    "apply_mapping",
    "config_value_to_custom_value",
]
