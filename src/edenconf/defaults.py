"""Eden configuration defaults and lookup tables.

Integer encodings mirror the enums Eden stores in its per-game ``.ini`` files,
so every value here is bit-compatible with the emulator:

* ``cpu_backend``: 0 Dynarmic, 1 NCE, 2 Software
* ``cpu_accuracy``: 0 Auto, 1 Accurate, 2 Unsafe
* ``backend`` (GPU API): 0 OpenGL, 1 Vulkan, 3 Null
* ``shader_backend``: 0 GLSL, 1 GLASM, 2 SPIR-V
* ``gpu_accuracy``: 0 Normal, 1 High, 2 Extreme
* ``resolution_setup``: 0 0.5x, 1 0.75x, 2 1x, 3 1.5x, 4 2x, 5 3x ... 10 8x
* ``use_vsync``: 0 Immediate, 1 Mailbox, 2 FIFO, 3 FIFO Relaxed
* ``nvdec_emulation``: 0 off, 1 CPU, 2 GPU
* ``astc_recompression``: 0 Uncompressed, 1 BC1, 2 BC3
* ``scaling_filter``: 0 Nearest, 1 Bilinear, 2 Bicubic, 3 Gaussian,
  4 ScaleForce, 5 FSR, 6 FXAA
* ``anti_aliasing``: 0 None, 1 FXAA, 2 SMAA Low ... 5 SMAA Ultra
* ``max_anisotropy``: 0 Auto, 1 2x, 2 4x, 3 8x, 4 16x
* ``vram_usage_mode``: 0 Conservative, 1 Aggressive, 2 Extreme
* ``output_engine``: 0 Auto, 1 Cubeb, 2 SDL2, 3 Null
* ``dyna_state``: 0 Disabled, 1-3 extended dynamic state levels
* ``optimize_spirv_output``: 0 Never, 1 On Load, 2 Always
* ``region_index`` / ``language_index``: -1 Auto
"""
from __future__ import annotations

from copy import deepcopy
from types import MappingProxyType

from .models import Config, ConfigValue

# ---------------------------------------------------------------------------
# Default enum values applied when a select value is not recognised
# ---------------------------------------------------------------------------

DEFAULT_CPU_BACKEND = 0  # Dynarmic
DEFAULT_CPU_ACCURACY = 0  # Auto
DEFAULT_GPU_BACKEND = 1  # Vulkan
DEFAULT_GPU_ACCURACY = 0  # Normal
DEFAULT_RESOLUTION_SETUP = 2  # 1x (native)
DEFAULT_SCALING_FILTER = 1  # Bilinear
DEFAULT_ANTI_ALIASING = 0  # None
DEFAULT_MAX_ANISOTROPY = 0  # Auto
DEFAULT_VSYNC_MODE = 2  # FIFO (On)
DEFAULT_ASTC_RECOMPRESSION = 2  # BC3 (Medium Quality)
DEFAULT_NVDEC_EMULATION = 1  # CPU
DEFAULT_VRAM_USAGE_MODE = 0  # Conservative
DEFAULT_AUDIO_OUTPUT_ENGINE = 0  # Auto
DEFAULT_DYNAMIC_STATE = 0  # Disabled
DEFAULT_OPTIMIZE_SPIRV_OUTPUT = 1  # On Load

MAX_RESOLUTION_SETUP = 10

# ---------------------------------------------------------------------------
# Listing option labels -> Eden integer encodings
# ---------------------------------------------------------------------------

CPU_BACKEND_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Dynamic (Slow)": 0,
        "Native code execution (NCE)": 1,
        "Dynarmic": 0,
        "NCE": 1,
        "Software": 2,
    }
)

CPU_ACCURACY_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Auto": 0,
        "Accurate": 1,
        "Unsafe": 2,
        "Paranoid (Slow)": 1,  # Eden folds paranoid into accurate
    }
)

GPU_BACKEND_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Vulkan": 1,
        "OpenGL": 0,
        "Other": 3,  # Null renderer
    }
)

GPU_ACCURACY_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Normal": 0,
        "High": 1,
        "Extreme (Slow)": 2,
    }
)

ANTI_ALIASING_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "None": 0,
        "FXAA": 1,
        "SMAA": 2,  # SMAA Low
        "Other": 0,
    }
)

MAX_ANISOTROPY_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Auto": 0,
        "Default": 0,
        "2x": 1,
        "4x": 2,
        "8x": 3,
        "16x": 4,
    }
)

VSYNC_MODE_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Immediate (Off)": 0,
        "Mailbox": 1,
        "FIFO (On)": 2,
        "FIFO Relaxed": 3,
    }
)

ASTC_RECOMPRESSION_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Uncompressed": 0,
        "BC1 (Low Quality)": 1,
        "BC3 (Medium Quality)": 2,
    }
)

NVDEC_EMULATION_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "None": 0,
        "CPU": 1,
        "GPU": 2,
    }
)

VRAM_USAGE_MODE_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Conservative": 0,
        "Aggressive": 1,
        "Extreme": 2,
        "Balanced": 1,
    }
)

# Keyed by label only: numeric range input never matches and stays disabled.
DYNAMIC_STATE_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Disabled": 0,
        "Dynamic State 1": 1,
        "Dynamic State 2": 2,
        "Dynamic State 3 (All)": 3,
    }
)

SCALING_FILTER_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Nearest Neighbor": 0,
        "Bilinear": 1,
        "Bicubic": 2,
        "Gaussian": 3,
        "ScaleForce": 4,
        "AMD FidelityFX - Super Resolution": 5,
        "NVIDIA": 6,
        "Other": 1,
    }
)

OPTIMIZE_SPIRV_OUTPUT_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Never": 0,
        "On Load": 1,
        "Always": 2,
    }
)

AUDIO_OUTPUT_ENGINE_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "Auto": 0,
        "Cubeb": 1,
        "SDL2": 2,
        "Null": 3,
    }
)

# Keys are lower-case; lookups normalise the input first.
RESOLUTION_MULTIPLIER_MAPPING: MappingProxyType[str, int] = MappingProxyType(
    {
        "0.5x": 0,
        "0.75x": 1,
        "1x": 2,
        "native": 2,
        "1.0x": 2,
        "1.5x": 3,
        "2x": 4,
        "3x": 5,
        "4x": 6,
        "5x": 7,
        "6x": 8,
        "7x": 9,
        "8x": 10,
    }
)

# Upper bound (inclusive) of each resolution bucket for "<n>x" values that are
# not tabulated; anything above the last bound lands in MAX_RESOLUTION_SETUP.
RESOLUTION_BUCKET_BOUNDS: tuple[tuple[float, int], ...] = (
    (0.5, 0),
    (0.75, 1),
    (1.25, 2),
    (1.75, 3),
    (2.5, 4),
    (3.5, 5),
    (4.5, 6),
    (5.5, 7),
    (6.5, 8),
    (7.5, 9),
)

# ---------------------------------------------------------------------------
# GPU driver constants
# ---------------------------------------------------------------------------

EDEN_ANDROID_BASE_PATH = "/storage/emulated/0/Android/data/dev.eden.eden_emulator/files/gpu_drivers"
DRIVER_DIRECTORY_MARKER = "gpu_drivers"
DRIVER_PACKAGE_SUFFIX = ".adpkg"
DRIVER_ARCHIVE_SUFFIX = ".adpkg.zip"
DRIVER_FIELD_SEPARATOR = "|||"

NO_DRIVER_VALUES: frozenset[str] = frozenset(
    {
        "N/A",
        "n/a",
        "Default System Driver",
        "Default",
        "",
        "Xclipse Stock",
        "Default Driver",
        "System Default",
    }
)

COMMON_DRIVER_NAMES: tuple[str, ...] = ("turnip", "freedreno", "mesa", "qualcomm")

# ---------------------------------------------------------------------------
# Baseline configuration
# ---------------------------------------------------------------------------

SECTION_ORDER: tuple[str, ...] = (
    "Controls",
    "Core",
    "Cpu",
    "Renderer",
    "Audio",
    "System",
    "Linux",
    "GpuDriver",
)

DRIVER_PATH_KEY = "driver_path"


def _section(**settings: bool | int | str) -> dict[str, ConfigValue]:
    return {key: ConfigValue(value=value) for key, value in settings.items()}


# Mutable only through get_default_config(), which always hands out a deep copy.
DEFAULT_CONFIG: Config = {
    "Controls": _section(
        vibration_enabled=True,
        enable_accurate_vibrations=False,
        motion_enabled=True,
    ),
    "Core": _section(
        use_multi_core=True,
        memory_layout_mode=0,  # 4GB
        use_speed_limit=True,
        speed_limit=100,
        sync_core_speed=False,
    ),
    "Cpu": _section(
        cpu_backend=DEFAULT_CPU_BACKEND,
        cpu_accuracy=DEFAULT_CPU_ACCURACY,
        use_fast_cpu_time=False,
        fast_cpu_time=50,
        cpu_debug_mode=False,
        cpuopt_fastmem=True,
        cpuopt_fastmem_exclusives=True,
        cpuopt_unsafe_unfuse_fma=False,
        cpuopt_unsafe_reduce_fp_error=False,
        cpuopt_unsafe_ignore_standard_fpcr=False,
        cpuopt_unsafe_inaccurate_nan=False,
        cpuopt_unsafe_fastmem_check=False,
        cpuopt_unsafe_ignore_global_monitor=False,
        skip_cpu_inner_invalidation=False,
        use_custom_cpu_ticks=False,
        cpu_ticks=0,
    ),
    "Renderer": _section(
        backend=DEFAULT_GPU_BACKEND,
        shader_backend=2,  # SPIR-V
        vulkan_device=0,
        frame_interpolation=False,
        frame_skipping=False,
        use_disk_shader_cache=True,
        optimize_spirv_output=0,
        use_asynchronous_gpu_emulation=True,
        accelerate_astc=0,  # CPU
        use_vsync=DEFAULT_VSYNC_MODE,
        nvdec_emulation=DEFAULT_NVDEC_EMULATION,
        fullscreen_mode=0,
        aspect_ratio=0,  # 16:9
        resolution_setup=DEFAULT_RESOLUTION_SETUP,
        scaling_filter=DEFAULT_SCALING_FILTER,
        anti_aliasing=DEFAULT_ANTI_ALIASING,
        fsr_sharpening_slider=80,
        bg_red=0,
        bg_green=0,
        bg_blue=0,
        gpu_accuracy=DEFAULT_GPU_ACCURACY,
        max_anisotropy=DEFAULT_MAX_ANISOTROPY,
        astc_recompression=DEFAULT_ASTC_RECOMPRESSION,
        vram_usage_mode=1,  # Aggressive
        async_presentation=False,
        force_max_clock=False,
        use_reactive_flushing=True,
        use_asynchronous_shaders=False,
        use_fast_gpu_time=False,
        fast_gpu_time=50,
        use_vulkan_driver_pipeline_cache=True,
        enable_compute_pipelines=False,
        use_video_framerate=False,
        barrier_feedback_loops=True,
        dyna_state=DEFAULT_DYNAMIC_STATE,
        provoking_vertex=False,
        descriptor_indexing=False,
        sample_shading=False,
        disable_buffer_reorder=False,
    ),
    "Audio": _section(
        output_engine=DEFAULT_AUDIO_OUTPUT_ENGINE,
        output_device="auto",
        input_device="auto",
        volume=100,
        audio_muted=False,
    ),
    "System": _section(
        use_lru_cache=True,
        language_index=-1,
        region_index=-1,
        time_zone_index=0,
        custom_rtc_enabled=False,
        custom_rtc_offset=0,
        rng_seed_enabled=False,
        rng_seed=0,
        use_docked_mode=True,
        sound_index=0,
    ),
    "Linux": _section(
        enable_gamemode=False,
    ),
    "GpuDriver": _section(
        driver_path="",
    ),
}


def get_default_config() -> Config:
    """Return an independent deep copy of :data:`DEFAULT_CONFIG`.

    Every call produces fresh :class:`ConfigValue` cells so that a conversion
    can mutate its working copy without leaking state into later requests.
    """
    return deepcopy(DEFAULT_CONFIG)


def baseline_value(section: str, key: str) -> bool | int | str:
    """Return the baseline value for ``[section] key``.

    Raises :class:`KeyError` for settings outside the closed baseline.
    """
    return DEFAULT_CONFIG[section][key].value


def is_no_driver_value(value: str) -> bool:
    """Return ``True`` when *value* means "use the system GPU driver"."""
    return value in NO_DRIVER_VALUES


def is_common_driver_name(value: str) -> bool:
    """Return ``True`` when *value* names a well-known driver family."""
    lowered = value.lower()
    return any(name in lowered for name in COMMON_DRIVER_NAMES)


__all__ = [
    "ANTI_ALIASING_MAPPING",
    "ASTC_RECOMPRESSION_MAPPING",
    "AUDIO_OUTPUT_ENGINE_MAPPING",
    "COMMON_DRIVER_NAMES",
    "CPU_ACCURACY_MAPPING",
    "CPU_BACKEND_MAPPING",
    "DEFAULT_ANTI_ALIASING",
    "DEFAULT_ASTC_RECOMPRESSION",
    "DEFAULT_AUDIO_OUTPUT_ENGINE",
    "DEFAULT_CONFIG",
    "DEFAULT_CPU_ACCURACY",
    "DEFAULT_CPU_BACKEND",
    "DEFAULT_DYNAMIC_STATE",
    "DEFAULT_GPU_ACCURACY",
    "DEFAULT_GPU_BACKEND",
    "DEFAULT_MAX_ANISOTROPY",
    "DEFAULT_NVDEC_EMULATION",
    "DEFAULT_OPTIMIZE_SPIRV_OUTPUT",
    "DEFAULT_RESOLUTION_SETUP",
    "DEFAULT_SCALING_FILTER",
    "DEFAULT_VRAM_USAGE_MODE",
    "DEFAULT_VSYNC_MODE",
    "DRIVER_ARCHIVE_SUFFIX",
    "DRIVER_DIRECTORY_MARKER",
    "DRIVER_FIELD_SEPARATOR",
    "DRIVER_PACKAGE_SUFFIX",
    "DRIVER_PATH_KEY",
    "DYNAMIC_STATE_MAPPING",
    "EDEN_ANDROID_BASE_PATH",
    "GPU_ACCURACY_MAPPING",
    "GPU_BACKEND_MAPPING",
    "MAX_ANISOTROPY_MAPPING",
    "MAX_RESOLUTION_SETUP",
    "NO_DRIVER_VALUES",
    "NVDEC_EMULATION_MAPPING",
    "OPTIMIZE_SPIRV_OUTPUT_MAPPING",
    "RESOLUTION_BUCKET_BOUNDS",
    "RESOLUTION_MULTIPLIER_MAPPING",
    "SCALING_FILTER_MAPPING",
    "SECTION_ORDER",
    "VRAM_USAGE_MODE_MAPPING",
    "VSYNC_MODE_MAPPING",
    "baseline_value",
    "get_default_config",
    "is_common_driver_name",
    "is_no_driver_value",
]
