"""Tests for the baseline Eden configuration model."""
from __future__ import annotations

from edenconf.defaults import (
    DEFAULT_CONFIG,
    DRIVER_PATH_KEY,
    EDEN_ANDROID_BASE_PATH,
    SECTION_ORDER,
    baseline_value,
    get_default_config,
    is_common_driver_name,
    is_no_driver_value,
)
from edenconf.models import ConfigValue


def test_default_config_sections_follow_canonical_order() -> None:
    """Every canonical section is present, in canonical order."""
    config = get_default_config()

    assert tuple(config) == SECTION_ORDER
    assert all(config[section] for section in SECTION_ORDER)


def test_default_config_defers_every_setting_to_global() -> None:
    """No baseline setting is a per-game override."""
    config = get_default_config()

    for settings in config.values():
        for setting in settings.values():
            assert isinstance(setting, ConfigValue)
            assert setting.use_global is True
            assert setting.default is None


def test_default_config_values_match_emulator_defaults() -> None:
    """Spot-check the encodings Eden relies on."""
    config = get_default_config()

    assert config["Cpu"]["cpu_backend"].value == 0
    assert config["Cpu"]["fast_cpu_time"].value == 50
    assert config["Renderer"]["backend"].value == 1
    assert config["Renderer"]["resolution_setup"].value == 2
    assert config["Renderer"]["use_vsync"].value == 2
    assert config["Renderer"]["use_disk_shader_cache"].value is True
    assert config["Audio"]["output_device"].value == "auto"
    assert config["System"]["language_index"].value == -1
    assert config["GpuDriver"][DRIVER_PATH_KEY].value == ""


def test_get_default_config_returns_independent_copies() -> None:
    """Mutating one copy never leaks into another or into the baseline."""
    first = get_default_config()
    second = get_default_config()

    first["Renderer"]["resolution_setup"].override(6)
    first["Cpu"].clear()
    del first["Audio"]

    assert second["Renderer"]["resolution_setup"] == ConfigValue(value=2)
    assert "cpu_backend" in second["Cpu"]
    assert "Audio" in second
    assert DEFAULT_CONFIG["Renderer"]["resolution_setup"].use_global is True
    assert get_default_config() == second


def test_baseline_value_reads_declared_value() -> None:
    """baseline_value returns the declared default."""
    assert baseline_value("Core", "speed_limit") == 100
    assert baseline_value("Controls", "vibration_enabled") is True


def test_no_driver_values_are_exact_matches() -> None:
    """Only the documented sentinels mean "system driver"."""
    assert is_no_driver_value("N/A")
    assert is_no_driver_value("")
    assert is_no_driver_value("Xclipse Stock")
    assert not is_no_driver_value("default system driver")
    assert not is_no_driver_value("turnip")


def test_common_driver_names_match_case_insensitively() -> None:
    """Driver family detection ignores case and surrounding text."""
    assert is_common_driver_name("Turnip-Driver")
    assert is_common_driver_name("my MESA build")
    assert not is_common_driver_name("some-random-text")


def test_driver_base_path_points_into_eden_storage() -> None:
    """The Android base path is the emulator's driver directory."""
    assert EDEN_ANDROID_BASE_PATH.endswith("/gpu_drivers")
    assert "dev.eden.eden_emulator" in EDEN_ANDROID_BASE_PATH
