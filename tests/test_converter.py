"""Tests for the listing field -> Eden configuration converter."""
from __future__ import annotations

from collections.abc import Callable

import pytest

from edenconf.converter import convert
from edenconf.defaults import EDEN_ANDROID_BASE_PATH, get_default_config
from edenconf.mapping import FIELD_MAPPINGS
from edenconf.models import ConversionInput, CustomFieldValue, InputError

Record = Callable[..., dict[str, object]]


def _overrides(config: dict) -> dict[tuple[str, str], object]:
    return {
        (section, key): setting.value
        for section, settings in config.items()
        for key, setting in settings.items()
        if not setting.use_global
    }


def test_empty_input_reproduces_default_config() -> None:
    """No field values means no overrides at all."""
    assert convert([]) == get_default_config()
    assert convert({"listingId": "l1", "gameId": "g1", "customFieldValues": []}) == (
        get_default_config()
    )


def test_informational_fields_have_no_effect(make_record: Record) -> None:
    """Display-only fields leave the configuration untouched."""
    records = [
        make_record("emulator_version", "v0.0.3"),
        make_record("game_version", "1.2.0"),
        make_record("average_fps", "30"),
        make_record("media_url", "https://example.com/clip"),
        make_record("youtube", "https://youtu.be/abc"),
        make_record("enhanced_frame_pacing", True, field_type="BOOLEAN"),
    ]

    assert convert(records) == get_default_config()


def test_unknown_fields_and_malformed_records_are_skipped(make_record: Record) -> None:
    """Forward-compatible input never raises."""
    records = [
        make_record("future_setting", "on"),
        "not a record",
        {"value": "no definition"},
        {"customFieldDefinition": {"label": "nameless"}, "value": 1},
        make_record("cpu_backend", "Native code execution (NCE)", field_type="SELECT"),
    ]

    config = convert(records)

    assert _overrides(config) == {("Cpu", "cpu_backend"): 1}


def test_select_fields_override_with_encoded_value(make_record: Record) -> None:
    """Select values become per-game overrides with the default marker."""
    config = convert(
        [
            make_record("gpu_api", "OpenGL", field_type="SELECT"),
            make_record("vsync_mode", "Mailbox", field_type="SELECT"),
        ]
    )

    backend = config["Renderer"]["backend"]
    assert (backend.value, backend.use_global, backend.default) == (0, False, False)
    assert backend.is_override
    assert config["Renderer"]["use_vsync"].value == 1


@pytest.mark.parametrize(
    ("field", "section", "key", "expected"),
    [
        ("cpu_backend", "Cpu", "cpu_backend", 0),
        ("cpu_accuracy", "Cpu", "cpu_accuracy", 0),
        ("gpu_api", "Renderer", "backend", 1),
        ("accuracy_level", "Renderer", "gpu_accuracy", 0),
        ("anti_aliasing_method", "Renderer", "anti_aliasing", 0),
        ("anisotropic_filtering", "Renderer", "max_anisotropy", 0),
        ("vsync_mode", "Renderer", "use_vsync", 2),
        ("astc_recompression_method", "Renderer", "astc_recompression", 2),
        ("nvdec_emulation", "Renderer", "nvdec_emulation", 1),
        ("vram_usage_mode", "Renderer", "vram_usage_mode", 0),
        ("window_adapting_filter", "Renderer", "scaling_filter", 1),
        ("optimize_spirv_output", "Renderer", "optimize_spirv_output", 1),
        ("audio_output_engine", "Audio", "output_engine", 0),
        ("extended_dynamic_state", "Renderer", "dyna_state", 0),
    ],
)
def test_unrecognised_select_values_still_override(
    make_record: Record, field: str, section: str, key: str, expected: int
) -> None:
    """Fallback values are written as overrides, not left global."""
    config = convert([make_record(field, "definitely-not-an-option", field_type="SELECT")])

    setting = config[section][key]
    assert setting.value == expected
    assert setting.use_global is False
    assert setting.default is False


def test_boolean_fields_use_json_truthiness(make_record: Record) -> None:
    """Boolean values are coerced, not trusted."""
    config = convert(
        [
            make_record("disk_shader_cache", False, field_type="BOOLEAN"),
            make_record("docked_mode", "", field_type="BOOLEAN"),
            make_record("enable_lru_cache", "false", field_type="BOOLEAN"),
            make_record("use_async_shaders", 1, field_type="BOOLEAN"),
        ]
    )

    assert config["Renderer"]["use_disk_shader_cache"].value is False
    assert config["System"]["use_docked_mode"].value is False
    assert config["System"]["use_lru_cache"].value is True
    assert config["Renderer"]["use_asynchronous_shaders"].value is True


@pytest.mark.parametrize("field", ["rosolution", "resolution"])
def test_resolution_fields(make_record: Record, field: str) -> None:
    """Both spellings drive the resolution setup."""
    config = convert([make_record(field, "2X (1440p/4K)")])

    assert config["Renderer"]["resolution_setup"].value == 4
    assert config["Renderer"]["resolution_setup"].use_global is False


def test_driver_bracket_format(make_record: Record) -> None:
    """Legacy bracketed driver names become archive paths."""
    config = convert(
        [
            make_record(
                "dynamic_driver_version",
                "[MrPurple666/purple-turnip] turnip_mrpurple-T19-toasted.adpkg",
            )
        ]
    )

    setting = config["GpuDriver"]["driver_path"]
    assert setting.value == f"{EDEN_ANDROID_BASE_PATH}/turnip_mrpurple-T19-toasted.adpkg.zip"
    assert setting.use_global is False


@pytest.mark.parametrize("value", ["N/A", "", "Default System Driver", "some-random-text"])
def test_driver_without_custom_archive_uses_global(make_record: Record, value: str) -> None:
    """System-driver sentinels and unknown text keep the driver global."""
    config = convert([make_record("dynamic_driver_version", value)])

    setting = config["GpuDriver"]["driver_path"]
    assert setting.use_global is True
    assert setting.value == ""
    assert setting.default is None


def test_driver_sentinel_resets_earlier_driver(make_record: Record) -> None:
    """A later "no driver" value clears an earlier custom driver."""
    config = convert(
        [
            make_record("dynamic_driver_version", "turnip.adpkg"),
            make_record("dynamic_driver_version", "N/A"),
        ]
    )

    assert config["GpuDriver"]["driver_path"].use_global is True
    assert config["GpuDriver"]["driver_path"].value == ""
    assert not config["GpuDriver"]["driver_path"].is_override


def test_driver_base_path_override(make_record: Record) -> None:
    """Synthesised driver paths use the configured directory."""
    config = convert(
        [make_record("dynamic_driver_version", "turnip.adpkg")],
        driver_base_path="/sdcard/gpu_drivers",
    )

    assert config["GpuDriver"]["driver_path"].value == "/sdcard/gpu_drivers/turnip.adpkg.zip"


@pytest.mark.parametrize(("raw", "flag", "companion"), [(True, True, 1), (False, False, 0)])
def test_fast_cpu_time_sets_flag_and_companion(
    make_record: Record, raw: bool, flag: bool, companion: int
) -> None:
    """Fast CPU time drives both the boolean flag and the integer companion."""
    config = convert([make_record("fast_cpu_time", raw, field_type="BOOLEAN")])

    cpu = config["Cpu"]
    assert cpu["use_fast_cpu_time"].value is flag
    assert cpu["fast_cpu_time"].value == companion
    for key in ("use_fast_cpu_time", "fast_cpu_time"):
        assert cpu[key].use_global is False
        assert cpu[key].default is False


def test_fast_gpu_time_sets_flag_and_companion(make_record: Record) -> None:
    """Fast GPU time drives the renderer flag pair."""
    config = convert([make_record("use_fast_gpu_time", True, field_type="BOOLEAN")])

    renderer = config["Renderer"]
    assert renderer["use_fast_gpu_time"].value is True
    assert renderer["fast_gpu_time"].value == 1
    assert renderer["fast_gpu_time"].use_global is False


def test_repeated_fields_generic_last_wins_timing_first_wins(make_record: Record) -> None:
    """Mapped fields keep the final occurrence; fast timing pairs keep the first."""
    config = convert(
        [
            make_record("cpu_backend", "NCE"),
            make_record("fast_cpu_time", True),
            make_record("use_fast_gpu_time", False),
            make_record("cpu_backend", "Software"),
            make_record("fast_cpu_time", False),
            make_record("use_fast_gpu_time", True),
        ]
    )

    assert config["Cpu"]["cpu_backend"].value == 2
    assert config["Cpu"]["use_fast_cpu_time"].value is True
    assert config["Cpu"]["fast_cpu_time"].value == 1
    assert config["Renderer"]["use_fast_gpu_time"].value is False
    assert config["Renderer"]["fast_gpu_time"].value == 0


@pytest.mark.parametrize(
    "value",
    ["[" * 100_000 + "]" * 100_000, '{"a":' * 50_000 + "1" + "}" * 50_000],
)
def test_deeply_nested_driver_value_leaves_driver_global(
    make_record: Record, value: str
) -> None:
    """Undecodable driver text never aborts the conversion."""
    config = convert([make_record("dynamic_driver_version", value)])

    assert config == get_default_config()


def test_accepts_conversion_input_and_field_value_instances() -> None:
    """Typed inputs convert the same way as raw records."""
    source = ConversionInput(
        listing_id="listing-1",
        game_id="game-1",
        custom_field_values=(CustomFieldValue.build("gpu_api", "Other", type="SELECT"),),
    )

    config = convert(source)

    assert config["Renderer"]["backend"].value == 3


def test_snake_case_payload_is_accepted(make_record: Record) -> None:
    """The data layer may hand over snake_case keys."""
    payload = {
        "listing_id": "l1",
        "game_id": "g1",
        "custom_field_values": [
            {
                "custom_field_definition": {"name": "docked_mode", "type": "BOOLEAN"},
                "value": False,
            }
        ],
    }

    assert convert(payload)["System"]["use_docked_mode"].value is False


@pytest.mark.parametrize("values", ["cpu_backend", {"cpu_backend": 1}, 42])
def test_non_sequence_field_values_raise(values: object) -> None:
    """Callers must hand over a sequence of records."""
    with pytest.raises(InputError):
        convert({"listingId": "l1", "gameId": "g1", "customFieldValues": values})


def test_convert_is_total_over_arbitrary_values(make_record: Record) -> None:
    """Every mapped field accepts odd JSON values without raising."""
    odd_values: list[object] = [None, 0, -1, 3.5, "", "???", [], {"x": 1}, True]
    records = [make_record(name, value) for name in FIELD_MAPPINGS for value in odd_values]

    config = convert(records)

    baseline = get_default_config()
    for section, settings in baseline.items():
        assert set(config[section]) == set(settings)


def test_conversions_do_not_share_state(make_record: Record) -> None:
    """Each conversion works on its own copy of the baseline."""
    first = convert([make_record("gpu_api", "OpenGL")])
    first["Renderer"]["backend"].override(3)

    second = convert([])

    assert second["Renderer"]["backend"].value == 1
    assert second["Renderer"]["backend"].use_global is True
