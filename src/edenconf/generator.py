"""Produce downloadable per-game configuration files for listings."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from types import MappingProxyType

from .converter import convert
from .defaults import EDEN_ANDROID_BASE_PATH
from .models import Config, ConversionInput, coerce_field_values, config_to_dict
from .serializer import serialize

EDEN_CONFIG_TYPE = "eden"
DEFAULT_EMULATOR_NAME = "Eden"
DEFAULT_FILENAME_TEMPLATE = "{emulator}-{listing_id}.ini"

# Emulator name as stored for listings -> configuration type.
EMULATOR_CONFIG_TYPES = MappingProxyType({"Eden": EDEN_CONFIG_TYPE})


class ConfigGenerationError(RuntimeError):
    """Raised when a configuration file cannot be produced."""


class UnsupportedEmulatorError(ConfigGenerationError):
    """Raised when no configuration type exists for an emulator name."""


@dataclass(frozen=True)
class GeneratedConfig:
    """Generated configuration file ready to be returned to a client."""

    type: str
    filename: str
    content: str
    config: Config = field(repr=False, compare=False)

    def to_dict(self) -> dict[str, object]:
        """Return the envelope handed to API clients."""
        return {"type": self.type, "filename": self.filename, "content": self.content}

    def to_full_dict(self) -> dict[str, object]:
        """Return the envelope plus the structured configuration."""
        payload = self.to_dict()
        payload["config"] = config_to_dict(self.config)
        return payload


def detect_config_type(emulator_name: str) -> str:
    """Return the configuration type for *emulator_name*.

    Exact names are preferred; otherwise a case-insensitive match is used.
    """
    config_type = EMULATOR_CONFIG_TYPES.get(emulator_name)
    if config_type is not None:
        return config_type

    lowered = emulator_name.lower()
    for name, candidate in EMULATOR_CONFIG_TYPES.items():
        if name.lower() == lowered:
            return candidate

    supported = ", ".join(EMULATOR_CONFIG_TYPES)
    raise UnsupportedEmulatorError(
        f"Config generation not supported for emulator: {emulator_name}. "
        f"Supported emulators: {supported}"
    )


def is_config_generation_supported(emulator_name: str) -> bool:
    """Return ``True`` when a configuration can be generated for *emulator_name*."""
    try:
        detect_config_type(emulator_name)
    except UnsupportedEmulatorError:
        return False
    return True


def get_supported_emulators() -> tuple[str, ...]:
    """Return the emulator names that support configuration generation."""
    return tuple(EMULATOR_CONFIG_TYPES)


def render_filename(
    template: str, *, emulator_name: str, listing_id: str, game_id: str = ""
) -> str:
    """Render a configuration filename from *template*.

    Supported placeholders are ``{emulator}`` (lower-cased emulator name),
    ``{listing_id}`` and ``{game_id}``.
    """
    try:
        return template.format(
            emulator=emulator_name.lower(),
            listing_id=listing_id,
            game_id=game_id,
        )
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigGenerationError(
            f"Invalid filename template {template!r}: {exc}"
        ) from exc


def generate_listing_config(
    listing_id: str,
    game_id: str,
    custom_field_values: Iterable[object],
    *,
    emulator_name: str = DEFAULT_EMULATOR_NAME,
    filename_template: str = DEFAULT_FILENAME_TEMPLATE,
    driver_base_path: str = EDEN_ANDROID_BASE_PATH,
) -> GeneratedConfig:
    """Convert and serialise a listing's custom field values."""
    config_type = detect_config_type(emulator_name)
    source = ConversionInput(
        listing_id=listing_id,
        game_id=game_id,
        custom_field_values=coerce_field_values(custom_field_values),
    )
    config = convert(source, driver_base_path=driver_base_path)
    filename = render_filename(
        filename_template,
        emulator_name=emulator_name,
        listing_id=listing_id,
        game_id=game_id,
    )
    return GeneratedConfig(
        type=config_type,
        filename=filename,
        content=serialize(config),
        config=config,
    )


__all__ = [
    "ConfigGenerationError",
    "DEFAULT_EMULATOR_NAME",
    "DEFAULT_FILENAME_TEMPLATE",
    "EDEN_CONFIG_TYPE",
    "EMULATOR_CONFIG_TYPES",
    "GeneratedConfig",
    "UnsupportedEmulatorError",
    "detect_config_type",
    "generate_listing_config",
    "get_supported_emulators",
    "is_config_generation_supported",
    "render_filename",
]
