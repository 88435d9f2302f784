"""edenconf package bootstrap.

Converts compatibility-listing custom field values into Eden emulator
per-game ``.ini`` configuration files. The public conversion surface lives in
:mod:`edenconf.converter` and :mod:`edenconf.serializer`.
"""
from __future__ import annotations

__all__ = ["__version__", "get_version"]

# NOTE: The version is duplicated in ``pyproject.toml`` and managed by Hatch.
__version__ = "0.3.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
