"""Shared fixtures and record builders for the edenconf test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from edenconf.models import JSONValue


def field_record(
    name: str,
    value: JSONValue,
    *,
    field_type: str = "TEXT",
    label: str | None = None,
) -> dict[str, object]:
    """Return a custom field value record shaped like the data layer output."""
    return {
        "customFieldDefinition": {
            "name": name,
            "label": label if label is not None else name,
            "type": field_type,
            "options": None,
        },
        "value": value,
    }


@pytest.fixture
def make_record() -> Callable[..., dict[str, object]]:
    """Expose :func:`field_record` to tests."""
    return field_record


@pytest.fixture
def isolated_env(tmp_path: Path) -> dict[str, str]:
    """Return CLI environment variables confined to *tmp_path*."""
    return {
        "EDENCONF_CONFIG_FILE": str(tmp_path / "config.yml"),
        "EDENCONF_LOGS_DIR": str(tmp_path / "logs"),
        "EDENCONF_OUTPUT_DIR": str(tmp_path / "out"),
    }
