"""Failure-mode and record-shape tests for the structured logging subsystem."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from edenconf import __version__
from edenconf.logging import HUMAN_LOG_NAME, StructuredLogger


def _records(logger: StructuredLogger) -> list[dict[str, object]]:
    path = logger._operations_log_path  # type: ignore[attr-defined]
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_structured_logger_disables_when_directory_unavailable(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Logger gracefully disables itself when log directory cannot be created."""
    log_dir = tmp_path / "logs"

    original_mkdir = Path.mkdir

    def fail_mkdir(self: Path, *args: object, **kwargs: object) -> None:
        if self == log_dir:
            raise PermissionError("no access")
        original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fail_mkdir)

    logger = StructuredLogger(log_dir)
    assert logger._enabled is False  # type: ignore[attr-defined]

    with logger.operation("convert", args={"input": "listing.json"}) as op:
        op.success("done", changed=0)


def test_structured_logger_disables_after_write_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Write failures mark the logger disabled so subsequent writes are skipped."""
    logger = StructuredLogger(tmp_path / "logs")
    operations_path = logger._operations_log_path  # type: ignore[attr-defined]

    original_open = Path.open

    def fail_once(self: Path, *args: object, **kwargs: object) -> object:
        if self == operations_path:
            raise OSError("disk full")
        return original_open(self, *args, **kwargs)

    monkeypatch.setattr(Path, "open", fail_once)

    with logger.operation("convert") as op:
        op.success("done", changed=0)

    assert logger._enabled is False  # type: ignore[attr-defined]

    with logger.operation("convert-2") as op:
        op.success("done", changed=0)


def test_disabled_logger_writes_nothing(tmp_path: Path) -> None:
    """enabled=False neither creates the directory nor writes records."""
    logger = StructuredLogger(tmp_path / "logs", enabled=False)

    with logger.operation("defaults") as op:
        op.success("done")

    assert logger.enabled is False
    assert not (tmp_path / "logs").exists()


def test_operation_record_shape(tmp_path: Path) -> None:
    """Records carry command, args, steps, result and version context."""
    logger = StructuredLogger(tmp_path / "logs")

    with logger.operation(
        "convert",
        args={"input": Path("listing.json")},
        target={"kind": "listing"},
    ) as op:
        op.add_step("input.load", detail="3 field values")
        op.success("Wrote Eden configuration.", changed=1, context={"overrides": 3})

    (record,) = _records(logger)
    assert record["command"] == "convert"
    assert record["args"] == {"input": "listing.json"}
    assert record["target"] == {"kind": "listing"}
    assert record["steps"] == [
        {"name": "input.load", "status": "success", "detail": "3 field values"}
    ]
    assert record["result"] == {
        "status": "success",
        "message": "Wrote Eden configuration.",
        "changed": 1,
        "context": {"overrides": 3},
    }
    assert record["context"] == {"edenconf_version": __version__}
    assert isinstance(record["duration_ms"], int)

    human = (tmp_path / "logs" / HUMAN_LOG_NAME).read_text(encoding="utf-8")
    assert "convert - Wrote Eden configuration." in human


def test_operation_scope_warning_sanitises_context(tmp_path: Path) -> None:
    """Warnings should be recorded with JSON-safe context values."""
    logger = StructuredLogger(tmp_path / "logs")

    class Custom:
        def __str__(self) -> str:
            return "<custom>"

    with logger.operation("import", args={"path": Path("foo")}) as op:
        op.warning(
            "warned",
            warnings=("note",),
            errors=("err",),
            changed=1,
            context={"path": Path("/var/lib"), "obj": Custom()},
        )

    (record,) = _records(logger)
    result = record["result"]
    assert result["status"] == "warning"  # type: ignore[index]
    assert result["warnings"] == ["note"]  # type: ignore[index]
    assert result["errors"] == ["err"]  # type: ignore[index]
    assert result["context"] == {"path": "/var/lib", "obj": "<custom>"}  # type: ignore[index]


def test_operation_scope_error_defaults_error_list(tmp_path: Path) -> None:
    """Errors should default to the message when not provided."""
    logger = StructuredLogger(tmp_path / "logs")

    with logger.operation("convert") as op:
        op.error("boom", errors=None, rc=2, context={"value": {1, 2}})

    (record,) = _records(logger)
    result = record["result"]
    assert result["status"] == "error"  # type: ignore[index]
    assert result["errors"] == ["boom"]  # type: ignore[index]
    assert result["rc"] == 2  # type: ignore[index]
    assert result["context"] == {"value": "{1, 2}"}  # type: ignore[index]


def test_unhandled_exception_is_recorded_and_reraised(tmp_path: Path) -> None:
    """Exceptions escaping the scope are logged as errors."""
    logger = StructuredLogger(tmp_path / "logs")

    with pytest.raises(ValueError, match="bad input"):
        with logger.operation("convert"):
            raise ValueError("bad input")

    (record,) = _records(logger)
    assert record["result"]["status"] == "error"  # type: ignore[index]
    assert record["result"]["message"] == "bad input"  # type: ignore[index]


def test_typer_exit_keeps_recorded_result(tmp_path: Path) -> None:
    """Exiting through typer does not overwrite the recorded outcome."""
    logger = StructuredLogger(tmp_path / "logs")

    with pytest.raises(typer.Exit):
        with logger.operation("convert") as op:
            op.success("done")
            raise typer.Exit(code=0)

    (record,) = _records(logger)
    assert record["result"]["status"] == "success"  # type: ignore[index]


def test_human_log_respects_level(tmp_path: Path) -> None:
    """Successful operations are omitted from the human log above INFO."""
    logger = StructuredLogger(tmp_path / "logs", level="warning")

    with logger.operation("defaults") as op:
        op.success("quiet")
    with logger.operation("convert") as op:
        op.error("loud")

    human = (tmp_path / "logs" / HUMAN_LOG_NAME).read_text(encoding="utf-8")
    assert "quiet" not in human
    assert "ERROR" in human and "loud" in human
    assert len(_records(logger)) == 2
