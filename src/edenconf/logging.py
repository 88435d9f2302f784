"""Structured operation logging for the edenconf CLI.

Every CLI command runs inside :meth:`StructuredLogger.operation`. When the
scope closes, one JSON record is appended to ``operations.jsonl`` and a one
line summary to ``edenconf.log``. Logging must never break a command: if the
log directory cannot be created or a write fails, the logger disables itself
and the command carries on.
"""
from __future__ import annotations

import json
import logging
import os
import time
import uuid
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import typer

from . import __version__

LOGGER = logging.getLogger(__name__)

OPERATIONS_LOG_NAME = "operations.jsonl"
HUMAN_LOG_NAME = "edenconf.log"

_STATUS_LEVELS = {
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _utcnow() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _sanitize(value: object) -> object:
    """Return a JSON-safe rendition of *value*."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, Mapping):
        return {str(key): _sanitize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(item) for item in value]
    return str(value)


class OperationScope:
    """Collects the outcome of a single CLI operation."""

    def __init__(
        self,
        command: str,
        *,
        args: Mapping[str, object] | None = None,
        target: Mapping[str, object] | None = None,
    ) -> None:
        """Initialise the scope; the record is written by the owning logger."""
        self.op_id = uuid.uuid4().hex
        self.command = command
        self.args = dict(args or {})
        self.target = dict(target) if target is not None else None
        self.started_at = _utcnow()
        self._started = time.monotonic()
        self.steps: list[dict[str, object]] = []
        self.result: dict[str, object] | None = None

    def add_step(self, name: str, *, status: str = "success", detail: object = None) -> None:
        """Record an intermediate step."""
        step: dict[str, object] = {"name": name, "status": status}
        if detail is not None:
            step["detail"] = _sanitize(detail)
        self.steps.append(step)

    def success(
        self,
        message: str,
        *,
        changed: int = 0,
        warnings: Sequence[str] | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation as successful."""
        self._set_result(
            "success",
            message,
            changed=changed,
            warnings=warnings,
            context=context,
        )

    def warning(
        self,
        message: str,
        *,
        warnings: Sequence[str] | None = None,
        errors: Sequence[str] | None = None,
        changed: int = 0,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation as completed with warnings."""
        self._set_result(
            "warning",
            message,
            changed=changed,
            warnings=list(warnings) if warnings is not None else [message],
            errors=errors,
            context=context,
        )

    def error(
        self,
        message: str,
        *,
        errors: Sequence[str] | None = None,
        rc: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation as failed."""
        self._set_result(
            "error",
            message,
            errors=list(errors) if errors else [message],
            rc=rc,
            context=context,
        )

    def _set_result(
        self,
        status: str,
        message: str,
        *,
        changed: int = 0,
        warnings: Sequence[str] | None = None,
        errors: Sequence[str] | None = None,
        rc: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        result: dict[str, object] = {
            "status": status,
            "message": message,
            "changed": changed,
        }
        if warnings:
            result["warnings"] = list(warnings)
        if errors:
            result["errors"] = list(errors)
        if rc is not None:
            result["rc"] = rc
        if context:
            result["context"] = _sanitize(dict(context))
        self.result = result

    def to_record(self) -> dict[str, object]:
        """Return the JSON record for this operation."""
        finished_at = _utcnow()
        duration_ms = int((time.monotonic() - self._started) * 1000)
        result = self.result or {
            "status": "success",
            "message": "Operation completed.",
            "changed": 0,
        }
        record: dict[str, object] = {
            "op_id": self.op_id,
            "command": self.command,
            "args": _sanitize(self.args),
            "started_at": self.started_at,
            "finished_at": finished_at,
            "duration_ms": duration_ms,
            "steps": list(self.steps),
            "result": result,
            "context": {"edenconf_version": __version__},
        }
        if self.target is not None:
            record["target"] = _sanitize(self.target)
        return record


class StructuredLogger:
    """Append-only JSONL operation log plus a human-readable companion."""

    def __init__(
        self,
        logs_dir: Path,
        *,
        enabled: bool = True,
        level: str = "INFO",
    ) -> None:
        """Prepare *logs_dir*; disable logging when it cannot be created."""
        self.logs_dir = Path(logs_dir)
        self._operations_log_path = self.logs_dir / OPERATIONS_LOG_NAME
        self._human_log_path = self.logs_dir / HUMAN_LOG_NAME
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            self._level = logging.INFO
        self._enabled = enabled
        if not enabled:
            return
        try:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("Disabling operation log; cannot create %s: %s", self.logs_dir, exc)
            self._enabled = False

    @property
    def enabled(self) -> bool:
        """Return ``True`` while records are being written."""
        return self._enabled

    @contextmanager
    def operation(
        self,
        command: str,
        *,
        args: Mapping[str, object] | None = None,
        target: Mapping[str, object] | None = None,
    ) -> Iterator[OperationScope]:
        """Run a block as a logged operation.

        Exceptions escaping the block are recorded as errors and re-raised.
        ``typer.Exit``/``SystemExit`` leave the recorded result untouched.
        """
        scope = OperationScope(command, args=args, target=target)
        try:
            yield scope
        except (typer.Exit, typer.Abort):
            raise
        except Exception as exc:
            if scope.result is None or scope.result.get("status") != "error":
                scope.error(str(exc) or type(exc).__name__, errors=[repr(exc)])
            raise
        finally:
            self._write(scope.to_record())

    def _write(self, record: Mapping[str, object]) -> None:
        if not self._enabled:
            return
        try:
            with self._operations_log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record, sort_keys=True) + "\n")
            self._write_human(record)
        except OSError as exc:
            LOGGER.warning("Disabling operation log after write failure: %s", exc)
            self._enabled = False

    def _write_human(self, record: Mapping[str, object]) -> None:
        result = record.get("result")
        status = str(result.get("status", "success")) if isinstance(result, Mapping) else "success"
        if _STATUS_LEVELS.get(status, logging.INFO) < self._level:
            return
        message = result.get("message", "") if isinstance(result, Mapping) else ""
        line = (
            f"{record.get('finished_at')} {status.upper():<7} "
            f"{record.get('command')} - {message}\n"
        )
        with self._human_log_path.open("a", encoding="utf-8") as handle:
            handle.write(line)


__all__ = [
    "HUMAN_LOG_NAME",
    "OPERATIONS_LOG_NAME",
    "OperationScope",
    "StructuredLogger",
]
