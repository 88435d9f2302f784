"""Process exit codes returned by the ``edenconf`` CLI."""
from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit status for each class of CLI outcome.

    ``VALIDATION`` covers bad input the operator can fix (malformed JSON,
    unreadable INI text, invalid settings). ``ENVIRONMENT`` covers files that
    cannot be read or written.
    """

    OK = 0
    VALIDATION = 2
    ENVIRONMENT = 3


__all__ = ["ExitCode"]
