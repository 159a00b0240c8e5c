"""
Exception hierarchy for studydesk.

Not-found conditions inside the store are silent no-ops and never raise;
these exceptions cover boundary validation, snapshot decoding, study session
misuse and remote backup failures.
"""

from __future__ import annotations


class StudydeskError(Exception):
    """Base class for all studydesk errors."""


class InvalidInputError(StudydeskError, ValueError):
    """User input rejected before it reaches the store."""


class SnapshotDecodeError(StudydeskError):
    """A persisted snapshot is not a JSON object of any known shape."""


class SessionStateError(StudydeskError):
    """A study session action was invoked in the wrong state."""


class BackupError(StudydeskError):
    """Remote backup request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BackupNotConfiguredError(BackupError):
    """Token or repository missing."""


class BackupNotFoundError(BackupError):
    """No backup file exists at the configured path."""
