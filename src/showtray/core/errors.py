"""Error taxonomy and process exit codes."""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    ACCESS_DENIED = 2
    INVALID_SESSION = 3
    ROLLBACK_FAILED = 5
    BACKUP_FAILED = 7


class ShowTrayError(Exception):
    """Base class for errors reported to the user."""

    exit_code = ExitCode.GENERAL_ERROR


class AccessDenied(ShowTrayError):
    """The registry refused a write or delete."""

    exit_code = ExitCode.ACCESS_DENIED

    def __init__(self, target: str, reason: str = ""):
        self.target = target
        self.reason = reason
        message = f"Access denied: {target}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class SnapshotNotFound(ShowTrayError):
    """No snapshot file (or no registry path) to work with."""


class BackupExists(ShowTrayError):
    """A snapshot already exists and force was not given."""

    exit_code = ExitCode.BACKUP_FAILED

    def __init__(self, path):
        self.path = path
        super().__init__(f"Backup already exists: {path} (use --force to overwrite)")


class SerializationError(ShowTrayError):
    """A snapshot file is corrupt or uses an unknown format."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unreadable snapshot {path}: {reason}")


class InvalidSession(ShowTrayError):
    """Not running as an interactive Windows user."""

    exit_code = ExitCode.INVALID_SESSION


class ProcessRestartTimeout(ShowTrayError):
    """The shell did not stop or come back in time. Reported as a warning only."""
