"""Core ports (interfaces) for showtray.

These protocols define the boundaries between the core actions and the
OS-specific adapters: the per-user registry hive and the process table.
They are intentionally small so the core can run against fakes.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from .keys import ConfigKey


@runtime_checkable
class RegistryStore(Protocol):
    """Hierarchical key/value store scoped to HKCU."""

    def read(self, key: ConfigKey):
        """Return the stored value, or ABSENT if the path or value is missing."""

    def write(self, key: ConfigKey, value) -> None:
        """Create intermediate keys and set the value. Raises AccessDenied."""

    def delete(self, key: ConfigKey) -> None:
        """Remove the value. Already absent counts as success."""

    def delete_tree(self, path: str) -> None:
        """Remove a key and everything below it. Already absent counts as success."""

    def subkeys(self, path: str) -> list[str]:
        """List child key names; an absent path has none."""


@runtime_checkable
class ProcessManager(Protocol):
    """Enumerate, terminate and launch processes by image name."""

    def is_running(self, name: str) -> bool:
        """Whether any process with this image name exists."""

    def terminate(self, name: str) -> int:
        """Terminate every matching process; return how many were signalled."""

    def start(self, name: str) -> None:
        """Launch the executable detached from this process."""


@runtime_checkable
class SettingsNotifier(Protocol):
    """Tell running applications that user settings changed."""

    def broadcast(self, area: str) -> bool:
        """Send the change notification; False if it could not be delivered."""


@runtime_checkable
class Reporter(Protocol):
    """User-visible output."""

    def info(self, message: str) -> None:
        """Print a normal line."""

    def success(self, message: str) -> None:
        """Print a success line."""

    def warning(self, message: str) -> None:
        """Print a warning line."""

    def error(self, message: str) -> None:
        """Print an error line."""

    def report(self, result) -> None:
        """Print an ActionResult with its details and warnings."""
