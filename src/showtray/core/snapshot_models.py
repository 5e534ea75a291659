"""
Data models for the snapshot/restore system.
"""

from __future__ import annotations

import binascii
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .keys import ABSENT, ConfigKey, ValueKind

SNAPSHOT_FORMAT = "showtray-snapshot"
SCHEMA_VERSION = 1


class Tier(str, Enum):
    BASIC = "basic"
    COMPREHENSIVE = "comprehensive"


class SnapshotState(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    CORRUPTED = "corrupted"


@dataclass(frozen=True)
class SnapshotEntry:
    """One recorded registry value. data is None when the value was absent."""

    path: str
    name: str
    kind: ValueKind
    data: Optional[bytes | int] = None

    @classmethod
    def from_value(cls, key: ConfigKey, value) -> SnapshotEntry:
        """Record a value read from the store. Raises ValueError if it does not fit key.kind."""
        if value is not ABSENT:
            key.validate(value)
        return cls(
            path=key.path,
            name=key.name,
            kind=key.kind,
            data=None if value is ABSENT else value,
        )

    @property
    def key(self) -> ConfigKey:
        return ConfigKey(self.path, self.name, self.kind)

    @property
    def value(self):
        return ABSENT if self.data is None else self.data

    def to_dict(self) -> Dict[str, Any]:
        data = self.data
        if isinstance(data, (bytes, bytearray)):
            data = binascii.hexlify(data).decode("ascii")
        return {"path": self.path, "name": self.name, "kind": self.kind.value, "data": data}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> SnapshotEntry:
        """Parse one entry. Raises ValueError on anything malformed."""
        if not isinstance(raw, dict):
            raise ValueError("entry is not an object")
        try:
            path, name, kind = raw["path"], raw["name"], ValueKind(raw["kind"])
        except KeyError as e:
            raise ValueError(f"entry missing field {e}") from e
        if not isinstance(path, str) or not isinstance(name, str) or not path or not name:
            raise ValueError("entry path and name must be non-empty strings")

        data = raw.get("data")
        if data is not None:
            if kind is ValueKind.BINARY:
                if not isinstance(data, str):
                    raise ValueError(f"{name}: binary data must be a hex string")
                try:
                    data = binascii.unhexlify(data)
                except (binascii.Error, ValueError) as e:
                    raise ValueError(f"{name}: invalid hex data") from e
            else:
                key = ConfigKey(path, name, kind)
                key.validate(data)
        return cls(path=path, name=name, kind=kind, data=data)


@dataclass
class Snapshot:
    """Registry state at a point in time."""

    tier: Tier
    entries: List[SnapshotEntry]
    created_at: str
    tool_version: str = ""
    host: str = ""
    user: str = ""
    schema_version: int = SCHEMA_VERSION

    @classmethod
    def create(
        cls,
        tier: Tier,
        entries: List[SnapshotEntry],
        tool_version: str = "",
        host: str = "",
        user: str = "",
    ) -> Snapshot:
        """Create a new snapshot stamped with the current time."""
        return cls(
            tier=tier,
            entries=list(entries),
            created_at=datetime.now().isoformat(timespec="seconds"),
            tool_version=tool_version,
            host=host,
            user=user,
        )

    def get(self, key: ConfigKey):
        """Recorded value for key, ABSENT if recorded absent, None if not recorded."""
        for entry in self.entries:
            if entry.path.lower() == key.path.lower() and entry.name.lower() == key.name.lower():
                return entry.value
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "format": SNAPSHOT_FORMAT,
            "schema_version": self.schema_version,
            "tier": self.tier.value,
            "created_at": self.created_at,
            "tool_version": self.tool_version,
            "host": self.host,
            "user": self.user,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Snapshot:
        """Create from dictionary (JSON deserialization). Raises ValueError."""
        if not isinstance(data, dict):
            raise ValueError("snapshot is not an object")
        if data.get("format") != SNAPSHOT_FORMAT:
            raise ValueError(f"unknown format {data.get('format')!r}")
        if data.get("schema_version") != SCHEMA_VERSION:
            raise ValueError(f"unsupported schema_version {data.get('schema_version')!r}")
        try:
            tier = Tier(data["tier"])
        except (KeyError, ValueError) as e:
            raise ValueError(f"invalid tier {data.get('tier')!r}") from e
        entries = data.get("entries")
        if not isinstance(entries, list):
            raise ValueError("entries must be a list")

        return cls(
            tier=tier,
            entries=[SnapshotEntry.from_dict(e) for e in entries],
            created_at=str(data.get("created_at", "")),
            tool_version=str(data.get("tool_version", "")),
            host=str(data.get("host", "")),
            user=str(data.get("user", "")),
        )


@dataclass
class SnapshotStatus:
    """What is on disk for one tier."""

    tier: Tier
    state: SnapshotState
    path: str
    snapshot: Optional[Snapshot] = None
    error: Optional[str] = None

    @property
    def summary(self) -> str:
        if self.state is SnapshotState.PRESENT:
            return f"{self.tier.value}: {len(self.snapshot.entries)} values from {self.snapshot.created_at}"
        if self.state is SnapshotState.CORRUPTED:
            return f"{self.tier.value}: corrupted ({self.error})"
        return f"{self.tier.value}: none"


@dataclass
class FailedKey:
    key: str
    reason: str


@dataclass
class RestoreResult:
    """Result of a restore operation."""

    success: bool
    tier: Optional[Tier] = None
    restored: List[str] = field(default_factory=list)
    failed: List[FailedKey] = field(default_factory=list)
    snapshot_removed: bool = False
    discarded: List[Tier] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.restored) and bool(self.failed)
