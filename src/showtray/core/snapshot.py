"""
Snapshot manager - capture, persist and restore registry state.

Two independent tiers are kept in the backup directory:

- basic: EnableAutoTray only, as a regedit-importable .reg file
- comprehensive: every key showtray touches, as a versioned JSON document

A snapshot is consumed by a successful restore and deleted afterwards.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from .config_model import AppConfig
from .errors import AccessDenied, BackupExists, SerializationError, SnapshotNotFound
from .keys import ConfigKey
from .ports import RegistryStore
from .snapshot_models import (
    FailedKey,
    RestoreResult,
    Snapshot,
    SnapshotEntry,
    SnapshotState,
    SnapshotStatus,
    Tier,
)
from . import reg_format

logger = logging.getLogger(__name__)

# Rollback tries tiers in this order
ROLLBACK_ORDER = (Tier.COMPREHENSIVE, Tier.BASIC)


class SnapshotManager:
    """High-level snapshot operations over a RegistryStore."""

    def __init__(
        self,
        store: RegistryStore,
        config: AppConfig,
        host: str = "",
        user: str = "",
    ):
        self.store = store
        self.config = config
        self.host = host
        self.user = user

    def path_for(self, tier: Tier) -> Path:
        if tier is Tier.BASIC:
            return self.config.basic_backup_path
        return self.config.comprehensive_backup_path

    def exists(self, tier: Tier) -> bool:
        return self.path_for(tier).exists()

    # =========================================================================
    # Capture
    # =========================================================================

    def capture(self, keys: list[ConfigKey], tier: Tier, force: bool = False) -> Snapshot:
        """
        Read every key and persist the values as the tier's snapshot.

        Args:
            keys: Keys to record; absent values are recorded as absent
            tier: Which snapshot file to write
            force: Overwrite an existing snapshot of this tier

        Raises:
            BackupExists: A snapshot exists and force is False
            SerializationError: A value has the wrong registry type, or the
                file could not be written
        """
        path = self.path_for(tier)
        if path.exists() and not force:
            raise BackupExists(path)

        try:
            entries = [SnapshotEntry.from_value(key, self.store.read(key)) for key in keys]
        except ValueError as e:
            # Nothing is written; the loader would reject this snapshot
            raise SerializationError(path, str(e)) from e
        snapshot = Snapshot.create(
            tier=tier,
            entries=entries,
            tool_version=self.config.version,
            host=self.host,
            user=self.user,
        )
        self._save(snapshot, path)
        logger.info("Captured %s snapshot with %d values to %s", tier.value, len(entries), path)
        return snapshot

    def _save(self, snapshot: Snapshot, path: Path) -> None:
        if snapshot.tier is Tier.BASIC:
            payload = reg_format.encode(snapshot)
        else:
            payload = (json.dumps(snapshot.to_dict(), indent=2) + "\n").encode("utf-8")

        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise SerializationError(path, f"write failed: {e}") from e

    # =========================================================================
    # Load / status
    # =========================================================================

    def load(self, tier: Tier) -> Snapshot:
        """
        Load the tier's snapshot.

        Raises:
            SnapshotNotFound: No snapshot file for this tier
            SerializationError: The file is unreadable or malformed
        """
        path = self.path_for(tier)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFound(f"No {tier.value} snapshot at {path}") from e
        except OSError as e:
            raise SerializationError(path, f"read failed: {e}") from e

        try:
            if tier is Tier.BASIC:
                snapshot = reg_format.loads(reg_format.decode(raw))
            else:
                snapshot = Snapshot.from_dict(json.loads(raw.decode("utf-8-sig")))
        except (UnicodeDecodeError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            raise SerializationError(path, str(e)) from e

        if snapshot.tier is not tier:
            raise SerializationError(path, f"file holds a {snapshot.tier.value} snapshot")
        return snapshot

    def status(self, tier: Tier) -> SnapshotStatus:
        """Describe the tier's snapshot without ever raising on a bad file."""
        path = self.path_for(tier)
        try:
            snapshot = self.load(tier)
        except SnapshotNotFound:
            return SnapshotStatus(tier, SnapshotState.ABSENT, str(path))
        except SerializationError as e:
            return SnapshotStatus(tier, SnapshotState.CORRUPTED, str(path), error=e.reason)
        return SnapshotStatus(tier, SnapshotState.PRESENT, str(path), snapshot=snapshot)

    # =========================================================================
    # Restore
    # =========================================================================

    def restore(self, snapshot: Snapshot) -> RestoreResult:
        """
        Write every recorded value back; absent values are deleted.

        Best effort: a failed key does not stop the others and successful
        writes are kept. The snapshot file is removed only if every key
        was restored.
        """
        result = RestoreResult(success=False, tier=snapshot.tier)

        for entry in snapshot.entries:
            key = entry.key
            try:
                if entry.data is None:
                    self.store.delete(key)
                else:
                    self.store.write(key, entry.data)
            except (AccessDenied, ValueError, OSError) as e:
                logger.warning("Could not restore %s: %s", key.display, e)
                result.failed.append(FailedKey(key.display, str(e)))
                continue
            result.restored.append(key.display)

        result.success = not result.failed
        if result.success:
            try:
                result.snapshot_removed = self.discard(snapshot.tier)
            except OSError as e:
                logger.warning("Restored, but could not remove snapshot: %s", e)
        else:
            logger.warning(
                "Partial restore from %s snapshot: %d ok, %d failed; keeping %s",
                snapshot.tier.value,
                len(result.restored),
                len(result.failed),
                self.path_for(snapshot.tier),
            )
        return result

    def rollback(self) -> RestoreResult:
        """
        Restore from the comprehensive snapshot, falling back to basic.

        Raises:
            SnapshotNotFound: Neither tier has a usable snapshot (no
                registry value is touched in that case)

        Corrupted snapshots skipped on the way are deleted once the
        fallback restore succeeds, so they no longer block new backups.
        """
        problems = []
        corrupted = []
        for tier in ROLLBACK_ORDER:
            try:
                snapshot = self.load(tier)
            except SnapshotNotFound:
                problems.append(f"{tier.value}: none")
                continue
            except SerializationError as e:
                logger.warning("Skipping %s snapshot: %s", tier.value, e.reason)
                problems.append(f"{tier.value}: corrupted")
                corrupted.append(tier)
                continue
            logger.info("Rolling back from %s snapshot (%s)", tier.value, snapshot.created_at)
            result = self.restore(snapshot)
            if result.success:
                for skipped in corrupted:
                    try:
                        if self.discard(skipped):
                            result.discarded.append(skipped)
                    except OSError as e:
                        logger.warning("Could not remove corrupted %s snapshot: %s", skipped.value, e)
            return result

        raise SnapshotNotFound("No usable snapshot to roll back to (" + ", ".join(problems) + ")")

    def discard(self, tier: Tier) -> bool:
        """Delete the tier's snapshot file. Returns whether a file was removed."""
        path = self.path_for(tier)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Removed %s snapshot %s", tier.value, path)
        return True
