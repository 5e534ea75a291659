"""Core orchestration for showtray.

Maps each CLI action to the registry store and the snapshot manager,
decoupled from winreg and the process table via ports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..platform_utils import WINDOWS_11_BUILD
from .config_model import AppConfig
from .errors import AccessDenied, BackupExists, ExitCode, ShowTrayError
from .keys import (
    ABSENT,
    AUTO_HIDE,
    AUTO_TRAY,
    PROMOTED,
    SHOW_ALL,
    SYSTEM_ICON_KEYS,
    SYSTEM_ICON_VISIBLE,
    TRAY_CACHE_KEYS,
    ConfigKey,
    basic_keys,
    comprehensive_keys,
    describe_auto_tray,
    icon_preference_keys,
)
from .ports import RegistryStore, SettingsNotifier
from .restart import ShellRestarter
from .snapshot import SnapshotManager
from .snapshot_models import Snapshot, Tier

logger = logging.getLogger(__name__)


class Action(str, Enum):
    ENABLE = "enable"
    DISABLE = "disable"
    STATUS = "status"
    BACKUP = "backup"
    ROLLBACK = "rollback"


MUTATING_ACTIONS = frozenset({Action.ENABLE, Action.DISABLE, Action.ROLLBACK})


@dataclass(frozen=True)
class ActionOptions:
    """Flags passed from the command line."""

    restart_shell: bool = False
    snapshot_first: bool = False
    force: bool = False
    reset_icons: bool = True
    system_icons: bool = True
    build_tweak: bool = True


@dataclass
class ActionResult:
    action: Action
    success: bool
    message: str
    exit_code: ExitCode = ExitCode.SUCCESS
    details: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, action: Action, message: str, exit_code: ExitCode, **kwargs) -> ActionResult:
        return cls(action=action, success=False, message=message, exit_code=exit_code, **kwargs)


def format_value(value) -> str:
    if value is ABSENT:
        return "(absent)"
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    return str(value)


class TrayController:
    """Runs one action against the per-user registry."""

    def __init__(
        self,
        store: RegistryStore,
        snapshots: SnapshotManager,
        config: AppConfig,
        restarter: ShellRestarter | None = None,
        notifier: SettingsNotifier | None = None,
        build_number: int = 0,
    ):
        self._store = store
        self._snapshots = snapshots
        self._config = config
        self._restarter = restarter
        self._notifier = notifier
        self._build = build_number

    def dispatch(self, action: Action, options: ActionOptions | None = None) -> ActionResult:
        options = options or ActionOptions()
        handlers = {
            Action.ENABLE: self.enable,
            Action.DISABLE: self.disable,
            Action.STATUS: self.status,
            Action.BACKUP: self.backup,
            Action.ROLLBACK: self.rollback,
        }
        try:
            result = handlers[action](options)
        except ShowTrayError as e:
            exit_code = self._exit_code_for(action, e)
            logger.debug("%s failed: %s", action.value, e)
            return ActionResult.failure(action, str(e), exit_code)

        if result.success and action in MUTATING_ACTIONS:
            self._after_change(result, options)
        return result

    @staticmethod
    def _exit_code_for(action: Action, error: ShowTrayError) -> ExitCode:
        if action is Action.ROLLBACK:
            return ExitCode.ROLLBACK_FAILED
        if action is Action.BACKUP:
            return ExitCode.BACKUP_FAILED
        return error.exit_code

    def _after_change(self, result: ActionResult, options: ActionOptions) -> None:
        if self._notifier is not None and not self._notifier.broadcast("TrayNotify"):
            logger.debug("Settings change broadcast was not delivered")
        if options.restart_shell and self._restarter is not None:
            result.warnings.extend(self._restarter.restart())
            result.details.append("Explorer restarted")

    def _snapshot_first(self, options: ActionOptions, result_details: list[str]) -> None:
        if options.snapshot_first:
            snapshot = self._capture(options.force)
            result_details.append(f"Backup saved ({snapshot.tier.value}, {len(snapshot.entries)} values)")

    def _best_effort_write(self, key: ConfigKey, value, warnings: list[str]) -> bool:
        try:
            self._store.write(key, value)
        except AccessDenied as e:
            logger.warning("Skipping %s: %s", key.display, e)
            warnings.append(str(e))
            return False
        return True

    # =========================================================================
    # Actions
    # =========================================================================

    def enable(self, options: ActionOptions) -> ActionResult:
        """Show every tray icon."""
        details: list[str] = []
        warnings: list[str] = []
        self._snapshot_first(options, details)

        self._store.write(AUTO_TRAY, SHOW_ALL)
        details.append(f"{AUTO_TRAY.name} = {SHOW_ALL}")

        if options.reset_icons:
            # Enumeration order is whatever the registry returns
            icons = icon_preference_keys(self._store)
            promoted = sum(self._best_effort_write(key, PROMOTED, warnings) for key in icons)
            details.append(f"Promoted {promoted}/{len(icons)} individual icons")

        if options.system_icons:
            shown = sum(
                self._best_effort_write(key, SYSTEM_ICON_VISIBLE, warnings)
                for key in SYSTEM_ICON_KEYS
            )
            details.append(f"Forced {shown}/{len(SYSTEM_ICON_KEYS)} system icons visible")

        if options.build_tweak and 0 < self._build < WINDOWS_11_BUILD:
            for key in TRAY_CACHE_KEYS:
                try:
                    self._store.delete(key)
                except AccessDenied as e:
                    logger.warning("Could not clear %s: %s", key.display, e)
                    warnings.append(str(e))
            details.append("Cleared legacy icon cache (Windows 10)")

        return ActionResult(
            action=Action.ENABLE,
            success=True,
            message="All tray icons will be shown",
            details=details,
            warnings=warnings,
        )

    def disable(self, options: ActionOptions) -> ActionResult:
        """Return to auto-hiding inactive icons.

        Writes 1 explicitly; only rollback deletes the value.
        """
        details: list[str] = []
        self._snapshot_first(options, details)

        self._store.write(AUTO_TRAY, AUTO_HIDE)
        details.append(f"{AUTO_TRAY.name} = {AUTO_HIDE}")
        return ActionResult(
            action=Action.DISABLE,
            success=True,
            message="Inactive tray icons will be hidden",
            details=details,
        )

    def status(self, options: ActionOptions) -> ActionResult:
        value = self._store.read(AUTO_TRAY)
        details = [f"{AUTO_TRAY.display} = {format_value(value)}"]
        details.extend(
            "Backup " + self._snapshots.status(tier).summary
            for tier in (Tier.COMPREHENSIVE, Tier.BASIC)
        )
        return ActionResult(
            action=Action.STATUS,
            success=True,
            message=f"Tray icon mode: {describe_auto_tray(value)}",
            details=details,
        )

    def _capture(self, force: bool) -> Snapshot:
        try:
            keys = comprehensive_keys(self._store)
            return self._snapshots.capture(keys, Tier.COMPREHENSIVE, force=force)
        except AccessDenied as e:
            logger.warning("Comprehensive backup failed (%s); falling back to basic", e)
            # Rollback prefers comprehensive, so an older one would shadow this backup
            if self._snapshots.exists(Tier.COMPREHENSIVE):
                if not force:
                    raise BackupExists(self._snapshots.path_for(Tier.COMPREHENSIVE)) from e
                self._snapshots.discard(Tier.COMPREHENSIVE)
            return self._snapshots.capture(basic_keys(), Tier.BASIC, force=force)

    def backup(self, options: ActionOptions) -> ActionResult:
        snapshot = self._capture(options.force)
        path = self._snapshots.path_for(snapshot.tier)
        return ActionResult(
            action=Action.BACKUP,
            success=True,
            message=f"Saved {snapshot.tier.value} backup to {path}",
            details=[f"{len(snapshot.entries)} values recorded"],
        )

    def rollback(self, options: ActionOptions) -> ActionResult:
        result = self._snapshots.rollback()
        if not result.success:
            return ActionResult.failure(
                Action.ROLLBACK,
                f"Rollback from {result.tier.value} backup was incomplete",
                ExitCode.ROLLBACK_FAILED,
                details=[f"Restored {len(result.restored)} values"]
                + [f"Failed {failed.key}: {failed.reason}" for failed in result.failed],
            )
        details = [f"Restored {len(result.restored)} values"]
        if result.snapshot_removed:
            details.append("Backup file removed")
        details.extend(f"Removed corrupted {tier.value} backup" for tier in result.discarded)
        return ActionResult(
            action=Action.ROLLBACK,
            success=True,
            message=f"Restored settings from {result.tier.value} backup",
            details=details,
        )

    def diagnostic(self, platform_info: dict) -> list[str]:
        """Read-only report of everything showtray would touch."""
        lines = [f"{name}: {value}" for name, value in platform_info.items()]
        lines.append(f"showtray: {self._config.version}")
        lines.append(f"backup dir: {self._config.backup_dir}")
        for key in comprehensive_keys(self._store):
            lines.append(f"{key.display} = {format_value(self._store.read(key))}")
        for tier in (Tier.COMPREHENSIVE, Tier.BASIC):
            lines.append("Backup " + self._snapshots.status(tier).summary)
        return lines
