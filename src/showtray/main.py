#!/usr/bin/env python3
"""showtray: keep every notification-area icon visible, with backup and rollback"""

import argparse
import logging
import sys

from . import __version__
from .adapters.config_env import load_app_config
from .core.controller import Action, ActionOptions, TrayController
from .core.errors import ExitCode
from .core.ports import Reporter
from .core.restart import ShellRestarter
from .core.snapshot import SnapshotManager
from .platform_utils import current_user, get_platform_info, get_windows_build, is_interactive_session

logger = logging.getLogger("showtray")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="showtray",
        description="Show all system tray icons by turning off EnableAutoTray, with rollback.",
        epilog=(
            "Exit codes: 0 success, 1 error, 2 access denied, 3 invalid session, "
            "5 rollback failed, 7 backup failed"
        ),
    )
    parser.add_argument(
        "action",
        nargs="?",
        default=Action.STATUS.value,
        type=str.lower,
        choices=[action.value for action in Action],
        help="What to do (default: status)",
    )
    parser.add_argument(
        "--restart-explorer",
        action="store_true",
        help="Restart Explorer so the change applies immediately",
    )
    parser.add_argument(
        "--backup-registry",
        action="store_true",
        help="Take a backup before enable/disable",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing backup",
    )
    parser.add_argument(
        "--no-icon-reset",
        action="store_true",
        help="Leave per-icon visibility preferences alone on enable",
    )
    parser.add_argument(
        "--no-system-icons",
        action="store_true",
        help="Leave the volume/network/power icon policies alone on enable",
    )
    parser.add_argument(
        "--diagnostic",
        action="store_true",
        help="Print platform and registry details and enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(debug: bool, log_file: str = "") -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def build_controller(app_config, store=None, processes=None, notifier=None) -> TrayController:
    """Wire the Windows adapters (or the given replacements) into a controller."""
    if store is None:
        from .adapters.registry import WinregRegistryStore

        store = WinregRegistryStore()
    if processes is None:
        from .adapters.process import PsutilProcessManager

        processes = PsutilProcessManager()
    if notifier is None:
        from .adapters.notifier import Win32SettingsNotifier

        notifier = Win32SettingsNotifier()

    info = get_platform_info()
    snapshots = SnapshotManager(store, app_config, host=info["host"], user=current_user())
    restarter = ShellRestarter(
        processes,
        process_name=app_config.shell_process,
        attempts=app_config.restart_attempts,
        interval=app_config.restart_interval,
    )
    return TrayController(
        store,
        snapshots,
        app_config,
        restarter=restarter,
        notifier=notifier,
        build_number=get_windows_build(),
    )


def run(
    argv=None,
    store=None,
    processes=None,
    notifier=None,
    reporter: Reporter | None = None,
    session_check=is_interactive_session,
) -> int:
    """Parse arguments, run one action and return the exit code."""
    args = build_parser().parse_args(argv)
    app_config = load_app_config(debug=args.diagnostic)
    setup_logging(app_config.debug, app_config.log_file)

    if reporter is None:
        from .adapters.ui_feedback import ConsoleReporter

        reporter = ConsoleReporter()

    if not session_check():
        message = "showtray must run as an interactive Windows user (HKCU of this session is not the desktop's)"
        logger.debug(message)
        reporter.error(message)
        return ExitCode.INVALID_SESSION

    action = Action(args.action)
    options = ActionOptions(
        restart_shell=args.restart_explorer,
        snapshot_first=args.backup_registry,
        force=args.force,
        reset_icons=not args.no_icon_reset,
        system_icons=not args.no_system_icons,
    )

    try:
        controller = build_controller(app_config, store=store, processes=processes, notifier=notifier)
        if args.diagnostic:
            for line in controller.diagnostic(get_platform_info()):
                reporter.info(line)
        result = controller.dispatch(action, options)
    except Exception as e:
        logger.exception("Unexpected error during %s", action.value)
        reporter.error(f"Error: {e}")
        return ExitCode.GENERAL_ERROR

    reporter.report(result)
    return result.exit_code


def main():
    # Windows consoles may not encode the status symbols
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(errors="replace")
    sys.exit(int(run()))


if __name__ == "__main__":
    main()
