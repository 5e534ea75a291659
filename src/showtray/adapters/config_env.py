"""Env configuration adapter producing a structured AppConfig."""

from __future__ import annotations

from .. import __version__
from ..config import config as env_config
from ..core.config_model import AppConfig


def load_app_config(debug: bool = False) -> AppConfig:
    return AppConfig(
        version=__version__,
        backup_dir=env_config.BACKUP_DIR,
        basic_backup_name=env_config.BASIC_BACKUP_NAME,
        comprehensive_backup_name=env_config.COMPREHENSIVE_BACKUP_NAME,
        shell_process=env_config.SHELL_PROCESS,
        restart_attempts=max(1, env_config.RESTART_ATTEMPTS),
        restart_interval=max(0.0, env_config.RESTART_INTERVAL),
        log_file=env_config.LOG_FILE,
        debug=debug or env_config.DEBUG,
    )
