"""Configuration for showtray"""

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Environment-driven settings"""

    # Snapshot files live in the platform temp directory unless overridden
    BACKUP_DIR = Path(os.getenv("SHOWTRAY_BACKUP_DIR", "") or Path(tempfile.gettempdir()) / "showtray")
    BASIC_BACKUP_NAME = "EnableAutoTray_backup.reg"
    COMPREHENSIVE_BACKUP_NAME = "TrayIcons_backup.json"

    # Explorer restart polling
    SHELL_PROCESS = os.getenv("SHOWTRAY_SHELL_PROCESS", "explorer.exe")
    RESTART_ATTEMPTS = int(os.getenv("SHOWTRAY_RESTART_ATTEMPTS", "20"))
    RESTART_INTERVAL = float(os.getenv("SHOWTRAY_RESTART_INTERVAL", "0.5"))

    # Logging
    LOG_FILE = os.getenv("SHOWTRAY_LOG_FILE", "")
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"


config = Config()
