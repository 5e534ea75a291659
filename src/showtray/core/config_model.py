"""Core configuration model (structured view)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    version: str
    backup_dir: Path
    basic_backup_name: str
    comprehensive_backup_name: str
    shell_process: str
    restart_attempts: int
    restart_interval: float
    log_file: str
    debug: bool

    @property
    def basic_backup_path(self) -> Path:
        return self.backup_dir / self.basic_backup_name

    @property
    def comprehensive_backup_path(self) -> Path:
        return self.backup_dir / self.comprehensive_backup_name
