"""Process manager adapter (psutil) for restarting the shell."""

from __future__ import annotations

import logging
import subprocess

import psutil

logger = logging.getLogger(__name__)


class PsutilProcessManager:
    def _matching(self, name: str):
        wanted = name.lower()
        for proc in psutil.process_iter(["name"]):
            if (proc.info.get("name") or "").lower() == wanted:
                yield proc

    def is_running(self, name: str) -> bool:
        return any(True for _ in self._matching(name))

    def terminate(self, name: str) -> int:
        count = 0
        for proc in self._matching(name):
            try:
                proc.terminate()
                count += 1
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                logger.debug(f"Could not terminate {name} (pid {proc.pid}): {e}")
        return count

    def start(self, name: str) -> None:
        flags = getattr(subprocess, "DETACHED_PROCESS", 0)
        subprocess.Popen(
            [name],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=flags,
            close_fds=True,
        )
