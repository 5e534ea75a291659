"""Explorer restart with a bounded wait for termination."""

from __future__ import annotations

import logging
import time

from .errors import ProcessRestartTimeout
from .ports import ProcessManager

logger = logging.getLogger(__name__)


class ShellRestarter:
    """Terminate the shell, wait a bounded time, relaunch it if needed."""

    def __init__(
        self,
        processes: ProcessManager,
        process_name: str = "explorer.exe",
        attempts: int = 20,
        interval: float = 0.5,
        sleep=time.sleep,
    ):
        self._processes = processes
        self._name = process_name
        self._attempts = max(1, attempts)
        self._interval = interval
        self._sleep = sleep

    def _wait_until_stopped(self) -> bool:
        for _ in range(self._attempts):
            if not self._processes.is_running(self._name):
                return True
            self._sleep(self._interval)
        return not self._processes.is_running(self._name)

    def restart(self) -> list[str]:
        """Restart the shell. Returns warnings; never raises on timeout."""
        warnings: list[str] = []

        count = self._processes.terminate(self._name)
        logger.info("Signalled %d %s process(es)", count, self._name)

        if not self._wait_until_stopped():
            timeout = ProcessRestartTimeout(
                f"{self._name} still running after {self._attempts} checks; continuing"
            )
            logger.warning("%s", timeout)
            warnings.append(str(timeout))

        # Windows often relaunches the shell by itself once it dies
        if self._processes.is_running(self._name):
            logger.debug("%s already running again", self._name)
        else:
            self._processes.start(self._name)
            logger.info("Started %s", self._name)

        return warnings
