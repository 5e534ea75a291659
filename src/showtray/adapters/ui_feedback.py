"""Console output adapter."""

from __future__ import annotations

import sys

from ..core.ports import Reporter


class ConsoleReporter(Reporter):
    def __init__(self, stream=None, quiet: bool = False):
        self._stream = stream or sys.stdout
        self._quiet = quiet

    def _print(self, message: str) -> None:
        print(message, file=self._stream)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._print(f"  {message}")

    def success(self, message: str) -> None:
        self._print(f"✓ {message}")

    def warning(self, message: str) -> None:
        self._print(f"⚠ {message}")

    def error(self, message: str) -> None:
        self._print(f"✗ {message}")

    def report(self, result) -> None:
        """Print an ActionResult."""
        if result.success:
            self.success(result.message)
        else:
            self.error(result.message)
        for line in result.details:
            self.info(line)
        for line in result.warnings:
            self.warning(line)
