from pathlib import Path

import pytest

from showtray.core.config_model import AppConfig
from showtray.core.errors import AccessDenied
from showtray.core.keys import ABSENT, ConfigKey
from showtray.core.ports import ProcessManager, RegistryStore, SettingsNotifier


class MemoryStore(RegistryStore):
    """In-memory HKCU with case-insensitive paths like the real registry."""

    def __init__(self):
        self.values = {}
        self.keys = {}
        self.denied = set()
        self.writes = []

    def _check(self, key: ConfigKey):
        if key.display in self.denied or key.path in self.denied:
            raise AccessDenied(key.display, "denied by test")

    def add_key(self, path: str) -> None:
        parts = path.split("\\")
        for i in range(1, len(parts) + 1):
            sub = "\\".join(parts[:i])
            self.keys.setdefault(sub.lower(), sub)

    def read(self, key: ConfigKey):
        return self.values.get((key.path.lower(), key.name.lower()), ABSENT)

    def write(self, key: ConfigKey, value) -> None:
        key.validate(value)
        self._check(key)
        self.add_key(key.path)
        self.values[(key.path.lower(), key.name.lower())] = value
        self.writes.append(("write", key.display, value))

    def delete(self, key: ConfigKey) -> None:
        self._check(key)
        self.values.pop((key.path.lower(), key.name.lower()), None)
        self.writes.append(("delete", key.display, None))

    def delete_tree(self, path: str) -> None:
        prefix = path.lower()
        for sub in [k for k in self.keys if k == prefix or k.startswith(prefix + "\\")]:
            del self.keys[sub]
        for value_key in [k for k in self.values if k[0] == prefix or k[0].startswith(prefix + "\\")]:
            del self.values[value_key]
        self.writes.append(("delete_tree", path, None))

    def subkeys(self, path: str) -> list[str]:
        prefix = path.lower() + "\\"
        return [
            original.split("\\")[-1]
            for lowered, original in self.keys.items()
            if lowered.startswith(prefix) and "\\" not in lowered[len(prefix):]
        ]


class FakeProcesses(ProcessManager):
    """Shell that exits some number of checks after being terminated."""

    def __init__(self, stop_after_checks=0, never_stops=False):
        self.running = True
        self.stop_after_checks = stop_after_checks
        self.never_stops = never_stops
        self.terminated = False
        self.checks = 0
        self.started = []

    def is_running(self, name: str) -> bool:
        if self.terminated and not self.never_stops:
            self.checks += 1
            if self.checks > self.stop_after_checks:
                self.running = False
        return self.running

    def terminate(self, name: str) -> int:
        self.terminated = True
        return 1

    def start(self, name: str) -> None:
        self.started.append(name)
        self.running = True
        self.terminated = False


class FakeNotifier(SettingsNotifier):
    def __init__(self):
        self.calls = []

    def broadcast(self, area: str) -> bool:
        self.calls.append(area)
        return True


def make_config(backup_dir: Path) -> AppConfig:
    return AppConfig(
        version="1.0.0",
        backup_dir=backup_dir,
        basic_backup_name="EnableAutoTray_backup.reg",
        comprehensive_backup_name="TrayIcons_backup.json",
        shell_process="explorer.exe",
        restart_attempts=3,
        restart_interval=0.0,
        log_file="",
        debug=False,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app_config(tmp_path):
    return make_config(tmp_path / "backups")
