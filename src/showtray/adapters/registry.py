"""HKCU registry adapter built on winreg."""

from __future__ import annotations

import logging

from ..core.errors import AccessDenied
from ..core.keys import ABSENT, ConfigKey, ValueKind

logger = logging.getLogger(__name__)


class WinregRegistryStore:
    """RegistryStore for the current user's hive.

    The winreg module is imported lazily so the package can be imported
    (and tested with a stand-in module) on any platform.
    """

    def __init__(self, winreg_module=None):
        if winreg_module is None:
            import winreg as winreg_module
        self._winreg = winreg_module
        self._root = winreg_module.HKEY_CURRENT_USER
        self._types = {
            ValueKind.DWORD: winreg_module.REG_DWORD,
            ValueKind.BINARY: winreg_module.REG_BINARY,
        }

    def read(self, key: ConfigKey):
        w = self._winreg
        try:
            with w.OpenKey(self._root, key.path, 0, w.KEY_READ) as handle:
                data, value_type = w.QueryValueEx(handle, key.name)
        except FileNotFoundError:
            return ABSENT
        except PermissionError as e:
            raise AccessDenied(key.display, str(e)) from e

        expected = self._types[key.kind]
        if value_type != expected:
            logger.warning("%s has registry type %s, expected %s", key.display, value_type, expected)
            if key.kind is ValueKind.DWORD and isinstance(data, str) and data.strip().isdigit():
                return int(data.strip())
        return data

    def write(self, key: ConfigKey, value) -> None:
        key.validate(value)
        w = self._winreg
        try:
            with w.CreateKeyEx(self._root, key.path, 0, w.KEY_SET_VALUE) as handle:
                w.SetValueEx(handle, key.name, 0, self._types[key.kind], value)
        except PermissionError as e:
            raise AccessDenied(key.display, str(e)) from e
        logger.debug("Set %s = %r", key.display, value)

    def delete(self, key: ConfigKey) -> None:
        w = self._winreg
        try:
            with w.OpenKey(self._root, key.path, 0, w.KEY_SET_VALUE) as handle:
                w.DeleteValue(handle, key.name)
        except FileNotFoundError:
            logger.debug("%s already absent", key.display)
            return
        except PermissionError as e:
            raise AccessDenied(key.display, str(e)) from e
        logger.debug("Deleted %s", key.display)

    def delete_tree(self, path: str) -> None:
        w = self._winreg
        try:
            for child in self.subkeys(path):
                self.delete_tree(f"{path}\\{child}")
            w.DeleteKey(self._root, path)
        except FileNotFoundError:
            return
        except PermissionError as e:
            raise AccessDenied(f"HKCU\\{path}", str(e)) from e
        logger.debug("Deleted HKCU\\%s", path)

    def subkeys(self, path: str) -> list[str]:
        w = self._winreg
        try:
            with w.OpenKey(self._root, path, 0, w.KEY_READ) as handle:
                count = w.QueryInfoKey(handle)[0]
                return [w.EnumKey(handle, i) for i in range(count)]
        except FileNotFoundError:
            return []
        except PermissionError as e:
            raise AccessDenied(f"HKCU\\{path}", str(e)) from e
