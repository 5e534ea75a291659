import pytest

from showtray.adapters.registry import WinregRegistryStore
from showtray.core.errors import AccessDenied
from showtray.core.keys import ABSENT, AUTO_TRAY, TRAY_CACHE_KEYS, ConfigKey, ValueKind


class _Handle:
    def __init__(self, path):
        self.path = path

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class _FakeWinreg:
    """Just enough of the winreg module for WinregRegistryStore."""

    HKEY_CURRENT_USER = object()
    KEY_READ = 0x20019
    KEY_SET_VALUE = 0x0002
    REG_BINARY = 3
    REG_DWORD = 4
    REG_SZ = 1

    def __init__(self):
        self.keys = {}
        self.denied = set()

    def _lookup(self, path):
        try:
            return self.keys[path.lower()]
        except KeyError:
            raise FileNotFoundError(2, "The system cannot find the file specified") from None

    def OpenKey(self, root, path, reserved=0, access=KEY_READ):
        self._lookup(path)
        if access == self.KEY_SET_VALUE and path.lower() in self.denied:
            raise PermissionError(5, "Access is denied")
        return _Handle(path.lower())

    def CreateKeyEx(self, root, path, reserved=0, access=KEY_SET_VALUE):
        if path.lower() in self.denied:
            raise PermissionError(5, "Access is denied")
        parts = path.split("\\")
        for i in range(1, len(parts) + 1):
            sub = "\\".join(parts[:i])
            self.keys.setdefault(sub.lower(), {"name": parts[i - 1], "values": {}})
        return _Handle(path.lower())

    def QueryValueEx(self, handle, name):
        values = self.keys[handle.path]["values"]
        if name.lower() not in values:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        return values[name.lower()]

    def SetValueEx(self, handle, name, reserved, value_type, value):
        self.keys[handle.path]["values"][name.lower()] = (value, value_type)

    def DeleteValue(self, handle, name):
        values = self.keys[handle.path]["values"]
        if name.lower() not in values:
            raise FileNotFoundError(2, "The system cannot find the file specified")
        del values[name.lower()]

    def _children(self, path):
        prefix = path + "\\"
        return [k for k in self.keys if k.startswith(prefix) and "\\" not in k[len(prefix):]]

    def DeleteKey(self, root, path):
        self._lookup(path)
        if self._children(path.lower()):
            raise PermissionError(5, "Access is denied")
        del self.keys[path.lower()]

    def QueryInfoKey(self, handle):
        return (len(self._children(handle.path)), len(self.keys[handle.path]["values"]), 0)

    def EnumKey(self, handle, index):
        return self.keys[self._children(handle.path)[index]]["name"]


@pytest.fixture
def winreg():
    return _FakeWinreg()


@pytest.fixture
def registry(winreg):
    return WinregRegistryStore(winreg_module=winreg)


def test_write_then_read(registry):
    registry.write(AUTO_TRAY, 0)
    assert registry.read(AUTO_TRAY) == 0

    registry.write(AUTO_TRAY, 1)
    assert registry.read(AUTO_TRAY) == 1

    registry.write(TRAY_CACHE_KEYS[0], b"\x00\xff")
    assert registry.read(TRAY_CACHE_KEYS[0]) == b"\x00\xff"


def test_write_uses_registry_types(registry, winreg):
    registry.write(AUTO_TRAY, 0)
    registry.write(TRAY_CACHE_KEYS[0], b"\x01")

    assert winreg.keys[AUTO_TRAY.path.lower()]["values"]["enableautotray"] == (0, winreg.REG_DWORD)
    assert winreg.keys[TRAY_CACHE_KEYS[0].path.lower()]["values"]["iconstreams"][1] == winreg.REG_BINARY


def test_missing_path_or_value_reads_absent(registry):
    assert registry.read(AUTO_TRAY) is ABSENT

    registry.write(ConfigKey(AUTO_TRAY.path, "Other"), 5)
    assert registry.read(AUTO_TRAY) is ABSENT


def test_delete_tolerates_absent(registry):
    registry.delete(AUTO_TRAY)

    registry.write(AUTO_TRAY, 0)
    registry.delete(AUTO_TRAY)
    registry.delete(AUTO_TRAY)

    assert registry.read(AUTO_TRAY) is ABSENT


def test_write_denied_raises_access_denied(registry, winreg):
    winreg.denied.add(AUTO_TRAY.path.lower())

    with pytest.raises(AccessDenied):
        registry.write(AUTO_TRAY, 0)


def test_write_rejects_wrong_type(registry):
    with pytest.raises(ValueError):
        registry.write(AUTO_TRAY, "0")
    with pytest.raises(ValueError):
        registry.write(AUTO_TRAY, 0x1_0000_0000)
    with pytest.raises(ValueError):
        registry.write(TRAY_CACHE_KEYS[0], 1)


def test_subkeys_and_delete_tree(registry):
    base = r"Control Panel\NotifyIconSettings"
    registry.write(ConfigKey(base + r"\111", "IsPromoted"), 0)
    registry.write(ConfigKey(base + r"\222", "IsPromoted"), 1)
    registry.write(ConfigKey(base + r"\222\Nested", "X"), 1)

    assert sorted(registry.subkeys(base)) == ["111", "222"]
    assert registry.subkeys(r"Control Panel\Missing") == []

    registry.delete_tree(base + r"\222")

    assert registry.subkeys(base) == ["111"]
    registry.delete_tree(base + r"\222")


def test_string_dword_is_coerced(registry, winreg):
    winreg.CreateKeyEx(winreg.HKEY_CURRENT_USER, AUTO_TRAY.path)
    winreg.keys[AUTO_TRAY.path.lower()]["values"]["enableautotray"] = ("1", winreg.REG_SZ)

    assert registry.read(AUTO_TRAY) == 1


def test_kind_defaults_to_dword():
    assert ConfigKey("a", "b").kind is ValueKind.DWORD
