"""Registry keys showtray reads and writes.

All paths are relative to HKEY_CURRENT_USER.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import RegistryStore


class ValueKind(str, Enum):
    DWORD = "dword"
    BINARY = "binary"


class _Absent:
    """Marker for a value that does not exist in the registry."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

DWORD_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class ConfigKey:
    path: str
    name: str
    kind: ValueKind = ValueKind.DWORD
    description: str = ""

    @property
    def display(self) -> str:
        return f"HKCU\\{self.path}\\{self.name}"

    def validate(self, value) -> None:
        """Raise ValueError if value does not fit this key's kind."""
        if self.kind is ValueKind.DWORD:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{self.display} expects an integer, got {type(value).__name__}")
            if not 0 <= value <= DWORD_MAX:
                raise ValueError(f"{self.display} value {value} out of DWORD range")
        elif self.kind is ValueKind.BINARY:
            if not isinstance(value, (bytes, bytearray)):
                raise ValueError(f"{self.display} expects bytes, got {type(value).__name__}")


EXPLORER_PATH = r"Software\Microsoft\Windows\CurrentVersion\Explorer"
POLICIES_EXPLORER_PATH = r"Software\Microsoft\Windows\CurrentVersion\Policies\Explorer"
NOTIFY_ICON_SETTINGS_PATH = r"Control Panel\NotifyIconSettings"
TRAY_NOTIFY_PATH = (
    r"Software\Classes\Local Settings\Software\Microsoft\Windows\CurrentVersion\TrayNotify"
)

# EnableAutoTray: 0 = show all icons, 1 = auto-hide, absent = system default (auto-hide)
AUTO_TRAY = ConfigKey(EXPLORER_PATH, "EnableAutoTray", ValueKind.DWORD, "Hide inactive tray icons")
SHOW_ALL = 0
AUTO_HIDE = 1

SYSTEM_ICON_KEYS = (
    ConfigKey(POLICIES_EXPLORER_PATH, "HideSCAVolume", description="Volume icon"),
    ConfigKey(POLICIES_EXPLORER_PATH, "HideSCANetwork", description="Network icon"),
    ConfigKey(POLICIES_EXPLORER_PATH, "HideSCAPower", description="Power icon"),
    ConfigKey(POLICIES_EXPLORER_PATH, "HideSCAHealth", description="Security and maintenance icon"),
)
SYSTEM_ICON_VISIBLE = 0

TRAY_CACHE_KEYS = (
    ConfigKey(TRAY_NOTIFY_PATH, "IconStreams", ValueKind.BINARY, "Legacy icon cache"),
    ConfigKey(TRAY_NOTIFY_PATH, "PastIconsStream", ValueKind.BINARY, "Legacy past icon cache"),
)

IS_PROMOTED = "IsPromoted"
PROMOTED = 1


def promoted_key(icon_id: str) -> ConfigKey:
    return ConfigKey(
        f"{NOTIFY_ICON_SETTINGS_PATH}\\{icon_id}",
        IS_PROMOTED,
        ValueKind.DWORD,
        "Per-icon visibility",
    )


def icon_preference_keys(store: RegistryStore) -> list[ConfigKey]:
    """IsPromoted keys for every icon currently registered in NotifyIconSettings."""
    return [promoted_key(icon_id) for icon_id in store.subkeys(NOTIFY_ICON_SETTINGS_PATH)]


def basic_keys() -> list[ConfigKey]:
    return [AUTO_TRAY]


def comprehensive_keys(store: RegistryStore) -> list[ConfigKey]:
    return [AUTO_TRAY, *SYSTEM_ICON_KEYS, *TRAY_CACHE_KEYS, *icon_preference_keys(store)]


def describe_auto_tray(value) -> str:
    if value is ABSENT:
        return "default (auto-hide)"
    if value == SHOW_ALL:
        return "show all"
    if value == AUTO_HIDE:
        return "auto-hide"
    return f"unknown ({value})"
