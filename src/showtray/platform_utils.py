"""Platform detection and Windows session helpers for showtray"""

import getpass
import os
import platform
import sys

# Platform detection
IS_WINDOWS = sys.platform == "win32"

# First Windows 11 build; older builds still use the TrayNotify icon streams
WINDOWS_11_BUILD = 22000

_SERVICE_ACCOUNTS = {"system", "local service", "network service"}


def get_windows_build() -> int:
    """Return the Windows build number, or 0 when it cannot be determined."""
    if not IS_WINDOWS:
        return 0
    try:
        return sys.getwindowsversion().build
    except AttributeError:
        pass
    # "10.0.22631" -> 22631
    try:
        return int(platform.version().split(".")[-1])
    except ValueError:
        return 0


def current_user() -> str:
    try:
        return getpass.getuser()
    except Exception:
        return os.environ.get("USERNAME", "")


def is_interactive_session() -> bool:
    """Check that we run as a real user on Windows.

    HKCU of a service account is not the hive Explorer reads, so writing
    there would silently do nothing.
    """
    if not IS_WINDOWS:
        return False
    user = current_user()
    if not user or user.endswith("$"):
        return False
    return user.lower() not in _SERVICE_ACCOUNTS


def get_platform_info() -> dict:
    """Get detailed platform information."""
    return {
        "system": platform.system(),
        "release": platform.release(),
        "version": platform.version(),
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "host": platform.node(),
        "user": current_user(),
        "is_windows": IS_WINDOWS,
        "windows_build": get_windows_build(),
        "interactive_session": is_interactive_session(),
    }
