"""Settings change broadcast via pywin32."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

BROADCAST_TIMEOUT_MS = 5000


class Win32SettingsNotifier:
    """Broadcast WM_SETTINGCHANGE so Explorer re-reads tray settings."""

    def broadcast(self, area: str) -> bool:
        try:
            import win32con
            import win32gui

            win32gui.SendMessageTimeout(
                win32con.HWND_BROADCAST,
                win32con.WM_SETTINGCHANGE,
                0,
                area,
                win32con.SMTO_ABORTIFHUNG,
                BROADCAST_TIMEOUT_MS,
            )
            return True
        except ImportError:
            logger.warning("pywin32 not installed - settings change broadcast unavailable")
        except Exception as e:
            logger.debug(f"WM_SETTINGCHANGE broadcast failed: {e}")
        return False
