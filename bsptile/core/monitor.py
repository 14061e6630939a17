"""
bsptile.core.monitor - Monitor and work-area detection.

Uses win32api/win32con from pywin32 to read the work area of each
monitor (the monitor rectangle minus the taskbar and other reserved
bars).  The Win32 host treats each monitor as one workspace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import win32api
import win32con

from bsptile.tiling.rect import Rect

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Monitor:
    """
    A physical monitor attached to the system.

    Attributes:
        name:       Device name (e.g. r'\\\\.\\DISPLAY1').
        full_rect:  Whole monitor area.
        work_rect:  Work area (taskbar and reserved bars excluded).
        is_primary: True for the primary monitor.
    """

    name: str
    full_rect: Rect
    work_rect: Rect
    is_primary: bool = False


def get_monitors() -> list[Monitor]:
    """
    Enumerate all monitors.

    Returns:
        Monitors ordered primary first, then by device name.
    """
    monitors: list[Monitor] = []

    for hmonitor, _hdc, _rect in win32api.EnumDisplayMonitors(None, None):
        try:
            info = win32api.GetMonitorInfo(hmonitor)
        except Exception:
            log.warning("Could not read monitor info for %s", hmonitor)
            continue

        monitor = Monitor(
            name=info["Device"],
            full_rect=Rect.from_ltrb(*info["Monitor"]),
            work_rect=Rect.from_ltrb(*info["Work"]),
            is_primary=bool(info["Flags"] & win32con.MONITORINFOF_PRIMARY),
        )
        monitors.append(monitor)
        log.debug(
            "Monitor %s | full=%s | work=%s | primary=%s",
            monitor.name,
            monitor.full_rect,
            monitor.work_rect,
            monitor.is_primary,
        )

    monitors.sort(key=lambda m: (not m.is_primary, m.name))
    log.info("Monitors detected: %d", len(monitors))
    return monitors


def monitor_index_for_window(hwnd: int, monitors: list[Monitor]) -> Optional[int]:
    """
    Index in *monitors* of the monitor that holds most of *hwnd*.

    Returns None if the window is on no known monitor.
    """
    try:
        hmonitor = win32api.MonitorFromWindow(hwnd, win32con.MONITOR_DEFAULTTONULL)
        if not hmonitor:
            return None
        device = win32api.GetMonitorInfo(hmonitor)["Device"]
    except Exception:
        log.debug("MonitorFromWindow failed for %#010x", hwnd, exc_info=True)
        return None

    for index, monitor in enumerate(monitors):
        if monitor.name == device:
            return index
    return None
