"""
bsptile.core.filter - Which Win32 windows get tiled.

Two separate questions are answered here:

    should_tile(window) : eligibility policy.  A normal top-level
                          application window, not a taskbar-hidden tool
                          window, not a transient/dialog.  Checked once
                          when the window is created, before it is shown,
                          so it must not depend on visibility.
    is_ready(window)    : the window can receive geometry right now
                          (exists, visible, not cloaked, not minimized,
                          non-zero frame).
"""

from __future__ import annotations

import logging

from bsptile.core import win32
from bsptile.core.window import Window

log = logging.getLogger(__name__)

# ============================================================================
# Known system class names to ALWAYS ignore
# ============================================================================
IGNORED_CLASSES: frozenset[str] = frozenset({
    # Windows shell / explorer
    "Shell_TrayWnd",            # Taskbar
    "Shell_SecondaryTrayWnd",   # Secondary monitor taskbar
    "Progman",                  # Desktop Program Manager
    "WorkerW",                  # Desktop wallpaper worker
    "DV2ControlHost",           # Start menu
    "Windows.UI.Core.CoreWindow",  # Some UWP overlays

    # System UI
    "NotifyIconOverflowWindow", # System tray overflow
    "TopLevelWindowForOverflowXamlIsland",  # Tray overflow (Win11)
    "MultitaskingViewFrame",    # Alt-Tab / Task View
    "TaskListThumbnailWnd",     # Taskbar thumbnails
    "ForegroundStaging",        # Focus transition overlay

    # Transient surfaces
    "tooltips_class32",         # Tooltips
    "#32768",                   # Popup menus
    "#32769",                   # Desktop
    "#32770",                   # Standard dialog boxes
})

# Process names that are always excluded
IGNORED_PROCESSES: frozenset[str] = frozenset({
    "SearchHost.exe",
    "ShellExperienceHost.exe",
    "StartMenuExperienceHost.exe",
    "TextInputHost.exe",
    "LockApp.exe",
})


def should_tile(window: Window) -> bool:
    """
    Return True if *window* is a normal application window the tiling
    engine should track.

    The rules, in order:
        1. Must still exist (valid HWND).
        2. Must not be a child window.
        3. Must not be owned by another window (dialogs, popups).
        4. Class name must not be in the ignore list.
        5. Process name must not be in the ignore list.
        6. Must not be a tool window (hidden from the taskbar) unless it
           is also marked WS_EX_APPWINDOW.
        7. Must not have WS_EX_NOACTIVATE (non-interactive overlays).
        8. Must not be the shell or desktop window.
    """
    hwnd = window.hwnd

    if not window.is_valid:
        return False

    if window.is_child:
        return False

    if window.owner:
        log.debug("Filtered %#010x: owned (transient)", hwnd)
        return False

    cls = window.class_name
    if cls in IGNORED_CLASSES:
        log.debug("Filtered %#010x: ignored class %r", hwnd, cls)
        return False

    proc = window.process_name
    if proc in IGNORED_PROCESSES:
        log.debug("Filtered %#010x: ignored process %r", hwnd, proc)
        return False

    if window.is_tool_window and not window.is_app_window:
        log.debug("Filtered %#010x: tool window without APPWINDOW", hwnd)
        return False

    if window.is_no_activate:
        log.debug("Filtered %#010x: WS_EX_NOACTIVATE", hwnd)
        return False

    if hwnd in (win32.get_shell_window(), win32.get_desktop_window()):
        log.debug("Filtered %#010x: shell/desktop window", hwnd)
        return False

    return True


def is_ready(window: Window) -> bool:
    """True if *window* can be moved/resized right now."""
    if not window.is_valid:
        return False
    if not window.is_visible or window.is_cloaked:
        return False
    if window.is_minimized:
        return False
    return not window.frame.is_empty


def enumerate_windows() -> list[Window]:
    """Snapshot of every top-level window, unfiltered, in Z-order."""
    results: list[Window] = []

    def _callback(hwnd: int, _: int) -> bool:
        results.append(Window(hwnd))
        return True  # continue enumeration

    win32.enum_windows(_callback)
    return results
