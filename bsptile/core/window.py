"""
bsptile.core.window - Live handle to a Win32 top-level window.

A Window is the region type the Win32 host hands to the tiling engine.
Properties read from the OS on demand so the data is always fresh.
"""

from __future__ import annotations

import logging

from bsptile.core import win32
from bsptile.tiling.rect import Rect

log = logging.getLogger(__name__)


class Window:
    """
    Represents a single top-level window on the system.

    Equality and hashing are based solely on the HWND value, so every
    Window built for the same HWND is the same region for the tiling
    engine's index.
    """

    __slots__ = ("_hwnd",)

    def __init__(self, hwnd: int) -> None:
        self._hwnd = hwnd

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    @property
    def hwnd(self) -> int:
        return self._hwnd

    @property
    def is_valid(self) -> bool:
        """True if the underlying OS window still exists."""
        return win32.is_window_valid(self._hwnd)

    # ------------------------------------------------------------------
    # Descriptors (read live from OS)
    # ------------------------------------------------------------------
    @property
    def title(self) -> str:
        return win32.get_window_text(self._hwnd)

    @property
    def class_name(self) -> str:
        return win32.get_class_name(self._hwnd)

    @property
    def pid(self) -> int:
        return win32.get_window_pid(self._hwnd)

    @property
    def process_name(self) -> str:
        return win32.get_process_name(self.pid)

    @property
    def owner(self) -> int:
        """HWND of the owner window, 0 if unowned."""
        return win32.get_window_owner(self._hwnd)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def frame(self) -> Rect:
        return Rect.from_ltrb(*win32.get_window_rect(self._hwnd))

    # ------------------------------------------------------------------
    # Style flags
    # ------------------------------------------------------------------
    @property
    def style(self) -> int:
        return win32.get_window_style(self._hwnd)

    @property
    def ex_style(self) -> int:
        return win32.get_window_ex_style(self._hwnd)

    @property
    def is_visible(self) -> bool:
        return win32.is_window_visible(self._hwnd)

    @property
    def is_cloaked(self) -> bool:
        return win32.is_window_cloaked(self._hwnd)

    @property
    def is_minimized(self) -> bool:
        return win32.is_window_iconic(self._hwnd)

    @property
    def is_maximized(self) -> bool:
        return win32.is_window_zoomed(self._hwnd)

    @property
    def is_child(self) -> bool:
        return bool(self.style & win32.WS_CHILD)

    @property
    def is_tool_window(self) -> bool:
        return bool(self.ex_style & win32.WS_EX_TOOLWINDOW)

    @property
    def is_app_window(self) -> bool:
        return bool(self.ex_style & win32.WS_EX_APPWINDOW)

    @property
    def is_no_activate(self) -> bool:
        return bool(self.ex_style & win32.WS_EX_NOACTIVATE)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def restore(self) -> bool:
        return win32.show_window(self._hwnd, win32.SW_RESTORE)

    def move_resize(self, rect: Rect) -> bool:
        """Reposition and resize the window."""
        return win32.set_window_pos(self._hwnd, rect.x, rect.y, rect.w, rect.h)

    # ------------------------------------------------------------------
    # Dunder methods
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if isinstance(other, Window):
            return self._hwnd == other._hwnd
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._hwnd)

    def __repr__(self) -> str:
        title = self.title if self.is_valid else "<destroyed>"
        return f"Window(hwnd={self._hwnd:#010x}, title={title!r})"

    def __str__(self) -> str:
        if not self.is_valid:
            return f"[{self._hwnd:#010x}] <destroyed>"
        return f"[{self._hwnd:#010x}] {self.title!r} | {self.frame}"
