"""
bsptile.core.host - Win32Host: the tiling engine's host on Windows.

Win32Host implements `bsptile.tiling.host.Host` on top of the Win32 API:

  1. Installs a WinEventHook and translates raw WinEvents into
     HostEvent notifications (created, shown, destroyed, moved/resized,
     foreground changed) for top-level windows only.
  2. Keeps the subscriber table the tiling engine connects to, with
     per-window subscriptions for the region-bound events.
  3. Answers queries (frame, eligibility, readiness, monitor) and runs
     move/resize commands.
  4. Runs the blocking Win32 message loop until stop() is called.

Each monitor is one workspace: workspace N is monitor N in the order
returned by get_monitors() (primary first).
"""

from __future__ import annotations

import itertools
import logging
import signal
from dataclasses import dataclass
from typing import Optional

from bsptile.core import win32
from bsptile.core.filter import enumerate_windows, is_ready, should_tile
from bsptile.core.monitor import Monitor, get_monitors, monitor_index_for_window
from bsptile.core.window import Window
from bsptile.tiling.host import Host, HostCallback, HostError, HostEvent
from bsptile.tiling.rect import Rect

log = logging.getLogger(__name__)


# Raw WinEvent -> HostEvent
_EVENT_MAP: dict[int, HostEvent] = {
    win32.EVENT_OBJECT_CREATE: HostEvent.REGION_CREATED,
    win32.EVENT_OBJECT_SHOW: HostEvent.REGION_SHOWN,
    win32.EVENT_OBJECT_DESTROY: HostEvent.REGION_UNMANAGED,
    win32.EVENT_OBJECT_LOCATIONCHANGE: HostEvent.GEOMETRY_CHANGED,
    win32.EVENT_SYSTEM_MOVESIZEEND: HostEvent.GEOMETRY_CHANGED,
    win32.EVENT_SYSTEM_FOREGROUND: HostEvent.FOCUS_CHANGED,
}


@dataclass(slots=True)
class _Handler:
    event: HostEvent
    callback: HostCallback
    region: Optional[Window]


class Win32Host(Host):
    """
    Host implementation backed by a WinEvent hook.

    Usage:
        host = Win32Host()
        manager = TilingManager(host)
        manager.enable()
        host.run()   # blocks in the Win32 message loop
    """

    def __init__(self, monitors: list[Monitor] | None = None) -> None:
        self._monitors = monitors if monitors is not None else get_monitors()
        if not self._monitors:
            raise RuntimeError("No monitors detected")

        # Subscribers indexed by event, then by handler id
        self._handlers: dict[HostEvent, dict[int, _Handler]] = {
            ev: {} for ev in HostEvent
        }
        self._ids = itertools.count(1)

        # WinEvent hook handle (set when running)
        self._hook_handle: int = 0

        # Must prevent GC of the ctypes callback
        self._hook_proc: Optional[win32.WinEventProc] = None

        self._running: bool = False

        # Thread ID of the message loop (needed for cross-thread stop)
        self._loop_thread_id: int = 0

    @property
    def monitors(self) -> list[Monitor]:
        return list(self._monitors)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def connect(
        self,
        event: HostEvent,
        callback: HostCallback,
        region: Optional[Window] = None,
    ) -> int:
        handler_id = next(self._ids)
        self._handlers[event][handler_id] = _Handler(event, callback, region)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        for handlers in self._handlers.values():
            if handlers.pop(handler_id, None) is not None:
                return

    def _emit(self, event: HostEvent, window: Window) -> None:
        # Copy: callbacks may disconnect themselves (one-shot "shown")
        for handler in list(self._handlers[event].values()):
            if handler.region is not None and handler.region != window:
                continue
            try:
                handler.callback(handler.region or window)
            except Exception:
                log.exception(
                    "Error in host callback for %s on %s", event.value, window
                )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def active_workspace(self) -> int:
        """Monitor of the foreground window (primary if unknown)."""
        fg_hwnd = win32.get_foreground_window()
        if fg_hwnd:
            index = monitor_index_for_window(fg_hwnd, self._monitors)
            if index is not None:
                return index
        return 0

    def list_regions(self, workspace: int) -> list[Window]:
        return [
            w for w in enumerate_windows()
            if monitor_index_for_window(w.hwnd, self._monitors) == workspace
        ]

    def focused_region(self) -> Optional[Window]:
        fg_hwnd = win32.get_foreground_window()
        return Window(fg_hwnd) if fg_hwnd else None

    def workspace_of(self, region: Window) -> Optional[int]:
        return monitor_index_for_window(region.hwnd, self._monitors)

    def frame_rect(self, region: Window) -> Optional[Rect]:
        if not region.is_valid:
            return None
        return region.frame

    def is_ready(self, region: Window) -> bool:
        return is_ready(region)

    def should_tile(self, region: Window) -> bool:
        return should_tile(region)

    def work_area(self, workspace: int) -> Optional[Rect]:
        if 0 <= workspace < len(self._monitors):
            return self._monitors[workspace].work_rect
        return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def move_resize(self, region: Window, rect: Rect) -> None:
        if not region.move_resize(rect):
            raise HostError(f"SetWindowPos failed for {region!r} -> {rect}")

    def unmaximize(self, region: Window) -> None:
        if region.is_maximized:
            region.restore()

    # ------------------------------------------------------------------
    # Internal: WinEvent callback
    # ------------------------------------------------------------------
    def _on_win_event(
        self,
        hook: int,
        event: int,
        hwnd: int,
        id_object: int,
        id_child: int,
        event_thread: int,
        event_time: int,
    ) -> None:
        """
        Raw WinEvent callback dispatched by the OS.

        Only events on top-level windows (id_object == OBJID_WINDOW and
        id_child == CHILDID_SELF) are forwarded.
        """
        if id_object != win32.OBJID_WINDOW:
            return
        if id_child != win32.CHILDID_SELF:
            return
        if not hwnd:
            return

        host_event = _EVENT_MAP.get(event)
        if host_event is None:
            return

        try:
            self._emit(host_event, Window(hwnd))
        except Exception:
            log.exception("Error handling event %#06x for hwnd %#010x", event, hwnd)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def run(self) -> None:
        """
        Install the WinEvent hook and enter the Win32 message loop.

        Blocks until stop() is called or SIGINT/SIGTERM is received.
        """
        win32.co_initialize()

        self._hook_proc = win32.WinEventProc(self._on_win_event)
        self._hook_handle = win32.set_win_event_hook(
            event_min=win32.EVENT_MIN,
            event_max=win32.EVENT_MAX,
            callback=self._hook_proc,
        )

        if not self._hook_handle:
            log.error("Failed to install WinEvent hook!")
            win32.co_uninitialize()
            raise RuntimeError("SetWinEventHook failed")

        log.info("WinEvent hook installed (handle=%#x)", self._hook_handle)

        def _signal_handler(sig: int, frame: object) -> None:
            log.info("Signal %d received, stopping...", sig)
            self.stop()

        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)

        self._running = True
        self._loop_thread_id = win32.get_current_thread_id()
        log.info("Entering message loop")

        while self._running:
            got_msg, msg = win32.get_message()
            if not got_msg:
                break
            win32.translate_and_dispatch(msg)

        self._cleanup()
        log.info("Message loop stopped")

    def stop(self) -> None:
        """
        Request the message loop to stop.
        Safe to call from any thread or from within a callback.
        """
        self._running = False
        if self._loop_thread_id:
            win32.post_thread_message(self._loop_thread_id, win32.WM_QUIT, 0, 0)
        else:
            win32.post_quit_message(0)

    def _cleanup(self) -> None:
        if self._hook_handle:
            win32.unhook_win_event(self._hook_handle)
            self._hook_handle = 0
            log.info("WinEvent hook removed")

        self._hook_proc = None
        self._loop_thread_id = 0
        win32.co_uninitialize()
