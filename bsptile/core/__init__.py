"""
bsptile.core - Win32 host for the tiling engine.

This package contains:
    - win32   : Low-level Win32 API bindings via ctypes
    - window  : The Window handle (the region type on Windows)
    - filter  : Which windows get tiled, and when they are ready
    - monitor : Monitor / work-area detection via pywin32
    - host    : Win32Host - WinEvent hook, message loop and commands
"""

from bsptile.core.window import Window
from bsptile.core.host import Win32Host

__all__ = ["Window", "Win32Host"]
