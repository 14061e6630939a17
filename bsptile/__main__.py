"""
bsptile - Entry point.

Run with:  python -m bsptile
"""

import logging
import sys

from bsptile.config.settings import DEFAULT_SETTINGS
from bsptile.core.host import Win32Host
from bsptile.tiling.manager import TilingManager


class SafeStreamHandler(logging.StreamHandler):
    """Handler that replaces unencodable characters instead of crashing."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            enc = getattr(self.stream, "encoding", "utf-8") or "utf-8"
            safe = msg.encode(enc, errors="replace").decode(enc, errors="replace")
            self.stream.write(safe + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging() -> None:
    """Configure logging for the tiler."""
    fmt = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s"
    handler = SafeStreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    # Quiet down noisy loggers
    logging.getLogger("bsptile.core.filter").setLevel(logging.INFO)


def main() -> None:
    setup_logging()

    host = Win32Host()
    manager = TilingManager(host, DEFAULT_SETTINGS)

    # Connect notifications and tile the windows already open
    manager.enable()

    print("\n" + manager.dump_state() + "\n")
    print("=" * 60)
    print("  bsptile running. Press Ctrl+C to stop.")
    print(f"  Monitors (workspaces): {len(host.monitors)}")
    for index, monitor in enumerate(host.monitors):
        print(f"    {index}: {monitor.name} work area {monitor.work_rect}")
    print(f"  Gap: {manager.settings.gap_size}")
    print("=" * 60 + "\n")

    try:
        host.run()
    finally:
        manager.disable()


if __name__ == "__main__":
    main()
