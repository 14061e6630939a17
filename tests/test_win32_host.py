"""Event dispatch of the Win32 host (Windows only)."""

import pytest

pytest.importorskip("win32api")

from bsptile.core import win32  # noqa: E402
from bsptile.core.host import Win32Host  # noqa: E402
from bsptile.core.monitor import Monitor  # noqa: E402
from bsptile.core.window import Window  # noqa: E402
from bsptile.tiling.host import HostEvent  # noqa: E402
from bsptile.tiling.rect import Rect  # noqa: E402

MONITORS = [
    Monitor("DISPLAY1", Rect(0, 0, 1920, 1080), Rect(0, 0, 1920, 1040), True),
    Monitor("DISPLAY2", Rect(1920, 0, 1280, 1024), Rect(1920, 0, 1280, 1024)),
]


@pytest.fixture()
def host():
    return Win32Host(monitors=MONITORS)


def _fire(host, event, hwnd, id_object=win32.OBJID_WINDOW, id_child=win32.CHILDID_SELF):
    host._on_win_event(0, event, hwnd, id_object, id_child, 0, 0)


def test_raw_events_are_translated(host):
    seen = []
    host.connect(HostEvent.REGION_CREATED, seen.append)
    _fire(host, win32.EVENT_OBJECT_CREATE, 0x1234)
    assert seen == [Window(0x1234)]


def test_child_objects_are_ignored(host):
    seen = []
    host.connect(HostEvent.REGION_CREATED, seen.append)
    _fire(host, win32.EVENT_OBJECT_CREATE, 0x1234, id_object=-4)
    _fire(host, win32.EVENT_OBJECT_CREATE, 0x1234, id_child=3)
    assert seen == []


def test_region_bound_handler_only_sees_its_window(host):
    seen = []
    host.connect(HostEvent.GEOMETRY_CHANGED, seen.append, Window(0x10))
    _fire(host, win32.EVENT_OBJECT_LOCATIONCHANGE, 0x20)
    _fire(host, win32.EVENT_SYSTEM_MOVESIZEEND, 0x10)
    assert seen == [Window(0x10)]


def test_disconnect(host):
    seen = []
    handler_id = host.connect(HostEvent.REGION_SHOWN, seen.append)
    host.disconnect(handler_id)
    _fire(host, win32.EVENT_OBJECT_SHOW, 0x1234)
    assert seen == []


def test_failing_callback_does_not_block_others(host, caplog):
    seen = []

    def boom(_window):
        raise ValueError("boom")

    host.connect(HostEvent.REGION_UNMANAGED, boom)
    host.connect(HostEvent.REGION_UNMANAGED, seen.append)
    _fire(host, win32.EVENT_OBJECT_DESTROY, 0x1234)
    assert seen == [Window(0x1234)]
    assert any(r.exc_info for r in caplog.records)


def test_work_area_per_monitor(host):
    assert host.work_area(0) == Rect(0, 0, 1920, 1040)
    assert host.work_area(1) == Rect(1920, 0, 1280, 1024)
    assert host.work_area(2) is None
