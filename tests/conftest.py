"""Shared fixtures: an in-memory host and a manager bound to it."""

from __future__ import annotations

import pytest

from bsptile.tiling.manager import TilingManager
from fakes import FakeHost


@pytest.fixture()
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture()
def manager(host: FakeHost) -> TilingManager:
    return TilingManager(host)
