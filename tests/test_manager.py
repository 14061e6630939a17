"""Tests for TilingManager insertion, removal and retile."""

import random

import pytest

from bsptile.config.settings import TilingSettings
from bsptile.tiling.manager import TilingManager
from bsptile.tiling.rect import Rect
from bsptile.tiling.tree import SplitAxis, TreeInvariantError
from fakes import FakeHost, FakeRegion, assert_partition


@pytest.fixture()
def abc():
    return FakeRegion("A"), FakeRegion("B"), FakeRegion("C")


def _rect(manager, region):
    return manager.node_for(region).rect


class TestScenarios:
    def test_first_region_is_root_with_full_work_area(self, manager, host):
        a = FakeRegion("A")
        assert manager.insert(a)

        root = manager.tree(0)
        assert root is manager.node_for(a)
        assert root.parent is None
        assert root.rect == Rect(0, 0, 1000, 800)
        assert host.moves(a) == [Rect(2, 2, 996, 796)]

    def test_second_region_splits_wide_target_vertically(self, manager, abc):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b, target=a)

        root = manager.tree(0)
        assert root.is_container()
        assert root.axis is SplitAxis.VERTICAL
        assert root.first is manager.node_for(a)
        assert root.second is manager.node_for(b)
        assert _rect(manager, a) == Rect(0, 0, 500, 800)
        assert _rect(manager, b) == Rect(500, 0, 500, 800)

    def test_third_region_splits_tall_target_horizontally(self, manager, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b, target=a)
        manager.insert(c, target=b)

        b_parent = manager.node_for(b).parent
        assert b_parent.axis is SplitAxis.HORIZONTAL
        assert b_parent.parent is manager.tree(0)
        assert _rect(manager, a) == Rect(0, 0, 500, 800)
        assert _rect(manager, b) == Rect(500, 0, 500, 400)
        assert _rect(manager, c) == Rect(500, 400, 500, 400)

    def test_remove_promotes_sibling(self, manager, host, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b, target=a)
        manager.insert(c, target=b)

        assert manager.remove(b)

        root = manager.tree(0)
        assert root.axis is SplitAxis.VERTICAL
        assert root.first is manager.node_for(a)
        assert root.second is manager.node_for(c)
        assert manager.node_for(c).parent is root
        assert _rect(manager, a) == Rect(0, 0, 500, 800)
        assert _rect(manager, c) == Rect(500, 0, 500, 800)
        assert len(root.leaves()) == 2
        assert host.moves(c)[-1] == Rect(502, 2, 496, 796)
        manager.check_invariants()


class TestInsert:
    def test_insert_twice_is_noop(self, manager, host, abc):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b, target=a)
        before = manager.dump_state()
        commands = len(host.commands)

        assert not manager.insert(b, target=a)
        assert manager.dump_state() == before
        assert len(host.commands) == commands

    def test_region_without_workspace_is_ignored(self, manager, host):
        floating = FakeRegion("floating", workspace=None)
        assert not manager.insert(floating)
        assert not manager.contains(floating)
        assert host.handlers == {}

    def test_without_hint_splits_last_leaf(self, manager, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b)
        manager.insert(c)
        # B was the last leaf: C is split off B
        assert manager.node_for(c).sibling() is manager.node_for(b)

    def test_unknown_hint_falls_back_to_last_leaf(self, manager, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b)
        manager.insert(c, target=FakeRegion("stranger"))
        assert manager.node_for(c).sibling() is manager.node_for(b)

    def test_hint_on_another_workspace_falls_back(self):
        host = FakeHost(work_areas={0: Rect(0, 0, 1000, 800), 1: Rect(1000, 0, 800, 600)})
        manager = TilingManager(host)
        a, b = FakeRegion("A"), FakeRegion("B")
        other = FakeRegion("other", workspace=1)
        manager.insert(a)
        manager.insert(b)
        manager.insert(other)

        c = FakeRegion("C")
        manager.insert(c, target=other)
        assert manager.node_for(c).sibling() is manager.node_for(b)
        assert manager.regions(1) == [other]
        assert _rect(manager, other) == Rect(1000, 0, 800, 600)

    def test_hint_targets_the_focused_leaf(self, manager, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b)
        manager.insert(c, target=a)
        assert manager.node_for(c).sibling() is manager.node_for(a)
        assert _rect(manager, a) == Rect(0, 0, 500, 400)
        assert _rect(manager, c) == Rect(0, 400, 500, 400)

    def test_configured_ratio_is_used_for_new_containers(self, host, abc):
        manager = TilingManager(host, TilingSettings(split_ratio=0.25))
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b)
        assert manager.tree(0).ratio == 0.25
        assert _rect(manager, a) == Rect(0, 0, 250, 800)

    def test_every_region_is_applied_after_insert(self, manager, host, abc):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b)
        host.commands.clear()
        manager.insert(c)
        moved = {cmd[1] for cmd in host.commands if cmd[0] == "move_resize"}
        assert moved == {a, b, c}


class TestRemove:
    def test_remove_unknown_is_noop(self, manager, abc):
        a, b, _ = abc
        manager.insert(a)
        assert not manager.remove(b)
        assert manager.regions(0) == [a]

    def test_remove_last_region_clears_workspace(self, manager, host):
        a = FakeRegion("A")
        manager.insert(a)
        commands = len(host.commands)

        assert manager.remove(a)
        assert manager.tree(0) is None
        assert manager.workspaces == []
        assert manager.region_count == 0
        assert len(host.commands) == commands

    def test_remove_root_child_makes_sibling_root(self, manager, abc):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b)
        manager.remove(a)

        root = manager.tree(0)
        assert root is manager.node_for(b)
        assert root.parent is None
        assert root.rect == Rect(0, 0, 1000, 800)

    def test_remove_releases_region_subscriptions(self, manager, host, abc):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b)
        assert host.handler_count(region=b) > 0

        manager.remove(b)
        assert host.handler_count(region=b) == 0

    def test_missing_sibling_is_repaired(self, manager, host, abc, caplog):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b)
        manager.tree(0).second = None  # corrupt: container left with one child

        with caplog.at_level("ERROR"):
            assert manager.remove(a)

        assert manager.tree(0) is None
        assert any("hermana" in r.getMessage() for r in caplog.records)

    def test_missing_sibling_below_root_detaches_parent(self, manager, host, abc, caplog):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b, target=a)
        manager.insert(c, target=b)
        root = manager.tree(0)
        inner = manager.node_for(b).parent
        inner.second = None  # corrupt: C's slot emptied
        host.commands.clear()

        with caplog.at_level("ERROR"):
            assert manager.remove(b)

        assert any(
            r.levelname == "ERROR" and "hermana" in r.getMessage()
            for r in caplog.records
        )
        # The broken container is gone; the root keeps A and one empty slot
        assert manager.tree(0) is root
        assert root.first is manager.node_for(a)
        assert root.second is None
        assert inner.parent is None
        assert host.moves(a) == [Rect(2, 2, 496, 796)]
        with pytest.raises(TreeInvariantError):
            manager.check_invariants()


class TestRetile:
    def test_unready_region_is_skipped(self, manager, host, abc):
        a, b, _ = abc
        b.ready = False
        manager.insert(a)
        manager.insert(b)

        assert host.moves(b) == []
        assert _rect(manager, b) == Rect(500, 0, 500, 800)
        assert host.moves(a)[-1] == Rect(2, 2, 496, 796)

    def test_zero_size_frame_is_skipped(self, manager, host):
        a = FakeRegion("A", frame=Rect(0, 0, 0, 0))
        manager.insert(a)
        assert host.moves(a) == []

    def test_move_failure_does_not_stop_siblings(self, manager, host, abc, caplog):
        a, b, c = abc
        manager.insert(a)
        manager.insert(b)
        host.fail_move.add(a)
        host.commands.clear()

        with caplog.at_level("ERROR"):
            manager.insert(c)

        assert host.moves(b) and host.moves(c)
        assert any(r.exc_info for r in caplog.records)

    def test_unmaximize_failure_is_ignored(self, manager, host):
        a = FakeRegion("A")
        host.fail_unmaximize.add(a)
        manager.insert(a)
        assert host.moves(a) == [Rect(2, 2, 996, 796)]

    def test_unmaximize_precedes_move(self, manager, host):
        a = FakeRegion("A")
        a.maximized = True
        manager.insert(a)
        assert [cmd[0] for cmd in host.commands] == ["unmaximize", "move_resize"]
        assert not a.maximized

    def test_workspace_without_work_area_is_not_applied(self, caplog):
        host = FakeHost(work_areas={})
        manager = TilingManager(host)
        a = FakeRegion("A")
        with caplog.at_level("WARNING"):
            manager.insert(a)
        assert manager.contains(a)
        assert host.commands == []
        assert manager.node_for(a).rect is None

    def test_retile_all_reapplies(self, manager, host, abc):
        a, b, _ = abc
        manager.insert(a)
        manager.insert(b)
        host.commands.clear()
        manager.retile_all()
        assert host.moves(a) == [Rect(2, 2, 496, 796)]
        assert host.moves(b) == [Rect(502, 2, 496, 796)]


class TestProperties:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_invariants_hold_for_random_sequences(self, seed):
        rng = random.Random(seed)
        host = FakeHost()
        manager = TilingManager(host)
        live: list[FakeRegion] = []

        for step in range(200):
            if live and rng.random() < 0.4:
                region = live.pop(rng.randrange(len(live)))
                assert manager.remove(region)
            else:
                region = FakeRegion(f"r{step}")
                hint = rng.choice(live) if live and rng.random() < 0.8 else None
                assert manager.insert(region, target=hint)
                live.append(region)

            manager.check_invariants()
            assert manager.region_count == len(live)
            root = manager.tree(0)
            if live:
                assert root is not None
                assert_partition(root)
                assert set(manager.regions(0)) == set(live)
            else:
                assert root is None

    def test_same_operations_give_same_layout(self):
        def build():
            host = FakeHost()
            manager = TilingManager(host)
            regions = [FakeRegion(str(i)) for i in range(8)]
            manager.insert(regions[0])
            for i in range(1, 8):
                manager.insert(regions[i], target=regions[i // 2])
            manager.remove(regions[4])
            return [
                (r.name, manager.node_for(r).rect) for r in manager.regions(0)
            ]

        assert build() == build()
