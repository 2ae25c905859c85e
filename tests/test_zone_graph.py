"""
Tests for the per-zone mini graph shown in each zone's outcome panel.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spatial_classifier.canvas import CanvasSize
from spatial_classifier.config import LayoutConfig, ZoneGraphConfig
from spatial_classifier.exceptions import InvalidCanvasError
from spatial_classifier.seeding import make_rng
from spatial_classifier.state import Scenario, TaskNode
from spatial_classifier.store import ScenarioStore
from spatial_classifier.zone_graph import EMPTY_ZONE_PLACEHOLDER, ZoneGraphBoard, ZoneGraphSimulation
from spatial_classifier.zones import Zone


PANEL = CanvasSize(400, 300)
OPEN_PANEL = CanvasSize(800, 600)


def ai_nodes(count):
    return [TaskNode(id=f"a{i}", zone=Zone.AI) for i in range(count)]


class TestEmptyZone:
    """A zone without tasks shows a placeholder and never ticks."""

    def test_placeholder(self):
        graph = ZoneGraphSimulation([], Zone.HUMAN, PANEL)
        assert graph.is_empty
        assert graph.placeholder == EMPTY_ZONE_PLACEHOLDER
        assert graph.positions.shape == (0, 2)

    def test_tick_is_noop(self):
        graph = ZoneGraphSimulation([], Zone.HUMAN, PANEL)
        assert graph.tick() is False
        assert graph.run(100) == 0
        assert graph.tick_count == 0

    def test_populated_zone_has_no_placeholder(self):
        assert ZoneGraphSimulation(ai_nodes(1), Zone.AI, PANEL).placeholder is None


class TestZoneGraphLayout:
    """Charge, center pull, collision and padding clamp."""

    def test_seeded_around_center(self):
        graph = ZoneGraphSimulation(ai_nodes(8), Zone.AI, PANEL, rng=make_rng(3))
        offsets = graph.positions - np.array([200.0, 150.0])
        assert np.all(np.abs(offsets) <= 10.0)

    def test_zero_jitter_starts_on_center(self):
        config = LayoutConfig(zone_graph=ZoneGraphConfig(jitter_px=0.0))
        graph = ZoneGraphSimulation(ai_nodes(2), Zone.AI, PANEL, config=config)
        np.testing.assert_allclose(graph.positions, [[200.0, 150.0], [200.0, 150.0]])

    def test_coincident_seeds_separate(self):
        config = LayoutConfig(zone_graph=ZoneGraphConfig(jitter_px=0.0))
        graph = ZoneGraphSimulation(ai_nodes(2), Zone.AI, PANEL, config=config, rng=make_rng(0))
        graph.run(50)
        p = graph.positions
        assert np.linalg.norm(p[0] - p[1]) > 1.0

    def test_centroid_pulled_to_center(self):
        graph = ZoneGraphSimulation(ai_nodes(5), Zone.AI, OPEN_PANEL, rng=make_rng(11))
        graph.run(1000)
        np.testing.assert_allclose(graph.positions.mean(axis=0), [400.0, 300.0], atol=1.0)

    def test_nodes_do_not_overlap_after_settling(self):
        graph = ZoneGraphSimulation(ai_nodes(6), Zone.AI, OPEN_PANEL, rng=make_rng(5))
        graph.run(1000)
        p = graph.positions
        distances = np.linalg.norm(p[:, None, :] - p[None, :, :], axis=2)
        distances[np.eye(len(p), dtype=bool)] = np.inf
        assert distances.min() > 20.0

    def test_padding_clamp_on_crowded_panel(self):
        small = CanvasSize(120, 90)
        graph = ZoneGraphSimulation(ai_nodes(12), Zone.AI, small, rng=make_rng(2))
        inset = 16.0
        for _ in range(300):
            graph.tick()
            p = graph.positions
            assert np.all(p[:, 0] >= inset - 1e-9) and np.all(p[:, 0] <= 120 - inset + 1e-9)
            assert np.all(p[:, 1] >= inset - 1e-9) and np.all(p[:, 1] <= 90 - inset + 1e-9)

    def test_comes_to_rest(self):
        graph = ZoneGraphSimulation(ai_nodes(3), Zone.AI, PANEL)
        taken = graph.run(1000)
        assert graph.at_rest
        assert 0 < taken < 1000
        assert graph.tick() is False


class TestZoneGraphLifecycle:
    """Construction from a scenario, invalid panels and teardown."""

    def test_for_zone_takes_only_that_zone(self):
        scenario = Scenario(title="x", tasks=(
            TaskNode(id="a", zone=Zone.AI),
            TaskNode(id="s", zone=Zone.SHARED),
            TaskNode(id="h1", zone=Zone.HUMAN),
            TaskNode(id="h2", zone=Zone.HUMAN),
        ))
        graph = ZoneGraphSimulation.for_zone(scenario, Zone.HUMAN, PANEL)
        assert graph.zone == Zone.HUMAN
        assert graph.node_ids == ["h1", "h2"]

    def test_zero_panel_rejected(self):
        with pytest.raises(InvalidCanvasError):
            ZoneGraphSimulation(ai_nodes(1), Zone.AI, CanvasSize(0, 100))

    def test_stop_freezes_positions(self):
        graph = ZoneGraphSimulation(ai_nodes(4), Zone.AI, PANEL, rng=make_rng(1))
        graph.run(5)
        before = graph.positions
        graph.stop()
        graph.stop()
        assert graph.is_stopped
        assert graph.tick() is False
        np.testing.assert_array_equal(graph.positions, before)


class TestZoneGraphBoard:
    """One graph per zone, rebuilt only when that zone's members change."""

    def setup_method(self):
        self.store = ScenarioStore(Scenario(title="x", tasks=(
            TaskNode(id="a", zone=Zone.AI),
            TaskNode(id="s", zone=Zone.SHARED),
        )))
        self.board = ZoneGraphBoard(self.store, PANEL)

    def test_graph_per_zone(self):
        assert self.board.graph(Zone.AI).node_ids == ["a"]
        assert self.board.graph(Zone.SHARED).node_ids == ["s"]
        assert self.board.graph(Zone.HUMAN).placeholder == EMPTY_ZONE_PLACEHOLDER

    def test_zone_update_rebuilds_only_affected_zones(self):
        shared_before = self.board.graph(Zone.SHARED)
        ai_before = self.board.graph(Zone.AI)
        self.store.update_node_zone("a", Zone.HUMAN)

        assert self.board.graph(Zone.SHARED) is shared_before
        assert ai_before.is_stopped
        assert self.board.graph(Zone.AI).is_empty
        assert self.board.graph(Zone.HUMAN).node_ids == ["a"]

    def test_boundary_change_keeps_graphs(self):
        before = {zone: self.board.graph(zone) for zone in Zone}
        self.store.update_boundaries((40, 70))
        for zone in Zone:
            assert self.board.graph(zone) is before[zone]

    def test_collapsed_panel_has_no_graphs(self):
        self.board.set_panel_size(CanvasSize(0, 0))
        assert all(self.board.graph(zone) is None for zone in Zone)
        self.board.set_panel_size(PANEL)
        assert self.board.graph(Zone.AI).node_ids == ["a"]

    def test_teardown_stops_graphs_and_store_updates(self):
        ai_graph = self.board.graph(Zone.AI)
        self.board.teardown()
        assert ai_graph.is_stopped
        self.store.update_node_zone("a", Zone.HUMAN)
        assert self.board.graph(Zone.HUMAN) is None
        self.board.teardown()

    def test_tick_advances_populated_graphs_only(self):
        self.board.tick()
        assert self.board.graph(Zone.AI).tick_count == 1
        assert self.board.graph(Zone.SHARED).tick_count == 1
        assert self.board.graph(Zone.HUMAN).tick_count == 0
