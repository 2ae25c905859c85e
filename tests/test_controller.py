"""
Tests for the layout controller: rebuilds, write-back and teardown.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spatial_classifier.canvas import CanvasSize
from spatial_classifier.controller import LayoutController
from spatial_classifier.rendering import EDGE_OPACITY
from spatial_classifier.sizing import SizingSource
from spatial_classifier.state import Scenario, TaskNode
from spatial_classifier.store import ScenarioStore
from spatial_classifier.zones import BoundaryPair, Zone


def make_scenario(title="Demo"):
    return Scenario(
        title=title,
        tasks=(
            TaskNode(id="a1", zone=Zone.AI),
            TaskNode(id="a2", zone=Zone.AI, dependencies=("a1",)),
            TaskNode(id="s1", zone=Zone.SHARED, dependencies=("a1",)),
            TaskNode(id="h1", zone=Zone.HUMAN, dependencies=("s1",)),
        )
    )


def make_view(initial_size=None):
    store = ScenarioStore(make_scenario(), BoundaryPair(33, 66))
    sizing = SizingSource(initial_size)
    controller = LayoutController(store)
    controller.attach_sizing_source(sizing)
    return store, sizing, controller


class TestCanvasReadiness:
    """No simulation exists while the canvas has no area."""

    def test_zero_size_inactive(self):
        _, _, controller = make_view(CanvasSize(0, 0))
        assert not controller.is_active
        assert controller.frame() == []
        assert controller.snapshot() is None

    def test_no_size_yet_inactive(self):
        _, _, controller = make_view()
        assert not controller.is_active

    def test_becomes_active_on_first_real_size(self):
        _, sizing, controller = make_view(CanvasSize(0, 0))
        sizing.report(800, 600)
        assert controller.is_active
        assert controller.rebuild_count == 1
        assert controller.simulation.canvas == CanvasSize(800, 600)

    def test_collapse_to_zero_stops_simulation(self):
        _, sizing, controller = make_view(CanvasSize(800, 600))
        sim = controller.simulation
        sizing.report(0, 600)
        assert not controller.is_active
        assert sim.is_stopped

    def test_interaction_while_inactive_is_noop(self):
        store, _, controller = make_view(CanvasSize(0, 0))
        controller.start_drag("a1")
        controller.drag_to("a1", 100, 100)
        controller.end_drag("a1")
        assert controller.move_boundary(0, 100) == store.boundaries


class TestRebuilds:
    """New size or new scenario replaces the simulation."""

    def test_resize_rebuilds(self):
        _, sizing, controller = make_view(CanvasSize(800, 600))
        old = controller.simulation
        sizing.report(1024, 768)

        assert controller.rebuild_count == 2
        assert old.is_stopped
        assert controller.simulation is not old
        assert controller.simulation.canvas == CanvasSize(1024, 768)

    def test_same_size_does_not_rebuild(self):
        _, sizing, controller = make_view(CanvasSize(800, 600))
        sizing.report(800, 600)
        assert controller.rebuild_count == 1

    def test_scenario_replacement_rebuilds(self):
        store, _, controller = make_view(CanvasSize(800, 600))
        old = controller.simulation
        store.set_scenario(Scenario(title="Next", tasks=(TaskNode(id="x", zone=Zone.HUMAN),)))

        assert old.is_stopped
        assert [n.id for n in controller.simulation.nodes] == ["x"]

    def test_scenario_cleared_goes_inactive(self):
        store, _, controller = make_view(CanvasSize(800, 600))
        store.set_scenario(None)
        assert not controller.is_active

    def test_on_rebuild_callback(self):
        store = ScenarioStore(make_scenario())
        built = []
        controller = LayoutController(store, on_rebuild=built.append)
        sizing = SizingSource()
        controller.attach_sizing_source(sizing)
        sizing.report(800, 600)
        sizing.report(0, 0)
        assert built[0] is not None
        assert built[1] is None

    def test_old_simulation_no_longer_writes_back(self):
        store, sizing, controller = make_view(CanvasSize(800, 600))
        old = controller.simulation
        sizing.report(1024, 768)

        old.apply_drag("a1", 700.0, 230.0)
        old.tick()
        assert store.scenario.get_node("a1").zone == Zone.AI


class TestWriteBack:
    """Zone changes flow back to the store without a rebuild."""

    def test_drag_across_lanes_updates_store(self):
        store, _, controller = make_view(CanvasSize(800, 600))
        controller.start_drag("a1")
        controller.drag_to("a1", 700.0, 230.0)
        events = controller.frame()
        controller.end_drag("a1")

        assert [(e.previous, e.zone) for e in events if e.node_id == "a1"] == [
            (Zone.AI, Zone.SHARED),
            (Zone.SHARED, Zone.HUMAN),
        ]
        assert store.scenario.get_node("a1").zone == Zone.HUMAN
        assert controller.rebuild_count == 1

    def test_store_boundaries_forwarded(self):
        store, _, controller = make_view(CanvasSize(800, 600))
        sim = controller.simulation
        store.update_boundaries((40, 60))

        assert controller.simulation is sim
        assert sim.boundaries == BoundaryPair(40, 60)

    def test_move_boundary_from_pixels(self):
        store, _, controller = make_view(CanvasSize(800, 600))
        pair = controller.move_boundary(0, 400.0)

        assert pair.as_tuple() == (50.0, 66.0)
        assert store.boundaries == pair
        assert controller.simulation.boundaries == pair


class TestTeardown:
    """Teardown stops everything synchronously."""

    def test_teardown_detaches(self):
        store, sizing, controller = make_view(CanvasSize(800, 600))
        sim = controller.simulation
        controller.teardown()

        assert sim.is_stopped
        assert controller.is_torn_down
        assert not controller.is_active
        assert sizing.observer_count == 0

        sizing.report(1024, 768)
        store.set_scenario(make_scenario("Later"))
        assert controller.simulation is None
        assert controller.frame() == []

    def test_teardown_twice(self):
        _, _, controller = make_view(CanvasSize(800, 600))
        controller.teardown()
        controller.teardown()
        assert controller.is_torn_down

    def test_detach_sizing_source(self):
        _, sizing, controller = make_view(CanvasSize(800, 600))
        sim = controller.simulation
        controller.detach_sizing_source()
        assert sim.is_stopped
        assert not controller.is_active
        assert sizing.observer_count == 0


class TestSnapshot:
    """Renderer-facing frame."""

    def test_snapshot_contents(self):
        _, _, controller = make_view(CanvasSize(800, 600))
        events = controller.frame()
        snap = controller.snapshot(events)

        assert set(snap.positions) == {"a1", "a2", "s1", "h1"}
        assert snap.zones["h1"] == Zone.HUMAN
        assert snap.tick == 1
        assert snap.boundaries == BoundaryPair(33, 66)
        assert snap.dragged_node is None

    def test_edge_styles(self):
        _, _, controller = make_view(CanvasSize(800, 600))
        styles = {(e.source, e.target): s for e, s in controller.snapshot().edges}

        assert styles[("a1", "a2")].opacity == pytest.approx(EDGE_OPACITY)
        assert not styles[("a1", "s1")].visible
        assert not styles[("s1", "h1")].visible
