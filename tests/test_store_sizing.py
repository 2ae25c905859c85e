"""
Tests for the scenario store and sizing sources.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spatial_classifier.canvas import CanvasSize
from spatial_classifier.sizing import SizingSource
from spatial_classifier.state import Scenario, TaskNode
from spatial_classifier.store import ScenarioStore, StoreEvent
from spatial_classifier.zones import BoundaryPair, Zone


def make_store():
    scenario = Scenario(
        title="Demo",
        tasks=(TaskNode(id="a", zone=Zone.AI), TaskNode(id="b", zone=Zone.SHARED))
    )
    store = ScenarioStore(scenario, BoundaryPair(33, 66))
    events = []
    store.subscribe(events.append)
    return store, events


class TestScenarioStore:
    """Single-node zone updates and boundary updates."""

    def test_update_node_zone(self):
        store, events = make_store()
        assert store.update_node_zone("a", Zone.SHARED) is True
        assert store.scenario.get_node("a").zone == Zone.SHARED
        assert store.scenario.get_node("b").zone == Zone.SHARED
        assert events == [StoreEvent.NODE_ZONE_UPDATED]

    def test_update_node_zone_idempotent(self):
        store, events = make_store()
        store.update_node_zone("a", Zone.HUMAN)
        scenario = store.scenario
        assert store.update_node_zone("a", Zone.HUMAN) is False
        assert store.scenario is scenario
        assert events == [StoreEvent.NODE_ZONE_UPDATED]

    def test_update_accepts_zone_names(self):
        store, _ = make_store()
        store.update_node_zone("b", "human")
        assert store.scenario.get_node("b").zone == Zone.HUMAN

    def test_unknown_node_ignored(self):
        store, events = make_store()
        scenario = store.scenario
        assert store.update_node_zone("ghost", Zone.HUMAN) is False
        assert store.scenario is scenario
        assert events == []

    def test_empty_store_ignores_updates(self):
        store = ScenarioStore()
        assert store.update_node_zone("a", Zone.AI) is False
        assert store.boundaries == BoundaryPair(33, 66)

    def test_order_of_updates_does_not_matter(self):
        store1, _ = make_store()
        store2, _ = make_store()
        store1.update_node_zone("a", Zone.HUMAN)
        store1.update_node_zone("b", Zone.AI)
        store2.update_node_zone("b", Zone.AI)
        store2.update_node_zone("a", Zone.HUMAN)
        assert store1.scenario == store2.scenario

    def test_update_boundaries_clamped(self):
        store, events = make_store()
        pair = store.update_boundaries((5, 95))
        assert pair.as_tuple() == (10.0, 90.0)
        assert store.boundaries == pair
        assert events == [StoreEvent.BOUNDARIES_UPDATED]

    def test_same_boundaries_not_notified(self):
        store, events = make_store()
        store.update_boundaries((33, 66))
        assert events == []

    def test_move_boundary_keeps_gap(self):
        store, events = make_store()
        pair = store.move_boundary(1, 35)
        assert pair.as_tuple() == (33.0, 43.0)
        assert events == [StoreEvent.BOUNDARIES_UPDATED]

    def test_set_scenario_notifies(self):
        store, events = make_store()
        store.set_scenario(Scenario(title="Other"))
        assert store.scenario.title == "Other"
        assert events == [StoreEvent.SCENARIO_REPLACED]

    def test_unsubscribe(self):
        store = ScenarioStore(Scenario(title="x", tasks=(TaskNode(id="a"),)))
        events = []
        unsubscribe = store.subscribe(events.append)
        unsubscribe()
        store.update_node_zone("a", Zone.HUMAN)
        assert events == []


class TestSizingSource:
    """Push-based canvas size."""

    def test_observe_reports_known_size(self):
        source = SizingSource(CanvasSize(800, 600))
        seen = []
        source.observe(seen.append)
        assert seen == [CanvasSize(800, 600)]

    def test_unknown_size_not_reported(self):
        source = SizingSource()
        seen = []
        source.observe(seen.append)
        assert seen == []
        assert source.size is None

    def test_report_deduplicates(self):
        source = SizingSource()
        seen = []
        source.observe(seen.append)
        source.report(800, 600)
        source.report(800, 600)
        source.report(1024, 768)
        assert seen == [CanvasSize(800, 600), CanvasSize(1024, 768)]

    def test_disconnect(self):
        source = SizingSource()
        seen = []
        disconnect = source.observe(seen.append)
        assert source.observer_count == 1
        disconnect()
        disconnect()
        assert source.observer_count == 0
        source.report(800, 600)
        assert seen == []
