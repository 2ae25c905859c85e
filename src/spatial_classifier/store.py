"""
Scenario store: the externally-owned scenario and boundary state.

The layout reads scenarios and boundaries from here and writes back only
single-node zone updates. Every update replaces the stored ``Scenario``
with a new immutable value.
"""

from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from .logger.logger import Logger
from .state import Scenario
from .zones import BoundaryPair, Zone


class StoreEvent(Enum):
    """What changed in the store."""
    SCENARIO_REPLACED = auto()
    NODE_ZONE_UPDATED = auto()
    BOUNDARIES_UPDATED = auto()


StoreListener = Callable[[StoreEvent], None]


class ScenarioStore:
    """
    Holds the current scenario and boundary pair, notifies subscribers.
    """

    def __init__(
        self,
        scenario: Optional[Scenario] = None,
        boundaries: Optional[BoundaryPair] = None
    ):
        self._scenario = scenario
        self._boundaries = boundaries or BoundaryPair()
        self._listeners: List[StoreListener] = []

    @property
    def scenario(self) -> Optional[Scenario]:
        return self._scenario

    @property
    def boundaries(self) -> BoundaryPair:
        return self._boundaries

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_scenario(self, scenario: Optional[Scenario]) -> None:
        self._scenario = scenario
        title = scenario.title if scenario else None
        Logger.log(f"Scenario replaced: {title!r}", Logger.LogPriority.INFO)
        self._notify(StoreEvent.SCENARIO_REPLACED)

    def update_node_zone(self, node_id: str, zone: Zone) -> bool:
        """
        Set one task's zone.

        Idempotent: an unchanged zone, an unknown id or an empty store leave
        the scenario untouched and notify nobody.

        Returns:
            True if the scenario changed.
        """
        if self._scenario is None:
            return False
        zone = Zone.parse(zone)
        current = next((t for t in self._scenario.tasks if t.id == node_id), None)
        if current is None:
            Logger.log(f"update_node_zone ignored for unknown node {node_id!r}",
                       Logger.LogPriority.WARNING)
            return False
        if current.zone == zone:
            return False
        self._scenario = self._scenario.with_node_zone(node_id, zone)
        self._notify(StoreEvent.NODE_ZONE_UPDATED)
        return True

    def update_boundaries(self, boundaries: Tuple[float, float]) -> BoundaryPair:
        """
        Replace the boundary pair, clamped to the nearest valid one.

        Returns:
            The pair actually stored.
        """
        pair = BoundaryPair.clamped(boundaries[0], boundaries[1])
        if pair != self._boundaries:
            self._boundaries = pair
            self._notify(StoreEvent.BOUNDARIES_UPDATED)
        return self._boundaries

    def move_boundary(self, index: int, pct: float) -> BoundaryPair:
        """Drag one boundary handle to ``pct`` percent of the canvas width."""
        pair = self._boundaries.move(index, pct)
        if pair != self._boundaries:
            self._boundaries = pair
            self._notify(StoreEvent.BOUNDARIES_UPDATED)
        return self._boundaries

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
