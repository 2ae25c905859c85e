"""
Layout controller - one view of the current scenario.

Owns at most one LaneSimulation at a time and wires it to the outside:

    - scenario store:  scenario replacement rebuilds the simulation,
                       boundary updates are forwarded to it,
                       zone changes from the simulation are written back
    - sizing source:   a new non-zero size rebuilds the simulation,
                       a zero size leaves the view inactive
    - frame loop:      ``frame()`` advances the simulation one tick

The controller never polls; all rebuilds are driven by store and sizing
notifications. ``teardown()`` stops the simulation and detaches every
listener synchronously.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .canvas import CanvasSize
from .config import LayoutConfig, default_config
from .edges import Edge
from .logger.logger import Logger
from .rendering import EdgeStyle, edge_style
from .seeding import make_rng
from .simulation import LaneSimulation
from .sizing import SizingSource
from .state import ZoneChange
from .store import ScenarioStore, StoreEvent
from .zones import BoundaryPair, Zone


@dataclass
class LayoutSnapshot:
    """Read-only frame for renderers."""
    canvas: CanvasSize
    boundaries: BoundaryPair
    positions: Dict[str, Tuple[float, float]]
    zones: Dict[str, Zone]
    edges: List[Tuple[Edge, EdgeStyle]]
    dragged_node: Optional[str]
    alpha: float
    tick: int
    events: List[ZoneChange] = field(default_factory=list)


class LayoutController:
    """
    Bridges store, sizing source and simulation for a single view.
    """

    def __init__(
        self,
        store: ScenarioStore,
        config: Optional[LayoutConfig] = None,
        rng_factory: Optional[Callable[[], np.random.Generator]] = None,
        on_rebuild: Optional[Callable[[Optional[LaneSimulation]], None]] = None
    ):
        """
        Args:
            store: Scenario and boundary source.
            config: Layout configuration.
            rng_factory: Builds the jitter source for each new simulation;
                defaults to a generator seeded from config.
            on_rebuild: Called after every rebuild with the new simulation
                (or None when the view went inactive).
        """
        self.store = store
        self.config = config or default_config()
        self._rng_factory = rng_factory or (lambda: make_rng(self.config.seeding.seed))
        self._on_rebuild = on_rebuild

        self._simulation: Optional[LaneSimulation] = None
        self._canvas: Optional[CanvasSize] = None
        self._detach_store = store.subscribe(self._on_store_event)
        self._detach_sizing: Optional[Callable[[], None]] = None
        self._detach_sim: Optional[Callable[[], None]] = None
        self._torn_down = False
        self.rebuild_count = 0

    @property
    def simulation(self) -> Optional[LaneSimulation]:
        return self._simulation

    @property
    def is_active(self) -> bool:
        return self._simulation is not None

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    # ---- wiring ---- #

    def attach_sizing_source(self, source: SizingSource) -> None:
        """Follow a sizing source; replaces any source attached before."""
        if self._torn_down:
            return
        if self._detach_sizing is not None:
            self._detach_sizing()
        self._detach_sizing = source.observe(self._on_resize)

    def detach_sizing_source(self) -> None:
        """Size source removed: stop the simulation and go inactive."""
        if self._detach_sizing is not None:
            self._detach_sizing()
            self._detach_sizing = None
        self._canvas = None
        self._replace_simulation(None)

    def _on_resize(self, size: CanvasSize) -> None:
        if self._torn_down:
            return
        if not size.is_ready:
            if self._simulation is not None:
                Logger.log(f"Canvas collapsed to {size.width}x{size.height}; view inactive", Logger.LogPriority.INFO)
            self._canvas = size
            self._replace_simulation(None)
            return
        if size == self._canvas and self._simulation is not None:
            return
        self._canvas = size
        self._rebuild()

    def _on_store_event(self, event: StoreEvent) -> None:
        if self._torn_down:
            return
        if event == StoreEvent.SCENARIO_REPLACED:
            self._rebuild()
        elif event == StoreEvent.BOUNDARIES_UPDATED and self._simulation is not None:
            self._simulation.set_boundaries(self.store.boundaries)
        # NODE_ZONE_UPDATED is the echo of our own write-back

    # ---- lifecycle ---- #

    def _rebuild(self) -> None:
        scenario = self.store.scenario
        if scenario is None or self._canvas is None or not self._canvas.is_ready:
            self._replace_simulation(None)
            return
        simulation = LaneSimulation(
            scenario.tasks,
            self.store.boundaries,
            self._canvas,
            self.config,
            rng=self._rng_factory()
        )
        self._replace_simulation(simulation)
        Logger.log(f"Layout rebuilt (#{self.rebuild_count}) for {len(scenario.tasks)} tasks", Logger.LogPriority.DEBUG)

    def _replace_simulation(self, simulation: Optional[LaneSimulation]) -> None:
        if self._simulation is None and simulation is None:
            return
        if self._simulation is not None:
            if self._detach_sim is not None:
                self._detach_sim()
                self._detach_sim = None
            self._simulation.stop()
        self._simulation = simulation
        if simulation is not None:
            self._detach_sim = simulation.subscribe(self._write_back)
            self.rebuild_count += 1
        if self._on_rebuild:
            self._on_rebuild(simulation)

    def _write_back(self, change: ZoneChange) -> None:
        self.store.update_node_zone(change.node_id, change.zone)

    def teardown(self) -> None:
        """Stop the simulation and detach from store and sizing source."""
        if self._torn_down:
            return
        self._replace_simulation(None)
        self._detach_store()
        if self._detach_sizing is not None:
            self._detach_sizing()
            self._detach_sizing = None
        self._torn_down = True
        Logger.log("LayoutController torn down", Logger.LogPriority.DEBUG)

    # ---- frame loop and interaction ---- #

    def frame(self) -> List[ZoneChange]:
        """One animation frame: a single simulation tick."""
        if self._torn_down or self._simulation is None:
            return []
        return self._simulation.tick()

    def start_drag(self, node_id: str) -> None:
        if self._simulation is not None:
            self._simulation.start_drag(node_id)

    def drag_to(self, node_id: str, x_px: float, y_px: float) -> None:
        if self._simulation is not None:
            self._simulation.apply_drag(node_id, x_px, y_px)

    def end_drag(self, node_id: Optional[str] = None) -> None:
        if self._simulation is not None:
            self._simulation.release_drag(node_id)

    def move_boundary(self, index: int, x_px: float) -> BoundaryPair:
        """Boundary handle dragged to pixel x; goes through the store."""
        if self._canvas is None or not self._canvas.is_ready:
            return self.store.boundaries
        return self.store.move_boundary(index, x_px / self._canvas.width * 100.0)

    def snapshot(self, events: Optional[List[ZoneChange]] = None) -> Optional[LayoutSnapshot]:
        """Current frame for rendering, or None while inactive."""
        sim = self._simulation
        if sim is None:
            return None
        state = sim.state
        zones = state.zone_map()
        positions = {
            nid: (float(state.positions_px[i, 0]), float(state.positions_px[i, 1]))
            for i, nid in enumerate(state.node_ids)
        }
        return LayoutSnapshot(
            canvas=sim.canvas,
            boundaries=sim.boundaries,
            positions=positions,
            zones=zones,
            edges=[(e, edge_style(e, zones)) for e in sim.edges],
            dragged_node=sim.dragged_node,
            alpha=state.alpha,
            tick=state.tick,
            events=list(events or [])
        )
