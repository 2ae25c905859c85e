"""
Per-zone mini graph.

Each zone's outcome panel shows its own tasks as a small free-floating
cluster. There are no lanes and no reclassification here: nodes repel each
other, the whole cluster is shifted toward the panel center, and circles are
kept apart. Nodes are clamped ``node_radius + padding`` inside the panel.

Tick order:

    1. energy update
    2. charge on velocities
    3. center shift of positions by (centroid - center) * center_strength
    4. collide on velocities (radius + margin)
    5. v *= (1 - velocity_decay); x += v
    6. clamp
"""

import numpy as np
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .canvas import CanvasBounds, CanvasSize
from .config import LayoutConfig, default_config
from .exceptions import InvalidCanvasError
from .logger.logger import Logger
from .model import collide, many_body
from .seeding import make_rng
from .state import Scenario, TaskNode
from .store import ScenarioStore, StoreEvent
from .zones import Zone

EMPTY_ZONE_PLACEHOLDER = "NO NODES DETECTED"

# d3 forceCollide default
ZONE_COLLIDE_STRENGTH = 1.0


class ZoneGraphSimulation:
    """
    Force layout for the tasks of a single zone inside a small panel.

    Usage:
        graph = ZoneGraphSimulation.for_zone(scenario, Zone.AI, CanvasSize(240, 160))
        graph.run(300)
        graph.stop()
    """

    def __init__(
        self,
        nodes: Sequence[TaskNode],
        zone: Zone,
        canvas: CanvasSize,
        config: Optional[LayoutConfig] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Args:
            nodes: Tasks shown in the panel.
            zone: Zone the panel represents.
            canvas: Panel size; must be positive.
            config: Layout configuration (``zone_graph`` and ``dynamics`` are used).
            rng: Random source for seeding jitter.

        Raises:
            InvalidCanvasError: If width or height is not positive.
        """
        if not canvas.is_ready:
            raise InvalidCanvasError(f"Panel {canvas.width}x{canvas.height} cannot host a zone graph.")

        self.config = config or default_config()
        self.graph = self.config.zone_graph
        self.dynamics = self.config.dynamics
        self.zone = zone
        self.canvas = canvas
        self.nodes: List[TaskNode] = list(nodes)
        self.bounds = CanvasBounds.for_canvas(canvas, self.graph.edge_inset, top_offset=0.0)
        self._rng = rng if rng is not None else make_rng(self.config.seeding.seed)

        n = len(self.nodes)
        center = np.array(self.center)
        jitter = (self._rng.random((n, 2)) - 0.5) * self.graph.jitter_px
        self._positions = self.bounds.clamp(center + jitter)
        self._velocities = np.zeros((n, 2))
        self._alpha = 1.0
        self._tick = 0
        self._stopped = False

        Logger.log(f"Zone graph built for {zone.value}: {n} nodes", Logger.LogPriority.DEBUG)

    @classmethod
    def for_zone(
        cls,
        scenario: Scenario,
        zone: Zone,
        canvas: CanvasSize,
        config: Optional[LayoutConfig] = None,
        rng: Optional[np.random.Generator] = None
    ) -> "ZoneGraphSimulation":
        """Build a panel graph from the scenario's tasks currently in ``zone``."""
        return cls(scenario.nodes_in_zone(zone), zone, canvas, config, rng)

    @property
    def center(self) -> Tuple[float, float]:
        return self.canvas.width / 2.0, self.canvas.height / 2.0

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def placeholder(self) -> Optional[str]:
        """Text shown instead of the graph when the zone holds no tasks."""
        return EMPTY_ZONE_PLACEHOLDER if self.is_empty else None

    @property
    def positions(self) -> np.ndarray:
        return self._positions.copy()

    @property
    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def at_rest(self) -> bool:
        return self._alpha < self.dynamics.alpha_min

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def tick(self) -> bool:
        """
        Advance one step.

        Returns:
            False when nothing moved: empty, stopped or at rest.
        """
        if self._stopped or self.is_empty or self.at_rest:
            return False

        self._tick += 1
        self._alpha += (0.0 - self._alpha) * self.dynamics.alpha_decay

        positions = self._positions
        v = self._velocities + many_body(positions, self.graph.charge_strength, self._alpha, self._rng)

        shift = (positions.mean(axis=0) - np.array(self.center)) * self.graph.center_strength
        positions = positions - shift

        collide(positions, v, self.graph.collision_radius, ZONE_COLLIDE_STRENGTH, self._rng)

        v = v * (1.0 - self.dynamics.velocity_decay)
        self._velocities = v
        self._positions = self.bounds.clamp(positions + v)
        return True

    def run(self, max_ticks: int) -> int:
        """Tick until at rest, stopped or max_ticks; returns ticks taken."""
        taken = 0
        while taken < max_ticks and self.tick():
            taken += 1
        return taken

    def stop(self) -> None:
        """Stop ticking. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        Logger.log(f"Zone graph for {self.zone.value} stopped after {self._tick} ticks", Logger.LogPriority.DEBUG)


class ZoneGraphBoard:
    """
    One mini graph per zone, kept in step with a scenario store.

    A zone's graph is rebuilt only when the set of tasks in that zone changes
    or the panel size changes; other zones keep settling undisturbed.
    """

    def __init__(
        self,
        store: ScenarioStore,
        panel: CanvasSize,
        config: Optional[LayoutConfig] = None,
        rng_factory: Optional[Callable[[], np.random.Generator]] = None
    ):
        self.store = store
        self.config = config or default_config()
        self._rng_factory = rng_factory or (lambda: make_rng(self.config.seeding.seed))
        self._panel = panel
        self._graphs: Dict[Zone, Optional[ZoneGraphSimulation]] = {zone: None for zone in Zone}
        self._members: Dict[Zone, Tuple[str, ...]] = {}
        self._detach_store: Optional[Callable[[], None]] = store.subscribe(self._on_store_event)
        self._refresh(force=True)

    @property
    def panel(self) -> CanvasSize:
        return self._panel

    def graph(self, zone: Zone) -> Optional[ZoneGraphSimulation]:
        """The zone's graph, or None while the panel has no area."""
        return self._graphs[zone]

    def set_panel_size(self, panel: CanvasSize) -> None:
        if panel == self._panel:
            return
        self._panel = panel
        self._refresh(force=True)

    def tick(self) -> None:
        for graph in self._graphs.values():
            if graph is not None:
                graph.tick()

    def teardown(self) -> None:
        """Stop every graph and stop following the store. Idempotent."""
        if self._detach_store is not None:
            self._detach_store()
            self._detach_store = None
        for zone, graph in self._graphs.items():
            if graph is not None:
                graph.stop()
            self._graphs[zone] = None

    def _on_store_event(self, event: StoreEvent) -> None:
        if event is not StoreEvent.BOUNDARIES_UPDATED:
            self._refresh(force=event is StoreEvent.SCENARIO_REPLACED)

    def _refresh(self, force: bool) -> None:
        scenario = self.store.scenario
        for zone in Zone:
            nodes = scenario.nodes_in_zone(zone) if scenario is not None else []
            members = tuple(n.id for n in nodes)
            if not force and self._members.get(zone) == members:
                continue
            self._members[zone] = members
            previous = self._graphs[zone]
            if previous is not None:
                previous.stop()
            if self._panel.is_ready:
                self._graphs[zone] = ZoneGraphSimulation(nodes, zone, self._panel, self.config,
                                                         rng=self._rng_factory())
            else:
                self._graphs[zone] = None
