"""
Lane simulation: one running force layout for one scenario on one canvas.

The simulation object is the single owner of positions, velocities and
energy. Callers perturb it only through its methods (``set_boundaries``,
``start_drag``, ``apply_drag``, ``release_drag``) and advance it with
``tick()``; nothing else holds a handle to its state.

An instance is never resized or re-targeted. When the node set or canvas
changes the owner stops it and builds a new one.
"""

import numpy as np
from typing import Callable, Dict, List, Optional, Sequence

from .canvas import CanvasBounds, CanvasSize
from .config import LayoutConfig, default_config
from .edges import Edge, derive_edges, edge_visible
from .exceptions import InvalidCanvasError, NodeNotFoundError
from .integrator import LayoutIntegrator
from .logger.logger import Logger
from .model import LaneForceModel
from .seeding import make_rng, seed_positions
from .state import LayoutState, TaskNode, ZoneChange
from .zones import BoundaryPair, Zone

ZoneChangeListener = Callable[[ZoneChange], None]


class LaneSimulation:
    """
    Force layout that keeps every node in the lane matching its zone.

    Usage:
        sim = LaneSimulation(nodes, BoundaryPair(33, 66), CanvasSize(800, 600))
        sim.subscribe(lambda change: store.update_node_zone(change.node_id, change.zone))
        while not sim.at_rest:
            sim.tick()
        sim.stop()
    """

    def __init__(
        self,
        nodes: Sequence[TaskNode],
        boundaries: BoundaryPair,
        canvas: CanvasSize,
        config: Optional[LayoutConfig] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Build the layout and pre-seed positions.

        Args:
            nodes: Tasks with their authoritative zones.
            boundaries: Initial boundary pair (clamped if invalid).
            canvas: Canvas size; must be positive.
            config: Layout configuration (defaults if omitted).
            rng: Random source for jitter; defaults to one seeded from config.

        Raises:
            InvalidCanvasError: If width or height is not positive.
        """
        if not canvas.is_ready:
            raise InvalidCanvasError(f"Canvas {canvas.width}x{canvas.height} cannot host a simulation.")

        self.config = config or default_config()
        self.canvas = canvas
        self._boundaries = BoundaryPair.clamped(*boundaries.as_tuple())
        self._rng = rng if rng is not None else make_rng(self.config.seeding.seed)

        self.nodes: List[TaskNode] = list(nodes)
        self.edges: List[Edge] = derive_edges(self.nodes)
        self._index: Dict[str, int] = {n.id: i for i, n in enumerate(self.nodes)}

        links = [(self._index[e.source], self._index[e.target]) for e in self.edges]
        self.model = LaneForceModel(self.config.forces, self.config.canvas, links)
        self.integrator = LayoutIntegrator(self.config.dynamics, self.config.canvas)
        self.bounds: CanvasBounds = self.integrator.bounds_for(canvas)

        positions = seed_positions(
            self.nodes,
            self._boundaries,
            canvas,
            self.bounds,
            self.config.seeding.jitter_px,
            self._rng
        )
        self._state = LayoutState(
            node_ids=[n.id for n in self.nodes],
            positions_px=positions,
            velocities_px=np.zeros_like(positions),
            zones=[n.zone for n in self.nodes],
        )

        self._listeners: List[ZoneChangeListener] = []
        self._dragged: Optional[int] = None
        self._stopped = False

        Logger.log(
            f"LaneSimulation built: {len(self.nodes)} nodes, {len(self.edges)} edges, "
            f"canvas={canvas.width}x{canvas.height}, boundaries={self._boundaries.as_tuple()}",
            Logger.LogPriority.DEBUG
        )

    # ---- read access ---- #

    @property
    def state(self) -> LayoutState:
        """Copy of the current layout."""
        return self._state.copy()

    @property
    def boundaries(self) -> BoundaryPair:
        return self._boundaries

    @property
    def alpha(self) -> float:
        return self._state.alpha

    @property
    def tick_count(self) -> int:
        return self._state.tick

    @property
    def at_rest(self) -> bool:
        return self.integrator.is_at_rest(self._state)

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def dragged_node(self) -> Optional[str]:
        if self._dragged is None:
            return None
        return self.nodes[self._dragged].id

    def zone_of(self, node_id: str) -> Zone:
        return self._state.zone_of(node_id)

    def position_of(self, node_id: str):
        return self._state.position_of(node_id)

    def x_percent_of(self, node_id: str) -> float:
        x, _ = self.position_of(node_id)
        return x / self.canvas.width * 100.0

    def edge_visibility(self) -> Dict[Edge, bool]:
        zones = self._state.zone_map()
        return {e: edge_visible(e, zones) for e in self.edges}

    # ---- listeners ---- #

    def subscribe(self, listener: ZoneChangeListener) -> Callable[[], None]:
        """
        Register a zone-change listener.

        Returns:
            Callable that detaches the listener.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- stepping ---- #

    def tick(self) -> List[ZoneChange]:
        """
        Advance one step unless stopped or at rest.

        Returns:
            Zone changes produced by this tick, already sent to listeners.
        """
        if self._stopped or not self.nodes or self.at_rest:
            return []

        self._state, events = self.integrator.step(
            self._state, self.model, self._boundaries, self.canvas, self._rng
        )
        for event in events:
            Logger.log(
                f"Zone change at tick {event.tick}: {event.node_id} "
                f"{event.previous.value} -> {event.zone.value}",
                Logger.LogPriority.INFO
            )
            for listener in list(self._listeners):
                listener(event)
        return events

    def run(self, max_ticks: int) -> List[ZoneChange]:
        """Tick until at rest or max_ticks steps were taken."""
        events: List[ZoneChange] = []
        for _ in range(max_ticks):
            if self._stopped or self.at_rest:
                break
            events.extend(self.tick())
        return events

    def reheat(self, alpha: float) -> None:
        """Raise energy to at least ``alpha`` so the layout resumes settling."""
        if not self._stopped:
            self._state.alpha = max(self._state.alpha, alpha)

    # ---- perturbations ---- #

    def set_boundaries(self, boundaries: BoundaryPair) -> None:
        """
        Adopt a new boundary pair.

        Positions are left alone; the lane force reads the new pair on the
        next tick and the raised energy lets nodes drift to their new lane
        centers.
        """
        new_pair = BoundaryPair.clamped(*boundaries.as_tuple())
        if new_pair == self._boundaries:
            return
        Logger.log(f"Boundaries changed {self._boundaries.as_tuple()} -> {new_pair.as_tuple()}", Logger.LogPriority.INFO)
        self._boundaries = new_pair
        self.reheat(self.config.dynamics.boundary_change_alpha)

    def start_drag(self, node_id: str) -> None:
        """
        Pin a node at its current position and hold the energy up.

        Raises:
            NodeNotFoundError: If node_id is not in this simulation.
        """
        if node_id not in self._index:
            raise NodeNotFoundError(f"Node '{node_id}' not found in simulation.")
        if self._stopped:
            return
        idx = self._index[node_id]
        if self._dragged is None:
            self._state.alpha_target = self.config.dynamics.drag_alpha_target
            self.reheat(self.config.dynamics.drag_alpha_target)
        elif self._dragged != idx:
            self._state.pins.pop(self._dragged, None)
        self._dragged = idx
        x, y = self._state.positions_px[idx]
        self._state.pins[idx] = (float(x), float(y))
        Logger.log(f"Drag started on {node_id}", Logger.LogPriority.DEBUG)

    def apply_drag(self, node_id: str, x_px: float, y_px: float) -> None:
        """
        Move the pinned node to the pointer, clamped to the canvas bounds.

        Starts a drag implicitly if none is active for this node.
        """
        if self._stopped:
            return
        if self._dragged is None or self.nodes[self._dragged].id != node_id:
            self.start_drag(node_id)
        self._state.pins[self._dragged] = self.bounds.clamp_point(x_px, y_px)

    def release_drag(self, node_id: Optional[str] = None) -> None:
        """Unpin the dragged node; it rejoins force-driven motion."""
        if self._dragged is None:
            return
        if node_id is not None and self.nodes[self._dragged].id != node_id:
            return
        released = self.nodes[self._dragged].id
        self._state.pins.pop(self._dragged, None)
        self._dragged = None
        self._state.alpha_target = 0.0
        Logger.log(f"Drag released on {released}", Logger.LogPriority.DEBUG)

    def stop(self) -> None:
        """Stop ticking and detach all listeners. Idempotent."""
        if self._stopped:
            return
        self._stopped = True
        self._listeners.clear()
        self._dragged = None
        self._state.pins.clear()
        self._state.alpha_target = 0.0
        Logger.log(f"LaneSimulation stopped after {self._state.tick} ticks", Logger.LogPriority.DEBUG)
