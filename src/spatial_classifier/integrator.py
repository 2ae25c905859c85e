"""
Tick integrator.

One tick is a pure function of the previous state:

    (state, boundaries) -> (state', zone_change_events)

and runs, in order:

    1. energy update:    alpha += (alpha_target - alpha) * alpha_decay
    2. forces:           velocities updated from current zones and boundaries
    3. motion:           v *= (1 - velocity_decay); x += v; pinned nodes held
    4. clamp:            positions forced into the canvas bounds
    5. reconciliation:   zones re-derived from the clamped x positions

so no node is ever classified from an out-of-bounds position, and the
forces of the next tick already see the reconciled zones.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple

from .canvas import CanvasBounds, CanvasSize, px_to_pct
from .config import CanvasConfig, DynamicsConfig
from .model import LaneForceModel
from .state import LayoutState, ZoneChange
from .zones import BoundaryPair, Zone, zone_path


def reconcile_zones(
    node_ids: Sequence[str],
    positions: np.ndarray,
    zones: Sequence[Zone],
    boundaries: BoundaryPair,
    width: float,
    tick: int,
    hysteresis_pct: float = 0.0
) -> Tuple[List[Zone], List[ZoneChange]]:
    """
    Re-derive each node's zone from its horizontal position.

    A node whose position lies across a boundary from its stored zone is
    reassigned. Crossing from AI to HUMAN (or back) reports both lane
    crossings in order, so SHARED is never skipped.

    With ``hysteresis_pct > 0`` a node keeps its stored zone while it sits
    within that many percent of the boundary it would cross.

    Returns:
        (new_zones, events) where events are ordered by node, then crossing.
    """
    new_zones = list(zones)
    events: List[ZoneChange] = []
    if len(node_ids) == 0:
        return new_zones, events

    x_pct = px_to_pct(positions[:, 0], width)
    for i, node_id in enumerate(node_ids):
        stored = new_zones[i]
        candidate = boundaries.classify(float(x_pct[i]))
        if candidate == stored:
            continue
        if hysteresis_pct > 0 and stored in (
            boundaries.classify(float(x_pct[i]) - hysteresis_pct),
            boundaries.classify(float(x_pct[i]) + hysteresis_pct)
        ):
            continue
        for previous, zone in zone_path(stored, candidate):
            events.append(ZoneChange(node_id=node_id, previous=previous, zone=zone, tick=tick))
        new_zones[i] = candidate
    return new_zones, events


class LayoutIntegrator:
    """
    Damped semi-implicit Euler integrator with decaying energy.
    """

    def __init__(self, dynamics: DynamicsConfig, canvas: CanvasConfig):
        """
        Args:
            dynamics: Energy schedule and reheat amounts.
            canvas: Node radius and header offset, for clamping.
        """
        self.dynamics = dynamics
        self.canvas = canvas

    def bounds_for(self, canvas: CanvasSize) -> CanvasBounds:
        return CanvasBounds.for_canvas(canvas, self.canvas.node_radius, self.canvas.top_offset)

    def is_at_rest(self, state: LayoutState) -> bool:
        return state.alpha < self.dynamics.alpha_min

    def step(
        self,
        state: LayoutState,
        model: LaneForceModel,
        boundaries: BoundaryPair,
        canvas: CanvasSize,
        rng: Optional[np.random.Generator] = None
    ) -> Tuple[LayoutState, List[ZoneChange]]:
        """
        Advance the layout by one tick.

        Args:
            state: Current layout (not modified).
            model: Force model.
            boundaries: Boundary pair in effect for this tick.
            canvas: Canvas size in effect for this tick.
            rng: Jitter source for coincident nodes.

        Returns:
            (new_state, zone_changes) tuple.
        """
        new_state = state.copy()
        new_state.tick = state.tick + 1
        new_state.alpha += (new_state.alpha_target - new_state.alpha) * self.dynamics.alpha_decay

        if new_state.n_nodes == 0:
            return new_state, []

        v = model.apply(
            new_state.positions_px,
            new_state.velocities_px,
            new_state.zones,
            boundaries,
            canvas,
            new_state.alpha,
            rng
        )
        v *= 1.0 - self.dynamics.velocity_decay
        positions = new_state.positions_px + v

        for i, (px, py) in new_state.pins.items():
            positions[i] = (px, py)
            v[i] = 0.0

        new_state.positions_px = self.bounds_for(canvas).clamp(positions)
        new_state.velocities_px = v

        new_state.zones, events = reconcile_zones(
            new_state.node_ids,
            new_state.positions_px,
            new_state.zones,
            boundaries,
            canvas.width,
            new_state.tick,
            self.dynamics.hysteresis_pct
        )

        if events:
            # keep settling toward the new lane instead of restarting
            new_state.alpha = max(new_state.alpha, self.dynamics.zone_change_alpha)

        return new_state, events
