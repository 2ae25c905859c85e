"""
Force model for the lane layout.

Forces act on velocities, scaled by the current energy alpha, and are
applied in a fixed order each tick:

    charge   -> mutual repulsion between every pair of nodes
    link     -> weak spring along dependency edges
    collide  -> keeps circles from overlapping (radius + margin)
    y        -> pulls toward the vertical middle of the area below the header
    x        -> pulls toward the center of the node's current lane

The x targets are recomputed on every call from the zones and boundaries
passed in, so a boundary move or a zone flip changes the pull immediately.

Scaling: charge and collide visit every node pair, O(n^2) per tick. This is
fine for the 8-12 tasks of a scenario and is not optimized further.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple

from .canvas import CanvasSize, pct_to_px
from .config import CanvasConfig, ForceConfig
from .zones import BoundaryPair, Zone

JIGGLE_SCALE = 1e-6
DISTANCE_MIN2 = 1.0


def _jiggle(rng: np.random.Generator) -> float:
    return (rng.random() - 0.5) * JIGGLE_SCALE


def many_body(positions: np.ndarray, strength: float, alpha: float, rng: np.random.Generator) -> np.ndarray:
    """
    Pairwise charge: velocity change for every node.

    Negative strength repels. Coincident nodes are separated by a tiny random
    offset so they do not stay stacked.
    """
    n = len(positions)
    if n < 2:
        return np.zeros((n, 2))

    # diff[i, j] points from node i to node j
    diff = positions[None, :, :] - positions[:, None, :]
    off_diag = ~np.eye(n, dtype=bool)
    coincident = (diff == 0.0) & off_diag[:, :, None]
    if np.any(coincident):
        diff[coincident] = [_jiggle(rng) for _ in range(int(coincident.sum()))]

    l2 = np.sum(diff ** 2, axis=2)
    l2 = np.where(l2 < DISTANCE_MIN2, np.sqrt(DISTANCE_MIN2 * l2), l2)
    l2[~off_diag] = np.inf

    scale = strength * alpha / l2
    return np.sum(diff * scale[:, :, None], axis=1)


def collide(
    positions: np.ndarray,
    v: np.ndarray,
    radius: float,
    strength: float,
    rng: np.random.Generator
) -> None:
    """
    Push apart equal circles that would overlap after this tick's motion.

    Updates ``v`` in place.
    """
    n = len(positions)
    reach = 2.0 * radius
    for i in range(n):
        xi = positions[i, 0] + v[i, 0]
        yi = positions[i, 1] + v[i, 1]
        for j in range(i + 1, n):
            x = xi - positions[j, 0] - v[j, 0]
            y = yi - positions[j, 1] - v[j, 1]
            l2 = x * x + y * y
            if l2 >= reach * reach:
                continue
            if x == 0.0:
                x = _jiggle(rng)
                l2 += x * x
            if y == 0.0:
                y = _jiggle(rng)
                l2 += y * y
            length = np.sqrt(l2)
            k = (reach - length) / length * strength
            x *= k
            y *= k
            # equal radii split the correction evenly
            v[i, 0] += x * 0.5
            v[i, 1] += y * 0.5
            v[j, 0] -= x * 0.5
            v[j, 1] -= y * 0.5


class LaneForceModel:
    """
    Velocity update for one tick.

    Positions are read, never written; the integrator owns position updates,
    pins and clamping.
    """

    def __init__(
        self,
        forces: ForceConfig,
        canvas: CanvasConfig,
        links: Sequence[Tuple[int, int]] = ()
    ):
        """
        Args:
            forces: Force strengths.
            canvas: Node radius, margin and header offset.
            links: (source_index, target_index) pairs.
        """
        self.forces = forces
        self.canvas = canvas
        self.links: List[Tuple[int, int]] = list(links)

        counts = {}
        for s, t in self.links:
            counts[s] = counts.get(s, 0) + 1
            counts[t] = counts.get(t, 0) + 1
        # share of the correction applied to the target end
        self._link_bias = [counts[s] / (counts[s] + counts[t]) for s, t in self.links]

    def lane_targets(self, zones: Sequence[Zone], boundaries: BoundaryPair, width: float) -> np.ndarray:
        """Horizontal lane-center target in px for each node."""
        return np.array(
            [pct_to_px(boundaries.lane_center_pct(z), width) for z in zones],
            dtype=np.float64
        )

    def y_target(self, canvas: CanvasSize) -> float:
        return (canvas.height + self.canvas.top_offset) / 2.0

    def apply(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        zones: Sequence[Zone],
        boundaries: BoundaryPair,
        canvas: CanvasSize,
        alpha: float,
        rng: Optional[np.random.Generator] = None
    ) -> np.ndarray:
        """
        Apply all forces and return updated velocities.

        Args:
            positions: (N, 2) positions in px.
            velocities: (N, 2) velocities in px/tick.
            zones: Current zone per node.
            boundaries: Current boundary pair.
            canvas: Current canvas size.
            alpha: Current energy.
            rng: Source for tie-breaking jitter on coincident nodes.

        Returns:
            New (N, 2) velocity array.
        """
        rng = rng if rng is not None else np.random.default_rng(0)
        v = np.array(velocities, dtype=np.float64, copy=True)
        n = len(positions)
        if n == 0:
            return v

        v += many_body(positions, self.forces.charge_strength, alpha, rng)
        self._link(positions, v, alpha, rng)
        collide(positions, v, self.canvas.collision_radius, self.forces.collide_strength, rng)

        v[:, 1] += (self.y_target(canvas) - positions[:, 1]) * self.forces.y_strength * alpha
        targets = self.lane_targets(zones, boundaries, canvas.width)
        v[:, 0] += (targets - positions[:, 0]) * self.forces.x_strength * alpha
        return v

    def _link(self, positions: np.ndarray, v: np.ndarray, alpha: float, rng: np.random.Generator) -> None:
        strength = self.forces.link_strength
        distance = self.forces.link_distance
        for (s, t), bias in zip(self.links, self._link_bias):
            x = positions[t, 0] + v[t, 0] - positions[s, 0] - v[s, 0]
            y = positions[t, 1] + v[t, 1] - positions[s, 1] - v[s, 1]
            if x == 0.0:
                x = _jiggle(rng)
            if y == 0.0:
                y = _jiggle(rng)
            length = np.hypot(x, y)
            k = (length - distance) / length * alpha * strength
            x *= k
            y *= k
            v[t, 0] -= x * bias
            v[t, 1] -= y * bias
            v[s, 0] += x * (1.0 - bias)
            v[s, 1] += y * (1.0 - bias)

