"""
Pre-seed placement.

Before the first tick every node is placed at the center of its zone's lane
with a small bounded jitter, so the first rendered frame already shows each
node in the lane its authoritative label names.
"""

import numpy as np
from typing import Optional, Sequence

from .canvas import CanvasBounds, CanvasSize, pct_to_px
from .state import TaskNode
from .zones import BoundaryPair, Zone

# keeps seeds off the exact boundary, where classification would flip lanes
LANE_EDGE_MARGIN_PX = 1e-6


def _lane_width_pct(boundaries: BoundaryPair, zone: Zone) -> float:
    lo, hi = boundaries.lane_span_pct(zone)
    return hi - lo


def make_rng(seed: Optional[int]) -> np.random.Generator:
    """Seeded generator; ``None`` draws fresh OS entropy."""
    return np.random.default_rng(seed)


def seed_positions(
    nodes: Sequence[TaskNode],
    boundaries: BoundaryPair,
    canvas: CanvasSize,
    bounds: CanvasBounds,
    jitter_px: float,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Lane-center positions plus uniform jitter in [-jitter_px/2, jitter_px/2).

    Horizontal jitter never reaches the lane edges: on lanes narrower than
    ``jitter_px`` it shrinks to just under half the lane width, so every node
    starts strictly inside the lane its zone names. Vertically nodes start
    around the canvas middle. Results are clamped to ``bounds`` so a seeded
    layout already satisfies the clamp invariant.

    Returns:
        (N, 2) array of positions in px.
    """
    n = len(nodes)
    if n == 0:
        return np.zeros((0, 2))

    centers_x = np.array([
        pct_to_px(boundaries.lane_center_pct(node.zone), canvas.width) for node in nodes
    ])
    centers_y = np.full(n, canvas.height / 2.0)

    half_widths = np.array([
        pct_to_px(_lane_width_pct(boundaries, node.zone), canvas.width) / 2.0 for node in nodes
    ])
    x_reach = np.minimum(jitter_px / 2.0, np.maximum(half_widths - LANE_EDGE_MARGIN_PX, 0.0))

    # unit offsets in [-1, 1)
    unit = (rng.random((n, 2)) - 0.5) * 2.0
    jitter = np.column_stack([unit[:, 0] * x_reach, unit[:, 1] * jitter_px / 2.0])
    positions = np.column_stack([centers_x, centers_y]) + jitter

    return bounds.clamp(positions)
