"""
Rendering helpers, independent of any drawing backend.

Consumes zone-change events from the simulation and answers "what color is
this node right now" and "how is this edge drawn". Colors are RGBA tuples
with 0-255 channels.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple

from .edges import Edge, edge_visible
from .state import ZoneChange
from .zones import Zone

RGBA = Tuple[int, int, int, int]

ZONE_COLORS: Dict[Zone, RGBA] = {
    Zone.AI: (0, 102, 255, 255),        # #0066ff
    Zone.SHARED: (191, 90, 242, 255),   # #bf5af2
    Zone.HUMAN: (255, 149, 0, 255),     # #ff9500
}

TRANSPARENT: RGBA = (0, 0, 0, 0)
EDGE_OPACITY = 0.6
TRANSITION_SECONDS = 0.2


def blend(start: RGBA, end: RGBA, t: float) -> RGBA:
    """Linear blend, t clipped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return tuple(int(round(a + (b - a) * t)) for a, b in zip(start, end))


@dataclass
class ColorTransition:
    start: RGBA
    end: RGBA
    started_at: float
    duration: float = TRANSITION_SECONDS

    def color_at(self, now: float) -> RGBA:
        if self.duration <= 0:
            return self.end
        return blend(self.start, self.end, (now - self.started_at) / self.duration)

    def done(self, now: float) -> bool:
        return now - self.started_at >= self.duration


class NodeColorAnimator:
    """
    Per-node fill colors with short blends on zone changes.

    A change that arrives mid-blend starts from the color currently shown,
    so rapid crossings never jump.
    """

    def __init__(self, zones: Mapping[str, Zone], duration: float = TRANSITION_SECONDS):
        self.duration = duration
        self._colors: Dict[str, RGBA] = {nid: ZONE_COLORS[z] for nid, z in zones.items()}
        self._transitions: Dict[str, ColorTransition] = {}

    def consume(self, events: Iterable[ZoneChange], now: float) -> None:
        for event in events:
            current = self.color_of(event.node_id, now)
            self._transitions[event.node_id] = ColorTransition(
                start=current,
                end=ZONE_COLORS[event.zone],
                started_at=now,
                duration=self.duration
            )

    def color_of(self, node_id: str, now: float) -> RGBA:
        transition = self._transitions.get(node_id)
        if transition is None:
            return self._colors[node_id]
        if transition.done(now):
            self._colors[node_id] = transition.end
            del self._transitions[node_id]
            return transition.end
        return transition.color_at(now)

    def is_animating(self) -> bool:
        return bool(self._transitions)


@dataclass(frozen=True)
class EdgeStyle:
    color: RGBA
    opacity: float

    @property
    def visible(self) -> bool:
        return self.opacity > 0


def edge_style(edge: Edge, zones: Mapping[str, Zone]) -> EdgeStyle:
    """Zone-colored when both ends share a zone, otherwise fully transparent."""
    if not edge_visible(edge, zones):
        return EdgeStyle(TRANSPARENT, 0.0)
    return EdgeStyle(ZONE_COLORS[zones[edge.source]], EDGE_OPACITY)


def with_opacity(color: RGBA, opacity: float) -> RGBA:
    return color[:3] + (int(round(255 * opacity)),)
