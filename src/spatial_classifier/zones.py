"""
Zones, lanes and the boundary pair.

The canvas is split horizontally into three lanes by two boundary values
expressed as percentages of canvas width:

    [0, lower)        -> AI
    [lower, upper]    -> SHARED
    (upper, 100]      -> HUMAN

Invariant: 10 <= lower, upper <= 90 and upper - lower >= 10.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class Zone(str, Enum):
    """Classification of a task on the human/AI spectrum."""
    AI = "AI"
    SHARED = "SHARED"
    HUMAN = "HUMAN"

    @classmethod
    def parse(cls, value) -> "Zone":
        if isinstance(value, Zone):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown zone: {value!r}")


# Left to right order of lanes on the canvas
ZONE_ORDER: Tuple[Zone, ...] = (Zone.AI, Zone.SHARED, Zone.HUMAN)

MIN_BOUNDARY_PCT = 10.0
MAX_BOUNDARY_PCT = 90.0
MIN_LANE_GAP_PCT = 10.0
DEFAULT_BOUNDARIES = (33.0, 66.0)

# float slack when comparing a lane gap against the minimum
GAP_TOLERANCE = 1e-9


def _clip(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class BoundaryPair:
    """
    Two lane boundaries in percent of canvas width.

    Construct through ``clamped()`` to get the nearest valid pair for any
    input; the raw constructor assumes the values are already valid.

    Attributes:
        lower_pct: Boundary between AI and SHARED lanes.
        upper_pct: Boundary between SHARED and HUMAN lanes.
    """
    lower_pct: float = DEFAULT_BOUNDARIES[0]
    upper_pct: float = DEFAULT_BOUNDARIES[1]

    @classmethod
    def clamped(cls, lower_pct: float, upper_pct: float) -> "BoundaryPair":
        """
        Nearest valid pair to the requested values.

        Non-finite values fall back to the defaults. Each value is clipped to
        [10, 90]; a pair that is inverted or narrower than the minimum gap is
        widened symmetrically around its midpoint.
        """
        lower = float(lower_pct) if math.isfinite(float(lower_pct)) else DEFAULT_BOUNDARIES[0]
        upper = float(upper_pct) if math.isfinite(float(upper_pct)) else DEFAULT_BOUNDARIES[1]

        lower = _clip(lower, MIN_BOUNDARY_PCT, MAX_BOUNDARY_PCT)
        upper = _clip(upper, MIN_BOUNDARY_PCT, MAX_BOUNDARY_PCT)

        if upper - lower < MIN_LANE_GAP_PCT - GAP_TOLERANCE:
            half_gap = MIN_LANE_GAP_PCT / 2.0
            mid = _clip(
                (lower + upper) / 2.0,
                MIN_BOUNDARY_PCT + half_gap,
                MAX_BOUNDARY_PCT - half_gap
            )
            lower, upper = mid - half_gap, mid + half_gap

        return cls(lower, upper)

    @classmethod
    def from_sequence(cls, values) -> "BoundaryPair":
        values = list(values)
        if len(values) != 2:
            raise ValueError("boundaries must have exactly 2 values")
        return cls.clamped(values[0], values[1])

    def move(self, index: int, pct: float) -> "BoundaryPair":
        """
        Move one boundary handle, keeping the other fixed.

        The moved handle is clipped to [10, 90] and then to the minimum gap
        relative to the handle that stays put.

        Args:
            index: 0 for the AI/SHARED handle, 1 for the SHARED/HUMAN handle.
            pct: Requested position in percent of canvas width.
        """
        if index not in (0, 1):
            raise ValueError(f"boundary index must be 0 or 1, got {index}")
        if not math.isfinite(float(pct)):
            return self

        pct = _clip(float(pct), MIN_BOUNDARY_PCT, MAX_BOUNDARY_PCT)
        if index == 0:
            lower = min(pct, self.upper_pct - MIN_LANE_GAP_PCT)
            return BoundaryPair.clamped(lower, self.upper_pct)
        upper = max(pct, self.lower_pct + MIN_LANE_GAP_PCT)
        return BoundaryPair.clamped(self.lower_pct, upper)

    def is_valid(self) -> bool:
        return (
            MIN_BOUNDARY_PCT <= self.lower_pct <= MAX_BOUNDARY_PCT
            and MIN_BOUNDARY_PCT <= self.upper_pct <= MAX_BOUNDARY_PCT
            and self.upper_pct - self.lower_pct >= MIN_LANE_GAP_PCT - GAP_TOLERANCE
        )

    def classify(self, x_pct: float) -> Zone:
        """Zone of a horizontal position given in percent of canvas width."""
        if x_pct < self.lower_pct:
            return Zone.AI
        if x_pct > self.upper_pct:
            return Zone.HUMAN
        return Zone.SHARED

    def lane_span_pct(self, zone: Zone) -> Tuple[float, float]:
        if zone == Zone.AI:
            return 0.0, self.lower_pct
        if zone == Zone.SHARED:
            return self.lower_pct, self.upper_pct
        return self.upper_pct, 100.0

    def lane_center_pct(self, zone: Zone) -> float:
        lo, hi = self.lane_span_pct(zone)
        return (lo + hi) / 2.0

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lower_pct, self.upper_pct)


def zone_path(start: Zone, end: Zone) -> List[Tuple[Zone, Zone]]:
    """
    Lane crossings needed to get from one zone to another.

    Lanes are contiguous, so a move from AI to HUMAN passes through SHARED
    and yields two transitions.
    """
    i = ZONE_ORDER.index(start)
    j = ZONE_ORDER.index(end)
    if i == j:
        return []
    step = 1 if j > i else -1
    return [(ZONE_ORDER[k], ZONE_ORDER[k + step]) for k in range(i, j, step)]
