"""
Layout state representation.

Task metadata (``TaskNode``) is immutable and owned by the scenario source.
Positions and velocities (``LayoutState``) are owned by one running
simulation and never persisted.

Units:
    - Positions: px, origin top-left
    - Horizontal lane coordinates: percent of canvas width
"""

import numpy as np
from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

from .zones import Zone
from .exceptions import NodeNotFoundError


@dataclass(frozen=True)
class TaskNode:
    """
    One task of a scenario.

    Attributes:
        id: Unique identifier within the scenario.
        label: Short display name.
        description: Longer text shown on hover.
        ai_confidence: Score in [0, 1] from the external classifier.
        ethical_complexity: Score in [0, 1] from the external classifier.
        zone: Authoritative classification.
        dependencies: Ids of tasks that conceptually precede this one.
    """
    id: str
    label: str = ""
    description: str = ""
    ai_confidence: float = 0.5
    ethical_complexity: float = 0.5
    zone: Zone = Zone.SHARED
    dependencies: Tuple[str, ...] = ()

    def with_zone(self, zone: Zone) -> "TaskNode":
        return replace(self, zone=zone)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "aiConfidence": self.ai_confidence,
            "ethicalComplexity": self.ethical_complexity,
            "currentZone": self.zone.value,
            "dependencies": list(self.dependencies),
        }


@dataclass(frozen=True)
class Scenario:
    """A decomposed problem: title, description and its tasks."""
    title: str
    description: str = ""
    tasks: Tuple[TaskNode, ...] = ()

    @property
    def node_ids(self) -> List[str]:
        return [t.id for t in self.tasks]

    def get_node(self, node_id: str) -> TaskNode:
        for task in self.tasks:
            if task.id == node_id:
                return task
        raise NodeNotFoundError(f"Node '{node_id}' not found in scenario '{self.title}'.")

    def with_node_zone(self, node_id: str, zone: Zone) -> "Scenario":
        tasks = tuple(t.with_zone(zone) if t.id == node_id else t for t in self.tasks)
        return replace(self, tasks=tasks)

    def nodes_in_zone(self, zone: Zone) -> List[TaskNode]:
        return [t for t in self.tasks if t.zone == zone]

    def zone_counts(self) -> Dict[Zone, int]:
        counts = {z: 0 for z in Zone}
        for t in self.tasks:
            counts[t.zone] += 1
        return counts

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "tasks": [t.to_dict() for t in self.tasks],
        }


@dataclass(frozen=True)
class ZoneChange:
    """
    A single zone reassignment produced by reconciliation.

    Each event sets exactly one node's zone, so applying a batch in any
    order gives the same final scenario.
    """
    node_id: str
    previous: Zone
    zone: Zone
    tick: int


@dataclass
class LayoutState:
    """
    Mutable layout of one simulation instance.

    Attributes:
        node_ids: Ids in array order.
        positions_px: (N, 2) node centers.
        velocities_px: (N, 2) per-tick velocities.
        zones: Current zone per node, same order as node_ids.
        pins: Node index -> pinned (x, y) for nodes held by a drag.
        alpha: Simulation energy.
        alpha_target: Energy the simulation relaxes toward.
        tick: Number of steps taken.
    """
    node_ids: List[str]
    positions_px: np.ndarray
    velocities_px: np.ndarray
    zones: List[Zone]
    pins: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    alpha: float = 1.0
    alpha_target: float = 0.0
    tick: int = 0

    def __post_init__(self):
        self.positions_px = np.asarray(self.positions_px, dtype=np.float64).reshape(-1, 2)
        self.velocities_px = np.asarray(self.velocities_px, dtype=np.float64).reshape(-1, 2)

    @property
    def n_nodes(self) -> int:
        return len(self.node_ids)

    def index_of(self, node_id: str) -> int:
        try:
            return self.node_ids.index(node_id)
        except ValueError:
            raise NodeNotFoundError(f"Node '{node_id}' not found in layout.")

    def zone_of(self, node_id: str) -> Zone:
        return self.zones[self.index_of(node_id)]

    def position_of(self, node_id: str) -> Tuple[float, float]:
        x, y = self.positions_px[self.index_of(node_id)]
        return float(x), float(y)

    def zone_map(self) -> Dict[str, Zone]:
        return dict(zip(self.node_ids, self.zones))

    def copy(self) -> "LayoutState":
        return LayoutState(
            node_ids=list(self.node_ids),
            positions_px=self.positions_px.copy(),
            velocities_px=self.velocities_px.copy(),
            zones=list(self.zones),
            pins=dict(self.pins),
            alpha=self.alpha,
            alpha_target=self.alpha_target,
            tick=self.tick
        )


@dataclass
class StepRecord:
    """
    One node at one tick, for export.

    All values are scalars or serializable.
    """
    tick: int
    alpha: float
    node_id: str
    x_px: float
    y_px: float
    x_pct: float
    zone: str
    pinned: bool

    @classmethod
    def from_state(cls, state: LayoutState, width: float) -> List["StepRecord"]:
        records = []
        for i, node_id in enumerate(state.node_ids):
            x, y = state.positions_px[i]
            records.append(cls(
                tick=state.tick,
                alpha=state.alpha,
                node_id=node_id,
                x_px=float(x),
                y_px=float(y),
                x_pct=float(x) / width * 100.0,
                zone=state.zones[i].value,
                pinned=i in state.pins
            ))
        return records


def describe_node(node: TaskNode) -> Dict[str, object]:
    """Hover details for a task: scores as whole percentages."""
    return {
        "label": node.label,
        "description": node.description,
        "ai_confidence_pct": int(round(node.ai_confidence * 100)),
        "ethical_load_pct": int(round(node.ethical_complexity * 100)),
        "dependencies": list(node.dependencies),
    }
