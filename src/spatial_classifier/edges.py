"""
Dependency edges.

Edges are derived from each task's dependency list and carry no state of
their own. A dependency id that is not in the current node set, a self
reference, or a repeated id produces no edge.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from .state import TaskNode
from .zones import Zone


@dataclass(frozen=True)
class Edge:
    """Directed edge from a dependency (source) to the task needing it (target)."""
    source: str
    target: str


def derive_edges(nodes: Iterable[TaskNode]) -> List[Edge]:
    nodes = list(nodes)
    known = {n.id for n in nodes}
    edges: List[Edge] = []
    seen = set()
    for node in nodes:
        for dep_id in node.dependencies:
            if dep_id not in known or dep_id == node.id:
                continue
            key = (dep_id, node.id)
            if key in seen:
                continue
            seen.add(key)
            edges.append(Edge(source=dep_id, target=node.id))
    return edges


def edge_visible(edge: Edge, zones: Mapping[str, Zone]) -> bool:
    """An edge is drawn only while both endpoints sit in the same zone."""
    return zones[edge.source] == zones[edge.target]


def visible_edges(edges: Iterable[Edge], zones: Mapping[str, Zone]) -> List[Edge]:
    return [e for e in edges if edge_visible(e, zones)]


def link_counts(edges: Iterable[Edge]) -> Dict[str, int]:
    """Number of edges touching each node."""
    counts: Dict[str, int] = {}
    for e in edges:
        counts[e.source] = counts.get(e.source, 0) + 1
        counts[e.target] = counts.get(e.target, 0) + 1
    return counts
