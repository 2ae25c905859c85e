"""
Spatial Classifier - boundary-driven force layout for task zoning.

Lays out a scenario's tasks in three horizontal lanes (AI / SHARED / HUMAN)
separated by two movable boundaries, and keeps every task's zone in step
with where the layout puts it.

Units:
    - Positions: px, origin top-left
    - Boundaries and lane coordinates: percent of canvas width
"""

__version__ = "0.1.0"

from .zones import Zone, BoundaryPair, zone_path
from .canvas import CanvasSize, CanvasBounds
from .state import TaskNode, Scenario, LayoutState, ZoneChange, StepRecord, describe_node
from .edges import Edge, derive_edges, edge_visible, visible_edges
from .model import LaneForceModel
from .integrator import LayoutIntegrator, reconcile_zones
from .seeding import seed_positions, make_rng
from .simulation import LaneSimulation
from .zone_graph import ZoneGraphSimulation, ZoneGraphBoard, EMPTY_ZONE_PLACEHOLDER
from .store import ScenarioStore, StoreEvent
from .sizing import SizingSource
from .controller import LayoutController, LayoutSnapshot
from .rendering import NodeColorAnimator, EdgeStyle, edge_style, ZONE_COLORS
from .runner import LayoutRunner, LayoutResult, BoundaryChange, run_layout
from .scenario import load_scenario, save_scenario, scenario_from_dict
from .exceptions import InvalidScenarioError, NodeNotFoundError, InvalidCanvasError

from .config import (
    LayoutConfig,
    CanvasConfig,
    ForceConfig,
    DynamicsConfig,
    SeedingConfig,
    BoundaryConfig,
    OutputConfig,
    ZoneGraphConfig,
    default_config,
    load_config
)
