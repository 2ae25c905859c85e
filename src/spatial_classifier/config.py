"""
Configuration loading and validation for the lane layout.

Loads YAML config and validates all parameters. Missing sections and keys
fall back to the defaults below.
"""

import numbers
import yaml
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from .zones import BoundaryPair, DEFAULT_BOUNDARIES


@dataclass
class CanvasConfig:
    """Node geometry on the canvas, in px."""
    node_radius: float = 32.0
    collision_margin: float = 5.0
    top_offset: float = 180.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.node_radius <= 0:
            return False, "node_radius must be positive"
        if self.collision_margin < 0:
            return False, "collision_margin must be non-negative"
        if self.top_offset < 0:
            return False, "top_offset must be non-negative"
        return True, None

    @property
    def collision_radius(self) -> float:
        return self.node_radius + self.collision_margin


@dataclass
class ForceConfig:
    """Force strengths. Negative charge repels."""
    charge_strength: float = -300.0
    link_distance: float = 80.0
    link_strength: float = 0.1
    collide_strength: float = 0.8
    y_strength: float = 0.08
    x_strength: float = 0.5

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.charge_strength > 0:
            return False, "charge_strength must be <= 0 (repulsion)"
        if self.link_distance < 0:
            return False, "link_distance must be non-negative"
        for name in ("link_strength", "collide_strength", "y_strength", "x_strength"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                return False, f"{name} must be in [0, 1]"
        return True, None


@dataclass
class DynamicsConfig:
    """
    Energy (alpha) schedule.

    alpha decays geometrically toward alpha_target every tick; the layout is
    at rest once alpha drops below alpha_min with a zero target.
    """
    alpha_min: float = 0.001
    alpha_decay: Optional[float] = None
    velocity_decay: float = 0.4
    zone_change_alpha: float = 0.2
    boundary_change_alpha: float = 0.3
    drag_alpha_target: float = 0.3
    hysteresis_pct: float = 0.0

    def __post_init__(self):
        if self.alpha_decay is None and 0 < self.alpha_min < 1:
            # reach alpha_min from 1.0 in about 300 ticks
            self.alpha_decay = 1.0 - self.alpha_min ** (1.0 / 300.0)

    def validate(self) -> tuple[bool, Optional[str]]:
        if not 0 < self.alpha_min < 1:
            return False, "alpha_min must be in (0, 1)"
        if self.alpha_decay is None or not 0 < self.alpha_decay < 1:
            return False, "alpha_decay must be in (0, 1)"
        if not 0 <= self.velocity_decay < 1:
            return False, "velocity_decay must be in [0, 1)"
        for name in ("zone_change_alpha", "boundary_change_alpha", "drag_alpha_target"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                return False, f"{name} must be in [0, 1]"
        if self.hysteresis_pct < 0:
            return False, "hysteresis_pct must be non-negative"
        return True, None


@dataclass
class SeedingConfig:
    """Pre-seed jitter. jitter_px is the full span, so offsets are +/- jitter_px / 2."""
    jitter_px: float = 50.0
    seed: Optional[int] = 42

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.jitter_px < 0:
            return False, "jitter_px must be non-negative"
        return True, None


@dataclass
class BoundaryConfig:
    """Initial boundary pair, clamped to a valid configuration."""
    initial: list[float] = field(default_factory=lambda: list(DEFAULT_BOUNDARIES))

    def validate(self) -> tuple[bool, Optional[str]]:
        if not isinstance(self.initial, (list, tuple)) or len(self.initial) != 2:
            return False, "initial must have 2 values"
        for value in self.initial:
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                return False, "initial values must be numbers"
        return True, None

    @property
    def pair(self) -> BoundaryPair:
        return BoundaryPair.from_sequence(self.initial)


@dataclass
class ZoneGraphConfig:
    """
    Per-zone mini graph: small nodes around the panel center.

    Nodes are clamped node_radius + padding inside the panel edges and
    collide at node_radius + collide_margin.
    """
    node_radius: float = 10.0
    charge_strength: float = -30.0
    center_strength: float = 0.1
    collide_margin: float = 2.0
    padding: float = 6.0
    jitter_px: float = 20.0

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.node_radius <= 0:
            return False, "node_radius must be positive"
        if self.charge_strength > 0:
            return False, "charge_strength must be <= 0 (repulsion)"
        if not 0.0 <= self.center_strength <= 1.0:
            return False, "center_strength must be in [0, 1]"
        for name in ("collide_margin", "padding", "jitter_px"):
            if getattr(self, name) < 0:
                return False, f"{name} must be non-negative"
        return True, None

    @property
    def collision_radius(self) -> float:
        return self.node_radius + self.collide_margin

    @property
    def edge_inset(self) -> float:
        return self.node_radius + self.padding


@dataclass
class OutputConfig:
    """Headless run output."""
    out_dir: str = "output"
    run_name: str = "layout_run"
    save_every_ticks: int = 1
    max_ticks: int = 600
    snapshot_png: bool = False

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.save_every_ticks < 1:
            return False, "save_every_ticks must be >= 1"
        if self.max_ticks < 1:
            return False, "max_ticks must be >= 1"
        return True, None


@dataclass
class LayoutConfig:
    """Complete layout configuration."""
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    forces: ForceConfig = field(default_factory=ForceConfig)
    dynamics: DynamicsConfig = field(default_factory=DynamicsConfig)
    seeding: SeedingConfig = field(default_factory=SeedingConfig)
    boundaries: BoundaryConfig = field(default_factory=BoundaryConfig)
    zone_graph: ZoneGraphConfig = field(default_factory=ZoneGraphConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> tuple[bool, Optional[str]]:
        for section_name in ["canvas", "forces", "dynamics", "seeding", "boundaries", "zone_graph", "output"]:
            section = getattr(self, section_name)
            is_valid, error = section.validate()
            if not is_valid:
                return False, f"{section_name}: {error}"
        return True, None


def default_config() -> LayoutConfig:
    return LayoutConfig()


def config_from_dict(raw: Optional[dict]) -> LayoutConfig:
    """
    Build and validate a config from a parsed mapping.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    raw = raw or {}

    def section(name, cls):
        values = raw.get(name) or {}
        try:
            return cls(**values)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {name}: {e}")

    config = LayoutConfig(
        canvas=section("canvas", CanvasConfig),
        forces=section("forces", ForceConfig),
        dynamics=section("dynamics", DynamicsConfig),
        seeding=section("seeding", SeedingConfig),
        boundaries=section("boundaries", BoundaryConfig),
        zone_graph=section("zone_graph", ZoneGraphConfig),
        output=section("output", OutputConfig)
    )

    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error}")

    return config


def load_config(path: Path) -> LayoutConfig:
    """
    Load and validate configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Validated LayoutConfig.

    Raises:
        ValueError: If config is invalid.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, 'r') as f:
        raw = yaml.safe_load(f)

    if raw is not None and not isinstance(raw, dict):
        raise ValueError("Invalid configuration: top level must be a mapping")

    return config_from_dict(raw)


def config_to_dict(config: LayoutConfig) -> dict:
    """Convert config to serializable dict."""
    return {
        "canvas": {
            "node_radius": config.canvas.node_radius,
            "collision_margin": config.canvas.collision_margin,
            "top_offset": config.canvas.top_offset
        },
        "forces": {
            "charge_strength": config.forces.charge_strength,
            "link_distance": config.forces.link_distance,
            "link_strength": config.forces.link_strength,
            "collide_strength": config.forces.collide_strength,
            "y_strength": config.forces.y_strength,
            "x_strength": config.forces.x_strength
        },
        "dynamics": {
            "alpha_min": config.dynamics.alpha_min,
            "alpha_decay": config.dynamics.alpha_decay,
            "velocity_decay": config.dynamics.velocity_decay,
            "zone_change_alpha": config.dynamics.zone_change_alpha,
            "boundary_change_alpha": config.dynamics.boundary_change_alpha,
            "drag_alpha_target": config.dynamics.drag_alpha_target,
            "hysteresis_pct": config.dynamics.hysteresis_pct
        },
        "seeding": {
            "jitter_px": config.seeding.jitter_px,
            "seed": config.seeding.seed
        },
        "boundaries": {
            "initial": list(config.boundaries.pair.as_tuple())
        },
        "zone_graph": {
            "node_radius": config.zone_graph.node_radius,
            "charge_strength": config.zone_graph.charge_strength,
            "center_strength": config.zone_graph.center_strength,
            "collide_margin": config.zone_graph.collide_margin,
            "padding": config.zone_graph.padding,
            "jitter_px": config.zone_graph.jitter_px
        },
        "output": {
            "out_dir": config.output.out_dir,
            "run_name": config.output.run_name,
            "save_every_ticks": config.output.save_every_ticks,
            "max_ticks": config.output.max_ticks,
            "snapshot_png": config.output.snapshot_png
        }
    }
