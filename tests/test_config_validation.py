"""
Tests for configuration loading and validation.
"""

import sys
from pathlib import Path

import pytest
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spatial_classifier.config import (
    LayoutConfig, CanvasConfig, ForceConfig, DynamicsConfig, SeedingConfig,
    BoundaryConfig, OutputConfig, ZoneGraphConfig, default_config, config_from_dict, config_to_dict,
    load_config
)
from spatial_classifier.zones import BoundaryPair


EXAMPLE_CONFIG = Path(__file__).parent.parent / "examples" / "layout.yaml"


class TestDefaults:
    """Default values."""

    def test_default_config_valid(self):
        is_valid, error = default_config().validate()
        assert is_valid, error

    def test_default_layout_constants(self):
        config = default_config()
        assert config.canvas.node_radius == 32.0
        assert config.canvas.collision_radius == 37.0
        assert config.canvas.top_offset == 180.0
        assert config.forces.charge_strength == -300.0
        assert config.forces.x_strength == 0.5
        assert config.boundaries.pair == BoundaryPair(33, 66)

    def test_alpha_decay_derived_from_alpha_min(self):
        dynamics = DynamicsConfig()
        assert dynamics.alpha_decay == pytest.approx(1.0 - 0.001 ** (1.0 / 300.0))
        assert (1.0 - dynamics.alpha_decay) ** 300 == pytest.approx(0.001)

    def test_explicit_alpha_decay_kept(self):
        assert DynamicsConfig(alpha_decay=0.05).alpha_decay == 0.05


class TestSectionValidation:
    """Each section rejects out-of-range values."""

    def test_canvas_radius_positive(self):
        is_valid, error = CanvasConfig(node_radius=0).validate()
        assert not is_valid
        assert "node_radius" in error

    def test_charge_must_repel(self):
        is_valid, error = ForceConfig(charge_strength=10).validate()
        assert not is_valid
        assert "charge_strength" in error

    def test_strength_range(self):
        is_valid, error = ForceConfig(x_strength=1.5).validate()
        assert not is_valid
        assert "x_strength" in error

    def test_velocity_decay_range(self):
        is_valid, _ = DynamicsConfig(velocity_decay=1.0).validate()
        assert not is_valid

    def test_alpha_min_range(self):
        is_valid, _ = DynamicsConfig(alpha_min=0.0).validate()
        assert not is_valid

    def test_negative_hysteresis(self):
        is_valid, error = DynamicsConfig(hysteresis_pct=-1).validate()
        assert not is_valid
        assert "hysteresis_pct" in error

    def test_negative_jitter(self):
        is_valid, _ = SeedingConfig(jitter_px=-1).validate()
        assert not is_valid

    def test_boundaries_need_two_values(self):
        is_valid, _ = BoundaryConfig(initial=[33]).validate()
        assert not is_valid

    def test_boundary_values_must_be_numbers(self):
        for initial in ([None, 50], [33, "66"], [True, 50]):
            is_valid, error = BoundaryConfig(initial=initial).validate()
            assert not is_valid
            assert error == "initial values must be numbers"

    def test_invalid_boundaries_are_clamped_not_rejected(self):
        config = BoundaryConfig(initial=[50, 52])
        assert config.validate()[0]
        assert config.pair.is_valid()

    def test_zone_graph_section(self):
        assert ZoneGraphConfig().validate()[0]
        assert not ZoneGraphConfig(node_radius=0).validate()[0]
        assert not ZoneGraphConfig(charge_strength=5).validate()[0]
        assert not ZoneGraphConfig(center_strength=1.5).validate()[0]
        assert not ZoneGraphConfig(padding=-1).validate()[0]

    def test_output_ticks(self):
        assert not OutputConfig(max_ticks=0).validate()[0]
        assert not OutputConfig(save_every_ticks=0).validate()[0]

    def test_error_names_section(self):
        config = LayoutConfig(forces=ForceConfig(link_strength=2.0))
        is_valid, error = config.validate()
        assert not is_valid
        assert error.startswith("forces:")


class TestLoading:
    """Building configs from mappings and YAML files."""

    def test_empty_mapping_gives_defaults(self):
        assert config_from_dict({}) == default_config()
        assert config_from_dict(None) == default_config()

    def test_partial_section(self):
        config = config_from_dict({"dynamics": {"hysteresis_pct": 1.5}})
        assert config.dynamics.hysteresis_pct == 1.5
        assert config.dynamics.velocity_decay == 0.4

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Invalid configuration"):
            config_from_dict({"forces": {"gravity": 1.0}})

    def test_invalid_value_rejected(self):
        with pytest.raises(ValueError, match="Invalid configuration"):
            config_from_dict({"canvas": {"node_radius": -5}})

    def test_null_boundary_rejected_at_load(self):
        with pytest.raises(ValueError, match="initial values must be numbers"):
            config_from_dict({"boundaries": {"initial": [None, 50]}})

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "layout.yaml"
        path.write_text(yaml.safe_dump({"boundaries": {"initial": [25, 75]}, "seeding": {"seed": 7}}))
        config = load_config(path)
        assert config.boundaries.pair == BoundaryPair(25, 75)
        assert config.seeding.seed == 7

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "layout.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_example_config_loads(self):
        config = load_config(EXAMPLE_CONFIG)
        assert config.output.snapshot_png is True
        assert config.zone_graph.node_radius == 10
        assert config.validate()[0]

    def test_to_dict_reloads(self):
        config = config_from_dict({"forces": {"charge_strength": -200}})
        again = config_from_dict(config_to_dict(config))
        assert again == config
