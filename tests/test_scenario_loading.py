"""
Tests for scenario documents.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spatial_classifier.exceptions import InvalidScenarioError
from spatial_classifier.scenario import (
    load_scenario, save_scenario, scenario_from_dict, task_from_dict
)
from spatial_classifier.zones import Zone


EXAMPLE_SCENARIO = Path(__file__).parent.parent / "examples" / "scenario.json"


def task(task_id, **overrides):
    raw = {
        "id": task_id,
        "label": task_id.upper(),
        "description": "",
        "aiConfidence": 0.5,
        "ethicalComplexity": 0.5,
        "currentZone": "SHARED",
        "dependencies": [],
    }
    raw.update(overrides)
    return raw


class TestTaskParsing:

    def test_fields_mapped(self):
        node = task_from_dict(task("t1", aiConfidence=0.9, currentZone="AI", dependencies=["t0"]))
        assert node.id == "t1"
        assert node.label == "T1"
        assert node.ai_confidence == 0.9
        assert node.zone == Zone.AI
        assert node.dependencies == ("t0",)

    def test_current_agent_alias(self):
        raw = task("t1")
        del raw["currentZone"]
        raw["currentAgent"] = "HUMAN"
        assert task_from_dict(raw).zone == Zone.HUMAN

    def test_missing_id(self):
        with pytest.raises(InvalidScenarioError):
            task_from_dict({"label": "x"})

    def test_unknown_zone(self):
        with pytest.raises(InvalidScenarioError):
            task_from_dict(task("t1", currentZone="ROBOT"))

    def test_score_out_of_range(self):
        with pytest.raises(InvalidScenarioError):
            task_from_dict(task("t1", ethicalComplexity=1.5))

    def test_score_not_a_number(self):
        with pytest.raises(InvalidScenarioError):
            task_from_dict(task("t1", aiConfidence="high"))

    def test_dependencies_must_be_list(self):
        with pytest.raises(InvalidScenarioError):
            task_from_dict(task("t1", dependencies="t0"))


class TestScenarioParsing:

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidScenarioError, match="Duplicate"):
            scenario_from_dict({"title": "x", "tasks": [task("a"), task("a")]})

    def test_dangling_dependency_kept(self):
        scenario = scenario_from_dict({"title": "x", "tasks": [task("a", dependencies=["zz"])]})
        assert scenario.get_node("a").dependencies == ("zz",)

    def test_not_a_mapping(self):
        with pytest.raises(InvalidScenarioError):
            scenario_from_dict(["a"])

    def test_empty_tasks(self):
        assert scenario_from_dict({"title": "x"}).tasks == ()


class TestFiles:

    def test_example_loads(self):
        scenario = load_scenario(EXAMPLE_SCENARIO)
        assert len(scenario.tasks) == 6
        assert scenario.get_node("t4").zone == Zone.HUMAN

    def test_yaml_document(self, tmp_path):
        path = tmp_path / "scenario.yaml"
        path.write_text(
            "title: Y\n"
            "tasks:\n"
            "  - id: a\n"
            "    currentZone: AI\n"
        )
        scenario = load_scenario(path)
        assert scenario.get_node("a").zone == Zone.AI

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(InvalidScenarioError):
            load_scenario(path)

    def test_save_and_reload(self, tmp_path):
        scenario = load_scenario(EXAMPLE_SCENARIO).with_node_zone("t1", Zone.HUMAN)
        path = tmp_path / "out" / "saved.json"
        save_scenario(scenario, path)

        reloaded = load_scenario(path)
        assert reloaded == scenario
        assert json.loads(path.read_text())["tasks"][0]["currentZone"] == "HUMAN"
