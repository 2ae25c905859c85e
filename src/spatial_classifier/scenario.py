"""
Scenario documents.

A scenario file (JSON or YAML) has the shape produced by the decomposition
service:

    title: str
    description: str
    tasks:
      - id: str
        label: str
        description: str
        aiConfidence: float in [0, 1]
        ethicalComplexity: float in [0, 1]
        currentZone: AI | SHARED | HUMAN     (``currentAgent`` also accepted)
        dependencies: [str, ...]
"""

import json
import yaml
from pathlib import Path
from typing import Any, Mapping

from .exceptions import InvalidScenarioError
from .state import Scenario, TaskNode
from .zones import Zone


def _score(raw: Mapping[str, Any], key: str, task_id: str) -> float:
    value = raw.get(key, 0.5)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidScenarioError(f"Task '{task_id}': {key} must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise InvalidScenarioError(f"Task '{task_id}': {key} must be in [0, 1], got {value}")
    return value


def task_from_dict(raw: Mapping[str, Any]) -> TaskNode:
    """
    Build a TaskNode from one task mapping.

    Raises:
        InvalidScenarioError: If required fields are missing or out of range.
    """
    if not isinstance(raw, Mapping):
        raise InvalidScenarioError(f"Task must be a mapping, got {type(raw).__name__}")
    if "id" not in raw or raw["id"] in (None, ""):
        raise InvalidScenarioError("Task is missing an id")
    task_id = str(raw["id"])

    zone_raw = raw.get("currentZone", raw.get("currentAgent", Zone.SHARED.value))
    try:
        zone = Zone.parse(zone_raw)
    except ValueError as e:
        raise InvalidScenarioError(f"Task '{task_id}': {e}")

    deps = raw.get("dependencies") or []
    if isinstance(deps, str) or not isinstance(deps, (list, tuple)):
        raise InvalidScenarioError(f"Task '{task_id}': dependencies must be a list")

    return TaskNode(
        id=task_id,
        label=str(raw.get("label", task_id)),
        description=str(raw.get("description", "")),
        ai_confidence=_score(raw, "aiConfidence", task_id),
        ethical_complexity=_score(raw, "ethicalComplexity", task_id),
        zone=zone,
        dependencies=tuple(str(d) for d in deps)
    )


def scenario_from_dict(raw: Mapping[str, Any]) -> Scenario:
    """
    Build a Scenario from a parsed document.

    Dependencies naming unknown tasks are kept as-is; they simply produce
    no edge.

    Raises:
        InvalidScenarioError: On malformed documents or duplicate task ids.
    """
    if not isinstance(raw, Mapping):
        raise InvalidScenarioError("Scenario must be a mapping")
    tasks_raw = raw.get("tasks", [])
    if not isinstance(tasks_raw, (list, tuple)):
        raise InvalidScenarioError("tasks must be a list")

    tasks = tuple(task_from_dict(t) for t in tasks_raw)
    ids = [t.id for t in tasks]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise InvalidScenarioError(f"Duplicate task ids: {', '.join(duplicates)}")

    return Scenario(
        title=str(raw.get("title", "")),
        description=str(raw.get("description", "")),
        tasks=tasks
    )


def load_scenario(path: Path) -> Scenario:
    """
    Load a scenario from a .json, .yaml or .yml file.

    Raises:
        FileNotFoundError: If file doesn't exist.
        InvalidScenarioError: If the document cannot be parsed or validated.
    """
    path = Path(path)
    with open(path, 'r') as f:
        text = f.read()

    try:
        if path.suffix.lower() == ".json":
            raw = json.loads(text)
        else:
            raw = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidScenarioError(f"Cannot parse {path.name}: {e}")

    return scenario_from_dict(raw)


def save_scenario(scenario: Scenario, path: Path) -> None:
    """Write a scenario as JSON, with zones as currently stored."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(scenario.to_dict(), f, indent=2)
