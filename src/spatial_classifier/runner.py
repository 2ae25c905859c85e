"""
Headless layout runner.

Settles a scenario on a fixed canvas, optionally moving the boundaries
part-way through, and records every node at every saved tick.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .canvas import CanvasSize
from .config import LayoutConfig
from .controller import LayoutController
from .logger.logger import Logger
from .sizing import SizingSource
from .state import Scenario, StepRecord, ZoneChange
from .store import ScenarioStore
from .zones import BoundaryPair


@dataclass
class BoundaryChange:
    """Scripted boundary update applied before the given tick."""
    at_tick: int
    boundaries: Tuple[float, float]


@dataclass
class LayoutResult:
    """
    Complete run results.

    Attributes:
        records: Per-node step records.
        zone_changes: Every zone change in emission order.
        config: Configuration used.
        canvas: Canvas size used.
        initial_scenario: Scenario as supplied.
        final_scenario: Scenario after zone write-backs.
        final_boundaries: Boundary pair at the end of the run.
        ticks: Number of ticks taken.
        reached_rest: Whether energy fell below alpha_min.
    """
    records: List[StepRecord]
    zone_changes: List[ZoneChange]
    config: LayoutConfig
    canvas: CanvasSize
    initial_scenario: Scenario
    final_scenario: Scenario
    final_boundaries: BoundaryPair
    ticks: int
    reached_rest: bool


class LayoutRunner:
    """
    Drives a LayoutController with a fixed-size sizing source.
    """

    def __init__(
        self,
        scenario: Scenario,
        config: LayoutConfig,
        canvas: CanvasSize,
        boundary_changes: Optional[List[BoundaryChange]] = None
    ):
        self.config = config
        self.canvas = canvas
        self.initial_scenario = scenario
        self.boundary_changes = sorted(boundary_changes or [], key=lambda c: c.at_tick)

        self.store = ScenarioStore(scenario, config.boundaries.pair)
        self.sizing = SizingSource()
        self.controller = LayoutController(self.store, config)
        self.controller.attach_sizing_source(self.sizing)

        self.records: List[StepRecord] = []
        self.zone_changes: List[ZoneChange] = []

    def run(self) -> LayoutResult:
        self.sizing.report(self.canvas.width, self.canvas.height)
        sim = self.controller.simulation
        save_every = self.config.output.save_every_ticks
        max_ticks = self.config.output.max_ticks
        pending = list(self.boundary_changes)

        if sim is not None:
            self._record()

        ticks = 0
        while sim is not None and ticks < max_ticks:
            while pending and pending[0].at_tick <= ticks:
                self.store.update_boundaries(pending.pop(0).boundaries)
            if not sim.nodes or (sim.at_rest and not pending):
                break
            self.zone_changes.extend(self.controller.frame())
            ticks += 1
            if ticks % save_every == 0:
                self._record()

        reached_rest = sim is None or not sim.nodes or sim.at_rest
        self.controller.teardown()

        Logger.log(
            f"Run finished: {ticks} ticks, {len(self.zone_changes)} zone changes, "
            f"rest={reached_rest}", Logger.LogPriority.INFO
        )

        return LayoutResult(
            records=self.records,
            zone_changes=self.zone_changes,
            config=self.config,
            canvas=self.canvas,
            initial_scenario=self.initial_scenario,
            final_scenario=self.store.scenario,
            final_boundaries=self.store.boundaries,
            ticks=ticks,
            reached_rest=reached_rest
        )

    def _record(self) -> None:
        sim = self.controller.simulation
        self.records.extend(StepRecord.from_state(sim.state, self.canvas.width))


def run_layout(
    scenario: Scenario,
    config: LayoutConfig,
    canvas: CanvasSize,
    boundary_changes: Optional[List[BoundaryChange]] = None
) -> LayoutResult:
    """Convenience function to run a layout to rest."""
    return LayoutRunner(scenario, config, canvas, boundary_changes).run()
