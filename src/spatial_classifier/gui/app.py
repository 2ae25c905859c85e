"""
Main application for the lane layout GUI.

Shows the current scenario on the lane canvas, lets the user drag nodes and
boundary handles, and keeps the store in sync with every zone change.
"""

import time
import dearpygui.dearpygui as dpg
from typing import Optional
from pathlib import Path

from ..config import LayoutConfig, default_config, load_config
from ..controller import LayoutController
from ..logger.logger import Logger
from ..canvas import CanvasSize
from ..rendering import NodeColorAnimator, ZONE_COLORS
from ..scenario import load_scenario
from ..simulation import LaneSimulation
from ..sizing import SizingSource
from ..state import Scenario
from ..store import ScenarioStore
from ..zone_graph import ZoneGraphBoard
from .viewport import LaneViewport, ViewportConfig
from .zone_panels import ZonePanels

STATUS_HEIGHT = 40
PANEL_HEIGHT = 200


class LaneLayoutApp:
    """
    Usage:
        app = LaneLayoutApp(scenario, config)
        app.run()
    """

    def __init__(
        self,
        scenario: Scenario,
        config: Optional[LayoutConfig] = None,
        title: str = "Reality Editor"
    ):
        self.config = config or default_config()
        self.title = title

        self.store = ScenarioStore(scenario, self.config.boundaries.pair)
        self.sizing = SizingSource()
        self.animator: Optional[NodeColorAnimator] = None
        self.controller = LayoutController(
            self.store,
            self.config,
            on_rebuild=self._on_rebuild
        )
        self.viewport = LaneViewport(ViewportConfig(node_radius=self.config.canvas.node_radius))
        self.board = ZoneGraphBoard(self.store, CanvasSize(0, 0), self.config)
        self.panels = ZonePanels(self.board, self.config.zone_graph.node_radius)
        self._status_tag: Optional[int] = None
        self._is_running = False

    def run(self) -> None:
        """Run the application (blocking)."""
        dpg.create_context()
        dpg.create_viewport(title=self.title, width=1100, height=760)

        self._create_ui()
        dpg.set_viewport_resize_callback(self._on_viewport_resize)

        dpg.setup_dearpygui()
        dpg.show_viewport()

        self.controller.attach_sizing_source(self.sizing)
        self._report_size(dpg.get_viewport_client_width(), dpg.get_viewport_client_height())

        self._is_running = True
        try:
            while dpg.is_dearpygui_running() and self._is_running:
                self._frame_update()
                dpg.render_dearpygui_frame()
        finally:
            self.controller.teardown()
            self.board.teardown()
            self.viewport.destroy()
            dpg.destroy_context()

    def stop(self) -> None:
        self._is_running = False

    def _create_ui(self) -> None:
        with dpg.window(label="Status", pos=(0, 0), height=STATUS_HEIGHT,
                        no_title_bar=True, no_move=True, no_resize=True):
            self._status_tag = dpg.add_text("")

        self.viewport.create(pos=(0, STATUS_HEIGHT), width=1100, height=720 - PANEL_HEIGHT)
        self.panels.create(pos=(0, 760 - PANEL_HEIGHT), width=1100, height=PANEL_HEIGHT)
        self.viewport.set_callbacks(
            on_node_press=self.controller.start_drag,
            on_node_drag=self.controller.drag_to,
            on_node_release=self.controller.end_drag,
            on_boundary_drag=self.controller.move_boundary
        )

    def _on_viewport_resize(self, sender, app_data) -> None:
        # app_data: [viewport w, viewport h, client w, client h]
        self._report_size(app_data[2], app_data[3])

    def _report_size(self, client_width: int, client_height: int) -> None:
        width = max(0, client_width)
        height = max(0, client_height - STATUS_HEIGHT - PANEL_HEIGHT)
        self.viewport.resize(width, height)
        self.panels.resize((0, STATUS_HEIGHT + height), width, PANEL_HEIGHT)
        self.sizing.report(width, height)

    def _on_rebuild(self, simulation: Optional[LaneSimulation]) -> None:
        if simulation is None:
            self.animator = None
            return
        self.animator = NodeColorAnimator(simulation.state.zone_map())

    def _panel_color(self, node_id: str, now: float):
        if self.animator is not None:
            return self.animator.color_of(node_id, now)
        return ZONE_COLORS[self.store.scenario.get_node(node_id).zone]

    def _frame_update(self) -> None:
        events = self.controller.frame()
        self.board.tick()
        now = time.monotonic()
        if self.animator is not None and events:
            self.animator.consume(events, now)

        snapshot = self.controller.snapshot(events)
        scenario = self.store.scenario
        labels = {t.id: t.label for t in scenario.tasks} if scenario else {}
        animator = self.animator
        self.viewport.draw(
            snapshot,
            node_color=lambda node_id: animator.color_of(node_id, now),
            labels=labels
        )
        self.panels.draw(lambda node_id: self._panel_color(node_id, now))

        if self._status_tag is not None:
            boundaries = self.store.boundaries
            counts = scenario.zone_counts() if scenario else {}
            dpg.set_value(
                self._status_tag,
                f"{scenario.title if scenario else '-'}   "
                f"boundaries {boundaries.lower_pct:.0f}% | {boundaries.upper_pct:.0f}%   "
                + "  ".join(f"{z.value}: {n}" for z, n in counts.items())
            )


def run_gui(scenario_path: str, config_path: Optional[str] = None) -> None:
    """
    Launch GUI for a scenario file.

    Args:
        scenario_path: Path to scenario JSON or YAML.
        config_path: Path to YAML config file (optional).
    """
    Logger.initialize()
    config = load_config(Path(config_path)) if config_path else default_config()
    scenario = load_scenario(Path(scenario_path))

    app = LaneLayoutApp(scenario, config, title=f"Reality Editor - {scenario.title}")
    app.run()
