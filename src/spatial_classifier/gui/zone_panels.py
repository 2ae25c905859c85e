"""
Zone outcome panels: one small drawlist per zone showing that zone's tasks
as a free-floating mini graph, or a placeholder when the zone is empty.
"""

import dearpygui.dearpygui as dpg
from typing import Callable, Dict, Optional, Tuple

from ..canvas import CanvasSize
from ..rendering import RGBA, ZONE_COLORS, with_opacity
from ..zone_graph import ZoneGraphBoard
from ..zones import Zone

PANEL_GAP = 8
PANEL_TITLES = {
    Zone.AI: "AI OUTCOMES",
    Zone.SHARED: "SHARED OUTCOMES",
    Zone.HUMAN: "HUMAN OUTCOMES",
}


class ZonePanels:
    """Draws a ``ZoneGraphBoard``; owns no layout state itself."""

    def __init__(self, board: ZoneGraphBoard, node_radius: float):
        self.board = board
        self.node_radius = node_radius
        self._window_tag: Optional[int] = None
        self._drawlists: Dict[Zone, int] = {}

    @staticmethod
    def panel_size(width: int, height: int) -> CanvasSize:
        """Size of one panel when three share ``width``."""
        return CanvasSize(max(0, (width - 4 * PANEL_GAP) // 3), max(0, height - 2 * PANEL_GAP))

    def create(self, pos: Tuple[int, int], width: int, height: int) -> int:
        panel = self.panel_size(width, height)
        with dpg.window(pos=pos, width=width, height=height, no_title_bar=True,
                        no_move=True, no_resize=True, no_scrollbar=True) as self._window_tag:
            with dpg.group(horizontal=True):
                for zone in Zone:
                    self._drawlists[zone] = dpg.add_drawlist(width=max(1, int(panel.width)),
                                                             height=max(1, int(panel.height)))
        self.board.set_panel_size(panel)
        return self._window_tag

    def resize(self, pos: Tuple[int, int], width: int, height: int) -> None:
        if self._window_tag is None:
            return
        panel = self.panel_size(width, height)
        dpg.configure_item(self._window_tag, pos=pos, width=max(0, width), height=max(0, height))
        for tag in self._drawlists.values():
            dpg.configure_item(tag, width=max(1, int(panel.width)), height=max(1, int(panel.height)))
        self.board.set_panel_size(panel)

    def draw(self, node_color: Callable[[str], RGBA]) -> None:
        panel = self.board.panel
        for zone, tag in self._drawlists.items():
            dpg.delete_item(tag, children_only=True)
            tint = with_opacity(ZONE_COLORS[zone], 0.15)
            dpg.draw_rectangle((0, 0), (panel.width, panel.height), color=ZONE_COLORS[zone],
                               fill=tint, parent=tag)
            dpg.draw_text((8, 6), PANEL_TITLES[zone], color=ZONE_COLORS[zone], size=12, parent=tag)

            graph = self.board.graph(zone)
            if graph is None:
                continue
            if graph.is_empty:
                dpg.draw_text((panel.width / 2 - 60, panel.height / 2 - 6), graph.placeholder,
                              color=(160, 160, 160, 255), size=11, parent=tag)
                continue
            for node_id, pos in zip(graph.node_ids, graph.positions):
                dpg.draw_circle(tuple(pos), self.node_radius, color=(255, 255, 255, 200),
                                fill=node_color(node_id), thickness=1, parent=tag)
