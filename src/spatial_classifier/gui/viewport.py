"""
Lane viewport for 2D visualization.

Renders the layout with:
    - Three tinted lanes separated by draggable boundary handles
    - Dependency edges (only between nodes of the same zone)
    - Nodes as circles colored by zone, labelled
"""

import dearpygui.dearpygui as dpg
import numpy as np
from typing import Callable, Dict, Optional, Tuple
from dataclasses import dataclass

from ..canvas import pct_to_px
from ..controller import LayoutSnapshot
from ..rendering import RGBA, ZONE_COLORS, with_opacity
from ..zones import Zone


@dataclass
class ViewportConfig:
    """Configuration for lane viewport."""
    node_radius: float = 32.0
    handle_half_width: float = 8.0
    lane_tint_opacity: float = 0.12
    edge_thickness: float = 2.0
    label_size: int = 11
    background_color: Tuple[int, int, int, int] = (18, 18, 20, 255)
    boundary_color: Tuple[int, int, int, int] = (255, 255, 255, 120)
    node_outline_color: Tuple[int, int, int, int] = (255, 255, 255, 255)
    dragged_outline_color: Tuple[int, int, int, int] = (255, 220, 80, 255)


class LaneViewport:
    """
    Drawlist-backed canvas.

    Works in canvas pixels: the drawlist origin is the layout origin, so no
    coordinate transform beyond the drawlist offset is needed.
    """

    def __init__(self, config: Optional[ViewportConfig] = None):
        self.config = config or ViewportConfig()

        self._drawlist_tag: Optional[int] = None
        self._window_tag: Optional[int] = None
        self._handler_tag: Optional[int] = None

        self._on_node_press: Optional[Callable[[str], None]] = None
        self._on_node_drag: Optional[Callable[[str, float, float], None]] = None
        self._on_node_release: Optional[Callable[[str], None]] = None
        self._on_boundary_drag: Optional[Callable[[int, float], None]] = None

        self._dragging_node: Optional[str] = None
        self._dragging_handle: Optional[int] = None
        self._node_positions: Dict[str, Tuple[float, float]] = {}
        self._handle_x: Tuple[float, float] = (0.0, 0.0)

    def create(self, pos: Tuple[int, int], width: int, height: int) -> int:
        """
        Create window, drawlist and mouse handlers.

        Returns:
            Window tag.
        """
        with dpg.window(
            label="Reality Editor",
            pos=pos,
            width=width,
            height=height,
            no_scrollbar=True,
            no_scroll_with_mouse=True,
            no_move=True,
            no_title_bar=True
        ) as self._window_tag:
            self._drawlist_tag = dpg.add_drawlist(width=width, height=height)

        with dpg.handler_registry() as self._handler_tag:
            dpg.add_mouse_click_handler(callback=self._on_mouse_click)
            dpg.add_mouse_drag_handler(callback=self._on_mouse_drag)
            dpg.add_mouse_release_handler(callback=self._on_mouse_release)

        return self._window_tag

    def resize(self, width: int, height: int) -> None:
        if self._window_tag is None:
            return
        dpg.configure_item(self._window_tag, width=max(0, width), height=max(0, height))
        dpg.configure_item(self._drawlist_tag, width=max(1, width), height=max(1, height))

    def destroy(self) -> None:
        """Remove handlers so no callback reaches a torn-down controller."""
        if self._handler_tag is not None:
            dpg.delete_item(self._handler_tag)
            self._handler_tag = None
        self._dragging_node = None
        self._dragging_handle = None

    def set_callbacks(
        self,
        on_node_press: Optional[Callable[[str], None]] = None,
        on_node_drag: Optional[Callable[[str, float, float], None]] = None,
        on_node_release: Optional[Callable[[str], None]] = None,
        on_boundary_drag: Optional[Callable[[int, float], None]] = None
    ) -> None:
        """
        Args:
            on_node_press: Node grabbed (node_id).
            on_node_drag: Pointer moved while holding a node (node_id, x_px, y_px).
            on_node_release: Node let go (node_id).
            on_boundary_drag: Handle moved (handle index, x_px).
        """
        self._on_node_press = on_node_press
        self._on_node_drag = on_node_drag
        self._on_node_release = on_node_release
        self._on_boundary_drag = on_boundary_drag

    def draw(
        self,
        snapshot: Optional[LayoutSnapshot],
        node_color: Callable[[str], RGBA],
        labels: Dict[str, str]
    ) -> None:
        """
        Redraw the whole frame. ``None`` clears the canvas (inactive view).
        """
        if self._drawlist_tag is None:
            return
        dpg.delete_item(self._drawlist_tag, children_only=True)
        self._node_positions = {}
        if snapshot is None:
            return

        width = snapshot.canvas.width
        height = snapshot.canvas.height
        cfg = self.config

        dpg.draw_rectangle((0, 0), (width, height), color=cfg.background_color,
                           fill=cfg.background_color, parent=self._drawlist_tag)
        for zone in Zone:
            lo, hi = snapshot.boundaries.lane_span_pct(zone)
            tint = with_opacity(ZONE_COLORS[zone], cfg.lane_tint_opacity)
            dpg.draw_rectangle((pct_to_px(lo, width), 0), (pct_to_px(hi, width), height),
                               color=tint, fill=tint, parent=self._drawlist_tag)

        self._handle_x = tuple(pct_to_px(p, width) for p in snapshot.boundaries.as_tuple())
        for x in self._handle_x:
            dpg.draw_line((x, 0), (x, height), color=cfg.boundary_color,
                          thickness=1, parent=self._drawlist_tag)
            dpg.draw_rectangle((x - cfg.handle_half_width, height / 2 - 24),
                               (x + cfg.handle_half_width, height / 2 + 24),
                               color=cfg.boundary_color, fill=cfg.boundary_color,
                               rounding=4, parent=self._drawlist_tag)

        for edge, style in snapshot.edges:
            if not style.visible:
                continue
            p1 = snapshot.positions[edge.source]
            p2 = snapshot.positions[edge.target]
            dpg.draw_arrow(p2, p1, color=with_opacity(style.color, style.opacity),
                           thickness=cfg.edge_thickness, size=6, parent=self._drawlist_tag)

        for node_id, pos in snapshot.positions.items():
            self._node_positions[node_id] = pos
            outline = cfg.dragged_outline_color if node_id == snapshot.dragged_node else cfg.node_outline_color
            dpg.draw_circle(pos, cfg.node_radius, color=outline, fill=node_color(node_id),
                            thickness=2, parent=self._drawlist_tag)
            label = labels.get(node_id, node_id)
            if len(label) > 10:
                label = label[:8] + ".."
            dpg.draw_text((pos[0] - cfg.node_radius + 6, pos[1] - 6), label.upper(),
                          color=(255, 255, 255, 255), size=cfg.label_size,
                          parent=self._drawlist_tag)

    # ---- hit testing ---- #

    def _local_mouse(self) -> Tuple[float, float]:
        mx, my = dpg.get_mouse_pos(local=False)
        ox, oy = dpg.get_item_rect_min(self._drawlist_tag)
        return mx - ox, my - oy

    def _find_node_at(self, x_px: float, y_px: float) -> Optional[str]:
        for node_id, (nx, ny) in self._node_positions.items():
            if np.hypot(x_px - nx, y_px - ny) <= self.config.node_radius:
                return node_id
        return None

    def _find_handle_at(self, x_px: float) -> Optional[int]:
        for i, hx in enumerate(self._handle_x):
            if abs(x_px - hx) <= self.config.handle_half_width * 1.5:
                return i
        return None

    def _on_mouse_click(self, sender, app_data) -> None:
        if app_data != 0 or self._drawlist_tag is None:
            return
        x, y = self._local_mouse()
        node_id = self._find_node_at(x, y)
        if node_id is not None:
            self._dragging_node = node_id
            if self._on_node_press:
                self._on_node_press(node_id)
            return
        self._dragging_handle = self._find_handle_at(x)

    def _on_mouse_drag(self, sender, app_data) -> None:
        if self._drawlist_tag is None:
            return
        x, y = self._local_mouse()
        if self._dragging_node is not None and self._on_node_drag:
            self._on_node_drag(self._dragging_node, x, y)
        elif self._dragging_handle is not None and self._on_boundary_drag:
            self._on_boundary_drag(self._dragging_handle, x)

    def _on_mouse_release(self, sender, app_data) -> None:
        if self._dragging_node is not None and self._on_node_release:
            self._on_node_release(self._dragging_node)
        self._dragging_node = None
        self._dragging_handle = None
