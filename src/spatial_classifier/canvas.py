"""
Canvas geometry.

Pixel coordinates have their origin at the top-left corner. A band of
``top_offset`` pixels at the top is reserved for headers, so nodes live in

    [radius, width - radius] x [top_offset + radius, height - radius]
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CanvasSize:
    """Rendering surface dimensions in pixels."""
    width: float
    height: float

    @property
    def is_ready(self) -> bool:
        """Zero or negative sizes occur while the surface is mounting."""
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class CanvasBounds:
    """Axis-aligned box that node centers are clamped to."""
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @classmethod
    def for_canvas(cls, canvas: CanvasSize, radius: float, top_offset: float) -> "CanvasBounds":
        x_min = radius
        x_max = max(x_min, canvas.width - radius)
        y_min = top_offset + radius
        y_max = max(y_min, canvas.height - radius)
        return cls(x_min, x_max, y_min, y_max)

    def clamp(self, positions: np.ndarray) -> np.ndarray:
        """Clamp an (N, 2) array of positions, returning a new array."""
        out = np.array(positions, dtype=np.float64, copy=True)
        if out.size == 0:
            return out.reshape(0, 2)
        out[:, 0] = np.clip(out[:, 0], self.x_min, self.x_max)
        out[:, 1] = np.clip(out[:, 1], self.y_min, self.y_max)
        return out

    def clamp_point(self, x: float, y: float) -> Tuple[float, float]:
        return (
            float(min(self.x_max, max(self.x_min, x))),
            float(min(self.y_max, max(self.y_min, y))),
        )

    def contains(self, positions: np.ndarray, tol: float = 1e-9) -> bool:
        if len(positions) == 0:
            return True
        p = np.asarray(positions)
        return bool(
            np.all(p[:, 0] >= self.x_min - tol) and np.all(p[:, 0] <= self.x_max + tol)
            and np.all(p[:, 1] >= self.y_min - tol) and np.all(p[:, 1] <= self.y_max + tol)
        )


def pct_to_px(pct: float, width: float) -> float:
    return pct / 100.0 * width


def px_to_pct(x_px, width: float):
    """Horizontal pixel position(s) as percent of canvas width."""
    return np.asarray(x_px, dtype=np.float64) / width * 100.0
