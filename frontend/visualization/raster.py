"""
Raster Surface

Matplotlib (Agg) implementation of the drawing surface. One surface unit is
one pixel; output is PNG bytes or an RGBA array.
"""

from __future__ import annotations
from typing import Optional
import io

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, Rectangle

from .surface import Surface


class RasterSurface(Surface):
    """Pixel surface backed by a headless matplotlib figure."""

    def __init__(self, width: float, height: float, dpi: int = 100):
        super().__init__(width, height)
        self._dpi = dpi
        self._fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self._canvas = FigureCanvasAgg(self._fig)
        self._ax = self._fig.add_axes([0.0, 0.0, 1.0, 1.0])
        self._ax.set_xlim(0, width)
        self._ax.set_ylim(height, 0)  # y grows downwards
        self._ax.set_axis_off()
        self._z = 0

    def _points(self, pixels: float) -> float:
        return pixels * 72.0 / self._dpi

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def clear(self, color: str) -> None:
        for artist in list(self._ax.patches) + list(self._ax.lines) + list(self._ax.texts):
            artist.remove()
        self._fig.patch.set_facecolor(color)
        self._ax.set_facecolor(color)
        self._z = 0

    def line(self, x1, y1, x2, y2, color, width):
        self._ax.add_line(Line2D(
            [x1, x2], [y1, y2],
            color=color,
            linewidth=self._points(width),
            zorder=self._next_z(),
        ))

    def circle(self, x, y, radius, fill, outline=None, outline_width=0.0):
        self._ax.add_patch(Circle(
            (x, y), radius,
            facecolor=fill,
            edgecolor=outline or "none",
            linewidth=self._points(outline_width) if outline else 0.0,
            zorder=self._next_z(),
        ))

    def text(self, x, y, text, color, size, bold=False, align="center"):
        self._ax.text(
            x, y, text,
            color=color,
            fontsize=self._points(size),
            fontweight="bold" if bold else "normal",
            family="monospace",
            ha=align,
            va="center",
            zorder=self._next_z(),
            parse_math=False,
        )

    def rect(self, x, y, width, height, fill):
        self._ax.add_patch(Rectangle(
            (x, y), width, height,
            facecolor=fill,
            edgecolor="none",
            zorder=self._next_z(),
        ))

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self._fig.savefig(buf, format="png", dpi=self._dpi, facecolor=self._fig.get_facecolor())
        return buf.getvalue()

    def to_array(self) -> np.ndarray:
        """(height, width, 4) uint8 RGBA pixels."""
        self._canvas.draw()
        return np.asarray(self._canvas.buffer_rgba()).copy()

    def save(self, path: str, fmt: Optional[str] = None) -> None:
        self._fig.savefig(path, format=fmt, dpi=self._dpi, facecolor=self._fig.get_facecolor())
