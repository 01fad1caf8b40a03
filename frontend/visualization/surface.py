"""
Drawing Surfaces

Responsibility:
Minimal 2D drawing interface the renderer paints onto. Coordinates are
surface units with the origin at the top-left corner, y growing downwards.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple


class Surface(ABC):
    """2D raster-like drawing target."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height

    @abstractmethod
    def clear(self, color: str) -> None:
        pass

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, color: str, width: float) -> None:
        pass

    @abstractmethod
    def circle(
        self,
        x: float,
        y: float,
        radius: float,
        fill: str,
        outline: Optional[str] = None,
        outline_width: float = 0.0,
    ) -> None:
        pass

    @abstractmethod
    def text(
        self,
        x: float,
        y: float,
        text: str,
        color: str,
        size: float,
        bold: bool = False,
        align: str = "center",
    ) -> None:
        pass

    @abstractmethod
    def rect(self, x: float, y: float, width: float, height: float, fill: str) -> None:
        pass


@dataclass(frozen=True)
class DrawCommand:
    """One recorded drawing primitive."""
    op: str                          # clear | line | circle | text | rect
    geometry: Tuple[float, ...]
    color: str
    stroke: Optional[str] = None
    width: float = 0.0
    text: Optional[str] = None
    bold: bool = False


class RecordingSurface(Surface):
    """
    Surface that keeps a display list instead of pixels.

    Used for headless rendering, the HTTP view and tests.
    """

    def __init__(self, width: float, height: float):
        super().__init__(width, height)
        self.commands: List[DrawCommand] = []

    def clear(self, color: str) -> None:
        self.commands.clear()
        self.commands.append(DrawCommand("clear", (0.0, 0.0, self.width, self.height), color))

    def line(self, x1, y1, x2, y2, color, width):
        self.commands.append(DrawCommand("line", (x1, y1, x2, y2), color, width=width))

    def circle(self, x, y, radius, fill, outline=None, outline_width=0.0):
        self.commands.append(DrawCommand("circle", (x, y, radius), fill, stroke=outline, width=outline_width))

    def text(self, x, y, text, color, size, bold=False, align="center"):
        self.commands.append(DrawCommand("text", (x, y, size), color, text=text, bold=bold, stroke=align))

    def rect(self, x, y, width, height, fill):
        self.commands.append(DrawCommand("rect", (x, y, width, height), fill))

    def of_type(self, op: str) -> List[DrawCommand]:
        return [c for c in self.commands if c.op == op]
