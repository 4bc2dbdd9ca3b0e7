"""Pointer gestures: one press, any number of moves, one release."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .geometry import Point, bounding_box, clamp_point, copy_points, translate
from .models import Hotspot, ShapeKind, preview_points, seed_points

logger = logging.getLogger(__name__)


class Gesture(ABC):
    """
    A drag interaction owned by the editor.

    The editor creates a gesture on press, feeds it every move, and
    calls ``finish`` on release or ``cancel`` when the gesture is torn
    down early. A gesture is active until either has been called.
    """

    def __init__(self, start: Point) -> None:
        self.start = clamp_point(start)
        self.active = True

    @abstractmethod
    def move(self, point: Point) -> None:
        """Handle a pointer move."""
        pass

    def finish(self, point: Point) -> None:
        """Handle the pointer release."""
        self.move(point)
        self.active = False

    def cancel(self) -> None:
        """Detach without committing anything further."""
        self.active = False

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of the gesture."""
        pass


class DrawGesture(Gesture):
    """Drag out a seed shape with an armed tool."""

    def __init__(self, kind: ShapeKind, start: Point) -> None:
        super().__init__(start)
        self.kind = kind
        self.end = self.start
        self.result: Optional[List[Point]] = None

    @property
    def preview(self) -> List[Point]:
        """Live seed-shape vertices for the current drag extent."""
        return preview_points(self.kind, self.start, self.end)

    def move(self, point: Point) -> None:
        self.end = clamp_point(point)

    def finish(self, point: Point) -> None:
        super().finish(point)
        self.result = seed_points(self.kind, self.start, self.end)

    @property
    def description(self) -> str:
        return f"Draw {self.kind.value}"


class VertexDragGesture(Gesture):
    """Drag a single vertex of the hotspot being edited."""

    def __init__(self, hotspot: Hotspot, index: int, start: Point) -> None:
        super().__init__(start)
        if not 0 <= index < len(hotspot.points):
            raise ValueError(f"Vertex index {index} out of range")
        self.hotspot = hotspot
        self.index = index

    def move(self, point: Point) -> None:
        self.hotspot.points[self.index] = clamp_point(point)

    @property
    def description(self) -> str:
        return "Move Point"


class TranslateGesture(Gesture):
    """Drag the whole hotspot being edited."""

    def __init__(self, hotspot: Hotspot, start: Point) -> None:
        super().__init__(start)
        self.hotspot = hotspot
        self.original = copy_points(hotspot.points)

    def move(self, point: Point) -> None:
        x, y = clamp_point(point)
        dx = x - self.start[0]
        dy = y - self.start[1]

        # Keep the translated shape inside the image
        min_x, min_y, max_x, max_y = bounding_box(self.original)
        dx = max(-min_x, min(100.0 - max_x, dx))
        dy = max(-min_y, min(100.0 - max_y, dy))

        self.hotspot.points = translate(self.original, dx, dy)

    @property
    def description(self) -> str:
        return "Move Shape"
