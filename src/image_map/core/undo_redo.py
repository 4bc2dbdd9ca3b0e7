"""Snapshot-based undo for vertex editing."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from .geometry import Point, copy_points

logger = logging.getLogger(__name__)


class VertexUndoStack(QObject):
    """
    Stack of vertex-list snapshots for the hotspot being edge-edited.

    The bottom entry is the state the editing session started from and is
    never popped. Every drag gesture pushes the vertex list as it was
    before the drag; undoing pops the top snapshot and restores the one
    beneath it.
    """

    state_changed = pyqtSignal()  # Emitted when undo availability changes

    def __init__(self, max_history: int = 100) -> None:
        """
        Initialize the undo stack.

        Args:
            max_history: Maximum number of snapshots kept above the base
        """
        super().__init__()
        self._snapshots: List[List[Point]] = []
        self._max_history = max(1, max_history)

    def reset(self, base: Sequence[Point]) -> None:
        """Start a new editing session from ``base``."""
        self._snapshots = [copy_points(base)]
        logger.debug("Undo stack reset")
        self.state_changed.emit()

    def push(self, points: Sequence[Point]) -> None:
        """
        Record the vertex list before a mutation.

        Args:
            points: Vertices as they are before the gesture changes them
        """
        # Without a session the first push becomes the base
        self._snapshots.append(copy_points(points))

        # Limit history size, keeping the base
        while len(self._snapshots) - 1 > self._max_history:
            self._snapshots.pop(1)

        self.state_changed.emit()

    def undo(self) -> Optional[List[Point]]:
        """
        Pop the top snapshot and return the one beneath it.

        Returns:
            The vertex list to restore, or None if only the base remains
        """
        if not self.can_undo():
            return None
        self._snapshots.pop()
        logger.debug(f"Undone vertex edit, {len(self._snapshots)} snapshots left")
        self.state_changed.emit()
        return copy_points(self._snapshots[-1])

    def can_undo(self) -> bool:
        """Check if there is anything above the base snapshot."""
        return len(self._snapshots) > 1

    def clear(self) -> None:
        """Drop every snapshot (editing session ended)."""
        self._snapshots.clear()
        self.state_changed.emit()

    @property
    def count(self) -> int:
        """Number of snapshots, including the base."""
        return len(self._snapshots)
