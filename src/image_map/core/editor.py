"""Shape editor state machine.

Interprets pointer and keyboard input (already converted to percentage
coordinates by the canvas) and is the only writer of in-progress hotspot
geometry. Durable changes are announced through ``persist_requested``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .geometry import Point
from .gestures import DrawGesture, Gesture, TranslateGesture, VertexDragGesture
from .models import DEFAULT_IMAGE, Hotspot, LabelType, Profile, ShapeKind, Store
from .undo_redo import VertexUndoStack

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    """Mutually exclusive editor states for the active profile view."""

    VIEW = "view"
    EDIT_IDLE = "edit_idle"
    DRAWING = "drawing"
    EDGE_EDITING = "edge_editing"
    NAMING = "naming"


class ShapeEditor(QObject):
    """
    Owns edit-mode flags, the hotspot being drawn or edited and its undo
    stack.

    Signals carry hotspots as plain objects; receivers must not keep
    references across store reloads.
    """

    state_changed = pyqtSignal()
    persist_requested = pyqtSignal()
    notice = pyqtSignal(str)
    naming_requested = pyqtSignal(object)  # Hotspot that needs a name
    action_menu_requested = pyqtSignal(object)  # Hotspot clicked in edit mode
    navigation_requested = pyqtSignal(object)  # Hotspot clicked in view mode

    def __init__(self, store: Store, max_history: int = 100) -> None:
        """
        Initialize the editor.

        Args:
            store: The profile store to edit
            max_history: Maximum number of undoable vertex edits
        """
        super().__init__()
        self.store = store
        self.undo_stack = VertexUndoStack(max_history)

        self._state = EditorState.VIEW
        self._tool: Optional[ShapeKind] = None
        self._selected_id: Optional[str] = None
        self._editing_id: Optional[str] = None
        self._naming_id: Optional[str] = None
        self._gesture: Optional[Gesture] = None

    # === State Accessors ===

    @property
    def state(self) -> EditorState:
        """Current editor state."""
        return self._state

    @property
    def is_edit_mode(self) -> bool:
        """True in every state except VIEW."""
        return self._state != EditorState.VIEW

    @property
    def tool(self) -> Optional[ShapeKind]:
        """The armed shape tool, if any."""
        return self._tool

    @property
    def selected_id(self) -> Optional[str]:
        """Id of the selected hotspot."""
        return self._selected_id

    @property
    def editing_id(self) -> Optional[str]:
        """Id of the hotspot in edge editing."""
        return self._editing_id

    @property
    def gesture(self) -> Optional[Gesture]:
        """The gesture in progress, if any."""
        return self._gesture

    @property
    def preview(self) -> Optional[List[Point]]:
        """Seed-shape preview while a draw gesture is in progress."""
        if isinstance(self._gesture, DrawGesture):
            return self._gesture.preview
        return None

    @property
    def profile(self) -> Optional[Profile]:
        """The active profile."""
        return self.store.active_profile

    @property
    def editing_hotspot(self) -> Optional[Hotspot]:
        """The hotspot in edge editing."""
        return self._find(self._editing_id)

    @property
    def naming_hotspot(self) -> Optional[Hotspot]:
        """The hotspot waiting for a name."""
        return self._find(self._naming_id)

    def _find(self, hotspot_id: Optional[str]) -> Optional[Hotspot]:
        profile = self.profile
        if hotspot_id is None or profile is None:
            return None
        return profile.find_hotspot(hotspot_id)

    def _set_state(self, state: EditorState) -> None:
        if state != self._state:
            logger.debug(f"Editor state {self._state.value} -> {state.value}")
        self._state = state
        self.state_changed.emit()

    def _persist(self) -> None:
        self.persist_requested.emit()

    # === Gesture Lifecycle ===

    def _begin_gesture(self, gesture: Gesture) -> None:
        self._end_gesture()
        self._gesture = gesture
        logger.debug(f"Gesture started: {gesture.description}")

    def _end_gesture(self) -> None:
        if self._gesture is not None and self._gesture.active:
            self._gesture.cancel()
            logger.debug(f"Gesture cancelled: {self._gesture.description}")
        self._gesture = None

    def close(self) -> None:
        """Tear down any gesture in progress."""
        self._end_gesture()

    # === Edit Mode & Tools ===

    def toggle_edit_mode(self) -> None:
        """Enter edit mode, or save and return to view mode."""
        if self.is_edit_mode:
            self._end_gesture()
            self._persist()
            self._tool = None
            self._selected_id = None
            self._editing_id = None
            self._naming_id = None
            self.undo_stack.clear()
            self._set_state(EditorState.VIEW)
            self.notice.emit("Layout saved!")
        else:
            self._selected_id = None
            self._set_state(EditorState.EDIT_IDLE)

    def select_tool(self, kind: ShapeKind) -> bool:
        """
        Arm a shape tool, or disarm it when it is already armed.

        Returns:
            True if the tool selection changed
        """
        kind = ShapeKind(kind)
        if self._state not in (EditorState.EDIT_IDLE, EditorState.DRAWING):
            if self._state == EditorState.VIEW:
                self.notice.emit("Enter edit mode to draw shapes")
            else:
                self.notice.emit("Finish editing the current shape first")
            return False

        self._end_gesture()
        if self._tool == kind:
            self._tool = None
            self._set_state(EditorState.EDIT_IDLE)
        else:
            self._tool = kind
            self._selected_id = None
            self._set_state(EditorState.DRAWING)
        return True

    # === Pointer Input ===

    def press_background(self, point: Point) -> None:
        """Handle a press inside the image that hit no shape (or any press while drawing)."""
        if self._state == EditorState.DRAWING and self._tool is not None:
            self._begin_gesture(DrawGesture(self._tool, point))
            self.state_changed.emit()
        elif self._state == EditorState.EDIT_IDLE and self._selected_id is not None:
            self._selected_id = None
            self.state_changed.emit()

    def press_hotspot(self, hotspot_id: str, point: Point) -> None:
        """Handle a press on a hotspot's shape."""
        hotspot = self._find(hotspot_id)
        if hotspot is None:
            return

        if self._state == EditorState.VIEW:
            self.navigation_requested.emit(hotspot)
        elif self._state == EditorState.EDIT_IDLE:
            self._selected_id = hotspot.id
            self.state_changed.emit()
            self.action_menu_requested.emit(hotspot)
        elif self._state == EditorState.DRAWING:
            # Shapes never intercept a draw
            self.press_background(point)
        elif self._state == EditorState.EDGE_EDITING and hotspot.id == self._editing_id:
            self.undo_stack.push(hotspot.points)
            self._begin_gesture(TranslateGesture(hotspot, point))

    def press_handle(self, index: int, point: Point) -> None:
        """Handle a press on a vertex handle of the hotspot being edited."""
        hotspot = self.editing_hotspot
        if self._state != EditorState.EDGE_EDITING or hotspot is None:
            return
        if not 0 <= index < len(hotspot.points):
            logger.warning(f"Ignoring press on missing vertex handle {index}")
            return
        self.undo_stack.push(hotspot.points)
        self._begin_gesture(VertexDragGesture(hotspot, index, point))

    def pointer_move(self, point: Point) -> None:
        """Feed a pointer move to the gesture in progress."""
        if self._gesture is None or not self._gesture.active:
            return
        self._gesture.move(point)
        self.state_changed.emit()

    def pointer_release(self, point: Point) -> None:
        """Finish the gesture in progress."""
        gesture = self._gesture
        if gesture is None or not gesture.active:
            return
        gesture.finish(point)
        self._gesture = None
        logger.debug(f"Gesture finished: {gesture.description}")

        if isinstance(gesture, DrawGesture):
            self._commit_draw(gesture)
        else:
            self._persist()
            self.state_changed.emit()

    def _commit_draw(self, gesture: DrawGesture) -> None:
        profile = self.profile
        if gesture.result is None or profile is None:
            logger.debug("Discarded degenerate draw")
            self.state_changed.emit()
            return

        hotspot = Hotspot(points=gesture.result, shape_type=gesture.kind)
        profile.add_hotspot(hotspot)
        self._tool = None
        self._selected_id = hotspot.id
        self._editing_id = hotspot.id
        self.undo_stack.reset(hotspot.points)
        logger.info(f"Created {gesture.kind.value} hotspot {hotspot.id}")
        self._persist()
        self._set_state(EditorState.EDGE_EDITING)

    # === Edge Editing ===

    def begin_edge_editing(self, hotspot_id: str) -> bool:
        """
        Start editing the vertices of an existing hotspot.

        Returns:
            True if edge editing started
        """
        hotspot = self._find(hotspot_id)
        if self._state != EditorState.EDIT_IDLE or hotspot is None or len(hotspot.points) < 3:
            return False
        self._selected_id = hotspot.id
        self._editing_id = hotspot.id
        self.undo_stack.reset(hotspot.points)
        self._set_state(EditorState.EDGE_EDITING)
        return True

    def undo(self) -> bool:
        """
        Drop the latest snapshot and restore the one beneath it.

        Returns:
            True if something was undone
        """
        hotspot = self.editing_hotspot
        if self._state != EditorState.EDGE_EDITING or hotspot is None:
            return False
        self._end_gesture()
        snapshot = self.undo_stack.undo()
        if snapshot is None:
            self.notice.emit("Nothing to undo")
            return False
        hotspot.points = snapshot
        self.state_changed.emit()
        self.notice.emit("Undo!")
        return True

    def confirm(self) -> None:
        """Finish edge editing; unnamed hotspots continue to naming."""
        hotspot = self.editing_hotspot
        if self._state != EditorState.EDGE_EDITING or hotspot is None:
            return
        self._end_gesture()
        self._editing_id = None
        self.undo_stack.clear()

        if not hotspot.name.strip():
            self._naming_id = hotspot.id
            self._set_state(EditorState.NAMING)
            self.naming_requested.emit(hotspot)
        else:
            self._persist()
            self._set_state(EditorState.EDIT_IDLE)

    def cancel(self) -> None:
        """Delete the hotspot being edge-edited."""
        if self._state != EditorState.EDGE_EDITING:
            return
        self._end_gesture()
        profile = self.profile
        if profile is not None and self._editing_id is not None:
            profile.remove_hotspot(self._editing_id)
        self._editing_id = None
        self._selected_id = None
        self.undo_stack.clear()
        self._persist()
        self._set_state(EditorState.EDIT_IDLE)
        self.notice.emit("Shape deleted")

    # === Naming ===

    def submit_name(self, name: str, path: str) -> bool:
        """
        Name the newly drawn hotspot and bind its destination.

        Returns:
            True if the name was accepted
        """
        hotspot = self.naming_hotspot
        if self._state != EditorState.NAMING or hotspot is None:
            return False
        name = name.strip()
        if not name:
            self.notice.emit("Please enter a region name!")
            return False

        hotspot.name = name
        hotspot.path = path.strip()
        self._naming_id = None
        self._selected_id = hotspot.id
        self._tool = None
        self._persist()
        self._set_state(EditorState.EDIT_IDLE)
        self.notice.emit(f'Region "{name}" created!')
        return True

    def cancel_naming(self) -> None:
        """Discard the unnamed hotspot."""
        if self._state != EditorState.NAMING:
            return
        profile = self.profile
        if profile is not None and self._naming_id is not None:
            profile.remove_hotspot(self._naming_id)
        self._naming_id = None
        self._selected_id = None
        self._tool = None
        self._persist()
        self._set_state(EditorState.EDIT_IDLE)

    # === Action Menu Operations ===

    def rename_hotspot(self, hotspot_id: str, name: str, path: str) -> bool:
        """
        Change the name and destination of an existing hotspot.

        Returns:
            True if the hotspot was updated
        """
        hotspot = self._find(hotspot_id)
        if hotspot is None or not name:
            return False
        hotspot.name = name
        hotspot.path = path
        self._persist()
        self.state_changed.emit()
        self.notice.emit(f"Region updated: {name}")
        return True

    def delete_hotspot(self, hotspot_id: str) -> bool:
        """
        Delete a hotspot from the active profile.

        Deleting the hotspot being edited also ends edge editing.

        Returns:
            True if a hotspot was removed
        """
        profile = self.profile
        if profile is None:
            return False
        if hotspot_id == self._editing_id:
            self.cancel()
            return True

        hotspot = profile.remove_hotspot(hotspot_id)
        if hotspot is None:
            return False
        if self._selected_id == hotspot_id:
            self._selected_id = None
        self._persist()
        self.state_changed.emit()
        self.notice.emit(f"Deleted: {hotspot.name or 'Unnamed'}")
        return True

    # === Profiles ===

    def create_profile(self, name: str, image_path: str = "") -> Optional[Profile]:
        """Create a profile and switch to it; rejected while editing."""
        if not name:
            return None
        if self.is_edit_mode:
            self.notice.emit("Leave edit mode to add profiles")
            return None
        profile = self.store.add_profile(name, image_path)
        self._selected_id = None
        self._persist()
        self.state_changed.emit()
        return profile

    def update_profile(self, profile_id: str, name: str, image_path: str) -> bool:
        """
        Rename a profile or point it at another background image.

        Returns:
            True if the profile was updated
        """
        profile = self.store.find_profile(profile_id)
        name = name.strip()
        if profile is None or not name:
            return False
        profile.name = name
        profile.image_path = image_path.strip() or DEFAULT_IMAGE
        logger.info(f"Updated profile '{name}' ({profile.image_path})")
        self._persist()
        self.state_changed.emit()
        return True

    def select_profile(self, profile_id: str) -> bool:
        """
        Switch the active profile; rejected while editing.

        Returns:
            True if the active profile changed
        """
        if self.is_edit_mode:
            self.notice.emit("Leave edit mode to switch profiles")
            return False
        if not self.store.set_active(profile_id):
            return False
        self._selected_id = None
        self._persist()
        self.state_changed.emit()
        return True

    def delete_profile(self, profile_id: str) -> bool:
        """
        Delete a profile; rejected while editing.

        Returns:
            True if the profile was deleted
        """
        if self.is_edit_mode:
            self.notice.emit("Leave edit mode to delete profiles")
            return False
        if self.store.delete_profile(profile_id) is None:
            return False
        self._selected_id = None
        self._persist()
        self.state_changed.emit()
        return True

    def set_label_type(self, label_type: LabelType) -> None:
        """Change what hotspot labels display."""
        self.store.display_label_type = LabelType(label_type)
        self._persist()
        self.state_changed.emit()
