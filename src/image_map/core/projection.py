"""Pure projection of the store and editor state into drawable shapes.

The canvas repaints from :func:`project` on every change and keeps no
geometry of its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .editor import EditorState, ShapeEditor
from .geometry import (
    PathCommand, Point, bounding_box, smooth_closed_path, straight_closed_path
)
from .models import Hotspot, LabelType, RenderStyle, ShapeKind, Store

UNNAMED_LABEL = "(unnamed)"
NO_PATH_LABEL = "(no path)"
MISSING_FIELD = "?"


class ShapeRole(str, Enum):
    """Styling role of a rendered hotspot."""

    VIEW = "view"
    IDLE = "idle"
    SELECTED = "selected"
    EDGE_EDITING = "edge_editing"


@dataclass
class ShapeView:
    """Everything the canvas needs to draw and hit-test one hotspot."""

    hotspot_id: str
    points: List[Point]
    path: List[PathCommand]
    role: ShapeRole
    label: str
    label_anchor: Point
    handles: List[Point] = field(default_factory=list)
    label_always_visible: bool = False
    interactive: bool = True


@dataclass
class SceneProjection:
    """Drawable state of the active profile."""

    shapes: List[ShapeView] = field(default_factory=list)
    preview: Optional[List[PathCommand]] = None
    edit_controls_anchor: Optional[Point] = None
    image_path: Optional[str] = None


def label_text(hotspot: Hotspot, display_type: LabelType) -> str:
    """
    Text shown for a hotspot under the global label style.

    Args:
        hotspot: The hotspot to label
        display_type: Name only, path only, or both

    Returns:
        Label text with placeholders for empty fields
    """
    display_type = LabelType(display_type)
    if display_type == LabelType.PATH:
        return hotspot.path or NO_PATH_LABEL
    if display_type == LabelType.BOTH:
        return f"{hotspot.name or MISSING_FIELD} ({hotspot.path or MISSING_FIELD})"
    return hotspot.name or UNNAMED_LABEL


def hotspot_path(hotspot: Hotspot) -> List[PathCommand]:
    """Outline commands for a hotspot according to its render style."""
    if hotspot.render_style == RenderStyle.SMOOTH:
        return smooth_closed_path(hotspot.outline)
    return straight_closed_path(hotspot.outline)


def _preview_path(kind: Optional[ShapeKind], points: List[Point]) -> List[PathCommand]:
    if kind == ShapeKind.ELLIPSE:
        return smooth_closed_path(points)
    return straight_closed_path(points)


def _role(editor: ShapeEditor, hotspot: Hotspot) -> ShapeRole:
    if not editor.is_edit_mode:
        return ShapeRole.VIEW
    if hotspot.id == editor.editing_id:
        return ShapeRole.EDGE_EDITING
    if hotspot.id == editor.selected_id:
        return ShapeRole.SELECTED
    return ShapeRole.IDLE


def project(store: Store, editor: ShapeEditor) -> SceneProjection:
    """
    Project the active profile into drawable shapes.

    Hotspots without valid geometry are skipped. While drawing, no shape
    is interactive so a draw can start over an existing shape.
    """
    scene = SceneProjection()
    profile = store.active_profile
    if profile is None:
        return scene

    scene.image_path = profile.image_path
    drawing = editor.state == EditorState.DRAWING

    for hotspot in profile.hotspots:
        if not hotspot.is_valid():
            continue

        role = _role(editor, hotspot)
        editing = role == ShapeRole.EDGE_EDITING
        view = ShapeView(
            hotspot_id=hotspot.id,
            points=list(hotspot.outline),
            path=hotspot_path(hotspot),
            role=role,
            label=label_text(hotspot, store.display_label_type),
            label_anchor=hotspot.label_anchor(),
            handles=list(hotspot.points) if editing else [],
            label_always_visible=editing,
            interactive=not drawing,
        )
        scene.shapes.append(view)

        if editing:
            min_x, min_y, max_x, max_y = bounding_box(hotspot.points)
            scene.edit_controls_anchor = (max_x, min_y)

    preview = editor.preview
    if preview is not None:
        scene.preview = _preview_path(editor.tool, preview)

    return scene
