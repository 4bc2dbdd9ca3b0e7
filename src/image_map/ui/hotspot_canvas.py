"""Canvas widget that renders hotspots over the background image."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from PyQt6.QtCore import Qt, QPointF, QRectF, QSizeF, QTimer
from PyQt6.QtGui import (
    QPainter, QColor, QPen, QFont, QPainterPath, QPixmap, QFontMetrics,
    QMouseEvent, QKeyEvent, QKeySequence, QCursor
)
from PyQt6.QtWidgets import QWidget, QMenu, QPushButton

from ..core.editor import EditorState, ShapeEditor
from ..core.geometry import PathCommand, Point, from_percent, to_percent
from ..core.models import Hotspot
from ..core.projection import SceneProjection, ShapeRole, ShapeView, project
from ..core.resources import ResourceResolver
from .dialogs.region_dialog import RegionDialog

logger = logging.getLogger(__name__)

# (fill, stroke, stroke width) per role; hover variants where they differ
SHAPE_STYLES = {
    ShapeRole.VIEW: (QColor(0, 0, 0, 0), QColor(0, 0, 0, 0), 0),
    ShapeRole.IDLE: (QColor(255, 255, 255, 26), QColor(255, 255, 255, 128), 1),
    ShapeRole.SELECTED: (QColor(33, 150, 243, 77), QColor("#2196f3"), 2),
    ShapeRole.EDGE_EDITING: (QColor(76, 175, 80, 64), QColor("#4caf50"), 2),
}
HOVER_STYLES = {
    ShapeRole.VIEW: (QColor(255, 255, 255, 51), QColor(255, 255, 255, 204), 2),
    ShapeRole.IDLE: (QColor(255, 255, 255, 38), QColor(255, 255, 255, 204), 1),
}
PREVIEW_FILL = QColor(33, 150, 243, 51)
PREVIEW_STROKE = QColor("#2196f3")
HANDLE_STROKE = QColor("#4caf50")
BROKEN_IMAGE_FILL = QColor("#2d2d2d")


def build_painter_path(
    commands: Sequence[PathCommand],
    to_pixels: Callable[[Point], QPointF]
) -> QPainterPath:
    """Turn percentage path commands into a pixel-space QPainterPath."""
    path = QPainterPath()
    path.setFillRule(Qt.FillRule.WindingFill)
    for command in commands:
        op = command[0]
        if op == "M":
            path.moveTo(to_pixels((command[1], command[2])))
        elif op == "L":
            path.lineTo(to_pixels((command[1], command[2])))
        elif op == "C":
            path.cubicTo(
                to_pixels((command[1], command[2])),
                to_pixels((command[3], command[4])),
                to_pixels((command[5], command[6])),
            )
        elif op == "Z":
            path.closeSubpath()
    return path


class HotspotCanvas(QWidget):
    """
    Display layer, label layer and drawing preview over the background
    image.

    Everything painted is recomputed from the store and editor through
    :func:`project`; pointer input is converted to percentages of the
    image rectangle and handed to the editor.
    """

    HANDLE_HIT_TOLERANCE = 3
    MIN_HANDLE_PIXELS = 4.0
    BROKEN_IMAGE_MARGIN = 20

    def __init__(
        self,
        editor: ShapeEditor,
        resolver: ResourceResolver,
        parent: Optional[QWidget] = None
    ) -> None:
        """
        Initialize the canvas.

        Args:
            editor: State machine receiving pointer input
            resolver: Resolves the active profile's image reference
            parent: Parent widget
        """
        super().__init__(parent)
        self.editor = editor
        self.resolver = resolver

        # Visual settings
        self.line_thickness = 2
        self.font_size = 10
        self.handle_radius = 1.2
        self.cancel_edit_key = "Escape"

        self._pixmap: Optional[QPixmap] = None
        self._image_ref: Optional[str] = None
        self._hover_id: Optional[str] = None
        self._scene = SceneProjection()

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(320, 240)

        self._create_edit_controls()

        self.editor.state_changed.connect(self.refresh)
        self.editor.action_menu_requested.connect(self._queue_action_menu)
        self.refresh()

    def _create_edit_controls(self) -> None:
        """Create the confirm/cancel buttons shown next to an edited shape."""
        self.confirm_button = QPushButton("✅", self)
        self.confirm_button.setToolTip("Confirm edges")
        self.confirm_button.setFixedSize(28, 24)
        self.confirm_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.confirm_button.clicked.connect(self.editor.confirm)
        self.confirm_button.hide()

        self.cancel_button = QPushButton("❌", self)
        self.cancel_button.setToolTip("Delete shape (Esc)")
        self.cancel_button.setFixedSize(28, 24)
        self.cancel_button.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.cancel_button.clicked.connect(self.editor.cancel)
        self.cancel_button.hide()

    # === Image ===

    def has_image(self) -> bool:
        """True when the background image loaded."""
        return self._pixmap is not None and not self._pixmap.isNull()

    def _load_image(self, image_ref: Optional[str]) -> None:
        """Resolve and load the background image for a profile."""
        self._image_ref = image_ref
        self._pixmap = None
        if image_ref is None:
            return

        path = self.resolver.resolve(image_ref)
        if path is None:
            return
        pixmap = QPixmap(str(path))
        if pixmap.isNull():
            logger.warning(f"Could not decode background image: {path}")
            return
        self._pixmap = pixmap
        logger.info(f"Loaded background image {path}")

    def reload_image(self) -> None:
        """Force the background image to be resolved again."""
        self._load_image(self._scene.image_path)
        self.update()

    def image_rect(self) -> QRectF:
        """The widget area the image occupies; percentages are relative to it."""
        if not self.has_image():
            margin = self.BROKEN_IMAGE_MARGIN
            return QRectF(self.rect()).adjusted(margin, margin, -margin, -margin)

        size = QSizeF(self._pixmap.size())
        size.scale(QSizeF(self.size()), Qt.AspectRatioMode.KeepAspectRatio)
        left = (self.width() - size.width()) / 2
        top = (self.height() - size.height()) / 2
        return QRectF(left, top, size.width(), size.height())

    # === Coordinate Transform Methods ===

    def _to_percent(self, pos: QPointF) -> Point:
        """Transform a widget position to clamped image percentages."""
        rect = self.image_rect()
        return (
            to_percent(pos.x() - rect.left(), rect.width()),
            to_percent(pos.y() - rect.top(), rect.height()),
        )

    def _to_pixels(self, point: Point) -> QPointF:
        """Transform image percentages to a widget position."""
        rect = self.image_rect()
        return QPointF(
            rect.left() + from_percent(point[0], rect.width()),
            rect.top() + from_percent(point[1], rect.height()),
        )

    def _handle_pixels(self) -> float:
        rect = self.image_rect()
        extent = min(rect.width(), rect.height())
        return max(self.MIN_HANDLE_PIXELS, from_percent(self.handle_radius, extent))

    # === Projection ===

    def refresh(self) -> None:
        """Recompute the projection from the store and repaint."""
        self._scene = project(self.editor.store, self.editor)
        if self._scene.image_path != self._image_ref:
            self._load_image(self._scene.image_path)
        if self.editor.state == EditorState.DRAWING:
            self.setCursor(Qt.CursorShape.CrossCursor)
        else:
            self.setCursor(Qt.CursorShape.ArrowCursor)
        self._layout_edit_controls()
        self.update()

    def _layout_edit_controls(self) -> None:
        anchor = self._scene.edit_controls_anchor
        if anchor is None or self.editor.gesture is not None:
            self.confirm_button.hide()
            self.cancel_button.hide()
            return

        pos = self._to_pixels(anchor)
        x = int(pos.x()) + 5
        y = int(pos.y()) - self.confirm_button.height()
        x = max(0, min(self.width() - 2 * self.confirm_button.width(), x))
        y = max(0, min(self.height() - self.confirm_button.height(), y))
        self.confirm_button.move(x, y)
        self.cancel_button.move(x + self.confirm_button.width(), y)
        self.confirm_button.show()
        self.cancel_button.show()

    # === Hit Testing ===

    def _shape_path(self, view: ShapeView) -> QPainterPath:
        return build_painter_path(view.path, self._to_pixels)

    def shape_at(self, pos: QPointF) -> Optional[ShapeView]:
        """Topmost interactive shape whose outline contains ``pos``."""
        for view in reversed(self._scene.shapes):
            if view.interactive and self._shape_path(view).contains(pos):
                return view
        return None

    def handle_at(self, pos: QPointF) -> Optional[int]:
        """Index of the vertex handle under ``pos`` for the edited shape."""
        radius = self._handle_pixels() + self.HANDLE_HIT_TOLERANCE
        for view in self._scene.shapes:
            # Last handle wins where handles overlap, matching paint order
            for i in reversed(range(len(view.handles))):
                center = self._to_pixels(view.handles[i])
                delta = center - pos
                if (delta.x() ** 2 + delta.y() ** 2) ** 0.5 <= radius:
                    return i
        return None

    # === Event Handlers ===

    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Route a press to the editor."""
        self.setFocus()
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.position()
        point = self._to_percent(pos)

        if self.editor.state == EditorState.DRAWING:
            # Draws start anywhere inside the image, even over shapes
            if self.image_rect().contains(pos):
                self.editor.press_background(point)
            return

        if self.editor.state == EditorState.EDGE_EDITING:
            handle = self.handle_at(pos)
            if handle is not None:
                self.editor.press_handle(handle, point)
                return

        view = self.shape_at(pos)
        if view is not None:
            self.editor.press_hotspot(view.hotspot_id, point)
        elif self.image_rect().contains(pos):
            self.editor.press_background(point)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Feed drags to the editor or update hover."""
        pos = event.position()
        if self.editor.gesture is not None:
            self.editor.pointer_move(self._to_percent(pos))
            return

        view = self.shape_at(pos)
        hover_id = view.hotspot_id if view is not None else None
        if hover_id != self._hover_id:
            self._hover_id = hover_id
            self.update()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Finish the editor's gesture."""
        if event.button() == Qt.MouseButton.LeftButton and self.editor.gesture is not None:
            self.editor.pointer_release(self._to_percent(event.position()))
            return
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Handle the cancel key during edge editing."""
        if (self.editor.state == EditorState.EDGE_EDITING and
                self._matches_key_sequence(event, self.cancel_edit_key)):
            event.accept()
            self.editor.cancel()
            return
        super().keyPressEvent(event)

    def _matches_key_sequence(self, event: QKeyEvent, key_sequence_str: str) -> bool:
        """Check if a key event matches a configured key sequence string."""
        if not key_sequence_str:
            return False

        key = event.key()
        modifiers = event.modifiers()

        # Ignore pure modifier key presses
        if key in (Qt.Key.Key_Control, Qt.Key.Key_Shift, Qt.Key.Key_Alt, Qt.Key.Key_Meta):
            return False

        combined = key
        if modifiers & Qt.KeyboardModifier.ControlModifier:
            combined |= Qt.KeyboardModifier.ControlModifier.value
        if modifiers & Qt.KeyboardModifier.ShiftModifier:
            combined |= Qt.KeyboardModifier.ShiftModifier.value
        if modifiers & Qt.KeyboardModifier.AltModifier:
            combined |= Qt.KeyboardModifier.AltModifier.value
        if modifiers & Qt.KeyboardModifier.MetaModifier:
            combined |= Qt.KeyboardModifier.MetaModifier.value

        return QKeySequence(combined) == QKeySequence(key_sequence_str)

    def leaveEvent(self, event) -> None:
        """Clear hover when the pointer leaves the canvas."""
        self._hover_id = None
        self.update()
        super().leaveEvent(event)

    def resizeEvent(self, event) -> None:
        """Keep the edit controls attached to the shape."""
        super().resizeEvent(event)
        self._layout_edit_controls()

    def hideEvent(self, event) -> None:
        """Drop any gesture when the canvas goes away."""
        self.editor.close()
        super().hideEvent(event)

    # === Action Menu ===

    def _queue_action_menu(self, hotspot: Hotspot) -> None:
        # Let the press finish before the menu grabs the pointer
        QTimer.singleShot(0, lambda: self._show_action_menu(hotspot))

    def _show_action_menu(self, hotspot: Hotspot) -> None:
        """Show the edit-mode actions for a hotspot at the cursor."""
        menu = QMenu(self)
        edges_action = menu.addAction("✏️ Edit Edges")
        link_action = menu.addAction("🔗 Edit Name & Link")
        delete_action = menu.addAction("🗑️ Delete Region")

        action = menu.exec(QCursor.pos())

        if action == edges_action:
            self.editor.begin_edge_editing(hotspot.id)
        elif action == link_action:
            self._edit_name_and_link(hotspot)
        elif action == delete_action:
            self.editor.delete_hotspot(hotspot.id)

    def _edit_name_and_link(self, hotspot: Hotspot) -> None:
        dialog = RegionDialog(
            title="Edit Region",
            name=hotspot.name,
            path=hotspot.path,
            path_label="Path (Folder or File)",
            save_text="💾 Save Changes",
            parent=self
        )
        if dialog.exec():
            self.editor.rename_hotspot(hotspot.id, dialog.name, dialog.path)

    # === Painting ===

    def paintEvent(self, event) -> None:
        """Paint the image, shapes, handles, preview and labels."""
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        self._draw_image(painter)

        for view in self._scene.shapes:
            self._draw_shape(painter, view)

        for view in self._scene.shapes:
            self._draw_handles(painter, view)

        if self._scene.preview is not None:
            self._draw_preview(painter, self._scene.preview)

        for view in self._scene.shapes:
            if view.label_always_visible or view.hotspot_id == self._hover_id:
                self._draw_label(painter, view.label, self._to_pixels(view.label_anchor))

        painter.end()

    def _draw_image(self, painter: QPainter) -> None:
        rect = self.image_rect()
        if self.has_image():
            painter.drawPixmap(rect, self._pixmap, QRectF(self._pixmap.rect()))
            return

        # Broken image placeholder; editing still works in percent space
        painter.setPen(QPen(QColor(255, 255, 255, 80), 1, Qt.PenStyle.DashLine))
        painter.setBrush(BROKEN_IMAGE_FILL)
        painter.drawRect(rect)
        if self._image_ref is not None:
            painter.setPen(QColor(255, 255, 255, 160))
            painter.drawText(
                rect, Qt.AlignmentFlag.AlignCenter, f"Image not found: {self._image_ref}"
            )

    def _draw_shape(self, painter: QPainter, view: ShapeView) -> None:
        """Draw a single hotspot outline."""
        hovered = view.hotspot_id == self._hover_id
        fill, stroke, width = SHAPE_STYLES[view.role]
        if hovered and view.role in HOVER_STYLES:
            fill, stroke, width = HOVER_STYLES[view.role]

        if width:
            pen = QPen(stroke, width * self.line_thickness / 2)
            if view.role == ShapeRole.EDGE_EDITING:
                pen.setStyle(Qt.PenStyle.DashLine)
            painter.setPen(pen)
        else:
            painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(fill)
        painter.drawPath(self._shape_path(view))

    def _draw_handles(self, painter: QPainter, view: ShapeView) -> None:
        radius = self._handle_pixels()
        painter.setPen(QPen(HANDLE_STROKE, 1.5))
        painter.setBrush(QColor(255, 255, 255))
        for point in view.handles:
            painter.drawEllipse(self._to_pixels(point), radius, radius)

    def _draw_preview(self, painter: QPainter, commands: Sequence[PathCommand]) -> None:
        pen = QPen(PREVIEW_STROKE, 1.5, Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(PREVIEW_FILL)
        painter.drawPath(build_painter_path(commands, self._to_pixels))

    def _draw_label(self, painter: QPainter, label: str, center: QPointF) -> None:
        """Draw a label with a translucent background centered on ``center``."""
        font = QFont()
        font.setPointSize(self.font_size)
        font_metrics = QFontMetrics(font)
        text_width = font_metrics.horizontalAdvance(label)
        text_height = font_metrics.height()

        padding_x, padding_y = 6, 2
        rect_width = text_width + 2 * padding_x
        rect_height = text_height + 2 * padding_y
        background_rect = QRectF(
            center.x() - rect_width / 2,
            center.y() - rect_height / 2,
            rect_width,
            rect_height
        )

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor(0, 0, 0, 128))
        painter.drawRoundedRect(background_rect, 4, 4)

        painter.setFont(font)
        painter.setPen(Qt.GlobalColor.white)
        painter.drawText(background_rect, Qt.AlignmentFlag.AlignCenter, label)
