"""Main application window for Image Map."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QSize
from PyQt6.QtGui import QAction, QActionGroup, QImageReader
from PyQt6.QtWidgets import (
    QMainWindow, QStatusBar, QLabel, QToolBar, QComboBox, QMessageBox
)

from ..core.config import AppConfig, ConfigManager, StoreManager
from ..core.editor import EditorState, ShapeEditor
from ..core.models import Hotspot, LabelType, ShapeKind
from ..core.resources import NavigationResult, Navigator, ResourceResolver
from .dialogs.profile_dialog import ProfileDialog
from .dialogs.region_dialog import RegionDialog
from .hotspot_canvas import HotspotCanvas

logger = logging.getLogger(__name__)

ADD_PROFILE_ENTRY = "__add_profile__"

TOOL_LABELS = {
    ShapeKind.RECT: "▭ Rectangle",
    ShapeKind.ELLIPSE: "◯ Ellipse",
    ShapeKind.TRIANGLE: "△ Triangle",
}


def increase_image_allocation_limit() -> None:
    """Remove image allocation limit for large images."""
    QImageReader.setAllocationLimit(0)


class MainWindow(QMainWindow):
    """
    Main application window for Image Map.

    Provides:
    - The background image with clickable hotspots
    - Edit mode with shape tools and edge editing
    - Profile switching and label style selection
    """

    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        """
        Initialize the main window.

        Args:
            config_manager: Configuration source, defaults to ./config.yaml
        """
        super().__init__()

        # Remove image allocation limit
        increase_image_allocation_limit()

        # Initialize managers
        self.config_manager = config_manager or ConfigManager()
        config = self.config
        self.store_manager = StoreManager(
            Path(config.storage_root) / config.store_file, config.default_image
        )
        self.resolver = ResourceResolver(Path(config.plugin_dir), Path(config.storage_root))
        self.navigator = Navigator(Path(config.storage_root))
        self.editor = ShapeEditor(self.store_manager.store, config.max_history_entries)

        # UI elements (initialized in _init_ui)
        self.canvas: Optional[HotspotCanvas] = None
        self.profile_combo: Optional[QComboBox] = None
        self.tool_actions: Dict[ShapeKind, QAction] = {}
        self.label_actions: Dict[LabelType, QAction] = {}
        self.status_bar: Optional[QStatusBar] = None
        self.profile_label: Optional[QLabel] = None
        self.mode_label: Optional[QLabel] = None

        self._updating_profiles = False
        self._profile_signature: Optional[Tuple] = None

        self._init_ui()
        self._setup_connections()
        self._sync_ui()

        logger.info("MainWindow initialization complete")

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self.config_manager.config

    # === UI Construction ===

    def _init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("Image Map")
        self.setGeometry(100, 100, 1100, 750)

        self.canvas = HotspotCanvas(self.editor, self.resolver)
        self.canvas.line_thickness = self.config.line_thickness
        self.canvas.font_size = self.config.font_size
        self.canvas.handle_radius = self.config.handle_radius
        self.canvas.cancel_edit_key = self.config.cancel_edit_key
        self.setCentralWidget(self.canvas)

        self._create_toolbar()
        self._create_menus()
        self._create_status_bar()

    def _create_toolbar(self) -> None:
        """Create the main toolbar."""
        self.toolbar = QToolBar()
        self.toolbar.setObjectName("MainToolBar")
        self.toolbar.setIconSize(QSize(24, 24))
        self.addToolBar(self.toolbar)

        # Profile selector
        self.profile_combo = QComboBox()
        self.profile_combo.setMinimumWidth(160)
        self.profile_combo.setToolTip("Active profile")
        self.toolbar.addWidget(self.profile_combo)

        self.toolbar.addSeparator()

        self.edit_action = QAction("✏️ Edit Layout", self)
        self.edit_action.setCheckable(True)
        self.edit_action.triggered.connect(self._toggle_edit_mode)
        self.toolbar.addAction(self.edit_action)

        self.toolbar.addSeparator()

        # Shape tools; not exclusive so the armed tool can be clicked off
        shape_tools = QActionGroup(self)
        shape_tools.setExclusive(False)
        for kind, label in TOOL_LABELS.items():
            action = QAction(label, self)
            action.setCheckable(True)
            action.triggered.connect(lambda checked, k=kind: self.editor.select_tool(k))
            shape_tools.addAction(action)
            self.tool_actions[kind] = action
        self.toolbar.addActions(shape_tools.actions())

        self.toolbar.addSeparator()

        # Edge editing
        self.undo_action = QAction("↶ Undo", self)
        self.undo_action.setShortcut(self.config.undo_key)
        self.undo_action.triggered.connect(self.editor.undo)
        self.toolbar.addAction(self.undo_action)

        self.confirm_action = QAction("✅ Confirm", self)
        self.confirm_action.triggered.connect(self.editor.confirm)
        self.toolbar.addAction(self.confirm_action)

        self.cancel_action = QAction("❌ Cancel", self)
        self.cancel_action.setToolTip(f"Delete the shape being edited ({self.config.cancel_edit_key})")
        self.cancel_action.triggered.connect(self.editor.cancel)
        self.toolbar.addAction(self.cancel_action)

    def _create_menus(self) -> None:
        """Create the menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("File")

        exit_action = QAction("Exit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Profile menu
        profile_menu = menubar.addMenu("Profile")

        self.new_profile_action = QAction("New Profile...", self)
        self.new_profile_action.triggered.connect(self._create_profile)
        profile_menu.addAction(self.new_profile_action)

        self.edit_profile_action = QAction("Edit Profile...", self)
        self.edit_profile_action.triggered.connect(self._edit_profile)
        profile_menu.addAction(self.edit_profile_action)

        self.delete_profile_action = QAction("Delete Profile", self)
        self.delete_profile_action.triggered.connect(self._delete_profile)
        profile_menu.addAction(self.delete_profile_action)

        # View menu
        view_menu = menubar.addMenu("View")
        labels_menu = view_menu.addMenu("Labels")
        label_group = QActionGroup(self)
        for label_type, text in (
            (LabelType.NAME, "Show Name"),
            (LabelType.PATH, "Show Path"),
            (LabelType.BOTH, "Show Both"),
        ):
            action = QAction(text, self)
            action.setCheckable(True)
            action.triggered.connect(lambda checked, t=label_type: self.editor.set_label_type(t))
            label_group.addAction(action)
            labels_menu.addAction(action)
            self.label_actions[label_type] = action

        # Help menu
        help_menu = menubar.addMenu("Help")
        about_action = QAction("About", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _create_status_bar(self) -> None:
        """Create the status bar."""
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.profile_label = QLabel()
        self.status_bar.addPermanentWidget(self.profile_label)

        self.mode_label = QLabel()
        self.status_bar.addPermanentWidget(self.mode_label)

    def _setup_connections(self) -> None:
        """Set up signal/slot connections."""
        self.editor.state_changed.connect(self._sync_ui)
        self.editor.persist_requested.connect(self._save_store)
        self.editor.notice.connect(self._show_status_message)
        self.editor.naming_requested.connect(self._prompt_for_name)
        self.editor.navigation_requested.connect(self._navigate)
        self.editor.undo_stack.state_changed.connect(self._update_undo_action)
        self.profile_combo.activated.connect(self._on_profile_activated)

    # === State Sync ===

    def _sync_ui(self) -> None:
        """Reflect the editor state in toolbar, menus and status bar."""
        state = self.editor.state
        edit_mode = self.editor.is_edit_mode
        edge_editing = state == EditorState.EDGE_EDITING

        self.edit_action.setChecked(edit_mode)
        self.edit_action.setText("✔️ Done Editing" if edit_mode else "✏️ Edit Layout")
        self.edit_action.setEnabled(state != EditorState.NAMING)

        tools_enabled = state in (EditorState.EDIT_IDLE, EditorState.DRAWING)
        for kind, action in self.tool_actions.items():
            action.setEnabled(tools_enabled)
            action.setChecked(self.editor.tool == kind)

        self._update_undo_action()
        self.confirm_action.setEnabled(edge_editing)
        self.cancel_action.setEnabled(edge_editing)

        self.profile_combo.setEnabled(not edit_mode)
        self.new_profile_action.setEnabled(not edit_mode)
        self.edit_profile_action.setEnabled(self.editor.profile is not None)
        self.delete_profile_action.setEnabled(not edit_mode and bool(self.editor.store.profiles))

        label_action = self.label_actions.get(self.editor.store.display_label_type)
        if label_action is not None:
            label_action.setChecked(True)

        self._refresh_profile_combo()

        profile = self.editor.profile
        self.profile_label.setText(f"Profile: {profile.name}" if profile else "No profile")
        self.mode_label.setText(state.value.replace("_", " ").title())

    def _update_undo_action(self) -> None:
        """Enable undo during edge editing and describe what it would do."""
        self.undo_action.setEnabled(self.editor.state == EditorState.EDGE_EDITING)
        if self.editor.undo_stack.can_undo():
            self.undo_action.setToolTip(f"Undo vertex edit ({self.config.undo_key})")
        else:
            self.undo_action.setToolTip("Nothing to undo")

    def _refresh_profile_combo(self, force: bool = False) -> None:
        """Rebuild the profile selector when the profile list or selection changed."""
        store = self.editor.store
        active = store.active_profile
        signature = (
            tuple((p.id, p.name) for p in store.profiles),
            active.id if active is not None else None,
        )
        if signature == self._profile_signature and not force:
            return
        self._profile_signature = signature

        self._updating_profiles = True
        try:
            self.profile_combo.clear()
            for profile in store.profiles:
                self.profile_combo.addItem(profile.name, profile.id)
            self.profile_combo.addItem("Add New Profile...", ADD_PROFILE_ENTRY)
            if active is not None:
                self.profile_combo.setCurrentIndex(self.profile_combo.findData(active.id))
        finally:
            self._updating_profiles = False

    # === Editor Signal Handlers ===

    def _toggle_edit_mode(self) -> None:
        self.editor.toggle_edit_mode()

    def _save_store(self) -> None:
        """Write the store after every durable change."""
        if not self.store_manager.save(self.editor.store):
            self._show_status_message("Could not save layout")

    def _show_status_message(self, message: str) -> None:
        """Show a transient notice in the status bar."""
        self.status_bar.showMessage(message, self.config.notice_timeout_ms)

    def _prompt_for_name(self, hotspot: Hotspot) -> None:
        """Ask for the name and link of a newly confirmed shape."""
        dialog = RegionDialog(title="Name This Region", path=hotspot.path, parent=self)
        values = dialog.get_values()
        if values is None:
            self.editor.cancel_naming()
            return
        name, path = values
        self.editor.submit_name(name, path)

    def _navigate(self, hotspot: Hotspot) -> None:
        """Follow a hotspot's destination in view mode."""
        result = self.navigator.navigate(hotspot.path)
        if result == NavigationResult.NO_DESTINATION:
            self._show_status_message(
                f'Region "{hotspot.name}" has no linked folder. Edit it to set a path.'
            )
        elif result == NavigationResult.NOT_FOUND:
            self._show_status_message(f"Path not found: {hotspot.path}")

    # === Profiles ===

    def _on_profile_activated(self, index: int) -> None:
        if self._updating_profiles:
            return
        data = self.profile_combo.itemData(index)
        if data == ADD_PROFILE_ENTRY:
            self._create_profile()
            # Restore the selection if creation was cancelled
            self._refresh_profile_combo(force=True)
            return
        if data is not None:
            self.editor.select_profile(data)

    def _create_profile(self) -> None:
        """Create a profile from the dialog and switch to it."""
        dialog = ProfileDialog(self.config.default_image, parent=self)
        if not dialog.exec():
            return
        profile = self.editor.create_profile(dialog.name, dialog.image_path)
        if profile is not None:
            logger.info(f"Created profile {profile.name}")
            self._show_status_message(f'Profile "{profile.name}" created')

    def _edit_profile(self) -> None:
        """Rename the active profile or change its background image."""
        profile = self.editor.profile
        if profile is None:
            return
        dialog = ProfileDialog(
            self.config.default_image,
            name=profile.name,
            image_path=profile.image_path,
            title="Edit Profile",
            accept_text="Save",
            parent=self
        )
        if not dialog.exec():
            return
        if self.editor.update_profile(profile.id, dialog.name, dialog.image_path):
            # Same reference may now point at a file that was added since
            self.canvas.reload_image()
            self._show_status_message(f'Profile "{profile.name}" updated')

    def _delete_profile(self) -> None:
        """Delete the active profile after confirmation."""
        profile = self.editor.profile
        if profile is None:
            return
        reply = QMessageBox.question(
            self,
            "Delete Profile",
            f'Delete profile "{profile.name}" and all its regions?',
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        if self.editor.delete_profile(profile.id):
            self._show_status_message(f'Profile "{profile.name}" deleted')

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About Image Map",
            "Image Map\n\nClickable regions over a picture that open folders and notes."
        )

    # === Window Events ===

    def closeEvent(self, event) -> None:
        """Persist the store and release any gesture on close."""
        self.editor.close()
        self.store_manager.save(self.editor.store)
        logger.info("Main window closed")
        super().closeEvent(event)
