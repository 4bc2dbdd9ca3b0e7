"""Dialog for naming a region and linking it to a destination."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
)

logger = logging.getLogger(__name__)


class RegionDialog(QDialog):
    """
    Ask for a region name and an optional linked path.

    Used both after confirming a newly drawn shape and for editing the
    name and link of an existing hotspot. The dialog refuses to accept
    an empty name.
    """

    def __init__(
        self,
        title: str = "Name This Region",
        name: str = "",
        path: str = "",
        path_label: str = "Link to folder (optional)",
        save_text: str = "💾 Save Region",
        cancel_text: str = "❌ Cancel",
        parent=None
    ) -> None:
        """
        Initialize the region dialog.

        Args:
            title: Window title
            name: Initial region name
            path: Initial linked path
            path_label: Label for the path field
            save_text: Text of the accept button
            cancel_text: Text of the reject button
            parent: Parent widget
        """
        super().__init__(parent)
        self._title = title
        self._path_label = path_label
        self._save_text = save_text
        self._cancel_text = cancel_text
        self._init_ui(name, path)

    def _init_ui(self, name: str, path: str) -> None:
        """Initialize the dialog UI."""
        self.setWindowTitle(self._title)
        self.setMinimumWidth(380)
        self.setModal(True)

        layout = QVBoxLayout()
        layout.setSpacing(12)

        form = QFormLayout()
        self.name_edit = QLineEdit(name)
        self.name_edit.setPlaceholderText("e.g., Bookshelf, Desk, Window")
        form.addRow("Region Name", self.name_edit)

        self.path_edit = QLineEdit(path)
        self.path_edit.setPlaceholderText("e.g., Projects/Work or Notes/Ideas.md")
        form.addRow(self._path_label, self.path_edit)
        layout.addLayout(form)

        info = QLabel("Paths are relative to the storage root. Use #heading to jump into a note.")
        info.setWordWrap(True)
        layout.addWidget(info)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #e57373;")
        self.error_label.hide()
        layout.addWidget(self.error_label)

        # Buttons
        button_layout = QHBoxLayout()
        button_layout.addStretch()

        save_button = QPushButton(self._save_text)
        save_button.setDefault(True)
        save_button.clicked.connect(self._on_save)
        button_layout.addWidget(save_button)

        cancel_button = QPushButton(self._cancel_text)
        cancel_button.clicked.connect(self.reject)
        button_layout.addWidget(cancel_button)

        layout.addLayout(button_layout)
        self.setLayout(layout)

        self.name_edit.setFocus()

    def _on_save(self) -> None:
        if not self.name:
            self.error_label.setText("Please enter a region name!")
            self.error_label.show()
            self.name_edit.setFocus()
            return
        logger.debug(f"Region dialog accepted: {self.name}")
        self.accept()

    @property
    def name(self) -> str:
        """Entered region name, stripped."""
        return self.name_edit.text().strip()

    @property
    def path(self) -> str:
        """Entered linked path, stripped."""
        return self.path_edit.text().strip()

    def get_values(self) -> Optional[tuple]:
        """
        Show the dialog and return the entered values.

        Returns:
            Tuple of (name, path), or None if cancelled
        """
        if self.exec():
            return self.name, self.path
        return None
