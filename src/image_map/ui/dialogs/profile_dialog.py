"""Dialog for creating a new profile."""

from __future__ import annotations

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
)

from ...core.models import DEFAULT_IMAGE


class ProfileDialog(QDialog):
    """Ask for a profile name and its background image."""

    def __init__(
        self,
        default_image: str = DEFAULT_IMAGE,
        name: str = "",
        image_path: str = "",
        title: str = "Create New Profile",
        accept_text: str = "Create",
        parent=None
    ) -> None:
        """
        Initialize the profile dialog.

        Args:
            default_image: Image used when the image field is left blank
            name: Initial profile name
            image_path: Initial image reference, defaults to default_image
            title: Window title
            accept_text: Text of the accept button
            parent: Parent widget
        """
        super().__init__(parent)
        self.default_image = default_image
        self._title = title
        self._accept_text = accept_text
        self._init_ui(name, image_path or default_image)

    def _init_ui(self, name: str, image_path: str) -> None:
        """Initialize the dialog UI."""
        self.setWindowTitle(self._title)
        self.setMinimumWidth(380)
        self.setModal(True)

        layout = QVBoxLayout()
        layout.setSpacing(12)

        form = QFormLayout()
        self.name_edit = QLineEdit(name)
        self.name_edit.setPlaceholderText("e.g., Living Room, Office")
        form.addRow("Profile Name", self.name_edit)

        self.image_edit = QLineEdit(image_path)
        form.addRow("Image Path", self.image_edit)
        layout.addLayout(form)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #e57373;")
        self.error_label.hide()
        layout.addWidget(self.error_label)

        button_layout = QHBoxLayout()
        button_layout.addStretch()

        create_button = QPushButton(self._accept_text)
        create_button.setDefault(True)
        create_button.clicked.connect(self._on_create)
        button_layout.addWidget(create_button)

        cancel_button = QPushButton("Cancel")
        cancel_button.clicked.connect(self.reject)
        button_layout.addWidget(cancel_button)

        layout.addLayout(button_layout)
        self.setLayout(layout)

    def _on_create(self) -> None:
        if not self.name:
            self.error_label.setText("Please enter a profile name!")
            self.error_label.show()
            return
        self.accept()

    @property
    def name(self) -> str:
        """Entered profile name, stripped."""
        return self.name_edit.text().strip()

    @property
    def image_path(self) -> str:
        """Entered image reference; blank falls back to the default image."""
        return self.image_edit.text().strip() or self.default_image
