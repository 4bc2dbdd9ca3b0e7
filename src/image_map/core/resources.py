"""Background image resolution and hotspot navigation."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple

from PyQt6.QtCore import QUrl
from PyQt6.QtGui import QDesktopServices

from .models import DEFAULT_IMAGE

logger = logging.getLogger(__name__)

FileOpener = Callable[[Path, str], bool]
FolderHandler = Callable[[Path], bool]


class ResourceResolver:
    """
    Resolve a profile's image reference to a file on disk.

    Bare filenames live in the application directory; references with a
    path separator are looked up under the storage root first.
    """

    def __init__(self, plugin_dir: Path, storage_root: Path) -> None:
        """
        Initialize the resolver.

        Args:
            plugin_dir: Directory holding bundled images
            storage_root: Root of the user's file tree
        """
        self.plugin_dir = Path(plugin_dir)
        self.storage_root = Path(storage_root)

    def candidate(self, image_ref: str) -> Path:
        """Return the path an image reference points to, existing or not."""
        image_ref = image_ref or DEFAULT_IMAGE
        if "/" in image_ref or "\\" in image_ref:
            in_storage = self.storage_root / image_ref
            if in_storage.is_file():
                return in_storage
        return self.plugin_dir / image_ref

    def resolve(self, image_ref: str) -> Optional[Path]:
        """
        Resolve an image reference.

        Returns:
            Path to an existing file, or None when the image is missing
        """
        path = self.candidate(image_ref)
        if path.is_file():
            return path
        logger.warning(f"Background image not found: {image_ref}")
        return None


class NavigationResult(str, Enum):
    """Outcome of following a hotspot's destination."""

    OPENED = "opened"
    FOLDER = "folder"
    NOT_FOUND = "not_found"
    NO_DESTINATION = "no_destination"


def split_fragment(destination: str) -> Tuple[str, str]:
    """
    Split ``path#fragment`` into its parts.

    Returns:
        Tuple of (path, fragment); the fragment keeps its leading '#'
    """
    if "#" not in destination:
        return destination, ""
    path, fragment = destination.split("#", 1)
    return path, "#" + fragment


def open_with_desktop(path: Path, fragment: str) -> bool:
    """Open a file with the system handler, passing the fragment along."""
    url = QUrl.fromLocalFile(str(path))
    if fragment:
        url.setFragment(fragment[1:])
    return QDesktopServices.openUrl(url)


def open_folder_with_desktop(path: Path) -> bool:
    """Show a folder in the system file manager."""
    return QDesktopServices.openUrl(QUrl.fromLocalFile(str(path)))


class Navigator:
    """Follow a hotspot destination to a file or folder under the storage root."""

    def __init__(
        self,
        storage_root: Path,
        opener: Optional[FileOpener] = None,
        folder_handler: Optional[FolderHandler] = None
    ) -> None:
        """
        Initialize the navigator.

        Args:
            storage_root: Root that destinations are relative to
            opener: Called with (file, fragment) to open a file
            folder_handler: Called with a folder path for folder destinations
        """
        self.storage_root = Path(storage_root)
        self.opener = opener or open_with_desktop
        self.folder_handler = folder_handler or open_folder_with_desktop

    def locate(self, path: str) -> Optional[Path]:
        """Find the file or folder a destination path names inside the storage root."""
        target = self.storage_root / path
        if self._inside_root(target) and target.exists():
            return target
        if not path.endswith(".md"):
            with_extension = self.storage_root / f"{path}.md"
            if self._inside_root(with_extension) and with_extension.is_file():
                return with_extension
        return None

    def _inside_root(self, target: Path) -> bool:
        root = self.storage_root.resolve()
        resolved = target.resolve()
        return resolved == root or root in resolved.parents

    def navigate(self, destination: str) -> NavigationResult:
        """
        Open the file or folder a destination points to.

        Args:
            destination: Path relative to the storage root, may end in #fragment

        Returns:
            What happened; nothing is opened unless the result is OPENED
            or FOLDER
        """
        if not destination or not destination.strip():
            return NavigationResult.NO_DESTINATION

        path, fragment = split_fragment(destination.strip())
        if not path.strip():
            return NavigationResult.NO_DESTINATION

        target = self.locate(path)
        if target is None:
            logger.info(f"Destination not found: {path}")
            return NavigationResult.NOT_FOUND

        if target.is_dir():
            self.folder_handler(target)
            return NavigationResult.FOLDER

        if not self.opener(target, fragment):
            logger.warning(f"Could not open {target}")
        logger.info(f"Opened {target}{fragment}")
        return NavigationResult.OPENED
