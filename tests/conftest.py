"""Pytest configuration and fixtures."""

import os
import pytest
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Run Qt headless when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    """Create a QApplication for tests that need it."""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])

    yield app


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def legacy_store_file(tmp_path):
    """Create a store file written before profiles existed."""
    yaml_path = tmp_path / "image_map.yaml"
    yaml_path.write_text(
        "roomImagePath: rooms/den.jpg\n"
        "hotspots:\n"
        "  - id: h1\n"
        "    name: Shelf\n"
        "    path: Books\n"
        "    top: '10'\n"
        "    left: '20'\n"
        "    width: '30'\n"
        "    height: '40'\n"
        "  - id: h2\n"
        "    name: Broken\n"
        "    path: ''\n"
    )
    return yaml_path


@pytest.fixture
def store_with_profile():
    """A store with one active, empty profile."""
    from image_map.core.models import Store

    store = Store()
    store.add_profile("Room A", "bg.png")
    return store


@pytest.fixture
def editor(qapp, store_with_profile):
    """A shape editor over a single empty profile."""
    from image_map.core.editor import ShapeEditor

    return ShapeEditor(store_with_profile)


@pytest.fixture
def signal_recorder():
    """Collect emissions of Qt signals into lists keyed by name."""

    class Recorder:
        def __init__(self):
            self.calls = {}

        def watch(self, name, signal):
            self.calls[name] = []
            signal.connect(lambda *args: self.calls[name].append(args))

        def count(self, name):
            return len(self.calls[name])

    return Recorder()
