"""UI components for Image Map."""

from .hotspot_canvas import HotspotCanvas
from .main_window import MainWindow

__all__ = [
    "HotspotCanvas",
    "MainWindow",
]
