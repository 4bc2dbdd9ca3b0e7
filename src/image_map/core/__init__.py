"""Core business logic modules for Image Map."""

from .models import Hotspot, LabelType, Profile, ShapeKind, Store
from .config import AppConfig, ConfigManager, StoreManager
from .editor import EditorState, ShapeEditor
from .projection import project
from .resources import Navigator, ResourceResolver

__all__ = [
    "Hotspot",
    "LabelType",
    "Profile",
    "ShapeKind",
    "Store",
    "AppConfig",
    "ConfigManager",
    "StoreManager",
    "EditorState",
    "ShapeEditor",
    "project",
    "Navigator",
    "ResourceResolver",
]
