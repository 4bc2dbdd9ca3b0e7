"""Dialog components for Image Map."""

from .region_dialog import RegionDialog
from .profile_dialog import ProfileDialog

__all__ = [
    "RegionDialog",
    "ProfileDialog",
]
