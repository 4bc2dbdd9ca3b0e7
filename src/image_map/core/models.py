"""Data models for Image Map hotspots, profiles and the profile store."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .geometry import Point, bounding_box, centroid, clamp_point, copy_points

logger = logging.getLogger(__name__)

# Drags smaller than this on both axes are treated as accidental clicks
MIN_DRAW_EXTENT = 2.0

ELLIPSE_SEGMENTS = 8

DEFAULT_IMAGE = "room-bg.png"


class ShapeKind(str, Enum):
    """Seed shape a hotspot was drawn with."""

    RECT = "rect"
    ELLIPSE = "ellipse"
    TRIANGLE = "triangle"


class RenderStyle(str, Enum):
    """How a hotspot's vertex list is turned into an outline."""

    STRAIGHT = "straight"
    SMOOTH = "smooth"


class LabelType(str, Enum):
    """What text a hotspot label shows."""

    NAME = "name"
    PATH = "path"
    BOTH = "both"


def generate_id() -> str:
    """Generate a new unique identifier for a hotspot or profile."""
    return uuid.uuid4().hex


def _normalized_drag(start: Point, end: Point) -> tuple[float, float, float, float]:
    return (
        min(start[0], end[0]),
        min(start[1], end[1]),
        max(start[0], end[0]),
        max(start[1], end[1]),
    )


def preview_points(kind: ShapeKind, start: Point, end: Point) -> List[Point]:
    """
    Build seed-shape vertices for a drag rectangle.

    The drag is normalized first, so dragging from either corner gives the
    same vertices.

    Args:
        kind: Seed shape to build
        start: Drag start point (percent)
        end: Current drag end point (percent)

    Returns:
        Vertex list for the seed shape
    """
    min_x, min_y, max_x, max_y = _normalized_drag(start, end)
    w = max_x - min_x
    h = max_y - min_y

    if kind == ShapeKind.RECT:
        return [(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)]

    if kind == ShapeKind.ELLIPSE:
        cx = min_x + w / 2
        cy = min_y + h / 2
        rx = w / 2
        ry = h / 2
        points = []
        for i in range(ELLIPSE_SEGMENTS):
            angle = 2 * math.pi * i / ELLIPSE_SEGMENTS
            points.append((cx + rx * math.cos(angle), cy + ry * math.sin(angle)))
        return points

    if kind == ShapeKind.TRIANGLE:
        return [(min_x + w / 2, min_y), (min_x, max_y), (max_x, max_y)]

    raise ValueError(f"Unknown shape kind: {kind}")


def seed_points(kind: ShapeKind, start: Point, end: Point) -> Optional[List[Point]]:
    """
    Build the committed vertex list for a finished drag.

    Returns:
        Vertex list, or None when the drag is below MIN_DRAW_EXTENT on
        both axes
    """
    min_x, min_y, max_x, max_y = _normalized_drag(start, end)
    if (max_x - min_x) < MIN_DRAW_EXTENT and (max_y - min_y) < MIN_DRAW_EXTENT:
        return None
    return preview_points(kind, start, end)


@dataclass
class LegacyRect:
    """Rectangle fields stored by hotspots that predate vertex lists."""

    top: float
    left: float
    width: float = 10.0
    height: float = 10.0

    def to_points(self) -> List[Point]:
        """Convert to four clockwise corners starting at top-left."""
        right = self.left + self.width
        bottom = self.top + self.height
        return [
            (self.left, self.top),
            (right, self.top),
            (right, bottom),
            (self.left, bottom),
        ]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[LegacyRect]:
        """Parse legacy string/number fields; None when no usable top is set."""
        if data.get("top") in (None, ""):
            return None
        try:
            return cls(
                top=float(data["top"]),
                left=float(data.get("left") or 0),
                width=float(data.get("width") or 10),
                height=float(data.get("height") or 10),
            )
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unparsable legacy rectangle: {data}")
            return None


@dataclass
class Hotspot:
    """
    A polygonal region of the background image bound to a destination.

    An empty name means the hotspot was just drawn and naming is pending.
    """

    id: str = field(default_factory=generate_id)
    name: str = ""
    path: str = ""
    points: List[Point] = field(default_factory=list)
    shape_type: Optional[ShapeKind] = None
    legacy_rect: Optional[LegacyRect] = None

    def __post_init__(self) -> None:
        self.points = copy_points(self.points)
        if self.shape_type is not None and not isinstance(self.shape_type, ShapeKind):
            self.shape_type = ShapeKind(self.shape_type)

    @property
    def render_style(self) -> RenderStyle:
        """Smooth curves for ellipse-derived shapes, straight edges otherwise."""
        if self.shape_type == ShapeKind.ELLIPSE:
            return RenderStyle.SMOOTH
        return RenderStyle.STRAIGHT

    @property
    def outline(self) -> List[Point]:
        """Vertices used for rendering; points win over legacy fields."""
        if self.points:
            return self.points
        if self.legacy_rect is not None:
            return self.legacy_rect.to_points()
        return []

    def is_valid(self) -> bool:
        """True when the hotspot has at least 3 vertices or a legacy rect."""
        return len(self.points) >= 3 or (not self.points and self.legacy_rect is not None)

    def is_box(self) -> bool:
        """Rectangles and legacy rects anchor their label at the box center."""
        return self.shape_type == ShapeKind.RECT or (
            not self.points and self.legacy_rect is not None
        )

    def label_anchor(self) -> Point:
        """Position of the hotspot label in percent."""
        outline = self.outline
        if self.is_box() and outline:
            min_x, min_y, max_x, max_y = bounding_box(outline)
            return ((min_x + max_x) / 2, (min_y + max_y) / 2)
        return centroid(outline)

    def migrate_legacy(self) -> bool:
        """
        Convert legacy rectangle fields into a 4-vertex polygon.

        Returns:
            True if the hotspot was converted
        """
        if self.legacy_rect is None:
            return False
        if self.points:
            # Both present: vertices take precedence
            logger.warning(
                f"Hotspot {self.id} has both points and legacy rect fields; using points"
            )
        else:
            self.points = self.legacy_rect.to_points()
            self.shape_type = ShapeKind.RECT
        self.legacy_rect = None
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "points": [[x, y] for x, y in self.points],
        }
        if self.shape_type is not None:
            data["shapeType"] = self.shape_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Hotspot:
        """Create a hotspot from a dictionary, keeping legacy fields."""
        raw_points = data.get("points") or []
        shape_type = data.get("shapeType")
        if shape_type not in (None, "") and shape_type not in {k.value for k in ShapeKind}:
            logger.warning(f"Unknown shape type '{shape_type}', treating as freeform")
            shape_type = None
        return cls(
            id=str(data.get("id") or generate_id()),
            name=data.get("name", "") or "",
            path=data.get("path", "") or "",
            points=[clamp_point((float(p[0]), float(p[1]))) for p in raw_points],
            shape_type=ShapeKind(shape_type) if shape_type else None,
            legacy_rect=LegacyRect.from_dict(data),
        )


@dataclass
class Profile:
    """A named background image with its hotspots."""

    name: str
    image_path: str = DEFAULT_IMAGE
    hotspots: List[Hotspot] = field(default_factory=list)
    id: str = field(default_factory=generate_id)

    def find_hotspot(self, hotspot_id: str) -> Optional[Hotspot]:
        """Find a hotspot by id."""
        for hotspot in self.hotspots:
            if hotspot.id == hotspot_id:
                return hotspot
        return None

    def add_hotspot(self, hotspot: Hotspot) -> None:
        """Append a hotspot (creation order)."""
        self.hotspots.append(hotspot)

    def remove_hotspot(self, hotspot_id: str) -> Optional[Hotspot]:
        """Remove and return a hotspot by id."""
        for i, hotspot in enumerate(self.hotspots):
            if hotspot.id == hotspot_id:
                return self.hotspots.pop(i)
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "imagePath": self.image_path,
            "hotspots": [h.to_dict() for h in self.hotspots],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Profile:
        """
        Create a profile from a dictionary.

        Legacy rectangles are migrated and corrupt hotspots are dropped.
        """
        profile = cls(
            id=str(data.get("id") or generate_id()),
            name=data.get("name", "") or "",
            image_path=data.get("imagePath") or DEFAULT_IMAGE,
        )
        for raw in data.get("hotspots") or []:
            try:
                hotspot = Hotspot.from_dict(raw)
            except (AttributeError, TypeError, ValueError, IndexError) as e:
                logger.warning(f"Dropping unreadable hotspot in profile '{profile.name}': {e}")
                continue
            if not hotspot.is_valid():
                logger.warning(f"Dropping corrupt hotspot {hotspot.id} in profile '{profile.name}'")
                continue
            hotspot.migrate_legacy()
            profile.add_hotspot(hotspot)
        return profile


@dataclass
class Store:
    """
    All profiles plus the active selection and display preferences.

    A non-empty active_profile_id always references an existing profile.
    """

    profiles: List[Profile] = field(default_factory=list)
    active_profile_id: str = ""
    display_label_type: LabelType = LabelType.PATH

    def __post_init__(self) -> None:
        self.display_label_type = LabelType(self.display_label_type)

    def find_profile(self, profile_id: str) -> Optional[Profile]:
        """Find a profile by id."""
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    @property
    def active_profile(self) -> Optional[Profile]:
        """The active profile, defaulting to the first one when unset."""
        if not self.active_profile_id and self.profiles:
            self.active_profile_id = self.profiles[0].id
        return self.find_profile(self.active_profile_id)

    def add_profile(self, name: str, image_path: str = "") -> Profile:
        """Create a profile, append it and make it active."""
        profile = Profile(name=name, image_path=image_path or DEFAULT_IMAGE)
        self.profiles.append(profile)
        self.active_profile_id = profile.id
        logger.info(f"Created profile '{name}'")
        return profile

    def set_active(self, profile_id: str) -> bool:
        """
        Make a profile active.

        Returns:
            True if the profile exists
        """
        if self.find_profile(profile_id) is None:
            logger.warning(f"Unknown profile id: {profile_id}")
            return False
        self.active_profile_id = profile_id
        return True

    def delete_profile(self, profile_id: str) -> Optional[Profile]:
        """
        Delete a profile and its hotspots.

        Deleting the active profile promotes the first remaining profile,
        or clears the selection when none remain.
        """
        profile = self.find_profile(profile_id)
        if profile is None:
            return None
        self.profiles.remove(profile)
        if self.active_profile_id == profile_id:
            self.active_profile_id = self.profiles[0].id if self.profiles else ""
        logger.info(f"Deleted profile '{profile.name}'")
        return profile

    @property
    def hotspot_count(self) -> int:
        """Total number of hotspots over all profiles."""
        return sum(len(p.hotspots) for p in self.profiles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for serialization."""
        return {
            "displayLabelType": self.display_label_type.value,
            "profiles": [p.to_dict() for p in self.profiles],
            "activeProfileId": self.active_profile_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Store:
        """Create a store from a dictionary, applying defaults."""
        label_type = data.get("displayLabelType", LabelType.PATH.value)
        if label_type not in {t.value for t in LabelType}:
            logger.warning(f"Unknown label type '{label_type}', using path")
            label_type = LabelType.PATH.value

        store = cls(
            profiles=[Profile.from_dict(p) for p in data.get("profiles") or []],
            active_profile_id=str(data.get("activeProfileId") or ""),
            display_label_type=LabelType(label_type),
        )
        if store.active_profile_id and store.find_profile(store.active_profile_id) is None:
            logger.warning(f"Active profile {store.active_profile_id} missing, resetting")
            store.active_profile_id = store.profiles[0].id if store.profiles else ""
        return store
