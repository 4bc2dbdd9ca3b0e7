"""Geometry kernel for percentage-normalized hotspot coordinates.

All coordinates are percentages (0-100) of the background image's width
and height. Nothing here knows about pixels; the canvas converts pointer
offsets with :func:`to_percent` and :func:`from_percent`.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

Point = Tuple[float, float]
PathCommand = Tuple[Union[str, float], ...]

# Catmull-Rom to cubic Bezier tension for smooth shapes
SMOOTH_TENSION = 0.35

PERCENT_MIN = 0.0
PERCENT_MAX = 100.0


def centroid(points: Sequence[Point]) -> Point:
    """
    Arithmetic mean of all vertices.

    Args:
        points: Polygon vertices

    Returns:
        The mean point, or the center of the image (50, 50) for no points
    """
    n = len(points)
    if n == 0:
        return (50.0, 50.0)
    sum_x = sum(p[0] for p in points)
    sum_y = sum(p[1] for p in points)
    return (sum_x / n, sum_y / n)


def straight_closed_path(points: Sequence[Point]) -> List[PathCommand]:
    """Build a closed polygon path (move, lines, close)."""
    commands: List[PathCommand] = []
    for i, (x, y) in enumerate(points):
        commands.append(("M" if i == 0 else "L", x, y))
    commands.append(("Z",))
    return commands


def smooth_closed_path(points: Sequence[Point]) -> List[PathCommand]:
    """
    Build a closed cubic curve through every control point.

    Each segment p1 -> p2 uses the cyclic neighbours p0 (previous) and
    p3 (next-next) to derive its Bezier control points. Fewer than three
    points degrade to a straight closed path.

    Args:
        points: Control points, treated as a cycle

    Returns:
        List of path commands: ("M", x, y), ("C", c1x, c1y, c2x, c2y, x, y)
        and a final ("Z",)
    """
    n = len(points)
    if n < 3:
        return straight_closed_path(points)

    commands: List[PathCommand] = [("M", points[0][0], points[0][1])]
    for i in range(n):
        p0 = points[(i - 1 + n) % n]
        p1 = points[i]
        p2 = points[(i + 1) % n]
        p3 = points[(i + 2) % n]

        cp1x = p1[0] + (p2[0] - p0[0]) * SMOOTH_TENSION
        cp1y = p1[1] + (p2[1] - p0[1]) * SMOOTH_TENSION
        cp2x = p2[0] - (p3[0] - p1[0]) * SMOOTH_TENSION
        cp2y = p2[1] - (p3[1] - p1[1]) * SMOOTH_TENSION

        commands.append(("C", cp1x, cp1y, cp2x, cp2y, p2[0], p2[1]))
    commands.append(("Z",))
    return commands


def clamp_percent(value: float) -> float:
    """Clamp a coordinate into the normalized [0, 100] range."""
    return max(PERCENT_MIN, min(PERCENT_MAX, value))


def to_percent(offset: float, extent: float) -> float:
    """
    Convert a pixel offset inside the image to a clamped percentage.

    Args:
        offset: Offset from the image's left or top edge in pixels
        extent: Image width or height in pixels

    Returns:
        Percentage in [0, 100]; 0 when the extent is empty
    """
    if extent <= 0:
        return PERCENT_MIN
    return clamp_percent(offset / extent * 100.0)


def from_percent(value: float, extent: float) -> float:
    """Convert a percentage back to a pixel offset."""
    return value / 100.0 * extent


def clamp_point(point: Point) -> Point:
    """Clamp both coordinates of a point."""
    return (clamp_percent(point[0]), clamp_percent(point[1]))


def bounding_box(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    """
    Get the axis-aligned bounds of a point list.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y), all zero for no points
    """
    if not points:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def translate(points: Sequence[Point], dx: float, dy: float) -> List[Point]:
    """Return a copy of ``points`` shifted by (dx, dy)."""
    return [(x + dx, y + dy) for x, y in points]


def copy_points(points: Sequence[Point]) -> List[Point]:
    """Snapshot a point list as a new list of float tuples."""
    return [(float(x), float(y)) for x, y in points]
