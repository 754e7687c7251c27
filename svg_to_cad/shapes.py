"""
Segment synthesis for basic shapes.

Circles and ellipses become either N line segments around the perimeter or
four cubic quadrants; rectangles become four lines, or lines plus rounded
corners; polygons and polylines become chains of lines. Shapes that are
always closed mark their last segment as closing.
"""

import math

import numpy as np

from .config import BEZIER_CIRCLE_KAPPA
from .curves import sample_count
from .geometry_models import CubicSegment, LineSegment, Point2D


def _p(x: float, y: float) -> Point2D:
    return Point2D(x=float(x), y=float(y))


def _mark_closing(segments: list) -> list:
    if segments:
        segments[-1] = segments[-1].model_copy(update={"closing": True})
    return segments


def _closed_polyline(points: list[Point2D]) -> list[LineSegment]:
    segments = [LineSegment(start=a, end=b) for a, b in zip(points, points[1:] + points[:1])]
    return _mark_closing(segments)


def ellipse_point_count(rx: float, ry: float, resolution: float) -> int:
    """Perimeter-driven segment count, never fewer than 8."""
    circumference = 2 * math.pi * math.sqrt((rx * rx + ry * ry) / 2)
    return sample_count(circumference, resolution, minimum=8)


def ellipse_segments(
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    approximate: bool = True,
    resolution: float = 0.5,
) -> list:
    """
    Closed ellipse outline starting at the rightmost point.

    Args:
        cx, cy: Center
        rx, ry: Radii (equal for a circle)
        approximate: Emit line segments instead of cubic quadrants
        resolution: Target line length when approximating

    Returns:
        List of segments, last one marked closing
    """
    if approximate:
        n = ellipse_point_count(rx, ry, resolution)
        theta = 2 * math.pi * np.arange(n) / n
        xs = cx + rx * np.cos(theta)
        ys = cy + ry * np.sin(theta)
        return _closed_polyline([_p(x, y) for x, y in zip(xs, ys)])

    kx = rx * BEZIER_CIRCLE_KAPPA
    ky = ry * BEZIER_CIRCLE_KAPPA
    right, bottom = _p(cx + rx, cy), _p(cx, cy + ry)
    left, top = _p(cx - rx, cy), _p(cx, cy - ry)
    segments = [
        CubicSegment(start=right, control1=_p(cx + rx, cy + ky), control2=_p(cx + kx, cy + ry), end=bottom),
        CubicSegment(start=bottom, control1=_p(cx - kx, cy + ry), control2=_p(cx - rx, cy + ky), end=left),
        CubicSegment(start=left, control1=_p(cx - rx, cy - ky), control2=_p(cx - kx, cy - ry), end=top),
        CubicSegment(start=top, control1=_p(cx + kx, cy - ry), control2=_p(cx + rx, cy - ky), end=right),
    ]
    return _mark_closing(segments)


def circle_segments(cx: float, cy: float, r: float, approximate: bool = True, resolution: float = 0.5) -> list:
    return ellipse_segments(cx, cy, r, r, approximate, resolution)


def _corner(cx: float, cy: float, rx: float, ry: float, start_angle: float, approximate: bool, resolution: float) -> list:
    """Quarter-ellipse corner running a quarter turn clockwise on screen from start_angle."""
    if approximate:
        n = sample_count(math.pi * rx / 2, resolution, minimum=4)
        theta = start_angle + (math.pi / 2) * np.arange(n + 1) / n
        points = [_p(cx + rx * math.cos(t), cy + ry * math.sin(t)) for t in theta]
        return [LineSegment(start=a, end=b) for a, b in zip(points, points[1:])]

    a0, a1 = start_angle, start_angle + math.pi / 2
    kx, ky = rx * BEZIER_CIRCLE_KAPPA, ry * BEZIER_CIRCLE_KAPPA
    start = _p(cx + rx * math.cos(a0), cy + ry * math.sin(a0))
    end = _p(cx + rx * math.cos(a1), cy + ry * math.sin(a1))
    control1 = _p(start.x - kx * math.sin(a0), start.y + ky * math.cos(a0))
    control2 = _p(end.x + kx * math.sin(a1), end.y - ky * math.cos(a1))
    return [CubicSegment(start=start, control1=control1, control2=control2, end=end)]


def rect_segments(
    x: float,
    y: float,
    width: float,
    height: float,
    rx: float = 0.0,
    ry: float = 0.0,
    approximate: bool = True,
    resolution: float = 0.5,
) -> list:
    """
    Rectangle outline, optionally with rounded corners.

    Corner radii are clamped to half the width and height. Without rounding
    the order is top, right, bottom, left; with rounding each edge is
    followed by the corner at its end.
    """
    rx = min(rx, width / 2)
    ry = min(ry, height / 2)
    right, bottom = x + width, y + height

    if rx <= 0 or ry <= 0:
        corners = [_p(x, y), _p(right, y), _p(right, bottom), _p(x, bottom)]
        return _closed_polyline(corners)

    edges = [
        (_p(x + rx, y), _p(right - rx, y)),
        (_p(right, y + ry), _p(right, bottom - ry)),
        (_p(right - rx, bottom), _p(x + rx, bottom)),
        (_p(x, bottom - ry), _p(x, y + ry)),
    ]
    corners = [
        (right - rx, y + ry, -math.pi / 2),
        (right - rx, bottom - ry, 0.0),
        (x + rx, bottom - ry, math.pi / 2),
        (x + rx, y + ry, math.pi),
    ]
    segments: list = []
    for (start, end), (ccx, ccy, angle) in zip(edges, corners):
        if start != end:
            segments.append(LineSegment(start=start, end=end))
        segments.extend(_corner(ccx, ccy, rx, ry, angle, approximate, resolution))

    # Snap the final corner onto the first edge
    last = segments[-1]
    segments[-1] = last.model_copy(update={"end": segments[0].start})
    return _mark_closing(segments)


def polygon_segments(points: list[Point2D]) -> list:
    return _closed_polyline(list(points))


def polyline_segments(points: list[Point2D]) -> list:
    return [LineSegment(start=a, end=b) for a, b in zip(points, points[1:])]


def line_segments(x1: float, y1: float, x2: float, y2: float) -> list:
    return [LineSegment(start=_p(x1, y1), end=_p(x2, y2))]
