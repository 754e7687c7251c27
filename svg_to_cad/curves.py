"""
Curve flattening math.

Bezier curves are sampled uniformly in t with a count derived from an
estimated length; elliptical arcs are converted from SVG endpoint
parameterization to center parameterization (SVG implementation notes,
F.6.5) and sampled uniformly in angle.
"""

import math
from typing import NamedTuple

import numpy as np

from .config import MIN_ARC_RADIUS
from .geometry_models import (
    ArcSegment,
    CubicSegment,
    LineSegment,
    Point2D,
    QuadraticSegment,
)

_HALF_PI = math.pi / 2


def _xy(point: Point2D) -> np.ndarray:
    return np.array([point.x, point.y], dtype=float)


def _pt(xy) -> Point2D:
    return Point2D(x=float(xy[0]), y=float(xy[1]))


def sample_count(length: float, resolution: float, minimum: int = 2) -> int:
    """Number of line segments needed so each is about `resolution` long."""
    return max(minimum, math.ceil(length / resolution))


def cubic_length_estimate(seg: CubicSegment) -> float:
    """Average of chord length and control polygon length."""
    p0, p1, p2, p3 = seg.start, seg.control1, seg.control2, seg.end
    chord = p0.distance_to(p3)
    polygon = p0.distance_to(p1) + p1.distance_to(p2) + p2.distance_to(p3)
    return (chord + polygon) / 2


def quadratic_length_estimate(seg: QuadraticSegment) -> float:
    p0, p1, p2 = seg.start, seg.control, seg.end
    chord = p0.distance_to(p2)
    polygon = p0.distance_to(p1) + p1.distance_to(p2)
    return (chord + polygon) / 2


def _polyline(start: Point2D, samples: np.ndarray, end: Point2D, closing: bool) -> list[LineSegment]:
    """
    Chain sampled points into lines from `start` to `end`.

    The final sample is replaced by `end` so flattening never drifts off the
    curve's exact endpoint.
    """
    points = [start] + [_pt(xy) for xy in samples[:-1]] + [end]
    lines = [LineSegment(start=a, end=b) for a, b in zip(points, points[1:])]
    if closing and lines:
        lines[-1] = lines[-1].model_copy(update={"closing": True})
    return lines


def cubic_points(seg: CubicSegment, t: np.ndarray) -> np.ndarray:
    t = t[:, None]
    mt = 1.0 - t
    return (
        mt ** 3 * _xy(seg.start)
        + 3 * mt ** 2 * t * _xy(seg.control1)
        + 3 * mt * t ** 2 * _xy(seg.control2)
        + t ** 3 * _xy(seg.end)
    )


def quadratic_points(seg: QuadraticSegment, t: np.ndarray) -> np.ndarray:
    t = t[:, None]
    mt = 1.0 - t
    return mt ** 2 * _xy(seg.start) + 2 * mt * t * _xy(seg.control) + t ** 2 * _xy(seg.end)


def flatten_cubic(seg: CubicSegment, resolution: float) -> list[LineSegment]:
    n = sample_count(cubic_length_estimate(seg), resolution)
    t = np.arange(1, n + 1) / n
    return _polyline(seg.start, cubic_points(seg, t), seg.end, seg.closing)


def flatten_quadratic(seg: QuadraticSegment, resolution: float) -> list[LineSegment]:
    n = sample_count(quadratic_length_estimate(seg), resolution)
    t = np.arange(1, n + 1) / n
    return _polyline(seg.start, quadratic_points(seg, t), seg.end, seg.closing)


def quadratic_to_cubic(seg: QuadraticSegment) -> CubicSegment:
    """Exact degree elevation of a quadratic Bezier."""
    p0, p1, p2 = _xy(seg.start), _xy(seg.control), _xy(seg.end)
    return CubicSegment(
        start=seg.start,
        control1=_pt(p0 + 2.0 / 3.0 * (p1 - p0)),
        control2=_pt(p2 + 2.0 / 3.0 * (p1 - p2)),
        end=seg.end,
        closing=seg.closing,
    )


class ArcGeometry(NamedTuple):
    """Center parameterization of an elliptical arc (angles in radians)."""
    cx: float
    cy: float
    rx: float
    ry: float
    phi: float
    start_angle: float
    sweep_angle: float

    @property
    def end_angle(self) -> float:
        return self.start_angle + self.sweep_angle

    def points_at(self, theta: np.ndarray) -> np.ndarray:
        cos_phi, sin_phi = math.cos(self.phi), math.sin(self.phi)
        ex = self.rx * np.cos(theta)
        ey = self.ry * np.sin(theta)
        x = self.cx + cos_phi * ex - sin_phi * ey
        y = self.cy + sin_phi * ex + cos_phi * ey
        return np.column_stack([x, y])

    def derivatives_at(self, theta: np.ndarray) -> np.ndarray:
        cos_phi, sin_phi = math.cos(self.phi), math.sin(self.phi)
        dx = -self.rx * np.sin(theta)
        dy = self.ry * np.cos(theta)
        return np.column_stack([cos_phi * dx - sin_phi * dy, sin_phi * dx + cos_phi * dy])


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    """Signed angle from u to v; the acos argument is clamped to [-1, 1]."""
    norm = math.hypot(ux, uy) * math.hypot(vx, vy)
    if norm == 0:
        return 0.0
    cos_angle = max(-1.0, min(1.0, (ux * vx + uy * vy) / norm))
    angle = math.acos(cos_angle)
    return -angle if ux * vy - uy * vx < 0 else angle


def arc_center_parameters(seg: ArcSegment) -> ArcGeometry:
    """
    Convert an endpoint-parameterized arc to center parameterization.

    Radii are made positive and clamped to MIN_ARC_RADIUS, then scaled up
    uniformly when too small to span the endpoints. The sweep angle is
    signed by the sweep flag and lies in (-2*pi, 2*pi).
    """
    x1, y1 = seg.start.x, seg.start.y
    x2, y2 = seg.end.x, seg.end.y
    phi = math.radians(seg.rotation % 360.0)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)

    rx = max(abs(seg.rx), MIN_ARC_RADIUS)
    ry = max(abs(seg.ry), MIN_ARC_RADIUS)

    dx2 = (x1 - x2) / 2.0
    dy2 = (y1 - y2) / 2.0
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    radii_check = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if radii_check > 1:
        root = math.sqrt(radii_check)
        rx *= root
        ry *= root

    numerator = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    denominator = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    sign = 1.0 if seg.large_arc != seg.sweep else -1.0
    coef = sign * math.sqrt(max(0.0, numerator / denominator)) if denominator > 0 else 0.0

    cxp = coef * (rx * y1p / ry)
    cyp = coef * -(ry * x1p / rx)
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2.0
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2.0

    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    start_angle = _vector_angle(1.0, 0.0, ux, uy)
    sweep_angle = _vector_angle(ux, uy, vx, vy)

    if not seg.sweep and sweep_angle > 0:
        sweep_angle -= 2 * math.pi
    elif seg.sweep and sweep_angle < 0:
        sweep_angle += 2 * math.pi
    sweep_angle = math.fmod(sweep_angle, 2 * math.pi)

    return ArcGeometry(cx, cy, rx, ry, phi, start_angle, sweep_angle)


def arc_step_count(geom: ArcGeometry, resolution: float) -> int:
    return sample_count(abs(geom.sweep_angle) * max(geom.rx, geom.ry), resolution)


def arc_sample_angles(geom: ArcGeometry, resolution: float) -> np.ndarray:
    """Angles of the flattened arc's vertices after the start point."""
    n = arc_step_count(geom, resolution)
    return geom.start_angle + geom.sweep_angle * (np.arange(1, n + 1) / n)


def flatten_arc(seg: ArcSegment, resolution: float) -> list[LineSegment]:
    if seg.start == seg.end:
        return []
    geom = arc_center_parameters(seg)
    samples = geom.points_at(arc_sample_angles(geom, resolution))
    return _polyline(seg.start, samples, seg.end, seg.closing)


def arc_to_cubics(seg: ArcSegment) -> list[CubicSegment]:
    """Approximate an arc with one cubic per quarter turn (or part of one)."""
    if seg.start == seg.end:
        return []
    geom = arc_center_parameters(seg)
    pieces = max(1, math.ceil(abs(geom.sweep_angle) / _HALF_PI - 1e-9))
    delta = geom.sweep_angle / pieces
    k = 4.0 / 3.0 * math.tan(delta / 4.0)

    thetas = geom.start_angle + delta * np.arange(pieces + 1)
    points = geom.points_at(thetas)
    tangents = geom.derivatives_at(thetas)

    cubics = []
    for i in range(pieces):
        start = seg.start if i == 0 else _pt(points[i])
        end = seg.end if i == pieces - 1 else _pt(points[i + 1])
        cubics.append(
            CubicSegment(
                start=start,
                control1=_pt(points[i] + k * tangents[i]),
                control2=_pt(points[i + 1] - k * tangents[i + 1]),
                end=end,
                closing=seg.closing and i == pieces - 1,
            )
        )
    return cubics


def flatten_segment(seg, resolution: float) -> list[LineSegment]:
    """Replace a curve with line segments; lines pass through unchanged."""
    if isinstance(seg, LineSegment):
        return [seg]
    if isinstance(seg, CubicSegment):
        return flatten_cubic(seg, resolution)
    if isinstance(seg, QuadraticSegment):
        return flatten_quadratic(seg, resolution)
    if isinstance(seg, ArcSegment):
        return flatten_arc(seg, resolution)
    raise TypeError(f"Unsupported segment type: {type(seg).__name__}")


def flatten_segments(segments: list, resolution: float) -> list[LineSegment]:
    lines: list[LineSegment] = []
    for seg in segments:
        lines.extend(flatten_segment(seg, resolution))
    return lines
