"""
SVG transform parsing and affine composition.

Transform attributes are recorded as ordered TransformOp chains by the
extractor and composed here into 3x3 homogeneous matrices:

    translate(tx [ty])        scale(sx [sy])
    rotate(a [cx cy])         skewX(a)   skewY(a)
    matrix(a b c d e f)
"""

import logging
import math
import re
from typing import Iterable

import numpy as np

from .curves import arc_to_cubics
from .geometry_models import (
    ArcSegment,
    CubicSegment,
    LineSegment,
    Point2D,
    QuadraticSegment,
    TransformOp,
)

logger = logging.getLogger(__name__)

_TRANSFORM_RE = re.compile(r"(translate|scale|rotate|skewX|skewY|matrix)\s*\(\s*([^)]*)\)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Minimum operand counts per operation
_ARITY = {
    "translate": 1,
    "scale": 1,
    "rotate": 1,
    "skewX": 1,
    "skewY": 1,
    "matrix": 6,
}

_EPSILON = 1e-9
_SINGULAR = 1e-12


def parse_transform(text: str | None) -> list[TransformOp]:
    """Parse a transform attribute into operations, left to right."""
    if not text:
        return []
    ops = []
    for name, args in _TRANSFORM_RE.findall(text):
        params = [float(v) for v in _NUMBER_RE.findall(args)]
        if len(params) < _ARITY[name]:
            logger.debug("Ignoring %s() with %d operands", name, len(params))
            continue
        ops.append(TransformOp(type=name, params=params))
    return ops


def op_matrix(op: TransformOp) -> np.ndarray:
    """Homogeneous matrix of a single operation."""
    p = op.params
    m = np.identity(3)
    if op.type == "translate":
        m[0, 2] = p[0]
        m[1, 2] = p[1] if len(p) > 1 else 0.0
    elif op.type == "scale":
        m[0, 0] = p[0]
        m[1, 1] = p[1] if len(p) > 1 else p[0]
    elif op.type == "rotate":
        a = math.radians(p[0])
        c, s = math.cos(a), math.sin(a)
        m[:2, :2] = [[c, -s], [s, c]]
        if len(p) >= 3:
            cx, cy = p[1], p[2]
            m = translation(cx, cy) @ m @ translation(-cx, -cy)
    elif op.type == "skewX":
        m[0, 1] = math.tan(math.radians(p[0]))
    elif op.type == "skewY":
        m[1, 0] = math.tan(math.radians(p[0]))
    elif op.type == "matrix":
        a, b, c, d, e, f = p[:6]
        m = np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])
    return m


def translation(tx: float, ty: float) -> np.ndarray:
    m = np.identity(3)
    m[0, 2] = tx
    m[1, 2] = ty
    return m


def scaling(sx: float, sy: float | None = None) -> np.ndarray:
    m = np.identity(3)
    m[0, 0] = sx
    m[1, 1] = sx if sy is None else sy
    return m


def compose(ops: Iterable[TransformOp], base: np.ndarray | None = None) -> np.ndarray:
    """
    Compose an ancestor-to-self chain into one matrix.

    The outermost operation is applied last, so the result is
    base @ T1 @ T2 @ ... @ Tn.
    """
    m = np.identity(3) if base is None else base.copy()
    for op in ops:
        m = m @ op_matrix(op)
    return m


def determinant(m: np.ndarray) -> float:
    return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])


def linear_scale(m: np.ndarray) -> float:
    """Geometric mean of the axis scale factors."""
    return math.sqrt(abs(determinant(m)))


def is_identity(m: np.ndarray) -> bool:
    return bool(np.allclose(m, np.identity(3), atol=_EPSILON))


def is_similarity(m: np.ndarray) -> bool:
    """True when the linear part preserves circles (rotation, uniform scale, reflection)."""
    a, c = m[0, 0], m[0, 1]
    b, d = m[1, 0], m[1, 1]
    col1 = math.hypot(a, b)
    col2 = math.hypot(c, d)
    tol = 1e-9 * max(col1, col2, 1.0)
    return abs(col1 - col2) <= tol and abs(a * c + b * d) <= tol


def apply_point(m: np.ndarray, point: Point2D) -> Point2D:
    x = m[0, 0] * point.x + m[0, 1] * point.y + m[0, 2]
    y = m[1, 0] * point.x + m[1, 1] * point.y + m[1, 2]
    return Point2D(x=float(x), y=float(y))


def _transform_arc(m: np.ndarray, seg: ArcSegment) -> list:
    if not is_similarity(m):
        return [mapped for c in arc_to_cubics(seg) for mapped in transform_segment(m, c)]

    scale = math.hypot(m[0, 0], m[1, 0])
    phi = math.radians(seg.rotation)
    axis_x = m[0, 0] * math.cos(phi) + m[0, 1] * math.sin(phi)
    axis_y = m[1, 0] * math.cos(phi) + m[1, 1] * math.sin(phi)
    reflected = determinant(m) < 0
    return [
        ArcSegment(
            start=apply_point(m, seg.start),
            end=apply_point(m, seg.end),
            rx=seg.rx * scale,
            ry=seg.ry * scale,
            rotation=math.degrees(math.atan2(axis_y, axis_x)),
            large_arc=seg.large_arc,
            sweep=(not seg.sweep) if reflected else seg.sweep,
            closing=seg.closing,
        )
    ]


def transform_segment(m: np.ndarray, seg) -> list:
    """Map a segment through m. Arcs may expand into several cubics."""
    if isinstance(seg, LineSegment):
        return [seg.model_copy(update={"start": apply_point(m, seg.start), "end": apply_point(m, seg.end)})]
    if isinstance(seg, QuadraticSegment):
        return [seg.model_copy(update={
            "start": apply_point(m, seg.start),
            "control": apply_point(m, seg.control),
            "end": apply_point(m, seg.end),
        })]
    if isinstance(seg, CubicSegment):
        return [seg.model_copy(update={
            "start": apply_point(m, seg.start),
            "control1": apply_point(m, seg.control1),
            "control2": apply_point(m, seg.control2),
            "end": apply_point(m, seg.end),
        })]
    if isinstance(seg, ArcSegment):
        return _transform_arc(m, seg)
    raise TypeError(f"Unsupported segment type: {type(seg).__name__}")


def transform_segments(m: np.ndarray, segments: list) -> list:
    """Map every segment through m, raising on a singular matrix."""
    if abs(determinant(m)) < _SINGULAR:
        raise ValueError("Transform collapses geometry (singular matrix)")
    if is_identity(m):
        return list(segments)
    out = []
    for seg in segments:
        out.extend(transform_segment(m, seg))
    return out
