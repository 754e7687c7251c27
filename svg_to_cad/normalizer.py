"""
Geometry normalization.

Converts every drawable primitive of a DrawingExtraction into a
NormalizedPath: a uniform segment list in the target unit system with its
closure state, construction flag and parsed directives.
"""

import logging
from typing import Callable, Optional

import numpy as np

from .config import ConversionOptions
from .curves import flatten_segments
from .directives import parse_directives, split_name
from .geometry_models import (
    DirectiveRecord,
    DrawingExtraction,
    LineSegment,
    NormalizedPath,
    PrimitiveKind,
    ViewBox,
)
from .path_parser import parse_path
from .shapes import (
    circle_segments,
    ellipse_segments,
    line_segments,
    polygon_segments,
    polyline_segments,
    rect_segments,
)
from .transforms import compose, linear_scale, scaling, transform_segments, translation

logger = logging.getLogger(__name__)

# Primitive kinds that carry no geometry
SKIPPED_KINDS = {PrimitiveKind.TEXT.value, PrimitiveKind.GROUP.value}


class GeometryNormalizer:
    """
    Normalize extracted primitives into segment paths.

    Each primitive is handled independently: a failure is logged, recorded
    in `errors` and the primitive is dropped.
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()
        self.errors: list[str] = []
        self._group_names: dict[str, str] = {}

    def base_matrix(self, viewbox: ViewBox) -> np.ndarray:
        """Origin shift, global scale and unit conversion as one matrix."""
        m = scaling(self.options.unit_factor * self.options.scale)
        if self.options.normalize_origin:
            m = m @ translation(-viewbox.x, -viewbox.y)
        return m

    def _path_segments(self, primitive, resolution: float) -> list:
        return parse_path(primitive.d)

    def _circle_segments(self, primitive, resolution: float) -> list:
        return circle_segments(
            primitive.cx, primitive.cy, primitive.r, self.options.approximate_curves, resolution
        )

    def _ellipse_segments(self, primitive, resolution: float) -> list:
        return ellipse_segments(
            primitive.cx,
            primitive.cy,
            primitive.rx,
            primitive.ry,
            self.options.approximate_curves,
            resolution,
        )

    def _line_segments(self, primitive, resolution: float) -> list:
        return line_segments(primitive.x1, primitive.y1, primitive.x2, primitive.y2)

    def _polyline_segments(self, primitive, resolution: float) -> list:
        return polyline_segments(primitive.points)

    def _polygon_segments(self, primitive, resolution: float) -> list:
        return polygon_segments(primitive.points)

    def _rect_segments(self, primitive, resolution: float) -> list:
        return rect_segments(
            primitive.x,
            primitive.y,
            primitive.width,
            primitive.height,
            primitive.rx,
            primitive.ry,
            self.options.approximate_curves,
            resolution,
        )

    def close_path(
        self, segments: list, directives: DirectiveRecord, closable: bool = True
    ) -> tuple[bool, list]:
        """
        Decide closure and apply auto-close.

        A path is closed when a segment is marked closing or its endpoints
        lie within the tolerance. A tolerance-closed path with a gap gets a
        closing line when auto-close is on; the closed directive always
        forces one. Shapes that are not closable (lines, two-point
        polylines) are only closed by the directive.
        """
        if any(seg.closing for seg in segments):
            return True, segments

        first, last = segments[0].start, segments[-1].end
        gap = first.distance_to(last)
        bridge = LineSegment(start=last, end=first, closing=True)

        if not closable:
            if directives.closed and gap > 0:
                return True, segments + [bridge]
            return False, segments

        if gap <= self.options.close_path_tolerance:
            if self.options.auto_close_paths and gap > 0:
                return True, segments + [bridge]
            return True, segments

        if directives.closed:
            return True, segments + [bridge]
        return False, segments

    def is_closable(self, primitive) -> bool:
        """Lines and polylines with fewer than three points never close on their own."""
        if primitive.kind == PrimitiveKind.LINE.value:
            return False
        if primitive.kind == PrimitiveKind.POLYLINE.value:
            return len(primitive.points) > 2
        return True

    def normalize_primitive(self, primitive, base: np.ndarray) -> NormalizedPath:
        """Normalize one drawable primitive; raises on failure."""
        handlers: dict[str, Callable] = {
            "path": self._path_segments,
            "circle": self._circle_segments,
            "ellipse": self._ellipse_segments,
            "line": self._line_segments,
            "polyline": self._polyline_segments,
            "polygon": self._polygon_segments,
            "rect": self._rect_segments,
        }
        handler = handlers.get(primitive.kind)
        if handler is None:
            raise ValueError(f"Unsupported primitive kind: {primitive.kind}")

        if self.options.parse_name_tags:
            display, directives = parse_directives(primitive.name, self.options.target_units)
        else:
            display, directives = primitive.name.strip(), DirectiveRecord()

        matrix = compose(primitive.transforms, base) if self.options.flatten_transforms else base
        scale = linear_scale(matrix)
        if scale == 0:
            raise ValueError("Transform collapses geometry (singular matrix)")

        # Sample shapes in local space so spacing is measured in target units
        segments = handler(primitive, self.options.curve_resolution / scale)
        segments = transform_segments(matrix, segments)
        if self.options.approximate_curves:
            segments = flatten_segments(segments, self.options.curve_resolution)
        if not segments:
            raise ValueError("No drawable segments")

        closed, segments = self.close_path(segments, directives, self.is_closable(primitive))

        return NormalizedPath(
            id=primitive.id,
            name=display or primitive.id,
            original_name=primitive.name,
            kind=primitive.kind,
            segments=segments,
            closed=closed,
            is_construction=primitive.is_construction or directives.construction,
            style=primitive.style,
            directives=directives,
            data=primitive.data,
            parent_id=primitive.parent_id,
            group_name=self._group_names.get(primitive.parent_id),
        )

    def normalize(self, drawing: DrawingExtraction) -> list[NormalizedPath]:
        """
        Normalize every drawable primitive of a drawing.

        Args:
            drawing: Extraction result from a DrawingExtractor

        Returns:
            Normalized paths in document order
        """
        self.errors = []  # Reset errors
        self._group_names = {
            group.id: split_name(group.name)[0] or group.id
            for group in drawing.get_primitives_by_kind(PrimitiveKind.GROUP.value)
        }
        base = self.base_matrix(drawing.viewbox)
        paths: list[NormalizedPath] = []

        for primitive in drawing.primitives:
            if primitive.kind in SKIPPED_KINDS:
                logger.debug("Skipping %s %s", primitive.kind, primitive.id)
                continue
            try:
                paths.append(self.normalize_primitive(primitive, base))
            except Exception as e:
                message = f"Failed to normalize {primitive.kind} '{primitive.id}': {e}"
                logger.warning(message)
                self.errors.append(message)

        logger.info("Normalized %d of %d primitives", len(paths), len(drawing.primitives))
        return paths

    def get_errors(self) -> list[str]:
        """Get list of errors encountered during normalization."""
        return self.errors.copy()
