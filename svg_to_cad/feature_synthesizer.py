"""
Sketch and feature synthesis from normalized paths.

Normalized paths are collected into sketches (per path, per parent group,
or all in one) whose entities mirror the paths' segments. 3D feature
operations are emitted only when a directive asks for them.
"""

import logging
import math
from typing import Callable, Optional

from .cad_models import (
    ArcEntity,
    CircleEntity,
    ExtrudeFeature,
    LineEntity,
    MirrorFeature,
    PatternFeature,
    RevolveFeature,
    Sketch,
    SplineEntity,
    SynthesisResult,
)
from .config import BEZIER_CIRCLE_KAPPA, MM_PER_INCH, SINGLE_SKETCH_NAME, ConversionOptions
from .curves import arc_center_parameters, quadratic_to_cubic
from .geometry_models import (
    ArcSegment,
    CubicSegment,
    NormalizedPath,
    Point2D,
    QuadraticSegment,
)

logger = logging.getLogger(__name__)

# Relative tolerance when recognizing four cubic quadrants as a circle
CIRCLE_MATCH_TOLERANCE = 1e-3


def detect_circle(path: NormalizedPath) -> Optional[tuple[Point2D, float]]:
    """
    Recognize a closed path of four cubic quadrants built with the circle ratio.

    Returns:
        (center, radius) when the path is a circle, otherwise None
    """
    segments = path.segments
    if not path.closed or len(segments) != 4 or not all(isinstance(s, CubicSegment) for s in segments):
        return None

    starts = [s.start for s in segments]
    cx = sum(p.x for p in starts) / 4
    cy = sum(p.y for p in starts) / 4
    center = Point2D(x=cx, y=cy)
    radius = sum(center.distance_to(p) for p in starts) / 4
    if radius <= 0:
        return None

    tolerance = CIRCLE_MATCH_TOLERANCE * radius
    handle = BEZIER_CIRCLE_KAPPA * radius
    for seg in segments:
        if abs(center.distance_to(seg.start) - radius) > tolerance:
            return None
        if abs(center.distance_to(seg.end) - radius) > tolerance:
            return None
        if abs(seg.start.distance_to(seg.control1) - handle) > tolerance:
            return None
        if abs(seg.end.distance_to(seg.control2) - handle) > tolerance:
            return None
    return center, radius


def convert_depth(depth: float, from_units: str, to_units: str) -> float:
    """Convert an extrude depth between 'mm'/'in' and the target unit."""
    source = "inch" if from_units == "in" else from_units
    if source == to_units:
        return depth
    if source == "inch":
        return depth * MM_PER_INCH
    return depth / MM_PER_INCH


class FeatureSynthesizer:
    """
    Build sketches and feature operations from normalized paths.

    Coordinates are rounded to `decimal_precision`. The synthesizer never
    fails for a single path: problems are recorded in `errors`.
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def _round(self, value: float) -> float:
        rounded = round(value, self.options.decimal_precision)
        return 0.0 if rounded == 0 else rounded

    def _point(self, point: Point2D) -> Point2D:
        return Point2D(x=self._round(point.x), y=self._round(point.y))

    def _line(self, seg, entity_id: str, construction: bool) -> LineEntity:
        return LineEntity(
            id=entity_id,
            is_construction=construction,
            start=self._point(seg.start),
            end=self._point(seg.end),
        )

    def _cubic(self, seg: CubicSegment, entity_id: str, construction: bool) -> SplineEntity:
        return SplineEntity(
            id=entity_id,
            is_construction=construction,
            control_points=[self._point(p) for p in (seg.start, seg.control1, seg.control2, seg.end)],
        )

    def _quadratic(self, seg: QuadraticSegment, entity_id: str, construction: bool) -> SplineEntity:
        return self._cubic(quadratic_to_cubic(seg), entity_id, construction)

    def _arc(self, seg: ArcSegment, entity_id: str, construction: bool) -> ArcEntity:
        geom = arc_center_parameters(seg)
        start, end = geom.start_angle, geom.end_angle
        if end < start:
            start, end = end, start
        major, minor, direction = geom.rx, geom.ry, geom.phi
        if geom.ry > geom.rx:
            # Keep the major axis along x_direction
            major, minor, direction = geom.ry, geom.rx, geom.phi + math.pi / 2
            start -= math.pi / 2
            end -= math.pi / 2
        offset = math.floor(start / (2 * math.pi)) * 2 * math.pi
        return ArcEntity(
            id=entity_id,
            is_construction=construction,
            center=self._point(Point2D(x=geom.cx, y=geom.cy)),
            radius=self._round(major),
            minor_radius=self._round(minor),
            x_direction=self._round(math.fmod(direction, 2 * math.pi)),
            start_angle=self._round(start - offset),
            end_angle=self._round(end - offset),
        )

    def entities_for_path(self, path: NormalizedPath, start_index: int = 0) -> list:
        """Map one path's segments to sketch entities."""
        construction = path.is_construction
        circle = detect_circle(path)
        if circle is not None:
            center, radius = circle
            return [
                CircleEntity(
                    id=f"{path.id}.{start_index}",
                    is_construction=construction,
                    center=self._point(center),
                    radius=self._round(radius),
                )
            ]

        handlers: dict[str, Callable] = {
            "line": self._line,
            "cubic": self._cubic,
            "quadratic": self._quadratic,
            "arc": self._arc,
        }
        entities = []
        for offset, seg in enumerate(path.segments):
            entity_id = f"{path.id}.{start_index + offset}"
            entities.append(handlers[seg.type](seg, entity_id, construction))
        return entities

    def _group_paths(self, paths: list[NormalizedPath]) -> list[tuple[Optional[str], list[NormalizedPath]]]:
        """
        Collect paths into sketch groups as (base name, paths) pairs.

        Paths sharing a sketch directive are always merged. Other paths follow
        `sketch_grouping`: one sketch per path, one per parent <g> (paths
        outside any group stay alone), or one sketch for the whole drawing.
        """
        groups: list[tuple[Optional[str], list[NormalizedPath]]] = []
        keyed: dict[tuple[str, str], list[NormalizedPath]] = {}
        grouping = self.options.sketch_grouping

        for path in paths:
            if path.directives.sketch is not None:
                key, name = ("sketch", path.directives.sketch), path.directives.sketch
            elif grouping == "single":
                key, name = ("single", ""), SINGLE_SKETCH_NAME
            elif grouping == "group" and path.parent_id is not None:
                key, name = ("group", path.parent_id), path.group_name
            else:
                groups.append((path.name, [path]))
                continue

            if key in keyed:
                keyed[key].append(path)
            else:
                keyed[key] = [path]
                groups.append((name, keyed[key]))
        return groups

    def _unique_name(self, name: str, used: set[str]) -> str:
        candidate, suffix = name, 2
        while candidate in used:
            candidate = f"{name}_{suffix}"
            suffix += 1
        used.add(candidate)
        return candidate

    def build_sketch(
        self,
        group: list[NormalizedPath],
        index: int,
        used_names: set[str],
        base_name: Optional[str] = None,
    ) -> Sketch:
        first = group[0]
        base_name = base_name or first.directives.sketch or first.name
        name = self._unique_name(base_name or f"Sketch{index}", used_names)
        plane = next((p.directives.plane for p in group if p.directives.plane), None)

        entities: list = []
        for path in group:
            entities.extend(self.entities_for_path(path, len(entities)))

        return Sketch(
            id=f"sketch-{index}",
            name=name,
            plane=plane or self.options.sketch_plane,
            entities=entities,
            source_paths=[p.id for p in group],
            closed=all(p.closed for p in group),
        )

    def build_features(self, sketch: Sketch, group: list[NormalizedPath]) -> list:
        """Feature operations requested by the directives of a sketch's paths."""
        directives = [p.directives for p in group if p.directives.has_3d_operations]
        if not directives:
            return []
        if sketch.is_construction_only:
            self._warn(f"Sketch '{sketch.name}' has only construction geometry, skipping 3D operations")
            return []
        if not sketch.closed:
            self._warn(f"Sketch '{sketch.name}' is open; 3D operations may fail")

        common = {"sketch_id": sketch.id, "sketch_name": sketch.name}
        units = self.options.target_units
        features: list = []

        extrude = next((d.extrude for d in directives if d.extrude), None)
        if extrude is not None:
            features.append(ExtrudeFeature(
                id=f"{sketch.id}-extrude",
                name=f"Extrude {sketch.name}",
                depth=self._round(convert_depth(extrude.depth, extrude.units, units)),
                units=units,
                **common,
            ))

        revolve = next((d.revolve for d in directives if d.revolve), None)
        if revolve is not None:
            features.append(RevolveFeature(
                id=f"{sketch.id}-revolve",
                name=f"Revolve {sketch.name}",
                angle=revolve.angle,
                **common,
            ))

        pattern = next((d.pattern for d in directives if d.pattern), None)
        if pattern is not None:
            features.append(PatternFeature(
                id=f"{sketch.id}-pattern",
                name=f"Pattern {sketch.name}",
                x_count=pattern.x,
                y_count=pattern.y,
                x_spacing=self.options.pattern_spacing,
                y_spacing=self.options.pattern_spacing,
                units=units,
                **common,
            ))

        if any(d.mirror for d in directives):
            features.append(MirrorFeature(
                id=f"{sketch.id}-mirror",
                name=f"Mirror {sketch.name}",
                plane=self.options.mirror_plane,
                **common,
            ))
        return features

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def synthesize(self, paths: list[NormalizedPath]) -> SynthesisResult:
        """
        Generate sketches and feature operations.

        Args:
            paths: Normalized paths in document order

        Returns:
            SynthesisResult with sketches, features and warnings
        """
        self.errors = []  # Reset errors
        self.warnings = []
        sketches: list[Sketch] = []
        features: list = []
        used_names: set[str] = set()

        for base_name, group in self._group_paths(paths):
            try:
                sketch = self.build_sketch(group, len(sketches) + 1, used_names, base_name)
            except Exception as e:
                self.errors.append(f"Failed to build sketch for {[p.id for p in group]}: {e}")
                logger.warning(self.errors[-1])
                continue
            sketches.append(sketch)
            if self.options.create_3d:
                features.extend(self.build_features(sketch, group))

        logger.info("Synthesized %d sketches and %d features", len(sketches), len(features))
        return SynthesisResult(sketches=sketches, features=features, warnings=list(self.warnings))

    def get_errors(self) -> list[str]:
        """Get list of errors encountered during synthesis."""
        return self.errors.copy()
