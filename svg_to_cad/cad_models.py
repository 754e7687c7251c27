"""
Pydantic models for synthesized sketches and feature operations.

Coordinates are in the target unit system and rounded to the configured
precision. Angles on sketch entities are radians, increasing from the positive
X axis toward the positive Y axis of drawing space.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .geometry_models import Point2D


class EntityBase(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., description="Stable entity id")
    is_construction: bool = False


class LineEntity(EntityBase):
    """Straight line segment between two points."""
    type: Literal["line"] = "line"
    start: Point2D
    end: Point2D


class CircleEntity(EntityBase):
    """Full circle defined by center and radius."""
    type: Literal["circle"] = "circle"
    center: Point2D
    radius: Annotated[float, Field(gt=0)]


class ArcEntity(EntityBase):
    """
    Circular or elliptical arc.

    The arc runs from start_angle to end_angle (end_angle > start_angle),
    measured in the ellipse frame whose major axis points along x_direction.
    """
    type: Literal["arc"] = "arc"
    center: Point2D
    radius: Annotated[float, Field(gt=0)]
    minor_radius: Annotated[float, Field(gt=0)]
    x_direction: float = Field(default=0.0, description="Major axis angle in radians")
    start_angle: float
    end_angle: float

    @property
    def is_circular(self) -> bool:
        return abs(self.radius - self.minor_radius) <= 1e-9 * max(self.radius, 1.0)


class SplineEntity(EntityBase):
    """Bezier spline given by its control points."""
    type: Literal["spline"] = "spline"
    control_points: list[Point2D] = Field(..., min_length=2)
    degree: int = 3


SketchEntity = Annotated[
    Union[LineEntity, CircleEntity, ArcEntity, SplineEntity],
    Field(discriminator="type"),
]


class Sketch(BaseModel):
    """Planar sketch built from one (or several merged) normalized paths."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    plane: Literal["Top", "Front", "Right"] = "Top"
    entities: list[SketchEntity] = Field(default_factory=list)
    source_paths: list[str] = Field(default_factory=list)
    closed: bool = False

    @property
    def is_construction_only(self) -> bool:
        return bool(self.entities) and all(e.is_construction for e in self.entities)

    @property
    def entity_counts(self) -> dict[str, int]:
        """Count entities by type."""
        counts: dict[str, int] = {}
        for entity in self.entities:
            counts[entity.type] = counts.get(entity.type, 0) + 1
        return counts


class FeatureBase(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    name: str
    sketch_id: str = Field(..., description="Id of the referenced sketch")
    sketch_name: str


class ExtrudeFeature(FeatureBase):
    kind: Literal["extrude"] = "extrude"
    depth: float
    units: Literal["mm", "inch"]
    operation: Literal["NEW", "ADD", "REMOVE", "INTERSECT"] = "NEW"


class RevolveFeature(FeatureBase):
    kind: Literal["revolve"] = "revolve"
    angle: float = Field(..., description="Degrees")
    operation: Literal["NEW", "ADD", "REMOVE", "INTERSECT"] = "NEW"


class PatternFeature(FeatureBase):
    kind: Literal["pattern"] = "pattern"
    x_count: Annotated[int, Field(ge=1)]
    y_count: Annotated[int, Field(ge=1)]
    x_spacing: float
    y_spacing: float
    units: Literal["mm", "inch"]


class MirrorFeature(FeatureBase):
    kind: Literal["mirror"] = "mirror"
    plane: Literal["Top", "Front", "Right"] = "Front"


FeatureOp = Annotated[
    Union[ExtrudeFeature, RevolveFeature, PatternFeature, MirrorFeature],
    Field(discriminator="kind"),
]


class SynthesisResult(BaseModel):
    """Sketches and feature operations produced from normalized paths."""
    sketches: list[Sketch] = Field(default_factory=list)
    features: list[FeatureOp] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def get_sketch(self, name: str) -> Optional[Sketch]:
        return next((s for s in self.sketches if s.name == name), None)


class ConversionResult(BaseModel):
    """
    Complete result of converting one SVG document.

    Carries the synthesized model plus the diagnostics of every stage.
    """
    units: Literal["mm", "inch"] = "mm"
    sketches: list[Sketch] = Field(default_factory=list)
    features: list[FeatureOp] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "sketches": len(self.sketches),
            "entities": sum(len(s.entities) for s in self.sketches),
            "features": len(self.features),
        }

    def to_onshape_features(self) -> list[dict]:
        """Serialize sketches and features into Onshape feature definitions."""
        from .onshape_schema import build_feature_list

        return build_feature_list(self)
