"""
Pydantic models for drawing primitives and normalized geometry.

These models define:
1. The flat primitive collection produced by the drawing extractor
2. The uniform segment representation produced by the normalizer
3. The directive record parsed from element names

Coordinate system: SVG user space (y increasing downward) until
normalization, then the target unit system (mm or inch).
"""

import math
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PrimitiveKind(str, Enum):
    """Element kinds recognized by the drawing extractor."""
    PATH = "path"
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    LINE = "line"
    POLYLINE = "polyline"
    POLYGON = "polygon"
    RECT = "rect"
    TEXT = "text"
    GROUP = "group"


class Point2D(BaseModel):
    """2D coordinate point."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class ViewBox(BaseModel):
    """Drawing coordinate frame."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float = 0.0
    y: float = 0.0
    width: Annotated[float, Field(gt=0)] = 100.0
    height: Annotated[float, Field(gt=0)] = 100.0


class TransformOp(BaseModel):
    """One transform operation with its raw operands."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    type: Literal["translate", "scale", "rotate", "skewX", "skewY", "matrix"]
    params: list[float] = Field(default_factory=list)


class StyleRecord(BaseModel):
    """Resolved presentation style of an element."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    stroke: str = "none"
    fill: str = "none"
    stroke_width: Annotated[float, Field(ge=0)] = 1.0
    stroke_opacity: Annotated[float, Field(ge=0)] = 1.0
    fill_opacity: Annotated[float, Field(ge=0)] = 1.0
    stroke_dasharray: Optional[str] = Field(
        default=None, description="Dash pattern, None when solid"
    )
    properties: dict[str, str] = Field(
        default_factory=dict, description="Merged raw style properties"
    )

    @property
    def has_stroke(self) -> bool:
        return self.stroke.strip().lower() not in ("", "none", "transparent")

    @property
    def has_fill(self) -> bool:
        return self.fill.strip().lower() not in ("", "none", "transparent")

    @property
    def is_dashed(self) -> bool:
        return self.stroke_dasharray is not None


class PrimitiveBase(BaseModel):
    """Fields shared by every extracted primitive."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., min_length=1, description="Element id or synthesized {kind}-{n}")
    name: str = Field(..., description="Element name, may carry #directives")
    style: StyleRecord = Field(default_factory=StyleRecord)
    transforms: list[TransformOp] = Field(
        default_factory=list, description="Ancestor-to-self transform chain"
    )
    is_construction: bool = False
    data: dict[str, str] = Field(
        default_factory=dict, description="Custom data-* attributes"
    )
    parent_id: Optional[str] = None


class PathPrimitive(PrimitiveBase):
    kind: Literal["path"] = "path"
    d: str = Field(..., min_length=1, description="Path data")


class CirclePrimitive(PrimitiveBase):
    kind: Literal["circle"] = "circle"
    cx: float = 0.0
    cy: float = 0.0
    r: Annotated[float, Field(gt=0)]


class EllipsePrimitive(PrimitiveBase):
    kind: Literal["ellipse"] = "ellipse"
    cx: float = 0.0
    cy: float = 0.0
    rx: Annotated[float, Field(gt=0)]
    ry: Annotated[float, Field(gt=0)]


class LinePrimitive(PrimitiveBase):
    kind: Literal["line"] = "line"
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0


class PolylinePrimitive(PrimitiveBase):
    kind: Literal["polyline"] = "polyline"
    points: list[Point2D] = Field(..., min_length=2)


class PolygonPrimitive(PrimitiveBase):
    kind: Literal["polygon"] = "polygon"
    points: list[Point2D] = Field(..., min_length=3)


class RectPrimitive(PrimitiveBase):
    kind: Literal["rect"] = "rect"
    x: float = 0.0
    y: float = 0.0
    width: Annotated[float, Field(gt=0)]
    height: Annotated[float, Field(gt=0)]
    rx: Annotated[float, Field(ge=0)] = 0.0
    ry: Annotated[float, Field(ge=0)] = 0.0


class TextPrimitive(PrimitiveBase):
    """Text annotation. Extracted, never converted to geometry."""
    kind: Literal["text"] = "text"
    x: float = 0.0
    y: float = 0.0
    content: str = ""
    font_size: Optional[str] = None
    font_family: Optional[str] = None
    text_anchor: Optional[str] = None


class GroupPrimitive(PrimitiveBase):
    kind: Literal["group"] = "group"
    children: list[str] = Field(default_factory=list, description="Direct child ids")


Primitive = Annotated[
    Union[
        PathPrimitive,
        CirclePrimitive,
        EllipsePrimitive,
        LinePrimitive,
        PolylinePrimitive,
        PolygonPrimitive,
        RectPrimitive,
        TextPrimitive,
        GroupPrimitive,
    ],
    Field(discriminator="kind"),
]


class DrawingMetadata(BaseModel):
    """Document-level metadata."""
    title: Optional[str] = None
    description: Optional[str] = None


class DrawingExtraction(BaseModel):
    """
    Complete result of extracting an SVG document.

    This is the root model handed to the normalizer.
    """
    viewbox: ViewBox = Field(default_factory=ViewBox)
    primitives: list[Primitive] = Field(default_factory=list)
    class_styles: dict[str, dict[str, str]] = Field(
        default_factory=dict, description="Declarations per class selector"
    )
    metadata: DrawingMetadata = Field(default_factory=DrawingMetadata)
    warnings: list[str] = Field(default_factory=list)

    def get_primitives_by_kind(self, kind: str) -> list:
        """Filter primitives by kind."""
        return [p for p in self.primitives if p.kind == kind]

    @property
    def primitive_counts(self) -> dict[str, int]:
        """Count primitives by kind."""
        counts: dict[str, int] = {}
        for primitive in self.primitives:
            counts[primitive.kind] = counts.get(primitive.kind, 0) + 1
        return counts


# Segments


class SegmentBase(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    start: Point2D
    end: Point2D
    closing: bool = Field(default=False, description="Segment closes its subpath")


class LineSegment(SegmentBase):
    type: Literal["line"] = "line"

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)


class QuadraticSegment(SegmentBase):
    type: Literal["quadratic"] = "quadratic"
    control: Point2D


class CubicSegment(SegmentBase):
    type: Literal["cubic"] = "cubic"
    control1: Point2D
    control2: Point2D


class ArcSegment(SegmentBase):
    """Elliptical arc in SVG endpoint parameterization."""
    type: Literal["arc"] = "arc"
    rx: float
    ry: float
    rotation: float = Field(default=0.0, description="X-axis rotation in degrees")
    large_arc: bool = False
    sweep: bool = False


Segment = Annotated[
    Union[LineSegment, QuadraticSegment, CubicSegment, ArcSegment],
    Field(discriminator="type"),
]


# Directives


class ExtrudeDirective(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    depth: Annotated[float, Field(gt=0)]
    units: Literal["mm", "in"]


class RevolveDirective(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    angle: float = Field(..., description="Revolve angle in degrees")


class PatternDirective(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: Annotated[int, Field(ge=1)]
    y: Annotated[int, Field(ge=1)]


class DirectiveRecord(BaseModel):
    """Flags and parameters parsed from '#'-separated name tokens."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    construction: bool = False
    closed: bool = False
    extrude: Optional[ExtrudeDirective] = None
    revolve: Optional[RevolveDirective] = None
    pattern: Optional[PatternDirective] = None
    mirror: bool = False
    dimension: Optional[float] = None
    plane: Optional[Literal["Top", "Front", "Right"]] = None
    sketch: Optional[str] = Field(default=None, description="Key of a merged sketch")

    @property
    def has_3d_operations(self) -> bool:
        return bool(self.extrude or self.revolve or self.pattern or self.mirror)


class NormalizedPath(BaseModel):
    """Uniform segment sequence for one drawable primitive."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    name: str = Field(..., description="Display name with directives stripped")
    original_name: str
    kind: PrimitiveKind
    segments: list[Segment] = Field(..., min_length=1)
    closed: bool = False
    is_construction: bool = False
    style: StyleRecord = Field(default_factory=StyleRecord)
    directives: DirectiveRecord = Field(default_factory=DirectiveRecord)
    data: dict[str, str] = Field(default_factory=dict)
    parent_id: Optional[str] = Field(default=None, description="Id of the enclosing <g>")
    group_name: Optional[str] = Field(default=None, description="Display name of the enclosing <g>")

    @property
    def start_point(self) -> Point2D:
        return self.segments[0].start

    @property
    def end_point(self) -> Point2D:
        return self.segments[-1].end
