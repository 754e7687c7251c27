"""
Configuration and constants for the SVG-to-CAD converter.

Contains:
- Environment-driven conversion defaults
- Geometry constants (circle kappa, arc radius epsilon, unit factors)
- Onshape standard plane identifiers
- DXF preview layer definitions
- ConversionOptions model used by every pipeline stage
"""

import os
from typing import Annotated, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Conversion defaults
TARGET_UNITS = os.environ.get("SVG2CAD_TARGET_UNITS", "mm")
CURVE_RESOLUTION = float(os.environ.get("SVG2CAD_CURVE_RESOLUTION", "0.5"))
CLOSE_PATH_TOLERANCE = float(os.environ.get("SVG2CAD_CLOSE_TOLERANCE", "0.1"))
DECIMAL_PRECISION = int(os.environ.get("SVG2CAD_DECIMAL_PRECISION", "4"))
APPROXIMATE_CURVES = _env_bool("SVG2CAD_APPROXIMATE_CURVES", True)
AUTO_CLOSE_PATHS = _env_bool("SVG2CAD_AUTO_CLOSE_PATHS", True)
DASHED_AS_CONSTRUCTION = _env_bool("SVG2CAD_DASHED_AS_CONSTRUCTION", True)
FLATTEN_TRANSFORMS = _env_bool("SVG2CAD_FLATTEN_TRANSFORMS", True)
DEFAULT_SKETCH_PLANE = os.environ.get("SVG2CAD_SKETCH_PLANE", "Top")
SKETCH_GROUPING = os.environ.get("SVG2CAD_SKETCH_GROUPING", "path")

# Style defaults
DEFAULT_STROKE_COLOR = "#000000"
DEFAULT_FILL_COLOR = "none"
DEFAULT_STROKE_WIDTH = 1.0

# Drawing defaults (user units)
DEFAULT_VIEWBOX = (0.0, 0.0, 100.0, 100.0)

# Cubic approximation of a quarter circle
BEZIER_CIRCLE_KAPPA = 0.5522847498
# Arc radii are clamped to this before endpoint-to-center conversion
MIN_ARC_RADIUS = 0.001

# Length suffixes on the root width/height, converted to px
SVG_LENGTH_FACTORS = {
    "px": 1.0,
    "pt": 1.25,
    "pc": 15.0,
    "mm": 3.543307,
    "cm": 35.43307,
    "in": 90.0,
}

# Source user units are taken as millimetres
UNIT_FACTORS = {
    "mm": 1.0,
    "inch": 1.0 / 25.4,
}
MM_PER_INCH = 25.4

# Onshape geometry is expressed in meters
METERS_PER_UNIT = {
    "mm": 0.001,
    "inch": 0.0254,
}

# Deterministic ids of the default Onshape planes
PLANE_IDS = {
    "Top": "JDC",
    "Front": "JCC",
    "Right": "JEC",
}

# Name of the sketch when every path is merged into one
SINGLE_SKETCH_NAME = "AllPaths"

# Pattern / mirror defaults
DEFAULT_PATTERN_SPACING = 20.0
DEFAULT_MIRROR_PLANE = "Front"

# DXF Layer configuration with AutoCAD Color Index (ACI)
LAYER_COLORS = {
    "GEOMETRY": 7,       # White (on dark) / Black (on light)
    "CONSTRUCTION": 2,   # Yellow
}
DASHED_LAYERS = {"CONSTRUCTION"}

# File handling
SUPPORTED_FILE_TYPES = ["svg"]
MAX_FILE_SIZE_MB = 10

PlaneName = Literal["Top", "Front", "Right"]
# One sketch per path, per parent <g>, or one sketch for the drawing
SketchGrouping = Literal["path", "group", "single"]


class ConversionOptions(BaseModel):
    """Options shared by the extractor, normalizer and synthesizer."""

    model_config = ConfigDict(frozen=True)

    target_units: Literal["mm", "inch"] = Field(
        default=TARGET_UNITS, description="Unit system of the normalized geometry"
    )
    curve_resolution: Annotated[float, Field(gt=0)] = Field(
        default=CURVE_RESOLUTION, description="Target chord length when flattening curves"
    )
    approximate_curves: bool = Field(
        default=APPROXIMATE_CURVES, description="Flatten curves to line segments"
    )
    close_path_tolerance: Annotated[float, Field(ge=0)] = Field(
        default=CLOSE_PATH_TOLERANCE, description="Endpoint gap treated as closed"
    )
    auto_close_paths: bool = Field(
        default=AUTO_CLOSE_PATHS, description="Bridge small closure gaps with a closing line"
    )
    dashed_lines_as_construction: bool = Field(
        default=DASHED_AS_CONSTRUCTION, description="Dashed strokes mark construction geometry"
    )
    decimal_precision: Annotated[int, Field(ge=0, le=12)] = Field(
        default=DECIMAL_PRECISION, description="Digits kept in synthesized coordinates"
    )
    parse_style_elements: bool = True
    parse_name_tags: bool = True
    flatten_transforms: bool = FLATTEN_TRANSFORMS
    normalize_origin: bool = True
    scale: Annotated[float, Field(gt=0)] = 1.0
    sketch_plane: PlaneName = Field(default=DEFAULT_SKETCH_PLANE)
    sketch_grouping: SketchGrouping = Field(
        default=SKETCH_GROUPING, description="How paths are collected into sketches"
    )
    mirror_plane: PlaneName = Field(default=DEFAULT_MIRROR_PLANE)
    pattern_spacing: Annotated[float, Field(gt=0)] = DEFAULT_PATTERN_SPACING
    create_3d: bool = Field(default=True, description="Emit feature operations for directives")
    default_stroke_color: str = DEFAULT_STROKE_COLOR
    default_fill_color: str = DEFAULT_FILL_COLOR
    default_stroke_width: Annotated[float, Field(ge=0)] = DEFAULT_STROKE_WIDTH

    @property
    def unit_factor(self) -> float:
        """Factor from source user units to the target unit."""
        return UNIT_FACTORS[self.target_units]

    @classmethod
    def from_env(cls, **overrides) -> "ConversionOptions":
        """Build options from the current environment, then apply overrides."""
        values = {
            "target_units": os.environ.get("SVG2CAD_TARGET_UNITS", "mm"),
            "curve_resolution": float(os.environ.get("SVG2CAD_CURVE_RESOLUTION", "0.5")),
            "close_path_tolerance": float(os.environ.get("SVG2CAD_CLOSE_TOLERANCE", "0.1")),
            "decimal_precision": int(os.environ.get("SVG2CAD_DECIMAL_PRECISION", "4")),
            "approximate_curves": _env_bool("SVG2CAD_APPROXIMATE_CURVES", True),
            "auto_close_paths": _env_bool("SVG2CAD_AUTO_CLOSE_PATHS", True),
            "dashed_lines_as_construction": _env_bool("SVG2CAD_DASHED_AS_CONSTRUCTION", True),
            "flatten_transforms": _env_bool("SVG2CAD_FLATTEN_TRANSFORMS", True),
            "sketch_plane": os.environ.get("SVG2CAD_SKETCH_PLANE", "Top"),
            "sketch_grouping": os.environ.get("SVG2CAD_SKETCH_GROUPING", "path"),
        }
        values.update(overrides)
        return cls(**values)
