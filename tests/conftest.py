"""
pytest configuration and fixtures for svg_to_cad tests
"""
import pytest

from svg_to_cad.config import ConversionOptions
from svg_to_cad.geometry_models import DirectiveRecord, LineSegment, NormalizedPath, Point2D

SVG_NS = "http://www.w3.org/2000/svg"


def make_svg(body: str, attrs: str = 'viewBox="0 0 100 100"') -> str:
    """Wrap elements in an svg root."""
    return f'<svg xmlns="{SVG_NS}" {attrs}>{body}</svg>'


def pt(x: float, y: float) -> Point2D:
    return Point2D(x=x, y=y)


def polyline(*coords, closing_last: bool = False) -> list[LineSegment]:
    """Line segments through the given (x, y) pairs."""
    points = [pt(x, y) for x, y in coords]
    lines = [LineSegment(start=a, end=b) for a, b in zip(points, points[1:])]
    if closing_last:
        lines[-1] = lines[-1].model_copy(update={"closing": True})
    return lines


def make_path(segments, name="Path", path_id="path-1", closed=True, construction=False,
              directives=None, kind="path") -> NormalizedPath:
    return NormalizedPath(
        id=path_id,
        name=name,
        original_name=name,
        kind=kind,
        segments=segments,
        closed=closed,
        is_construction=construction,
        directives=directives or DirectiveRecord(),
    )


@pytest.fixture
def options():
    """Explicit defaults, independent of the environment."""
    return ConversionOptions(
        target_units="mm",
        curve_resolution=0.5,
        approximate_curves=True,
        close_path_tolerance=0.1,
        auto_close_paths=True,
        dashed_lines_as_construction=True,
        decimal_precision=4,
        flatten_transforms=True,
        sketch_plane="Top",
        sketch_grouping="path",
    )


@pytest.fixture
def exact_options(options):
    """Options that keep curves as curves."""
    return options.model_copy(update={"approximate_curves": False})
