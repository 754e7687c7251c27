"""
End-to-end tests for the conversion pipeline.
"""
import pytest

from svg_to_cad import SVGParseError, convert_svg
from svg_to_cad.cad_models import CircleEntity, LineEntity

from conftest import make_svg


def test_square_rect(options):
    result = convert_svg(make_svg('<rect x="0" y="0" width="10" height="10"/>'), options)
    (sketch,) = result.sketches
    assert sketch.closed
    assert sketch.entity_counts == {"line": 4}
    assert result.features == []
    assert result.errors == []
    assert result.summary == {"sketches": 1, "entities": 4, "features": 0}


def test_dashed_circle_flattened_to_construction_lines(options):
    result = convert_svg(make_svg('<circle cx="50" cy="50" r="5" stroke-dasharray="2 1"/>'), options)
    (sketch,) = result.sketches
    assert len(sketch.entities) >= 8
    assert all(isinstance(e, LineEntity) and e.is_construction for e in sketch.entities)


def test_dashed_circle_kept_exact(exact_options):
    result = convert_svg(make_svg('<circle cx="50" cy="50" r="5" stroke-dasharray="2 1"/>'), exact_options)
    (entity,) = result.sketches[0].entities
    assert isinstance(entity, CircleEntity)
    assert entity.is_construction
    assert entity.radius == 5


def test_extrude_directive(options):
    result = convert_svg(
        make_svg('<rect name="Wall#extrude=25" width="40" height="10"/>'), options
    )
    (feature,) = result.features
    assert feature.kind == "extrude"
    assert feature.depth == 25
    assert feature.units == "mm"
    assert result.sketches[0].name == "Wall"
    definitions = result.to_onshape_features()
    assert definitions[-1]["featureType"] == "extrude"


def test_invalid_markup_raises(options):
    with pytest.raises(SVGParseError):
        convert_svg("<svg><rect></svg>", options)


def test_bad_primitive_does_not_abort(options):
    result = convert_svg(
        make_svg('<path id="stub" d="M 1 1"/><circle id="neg" r="-2"/><rect width="5" height="5"/>'),
        options,
    )
    assert len(result.sketches) == 1
    assert len(result.errors) == 1
    assert "stub" in result.errors[0]
    assert any("neg" in w for w in result.warnings)


def test_metadata(options):
    result = convert_svg(
        make_svg('<title>Bracket</title><rect width="5" height="5"/><text>note</text>'),
        options,
    )
    assert result.metadata["title"] == "Bracket"
    assert result.metadata["primitive_counts"] == {"rect": 1, "text": 1}
    assert result.metadata["path_count"] == 1
    assert result.metadata["viewbox"]["width"] == 100


def test_inch_output(options):
    inch = options.model_copy(update={"target_units": "inch"})
    result = convert_svg(make_svg('<line x1="0" y1="0" x2="25.4" y2="0"/>'), inch)
    assert result.units == "inch"
    (line,) = result.sketches[0].entities
    assert line.end.x == 1.0


def test_empty_drawing(options):
    result = convert_svg(make_svg(""), options)
    assert result.sketches == []
    assert result.errors == []


def test_repeated_calls_are_independent(options):
    svg = make_svg('<rect width="5" height="5"/>')
    first = convert_svg(svg, options)
    second = convert_svg(svg, options)
    assert first == second


@pytest.mark.parametrize(
    "grouping, names",
    [
        ("path", ["r1", "r2", "free"]),
        ("group", ["Panel", "free"]),
        ("single", ["AllPaths"]),
    ],
)
def test_sketch_grouping(options, grouping, names):
    body = (
        '<g id="g1" name="Panel"><rect id="r1" width="1" height="1"/><rect id="r2" x="2" width="1" height="1"/></g>'
        '<rect id="free" x="5" width="1" height="1"/>'
    )
    result = convert_svg(make_svg(body), options.model_copy(update={"sketch_grouping": grouping}))
    assert [s.name for s in result.sketches] == names
    assert sum(len(s.source_paths) for s in result.sketches) == 3
