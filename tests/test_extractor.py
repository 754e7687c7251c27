"""
Tests for SVG drawing extraction.
"""
import pytest

from svg_to_cad.extractors import SVGDrawingExtractor, SVGParseError
from svg_to_cad.extractors.svg_extractor import custom_attributes, parse_length, parse_points

from conftest import make_svg, pt


@pytest.fixture
def extractor(options):
    return SVGDrawingExtractor(options)


def test_basic_shapes_in_document_order(extractor):
    drawing = extractor.extract(make_svg(
        '<rect x="0" y="0" width="10" height="10"/>'
        '<circle cx="5" cy="5" r="2"/>'
        '<path d="M0 0 L 5 5"/>'
        '<line x1="0" y1="0" x2="1" y2="1"/>'
    ))
    assert [p.kind for p in drawing.primitives] == ["rect", "circle", "path", "line"]
    assert [p.id for p in drawing.primitives] == ["rect-1", "circle-1", "path-1", "line-1"]
    assert drawing.primitive_counts == {"rect": 1, "circle": 1, "path": 1, "line": 1}
    assert drawing.warnings == []


def test_viewbox_sources():
    e = SVGDrawingExtractor()
    assert e.extract(make_svg("", 'viewBox="10 20 300 150"')).viewbox.x == 10
    sized = e.extract(make_svg("", 'width="2in" height="72pt"')).viewbox
    assert sized.width == pytest.approx(180)
    assert sized.height == pytest.approx(90)
    default = e.extract(make_svg("", "")).viewbox
    assert (default.width, default.height) == (100, 100)


def test_invalid_viewbox_warns_and_falls_back(extractor):
    drawing = extractor.extract(make_svg("", 'viewBox="0 0 0 10" width="50" height="40"'))
    assert drawing.viewbox.width == 50
    assert len(drawing.warnings) == 1


def test_names_from_attribute_label_or_id(extractor):
    drawing = extractor.extract(make_svg(
        '<rect id="a" name="Base#extrude=5" width="1" height="1"/>'
        '<rect id="b" xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape" '
        'inkscape:label="Lid" width="1" height="1"/>'
        '<rect id="c" width="1" height="1"/>'
    ))
    assert [p.name for p in drawing.primitives] == ["Base#extrude=5", "Lid", "c"]


def test_construction_sources(extractor):
    drawing = extractor.extract(make_svg(
        '<line id="tagged" name="Axis#const" x2="1"/>'
        '<line id="dashed" x2="1" stroke="black" stroke-dasharray="2,2"/>'
        '<line id="flagged" x2="1" data-construction="true"/>'
        '<line id="typed" x2="1" data-type="Construction"/>'
        '<line id="plain" x2="1"/>'
    ))
    flags = {p.id: p.is_construction for p in drawing.primitives}
    assert flags == {"tagged": True, "dashed": True, "flagged": True, "typed": True, "plain": False}


def test_dashed_construction_can_be_disabled(options):
    e = SVGDrawingExtractor(options.model_copy(update={"dashed_lines_as_construction": False}))
    drawing = e.extract(make_svg('<line x2="1" stroke-dasharray="2"/>'))
    assert not drawing.primitives[0].is_construction


def test_class_styles_apply(extractor):
    drawing = extractor.extract(make_svg(
        '<style>.guide { stroke: blue; stroke-dasharray: 4 }</style>'
        '<circle class="guide" r="3"/>'
    ))
    circle = drawing.primitives[0]
    assert circle.style.stroke == "blue"
    assert circle.is_construction
    assert "guide" in drawing.class_styles


def test_transform_chain_ancestor_to_self(extractor):
    drawing = extractor.extract(make_svg(
        '<g id="outer" transform="translate(10,0)">'
        '<g id="inner" transform="scale(2)">'
        '<rect id="r" width="1" height="1" transform="rotate(90)"/>'
        '</g></g>'
    ))
    rect = next(p for p in drawing.primitives if p.id == "r")
    assert [op.type for op in rect.transforms] == ["translate", "scale", "rotate"]
    assert rect.parent_id == "inner"


def test_groups_precede_their_children(extractor):
    drawing = extractor.extract(make_svg(
        '<g id="g1"><rect id="r1" width="1" height="1"/><g><circle id="c1" r="1"/></g></g>'
    ))
    assert [p.id for p in drawing.primitives] == ["g1", "r1", "group-2", "c1"]
    outer = drawing.primitives[0]
    assert outer.children == ["r1", "group-2"]
    assert drawing.primitives[2].children == ["c1"]


def test_generated_ids_skip_explicit_ones(extractor):
    drawing = extractor.extract(make_svg(
        '<path id="path-1" d="M0 0 L1 1"/><path d="M0 0 L2 2"/>'
        '<circle r="1"/><circle id="circle-1" r="2"/>'
    ))
    ids = [p.id for p in drawing.primitives]
    assert ids == ["path-1", "path-2", "circle-2", "circle-1"]
    assert len(set(ids)) == len(ids)


def test_non_rendering_containers_are_skipped(extractor):
    drawing = extractor.extract(make_svg(
        '<defs><circle id="hidden" r="5"/></defs>'
        '<title>Bracket</title><desc>Side plate</desc>'
        '<circle id="shown" r="5"/>'
    ))
    assert [p.id for p in drawing.primitives] == ["shown"]
    assert drawing.metadata.title == "Bracket"
    assert drawing.metadata.description == "Side plate"


def test_malformed_elements_are_skipped_with_warning(extractor):
    drawing = extractor.extract(make_svg(
        '<circle id="bad" r="-1"/>'
        '<rect id="flat" width="0" height="5"/>'
        '<polygon id="short" points="0,0 1,1"/>'
        '<path id="empty"/>'
        '<circle id="good" r="1"/>'
    ))
    assert [p.id for p in drawing.primitives] == ["good"]
    assert len(drawing.warnings) == 4
    assert extractor.get_warnings() == drawing.warnings


def test_text_and_tspans(extractor):
    drawing = extractor.extract(make_svg(
        '<text id="t" x="5" y="6" font-size="12">Label<tspan y="9">two</tspan></text>'
    ))
    text, tspan = drawing.primitives
    assert text.kind == "text" and text.content == "Labeltwo"
    assert tspan.parent_id == "t"
    assert tspan.x == 5 and tspan.y == 9
    assert tspan.font_size == "12"


def test_rect_corner_radius_falls_back_to_other_axis(extractor):
    drawing = extractor.extract(make_svg('<rect width="10" height="10" rx="2"/>'))
    assert drawing.primitives[0].ry == 2


def test_data_attributes():
    assert custom_attributes({"data-part-number": "7", "data-": "x", "id": "a"}) == {"part_number": "7"}


def test_parse_helpers():
    assert parse_length("10mm") == pytest.approx(35.43307)
    assert parse_length("12") == 12
    assert parse_length("5em") is None
    assert parse_points("0,0 10,0 10") == [pt(0, 0), pt(10, 0)]


def test_root_that_is_not_svg_warns(extractor):
    drawing = extractor.extract('<drawing><circle r="1"/></drawing>')
    assert drawing.primitives[0].kind == "circle"
    assert drawing.warnings


@pytest.mark.parametrize("content", ["", "   ", "<svg><rect></svg>", "not xml"])
def test_unparsable_markup_raises(extractor, content):
    with pytest.raises(SVGParseError):
        extractor.extract(content)


def test_bytes_input(extractor):
    drawing = extractor.extract(make_svg('<circle r="1"/>').encode("utf-8"))
    assert len(drawing.primitives) == 1
