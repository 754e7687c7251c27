"""
Tests for style resolution.
"""
from svg_to_cad.extractors.styles import (
    build_style_record,
    fold_styles,
    parse_class_rules,
    parse_declarations,
    resolve_style,
)

RULES = parse_class_rules("""
    /* drawing styles */
    .outline { stroke: red; stroke-width: 2 }
    .guide, .axis { stroke-dasharray: 4 2; }
    #main { stroke: purple }
""")


def resolve(attrib):
    return resolve_style(attrib, RULES, "#000000", "none")


def test_parse_declarations():
    assert parse_declarations("stroke: red; fill:none ;; bogus") == {"stroke": "red", "fill": "none"}
    assert parse_declarations(None) == {}


def test_class_rules_support_grouped_selectors_only():
    assert RULES["outline"] == {"stroke": "red", "stroke-width": "2"}
    assert RULES["guide"] == {"stroke-dasharray": "4 2"}
    assert RULES["axis"] == {"stroke-dasharray": "4 2"}
    assert "main" not in RULES


def test_fold_later_sources_win():
    assert fold_styles([{"a": "1", "b": "1"}, {"b": "2"}, {"c": "3"}]) == {"a": "1", "b": "2", "c": "3"}


def test_attribute_beats_inline_beats_class():
    style = resolve({"class": "outline", "style": "stroke: blue", "stroke": "green"})
    assert style.stroke == "green"
    assert style.stroke_width == 2

    style = resolve({"class": "outline", "style": "stroke: blue"})
    assert style.stroke == "blue"

    style = resolve({"class": "outline"})
    assert style.stroke == "red"


def test_default_stroke_only_without_fill():
    style = resolve({})
    assert style.stroke == "#000000"
    assert style.fill == "none"
    assert style.has_stroke and not style.has_fill

    filled = resolve({"fill": "red"})
    assert filled.stroke == "none"
    assert filled.has_fill and not filled.has_stroke


def test_dash_array_from_class():
    assert resolve({"class": "guide"}).is_dashed
    assert not resolve({"stroke-dasharray": "none"}).is_dashed


def test_style_record_numbers():
    style = build_style_record({"stroke-width": "0.5px", "stroke-opacity": "0.25"}, 1.0)
    assert style.stroke_width == 0.5
    assert style.stroke_opacity == 0.25
    assert build_style_record({}, 3.0).stroke_width == 3.0
