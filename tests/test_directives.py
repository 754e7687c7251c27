"""
Tests for the '#' directive mini-language.
"""
import pytest

from svg_to_cad.directives import has_construction_tag, parse_directives, split_name


def test_extrude_and_construction():
    name, record = parse_directives("Base#extrude=10mm#const")
    assert name == "Base"
    assert record.construction
    assert record.extrude.depth == 10
    assert record.extrude.units == "mm"
    assert record.has_3d_operations


def test_extrude_unit_defaults_to_target_units():
    _, mm = parse_directives("Wall#extrude=25", "mm")
    _, inch = parse_directives("Wall#extrude=25", "inch")
    assert mm.extrude.units == "mm"
    assert inch.extrude.units == "in"


def test_tokens_are_case_insensitive_and_trimmed():
    name, record = parse_directives("  Part # EXTRUDE=5IN # Construction ")
    assert name == "Part"
    assert record.extrude.depth == 5
    assert record.extrude.units == "in"
    assert record.construction


def test_all_directives():
    _, record = parse_directives(
        "Hub#revolve=90#pattern=3x2#mirror#dim=12.5#closed#plane=front#sketch=Lid"
    )
    assert record.revolve.angle == 90
    assert record.pattern.x == 3 and record.pattern.y == 2
    assert record.mirror
    assert record.dimension == 12.5
    assert record.closed
    assert record.plane == "Front"
    assert record.sketch == "lid"


@pytest.mark.parametrize(
    "token",
    ["foo", "extrude=abc", "extrude=10cm", "extrude=0", "extrude=-5", "pattern=0x2", "pattern=3", "dim=1e999"],
)
def test_unknown_or_malformed_tokens_are_ignored(token):
    name, record = parse_directives(f"A#{token}")
    assert name == "A"
    assert record.extrude is None
    assert record.pattern is None
    assert record.dimension is None
    assert not record.has_3d_operations


def test_name_without_directives():
    name, record = parse_directives("Plain name")
    assert name == "Plain name"
    assert record == type(record)()


def test_empty_name():
    assert split_name(None) == ("", [])
    name, record = parse_directives("")
    assert name == ""
    assert not record.construction


@pytest.mark.parametrize(
    "name, element_id, expected",
    [
        ("Guide#const", "a", True),
        ("Guide#construction#extrude=5", "a", True),
        ("Guide", "axis_construction", True),
        ("Guide", "line_const_2", True),
        ("Guide#constant", "a", False),
        ("Guide", "constructive", False),
    ],
)
def test_construction_tags(name, element_id, expected):
    assert has_construction_tag(name, element_id) is expected


def test_zero_revolve_is_full_turn():
    _, record = parse_directives("Hub#revolve=0")
    assert record.revolve.angle == 360
    _, record = parse_directives("Hub#revolve=-90")
    assert record.revolve.angle == -90
