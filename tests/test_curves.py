"""
Tests for Bezier and arc flattening math.
"""
import math

import numpy as np
import pytest

from svg_to_cad.curves import (
    arc_center_parameters,
    arc_sample_angles,
    arc_step_count,
    arc_to_cubics,
    cubic_length_estimate,
    flatten_arc,
    flatten_cubic,
    flatten_quadratic,
    flatten_segments,
    quadratic_to_cubic,
    sample_count,
)
from svg_to_cad.geometry_models import ArcSegment, CubicSegment, LineSegment, QuadraticSegment

from conftest import pt


def semicircle(sweep=True, large_arc=False, rx=5.0, ry=5.0):
    return ArcSegment(start=pt(0, 0), end=pt(10, 0), rx=rx, ry=ry, large_arc=large_arc, sweep=sweep)


def test_sample_count_minimum_and_scaling():
    assert sample_count(0.1, 0.5) == 2
    assert sample_count(10, 0.5) == 20
    assert sample_count(0.1, 0.5, minimum=8) == 8


def test_flatten_cubic_hits_endpoints():
    seg = CubicSegment(start=pt(0, 0), control1=pt(0, 10), control2=pt(10, 10), end=pt(10, 0))
    lines = flatten_cubic(seg, 0.5)
    assert len(lines) == sample_count(cubic_length_estimate(seg), 0.5)
    assert lines[0].start == seg.start
    assert lines[-1].end == seg.end
    for a, b in zip(lines, lines[1:]):
        assert a.end == b.start


def test_flatten_straight_cubic_stays_on_line():
    seg = CubicSegment(start=pt(0, 0), control1=pt(3, 0), control2=pt(7, 0), end=pt(10, 0))
    lines = flatten_cubic(seg, 1.0)
    assert all(abs(line.end.y) < 1e-12 for line in lines)


def test_flatten_keeps_closing_marker_on_last_line():
    seg = QuadraticSegment(start=pt(0, 0), control=pt(5, 5), end=pt(10, 0), closing=True)
    lines = flatten_quadratic(seg, 0.5)
    assert lines[-1].closing
    assert not any(line.closing for line in lines[:-1])


def test_quadratic_to_cubic_control_points():
    cubic = quadratic_to_cubic(QuadraticSegment(start=pt(0, 0), control=pt(3, 6), end=pt(6, 0)))
    assert cubic.control1.x == pytest.approx(2.0)
    assert cubic.control1.y == pytest.approx(4.0)
    assert cubic.control2.x == pytest.approx(4.0)
    assert cubic.control2.y == pytest.approx(4.0)


def test_arc_center_of_semicircle():
    geom = arc_center_parameters(semicircle(sweep=True))
    assert geom.cx == pytest.approx(5.0)
    assert geom.cy == pytest.approx(0.0)
    assert geom.start_angle == pytest.approx(math.pi)
    assert geom.sweep_angle == pytest.approx(math.pi)


def test_arc_sweep_sign_follows_flag():
    geom = arc_center_parameters(semicircle(sweep=False))
    assert geom.sweep_angle == pytest.approx(-math.pi)


def test_arc_large_flag_selects_long_way():
    small = arc_center_parameters(
        ArcSegment(start=pt(10, 0), end=pt(0, 10), rx=10, ry=10, large_arc=False, sweep=True)
    )
    large = arc_center_parameters(
        ArcSegment(start=pt(10, 0), end=pt(0, 10), rx=10, ry=10, large_arc=True, sweep=True)
    )
    assert abs(small.sweep_angle) == pytest.approx(math.pi / 2)
    assert abs(large.sweep_angle) == pytest.approx(3 * math.pi / 2)


def test_arc_radii_scaled_up_when_too_small():
    geom = arc_center_parameters(semicircle(rx=1.0, ry=1.0))
    assert geom.rx == pytest.approx(5.0)
    assert geom.ry == pytest.approx(5.0)


def test_zero_radius_is_clamped_not_divided_by():
    geom = arc_center_parameters(semicircle(rx=0.0, ry=0.0))
    assert math.isfinite(geom.cx) and math.isfinite(geom.cy)
    assert geom.rx > 0 and geom.ry > 0


def test_arc_steps_sum_to_sweep():
    geom = arc_center_parameters(semicircle())
    angles = np.concatenate([[geom.start_angle], arc_sample_angles(geom, 0.5)])
    assert np.diff(angles).sum() == pytest.approx(geom.sweep_angle)
    assert arc_step_count(geom, 0.5) == math.ceil(math.pi * 5 / 0.5)


def test_flatten_arc_points_lie_on_circle():
    lines = flatten_arc(semicircle(), 0.5)
    assert lines[0].start == pt(0, 0)
    assert lines[-1].end == pt(10, 0)
    for line in lines[:-1]:
        assert math.hypot(line.end.x - 5, line.end.y) == pytest.approx(5.0)


def test_arc_to_cubics_quarter_pieces():
    cubics = arc_to_cubics(semicircle())
    assert len(cubics) == 2
    assert cubics[0].start == pt(0, 0)
    assert cubics[-1].end == pt(10, 0)
    assert cubics[0].end == cubics[1].start


def test_flatten_segments_passes_lines_through():
    line = LineSegment(start=pt(0, 0), end=pt(1, 0))
    cubic = CubicSegment(start=pt(1, 0), control1=pt(1, 1), control2=pt(2, 1), end=pt(2, 0))
    lines = flatten_segments([line, cubic], 0.5)
    assert lines[0] is line
    assert all(isinstance(s, LineSegment) for s in lines)
    assert lines[-1].end == pt(2, 0)
