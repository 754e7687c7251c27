"""
Tests for Onshape feature-definition serialization.
"""
import json
import math

import pytest

from svg_to_cad.cad_models import (
    ArcEntity,
    CircleEntity,
    ConversionResult,
    ExtrudeFeature,
    LineEntity,
    MirrorFeature,
    PatternFeature,
    RevolveFeature,
    Sketch,
    SplineEntity,
)
from svg_to_cad.onshape_schema import (
    arc_to_btm,
    build_feature_list,
    circle_to_btm,
    extrude_to_btm,
    feature_request,
    line_to_btm,
    mirror_to_btm,
    pattern_to_btm,
    revolve_to_btm,
    sketch_to_btm,
    spline_to_btm,
)

from conftest import pt

COMMON = {"sketch_id": "sketch-1", "sketch_name": "Plate"}


@pytest.fixture
def result():
    sketch = Sketch(
        id="sketch-1",
        name="Plate",
        plane="Top",
        entities=[
            LineEntity(id="p.0", start=pt(0, 0), end=pt(10, 0)),
            CircleEntity(id="p.1", center=pt(5, 5), radius=2, is_construction=True),
        ],
        closed=True,
    )
    return ConversionResult(
        units="mm",
        sketches=[sketch],
        features=[ExtrudeFeature(id="sketch-1-extrude", name="Extrude Plate", depth=25, units="mm", **COMMON)],
    )


def test_line_in_meters():
    btm = line_to_btm(LineEntity(id="l", start=pt(10, 20), end=pt(10, 50)), "mm")
    assert btm["btType"] == "BTMSketchCurveSegment-155"
    assert btm["startPointId"] == "l.start"
    geometry = btm["geometry"]
    assert geometry["btType"] == "BTCurveGeometryLine-117"
    assert geometry["pntX"] == pytest.approx(0.01)
    assert geometry["pntY"] == pytest.approx(0.02)
    assert (geometry["dirX"], geometry["dirY"]) == (0.0, 1.0)
    assert btm["endParam"] == pytest.approx(0.03)


def test_inch_geometry_in_meters():
    btm = circle_to_btm(CircleEntity(id="c", center=pt(1, 0), radius=0.5), "inch")
    assert btm["geometry"]["xCenter"] == pytest.approx(0.0254)
    assert btm["geometry"]["radius"] == pytest.approx(0.0127)


def test_circle_entity():
    btm = circle_to_btm(CircleEntity(id="c", center=pt(5, 5), radius=2, is_construction=True), "mm")
    assert btm["btType"] == "BTMSketchCurve-4"
    assert btm["isConstruction"] is True
    assert btm["geometry"]["btType"] == "BTCurveGeometryCircle-115"
    assert btm["geometry"]["radius"] == pytest.approx(0.002)


def test_circular_and_elliptical_arcs():
    circular = ArcEntity(
        id="a", center=pt(0, 0), radius=5, minor_radius=5, start_angle=0, end_angle=math.pi
    )
    btm = arc_to_btm(circular, "mm")
    assert btm["geometry"]["btType"] == "BTCurveGeometryCircle-115"
    assert btm["startParam"] == 0
    assert btm["endParam"] == pytest.approx(math.pi)

    elliptical = circular.model_copy(update={"minor_radius": 2, "x_direction": math.pi / 2})
    geometry = arc_to_btm(elliptical, "mm")["geometry"]
    assert geometry["btType"] == "BTCurveGeometryEllipse-1189"
    assert geometry["minorRadius"] == pytest.approx(0.002)
    assert geometry["xDir"] == pytest.approx(0.0)
    assert geometry["yDir"] == pytest.approx(1.0)


def test_bezier_spline():
    spline = SplineEntity(id="s", control_points=[pt(0, 0), pt(1, 2), pt(3, 2), pt(4, 0)])
    geometry = spline_to_btm(spline, "mm")["geometry"]
    assert geometry["btType"] == "BTCurveGeometryControlPointSpline-2197"
    assert geometry["degree"] == 3
    assert geometry["controlPointCount"] == 4
    assert len(geometry["controlPoints"]) == 8
    assert geometry["controlPoints"][2:4] == pytest.approx([0.001, 0.002])
    assert geometry["knots"] == [0, 0, 0, 0, 1, 1, 1, 1]


def test_sketch_feature(result):
    btm = sketch_to_btm(result.sketches[0], "mm")
    assert btm["btType"] == "BTMSketch-151"
    assert btm["featureType"] == "newSketch"
    assert btm["featureId"] == "sketch-1"
    plane = btm["parameters"][0]
    assert plane["parameterId"] == "sketchPlane"
    assert plane["queries"][0]["deterministicIds"] == ["JDC"]
    assert [e["entityId"] for e in btm["entities"]] == ["p.0", "p.1"]


def parameter(btm, parameter_id):
    return next(p for p in btm["parameters"] if p["parameterId"] == parameter_id)


def test_extrude_feature_expression():
    btm = extrude_to_btm(ExtrudeFeature(id="e", name="E", depth=1.5, units="inch", **COMMON))
    assert btm["btType"] == "BTMFeature-134"
    assert btm["featureType"] == "extrude"
    assert parameter(btm, "depth")["expression"] == "1.5 in"
    assert parameter(btm, "entities")["queries"][0]["featureId"] == "sketch-1"
    assert parameter(btm, "operationType")["value"] == "NEW"


@pytest.mark.parametrize("angle, revolve_type", [(360, "FULL"), (90, "ONE_DIRECTION")])
def test_revolve_feature(angle, revolve_type):
    btm = revolve_to_btm(RevolveFeature(id="r", name="R", angle=angle, **COMMON))
    assert parameter(btm, "revolveType")["value"] == revolve_type
    assert parameter(btm, "angle")["expression"] == f"{angle} deg"
    assert "sketch-1" in parameter(btm, "axis")["queries"][0]["queryString"]


def test_pattern_feature():
    feature = PatternFeature(
        id="p", name="P", x_count=3, y_count=1, x_spacing=20, y_spacing=20, units="mm", **COMMON
    )
    btm = pattern_to_btm(feature)
    assert btm["featureType"] == "linearPattern"
    assert parameter(btm, "instanceCount")["expression"] == "3"
    assert parameter(btm, "instanceCount")["isInteger"] is True
    assert parameter(btm, "distance")["expression"] == "20 mm"
    assert parameter(btm, "hasSecondDir")["value"] is False
    assert parameter(btm, "instanceFunction")["featureIds"] == ["sketch-1"]


def test_mirror_feature():
    btm = mirror_to_btm(MirrorFeature(id="m", name="M", plane="Front", **COMMON))
    assert parameter(btm, "mirrorPlane")["queries"][0]["deterministicIds"] == ["JCC"]


def test_feature_list_orders_sketches_first(result):
    features = build_feature_list(result)
    assert [f["btType"] for f in features] == ["BTMSketch-151", "BTMFeature-134"]
    assert parameter(features[1], "depth")["expression"] == "25 mm"
    assert result.to_onshape_features() == features
    json.dumps(features)


def test_feature_request_wraps_definition():
    assert feature_request({"btType": "BTMSketch-151"}) == {"feature": {"btType": "BTMSketch-151"}}
