"""
Onshape feature-definition serialization.

Turns synthesized sketches and feature operations into the BTM JSON
documents accepted by the Onshape part studio features endpoint. Geometry
is written in meters and radians; quantity parameters are written as
expressions in the target unit ("25 mm", "90 deg").
"""

import math

from .cad_models import (
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
from .config import METERS_PER_UNIT, PLANE_IDS

# Expression suffix per target unit
UNIT_EXPRESSIONS = {"mm": "mm", "inch": "in"}

_BEZIER_KNOTS = [0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0]


def _meters(value: float, units: str) -> float:
    return round(value * METERS_PER_UNIT[units], 10)


def _quantity(parameter_id: str, expression: str, is_integer: bool = False) -> dict:
    return {
        "btType": "BTMParameterQuantity-147",
        "parameterId": parameter_id,
        "expression": expression,
        "isInteger": is_integer,
    }


def _enum(parameter_id: str, enum_name: str, value: str) -> dict:
    return {
        "btType": "BTMParameterEnum-145",
        "parameterId": parameter_id,
        "enumName": enum_name,
        "value": value,
        "namespace": "",
    }


def _boolean(parameter_id: str, value: bool) -> dict:
    return {"btType": "BTMParameterBoolean-144", "parameterId": parameter_id, "value": value}


def _plane_query(parameter_id: str, plane: str) -> dict:
    return {
        "btType": "BTMParameterQueryList-148",
        "parameterId": parameter_id,
        "queries": [{"btType": "BTMIndividualQuery-138", "deterministicIds": [PLANE_IDS[plane]]}],
    }


def _sketch_region_query(parameter_id: str, sketch_id: str) -> dict:
    return {
        "btType": "BTMParameterQueryList-148",
        "parameterId": parameter_id,
        "queries": [{"btType": "BTMIndividualSketchRegionQuery-140", "featureId": sketch_id}],
    }


def _construction_edges_query(parameter_id: str, sketch_id: str) -> dict:
    query = (
        f'query=qConstructionFilter(qCreatedBy(makeId("{sketch_id}"), EntityType.EDGE), '
        "ConstructionObject.YES);"
    )
    return {
        "btType": "BTMParameterQueryList-148",
        "parameterId": parameter_id,
        "queries": [{"btType": "BTMIndividualQuery-138", "queryString": query}],
    }


def _feature_list(parameter_id: str, feature_ids: list[str]) -> dict:
    return {"btType": "BTMParameterFeatureList-1749", "parameterId": parameter_id, "featureIds": feature_ids}


# Sketch entities


def line_to_btm(entity: LineEntity, units: str) -> dict:
    dx = entity.end.x - entity.start.x
    dy = entity.end.y - entity.start.y
    length = math.hypot(dx, dy)
    dir_x, dir_y = (dx / length, dy / length) if length > 0 else (1.0, 0.0)
    return {
        "btType": "BTMSketchCurveSegment-155",
        "entityId": entity.id,
        "startPointId": f"{entity.id}.start",
        "endPointId": f"{entity.id}.end",
        "isConstruction": entity.is_construction,
        "parameters": [],
        "startParam": 0.0,
        "endParam": _meters(length, units),
        "geometry": {
            "btType": "BTCurveGeometryLine-117",
            "pntX": _meters(entity.start.x, units),
            "pntY": _meters(entity.start.y, units),
            "dirX": dir_x,
            "dirY": dir_y,
        },
    }


def circle_to_btm(entity: CircleEntity, units: str) -> dict:
    return {
        "btType": "BTMSketchCurve-4",
        "entityId": entity.id,
        "centerId": f"{entity.id}.center",
        "isConstruction": entity.is_construction,
        "parameters": [],
        "geometry": {
            "btType": "BTCurveGeometryCircle-115",
            "radius": _meters(entity.radius, units),
            "xCenter": _meters(entity.center.x, units),
            "yCenter": _meters(entity.center.y, units),
            "xDir": 1.0,
            "yDir": 0.0,
            "clockwise": False,
        },
    }


def arc_to_btm(entity: ArcEntity, units: str) -> dict:
    geometry = {
        "xCenter": _meters(entity.center.x, units),
        "yCenter": _meters(entity.center.y, units),
        "xDir": round(math.cos(entity.x_direction), 12),
        "yDir": round(math.sin(entity.x_direction), 12),
        "clockwise": False,
    }
    if entity.is_circular:
        geometry.update({"btType": "BTCurveGeometryCircle-115", "radius": _meters(entity.radius, units)})
    else:
        geometry.update({
            "btType": "BTCurveGeometryEllipse-1189",
            "radius": _meters(entity.radius, units),
            "minorRadius": _meters(entity.minor_radius, units),
        })
    return {
        "btType": "BTMSketchCurveSegment-155",
        "entityId": entity.id,
        "startPointId": f"{entity.id}.start",
        "endPointId": f"{entity.id}.end",
        "centerId": f"{entity.id}.center",
        "isConstruction": entity.is_construction,
        "parameters": [],
        "startParam": entity.start_angle,
        "endParam": entity.end_angle,
        "geometry": geometry,
    }


def spline_to_btm(entity: SplineEntity, units: str) -> dict:
    coordinates: list[float] = []
    for point in entity.control_points:
        coordinates.extend([_meters(point.x, units), _meters(point.y, units)])
    return {
        "btType": "BTMSketchCurveSegment-155",
        "entityId": entity.id,
        "startPointId": f"{entity.id}.start",
        "endPointId": f"{entity.id}.end",
        "isConstruction": entity.is_construction,
        "parameters": [],
        "startParam": 0.0,
        "endParam": 1.0,
        "geometry": {
            "btType": "BTCurveGeometryControlPointSpline-2197",
            "degree": entity.degree,
            "isBezier": True,
            "isPeriodic": False,
            "isRational": False,
            "controlPointCount": len(entity.control_points),
            "controlPoints": coordinates,
            "knots": _BEZIER_KNOTS,
        },
    }


ENTITY_SERIALIZERS = {
    "line": line_to_btm,
    "circle": circle_to_btm,
    "arc": arc_to_btm,
    "spline": spline_to_btm,
}


def sketch_to_btm(sketch: Sketch, units: str) -> dict:
    """Serialize a sketch into a BTMSketch-151 feature."""
    return {
        "btType": "BTMSketch-151",
        "featureType": "newSketch",
        "featureId": sketch.id,
        "name": sketch.name,
        "suppressed": False,
        "namespace": "",
        "parameters": [
            _plane_query("sketchPlane", sketch.plane),
            _boolean("disableImprinting", True),
        ],
        "constraints": [],
        "entities": [ENTITY_SERIALIZERS[e.type](e, units) for e in sketch.entities],
    }


# Feature operations


def _feature(feature, feature_type: str, parameters: list[dict]) -> dict:
    return {
        "btType": "BTMFeature-134",
        "featureType": feature_type,
        "featureId": feature.id,
        "name": feature.name,
        "suppressed": False,
        "namespace": "",
        "parameters": parameters,
    }


def extrude_to_btm(feature: ExtrudeFeature) -> dict:
    unit = UNIT_EXPRESSIONS[feature.units]
    return _feature(feature, "extrude", [
        _enum("bodyType", "ExtendedToolBodyType", "SOLID"),
        _enum("operationType", "NewBodyOperationType", feature.operation),
        _sketch_region_query("entities", feature.sketch_id),
        _enum("endBound", "BoundingType", "BLIND"),
        _quantity("depth", f"{feature.depth:.10g} {unit}"),
    ])


def revolve_to_btm(feature: RevolveFeature) -> dict:
    full = abs(feature.angle) >= 360
    return _feature(feature, "revolve", [
        _enum("bodyType", "ExtendedToolBodyType", "SOLID"),
        _enum("operationType", "NewBodyOperationType", feature.operation),
        _sketch_region_query("entities", feature.sketch_id),
        _construction_edges_query("axis", feature.sketch_id),
        _enum("revolveType", "RevolveType", "FULL" if full else "ONE_DIRECTION"),
        _quantity("angle", f"{feature.angle:.10g} deg"),
    ])


def pattern_to_btm(feature: PatternFeature) -> dict:
    unit = UNIT_EXPRESSIONS[feature.units]
    return _feature(feature, "linearPattern", [
        _enum("patternType", "PatternType", "FEATURE"),
        _feature_list("instanceFunction", [feature.sketch_id]),
        _plane_query("directionOne", "Right"),
        _quantity("distance", f"{feature.x_spacing:.10g} {unit}"),
        _quantity("instanceCount", str(feature.x_count), is_integer=True),
        _boolean("hasSecondDir", feature.y_count > 1),
        _plane_query("directionTwo", "Front"),
        _quantity("distanceTwo", f"{feature.y_spacing:.10g} {unit}"),
        _quantity("instanceCountTwo", str(feature.y_count), is_integer=True),
    ])


def mirror_to_btm(feature: MirrorFeature) -> dict:
    return _feature(feature, "mirror", [
        _enum("patternType", "MirrorType", "FEATURE"),
        _feature_list("instanceFunction", [feature.sketch_id]),
        _plane_query("mirrorPlane", feature.plane),
    ])


FEATURE_SERIALIZERS = {
    "extrude": extrude_to_btm,
    "revolve": revolve_to_btm,
    "pattern": pattern_to_btm,
    "mirror": mirror_to_btm,
}


def build_feature_list(result: ConversionResult) -> list[dict]:
    """All sketch features followed by the operations that reference them."""
    sketches = [sketch_to_btm(s, result.units) for s in result.sketches]
    features = [FEATURE_SERIALIZERS[f.kind](f) for f in result.features]
    return sketches + features


def feature_request(definition: dict) -> dict:
    """Request body for adding one feature to a part studio."""
    return {"feature": definition}
