"""
DXF preview export of synthesized sketches.

Uses ezdxf to write every sketch entity into one modelspace so a
conversion can be inspected in any CAD viewer before it is sent to
Onshape. Construction geometry goes on a dashed CONSTRUCTION layer.
"""

import math
import os
import tempfile
from typing import Callable

import ezdxf
from ezdxf import units
from ezdxf.document import Drawing
from ezdxf.layouts import Modelspace

from .cad_models import ArcEntity, CircleEntity, ConversionResult, LineEntity, SplineEntity
from .config import DASHED_LAYERS, LAYER_COLORS


class SketchDXFExporter:
    """
    Generate DXF files from synthesized sketches.

    Coordinates are written unchanged in the result's unit system; each
    sketch's entities share the modelspace.
    """

    def __init__(self, version: str = "R2010"):
        """
        Initialize DXF exporter.

        Args:
            version: DXF version (R2000, R2004, R2007, R2010, R2013, R2018)
        """
        self.version = version.upper()
        self.errors: list[str] = []

    def _setup_layers(self, doc: Drawing) -> None:
        """Create geometry and construction layers with colors."""
        for layer_name, color in LAYER_COLORS.items():
            if layer_name not in doc.layers:
                linetype = "DASHED" if layer_name in DASHED_LAYERS else "Continuous"
                doc.layers.add(layer_name, color=color, linetype=linetype)

    def _layer(self, entity) -> str:
        return "CONSTRUCTION" if entity.is_construction else "GEOMETRY"

    def _add_line(self, msp: Modelspace, entity: LineEntity) -> None:
        """Add LINE entity to modelspace."""
        msp.add_line(
            entity.start.as_tuple(),
            entity.end.as_tuple(),
            dxfattribs={"layer": self._layer(entity)},
        )

    def _add_circle(self, msp: Modelspace, entity: CircleEntity) -> None:
        """Add CIRCLE entity to modelspace."""
        msp.add_circle(entity.center.as_tuple(), radius=entity.radius, dxfattribs={"layer": self._layer(entity)})

    def _add_arc(self, msp: Modelspace, entity: ArcEntity) -> None:
        """Add ARC (circular) or partial ELLIPSE entity to modelspace."""
        layer = self._layer(entity)
        if entity.is_circular:
            # ezdxf expects degrees, counter-clockwise
            msp.add_arc(
                entity.center.as_tuple(),
                radius=entity.radius,
                start_angle=math.degrees(entity.start_angle + entity.x_direction),
                end_angle=math.degrees(entity.end_angle + entity.x_direction),
                dxfattribs={"layer": layer},
            )
            return

        major_axis = (
            entity.radius * math.cos(entity.x_direction),
            entity.radius * math.sin(entity.x_direction),
        )
        msp.add_ellipse(
            entity.center.as_tuple(),
            major_axis=major_axis,
            ratio=entity.minor_radius / entity.radius,
            start_param=entity.start_angle,
            end_param=entity.end_angle,
            dxfattribs={"layer": layer},
        )

    def _add_spline(self, msp: Modelspace, entity: SplineEntity) -> None:
        """Add SPLINE entity from Bezier control points."""
        msp.add_open_spline(
            [p.as_tuple() for p in entity.control_points],
            degree=entity.degree,
            dxfattribs={"layer": self._layer(entity)},
        )

    def generate(self, result: ConversionResult) -> bytes:
        """
        Generate DXF file from a conversion result.

        Args:
            result: ConversionResult with synthesized sketches

        Returns:
            DXF file as bytes
        """
        self.errors = []  # Reset errors

        doc = ezdxf.new(dxfversion=self.version, setup=True)
        doc.units = units.IN if result.units == "inch" else units.MM
        msp = doc.modelspace()

        self._setup_layers(doc)

        # Entity handler dispatch table
        handlers: dict[str, Callable] = {
            "line": self._add_line,
            "circle": self._add_circle,
            "arc": self._add_arc,
            "spline": self._add_spline,
        }

        for sketch in result.sketches:
            for entity in sketch.entities:
                handler = handlers.get(entity.type)
                if handler:
                    try:
                        handler(msp, entity)
                    except Exception as e:
                        self.errors.append(f"Failed to add {entity.type} {entity.id}: {e}")

        # Export to bytes via temp file (ezdxf.saveas doesn't work with BytesIO)
        with tempfile.NamedTemporaryFile(suffix=".dxf", delete=False) as tmp:
            temp_path = tmp.name

        try:
            doc.saveas(temp_path)
            with open(temp_path, "rb") as f:
                return f.read()
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    def generate_to_file(self, result: ConversionResult, output_path: str) -> str:
        """
        Generate DXF file and save to disk.

        Args:
            result: ConversionResult with synthesized sketches
            output_path: Path to save the DXF file

        Returns:
            Path to the saved file
        """
        dxf_bytes = self.generate(result)

        with open(output_path, "wb") as f:
            f.write(dxf_bytes)

        return output_path

    def get_errors(self) -> list[str]:
        """Get list of errors encountered during generation."""
        return self.errors.copy()
