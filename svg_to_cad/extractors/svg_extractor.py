"""
SVG drawing extractor.

Walks the element tree depth-first and records every drawable element as a
typed primitive with its resolved style, its ancestor-to-self transform
chain and its construction flag. Malformed elements are skipped with a
warning; only unparsable markup raises SVGParseError.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import Callable, Optional, Union

from pydantic import ValidationError

from ..config import DEFAULT_VIEWBOX, SVG_LENGTH_FACTORS, ConversionOptions
from ..directives import has_construction_tag
from ..geometry_models import (
    CirclePrimitive,
    DrawingExtraction,
    DrawingMetadata,
    EllipsePrimitive,
    GroupPrimitive,
    LinePrimitive,
    PathPrimitive,
    Point2D,
    PolygonPrimitive,
    PolylinePrimitive,
    RectPrimitive,
    TextPrimitive,
    TransformOp,
    ViewBox,
)
from ..transforms import parse_transform
from .base import DrawingExtractor, SVGParseError
from .styles import parse_class_rules, parse_declarations, resolve_style

logger = logging.getLogger(__name__)

INKSCAPE_LABEL = "{http://www.inkscape.org/namespaces/inkscape}label"

# Containers whose content is never rendered directly
NON_RENDERING_TAGS = {
    "defs",
    "symbol",
    "clipPath",
    "mask",
    "pattern",
    "marker",
    "linearGradient",
    "radialGradient",
    "filter",
    "style",
    "title",
    "desc",
    "metadata",
}

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-z%]*)\s*$", re.IGNORECASE)


def local_name(tag: str) -> str:
    """Strip the XML namespace from a tag name."""
    return tag.rsplit("}", 1)[-1]


def parse_number(value: Optional[str], default: float = 0.0) -> float:
    """Leading number of an attribute value ("10px" -> 10.0)."""
    match = _NUMBER_RE.match((value or "").strip())
    return float(match.group()) if match else default


def parse_length(value: Optional[str]) -> Optional[float]:
    """Length with an optional unit suffix, converted to px."""
    match = _LENGTH_RE.match(value or "")
    if not match:
        return None
    number, unit = float(match.group(1)), match.group(2).lower()
    if unit in ("", "px"):
        return number
    factor = SVG_LENGTH_FACTORS.get(unit)
    return number * factor if factor is not None else None


def parse_points(value: Optional[str]) -> list[Point2D]:
    """Coordinate pairs of a points attribute; a trailing odd value is dropped."""
    numbers = [float(v) for v in _NUMBER_RE.findall(value or "")]
    return [Point2D(x=numbers[i], y=numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]


def custom_attributes(attrib: dict) -> dict[str, str]:
    """data-* attributes keyed without the prefix, dashes as underscores."""
    return {
        key[5:].replace("-", "_"): value
        for key, value in attrib.items()
        if key.startswith("data-") and len(key) > 5
    }


class SVGDrawingExtractor(DrawingExtractor):
    """
    Extract primitives from SVG markup.

    Usage:
        extractor = SVGDrawingExtractor(options)
        drawing = extractor.extract(svg_text)
        for primitive in drawing.primitives:
            ...
    """

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()
        self.warnings: list[str] = []
        self._primitives: list = []
        self._counts: dict[str, int] = {}
        self._used_ids: set[str] = set()
        self._rules: dict[str, dict[str, str]] = {}

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _parse_document(self, content: Union[str, bytes]) -> ET.Element:
        if not content or not content.strip():
            raise SVGParseError("Empty SVG document")
        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            raise SVGParseError(f"Invalid SVG markup: {e}") from e

    def _parse_viewbox(self, root: ET.Element) -> ViewBox:
        raw = root.get("viewBox")
        if raw is not None:
            values = [float(v) for v in _NUMBER_RE.findall(raw)]
            if len(values) == 4 and values[2] > 0 and values[3] > 0:
                return ViewBox(x=values[0], y=values[1], width=values[2], height=values[3])
            self._warn(f"Invalid viewBox {raw!r}, falling back to width/height")

        width = parse_length(root.get("width"))
        height = parse_length(root.get("height"))
        if width and height and width > 0 and height > 0:
            return ViewBox(x=0.0, y=0.0, width=width, height=height)

        x, y, w, h = DEFAULT_VIEWBOX
        logger.debug("No usable viewBox or size, using default %s", DEFAULT_VIEWBOX)
        return ViewBox(x=x, y=y, width=w, height=h)

    def _parse_metadata(self, root: ET.Element) -> DrawingMetadata:
        values: dict[str, str] = {}
        for child in root:
            tag = local_name(child.tag) if isinstance(child.tag, str) else ""
            if tag == "title" and "title" not in values:
                values["title"] = "".join(child.itertext()).strip()
            elif tag == "desc" and "description" not in values:
                values["description"] = "".join(child.itertext()).strip()
        return DrawingMetadata(**values)

    def _collect_class_rules(self, root: ET.Element) -> dict[str, dict[str, str]]:
        css = "\n".join(
            "".join(el.itertext())
            for el in root.iter()
            if isinstance(el.tag, str) and local_name(el.tag) == "style"
        )
        return parse_class_rules(css) if css.strip() else {}

    def _next_id(self, kind: str) -> str:
        # Skip ordinals already taken by an explicit id
        n = self._counts.get(kind, 0) + 1
        while f"{kind}-{n}" in self._used_ids:
            n += 1
        return f"{kind}-{n}"

    def _common_fields(
        self,
        element: ET.Element,
        kind: str,
        transforms: list[TransformOp],
        parent_id: Optional[str],
    ) -> dict:
        attrib = element.attrib
        element_id = attrib.get("id") or self._next_id(kind)
        name = attrib.get("name") or attrib.get(INKSCAPE_LABEL) or element_id
        style = resolve_style(
            attrib,
            self._rules,
            self.options.default_stroke_color,
            self.options.default_fill_color,
            self.options.default_stroke_width,
        )

        tagged = self.options.parse_name_tags and has_construction_tag(name, element_id)
        dashed = self.options.dashed_lines_as_construction and style.is_dashed
        flagged = (
            "data-construction" in attrib
            or "data-const" in attrib
            or attrib.get("data-type", "").strip().lower() == "construction"
        )

        return {
            "id": element_id,
            "name": name,
            "style": style,
            "transforms": transforms,
            "is_construction": bool(tagged or dashed or flagged),
            "data": custom_attributes(attrib),
            "parent_id": parent_id,
        }

    def _record(self, primitive) -> None:
        self._primitives.append(primitive)
        self._counts[primitive.kind] = self._counts.get(primitive.kind, 0) + 1
        self._used_ids.add(primitive.id)
        logger.debug("Extracted %s %s", primitive.kind, primitive.id)

    # Element handlers. Each returns the kind-specific fields or raises ValueError.

    def _path_fields(self, element: ET.Element) -> dict:
        d = (element.get("d") or "").strip()
        if not d:
            raise ValueError("missing path data")
        return {"d": d}

    def _circle_fields(self, element: ET.Element) -> dict:
        r = parse_number(element.get("r"))
        if r <= 0:
            raise ValueError(f"non-positive radius {r}")
        return {"cx": parse_number(element.get("cx")), "cy": parse_number(element.get("cy")), "r": r}

    def _ellipse_fields(self, element: ET.Element) -> dict:
        rx, ry = parse_number(element.get("rx")), parse_number(element.get("ry"))
        if rx <= 0 or ry <= 0:
            raise ValueError(f"non-positive radii {rx}, {ry}")
        return {
            "cx": parse_number(element.get("cx")),
            "cy": parse_number(element.get("cy")),
            "rx": rx,
            "ry": ry,
        }

    def _line_fields(self, element: ET.Element) -> dict:
        return {key: parse_number(element.get(key)) for key in ("x1", "y1", "x2", "y2")}

    def _polyline_fields(self, element: ET.Element) -> dict:
        points = parse_points(element.get("points"))
        if len(points) < 2:
            raise ValueError(f"needs at least 2 points, got {len(points)}")
        return {"points": points}

    def _polygon_fields(self, element: ET.Element) -> dict:
        points = parse_points(element.get("points"))
        if len(points) < 3:
            raise ValueError(f"needs at least 3 points, got {len(points)}")
        return {"points": points}

    def _rect_fields(self, element: ET.Element) -> dict:
        width = parse_number(element.get("width"))
        height = parse_number(element.get("height"))
        if width <= 0 or height <= 0:
            raise ValueError(f"non-positive size {width}x{height}")
        rx_attr, ry_attr = element.get("rx"), element.get("ry")
        rx = parse_number(rx_attr if rx_attr is not None else ry_attr)
        ry = parse_number(ry_attr if ry_attr is not None else rx_attr)
        return {
            "x": parse_number(element.get("x")),
            "y": parse_number(element.get("y")),
            "width": width,
            "height": height,
            "rx": max(rx, 0.0),
            "ry": max(ry, 0.0),
        }

    def _add_primitive(
        self,
        element: ET.Element,
        kind: str,
        model: type,
        fields_for: Callable[[ET.Element], dict],
        transforms: list[TransformOp],
        parent_id: Optional[str],
    ) -> None:
        label = element.get("id") or self._next_id(kind)
        try:
            fields = fields_for(element)
            primitive = model(**self._common_fields(element, kind, transforms, parent_id), **fields)
        except (ValidationError, ValueError) as e:
            self._warn(f"Skipping {kind} '{label}': {e}")
            return
        self._record(primitive)

    def _add_text(
        self,
        element: ET.Element,
        transforms: list[TransformOp],
        parent_id: Optional[str],
    ) -> None:
        text_fields = self._text_fields(element, None)
        try:
            common = self._common_fields(element, "text", transforms, parent_id)
            text = TextPrimitive(**common, **text_fields)
        except ValidationError as e:
            self._warn(f"Skipping text: {e}")
            return
        self._record(text)

        for child in element:
            if not isinstance(child.tag, str) or local_name(child.tag) != "tspan":
                continue
            chain = transforms + parse_transform(child.get("transform"))
            try:
                common = self._common_fields(child, "text", chain, text.id)
                self._record(TextPrimitive(**common, **self._text_fields(child, text)))
            except ValidationError as e:
                self._warn(f"Skipping tspan in '{text.id}': {e}")

    def _text_fields(self, element: ET.Element, parent: Optional[TextPrimitive]) -> dict:
        style = parse_declarations(element.get("style"))

        def attr(name: str, inherited: Optional[str]) -> Optional[str]:
            return element.get(name) or style.get(name) or inherited

        return {
            "x": parse_number(element.get("x"), parent.x if parent else 0.0),
            "y": parse_number(element.get("y"), parent.y if parent else 0.0),
            "content": "".join(element.itertext()).strip(),
            "font_size": attr("font-size", parent.font_size if parent else None),
            "font_family": attr("font-family", parent.font_family if parent else None),
            "text_anchor": attr("text-anchor", parent.text_anchor if parent else None),
        }

    def _add_group(
        self,
        element: ET.Element,
        transforms: list[TransformOp],
        parent_id: Optional[str],
    ) -> None:
        common = self._common_fields(element, "group", transforms, parent_id)
        position = len(self._primitives)
        # Reserve the ordinal before children are numbered
        self._counts["group"] = self._counts.get("group", 0) + 1
        self._used_ids.add(common["id"])

        self._walk(element, transforms, common["id"])

        children = [p.id for p in self._primitives[position:] if p.parent_id == common["id"]]
        try:
            group = GroupPrimitive(**common, children=children)
        except ValidationError as e:
            self._warn(f"Skipping group '{common['id']}': {e}")
            return
        self._primitives.insert(position, group)

    def _walk(self, parent: ET.Element, transforms: list[TransformOp], parent_id: Optional[str]) -> None:
        handlers = {
            "path": (PathPrimitive, self._path_fields),
            "circle": (CirclePrimitive, self._circle_fields),
            "ellipse": (EllipsePrimitive, self._ellipse_fields),
            "line": (LinePrimitive, self._line_fields),
            "polyline": (PolylinePrimitive, self._polyline_fields),
            "polygon": (PolygonPrimitive, self._polygon_fields),
            "rect": (RectPrimitive, self._rect_fields),
        }

        for element in parent:
            if not isinstance(element.tag, str):
                continue
            tag = local_name(element.tag)
            if tag in NON_RENDERING_TAGS:
                continue
            chain = transforms + parse_transform(element.get("transform"))

            if tag == "g":
                self._add_group(element, chain, parent_id)
            elif tag == "text":
                self._add_text(element, chain, parent_id)
            elif tag in handlers:
                model, fields_for = handlers[tag]
                self._add_primitive(element, tag, model, fields_for, chain, parent_id)
            else:
                self._walk(element, chain, parent_id)

    def extract(self, content: Union[str, bytes]) -> DrawingExtraction:
        """
        Extract all primitives from SVG markup.

        Args:
            content: SVG document as text or UTF-8 bytes

        Returns:
            DrawingExtraction with viewbox, primitives, class styles,
            metadata and warnings

        Raises:
            SVGParseError: If the markup is empty or not well-formed
        """
        self.warnings = []
        self._primitives = []
        self._counts = {}

        root = self._parse_document(content)
        self._used_ids = {
            el.get("id") for el in root.iter() if isinstance(el.tag, str) and el.get("id")
        }
        if local_name(root.tag) != "svg":
            self._warn(f"Root element is <{local_name(root.tag)}>, expected <svg>")

        self._rules = self._collect_class_rules(root) if self.options.parse_style_elements else {}
        viewbox = self._parse_viewbox(root)
        metadata = self._parse_metadata(root)

        self._walk(root, parse_transform(root.get("transform")), None)

        logger.info(
            "Extracted %d primitives (%d warnings)", len(self._primitives), len(self.warnings)
        )
        return DrawingExtraction(
            viewbox=viewbox,
            primitives=self._primitives,
            class_styles=self._rules,
            metadata=metadata,
            warnings=list(self.warnings),
        )

    def get_warnings(self) -> list[str]:
        """Get list of warnings recorded during extraction."""
        return self.warnings.copy()
