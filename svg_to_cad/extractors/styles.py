"""
Style resolution for SVG elements.

Styles are resolved by folding an ordered list of plain mappings, lowest
priority first; later sources override earlier ones:

    defaults -> class rules -> inline style="" -> presentation attributes

Only class selectors from <style> blocks are understood.
"""

import re
from functools import reduce
from typing import Iterable, Mapping, Optional

from ..geometry_models import StyleRecord

# Presentation attributes consulted directly on the element
STYLE_ATTRIBUTES = (
    "stroke",
    "stroke-width",
    "stroke-opacity",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-dasharray",
    "fill",
    "fill-opacity",
    "fill-rule",
    "opacity",
)

_RULE_RE = re.compile(r"([^{}]+)\{([^}]*)\}")
_CLASS_SELECTOR_RE = re.compile(r"^\.([A-Za-z0-9_-]+)$")
_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def parse_declarations(text: Optional[str]) -> dict[str, str]:
    """Parse 'a: b; c: d' into a mapping."""
    declarations: dict[str, str] = {}
    for item in (text or "").split(";"):
        prop, sep, value = item.partition(":")
        if not sep:
            continue
        prop, value = prop.strip().lower(), value.strip()
        if prop and value:
            declarations[prop] = value
    return declarations


def parse_class_rules(css: str) -> dict[str, dict[str, str]]:
    """
    Parse class rules from stylesheet text.

    Grouped selectors (".a, .b") apply to each class. Selectors other than
    plain classes are skipped. Repeated classes merge in stylesheet order.
    """
    rules: dict[str, dict[str, str]] = {}
    for selectors, body in _RULE_RE.findall(_COMMENT_RE.sub("", css)):
        declarations = parse_declarations(body)
        for selector in selectors.split(","):
            match = _CLASS_SELECTOR_RE.match(selector.strip())
            if match:
                rules.setdefault(match.group(1), {}).update(declarations)
    return rules


def presentation_attributes(attrib: Mapping[str, str]) -> dict[str, str]:
    return {name: attrib[name].strip() for name in STYLE_ATTRIBUTES if name in attrib}


def class_declarations(class_attr: Optional[str], rules: Mapping[str, dict[str, str]]) -> dict[str, str]:
    """Declarations of every class named in the attribute, in stylesheet order."""
    classes = set((class_attr or "").split())
    merged: dict[str, str] = {}
    for name, declarations in rules.items():
        if name in classes:
            merged.update(declarations)
    return merged


def fold_styles(sources: Iterable[Mapping[str, str]]) -> dict[str, str]:
    """Merge style sources left to right."""
    return reduce(lambda acc, source: {**acc, **source}, sources, {})


def default_style(merged: Mapping[str, str], stroke: str, fill: str) -> dict[str, str]:
    """Defaults: the stroke colour only applies when neither stroke nor fill is set."""
    defaults = {"fill": fill}
    if "stroke" not in merged and "fill" not in merged:
        defaults["stroke"] = stroke
    return defaults


def _number(value: Optional[str], default: float) -> float:
    match = _NUMBER_RE.match((value or "").strip())
    return float(match.group()) if match else default


def build_style_record(properties: Mapping[str, str], default_stroke_width: float = 1.0) -> StyleRecord:
    dasharray = properties.get("stroke-dasharray", "").strip()
    return StyleRecord(
        stroke=properties.get("stroke", "none"),
        fill=properties.get("fill", "none"),
        stroke_width=abs(_number(properties.get("stroke-width"), default_stroke_width)),
        stroke_opacity=_number(properties.get("stroke-opacity"), 1.0),
        fill_opacity=_number(properties.get("fill-opacity"), 1.0),
        stroke_dasharray=None if dasharray.lower() in ("", "none") else dasharray,
        properties=dict(properties),
    )


def resolve_style(
    attrib: Mapping[str, str],
    rules: Mapping[str, dict[str, str]],
    default_stroke: str,
    default_fill: str,
    default_stroke_width: float = 1.0,
) -> StyleRecord:
    """Resolve the effective style of one element."""
    sources = [
        class_declarations(attrib.get("class"), rules),
        parse_declarations(attrib.get("style")),
        presentation_attributes(attrib),
    ]
    merged = fold_styles(sources)
    defaults = default_style(merged, default_stroke, default_fill)
    return build_style_record(fold_styles([defaults, merged]), default_stroke_width)
