"""
Directive mini-language embedded in element names.

A name such as "Base#extrude=10mm#const" splits on '#': the first part is
the display name, every following token is a directive:

  const / construction   construction geometry
  closed                 force the path closed
  extrude=<n>[mm|in]     positive extrude depth, unit defaults to the target unit
  revolve=<n>[deg]       revolve angle in degrees, 0 for a full turn
  pattern=<int>x<int>    linear pattern counts
  mirror                 mirror feature
  dim=<n>                dimension value
  plane=top|front|right  sketch plane
  sketch=<key>           merge paths sharing the key into one sketch

Tokens are trimmed and matched case-insensitively; unknown or malformed
tokens are ignored.
"""

import logging
import math
import re
from typing import Optional

from .geometry_models import (
    DirectiveRecord,
    ExtrudeDirective,
    PatternDirective,
    RevolveDirective,
)

logger = logging.getLogger(__name__)

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:e[-+]?\d+)?"

_EXTRUDE_RE = re.compile(rf"^extrude\s*=\s*({_NUMBER})\s*(mm|in|inch)?$")
_REVOLVE_RE = re.compile(rf"^revolve\s*=\s*({_NUMBER})\s*(deg)?$")
_PATTERN_RE = re.compile(r"^pattern\s*=\s*(\d+)\s*x\s*(\d+)$")
_DIM_RE = re.compile(rf"^dim\s*=\s*({_NUMBER})\s*(mm|in|inch)?$")
_PLANE_RE = re.compile(r"^plane\s*=\s*(top|front|right)$")
_SKETCH_RE = re.compile(r"^sketch\s*=\s*(\S.*)$")

_CONSTRUCTION_TOKENS = ("const", "construction")


def _finite(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} is not finite")
    return value


def _directive_units(target_units: str) -> str:
    return "in" if target_units == "inch" else "mm"


def split_name(name: Optional[str]) -> tuple[str, list[str]]:
    """Split a name into its display part and normalized directive tokens."""
    parts = (name or "").split("#")
    tokens = [t.strip().lower() for t in parts[1:]]
    return parts[0].strip(), [t for t in tokens if t]


def parse_directives(name: Optional[str], target_units: str = "mm") -> tuple[str, DirectiveRecord]:
    """
    Parse a primitive name into (display name, directive record).

    Args:
        name: Raw element name, possibly carrying '#' directives
        target_units: "mm" or "inch"; default unit of extrude depths

    Returns:
        Tuple of the directive-free display name and the parsed record
    """
    display, tokens = split_name(name)
    values: dict = {}

    for token in tokens:
        try:
            if not _apply_token(token, values, target_units):
                logger.debug("Ignoring unknown directive %r in %r", token, name)
        except ValueError as e:
            logger.debug("Ignoring malformed directive %r: %s", token, e)

    return display, DirectiveRecord(**values)


def _apply_token(token: str, values: dict, target_units: str) -> bool:
    """Record one directive token; returns False when it is not recognized."""
    if token in _CONSTRUCTION_TOKENS:
        values["construction"] = True
    elif token == "closed":
        values["closed"] = True
    elif token == "mirror":
        values["mirror"] = True
    elif match := _EXTRUDE_RE.match(token):
        units = match.group(2) or _directive_units(target_units)
        values["extrude"] = ExtrudeDirective(
            depth=_finite(match.group(1)),
            units="in" if units == "inch" else units,
        )
    elif match := _REVOLVE_RE.match(token):
        # A zero angle means a full revolution
        values["revolve"] = RevolveDirective(angle=_finite(match.group(1)) or 360.0)
    elif match := _PATTERN_RE.match(token):
        values["pattern"] = PatternDirective(x=int(match.group(1)), y=int(match.group(2)))
    elif match := _DIM_RE.match(token):
        values["dimension"] = _finite(match.group(1))
    elif match := _PLANE_RE.match(token):
        values["plane"] = match.group(1).capitalize()
    elif match := _SKETCH_RE.match(token):
        values["sketch"] = match.group(1).strip()
    else:
        return False
    return True


def has_construction_tag(name: Optional[str], element_id: Optional[str]) -> bool:
    """Name or id conventions that mark construction geometry."""
    name = (name or "").lower()
    element_id = (element_id or "").lower()
    return (
        name.endswith("#const")
        or "#construction" in name
        or element_id.endswith("_construction")
        or "_const_" in element_id
    )
