"""
Drawing extractor abstraction for SVG-to-CAD.

Provides a common interface and implementations:
- DrawingExtractor: protocol for extract(content) -> DrawingExtraction
- SVGDrawingExtractor: ElementTree-based SVG walker
- SVGParseError: raised for unparsable documents
"""

from .base import DrawingExtractor, SVGParseError
from .svg_extractor import SVGDrawingExtractor

__all__ = [
    "DrawingExtractor",
    "SVGDrawingExtractor",
    "SVGParseError",
]
