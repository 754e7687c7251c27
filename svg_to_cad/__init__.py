"""
SVG to parametric CAD conversion.

Pipeline:
- SVGDrawingExtractor: SVG markup -> typed primitives
- GeometryNormalizer: primitives -> uniform segment paths
- FeatureSynthesizer: paths -> sketches and feature operations
- convert_svg: the three stages chained for one document
"""

from .cad_models import ConversionResult, Sketch, SynthesisResult
from .config import ConversionOptions
from .converter import convert_svg
from .extractors import SVGDrawingExtractor, SVGParseError
from .feature_synthesizer import FeatureSynthesizer
from .normalizer import GeometryNormalizer

__all__ = [
    "ConversionOptions",
    "ConversionResult",
    "FeatureSynthesizer",
    "GeometryNormalizer",
    "SVGDrawingExtractor",
    "SVGParseError",
    "Sketch",
    "SynthesisResult",
    "convert_svg",
]
