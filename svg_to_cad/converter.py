"""
SVG-to-CAD conversion pipeline.

Chains the three stages for one document:

    SVG text -> DrawingExtraction -> NormalizedPath list -> sketches/features

Each call builds fresh stage instances, so concurrent conversions share no
state.
"""

import logging
from typing import Optional, Union

from .cad_models import ConversionResult
from .config import ConversionOptions
from .extractors import SVGDrawingExtractor
from .feature_synthesizer import FeatureSynthesizer
from .normalizer import GeometryNormalizer

logger = logging.getLogger(__name__)


def convert_svg(
    content: Union[str, bytes],
    options: Optional[ConversionOptions] = None,
) -> ConversionResult:
    """
    Convert an SVG document into sketches and feature operations.

    Args:
        content: SVG markup as text or UTF-8 bytes
        options: Conversion options (defaults from the environment)

    Returns:
        ConversionResult with sketches, features and per-stage diagnostics

    Raises:
        SVGParseError: If the markup cannot be parsed
    """
    options = options or ConversionOptions()

    extractor = SVGDrawingExtractor(options)
    drawing = extractor.extract(content)

    normalizer = GeometryNormalizer(options)
    paths = normalizer.normalize(drawing)

    synthesizer = FeatureSynthesizer(options)
    synthesis = synthesizer.synthesize(paths)

    result = ConversionResult(
        units=options.target_units,
        sketches=synthesis.sketches,
        features=synthesis.features,
        warnings=drawing.warnings + synthesis.warnings,
        errors=normalizer.get_errors() + synthesizer.get_errors(),
        metadata={
            "title": drawing.metadata.title,
            "description": drawing.metadata.description,
            "viewbox": drawing.viewbox.model_dump(),
            "primitive_counts": drawing.primitive_counts,
            "path_count": len(paths),
        },
    )
    logger.info(
        "Converted SVG: %d sketches, %d features, %d errors",
        len(result.sketches),
        len(result.features),
        len(result.errors),
    )
    return result
