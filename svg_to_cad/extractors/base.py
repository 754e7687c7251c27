"""
Base protocol for drawing extraction.

All extractors take raw document text and return a DrawingExtraction in
the document's own user units.
"""

from abc import ABC, abstractmethod
from typing import Union

from ..geometry_models import DrawingExtraction


class SVGParseError(ValueError):
    """Raised when a document cannot be parsed at all."""


class DrawingExtractor(ABC):
    """
    Abstract base for extracting primitives from vector drawings.

    Implementations must never raise for a single malformed element; they
    record a warning and skip it. Only unparsable documents raise.
    """

    @abstractmethod
    def extract(self, content: Union[str, bytes]) -> DrawingExtraction:
        """
        Extract primitives from the document.

        Args:
            content: Document text (str) or UTF-8 encoded bytes.

        Returns:
            DrawingExtraction with primitives in document order.

        Raises:
            SVGParseError: If the document is not well-formed.
        """
        ...
