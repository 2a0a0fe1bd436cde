"""
VectorDraft Text Measurement

Text layout is not part of the engine. Bounding boxes of text shapes
that do not carry an explicit size ask a measurer for their extents.
"""

from dataclasses import dataclass
from typing import Tuple

from .shapes import Text


@dataclass
class EstimatedTextMeasurer:
    """
    Rough metrics from character counts, used when no font backend is
    available.
    """
    average_char_width: float = 0.6

    def measure(self, shape: Text) -> Tuple[float, float]:
        """Return ``(width, height)`` for the text of ``shape``."""
        lines = shape.text.split("\n") if shape.text else [""]
        longest = max(len(line) for line in lines)
        char_width = shape.font_size * self.average_char_width + shape.letter_spacing
        width = max(0.0, longest * char_width)
        height = len(lines) * shape.font_size * shape.line_height
        return width, height


def text_extents(shape: Text, measurer=None) -> Tuple[float, float]:
    """Explicit width/height where set, measured values otherwise."""
    if shape.width > 0 and shape.height > 0:
        return shape.width, shape.height
    measured_w, measured_h = (measurer or EstimatedTextMeasurer()).measure(shape)
    width = shape.width if shape.width > 0 else measured_w
    height = shape.height if shape.height > 0 else measured_h
    return width, height
