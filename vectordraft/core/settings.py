"""
VectorDraft Editor Settings

Default values used when creating shapes, running interactions and
caching gradient rasters.
"""

from dataclasses import dataclass, field


STORAGE_KEY = "vectordraft.document"


@dataclass
class TextDefaults:
    """Typography applied to newly created text shapes."""
    font_family: str = "Inter"
    font_style: str = "normal"
    font_size: float = 24.0
    line_height: float = 1.2
    letter_spacing: float = 0.0
    align: str = "left"
    vertical_align: str = "top"
    text_decoration: str = "none"


@dataclass
class EditorSettings:
    """Editor-wide defaults."""
    history_capacity: int = 100
    raster_cache_size: int = 32

    # Interaction thresholds (world units)
    min_shape_size: float = 2.0
    hit_tolerance: float = 3.0
    close_path_distance: float = 8.0
    smooth_handle_offset: float = 40.0
    rotation_snap_degrees: float = 15.0

    # Style defaults
    default_fill: str = "#d9d9d9"
    default_stroke: str = "#000000"
    default_stroke_width: float = 0.0
    default_line_stroke_width: float = 1.0

    # Parametric shape defaults
    polygon_sides: int = 5
    star_points: int = 5
    star_inner_ratio: float = 0.5

    text: TextDefaults = field(default_factory=TextDefaults)
    storage_key: str = STORAGE_KEY

    def stroke_width_for(self, shape_type: str) -> float:
        """Default stroke width for a shape type tag."""
        if shape_type in ("line", "path"):
            return self.default_line_stroke_width
        return self.default_stroke_width
