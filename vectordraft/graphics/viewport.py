"""
Viewport Module

Maps between screen (pointer) coordinates and world (document)
coordinates, and runs the panning interaction.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.geometry import BoundingBox, Point, clamp


MIN_SCALE = 0.02
MAX_SCALE = 256.0


@dataclass
class Viewport:
    """
    Screen = world * scale + offset.

    Scale is uniform; the offset is in screen pixels.
    """
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def __post_init__(self):
        self._pan_origin: Optional[Point] = None
        self._pan_offset: Optional[Point] = None

    def world_to_screen(self, point: Point) -> Point:
        return Point(point.x * self.scale + self.offset_x,
                     point.y * self.scale + self.offset_y)

    def screen_to_world(self, point: Point) -> Point:
        return Point((point.x - self.offset_x) / self.scale,
                     (point.y - self.offset_y) / self.scale)

    def world_box_to_screen(self, box: BoundingBox) -> BoundingBox:
        top_left = self.world_to_screen(Point(box.min_x, box.min_y))
        bottom_right = self.world_to_screen(Point(box.max_x, box.max_y))
        return BoundingBox(top_left.x, top_left.y, bottom_right.x, bottom_right.y)

    def screen_box_to_world(self, box: BoundingBox) -> BoundingBox:
        top_left = self.screen_to_world(Point(box.min_x, box.min_y))
        bottom_right = self.screen_to_world(Point(box.max_x, box.max_y))
        return BoundingBox(top_left.x, top_left.y, bottom_right.x, bottom_right.y)

    def zoom_at(self, screen_point: Point, factor: float) -> None:
        """Zoom by ``factor`` keeping the world point under the cursor fixed."""
        anchor = self.screen_to_world(screen_point)
        self.scale = clamp(self.scale * factor, MIN_SCALE, MAX_SCALE)
        self.offset_x = screen_point.x - anchor.x * self.scale
        self.offset_y = screen_point.y - anchor.y * self.scale

    # Panning -----------------------------------------------------------------

    @property
    def is_panning(self) -> bool:
        return self._pan_origin is not None

    def start_pan(self, screen_point: Point) -> bool:
        if self._pan_origin is not None:
            return False
        self._pan_origin = screen_point
        self._pan_offset = Point(self.offset_x, self.offset_y)
        return True

    def update_pan(self, screen_point: Point) -> None:
        if self._pan_origin is None:
            return
        self.offset_x = self._pan_offset.x + screen_point.x - self._pan_origin.x
        self.offset_y = self._pan_offset.y + screen_point.y - self._pan_origin.y

    def finish_pan(self, screen_point: Optional[Point] = None) -> None:
        if screen_point is not None:
            self.update_pan(screen_point)
        self._pan_origin = None
        self._pan_offset = None

    def cancel_pan(self) -> None:
        if self._pan_offset is not None:
            self.offset_x = self._pan_offset.x
            self.offset_y = self._pan_offset.y
        self._pan_origin = None
        self._pan_offset = None
