"""
Gradient Rasterization Module

Angular and diamond gradients have no native drawing primitive, so they
are sampled per pixel into an RGBA bitmap. Bitmaps are memoized by the
parameters that affect their pixels.
"""

from collections import OrderedDict
from typing import Optional, Tuple
import logging
import math

import numpy as np
from PIL import Image

from ..core.geometry import BoundingBox
from ..core.gradient import (
    ANGULAR, DIAMOND, DEFAULT_STOPS, Gradient, hex_to_rgb, normalize_gradient,
    resolve_gradient_handles
)

logger = logging.getLogger(__name__)


DEFAULT_CACHE_SIZE = 32


def _round(value: float, places: int = 4) -> float:
    return round(float(value), places)


def cache_key(gradient: Gradient, width: int, height: int) -> Tuple:
    """Everything that changes the pixels of a rasterized gradient."""
    handles = gradient.handles
    stops = tuple((_round(s.position), s.color, _round(s.opacity)) for s in gradient.stops)
    return (
        gradient.type,
        int(width),
        int(height),
        (_round(handles.start.x), _round(handles.start.y),
         _round(handles.end.x), _round(handles.end.y)),
        _round(gradient.angle, 2),
        stops,
    )


def gradient_ratios(gradient: Gradient, width: int, height: int) -> np.ndarray:
    """
    Ramp position (0..1) of every pixel centre.

    Angular: angle between the axis and the pixel, measured from the
    start handle, as a fraction of a full turn.
    Diamond: ``(|along| + |across|) / axis length``, clamped to 1.
    """
    start, end = resolve_gradient_handles(gradient, BoundingBox(0.0, 0.0, width, height))
    xs = np.arange(width, dtype=np.float64) + 0.5
    ys = np.arange(height, dtype=np.float64) + 0.5
    px, py = np.meshgrid(xs, ys)
    dx = px - start.x
    dy = py - start.y
    axis_x = end.x - start.x
    axis_y = end.y - start.y

    if gradient.type == ANGULAR:
        base = math.atan2(axis_y, axis_x)
        return np.mod((np.arctan2(dy, dx) - base) / (2 * math.pi), 1.0)

    length = math.hypot(axis_x, axis_y)
    if length == 0:
        return np.zeros((height, width))
    ux, uy = axis_x / length, axis_y / length
    along = dx * ux + dy * uy
    across = dx * -uy + dy * ux
    return np.clip((np.abs(along) + np.abs(across)) / length, 0.0, 1.0)


def sample_stops(gradient: Gradient, ratios: np.ndarray) -> np.ndarray:
    """Vectorized stop interpolation; returns an RGBA uint8 array."""
    stops = sorted(gradient.stops or DEFAULT_STOPS, key=lambda s: s.position)
    positions = np.array([s.position for s in stops], dtype=np.float64)
    fallback = hex_to_rgb(DEFAULT_STOPS[0].color)
    colors = np.array([hex_to_rgb(s.color) or fallback for s in stops], dtype=np.float64)
    alphas = np.array([s.opacity for s in stops], dtype=np.float64) * 255.0

    t = np.clip(ratios, 0.0, 1.0)
    rgba = np.empty(t.shape + (4,), dtype=np.uint8)
    for channel in range(3):
        values = np.interp(t, positions, colors[:, channel])
        rgba[..., channel] = np.clip(np.floor(values + 0.5), 0, 255)
    rgba[..., 3] = np.clip(np.floor(np.interp(t, positions, alphas) + 0.5), 0, 255)
    return rgba


class GradientRasterizer:
    """
    Rasterizes angular/diamond gradients with a bounded memo cache.

    Least-recently-used: a cache hit refreshes an entry, and the entry
    unused for longest is evicted once more than ``max_entries`` are held.
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE):
        self.max_entries = max(1, int(max_entries))
        self._cache: "OrderedDict[Tuple, np.ndarray]" = OrderedDict()

    def __len__(self):
        return len(self._cache)

    def rasterize(self, gradient, width: float, height: float) -> Optional[np.ndarray]:
        """
        Sample ``gradient`` over a ``width`` x ``height`` box.

        Args:
            gradient: Gradient or mapping (normalized first)
            width: Box width in pixels (truncated to int)
            height: Box height in pixels (truncated to int)

        Returns:
            Array of shape (height, width, 4), or None for an empty box
        """
        w, h = int(width), int(height)
        if w <= 0 or h <= 0:
            return None
        normalized = normalize_gradient(gradient)
        key = cache_key(normalized, w, h)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached

        if normalized.type in (ANGULAR, DIAMOND):
            ratios = gradient_ratios(normalized, w, h)
        else:
            ratios = self._axis_ratios(normalized, w, h)
        bitmap = sample_stops(normalized, ratios)
        bitmap.setflags(write=False)

        self._cache[key] = bitmap
        while len(self._cache) > self.max_entries:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted gradient raster %s %dx%d", evicted[0], evicted[1], evicted[2])
        return bitmap

    @staticmethod
    def _axis_ratios(gradient: Gradient, width: int, height: int) -> np.ndarray:
        # Linear/radial fallback for callers without native gradient support
        start, end = resolve_gradient_handles(gradient, BoundingBox(0.0, 0.0, width, height))
        xs = np.arange(width, dtype=np.float64) + 0.5
        ys = np.arange(height, dtype=np.float64) + 0.5
        px, py = np.meshgrid(xs, ys)
        axis_x = end.x - start.x
        axis_y = end.y - start.y
        length_sq = axis_x * axis_x + axis_y * axis_y
        if length_sq == 0:
            return np.zeros((height, width))
        if gradient.type == 'radial':
            return np.hypot(px - start.x, py - start.y) / math.sqrt(length_sq)
        return ((px - start.x) * axis_x + (py - start.y) * axis_y) / length_sq

    def to_image(self, gradient, width: float, height: float) -> Optional[Image.Image]:
        """Rasterize into a PIL RGBA image."""
        bitmap = self.rasterize(gradient, width, height)
        if bitmap is None:
            return None
        return Image.fromarray(np.ascontiguousarray(bitmap))

    def clear(self):
        """Drop every cached bitmap."""
        self._cache.clear()
