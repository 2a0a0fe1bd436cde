"""
VectorDraft Core Module

Contains the core data structures:
- Geometry and path primitives
- Shapes: Rectangle, Circle, Ellipse, Polygon, Star, Line, Path, Text,
  Frame, Group
- Gradients
- ShapeStore: Root container for all design data, with undo/redo
"""

# Import order matters - primitives first, then shapes, then the store
from .geometry import Point, BoundingBox
from .path import PathNodeType, PathPoint, Handles, build_path_string, round_path_corners
from .gradient import Gradient, GradientStop, GradientHandles, DEFAULT_GRADIENT, normalize_gradient
from .shapes import (
    Shape, SolidFill, GradientFill, Stroke, Rectangle, Frame, Group, Text,
    Circle, Ellipse, Polygon, RoundedPolygon, Star, Line, PathShape
)
from .history import HistoryManager
from .properties import PropertyEditRequest, StyleInput
from .settings import EditorSettings, STORAGE_KEY
from .document import Page, ShapeStore

__all__ = [
    'Point', 'BoundingBox',
    'PathNodeType', 'PathPoint', 'Handles', 'build_path_string', 'round_path_corners',
    'Gradient', 'GradientStop', 'GradientHandles', 'DEFAULT_GRADIENT', 'normalize_gradient',
    'Shape', 'SolidFill', 'GradientFill', 'Stroke',
    'Rectangle', 'Frame', 'Group', 'Text', 'Circle', 'Ellipse',
    'Polygon', 'RoundedPolygon', 'Star', 'Line', 'PathShape',
    'HistoryManager',
    'PropertyEditRequest', 'StyleInput',
    'EditorSettings', 'STORAGE_KEY',
    'Page', 'ShapeStore',
]
