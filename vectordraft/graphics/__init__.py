"""
VectorDraft Graphics Module

Contains the interaction components:
- Tools: Drawing tools and the interaction base
- Selection: Selection, marquee and moving
- Transform: Rotation, corner radius and gradient handle dragging
- Node editing: Anchor and handle dragging on paths
- Gradient rasterization and the viewport
"""

from .gradient_raster import GradientRasterizer
from .viewport import Viewport
from .tools import (
    Interaction, InteractionState, DrawingTool, RectangleTool, FrameTool,
    EllipseTool, CircleTool, PolygonTool, StarTool, LineTool, TextTool,
    PenTool, ToolType, create_tool
)
from .selection import SelectionManager, MoveInteraction
from .transform import RotationInteraction, CornerRadiusInteraction, GradientHandleInteraction
from .node_edit import NodeEditor

__all__ = [
    # Rendering support
    'GradientRasterizer',
    'Viewport',
    # Tools
    'Interaction',
    'InteractionState',
    'DrawingTool',
    'RectangleTool',
    'FrameTool',
    'EllipseTool',
    'CircleTool',
    'PolygonTool',
    'StarTool',
    'LineTool',
    'TextTool',
    'PenTool',
    'ToolType',
    'create_tool',
    # Selection
    'SelectionManager',
    'MoveInteraction',
    # Transform
    'RotationInteraction',
    'CornerRadiusInteraction',
    'GradientHandleInteraction',
    'NodeEditor',
]
