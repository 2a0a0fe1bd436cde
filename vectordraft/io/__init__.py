"""
VectorDraft I/O Module

Handles document persistence and export.
"""

from .storage import DocumentStorage, MemoryStorage, JsonFileStorage, QtSettingsStorage
from .project_io import (
    document_to_dict, dict_to_document, save_document, load_document,
    save_project, load_project
)
from .svg_export import SVGExporter, export_page_svg, export_svg

__all__ = [
    'DocumentStorage', 'MemoryStorage', 'JsonFileStorage', 'QtSettingsStorage',
    'document_to_dict', 'dict_to_document', 'save_document', 'load_document',
    'save_project', 'load_project',
    'SVGExporter', 'export_page_svg', 'export_svg',
]
