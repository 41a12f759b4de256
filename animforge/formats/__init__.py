"""
Interchange formats.

Lottie export and import:
    from animforge.formats import export_to_json, import_from_json

    text = export_to_json(project)
    result = import_from_json(text)
    if result.success:
        project = result.project
"""

from .lottie import (
    LottieAnimation,
    LottieKeyframe,
    LottieProperty,
    ShapeLayer,
    shape_from_dict,
)
from .path_data import BezierPath, parse_path_data, points_to_path, to_path_data
from .exporter import LottieExporter, export_project, export_to_dict, export_to_json, save_lottie
from .importer import ImportResult, LottieImporter, import_document, import_from_json, load_lottie

__all__ = [
    # Document models
    'LottieAnimation',
    'LottieKeyframe',
    'LottieProperty',
    'ShapeLayer',
    'shape_from_dict',
    # Path data
    'BezierPath',
    'parse_path_data',
    'to_path_data',
    'points_to_path',
    # Export
    'LottieExporter',
    'export_project',
    'export_to_dict',
    'export_to_json',
    'save_lottie',
    # Import
    'ImportResult',
    'LottieImporter',
    'import_document',
    'import_from_json',
    'load_lottie',
]
