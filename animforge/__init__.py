"""
animforge - vector animation editor core.

Scene models, keyframe animation, timeline playback and Lottie
import/export.
"""

from .config import Settings, settings
from .errors import AnimforgeError, DocumentFormatError, SVGParseError
from .scene import Layer, Project
from .animation import (
    AnimatableProperty,
    EasingType,
    Keyframe,
    PlaybackConfig,
    PlaybackController,
    PlaybackState,
    value_at,
)
from .store import ProjectStore
from .formats import export_project, export_to_json, import_document, import_from_json
from .parsers import parse_svg

__version__ = "0.1.0"

__all__ = [
    'Settings',
    'settings',
    'AnimforgeError',
    'DocumentFormatError',
    'SVGParseError',
    'Layer',
    'Project',
    'AnimatableProperty',
    'EasingType',
    'Keyframe',
    'PlaybackConfig',
    'PlaybackController',
    'PlaybackState',
    'value_at',
    'ProjectStore',
    'export_project',
    'export_to_json',
    'import_document',
    'import_from_json',
    'parse_svg',
    '__version__',
]
