"""
stagemap - editing core for maps of connected stages.

Keeps the stage list, the symmetric neighbor relation and the derived path
list consistent across adding, moving, relabeling, connecting and removing
stages.
"""

__version__ = "0.1.0"

from stagemap.editor import EditState, MapEditor
from stagemap.errors import AlreadyEditing, InvalidIndex, NotEditing, StageMapError
from stagemap.model import Path, PathTelemetry, Stage, StageTelemetry, stages_to_params
from stagemap.registry import StageRegistry

__all__ = [
    'MapEditor',
    'EditState',
    'StageRegistry',
    'Stage',
    'StageTelemetry',
    'Path',
    'PathTelemetry',
    'stages_to_params',
    'StageMapError',
    'InvalidIndex',
    'AlreadyEditing',
    'NotEditing',
]
