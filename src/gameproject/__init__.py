"""Core package for editing game project documents through sessions."""

from .errors import (
    DuplicateNameError,
    IndexOutOfRangeError,
    NotFoundError,
    ObjectNotFoundError,
    ProjectError,
    ProjectFormatError,
    ProjectIOError,
    SessionConflictError,
    SessionNotFoundError,
    UnsupportedOperationError,
)
from .variables import Variable, VariableSummary, VariableType, VariablesContainer
from .instructions import Instruction, InstructionSpec, InstructionsList
from .events import (
    Event,
    EventSummary,
    EventType,
    EventsList,
    format_event_path,
    parse_event_path,
)
from .objects import BEHAVIOR_DEFAULTS, Behavior, Effect, GameObject, ObjectGroup
from .instances import InitialInstance
from .layers import BASE_LAYER, Color, Layer
from .resources import Resource, ResourceKind
from .scene import Scene
from .project import ExternalEvents, Project
from .persistence import ProjectStore
from .session import (
    EventTarget,
    InstanceBatchResult,
    ObjectDeletion,
    ProjectInfo,
    ProjectSession,
    SaveResult,
    SceneDeletion,
    VariableScope,
)
from .manager import CloseAllResult, ProjectManager, SessionSummary
from .logging_config import setup_logging

__all__ = [
    "ProjectManager",
    "ProjectSession",
    "ProjectStore",
    "SessionSummary",
    "CloseAllResult",
    "Project",
    "Scene",
    "ExternalEvents",
    "GameObject",
    "Behavior",
    "BEHAVIOR_DEFAULTS",
    "Effect",
    "ObjectGroup",
    "InitialInstance",
    "Layer",
    "BASE_LAYER",
    "Color",
    "Resource",
    "ResourceKind",
    "Variable",
    "VariableType",
    "VariableSummary",
    "VariablesContainer",
    "VariableScope",
    "Instruction",
    "InstructionSpec",
    "InstructionsList",
    "Event",
    "EventType",
    "EventSummary",
    "EventsList",
    "EventTarget",
    "format_event_path",
    "parse_event_path",
    "ProjectInfo",
    "SaveResult",
    "SceneDeletion",
    "ObjectDeletion",
    "InstanceBatchResult",
    "ProjectError",
    "DuplicateNameError",
    "NotFoundError",
    "IndexOutOfRangeError",
    "ObjectNotFoundError",
    "SessionConflictError",
    "SessionNotFoundError",
    "ProjectIOError",
    "ProjectFormatError",
    "UnsupportedOperationError",
    "setup_logging",
]
