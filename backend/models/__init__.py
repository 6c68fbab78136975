"""Models module - Pydantic data models"""

from .change import (
    AIGeneratedChange,
    ChangeKind,
    ChangeLog,
    ChangeRecord,
    IDEPasteChange,
    PasteChange,
    Position,
    UndoRedoChange,
    UserEditChange,
)
from .diff import DiffIdentity, ProjectedRange, RenderSegment
from .annotate import (
    AnnotateRequest,
    AnnotateResponse,
    LineResult,
    LineSnapshot,
    RegionResult,
    RegionSnapshot,
    RegionState,
    StreamEvent,
)
from .settings import Settings

__all__ = [
    # Change log models
    "AIGeneratedChange",
    "ChangeKind",
    "ChangeLog",
    "ChangeRecord",
    "IDEPasteChange",
    "PasteChange",
    "Position",
    "UndoRedoChange",
    "UserEditChange",
    # Diff models
    "DiffIdentity",
    "ProjectedRange",
    "RenderSegment",
    # Annotate API models
    "AnnotateRequest",
    "AnnotateResponse",
    "LineResult",
    "LineSnapshot",
    "RegionResult",
    "RegionSnapshot",
    "RegionState",
    "StreamEvent",
    # Settings
    "Settings",
]
