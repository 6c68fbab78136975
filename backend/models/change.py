"""Change log data models"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ChangeKind(str, Enum):
    """Provenance of a span of text"""

    AI_GENERATED = "AI_GENERATED"
    PASTE = "PASTE"
    IDE_PASTE = "IDE_PASTE"
    UNDO_REDO = "UNDO_REDO"
    USER_EDIT = "USER_EDIT"


class Position(BaseModel):
    """Zero-based line/character coordinate"""

    line: int
    character: int


class BaseChange(BaseModel):
    """Fields shared by every change record"""

    model_config = ConfigDict(populate_by_name=True)

    start: Position
    end: Position
    created_at: int = Field(0, alias="creationTimestamp")  # epoch ms
    author: str | None = None  # None means the local user

    @property
    def kind(self) -> ChangeKind:
        return ChangeKind(self.type)

    def touches(self, line_number: int) -> bool:
        return self.start.line <= line_number <= self.end.line


class AIGeneratedChange(BaseChange):
    type: Literal["AI_GENERATED"] = "AI_GENERATED"
    ai_name: str = Field("", alias="aiName")
    ai_model: str = Field("", alias="aiModel")
    ai_type: str = Field("", alias="aiType")  # inlineCompletion, applyPatch, ...


class PasteChange(BaseChange):
    type: Literal["PASTE"] = "PASTE"
    paste_url: str = Field("", alias="pasteUrl")
    paste_title: str = Field("", alias="pasteTitle")


class IDEPasteChange(BaseChange):
    """Paste from another file; url holds the repository, title the path in it"""

    type: Literal["IDE_PASTE"] = "IDE_PASTE"
    paste_url: str = Field("", alias="pasteUrl")
    paste_title: str = Field("", alias="pasteTitle")


class UndoRedoChange(BaseChange):
    type: Literal["UNDO_REDO"] = "UNDO_REDO"


class UserEditChange(BaseChange):
    type: Literal["USER_EDIT"] = "USER_EDIT"


ChangeRecord = Annotated[
    Union[AIGeneratedChange, PasteChange, IDEPasteChange, UndoRedoChange, UserEditChange],
    Field(discriminator="type"),
]

record_adapter = TypeAdapter(ChangeRecord)


class ChangeLog(BaseModel):
    """Merged provenance events for one file version"""

    version: int = 1
    changes: list[ChangeRecord] = []

