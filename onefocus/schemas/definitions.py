"""Schema definitions for the system.

This module is the single source of truth for the focus history schema
and the records exchanged between the store, the window bridge and the
resolver. To change the table structure:
1. Update the column definitions in this file
2. Add a migration under schemas/migrations
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

MAX_ROWS = 500

FOCUS_TABLE = "window_focus"
FOCUS_INDEX = "idx_window_focus_focused_at"

# Column definitions, in table order. app_id is added by migration 002.
FOCUS_COLUMNS: Dict[str, str] = {
    "id": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "session_id": "TEXT NOT NULL",
    "window_title": "TEXT",
    "workspace_name": "TEXT",
    "workspace_path": "TEXT",
    "active_file": "TEXT",
    "focused_at": "INTEGER NOT NULL",
    "app_id": "TEXT",
}

BASE_COLUMNS: List[str] = [name for name in FOCUS_COLUMNS if name != "app_id"]

RECORD_COLUMNS: List[str] = [name for name in FOCUS_COLUMNS if name != "id"]


class FocusEvent(BaseModel):
    """One persisted record of an editor window becoming active."""
    session_id: str = Field(..., description="Host process instance that produced the event")
    window_title: str = Field(..., description="Raw window title")
    workspace_name: Optional[str] = Field(None, description="Trailing workspace label parsed from the title")
    workspace_path: Optional[str] = Field(None, description="Filesystem path of the active project root")
    active_file: Optional[str] = Field(None, description="Path of the file open at focus time")
    focused_at: int = Field(..., description="Milliseconds since epoch, assigned by the store")
    app_id: Optional[str] = Field(None, description="Supported application that produced the event")

    @classmethod
    def from_row(cls, row: Any) -> "FocusEvent":
        """Builds an event from a sqlite3.Row or mapping."""
        return cls(**{column: row[column] for column in RECORD_COLUMNS})


@dataclass(frozen=True)
class SupportedApplication:
    app_id: str
    process_name: str


@dataclass(frozen=True)
class CandidateWindow:
    """A live window seen while resolving a focus target."""
    app_id: str
    process_name: str
    title: str


@dataclass(frozen=True)
class FrontmostWindow:
    title: str
    app_id: str


@dataclass(frozen=True)
class ProcessState:
    exists: bool
    frontmost: bool = False
    window_count: int = 0


@dataclass(frozen=True)
class WindowTarget:
    """What to look for when raising a window."""
    title: Optional[str] = None
    workspace_name_hint: Optional[str] = None
    preferred_app_id: Optional[str] = None


@dataclass
class FocusOutcome:
    """Result of trying to re-focus the last relevant window.

    ``focused`` is False with ``record`` None when history has nothing to offer.
    """
    focused: bool
    message: str
    record: Optional[FocusEvent] = None
    window: Optional[CandidateWindow] = None
