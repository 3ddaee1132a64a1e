from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from . import trash as trash_ops
from .model import Folder, Identity, Note
from .tree import find_note

__all__ = ["Mode", "resolve_current"]

class Mode(str, Enum):
    ACTIVE = "active"
    TRASH = "trash"

def resolve_current(mode: Mode,
                    active_id: Optional[Identity],
                    trash_id: Optional[Identity],
                    notes: Tuple[Note, ...],
                    folders: Tuple[Folder, ...],
                    trash: Tuple[Note, ...]) -> Optional[Note]:
    """
    Resolve the note the user is looking at. Stale or missing ids resolve
    to None rather than raising.
    """
    if mode is Mode.TRASH:
        return trash_ops.find(trash, trash_id) if trash_id is not None else None
    return find_note(notes, folders, active_id) if active_id is not None else None
