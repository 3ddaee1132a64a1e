from __future__ import annotations

from typing import Optional, Tuple

from .errors import NotFound
from .model import Identity, Note

__all__ = ["add", "find", "take"]

Trash = Tuple[Note, ...]

# The trash is flat: no folders, most recently deleted first.

def add(trash: Trash, note: Note) -> Trash:
    return (note,) + trash

def find(trash: Trash, note_id: Identity) -> Optional[Note]:
    return next((n for n in trash if n.id == note_id), None)

def take(trash: Trash, note_id: Identity) -> Tuple[Trash, Note]:
    """Remove a note from the trash. Returns (trash, note). Raises NotFound."""
    for i, note in enumerate(trash):
        if note.id == note_id:
            return trash[:i] + trash[i + 1:], note
    raise NotFound(f"trashed note id={note_id} not found")
