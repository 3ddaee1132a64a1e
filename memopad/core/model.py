# memopad/core/model.py
'''
Copyright 2025 Aaron Vose (avose@aaronvose.net)
Licensed under the LGPL v2.1; see the file 'LICENSE' for details.
'''
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

__all__ = ["Identity", "Note", "Folder", "notes_from_list", "folders_from_list"]

Identity = int


def _identity(value: Any, what: str, optional: bool = False) -> Optional[Identity]:
    if value is None and optional:
        return None
    # bool is an int subclass but never a valid id
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{what} must be an integer, got {value!r}")
    return value


def _text(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a string, got {type(value).__name__}")
    return value


@dataclass(slots=True, frozen=True)
class Note:
    """
    A single memo.

    • id        – unique across notes and folders
    • folder_id – folder the note was created in; informational only, the
                  container that holds the note decides where it lives
    """
    id: Identity
    title: str = ""
    content: str = ""
    folder_id: Optional[Identity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "folderId": self.folder_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Note:
        if not isinstance(data, dict):
            raise ValueError(f"Malformed note record: {data!r}")
        return cls(
            id=_identity(data.get("id"), "note id"),
            title=_text(data.get("title"), "note title"),
            content=_text(data.get("content"), "note content"),
            folder_id=_identity(data.get("folderId"), "note folderId", optional=True),
        )


@dataclass(slots=True, frozen=True)
class Folder:
    """
    A named container. Owns its notes and subfolders exclusively; both are
    kept most-recent-first.
    """
    id: Identity
    name: str
    notes: Tuple[Note, ...] = ()
    subfolders: Tuple[Folder, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "notes": [n.to_dict() for n in self.notes],
            "subfolders": [f.to_dict() for f in self.subfolders],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Folder:
        if not isinstance(data, dict):
            raise ValueError(f"Malformed folder record: {data!r}")
        return cls(
            id=_identity(data.get("id"), "folder id"),
            name=_text(data.get("name"), "folder name"),
            notes=notes_from_list(data.get("notes") or []),
            subfolders=folders_from_list(data.get("subfolders") or []),
        )


def notes_from_list(items: Any) -> Tuple[Note, ...]:
    if not isinstance(items, list):
        raise ValueError(f"Expected a list of notes, got {type(items).__name__}")
    return tuple(Note.from_dict(item) for item in items)


def folders_from_list(items: Any) -> Tuple[Folder, ...]:
    if not isinstance(items, list):
        raise ValueError(f"Expected a list of folders, got {type(items).__name__}")
    return tuple(Folder.from_dict(item) for item in items)
