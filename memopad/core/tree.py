from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterator, Optional, Tuple

from .errors import InvalidInput, NotFound
from .model import Folder, Identity, Note

__all__ = [
    "find_note",
    "find_folder",
    "iter_folders",
    "iter_notes",
    "update_note",
    "insert_note",
    "remove_note",
    "move_note",
    "insert_folder",
    "rename_folder",
    "remove_folder",
    "move_folder",
]

Notes = Tuple[Note, ...]
Folders = Tuple[Folder, ...]

# Every mutating function here is pure: it returns new tuples and leaves its
# inputs untouched. Only the folders on the path from the root to the changed
# node are rebuilt; untouched subtrees are shared with the previous version.

def _index_of(items: tuple, item_id: Identity) -> int:
    """Find index of the item with the given id. Returns -1 if not found."""
    return next((i for i, item in enumerate(items) if item.id == item_id), -1)

def _replace_at(items: tuple, index: int, value) -> tuple:
    return items[:index] + (value,) + items[index + 1:]

def _drop_at(items: tuple, index: int) -> tuple:
    return items[:index] + items[index + 1:]

def _rebuild_where(folders: Folders, match: Callable[[Folder], bool],
                   fn: Callable[[Folder], Folder]) -> Optional[Folders]:
    """
    Depth-first pre-order search for the first folder satisfying `match`,
    replacing it with fn(folder) and rebuilding its ancestors.
    Returns None if no folder matched.
    """
    for i, folder in enumerate(folders):
        if match(folder):
            return _replace_at(folders, i, fn(folder))
        sub = _rebuild_where(folder.subfolders, match, fn)
        if sub is not None:
            return _replace_at(folders, i, replace(folder, subfolders=sub))
    return None

def _holds_note(note_id: Identity) -> Callable[[Folder], bool]:
    return lambda folder: _index_of(folder.notes, note_id) >= 0

def _is_folder(folder_id: Identity) -> Callable[[Folder], bool]:
    return lambda folder: folder.id == folder_id

def _holds_subfolder(folder_id: Identity) -> Callable[[Folder], bool]:
    return lambda folder: _index_of(folder.subfolders, folder_id) >= 0

# ---------- Queries ----------

def find_note(notes: Notes, folders: Folders, note_id: Identity) -> Optional[Note]:
    """
    Top-level notes first, then each folder's own notes before its
    subfolders, depth-first.
    """
    idx = _index_of(notes, note_id)
    if idx >= 0:
        return notes[idx]
    for folder in iter_folders(folders):
        idx = _index_of(folder.notes, note_id)
        if idx >= 0:
            return folder.notes[idx]
    return None

def find_folder(folders: Folders, folder_id: Identity) -> Optional[Folder]:
    for folder in iter_folders(folders):
        if folder.id == folder_id:
            return folder
    return None

def iter_folders(folders: Folders) -> Iterator[Folder]:
    """Yield every folder, pre-order."""
    for folder in folders:
        yield folder
        yield from iter_folders(folder.subfolders)

def iter_notes(notes: Notes, folders: Folders) -> Iterator[Note]:
    """Yield every active note: top-level first, then folder by folder."""
    yield from notes
    for folder in iter_folders(folders):
        yield from folder.notes

# ---------- Notes ----------

def update_note(notes: Notes, folders: Folders, note_id: Identity, *,
                title: Optional[str] = None,
                content: Optional[str] = None) -> Tuple[Notes, Folders]:
    """
    Merge title/content into the note wherever it lives.
    Fields left as None are kept. Raises NotFound.
    """
    fields = {k: v for k, v in (("title", title), ("content", content)) if v is not None}

    idx = _index_of(notes, note_id)
    if idx >= 0:
        return _replace_at(notes, idx, replace(notes[idx], **fields)), folders

    def _apply(folder: Folder) -> Folder:
        i = _index_of(folder.notes, note_id)
        return replace(folder, notes=_replace_at(folder.notes, i, replace(folder.notes[i], **fields)))

    new_folders = _rebuild_where(folders, _holds_note(note_id), _apply)
    if new_folders is None:
        raise NotFound(f"note id={note_id} not found")
    return notes, new_folders

def insert_note(notes: Notes, folders: Folders, note: Note,
                folder_id: Optional[Identity] = None) -> Tuple[Notes, Folders]:
    """
    Prepend note to the folder with folder_id (any depth), or to the
    top-level list when folder_id is None. Raises NotFound for an unknown folder.
    """
    if folder_id is None:
        return (note,) + notes, folders

    new_folders = _rebuild_where(
        folders, _is_folder(folder_id),
        lambda folder: replace(folder, notes=(note,) + folder.notes),
    )
    if new_folders is None:
        raise NotFound(f"folder id={folder_id} not found")
    return notes, new_folders

def remove_note(notes: Notes, folders: Folders,
                note_id: Identity) -> Tuple[Notes, Folders, Note, bool]:
    """
    Detach a note from whichever container holds it.
    Returns (notes, folders, removed_note, was_top_level). Raises NotFound.
    """
    idx = _index_of(notes, note_id)
    if idx >= 0:
        return _drop_at(notes, idx), folders, notes[idx], True

    removed = []

    def _drop(folder: Folder) -> Folder:
        i = _index_of(folder.notes, note_id)
        removed.append(folder.notes[i])
        return replace(folder, notes=_drop_at(folder.notes, i))

    new_folders = _rebuild_where(folders, _holds_note(note_id), _drop)
    if new_folders is None:
        raise NotFound(f"note id={note_id} not found")
    return notes, new_folders, removed[0], False

def move_note(notes: Notes, folders: Folders, note_id: Identity,
              target_folder_id: Optional[Identity] = None) -> Tuple[Notes, Folders]:
    """
    Move a note to the front of target_folder_id's notes (top level if None).
    The note's folder_id follows the move.
    """
    if target_folder_id is not None and find_folder(folders, target_folder_id) is None:
        raise NotFound(f"folder id={target_folder_id} not found")

    notes, folders, note, _ = remove_note(notes, folders, note_id)
    moved = replace(note, folder_id=target_folder_id)
    return insert_note(notes, folders, moved, target_folder_id)

# ---------- Folders ----------

def insert_folder(folders: Folders, folder: Folder,
                  parent_id: Optional[Identity] = None) -> Folders:
    """Prepend folder under parent_id (any depth), or at the top level."""
    if parent_id is None:
        return (folder,) + folders

    new_folders = _rebuild_where(
        folders, _is_folder(parent_id),
        lambda parent: replace(parent, subfolders=(folder,) + parent.subfolders),
    )
    if new_folders is None:
        raise NotFound(f"folder id={parent_id} not found")
    return new_folders

def rename_folder(folders: Folders, folder_id: Identity, name: str) -> Folders:
    """
    Rename a folder at any depth. Blank names raise InvalidInput and
    unknown ids raise NotFound.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidInput("folder name must not be blank")

    new_folders = _rebuild_where(
        folders, _is_folder(folder_id),
        lambda folder: replace(folder, name=name),
    )
    if new_folders is None:
        raise NotFound(f"folder id={folder_id} not found")
    return new_folders

def remove_folder(folders: Folders, folder_id: Identity,
                  parent_id: Optional[Identity] = None) -> Tuple[Folders, Folder]:
    """
    Hard-delete a folder together with everything it owns.

    With no parent_id only the top-level list is searched; otherwise the
    folder must be a direct child of parent_id.
    Returns (folders, removed_folder). Raises NotFound.
    """
    if parent_id is None:
        idx = _index_of(folders, folder_id)
        if idx < 0:
            raise NotFound(f"top-level folder id={folder_id} not found")
        return _drop_at(folders, idx), folders[idx]

    removed = []

    def _drop(parent: Folder) -> Folder:
        i = _index_of(parent.subfolders, folder_id)
        if i < 0:
            raise NotFound(f"folder id={folder_id} is not a child of id={parent_id}")
        removed.append(parent.subfolders[i])
        return replace(parent, subfolders=_drop_at(parent.subfolders, i))

    new_folders = _rebuild_where(folders, _is_folder(parent_id), _drop)
    if new_folders is None:
        raise NotFound(f"folder id={parent_id} not found")
    return new_folders, removed[0]

def move_folder(folders: Folders, folder_id: Identity,
                target_parent_id: Optional[Identity] = None) -> Folders:
    """
    Move a folder subtree under target_parent_id (top level if None).
    Moving a folder into itself or into one of its descendants raises InvalidInput.
    """
    folder = find_folder(folders, folder_id)
    if folder is None:
        raise NotFound(f"folder id={folder_id} not found")

    if target_parent_id is not None:
        if target_parent_id == folder_id or find_folder(folder.subfolders, target_parent_id) is not None:
            raise InvalidInput(f"cannot move folder id={folder_id} into its own subtree")
        if find_folder(folders, target_parent_id) is None:
            raise NotFound(f"folder id={target_parent_id} not found")

    idx = _index_of(folders, folder_id)
    if idx >= 0:
        detached = _drop_at(folders, idx)
    else:
        detached = _rebuild_where(
            folders, _holds_subfolder(folder_id),
            lambda parent: replace(
                parent,
                subfolders=_drop_at(parent.subfolders, _index_of(parent.subfolders, folder_id)),
            ),
        )
    return insert_folder(detached, folder, target_parent_id)
