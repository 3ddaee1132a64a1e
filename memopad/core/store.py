'''
Copyright 2025 Aaron Vose (avose@aaronvose.net)
Licensed under the LGPL v2.1; see the file 'LICENSE' for details.
'''
from __future__ import annotations

import traceback
from typing import Callable, List, Optional, Tuple

from memopad.utils.paste import html_to_markdown

from . import trash as trash_ops
from . import tree
from .errors import InvalidInput, NotFound
from .expansion import ExpansionState
from .ids import IdAllocator
from .log import Log
from .model import Folder, Identity, Note
from .selection import Mode, resolve_current
from .storage import DirectoryBackend, KeyValueBackend, PersistenceAdapter

__all__ = ["MemoStore"]

Listener = Callable[["MemoStore"], None]

# Tree operations that fail leave the partitions untouched. Folder chains
# deeper than the interpreter can recurse are refused the same way.
_REJECTED = (NotFound, InvalidInput, RecursionError)

class MemoStore:
    """
    Command/query facade over the memo partitions.

    State is three immutable partitions (top-level notes, folder tree,
    trash) plus selection and expansion. Every command either swaps in a
    complete new set of partitions or changes nothing; after a change all
    three partitions are written out and subscribers are notified.
    Commands referencing unknown ids or carrying rejected input are no-ops.
    """

    def __init__(self, backend: KeyValueBackend, *,
                 allocator: Optional[IdAllocator] = None,
                 default_folder_name: str = "New Folder"):
        self._persistence = PersistenceAdapter(backend)
        self._ids = allocator or IdAllocator()
        self._listeners: List[Listener] = []
        self.default_folder_name = default_folder_name

        self.notes, self.trash, self.folders = self._persistence.load()
        self._ids.observe(self._all_ids())

        self.expansion = ExpansionState()
        self.mode = Mode.ACTIVE
        self.active_id: Optional[Identity] = None
        self.trash_id: Optional[Identity] = None
        self.last_save_ok = True

    @classmethod
    def open(cls, store_dir: str, **kwargs) -> MemoStore:
        return cls(DirectoryBackend(store_dir), **kwargs)

    def _all_ids(self):
        yield from (n.id for n in tree.iter_notes(self.notes, self.folders))
        yield from (f.id for f in tree.iter_folders(self.folders))
        yield from (n.id for n in self.trash)

    # ---------- change plumbing ----------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                Log.debug(f"!ERROR! Listener failed:\n{traceback.format_exc()}", 0)

    def _commit(self, *, notes=None, folders=None, trash=None) -> None:
        """Swap in new partitions together, persist all three, notify."""
        if notes is not None:
            self.notes = notes
        if folders is not None:
            self.folders = folders
        if trash is not None:
            self.trash = trash
        self.last_save_ok = self._persistence.save(self.notes, self.trash, self.folders)
        self._notify()

    # ---------- queries ----------

    def get_current_entity(self) -> Optional[Note]:
        return resolve_current(self.mode, self.active_id, self.trash_id,
                               self.notes, self.folders, self.trash)

    def list_top_level(self) -> Tuple[Note, ...]:
        return self.notes

    def list_folders(self) -> Tuple[Folder, ...]:
        return self.folders

    def list_trash(self) -> Tuple[Note, ...]:
        return self.trash

    def is_expanded(self, folder_id: Identity) -> bool:
        return self.expansion.is_expanded(folder_id)

    def find_note(self, note_id: Identity) -> Optional[Note]:
        return tree.find_note(self.notes, self.folders, note_id)

    def find_folder(self, folder_id: Identity) -> Optional[Folder]:
        return tree.find_folder(self.folders, folder_id)

    # ---------- selection ----------

    def select_note(self, note_id: Optional[Identity]) -> None:
        self.active_id = note_id
        self._notify()

    def select_trashed_note(self, note_id: Optional[Identity]) -> None:
        self.trash_id = note_id
        self._notify()

    def set_mode(self, mode: Mode) -> None:
        mode = Mode(mode)
        if mode is self.mode:
            return
        self.mode = mode
        self.trash_id = None
        self._notify()

    def toggle_trash(self) -> Mode:
        self.set_mode(Mode.ACTIVE if self.mode is Mode.TRASH else Mode.TRASH)
        return self.mode

    # ---------- notes ----------

    def create_note(self, folder_id: Optional[Identity] = None) -> Optional[Identity]:
        """Create an empty note (inside folder_id if given) and select it."""
        note = Note(id=self._ids.next(), folder_id=folder_id)
        try:
            notes, folders = tree.insert_note(self.notes, self.folders, note, folder_id)
        except _REJECTED as e:
            Log.debug(f"create_note({folder_id=}) ignored: {e}", 1)
            return None

        self.active_id = note.id
        self.mode = Mode.ACTIVE
        self._commit(notes=notes, folders=folders)
        Log.debug(f"create_note() -> {note.id}", 1)
        return note.id

    def update_note(self, title: Optional[str] = None, content: Optional[str] = None) -> bool:
        """Merge title/content into the currently selected active note."""
        if self.mode is Mode.TRASH or self.active_id is None:
            return False
        try:
            notes, folders = tree.update_note(self.notes, self.folders, self.active_id,
                                              title=title, content=content)
        except _REJECTED as e:
            Log.debug(f"update_note() ignored: {e}", 1)
            return False

        self._commit(notes=notes, folders=folders)
        return True

    def delete_note(self, note_id: Identity) -> bool:
        """Move a note from wherever it lives to the front of the trash."""
        try:
            notes, folders, note, was_top_level = tree.remove_note(self.notes, self.folders, note_id)
        except _REJECTED as e:
            Log.debug(f"delete_note({note_id=}) ignored: {e}", 1)
            return False

        if was_top_level:
            self.active_id = notes[0].id if notes else None
        else:
            self.active_id = None
        self._commit(notes=notes, folders=folders, trash=trash_ops.add(self.trash, note))
        Log.debug(f"delete_note({note_id=}) -> trash", 1)
        return True

    def restore_note(self, note_id: Identity) -> Optional[Note]:
        """Move a trashed note to the front of the top-level list and select it."""
        try:
            trash, note = trash_ops.take(self.trash, note_id)
        except NotFound as e:
            Log.debug(f"restore_note({note_id=}) ignored: {e}", 1)
            return None

        notes, folders = tree.insert_note(self.notes, self.folders, note)
        self.mode = Mode.ACTIVE
        self.active_id = note.id
        self.trash_id = None
        self._commit(notes=notes, folders=folders, trash=trash)
        Log.debug(f"restore_note({note_id=})", 1)
        return note

    def move_note(self, note_id: Identity, target_folder_id: Optional[Identity] = None) -> bool:
        try:
            notes, folders = tree.move_note(self.notes, self.folders, note_id, target_folder_id)
        except _REJECTED as e:
            Log.debug(f"move_note({note_id=}, {target_folder_id=}) ignored: {e}", 1)
            return False

        self._commit(notes=notes, folders=folders)
        return True

    def paste_text(self, text: str) -> bool:
        """Append already-converted text to the current note's content."""
        if self.mode is Mode.TRASH or not text:
            return False
        current = self.get_current_entity()
        content = current.content + text if current else text
        return self.update_note(content=content)

    def paste_html(self, html: str) -> bool:
        return self.paste_text(html_to_markdown(html))

    # ---------- folders ----------

    def create_folder(self, parent_id: Optional[Identity] = None) -> Optional[Identity]:
        """Create an empty, expanded folder. Returns its id for an inline rename."""
        folder = Folder(id=self._ids.next(), name=self.default_folder_name)
        try:
            folders = tree.insert_folder(self.folders, folder, parent_id)
        except _REJECTED as e:
            Log.debug(f"create_folder({parent_id=}) ignored: {e}", 1)
            return None

        self.expansion.expand(folder.id)
        self._commit(folders=folders)
        Log.debug(f"create_folder() -> {folder.id}", 1)
        return folder.id

    def rename_folder(self, folder_id: Identity, name: str) -> bool:
        try:
            folders = tree.rename_folder(self.folders, folder_id, name)
        except _REJECTED as e:
            Log.debug(f"rename_folder({folder_id=}) ignored: {e}", 1)
            return False

        self._commit(folders=folders)
        return True

    def delete_folder(self, folder_id: Identity, parent_id: Optional[Identity] = None) -> bool:
        """Permanently delete a folder and everything in it. Nothing goes to trash."""
        try:
            folders, removed = tree.remove_folder(self.folders, folder_id, parent_id)
        except _REJECTED as e:
            Log.debug(f"delete_folder({folder_id=}, {parent_id=}) ignored: {e}", 1)
            return False

        for gone in tree.iter_folders((removed,)):
            self.expansion.discard(gone.id)
        self._commit(folders=folders)
        Log.debug(f"delete_folder({folder_id=})", 1)
        return True

    def move_folder(self, folder_id: Identity, target_parent_id: Optional[Identity] = None) -> bool:
        try:
            folders = tree.move_folder(self.folders, folder_id, target_parent_id)
        except _REJECTED as e:
            Log.debug(f"move_folder({folder_id=}, {target_parent_id=}) ignored: {e}", 1)
            return False

        self._commit(folders=folders)
        return True

    def toggle_folder_expanded(self, folder_id: Identity) -> bool:
        expanded = self.expansion.toggle(folder_id)
        self._notify()
        return expanded
