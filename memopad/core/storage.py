from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from memopad.utils.fs_atomic import atomic_write_text

from .errors import PersistenceUnavailable
from .log import Log
from .model import Folder, Note, folders_from_list, notes_from_list

__all__ = [
    "NOTES_KEY",
    "TRASH_KEY",
    "FOLDERS_KEY",
    "KeyValueBackend",
    "MemoryBackend",
    "DirectoryBackend",
    "PersistenceAdapter",
]

NOTES_KEY = "markdown_memos_v_final_hover"
TRASH_KEY = "markdown_memos_trash_v1"
FOLDERS_KEY = "markdown_memos_folders_v1"

# ---------- backends ----------

class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...

class MemoryBackend:
    """Dict-backed store; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

class DirectoryBackend:
    """
    One file per key:
    <root>/<key>.json
    """

    def __init__(self, root):
        self.root = Path(root).expanduser().resolve()

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceUnavailable(f"Cannot read {key!r} from {self.root}: {e}") from e

    def set(self, key: str, value: str) -> None:
        try:
            atomic_write_text(self.path_for(key), value)
        except OSError as e:
            raise PersistenceUnavailable(f"Cannot write {key!r} to {self.root}: {e}") from e

# ---------- adapter ----------

Partitions = Tuple[Tuple[Note, ...], Tuple[Note, ...], Tuple[Folder, ...]]

class PersistenceAdapter:
    """
    Reads and writes the three partitions (top-level notes, trash, folder
    tree) as independent JSON documents under fixed keys.

    load() never raises: an unreadable or malformed partition comes back
    empty. save() never raises: failures are logged and reported as False.
    """

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    def _load_partition(self, key: str, parse: Callable[[Any], tuple]) -> tuple:
        try:
            raw = self.backend.get(key)
        except PersistenceUnavailable as e:
            Log.warning(f"Load failed, starting {key!r} empty: {e}")
            return ()
        if raw is None:
            return ()
        try:
            return parse(json.loads(raw))
        except (ValueError, TypeError, KeyError) as e:
            Log.warning(f"Malformed data under {key!r}, starting empty: {e}")
            return ()
        except RecursionError:
            Log.warning(f"Data under {key!r} is nested too deeply, starting empty")
            return ()

    def load(self) -> Partitions:
        notes = self._load_partition(NOTES_KEY, notes_from_list)
        trash = self._load_partition(TRASH_KEY, notes_from_list)
        folders = self._load_partition(FOLDERS_KEY, folders_from_list)
        Log.debug(f"load(): {len(notes)} notes, {len(trash)} trashed, {len(folders)} folders", 1)
        return notes, trash, folders

    def save(self, notes, trash, folders) -> bool:
        """Overwrite all three keys. Returns False if any write failed."""
        partitions = (
            (NOTES_KEY, notes),
            (TRASH_KEY, trash),
            (FOLDERS_KEY, folders),
        )
        ok = True
        for key, items in partitions:
            try:
                text = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
            except RecursionError:
                Log.warning(f"Save failed for {key!r}: data is nested too deeply to serialize")
                ok = False
                continue
            try:
                self.backend.set(key, text)
            except PersistenceUnavailable as e:
                Log.warning(f"Save failed for {key!r}: {e}")
                ok = False
        Log.debug(f"save(): ok={ok}", 2)
        return ok
