from __future__ import annotations

from .model import Identity

__all__ = ["ExpansionState"]

class ExpansionState:
    """Folder ids currently shown expanded. UI-only, never persisted."""

    def __init__(self):
        self._expanded: set = set()

    def toggle(self, folder_id: Identity) -> bool:
        """Flip membership. Returns the new expanded state."""
        self._expanded ^= {folder_id}
        return folder_id in self._expanded

    def expand(self, folder_id: Identity) -> None:
        self._expanded.add(folder_id)

    def discard(self, folder_id: Identity) -> None:
        self._expanded.discard(folder_id)

    def is_expanded(self, folder_id: Identity) -> bool:
        return folder_id in self._expanded
