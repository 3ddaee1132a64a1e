"""Tests for the MemoStore command/query facade."""

from __future__ import annotations

import json
import random

import pytest

from memopad.core import tree
from memopad.core.ids import IdAllocator
from memopad.core.log import Log
from memopad.core.selection import Mode
from memopad.core.storage import NOTES_KEY, MemoryBackend
from memopad.core.store import MemoStore

from conftest import StepClock


def _locations(store: MemoStore, note_id) -> int:
    """How many containers hold note_id."""
    count = sum(1 for n in store.list_top_level() if n.id == note_id)
    for folder in tree.iter_folders(store.list_folders()):
        count += sum(1 for n in folder.notes if n.id == note_id)
    count += sum(1 for n in store.list_trash() if n.id == note_id)
    return count


class TestNotes:
    def test_create_prepends_and_selects(self, store: MemoStore):
        first = store.create_note()
        second = store.create_note()
        assert [n.id for n in store.list_top_level()] == [second, first]
        assert store.get_current_entity().id == second
        assert first < second

    def test_create_in_nested_folder(self, store: MemoStore):
        outer = store.create_folder()
        inner = store.create_folder(outer)
        note_id = store.create_note(inner)
        assert store.find_folder(inner).notes[0].id == note_id
        assert store.find_note(note_id).folder_id == inner
        assert store.list_top_level() == ()

    def test_create_in_unknown_folder_is_noop(self, store: MemoStore, backend: MemoryBackend):
        assert store.create_note(12345) is None
        assert backend.data == {}

    def test_create_leaves_trash_mode(self, store: MemoStore):
        store.set_mode(Mode.TRASH)
        store.create_note()
        assert store.mode is Mode.ACTIVE

    def test_update_current_note(self, store: MemoStore):
        store.create_note()
        assert store.update_note(title="Hello")
        assert store.update_note(content="World")
        current = store.get_current_entity()
        assert (current.title, current.content) == ("Hello", "World")

    def test_update_nested_note_visible_immediately(self, store: MemoStore):
        folder = store.create_folder()
        note_id = store.create_note(folder)
        store.update_note(content="draft")
        assert store.find_note(note_id).content == "draft"

    def test_update_without_selection(self, store: MemoStore):
        assert store.update_note(title="x") is False

    def test_update_ignored_in_trash_mode(self, store: MemoStore):
        store.create_note()
        store.set_mode(Mode.TRASH)
        assert store.update_note(title="x") is False
        assert store.list_top_level()[0].title == ""

    def test_delete_top_level_reselects_first(self, store: MemoStore):
        t1 = store.create_note()
        t2 = store.create_note()
        store.delete_note(t1)
        assert store.get_current_entity().id == t2
        store.delete_note(t2)
        assert store.get_current_entity() is None
        assert [n.id for n in store.list_trash()] == [t2, t1]

    def test_delete_current_top_level_falls_back(self, store: MemoStore):
        t1 = store.create_note()
        t2 = store.create_note()
        store.delete_note(t2)
        assert store.active_id == t1

    def test_delete_nested_clears_selection(self, store: MemoStore):
        store.create_note()
        folder = store.create_folder()
        nested = store.create_note(folder)
        assert store.delete_note(nested)
        assert store.active_id is None
        assert store.find_folder(folder).notes == ()
        assert store.list_trash()[0].id == nested

    def test_delete_missing_is_noop(self, store: MemoStore):
        store.create_note()
        before = (store.list_top_level(), store.list_trash())
        assert store.delete_note(999) is False
        assert (store.list_top_level(), store.list_trash()) == before

    def test_move_note(self, store: MemoStore):
        note_id = store.create_note()
        folder = store.create_folder()
        assert store.move_note(note_id, folder)
        assert store.list_top_level() == ()
        assert store.find_folder(folder).notes[0].id == note_id
        assert store.move_note(note_id)
        assert store.list_top_level()[0].id == note_id

    def test_paste_text_appends(self, store: MemoStore):
        store.create_note()
        store.update_note(content="line one\n")
        assert store.paste_text("line two")
        assert store.get_current_entity().content == "line one\nline two"

    def test_paste_html_converts(self, store: MemoStore):
        store.create_note()
        assert store.paste_html("<p>Hello <strong>world</strong></p>")
        assert store.get_current_entity().content == "Hello **world**"

    def test_paste_ignored_in_trash(self, store: MemoStore):
        store.create_note()
        store.set_mode(Mode.TRASH)
        assert store.paste_text("x") is False


class TestTrash:
    def test_restore_to_top_level_and_select(self, store: MemoStore):
        folder = store.create_folder()
        note_id = store.create_note(folder)
        store.delete_note(note_id)
        store.set_mode(Mode.TRASH)
        store.select_trashed_note(note_id)

        restored = store.restore_note(note_id)
        assert restored.id == note_id
        assert store.mode is Mode.ACTIVE
        assert store.trash_id is None
        assert store.list_top_level()[0].id == note_id
        assert store.find_folder(folder).notes == ()
        assert store.get_current_entity().id == note_id

    def test_restore_missing(self, store: MemoStore):
        assert store.restore_note(42) is None

    def test_trash_selection(self, store: MemoStore):
        note_id = store.create_note()
        store.update_note(title="gone")
        store.delete_note(note_id)
        store.set_mode(Mode.TRASH)
        store.select_trashed_note(note_id)
        assert store.get_current_entity().title == "gone"

    def test_toggle_trash_clears_trash_selection(self, store: MemoStore):
        note_id = store.create_note()
        store.delete_note(note_id)
        assert store.toggle_trash() is Mode.TRASH
        store.select_trashed_note(note_id)
        assert store.toggle_trash() is Mode.ACTIVE
        assert store.trash_id is None

    def test_stale_active_id_resolves_to_none(self, store: MemoStore):
        store.select_note(777)
        assert store.get_current_entity() is None


class TestFolders:
    def test_create_is_expanded_and_named(self, store: MemoStore):
        folder = store.create_folder()
        assert store.is_expanded(folder)
        assert store.find_folder(folder).name == "New Folder"

    def test_create_nested_prepends(self, store: MemoStore):
        parent = store.create_folder()
        a = store.create_folder(parent)
        b = store.create_folder(parent)
        assert [f.id for f in store.find_folder(parent).subfolders] == [b, a]

    def test_custom_default_name(self, backend: MemoryBackend):
        store = MemoStore(backend, default_folder_name="Untitled")
        assert store.find_folder(store.create_folder()).name == "Untitled"

    def test_rename(self, store: MemoStore):
        parent = store.create_folder()
        child = store.create_folder(parent)
        assert store.rename_folder(child, "Work")
        assert store.find_folder(child).name == "Work"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_rename_rejects_blank(self, store: MemoStore, name):
        folder = store.create_folder()
        store.rename_folder(folder, "Work")
        assert store.rename_folder(folder, name) is False
        assert store.find_folder(folder).name == "Work"

    def test_delete_cascades_without_trash(self, store: MemoStore):
        root = store.create_folder()
        sub = store.create_folder(root)
        subsub = store.create_folder(sub)
        ids = [store.create_note(root), store.create_note(sub), store.create_note(subsub)]

        assert store.delete_folder(root)
        assert store.list_folders() == ()
        assert store.list_trash() == ()
        for note_id in ids:
            assert store.find_note(note_id) is None
        for folder_id in (root, sub, subsub):
            assert not store.is_expanded(folder_id)

    def test_delete_nested_needs_parent(self, store: MemoStore):
        parent = store.create_folder()
        child = store.create_folder(parent)
        assert store.delete_folder(child) is False
        assert store.delete_folder(child, parent)
        assert store.find_folder(child) is None

    def test_move_folder_rejects_cycle(self, store: MemoStore):
        parent = store.create_folder()
        child = store.create_folder(parent)
        assert store.move_folder(parent, child) is False
        assert store.find_folder(parent).subfolders[0].id == child

    def test_toggle_expanded(self, store: MemoStore):
        folder = store.create_folder()
        assert store.toggle_folder_expanded(folder) is False
        assert store.toggle_folder_expanded(folder) is True


class TestPersistence:
    def test_every_mutation_writes_all_keys(self, store: MemoStore, backend: MemoryBackend):
        store.create_note()
        assert len(backend.data) == 3

    def test_reload_reproduces_state(self, store: MemoStore, backend: MemoryBackend):
        folder = store.create_folder()
        store.rename_folder(folder, "Work")
        store.create_note(folder)
        store.update_note(title="nested", content="x")
        kept = store.create_note()
        store.update_note(title="top")
        trashed = store.create_note()
        store.delete_note(trashed)

        reloaded = MemoStore(backend)
        assert reloaded.list_top_level() == store.list_top_level()
        assert reloaded.list_folders() == store.list_folders()
        assert reloaded.list_trash() == store.list_trash()
        assert reloaded.find_note(kept).title == "top"

    def test_expansion_not_persisted(self, store: MemoStore, backend: MemoryBackend):
        folder = store.create_folder()
        assert store.is_expanded(folder)
        assert "expanded" not in "".join(backend.data.values())
        assert not MemoStore(backend).is_expanded(folder)

    def test_reloaded_ids_never_reissued(self, backend: MemoryBackend):
        frozen = lambda: 5_000_000  # clock stuck at 5 ms
        first = MemoStore(backend, allocator=IdAllocator(clock=frozen))
        a = first.create_note()
        second = MemoStore(backend, allocator=IdAllocator(clock=frozen))
        b = second.create_note()
        assert b > a

    def test_save_failure_is_not_raised(self, store: MemoStore, backend: MemoryBackend):
        from memopad.core.errors import PersistenceUnavailable

        def broken(key, value):
            raise PersistenceUnavailable("disk gone")
        backend.set = broken

        note_id = store.create_note()
        assert note_id is not None
        assert store.last_save_ok is False
        assert store.find_note(note_id) is not None


    def test_misshaped_note_does_not_reach_commands(self, backend: MemoryBackend):
        backend.data[NOTES_KEY] = json.dumps([{"id": 1, "title": 7, "content": 5}])
        store = MemoStore(backend)
        assert store.list_top_level() == ()
        store.select_note(1)
        assert store.paste_text("x") is False

    def test_deep_folder_chain_never_raises(self, store: MemoStore):
        parent = None
        for _ in range(400):
            created = store.create_folder(parent)
            if created is None:
                break
            parent = created
        assert store.find_folder(parent) is not None
        if not store.last_save_ok:
            assert any("nested too deeply" in msg for _, msg in Log.warnings())

    def test_failed_serialization_keeps_command_quiet(self, store: MemoStore, monkeypatch):
        from memopad.core import storage

        def dumps(obj, **kwargs):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(storage.json, "dumps", dumps)
        folder = store.create_folder()
        assert folder is not None
        assert store.last_save_ok is False
        assert store.is_expanded(folder)

    def test_tree_recursion_failure_is_a_noop(self, store: MemoStore, monkeypatch):
        parent = store.create_folder()
        before = store.list_folders()

        def too_deep(*args, **kwargs):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(tree, "insert_folder", too_deep)
        assert store.create_folder(parent) is None
        assert store.list_folders() is before


class TestListeners:
    def test_notified_on_change(self, store: MemoStore):
        calls = []
        unsubscribe = store.subscribe(calls.append)
        store.create_note()
        assert calls == [store]
        unsubscribe()
        store.create_note()
        assert len(calls) == 1

    def test_not_notified_on_noop(self, store: MemoStore):
        calls = []
        store.subscribe(calls.append)
        store.delete_note(12345)
        store.rename_folder(12345, "x")
        assert calls == []

    def test_failing_listener_does_not_break_command(self, store: MemoStore):
        def boom(_):
            raise RuntimeError("listener bug")
        store.subscribe(boom)
        assert store.create_note() is not None


class TestScenarios:
    def test_work_folder_round_trip(self, store: MemoStore):
        work = store.create_folder()
        store.rename_folder(work, "Work")
        a = store.create_note(work)
        store.select_note(a)
        store.update_note(content="draft")
        store.delete_note(a)

        assert store.list_trash()[0].id == a
        assert store.list_trash()[0].content == "draft"
        assert store.find_folder(work).notes == ()

        restored = store.restore_note(a)
        assert restored.content == "draft"
        assert store.list_top_level()[0].id == a
        assert store.find_folder(work).notes == ()

    def test_delete_then_restore_preserves_fields(self, store: MemoStore):
        folder = store.create_folder()
        note_id = store.create_note(folder)
        store.update_note(title="T", content="C")
        original = store.find_note(note_id)
        store.delete_note(note_id)
        restored = store.restore_note(note_id)
        assert (restored.id, restored.title, restored.content) == (original.id, original.title, original.content)

    def test_single_location_under_random_operations(self, backend: MemoryBackend):
        rng = random.Random(1234)
        store = MemoStore(backend, allocator=IdAllocator(clock=StepClock()))
        created = []
        folders = [None]

        for _ in range(300):
            op = rng.choice(["note", "note", "folder", "delete", "restore", "move", "rmdir"])
            if op == "note":
                created.append(store.create_note(rng.choice(folders)))
            elif op == "folder":
                folders.append(store.create_folder(rng.choice(folders)))
            elif op == "delete" and created:
                store.delete_note(rng.choice(created))
            elif op == "restore" and store.list_trash():
                store.restore_note(rng.choice(store.list_trash()).id)
            elif op == "move" and created:
                store.move_note(rng.choice(created), rng.choice(folders))
            elif op == "rmdir" and store.list_folders() and rng.random() < 0.1:
                target = rng.choice(store.list_folders())
                # Only what the folder owns right now may disappear
                destroyed = {n.id for n in tree.iter_notes((), (target,))}
                assert store.delete_folder(target.id)
                created = [i for i in created if i not in destroyed]
                for note_id in destroyed:
                    assert _locations(store, note_id) == 0

            folders = [f for f in folders if f is None or store.find_folder(f) is not None]

            for note_id in created:
                assert _locations(store, note_id) == 1

        reloaded = MemoStore(backend)
        assert reloaded.list_top_level() == store.list_top_level()
        assert reloaded.list_folders() == store.list_folders()
        assert reloaded.list_trash() == store.list_trash()
