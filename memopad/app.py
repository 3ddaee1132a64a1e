# memopad/app.py
'''
Copyright 2025 Aaron Vose (avose@aaronvose.net)
Licensed under the LGPL v2.1; see the file 'LICENSE' for details.
'''
import cmd
import shlex
import sys
import traceback
from typing import Optional

from memopad.core.config import load_config
from memopad.core.log import Log
from memopad.core.model import Folder
from memopad.core.selection import Mode
from memopad.core.store import MemoStore

def on_exception(exc_type, exc_value, exc_traceback):
    """Log unhandled exceptions instead of dying silently."""
    if issubclass(exc_type, KeyboardInterrupt):
        # Allow Ctrl+C to work normally
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    tb_text = ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    error_message = f"!ERROR! Unhandled Exception:\n{tb_text}"
    Log.debug(error_message, 0)
    print(error_message, file=sys.stderr)

def _parse_id(text: str) -> Optional[int]:
    text = text.strip()
    if not text or text == "-":
        return None
    try:
        return int(text)
    except ValueError:
        return None

class MemoShell(cmd.Cmd):
    """Line-oriented front end. Every command maps onto one MemoStore call."""

    intro = "MemoPad. Type help or ? to list commands."
    prompt = "(memo) "

    def __init__(self, store: MemoStore, stdout=None):
        super().__init__(stdout=stdout)
        self.store = store
        self._log_mark = Log.count()

    def _out(self, text: str = ""):
        self.stdout.write(text + "\n")

    def _print_folder(self, folder: Folder, level: int):
        pad = "  " * level
        marker = "-" if self.store.is_expanded(folder.id) else "+"
        self._out(f"{pad}{marker} [{folder.id}] {folder.name}/")
        if not self.store.is_expanded(folder.id):
            return
        for sub in folder.subfolders:
            self._print_folder(sub, level + 1)
        for note in folder.notes:
            self._out(f"{pad}    {note.id}  {note.title or 'Untitled'}")

    def postcmd(self, stop, line):
        """Echo warnings the store logged while running the command."""
        for _, text in Log.warnings(self._log_mark):
            self._out(text)
        self._log_mark = Log.count()
        return stop

    # ---------- views ----------

    def do_ls(self, arg):
        """ls: show folders and notes (or the trash when in trash mode)."""
        if self.store.mode is Mode.TRASH:
            self._out("Trash:")
            for note in self.store.list_trash():
                self._out(f"  {note.id}  {note.title or 'Untitled'}")
            return
        for folder in self.store.list_folders():
            self._print_folder(folder, 0)
        for note in self.store.list_top_level():
            self._out(f"  {note.id}  {note.title or 'Untitled'}")

    def do_show(self, arg):
        """show: print the current note."""
        note = self.store.get_current_entity()
        if note is None:
            self._out("(no note selected)")
            return
        self._out(f"# {note.title or 'Untitled'}")
        self._out(note.content)

    # ---------- notes ----------

    def do_select(self, arg):
        """select ID: select a note (in trash mode, a trashed note)."""
        note_id = _parse_id(arg)
        if self.store.mode is Mode.TRASH:
            self.store.select_trashed_note(note_id)
        else:
            self.store.select_note(note_id)

    def do_new(self, arg):
        """new [FOLDER_ID]: create a note and select it."""
        new_id = self.store.create_note(_parse_id(arg))
        self._out(f"created {new_id}" if new_id is not None else "no such folder")

    def do_title(self, arg):
        """title TEXT: set the current note's title."""
        if not self.store.update_note(title=arg):
            self._out("nothing to edit")

    def do_write(self, arg):
        """write TEXT: replace the current note's content."""
        if not self.store.update_note(content=arg.replace("\\n", "\n")):
            self._out("nothing to edit")

    def do_append(self, arg):
        """append TEXT: append text to the current note."""
        if not self.store.paste_text(arg.replace("\\n", "\n")):
            self._out("nothing to edit")

    def do_rm(self, arg):
        """rm ID: move a note to the trash."""
        if not self.store.delete_note(_parse_id(arg)):
            self._out("no such note")

    def do_restore(self, arg):
        """restore ID: bring a trashed note back to the top level."""
        if self.store.restore_note(_parse_id(arg)) is None:
            self._out("no such trashed note")

    def do_mv(self, arg):
        """mv NOTE_ID [FOLDER_ID|-]: move a note into a folder or to the top level."""
        parts = shlex.split(arg) + ["-"]
        if not self.store.move_note(_parse_id(parts[0]), _parse_id(parts[1])):
            self._out("move failed")

    def do_trash(self, arg):
        """trash: switch between the notes and the trash."""
        mode = self.store.toggle_trash()
        self._out(f"mode: {mode.value}")

    # ---------- folders ----------

    def do_mkdir(self, arg):
        """mkdir [PARENT_ID] [NAME]: create a folder."""
        parts = shlex.split(arg)
        parent_id = _parse_id(parts[0]) if parts else None
        new_id = self.store.create_folder(parent_id)
        if new_id is None:
            self._out("no such folder")
            return
        if len(parts) > 1:
            self.store.rename_folder(new_id, " ".join(parts[1:]))
        self._out(f"created folder {new_id}")

    def do_rename(self, arg):
        """rename FOLDER_ID NAME: rename a folder."""
        parts = shlex.split(arg)
        if len(parts) < 2 or not self.store.rename_folder(_parse_id(parts[0]), " ".join(parts[1:])):
            self._out("rename failed")

    def do_rmdir(self, arg):
        """rmdir FOLDER_ID [PARENT_ID]: permanently delete a folder and its contents."""
        parts = shlex.split(arg) + ["-"]
        if not self.store.delete_folder(_parse_id(parts[0]), _parse_id(parts[1])):
            self._out("no such folder")

    def do_mvdir(self, arg):
        """mvdir FOLDER_ID [PARENT_ID|-]: move a folder."""
        parts = shlex.split(arg) + ["-"]
        if not self.store.move_folder(_parse_id(parts[0]), _parse_id(parts[1])):
            self._out("move failed")

    def do_toggle(self, arg):
        """toggle FOLDER_ID: expand or collapse a folder."""
        folder_id = _parse_id(arg)
        if folder_id is not None:
            self.store.toggle_folder_expanded(folder_id)

    def do_log(self, arg):
        """log: print the session log."""
        for timestamp, message in Log.get():
            self._out(f"[{timestamp}] {message}")

    def do_quit(self, arg):
        """quit: leave the shell."""
        return True

    do_EOF = do_quit

def main(verbosity: int = None, stdexp: bool = False, store_dir: str = None, log_file: str = None):
    # Install the exception handler
    if not stdexp:
        sys.excepthook = on_exception

    cfg = load_config(store_dir, {"verbosity": verbosity, "log_file": log_file})
    Log.set_verbosity(cfg["verbosity"])
    Log.debug(f"Opening store at {cfg['store_dir']}", 1)

    store = MemoStore.open(cfg["store_dir"], default_folder_name=cfg["default_folder_name"])
    try:
        MemoShell(store).cmdloop()
    finally:
        if cfg["log_file"]:
            Log.write_to_file(cfg["log_file"])
    return 0 if store.last_save_ok else 1
