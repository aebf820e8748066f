"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from enum import Enum, auto
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise
from .verify import VerificationFailed, verify

_HELP = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""

# Resets the terminal; works in UNIX and newer Windows terminals.
_RESET_SCREEN = "\x1bc"


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = auto()
    UNFINISHED = auto()


class WatchShell:
    """Commands typed by the learner while watch mode runs."""

    def __init__(self, hint: str | None = None) -> None:
        self._hint = hint
        self._lock = threading.Lock()
        self.should_quit = threading.Event()

    def set_hint(self, hint: str | None) -> None:
        with self._lock:
            self._hint = hint

    def handle(self, line: str) -> None:
        """Carry out one command line."""
        command = line.strip()
        if command == "hint":
            with self._lock:
                hint = self._hint
            if hint is not None:
                print(hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            shell_command = command[1:]
            parts = shell_command.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.run(parts)
            except OSError as err:
                print(f"failed to execute command `{shell_command}`: {err}")
        else:
            print(f"unknown command: {command}")

    def _read_commands(self) -> None:
        for line in sys.stdin:
            self.handle(line)


def _ends_with(full: Path, suffix: Path) -> bool:
    tail = suffix.parts
    return bool(tail) and full.parts[-len(tail):] == tail


def pending_order(exercises: Sequence[Exercise], changed_path) -> list[Exercise]:
    """The changed exercise first, then every other exercise still pending."""
    changed = Path(changed_path)
    first = [next((e for e in exercises if _ends_with(changed, e.path)), None)]
    rest = [
        e for e in exercises if not e.looks_done() and not _ends_with(changed, e.path)
    ]
    return [e for e in first if e is not None] + rest


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(event.src_path)


def _drain(events: queue.Queue, first: str) -> list[str]:
    changed = {first: None}
    while True:
        try:
            changed[events.get_nowait()] = None
        except queue.Empty:
            return list(changed)


def watch(exercises: Sequence[Exercise], verbose: bool, success_hints: bool) -> WatchStatus:
    """Verify the exercises, then again after every change below ./exercises."""
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        print(_RESET_SCREEN)
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except VerificationFailed as failed:
            shell = WatchShell(failed.exercise.hint)

        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=shell._read_commands, daemon=True).start()

        while not shell.should_quit.is_set():
            try:
                first = events.get(timeout=1)
            except queue.Empty:
                continue
            for changed in _drain(events, first):
                path = Path(changed)
                if path.suffix != ".rs" or not path.exists():
                    continue
                pending = pending_order(exercises, path.resolve())
                num_done = sum(1 for e in exercises if e.looks_done())
                print(_RESET_SCREEN)
                try:
                    verify(pending, (num_done, len(exercises)), verbose, success_hints)
                    return WatchStatus.FINISHED
                except VerificationFailed as failed:
                    shell.set_hint(failed.exercise.hint)
        return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()