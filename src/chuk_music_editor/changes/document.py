"""
Song document - the single mutable document edits are applied to.

Bundles the song with the collaborators the change framework reports to:
- ChangeNotifier: "something changed" sink, coalesced per top-level change
- Selection: the part-range selection scoping note operations
- A history sink receiving every effective change (UndoStack by default)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

from chuk_music_editor.changes.base import Change
from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.models.song import Selection, Song

logger = logging.getLogger(__name__)


class ChangeNotifier:
    """
    Broadcasts "the song changed" to watchers.

    Inside a batch() the notification is deferred; the outermost batch emits
    it once if anything changed.
    """

    def __init__(self) -> None:
        self._watchers: list[Callable[[], None]] = []
        self._depth = 0
        self._dirty = False

    def watch(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked once per notification."""
        self._watchers.append(callback)

    def unwatch(self, callback: Callable[[], None]) -> None:
        """Remove a previously registered callback."""
        self._watchers.remove(callback)

    def changed(self) -> None:
        """Report a mutation."""
        if self._depth > 0:
            self._dirty = True
            return
        self._emit()

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Defer and coalesce notifications until the outermost batch exits."""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0 and self._dirty:
                self._dirty = False
                self._emit()

    def _emit(self) -> None:
        for callback in list(self._watchers):
            callback()


class HistorySink(Protocol):
    """Anything that can take ownership of completed changes."""

    def record(self, change: Change) -> bool: ...


class UndoStack:
    """
    Minimal in-memory undo history.

    Unbounded; storage and depth policy belong to the application.
    """

    def __init__(self) -> None:
        self._done: list[Change] = []
        self._undone: list[Change] = []

    def record(self, change: Change) -> bool:
        """
        Store an applied change.

        Returns:
            False (and stores nothing) if the change was a no-op
        """
        if change.is_noop():
            return False
        self._done.append(change)
        self._undone.clear()
        return True

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def undo(self) -> Change:
        """Undo the most recent change."""
        if not self._done:
            raise RuntimeError(ErrorMessages.NOTHING_TO_UNDO)
        change = self._done.pop()
        change.undo()
        self._undone.append(change)
        logger.debug(f"Undid {type(change).__name__}")
        return change

    def redo(self) -> Change:
        """Redo the most recently undone change."""
        if not self._undone:
            raise RuntimeError(ErrorMessages.NOTHING_TO_REDO)
        change = self._undone.pop()
        change.redo()
        self._done.append(change)
        logger.debug(f"Redid {type(change).__name__}")
        return change

    def __len__(self) -> int:
        return len(self._done)


class SongDocument:
    """
    The document every change is constructed against.

    Holds the song plus the current channel (used to decide pitch/noise/mod
    behaviour of note operations) and the pattern selection.
    """

    def __init__(
        self,
        song: Song | None = None,
        history: HistorySink | None = None,
        notifier: ChangeNotifier | None = None,
    ):
        """
        Initialize the document.

        Args:
            song: Song to edit (an empty one-channel song if None)
            history: Owner of completed changes (UndoStack if None)
            notifier: Change notification sink (a fresh one if None)
        """
        self.song = song if song is not None else Song.create()
        self.history: HistorySink = history if history is not None else UndoStack()
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self.selection = Selection()
        self.channel = 0

    def record(self, change: Change) -> bool:
        """Hand an applied change to the history owner (no-ops are dropped)."""
        if change.is_noop():
            return False
        return self.history.record(change)
