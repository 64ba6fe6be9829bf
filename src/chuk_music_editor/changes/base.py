"""
Change framework - undoable, composable edits.

Every edit is a Change object whose constructor performs the mutation
immediately. A change that turned out to do nothing reports is_noop() so the
caller can leave it out of the undo history.

- UndoableChange: a leaf edit holding a forward and a backward closure
- ChangeGroup: an ordered list of child changes, undone in reverse order
- ChangeSequence: a group built while iterating the collection it edits,
  which can stay open (uncommitted) while a drag keeps appending to it
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from chuk_music_editor.constants import ErrorMessages

if TYPE_CHECKING:
    from chuk_music_editor.changes.document import ChangeNotifier


class Change:
    """
    Base class for all edits.

    Subclasses mutate the song in their constructor and call _did_something()
    when the edit had an effect.
    """

    def __init__(self, notifier: ChangeNotifier | None = None) -> None:
        self._noop = True
        self._notifier = notifier
        self._done_forwards = True

    def _did_something(self) -> None:
        self._noop = False

    def is_noop(self) -> bool:
        """True if constructing this change left the song untouched."""
        return self._noop

    @property
    def did_something(self) -> bool:
        return not self._noop

    def is_done_forwards(self) -> bool:
        """True while the change is applied (not undone)."""
        return self._done_forwards

    @contextmanager
    def _batch(self) -> Iterator[None]:
        """Coalesce notifications from everything done inside the block."""
        if self._notifier is None:
            yield
        else:
            with self._notifier.batch():
                yield

    def _notify(self) -> None:
        if self._notifier is not None:
            self._notifier.changed()

    def undo(self) -> None:
        """Restore the song to its state before this change."""
        if not self._done_forwards:
            raise RuntimeError(ErrorMessages.ALREADY_UNDONE)
        with self._batch():
            self._undo()
        self._done_forwards = False

    def redo(self) -> None:
        """Re-apply this change after an undo."""
        if self._done_forwards:
            raise RuntimeError(ErrorMessages.NOT_UNDONE)
        with self._batch():
            self._redo()
        self._done_forwards = True

    def _undo(self) -> None:
        raise NotImplementedError

    def _redo(self) -> None:
        raise NotImplementedError


class UndoableChange(Change):
    """
    A leaf edit defined by a pair of closures.

    `forward` installs the new field values and `backward` restores the exact
    old ones. Both must capture the values themselves, not recompute them.
    """

    def __init__(self, notifier: ChangeNotifier | None = None) -> None:
        super().__init__(notifier)
        self._forward: Callable[[], None] | None = None
        self._backward: Callable[[], None] | None = None

    def _record(self, forward: Callable[[], None], backward: Callable[[], None]) -> None:
        """Store the mutation pair, apply it once and mark the change effective."""
        self._forward = forward
        self._backward = backward
        forward()
        self._did_something()
        self._notify()

    def _undo(self) -> None:
        if self._backward is not None:
            self._backward()
            self._notify()

    def _redo(self) -> None:
        if self._forward is not None:
            self._forward()
            self._notify()


class ChangeGroup(Change):
    """
    An ordered composite of changes, treated as one edit.

    Children apply in append order and undo in exact reverse order. The group
    is a no-op iff every child is (no-op children are never stored).
    """

    def __init__(self, notifier: ChangeNotifier | None = None) -> None:
        super().__init__(notifier)
        self._changes: list[Change] = []

    @property
    def changes(self) -> list[Change]:
        return list(self._changes)

    def append(self, change: Change) -> None:
        """Add an already-applied child change (dropped if it did nothing)."""
        if change.is_noop():
            return
        self._changes.append(change)
        self._did_something()

    def __len__(self) -> int:
        return len(self._changes)

    def _undo(self) -> None:
        for change in reversed(self._changes):
            change.undo()

    def _redo(self) -> None:
        for change in self._changes:
            change.redo()


class ChangeSequence(ChangeGroup):
    """
    A group built by walking a live collection while children edit it.

    Each child is fully applied before the next one is constructed, so every
    child sees the collection as left by its predecessors; undo unwinds them
    in reverse so every child again sees the state it was built against.
    """

    def __init__(
        self, notifier: ChangeNotifier | None = None, changes: list[Change] | None = None
    ) -> None:
        super().__init__(notifier)
        self._committed = False
        for change in changes or []:
            self.append(change)

    def check_first(self) -> Change | None:
        """First child, if any."""
        return self._changes[0] if self._changes else None

    def is_committed(self) -> bool:
        return self._committed

    def commit(self) -> None:
        """Close the sequence to further appends."""
        self._committed = True

    def append(self, change: Change) -> None:
        if self._committed:
            raise RuntimeError(ErrorMessages.SEQUENCE_COMMITTED)
        super().append(change)
