"""
Pin editing - changes that rewrite a single note's envelope.

All of them build a fresh pin list and finish through the same normalization:
1. Drop pins that do not come strictly after the pin before them
2. Remove redundant interior pins
3. Rebase so the first pin sits at time 0 with interval 0, moving the
   interval into the pitches and the time into the note start
4. Recompute start/end and the continuation flag
"""

from __future__ import annotations

from collections.abc import Callable

from chuk_music_editor.changes.base import UndoableChange
from chuk_music_editor.changes.document import SongDocument
from chuk_music_editor.config import DEFAULT_CONFIG
from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.models.note import (
    InvariantError,
    Note,
    NotePin,
    make_note_pin,
    remove_redundant_pins,
)


def normalize_pins(pins: list[NotePin]) -> tuple[int, int]:
    """
    Normalize a pin list in place.

    Where two consecutive pins are out of order or share a time, the earlier
    one is dropped. Redundant interior pins are removed, then every pin is
    shifted so the first one is at time 0 with interval 0.

    Args:
        pins: Freshly built pins (mutated in place)

    Returns:
        (interval, time) removed from every pin; the caller adds them to
        the note's pitches and start

    Raises:
        InvariantError: If no pins are left
    """
    i = 0
    while i < len(pins) - 1:
        if pins[i].time >= pins[i + 1].time:
            del pins[i]
        else:
            i += 1
    remove_redundant_pins(pins)

    if not pins:
        raise InvariantError(ErrorMessages.EMPTY_PINS)

    first_interval = pins[0].interval
    first_time = pins[0].time
    for pin in pins:
        pin.interval -= first_interval
        pin.time -= first_time
    return first_interval, first_time


class ChangePins(UndoableChange):
    """
    Base for edits that replace a note's pins, pitches, start and end together.

    Subclasses fill self._new_pins from self._old_pins, then call _finish_setup().
    """

    def __init__(self, doc: SongDocument | None, note: Note) -> None:
        super().__init__(doc.notifier if doc is not None else None)
        self._doc = doc
        self._note = note
        self._old_start = note.start
        self._old_end = note.end
        self._old_pins = note.pins
        self._old_pitches = note.pitches
        self._old_continues = note.continues_last_pattern
        self._new_pins: list[NotePin] = []

    @property
    def _size_max(self) -> int:
        config = self._doc.song.config if self._doc is not None else DEFAULT_CONFIG
        return config.note_size_max

    def _finish_setup(self, continues_last_pattern: bool | None = None) -> None:
        first_interval, first_time = normalize_pins(self._new_pins)

        new_pins = self._new_pins
        new_pitches = [pitch + first_interval for pitch in self._old_pitches]
        new_start = self._old_start + first_time
        new_end = new_start + new_pins[-1].time

        new_continues = self._old_continues
        if continues_last_pattern is not None:
            new_continues = continues_last_pattern
        if new_start != 0:
            new_continues = False

        if (
            new_pins == self._old_pins
            and new_pitches == self._old_pitches
            and new_start == self._old_start
            and new_end == self._old_end
            and new_continues == self._old_continues
        ):
            return

        note = self._note
        old_pins, old_pitches = self._old_pins, self._old_pitches
        old_start, old_end, old_continues = self._old_start, self._old_end, self._old_continues

        def forward() -> None:
            note.pins = new_pins
            note.pitches = new_pitches
            note.start = new_start
            note.end = new_end
            note.continues_last_pattern = new_continues

        def backward() -> None:
            note.pins = old_pins
            note.pitches = old_pitches
            note.start = old_start
            note.end = old_end
            note.continues_last_pattern = old_continues

        self._record(forward, backward)


class ChangePinTime(ChangePins):
    """
    Move one pin to a new time.

    Pins strictly between the old and new time are removed; everything else
    is kept verbatim.
    """

    def __init__(
        self,
        doc: SongDocument | None,
        note: Note,
        pin_index: int,
        shifted_time: int,
        continues_last_pattern: bool,
    ) -> None:
        """
        Args:
            doc: Document (None for detached notes)
            note: Note to edit
            pin_index: Index of the pin being moved
            shifted_time: New absolute part position of the pin
            continues_last_pattern: Continuation flag to apply when the moved
                pin becomes the new first pin
        """
        super().__init__(doc, note)

        shifted_time -= self._old_start
        moved = self._old_pins[pin_index]
        skip_start = min(moved.time, shifted_time)
        skip_end = max(moved.time, shifted_time)
        set_pin = False
        for old_pin in self._old_pins:
            if old_pin.time < skip_start:
                self._new_pins.append(make_note_pin(old_pin.interval, old_pin.time, old_pin.size))
            elif old_pin.time > skip_end:
                if not set_pin:
                    if self._new_pins:
                        continues_last_pattern = note.continues_last_pattern
                    self._new_pins.append(make_note_pin(moved.interval, shifted_time, moved.size))
                    set_pin = True
                self._new_pins.append(make_note_pin(old_pin.interval, old_pin.time, old_pin.size))
        if not set_pin:
            continues_last_pattern = note.continues_last_pattern
            self._new_pins.append(make_note_pin(moved.interval, shifted_time, moved.size))

        self._finish_setup(continues_last_pattern)


class ChangePitchBend(ChangePins):
    """
    Bend one pitch of a note toward a target over a sub-range.

    Pins after the bend end keep the bent value only while they continue the
    flat line that was in effect at the bend end. From the first pin that
    diverges onward, the original intervals are kept.
    """

    def __init__(
        self,
        doc: SongDocument | None,
        note: Note,
        bend_start: int,
        bend_end: int,
        bend_to: int,
        pitch_index: int,
    ) -> None:
        """
        Args:
            doc: Document (None for detached notes)
            note: Note to edit
            bend_start: Absolute part where the bend begins
            bend_end: Absolute part where the target is reached (may precede bend_start)
            bend_to: Absolute target pitch for the pitch at pitch_index
            pitch_index: Which of the note's pitches is being dragged
        """
        super().__init__(doc, note)

        bend_start -= self._old_start
        bend_end -= self._old_start
        bend_to -= note.pitches[pitch_index]

        set_start = False
        set_end = False
        prev_interval = 0
        prev_size = self._size_max
        persist = True

        pins = self._old_pins
        if bend_end > bend_start:
            direction = 1
            order = range(len(pins))
            push: Callable[[NotePin], None] = self._new_pins.append
        else:
            direction = -1
            order = range(len(pins) - 1, -1, -1)

            def push(pin: NotePin) -> None:
                self._new_pins.insert(0, pin)

        for i in order:
            old_pin = pins[i]
            time = old_pin.time
            while True:
                if not set_start:
                    if time * direction <= bend_start * direction:
                        prev_interval = old_pin.interval
                        prev_size = old_pin.size
                    if time * direction < bend_start * direction:
                        push(make_note_pin(old_pin.interval, time, old_pin.size))
                        break
                    push(make_note_pin(prev_interval, bend_start, prev_size))
                    set_start = True
                elif not set_end:
                    if time * direction <= bend_end * direction:
                        prev_interval = old_pin.interval
                        prev_size = old_pin.size
                    if time * direction < bend_end * direction:
                        break
                    push(make_note_pin(bend_to, bend_end, prev_size))
                    set_end = True
                else:
                    if time * direction == bend_end * direction:
                        break
                    if old_pin.interval != prev_interval:
                        persist = False
                    push(make_note_pin(bend_to if persist else old_pin.interval, time, old_pin.size))
                    break

        if not set_end:
            push(make_note_pin(bend_to, bend_end, prev_size))

        self._finish_setup()


class ChangeNoteLength(ChangePins):
    """
    Clip (or extend) a note to [trunc_start, trunc_end].

    The boundary pins take the exact value in effect at the cut, a step
    rather than an interpolation.
    """

    def __init__(
        self, doc: SongDocument | None, note: Note, trunc_start: int, trunc_end: int
    ) -> None:
        super().__init__(doc, note)
        continues_last_pattern = (
            self._old_start < 0 or note.continues_last_pattern
        ) and trunc_start == 0

        trunc_start -= self._old_start
        trunc_end -= self._old_start
        set_start = False
        prev_size = self._old_pins[0].size
        prev_interval = self._old_pins[0].interval
        push_last_pin = True
        i = 0
        while i < len(self._old_pins):
            old_pin = self._old_pins[i]
            if old_pin.time < trunc_start:
                prev_size = old_pin.size
                prev_interval = old_pin.interval
            else:
                if old_pin.time > trunc_start and not set_start:
                    self._new_pins.append(make_note_pin(prev_interval, trunc_start, prev_size))
                    set_start = True
                if old_pin.time > trunc_end:
                    break
                self._new_pins.append(make_note_pin(old_pin.interval, old_pin.time, old_pin.size))
                if old_pin.time == trunc_end:
                    push_last_pin = False
                    break
            i += 1

        if push_last_pin:
            # Extending past the last pin holds the final value.
            last = self._old_pins[min(i, len(self._old_pins) - 1)]
            self._new_pins.append(make_note_pin(last.interval, trunc_end, last.size))

        self._finish_setup(continues_last_pattern)


class ChangeSizeBend(ChangePins):
    """
    Set the size (and interval) at one point of a note.

    With uniform_size the whole note takes the new size.
    """

    def __init__(
        self,
        doc: SongDocument | None,
        note: Note,
        bend_part: int,
        bend_size: int,
        bend_interval: int,
        uniform_size: bool,
    ) -> None:
        """
        Args:
            doc: Document (None for detached notes)
            note: Note to edit
            bend_part: Note-relative part of the breakpoint
            bend_size: Size at the breakpoint
            bend_interval: Interval at the breakpoint
            uniform_size: Apply bend_size to every pin
        """
        super().__init__(doc, note)

        inserted = False
        for pin in self._old_pins:
            size = bend_size if uniform_size else pin.size
            if pin.time < bend_part:
                self._new_pins.append(make_note_pin(pin.interval, pin.time, size))
            elif pin.time == bend_part:
                self._new_pins.append(make_note_pin(bend_interval, bend_part, bend_size))
                inserted = True
            else:
                if not uniform_size and not inserted:
                    self._new_pins.append(make_note_pin(bend_interval, bend_part, bend_size))
                    inserted = True
                self._new_pins.append(make_note_pin(pin.interval, pin.time, size))

        self._finish_setup()


class ChangeRhythmNote(ChangePins):
    """Move every pin of a note through a part-position mapping."""

    def __init__(
        self, doc: SongDocument | None, note: Note, change_rhythm: Callable[[int], int]
    ) -> None:
        super().__init__(doc, note)
        for old_pin in self._old_pins:
            time = change_rhythm(old_pin.time + self._old_start) - self._old_start
            self._new_pins.append(make_note_pin(old_pin.interval, time, old_pin.size))
        self._finish_setup()
