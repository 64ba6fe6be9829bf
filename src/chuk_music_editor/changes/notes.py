"""
Note-list edits - inserting, removing, cutting and transposing notes in a pattern.

Pattern-wide operations are ChangeSequences: each child is applied before the
next one is built, so index bookkeeping always refers to the live note list.
"""

from __future__ import annotations

from chuk_music_editor.changes.base import ChangeSequence, UndoableChange
from chuk_music_editor.changes.document import SongDocument
from chuk_music_editor.changes.pins import ChangeNoteLength, ChangeRhythmNote
from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.core.pitch import PITCHES_PER_OCTAVE
from chuk_music_editor.models.note import (
    InvariantError,
    Note,
    make_note_pin,
    remove_redundant_pins,
)
from chuk_music_editor.models.song import Pattern


class ChangeNoteAdded(UndoableChange):
    """Insert a note at an index, or remove the note at that index (deletion=True)."""

    def __init__(
        self,
        doc: SongDocument,
        pattern: Pattern,
        note: Note,
        index: int,
        deletion: bool = False,
    ) -> None:
        super().__init__(doc.notifier)

        def insert() -> None:
            pattern.notes.insert(index, note)

        def remove() -> None:
            del pattern.notes[index]

        if deletion:
            self._record(remove, insert)
        else:
            self._record(insert, remove)


class ChangePitchAdded(UndoableChange):
    """Insert a pitch into a note's chord, or remove it (deletion=True)."""

    def __init__(
        self, doc: SongDocument, note: Note, pitch: int, index: int, deletion: bool = False
    ) -> None:
        super().__init__(doc.notifier)

        def insert() -> None:
            note.pitches.insert(index, pitch)

        def remove() -> None:
            del note.pitches[index]

        if deletion:
            self._record(remove, insert)
        else:
            self._record(insert, remove)


class ChangePatternNotes(UndoableChange):
    """Replace a pattern's whole note list."""

    def __init__(self, doc: SongDocument, pattern: Pattern, new_notes: list[Note]) -> None:
        super().__init__(doc.notifier)
        old_notes = pattern.notes

        def forward() -> None:
            pattern.notes = new_notes

        def backward() -> None:
            pattern.notes = old_notes

        self._record(forward, backward)


class ChangePatternSelection(UndoableChange):
    """Set the pattern selection range; an empty range deactivates it."""

    def __init__(self, doc: SongDocument, new_start: int, new_end: int) -> None:
        super().__init__(doc.notifier)
        selection = doc.selection
        old = (
            selection.pattern_selection_start,
            selection.pattern_selection_end,
            selection.pattern_selection_active,
        )
        new = (new_start, new_end, new_start < new_end)

        def apply(values: tuple[int, int, bool]) -> None:
            (
                selection.pattern_selection_start,
                selection.pattern_selection_end,
                selection.pattern_selection_active,
            ) = values

        self._record(lambda: apply(new), lambda: apply(old))


class ChangeNoteTruncate(ChangeSequence):
    """
    Clear the part range [start, end) of a pattern.

    Notes straddling the whole range are split in two, notes overlapping one
    edge are shortened, and notes inside the range are deleted. In mod
    channels notes may be out of order, so the whole list is scanned and only
    notes on skip_note's pitch (or every note, with force) are touched.
    """

    def __init__(
        self,
        doc: SongDocument,
        pattern: Pattern,
        start: int,
        end: int,
        skip_note: Note | None = None,
        force: bool = False,
    ) -> None:
        super().__init__(doc.notifier)
        is_mod = doc.song.get_channel_is_mod(doc.channel)

        def may_edit(note: Note) -> bool:
            return (
                not is_mod
                or force
                or (skip_note is not None and note.pitches[0] == skip_note.pitches[0])
            )

        with self._batch():
            i = 0
            while i < len(pattern.notes):
                note = pattern.notes[i]
                if skip_note is not None and note is skip_note:
                    i += 1
                elif note.end <= start:
                    i += 1
                elif note.start >= end:
                    if not is_mod:
                        break
                    i += 1
                elif note.start < start and note.end > end:
                    if may_edit(note):
                        copy = note.clone()
                        self.append(ChangeNoteLength(doc, note, note.start, start))
                        i += 1
                        self.append(ChangeNoteAdded(doc, pattern, copy, i))
                        self.append(ChangeNoteLength(doc, copy, end, copy.end))
                    i += 1
                elif note.start < start:
                    if may_edit(note):
                        self.append(ChangeNoteLength(doc, note, note.start, start))
                    i += 1
                elif note.end > end:
                    if may_edit(note):
                        self.append(ChangeNoteLength(doc, note, end, note.end))
                    i += 1
                elif may_edit(note):
                    self.append(ChangeNoteAdded(doc, pattern, note, i, deletion=True))
                else:
                    i += 1


class ChangeSplitNotesAtSelection(ChangeSequence):
    """Split every note crossing either edge of the active selection."""

    def __init__(self, doc: SongDocument, pattern: Pattern) -> None:
        super().__init__(doc.notifier)
        selection_start = doc.selection.pattern_selection_start
        selection_end = doc.selection.pattern_selection_end

        with self._batch():
            i = 0
            while i < len(pattern.notes):
                note = pattern.notes[i]
                if note.start < selection_start < note.end:
                    self._split(doc, pattern, note, i, selection_start)
                    # The second half may cross the selection end too.
                    i += 1
                elif note.start < selection_end < note.end:
                    self._split(doc, pattern, note, i, selection_end)
                    i += 2
                else:
                    i += 1

    def _split(self, doc: SongDocument, pattern: Pattern, note: Note, index: int, at: int) -> None:
        copy = note.clone()
        self.append(ChangeNoteLength(doc, note, note.start, at))
        self.append(ChangeNoteAdded(doc, pattern, copy, index + 1))
        self.append(ChangeNoteLength(doc, copy, at, copy.end))


class ChangeTransposeNote(UndoableChange):
    """
    Move one note a step up or down.

    A step is the next pitch in the song's scale, the next semitone with
    ignore_scale (always, on noise channels), or an octave. Pins are moved the
    same way and clamped so every pitch of the chord stays in range. Nothing
    happens to mod channels or when the note's channel family differs from the
    current channel's.
    """

    def __init__(
        self,
        doc: SongDocument,
        channel_index: int,
        note: Note,
        upward: bool,
        ignore_scale: bool = False,
        octave: bool = False,
    ) -> None:
        super().__init__(doc.notifier)
        song = doc.song

        is_noise = song.get_channel_is_noise(channel_index)
        if is_noise != song.get_channel_is_noise(doc.channel):
            return
        if song.get_channel_is_mod(doc.channel):
            return

        max_pitch = song.get_max_pitch(channel_index)
        flags = song.get_scale_flags()
        by_octave = octave and not is_noise

        def step(value: int, low: int, high: int) -> int:
            if by_octave:
                if upward:
                    return min(high, value + PITCHES_PER_OCTAVE)
                return max(low, value - PITCHES_PER_OCTAVE)
            candidates = range(value + 1, high + 1) if upward else range(value - 1, low - 1, -1)
            for candidate in candidates:
                if is_noise or ignore_scale or flags[candidate % PITCHES_PER_OCTAVE]:
                    return candidate
            return value

        old_pitches = note.pitches
        new_pitches: list[int] = []
        for pitch in old_pitches:
            pitch = step(pitch, 0, max_pitch)
            if pitch not in new_pitches:
                new_pitches.append(pitch)

        low = 0
        high = max_pitch
        for pitch in new_pitches[1:]:
            diff = new_pitches[0] - pitch
            low = max(low, diff)
            high = min(high, diff + max_pitch)

        old_pins = note.pins
        new_pins = []
        for old_pin in old_pins:
            interval = min(max(old_pin.interval + old_pitches[0], low), high)
            interval = step(interval, low, high) - new_pitches[0]
            new_pins.append(make_note_pin(interval, old_pin.time, old_pin.size))

        if new_pins[0].interval != 0:
            raise InvariantError(ErrorMessages.WRONG_PIN_START.format(interval=new_pins[0].interval))
        remove_redundant_pins(new_pins)

        if new_pitches == old_pitches and new_pins == old_pins:
            return

        def forward() -> None:
            note.pins = new_pins
            note.pitches = new_pitches

        def backward() -> None:
            note.pins = old_pins
            note.pitches = old_pitches

        self._record(forward, backward)


class ChangeTranspose(ChangeSequence):
    """Transpose the notes of a pattern, limited to the selection when one is active."""

    def __init__(
        self,
        doc: SongDocument,
        channel_index: int,
        pattern: Pattern,
        upward: bool,
        ignore_scale: bool = False,
        octave: bool = False,
    ) -> None:
        super().__init__(doc.notifier)
        selection = doc.selection
        with self._batch():
            if selection.pattern_selection_active:
                self.append(ChangeSplitNotesAtSelection(doc, pattern))
            for note in list(pattern.notes):
                if selection.pattern_selection_active and (
                    note.end <= selection.pattern_selection_start
                    or note.start >= selection.pattern_selection_end
                ):
                    continue
                self.append(
                    ChangeTransposeNote(doc, channel_index, note, upward, ignore_scale, octave)
                )


class ChangePatternRhythm(ChangeSequence):
    """
    Snap every note of a pattern to the song's rhythm grid.

    Notes whose start and end land on the same step are deleted.
    """

    def __init__(self, doc: SongDocument, pattern: Pattern) -> None:
        super().__init__(doc.notifier)
        rhythm = doc.song.get_rhythm()
        parts_per_beat = doc.song.config.parts_per_beat

        def change_rhythm(old_time: int) -> int:
            return rhythm.quantize(old_time, parts_per_beat)

        with self._batch():
            i = 0
            while i < len(pattern.notes):
                note = pattern.notes[i]
                if change_rhythm(note.start) >= change_rhythm(note.end):
                    self.append(ChangeNoteAdded(doc, pattern, note, i, deletion=True))
                else:
                    self.append(ChangeRhythmNote(doc, note, change_rhythm))
                    i += 1
