"""
Tests for note-list edits.

Tests cover:
- Note and pitch insertion and deletion
- Selection changes
- Truncating a part range (split, shorten, delete)
- Splitting notes at selection edges
- Rhythm quantization of a pattern
"""

from chuk_music_editor.changes import (
    ChangeNoteAdded,
    ChangeNoteTruncate,
    ChangePatternNotes,
    ChangePatternRhythm,
    ChangePatternSelection,
    ChangePitchAdded,
    ChangeSplitNotesAtSelection,
    SongDocument,
)
from chuk_music_editor.models import Note, Song


def spans(notes: list[Note]) -> list[tuple[int, int]]:
    return [(note.start, note.end) for note in notes]


class TestNoteAndPitchAdded:
    """Tests for ChangeNoteAdded and ChangePitchAdded."""

    def test_add_and_undo(self, doc: SongDocument) -> None:
        """A note is inserted at its index and removed on undo."""
        pattern = doc.song.channels[0].patterns[0]
        first = Note.create(36, 0, 12, 6)
        pattern.notes = [first]
        added = Note.create(38, 12, 24, 6)

        change = ChangeNoteAdded(doc, pattern, added, 1)
        assert pattern.notes[1] is added

        change.undo()
        assert pattern.notes == [first]

    def test_delete_and_undo(self, doc: SongDocument) -> None:
        """Deletion removes the note; undo puts the same object back."""
        pattern = doc.song.channels[0].patterns[0]
        note = Note.create(36, 0, 12, 6)
        pattern.notes = [note]

        change = ChangeNoteAdded(doc, pattern, note, 0, deletion=True)
        assert pattern.notes == []

        change.undo()
        assert pattern.notes[0] is note

    def test_pitch_added(self, doc: SongDocument) -> None:
        """Chord pitches are inserted and removed by index."""
        note = Note.create(36, 0, 12, 6)
        change = ChangePitchAdded(doc, note, 40, 1)
        assert note.pitches == [36, 40]
        change.undo()
        assert note.pitches == [36]
        ChangePitchAdded(doc, note, 36, 0, deletion=True)
        assert note.pitches == []

    def test_pattern_notes_replaced(self, doc: SongDocument) -> None:
        """The whole list object is swapped and swapped back."""
        pattern = doc.song.channels[0].patterns[0]
        old_notes = pattern.notes
        change = ChangePatternNotes(doc, pattern, [Note.create(36, 0, 12, 6)])
        assert len(pattern.notes) == 1
        change.undo()
        assert pattern.notes is old_notes


class TestPatternSelection:
    """Tests for ChangePatternSelection."""

    def test_set_and_clear(self, doc: SongDocument) -> None:
        """A non-empty range activates the selection; an empty one clears it."""
        ChangePatternSelection(doc, 12, 24)
        assert doc.selection.pattern_selection_active
        ChangePatternSelection(doc, 0, 0)
        assert not doc.selection.pattern_selection_active

    def test_undo(self, doc: SongDocument) -> None:
        """Undo restores the previous range and flag."""
        change = ChangePatternSelection(doc, 6, 18)
        change.undo()
        assert doc.selection.pattern_selection_start == 0
        assert doc.selection.pattern_selection_end == 0
        assert not doc.selection.pattern_selection_active


class TestNoteTruncate:
    """Tests for ChangeNoteTruncate."""

    def test_split_straddling_note(self, doc: SongDocument) -> None:
        """A note covering the whole range is split around it."""
        pattern = doc.song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 0, 24, 6)]

        change = ChangeNoteTruncate(doc, pattern, 8, 16)

        assert spans(pattern.notes) == [(0, 8), (16, 24)]
        change.undo()
        assert spans(pattern.notes) == [(0, 24)]

    def test_shorten_and_delete(self, doc: SongDocument) -> None:
        """Edge overlaps are shortened and contained notes deleted."""
        pattern = doc.song.channels[0].patterns[0]
        pattern.notes = [
            Note.create(36, 0, 10, 6),
            Note.create(38, 10, 14, 6),
            Note.create(40, 14, 24, 6),
        ]

        ChangeNoteTruncate(doc, pattern, 8, 16)

        assert spans(pattern.notes) == [(0, 8), (16, 24)]
        assert [note.pitches for note in pattern.notes] == [[36], [40]]

    def test_skip_note(self, doc: SongDocument) -> None:
        """The skip note is never touched."""
        pattern = doc.song.channels[0].patterns[0]
        keep = Note.create(36, 8, 16, 6)
        pattern.notes = [keep]
        assert ChangeNoteTruncate(doc, pattern, 8, 16, skip_note=keep).is_noop()
        assert pattern.notes == [keep]

    def test_mod_channel_only_matching_pitch(self) -> None:
        """In mod channels only notes on the skip note's pitch are cut."""
        doc = SongDocument(Song.create(pitch_channels=1, mod_channels=1))
        doc.channel = 1
        pattern = doc.song.channels[1].patterns[0]
        skip = Note.create(1, 0, 8, 6)
        other = Note.create(2, 4, 12, 6)
        same = Note.create(1, 4, 12, 6)
        pattern.notes = [skip, other, same]

        ChangeNoteTruncate(doc, pattern, 0, 8, skip_note=skip)

        assert spans(pattern.notes) == [(0, 8), (4, 12), (8, 12)]


class TestSplitNotesAtSelection:
    """Tests for ChangeSplitNotesAtSelection."""

    def test_split_both_edges(self, doc: SongDocument) -> None:
        """A note across both selection edges becomes three notes."""
        pattern = doc.song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 0, 24, 6)]
        ChangePatternSelection(doc, 6, 18)

        change = ChangeSplitNotesAtSelection(doc, pattern)

        assert spans(pattern.notes) == [(0, 6), (6, 18), (18, 24)]
        change.undo()
        assert spans(pattern.notes) == [(0, 24)]


class TestPatternRhythm:
    """Tests for ChangePatternRhythm."""

    def test_quantize_and_drop(self, doc: SongDocument) -> None:
        """Notes snap to the sixteenth grid; notes collapsing to nothing are removed."""
        pattern = doc.song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 1, 23, 6), Note.create(38, 30, 31, 6)]

        change = ChangePatternRhythm(doc, pattern)

        assert spans(pattern.notes) == [(0, 24)]
        change.undo()
        assert spans(pattern.notes) == [(1, 23), (30, 31)]
