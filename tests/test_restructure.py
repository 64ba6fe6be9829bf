"""
Tests for bar restructuring.

Tests cover:
- project_note_into_bar interpolation, continuation and merging
- ChangeMoveAndOverflowNotes splitting at bar boundaries and shift validation
- Duration and pitch content preserved across bar lengths and shifts
- ChangeBeatsPerBar splice, stretch and overflow strategies
- ChangeMoveNotesSideways wrap-around and overflow
"""

from collections import Counter

import pytest
from conftest import bent_note, continuing_note, pin_tuples

from chuk_music_editor.changes import (
    ChangeBeatsPerBar,
    ChangeMoveAndOverflowNotes,
    ChangeMoveNotesSideways,
    SongDocument,
    project_note_into_bar,
)
from chuk_music_editor.config import SequencerConfig
from chuk_music_editor.models import InvariantError, Note, Song
from chuk_music_editor.validation import validate_song


def sounded_content(song: Song) -> Counter:
    """Parts sounded per pitch over every channel and bar."""
    content: Counter = Counter()
    for channel_index in range(song.get_channel_count()):
        for bar in range(song.bar_count):
            pattern = song.get_pattern(channel_index, bar)
            if pattern is None:
                continue
            for note in pattern.notes:
                for pitch in note.pitches:
                    content[pitch] += note.end - note.start
    return content


class TestProjectNoteIntoBar:
    """Tests for projecting a note fragment into a bar."""

    def test_interpolates_both_boundaries(self) -> None:
        """Boundary pins are interpolated with half-up rounding and rebased."""
        note = bent_note(36, [(0, 0, 6), (8, 4, 2)])
        notes: list[Note] = []
        project_note_into_bar(note, -2, 0, 4, notes)
        assert len(notes) == 1
        fragment = notes[0]
        assert fragment.pitches == [37]
        assert pin_tuples(fragment.pins) == [(0, 0, 5), (4, 2, 3)]
        assert fragment.continues_last_pattern is True

    def test_fragment_inside_bar(self) -> None:
        """A fragment that does not start the bar never continues."""
        notes: list[Note] = []
        project_note_into_bar(Note.create(40, 0, 4, 6), 0, 6, 10, notes)
        assert (notes[0].start, notes[0].end) == (6, 10)
        assert notes[0].continues_last_pattern is False

    def test_merges_into_previous_note(self) -> None:
        """A continued fragment meeting the previous note joins it."""
        notes = [Note.create(36, 0, 4, 6)]
        project_note_into_bar(continuing_note(36, 0, 4), 0, 4, 8, notes)
        assert len(notes) == 1
        assert notes[0].end == 8
        assert pin_tuples(notes[0].pins) == [(0, 0, 6), (8, 0, 6)]

    def test_no_merge_with_other_pitch(self) -> None:
        """Different pitches stay separate notes."""
        notes = [Note.create(36, 0, 4, 6)]
        project_note_into_bar(continuing_note(38, 0, 4), 0, 4, 8, notes)
        assert len(notes) == 2

    def test_fragment_outside_note_raises(self) -> None:
        """Projecting a range the note does not cover is an invariant violation."""
        with pytest.raises(InvariantError):
            project_note_into_bar(Note.create(36, 0, 8, 6), -20, 0, 4, [])


class TestMoveAndOverflowNotes:
    """Tests for ChangeMoveAndOverflowNotes."""

    def test_note_split_at_bar_boundary(self, coarse_doc: SongDocument) -> None:
        """A note shifted across the bar line becomes two fragments."""
        channel = coarse_doc.song.channels[0]
        channel.bars = [1, 0]
        channel.patterns[0].notes = [Note.create(36, 10, 14, 6)]

        ChangeMoveAndOverflowNotes(coarse_doc, 4, 4)

        song = coarse_doc.song
        first = song.get_pattern(0, 0)
        second = song.get_pattern(0, 1)
        assert first is not None and second is not None
        assert [(n.start, n.end) for n in first.notes] == [(14, 16)]
        assert [(n.start, n.end) for n in second.notes] == [(0, 2)]
        assert second.notes[0].continues_last_pattern is True
        assert first.notes[0].continues_last_pattern is False

    def test_undo_restores_channels(self, coarse_doc: SongDocument) -> None:
        """Undo reinstalls the original channel objects."""
        song = coarse_doc.song
        old_channels = song.channels
        old_channel = song.channels[0]
        old_channel.bars = [1, 0]
        old_channel.patterns[0].notes = [Note.create(36, 10, 14, 6)]

        change = ChangeMoveAndOverflowNotes(coarse_doc, 2, 4)
        assert song.channels is not old_channels
        change.undo()
        assert song.channels is old_channels
        assert song.channels[0].bars == [1, 0]
        assert song.channels[0].patterns[0].notes[0].start == 10

    @pytest.mark.parametrize("new_beats", [1, 2, 3, 4, 5, 7])
    @pytest.mark.parametrize("parts_to_move", [0, 3])
    def test_content_preserved(
        self, coarse_config: SequencerConfig, new_beats: int, parts_to_move: int
    ) -> None:
        """Sounded duration per pitch survives any bar length and shift."""
        song = Song.create(bar_count=3, beats_per_bar=4, config=coarse_config)
        channel = song.channels[0]
        channel.patterns[0].notes = [Note.create(36, 0, 6, 6), Note.create(40, 8, 16, 6)]
        channel.patterns[1].notes = [continuing_note(40, 0, 4), Note.create(43, 4, 16, 6)]
        channel.bars = [1, 2, 1]
        doc = SongDocument(song)
        before = sounded_content(song)

        ChangeMoveAndOverflowNotes(doc, new_beats, parts_to_move)

        assert sounded_content(song) == before
        assert validate_song(song).is_valid

    def test_negative_shift_raises(self, coarse_doc: SongDocument) -> None:
        """Shifting notes backwards is rejected before anything changes."""
        song = coarse_doc.song
        old_channels = song.channels
        song.channels[0].bars = [1, 1]
        song.channels[0].patterns[0].notes = [Note.create(36, 0, 4, 6)]

        with pytest.raises(ValueError, match="negative"):
            ChangeMoveAndOverflowNotes(coarse_doc, 4, -3)

        assert song.channels is old_channels
        assert song.channels[0].patterns[0].notes[0].start == 0


class TestBeatsPerBar:
    """Tests for ChangeBeatsPerBar."""

    def test_overflow_splits_and_continues(self, coarse_doc: SongDocument) -> None:
        """A note ending on the old bar line is followed by its continuation."""
        song = coarse_doc.song
        channel = song.channels[0]
        channel.patterns[0].notes = [Note.create(36, 14, 16, 6)]
        channel.patterns[1].notes = [continuing_note(36, 0, 2)]
        channel.bars = [1, 2]

        change = ChangeBeatsPerBar(coarse_doc, 2, "overflow")

        assert song.beats_per_bar == 2
        assert song.bar_count == 3
        assert song.channels[0].bars == [0, 1, 2]
        ending = song.get_pattern(0, 1).notes[0]
        starting = song.get_pattern(0, 2).notes[0]
        assert (ending.start, ending.end) == (6, 8)
        assert (starting.start, starting.end) == (0, 2)
        assert starting.continues_last_pattern is True
        assert (song.loop_start, song.loop_length) == (0, 3)

        change.undo()
        assert song.beats_per_bar == 4
        assert song.bar_count == 2
        assert song.channels[0].bars == [1, 2]

    def test_splice_cuts_at_new_bar_end(self, coarse_doc: SongDocument) -> None:
        """Splice shortens overlapping notes and drops notes past the bar end."""
        song = coarse_doc.song
        pattern = song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 2, 14, 6), Note.create(38, 12, 16, 6)]

        change = ChangeBeatsPerBar(coarse_doc, 2, "splice")

        assert song.beats_per_bar == 2
        assert [(n.start, n.end) for n in pattern.notes] == [(2, 8)]

        change.undo()
        assert song.beats_per_bar == 4
        assert [(n.start, n.end) for n in pattern.notes] == [(2, 14), (12, 16)]

    def test_splice_growing_keeps_notes(self, coarse_doc: SongDocument) -> None:
        """Longer bars leave spliced notes alone."""
        pattern = coarse_doc.song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 2, 14, 6)]
        ChangeBeatsPerBar(coarse_doc, 6, "splice")
        assert coarse_doc.song.beats_per_bar == 6
        assert (pattern.notes[0].start, pattern.notes[0].end) == (2, 14)

    def test_stretch_rescales_and_quantizes(self, doc: SongDocument) -> None:
        """Stretch scales timing and tempo, dropping notes that collapse."""
        song = doc.song
        pattern = song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 24, 72, 6), Note.create(40, 101, 102, 6)]

        change = ChangeBeatsPerBar(doc, 4, "stretch")

        assert song.beats_per_bar == 4
        assert song.tempo == 75
        assert [(n.start, n.end) for n in pattern.notes] == [(12, 36)]

        change.undo()
        assert song.beats_per_bar == 8
        assert song.tempo == 150
        assert [(n.start, n.end) for n in pattern.notes] == [(24, 72), (101, 102)]

    def test_same_value_is_noop(self, doc: SongDocument) -> None:
        """Changing to the current bar length does nothing."""
        assert ChangeBeatsPerBar(doc, doc.song.beats_per_bar, "overflow").is_noop()

    def test_unknown_strategy_raises(self, doc: SongDocument) -> None:
        """Unknown strategies are rejected."""
        with pytest.raises(ValueError, match="strategy"):
            ChangeBeatsPerBar(doc, 4, "squash")


class TestMoveNotesSideways:
    """Tests for ChangeMoveNotesSideways."""

    def test_wrap_around(self, coarse_doc: SongDocument) -> None:
        """Notes pushed past the bar end re-enter at its start."""
        pattern = coarse_doc.song.channels[0].patterns[0]
        pattern.notes = [Note.create(36, 10, 16, 6)]

        change = ChangeMoveNotesSideways(coarse_doc, 1, "wrap_around")

        assert [(n.start, n.end) for n in pattern.notes] == [(0, 4), (14, 16)]
        change.undo()
        assert [(n.start, n.end) for n in pattern.notes] == [(10, 16)]

    def test_whole_bar_shift_is_noop(self, coarse_doc: SongDocument) -> None:
        """Shifting by a whole bar changes nothing."""
        assert ChangeMoveNotesSideways(coarse_doc, 4, "wrap_around").is_noop()

    def test_overflow_forward_keeps_bar_count(self, coarse_doc: SongDocument) -> None:
        """Forward overflow moves notes and restores bar count and loop."""
        song = coarse_doc.song
        channel = song.channels[0]
        channel.bars = [1, 0]
        channel.patterns[0].notes = [Note.create(36, 0, 4, 6)]
        loop = (song.loop_start, song.loop_length)

        change = ChangeMoveNotesSideways(coarse_doc, 1, "overflow")

        assert song.bar_count == 2
        assert song.channels[0].bars == [1, 0]
        assert (song.get_pattern(0, 0).notes[0].start, song.get_pattern(0, 0).notes[0].end) == (4, 8)
        assert (song.loop_start, song.loop_length) == loop

        change.undo()
        assert song.channels[0].patterns[0].notes[0].start == 0

    def test_overflow_backward_grows_song(self, coarse_doc: SongDocument) -> None:
        """A backward shift with a busy first bar adds a bar in front."""
        song = coarse_doc.song
        channel = song.channels[0]
        channel.bars = [1, 0]
        channel.patterns[0].notes = [Note.create(36, 0, 4, 6)]

        ChangeMoveNotesSideways(coarse_doc, -1, "overflow")

        assert song.bar_count == 3
        assert song.channels[0].bars == [1, 0, 0]
        note = song.get_pattern(0, 0).notes[0]
        assert (note.start, note.end) == (12, 16)
        assert (song.loop_start, song.loop_length) == (1, 2)

    def test_overflow_backward_drops_empty_first_bar(self, coarse_doc: SongDocument) -> None:
        """A backward shift out of an empty first bar removes that bar."""
        song = coarse_doc.song
        channel = song.channels[0]
        channel.bars = [0, 1]
        channel.patterns[0].notes = [Note.create(36, 0, 4, 6)]

        ChangeMoveNotesSideways(coarse_doc, -1, "overflow")

        assert song.bar_count == 2
        assert song.channels[0].bars == [1, 0]
        note = song.get_pattern(0, 0).notes[0]
        assert (note.start, note.end) == (12, 16)
