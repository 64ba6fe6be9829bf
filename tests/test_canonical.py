"""
Tests for pattern canonicalization.

Tests cover:
- Structural note list comparison
- Instrument set comparison
- Duplicate pattern removal and first-use renumbering
- Pattern instrument cleanup
"""

from chuk_music_editor.canonical import (
    compare_pattern_notes,
    discard_invalid_pattern_instruments,
    patterns_contain_same_instruments,
    remove_duplicate_patterns,
)
from chuk_music_editor.models import Channel, Instrument, Note, Pattern, Song


class TestComparePatternNotes:
    """Tests for compare_pattern_notes."""

    def test_equal_content(self) -> None:
        """Separately built identical notes compare equal."""
        assert compare_pattern_notes([Note.create(36, 0, 8, 6)], [Note.create(36, 0, 8, 6)])

    def test_continuation_flag_ignored(self) -> None:
        """The continuation flag is not part of the comparison."""
        continued = Note.create(36, 0, 8, 6)
        continued.continues_last_pattern = True
        assert compare_pattern_notes([Note.create(36, 0, 8, 6)], [continued])

    def test_differences(self) -> None:
        """Timing, pitch, pins and length differences are detected."""
        base = [Note.create(36, 0, 8, 6)]
        assert not compare_pattern_notes(base, [Note.create(36, 0, 4, 6)])
        assert not compare_pattern_notes(base, [Note.create(38, 0, 8, 6)])
        assert not compare_pattern_notes(base, [Note.create(36, 0, 8, 6, fadeout=True)])
        assert not compare_pattern_notes(base, [])


class TestRemoveDuplicatePatterns:
    """Tests for remove_duplicate_patterns."""

    def test_merges_and_renumbers(self) -> None:
        """Identical patterns fold together; numbering follows first use."""
        a = Pattern(notes=[Note.create(36, 0, 8, 6)])
        b = Pattern(notes=[Note.create(36, 0, 8, 6)])
        c = Pattern(notes=[Note.create(40, 0, 8, 6)])
        channel = Channel(patterns=[a, b, c], bars=[2, 1, 3, 0, 2])

        remove_duplicate_patterns([channel])

        assert channel.bars == [1, 1, 2, 0, 1]
        assert len(channel.patterns) == 2
        assert channel.patterns[0] is b
        assert channel.patterns[1] is c

    def test_unused_patterns_dropped(self) -> None:
        """Patterns no bar plays are removed."""
        used = Pattern(notes=[Note.create(36, 0, 8, 6)])
        channel = Channel(patterns=[Pattern(), used], bars=[2, 0])
        remove_duplicate_patterns([channel])
        assert channel.patterns == [used]
        assert channel.bars == [1, 0]

    def test_different_instruments_kept_apart(self) -> None:
        """Equal notes with different instruments stay separate."""
        a = Pattern(notes=[Note.create(36, 0, 8, 6)], instruments=[0])
        b = Pattern(notes=[Note.create(36, 0, 8, 6)], instruments=[1])
        channel = Channel(patterns=[a, b], bars=[1, 2])
        remove_duplicate_patterns([channel])
        assert channel.bars == [1, 2]

    def test_instrument_order_ignored(self) -> None:
        """Instrument sets compare without regard to order."""
        assert patterns_contain_same_instruments([0, 2], [2, 0])
        assert not patterns_contain_same_instruments([0, 2], [0])


class TestDiscardInvalidPatternInstruments:
    """Tests for discard_invalid_pattern_instruments."""

    def test_removes_duplicates_and_out_of_range(self) -> None:
        """Duplicates and unknown instruments go; the list is capped."""
        song = Song.create(layered_instruments=True)
        channel = Channel(instruments=[Instrument(), Instrument()])
        instruments = [1, 1, 5, 0]
        discard_invalid_pattern_instruments(instruments, song, channel)
        assert instruments == [1, 0]

    def test_single_instrument_cap(self) -> None:
        """Without layering a pattern keeps one instrument."""
        song = Song.create()
        channel = Channel(instruments=[Instrument(), Instrument()])
        instruments = [1, 0]
        discard_invalid_pattern_instruments(instruments, song, channel)
        assert instruments == [1]

    def test_empty_falls_back_to_first(self) -> None:
        """An emptied list falls back to instrument 0."""
        song = Song.create()
        channel = Channel()
        instruments = [3]
        discard_invalid_pattern_instruments(instruments, song, channel)
        assert instruments == [0]
