"""
Pytest configuration and shared fixtures.
"""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from chuk_music_editor.changes import SongDocument
from chuk_music_editor.config import SequencerConfig
from chuk_music_editor.models import Note, NotePin, Song, make_note_pin


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def coarse_config() -> SequencerConfig:
    """Four parts per beat keeps hand-computed positions small."""
    return SequencerConfig(parts_per_beat=4)


@pytest.fixture
def doc() -> SongDocument:
    """Document with one pitch channel at the default resolution."""
    return SongDocument(Song.create(pitch_channels=1, bar_count=4))


@pytest.fixture
def coarse_doc(coarse_config: SequencerConfig) -> SongDocument:
    """Two bars of 4 beats (16 parts per bar) on one pitch channel."""
    return SongDocument(
        Song.create(pitch_channels=1, bar_count=2, beats_per_bar=4, config=coarse_config)
    )


def pin_tuples(pins: list[NotePin]) -> list[tuple[int, int, int]]:
    """(time, interval, size) of each pin, for compact assertions."""
    return [(pin.time, pin.interval, pin.size) for pin in pins]


def continuing_note(pitch: int, start: int, end: int, size: int = 6) -> Note:
    """Flat note flagged as continuing the previous bar."""
    note = Note.create(pitch, start, end, size)
    note.continues_last_pattern = True
    return note


def bent_note(pitch: int, pins: list[tuple[int, int, int]]) -> Note:
    """Note starting at 0 with (time, interval, size) pins."""
    return Note(
        pitches=[pitch],
        start=0,
        end=pins[-1][0],
        pins=[make_note_pin(interval, time, size) for time, interval, size in pins],
    )
