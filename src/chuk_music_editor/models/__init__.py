"""
Pydantic models for the sequencer timeline.

This module provides:
- NotePin: One (time, interval, size) envelope breakpoint
- Note: Timed note or chord with its pins
- Pattern: Reusable block of notes
- Channel: Pattern pool plus bar assignments
- Song: Complete timeline with timing and pitch context
- Selection: Part-range selection inside a pattern
"""

from chuk_music_editor.models.note import (
    InvariantError,
    Note,
    NotePin,
    adjacent_notes_have_matching_pitches,
    make_note_pin,
    remove_redundant_pins,
)
from chuk_music_editor.models.song import Channel, Instrument, Pattern, Selection, Song

__all__ = [
    "InvariantError",
    "Channel",
    "Instrument",
    "Note",
    "NotePin",
    "Pattern",
    "Selection",
    "Song",
    "adjacent_notes_have_matching_pitches",
    "make_note_pin",
    "remove_redundant_pins",
]
