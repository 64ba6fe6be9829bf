"""
chuk-music-editor - the undoable editing core of a pattern-based sequencer.

Songs are channels of bars, bars point at patterns, patterns hold notes with
pin envelopes. Every edit is a Change that can be undone and redone exactly.
"""

from chuk_music_editor.canonical import compare_pattern_notes, remove_duplicate_patterns
from chuk_music_editor.config import DEFAULT_CONFIG, SequencerConfig, load_config
from chuk_music_editor.constants import BeatsPerBarStrategy, ChannelKind, ShiftStrategy
from chuk_music_editor.models import Channel, InvariantError, Note, NotePin, Pattern, Song

__version__ = "0.1.0"

__all__ = [
    "BeatsPerBarStrategy",
    "Channel",
    "ChannelKind",
    "DEFAULT_CONFIG",
    "InvariantError",
    "Note",
    "NotePin",
    "Pattern",
    "SequencerConfig",
    "ShiftStrategy",
    "Song",
    "compare_pattern_notes",
    "load_config",
    "remove_duplicate_patterns",
]
