"""
Undoable edits of a song.

This module provides:
- Change, UndoableChange, ChangeGroup, ChangeSequence: The command framework
- SongDocument, ChangeNotifier, UndoStack: What changes are applied to and reported through
- Pin edits: ChangePinTime, ChangePitchBend, ChangeNoteLength, ChangeSizeBend
- Note-list edits: truncation, selection splits, transposition, rhythm quantization
- Song settings: key, tempo, scale, loop, bar count and pattern assignment
- Restructuring: ChangeMoveAndOverflowNotes, ChangeBeatsPerBar, ChangeMoveNotesSideways
- Scale remapping: ChangePatternScale, ChangeSongScale, ChangeDetectKey
"""

from chuk_music_editor.changes.base import Change, ChangeGroup, ChangeSequence, UndoableChange
from chuk_music_editor.changes.document import ChangeNotifier, HistorySink, SongDocument, UndoStack
from chuk_music_editor.changes.notes import (
    ChangeNoteAdded,
    ChangeNoteTruncate,
    ChangePatternNotes,
    ChangePatternRhythm,
    ChangePatternSelection,
    ChangePitchAdded,
    ChangeSplitNotesAtSelection,
    ChangeTranspose,
    ChangeTransposeNote,
)
from chuk_music_editor.changes.pins import (
    ChangeNoteLength,
    ChangePins,
    ChangePinTime,
    ChangePitchBend,
    ChangeRhythmNote,
    ChangeSizeBend,
    normalize_pins,
)
from chuk_music_editor.changes.restructure import (
    ChangeBeatsPerBar,
    ChangeMoveAndOverflowNotes,
    ChangeMoveNotesSideways,
    project_note_into_bar,
)
from chuk_music_editor.changes.scale import (
    ChangeDetectKey,
    ChangePatternScale,
    ChangeSongScale,
    union_of_used_notes,
)
from chuk_music_editor.changes.song import (
    ChangeBarCount,
    ChangeCustomScale,
    ChangeDeleteBars,
    ChangeInsertBars,
    ChangeKey,
    ChangeLoop,
    ChangePatternNumbers,
    ChangeReplacePatterns,
    ChangeRhythm,
    ChangeScale,
    ChangeTempo,
    SongSettingChange,
)

__all__ = [
    # Framework
    "Change",
    "UndoableChange",
    "ChangeGroup",
    "ChangeSequence",
    "ChangeNotifier",
    "HistorySink",
    "SongDocument",
    "UndoStack",
    # Pins
    "ChangePins",
    "ChangePinTime",
    "ChangePitchBend",
    "ChangeNoteLength",
    "ChangeSizeBend",
    "ChangeRhythmNote",
    "normalize_pins",
    # Notes
    "ChangeNoteAdded",
    "ChangePitchAdded",
    "ChangePatternNotes",
    "ChangePatternSelection",
    "ChangeNoteTruncate",
    "ChangeSplitNotesAtSelection",
    "ChangeTransposeNote",
    "ChangeTranspose",
    "ChangePatternRhythm",
    # Song
    "SongSettingChange",
    "ChangeKey",
    "ChangeTempo",
    "ChangeRhythm",
    "ChangeScale",
    "ChangeCustomScale",
    "ChangeLoop",
    "ChangeBarCount",
    "ChangeInsertBars",
    "ChangeDeleteBars",
    "ChangePatternNumbers",
    "ChangeReplacePatterns",
    # Restructuring
    "project_note_into_bar",
    "ChangeMoveAndOverflowNotes",
    "ChangeBeatsPerBar",
    "ChangeMoveNotesSideways",
    # Scale
    "union_of_used_notes",
    "ChangePatternScale",
    "ChangeSongScale",
    "ChangeDetectKey",
]
