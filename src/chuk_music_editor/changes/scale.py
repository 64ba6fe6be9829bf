"""
Scale and key edits - remapping existing notes onto a new pitch context.
"""

from __future__ import annotations

import logging

from chuk_music_editor.changes.base import ChangeGroup, UndoableChange
from chuk_music_editor.changes.document import SongDocument
from chuk_music_editor.changes.notes import ChangeSplitNotesAtSelection, ChangeTranspose
from chuk_music_editor.changes.song import ChangeCustomScale, ChangeKey, ChangeScale
from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.core.pitch import PITCHES_PER_OCTAVE
from chuk_music_editor.core.scale import generate_scale_map, scale_flags
from chuk_music_editor.models.note import (
    InvariantError,
    Note,
    make_note_pin,
    remove_redundant_pins,
)
from chuk_music_editor.models.song import Pattern

logger = logging.getLogger(__name__)


def union_of_used_notes(pattern: Pattern, flags: list[bool]) -> None:
    """Set the flag of every pitch class a pattern's notes reach, including bends."""
    for note in pattern.notes:
        for pitch in note.pitches:
            for pin in note.pins:
                flags[(pitch + pin.interval) % PITCHES_PER_OCTAVE] = True


def _map_pitch(scale_map: list[int], pitch: int) -> int:
    pitch_class = pitch % PITCHES_PER_OCTAVE
    return scale_map[pitch_class] + (pitch - pitch_class)


class _ChangeNoteScale(UndoableChange):
    def __init__(self, doc: SongDocument, note: Note, scale_map: list[int], max_pitch: int) -> None:
        super().__init__(doc.notifier)

        new_pitches: list[int] = []
        for pitch in note.pitches:
            transformed = _map_pitch(scale_map, pitch)
            if transformed not in new_pitches:
                new_pitches.append(transformed)

        low = 0
        high = max_pitch
        for pitch in new_pitches[1:]:
            diff = new_pitches[0] - pitch
            low = max(low, diff)
            high = min(high, diff + max_pitch)

        new_pins = []
        for old_pin in note.pins:
            interval = min(max(old_pin.interval + note.pitches[0], low), high)
            interval = _map_pitch(scale_map, interval) - new_pitches[0]
            new_pins.append(make_note_pin(interval, old_pin.time, old_pin.size))

        if new_pins[0].interval != 0:
            raise InvariantError(ErrorMessages.WRONG_PIN_START.format(interval=new_pins[0].interval))
        remove_redundant_pins(new_pins)

        if new_pitches == note.pitches and new_pins == note.pins:
            return

        old_pitches = note.pitches
        old_pins = note.pins

        def forward() -> None:
            note.pitches = new_pitches
            note.pins = new_pins

        def backward() -> None:
            note.pitches = old_pitches
            note.pins = old_pins

        self._record(forward, backward)


class ChangePatternScale(ChangeGroup):
    """
    Remap a pattern's notes through a 12-entry pitch class table.

    Every pitch keeps its octave and moves to scale_map[pitch % 12]; pins are
    remapped the same way, clamped so each pitch of a chord stays in range.
    With an active selection only the notes inside it are remapped, after
    splitting notes at the selection edges.
    """

    def __init__(
        self,
        doc: SongDocument,
        pattern: Pattern,
        scale_map: list[int],
        use_selection: bool = True,
    ) -> None:
        super().__init__(doc.notifier)
        selection = doc.selection
        selective = use_selection and selection.pattern_selection_active
        max_pitch = doc.song.config.max_pitch

        with self._batch():
            if selective:
                self.append(ChangeSplitNotesAtSelection(doc, pattern))
            for note in pattern.notes:
                if selective and (
                    note.end <= selection.pattern_selection_start
                    or note.start >= selection.pattern_selection_end
                ):
                    continue
                self.append(_ChangeNoteScale(doc, note, scale_map, max_pitch))


class ChangeSongScale(ChangeGroup):
    """
    Switch the song to another scale and move every pitched note along with it.

    Args:
        doc: Document to edit
        new_scale: Index into SCALES
        custom_flags: New custom scale flags (only used with the custom scale)
    """

    def __init__(
        self, doc: SongDocument, new_scale: int, custom_flags: list[bool] | None = None
    ) -> None:
        super().__init__(doc.notifier)
        song = doc.song
        old_flags = song.get_scale_flags()
        new_flags = scale_flags(new_scale, custom_flags if custom_flags is not None else song.scale_custom)
        scale_map = generate_scale_map(old_flags, new_flags)

        with self._batch():
            if custom_flags is not None:
                self.append(ChangeCustomScale(doc, custom_flags))
            self.append(ChangeScale(doc, new_scale))
            for channel in song.channels[: song.pitch_channel_count]:
                for pattern in channel.patterns:
                    self.append(ChangePatternScale(doc, pattern, scale_map, use_selection=False))


class ChangeDetectKey(ChangeGroup):
    """
    Guess the song key from its pitched notes and transpose into it.

    Every flat stretch of a note (two adjacent pins with the same interval)
    adds weight to its pitch classes: longer and louder stretches count more,
    and the part inside the first beat of the pattern counts twice. The key is
    the root of the most prominent major or minor triad. Notes are transposed
    chromatically so they keep sounding at the same pitch relative to the new key.
    """

    def __init__(self, doc: SongDocument) -> None:
        super().__init__(doc.notifier)
        song = doc.song
        parts_per_beat = song.config.parts_per_beat

        weights = [0] * PITCHES_PER_OCTAVE
        for channel_index in range(song.pitch_channel_count):
            for bar in range(song.bar_count):
                pattern = song.get_pattern(channel_index, bar)
                if pattern is None:
                    continue
                for note in pattern.notes:
                    for prev_pin, next_pin in zip(note.pins, note.pins[1:]):
                        if prev_pin.interval != next_pin.interval:
                            continue
                        weight = next_pin.time - prev_pin.time
                        weight += max(
                            0,
                            min(parts_per_beat, next_pin.time + note.start)
                            - (prev_pin.time + note.start),
                        )
                        weight *= next_pin.size + prev_pin.size
                        for pitch in note.pitches:
                            weights[(song.key + prev_pin.interval + pitch) % PITCHES_PER_OCTAVE] += weight

        best_key = 0
        best_weight = 0
        for key in range(PITCHES_PER_OCTAVE):
            weight = weights[key] * (
                3 * weights[(key + 7) % PITCHES_PER_OCTAVE]
                + weights[(key + 4) % PITCHES_PER_OCTAVE]
                + weights[(key + 3) % PITCHES_PER_OCTAVE]
            )
            if best_weight < weight:
                best_weight = weight
                best_key = key

        if best_key == song.key:
            return

        diff = song.key - best_key
        logger.debug(f"Detected key {best_key} (was {song.key})")
        with self._batch():
            for channel_index in range(song.pitch_channel_count):
                for pattern in song.channels[channel_index].patterns:
                    for _ in range(abs(diff)):
                        self.append(
                            ChangeTranspose(doc, channel_index, pattern, diff > 0, ignore_scale=True)
                        )
            self.append(ChangeKey(doc, best_key))
