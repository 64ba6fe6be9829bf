"""
Bar restructuring - re-slicing the timeline onto a new bar grid.

Every note is placed on an absolute timeline (bar start + note start + shift),
cut at the new bar boundaries, and each fragment is projected into a fresh
pattern for its bar. Boundary pins are interpolated so the fragments together
sound like the original note; consecutive fragments of a continued note are
merged back together where they meet inside one bar. Identical patterns are
then folded together and the rebuilt channels replace the old ones.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import TypeVar

from chuk_music_editor.canonical import remove_duplicate_patterns
from chuk_music_editor.changes.base import ChangeGroup
from chuk_music_editor.changes.document import SongDocument
from chuk_music_editor.changes.notes import (
    ChangeNoteAdded,
    ChangeNoteTruncate,
    ChangePatternNotes,
    ChangePatternRhythm,
)
from chuk_music_editor.changes.pins import ChangeRhythmNote
from chuk_music_editor.changes.song import (
    ChangeBarCount,
    ChangeDeleteBars,
    ChangeLoop,
    ChangeReplacePatterns,
    ChangeTempo,
    SongSettingChange,
)
from chuk_music_editor.constants import (
    BeatsPerBarStrategy,
    ChannelKind,
    ErrorMessages,
    ShiftStrategy,
)
from chuk_music_editor.core.rhythm import round_half_up
from chuk_music_editor.models.note import (
    InvariantError,
    Note,
    NotePin,
    adjacent_notes_have_matching_pitches,
    make_note_pin,
    remove_redundant_pins,
)
from chuk_music_editor.models.song import Channel, Pattern

logger = logging.getLogger(__name__)

StrategyT = TypeVar("StrategyT", bound=Enum)


def _parse_strategy(strategy_type: type[StrategyT], value: str) -> StrategyT:
    try:
        return strategy_type(value)
    except ValueError:
        raise ValueError(ErrorMessages.UNKNOWN_STRATEGY.format(strategy=value)) from None


def project_note_into_bar(
    old_note: Note,
    time_offset: int,
    start_part: int,
    end_part: int,
    new_notes: list[Note],
) -> None:
    """
    Project the slice of a note that falls in [start_part, end_part) of a bar.

    Args:
        old_note: Source note (not modified)
        time_offset: Amount added to the old pin times so that time 0 is the
            fragment start
        start_part: Fragment start within the bar
        end_part: Fragment end within the bar
        new_notes: Note list of the target bar; the fragment is appended, or
            merged into the last note when it continues it

    Raises:
        InvariantError: If the fragment does not overlap the note's pins
    """
    length = end_part - start_part
    pins: list[NotePin] = []
    old_pins = old_note.pins

    for index, pin in enumerate(old_pins):
        new_time = pin.time + time_offset
        if new_time < 0:
            if index + 1 >= len(old_pins):
                raise InvariantError(ErrorMessages.PIN_CONVERSION)
            next_pin = old_pins[index + 1]
            next_time = next_pin.time + time_offset
            if next_time > 0:
                ratio = -new_time / (next_time - new_time)
                pins.append(
                    make_note_pin(
                        round_half_up(pin.interval + ratio * (next_pin.interval - pin.interval)),
                        0,
                        round_half_up(pin.size + ratio * (next_pin.size - pin.size)),
                    )
                )
        elif new_time <= length:
            pins.append(make_note_pin(pin.interval, new_time, pin.size))
        else:
            if index < 1:
                raise InvariantError(ErrorMessages.PIN_CONVERSION)
            prev_pin = old_pins[index - 1]
            prev_time = prev_pin.time + time_offset
            if prev_time < length:
                ratio = (length - prev_time) / (new_time - prev_time)
                pins.append(
                    make_note_pin(
                        round_half_up(prev_pin.interval + ratio * (pin.interval - prev_pin.interval)),
                        length,
                        round_half_up(prev_pin.size + ratio * (pin.size - prev_pin.size)),
                    )
                )

    if not pins:
        raise InvariantError(ErrorMessages.PROJECTION_EMPTY.format(start=start_part, end=end_part))

    offset_interval = pins[0].interval
    for pin in pins:
        pin.interval -= offset_interval
    new_note = Note(
        pitches=[pitch + offset_interval for pitch in old_note.pitches],
        start=start_part,
        end=end_part,
        pins=pins,
    )

    if start_part == 0:
        new_note.continues_last_pattern = time_offset < 0 or old_note.continues_last_pattern
    elif new_notes and old_note.continues_last_pattern:
        prev_note = new_notes[-1]
        if prev_note.end == new_note.start and adjacent_notes_have_matching_pitches(
            prev_note, new_note
        ):
            interval_offset = prev_note.pins[-1].interval
            time_shift = prev_note.end - prev_note.start
            for pin in new_note.pins[1:]:
                joined = make_note_pin(pin.interval + interval_offset, pin.time + time_shift, pin.size)
                prev_note.pins.append(joined)
                prev_note.end = prev_note.start + joined.time
            remove_redundant_pins(prev_note.pins)
            return

    new_notes.append(new_note)


class ChangeMoveAndOverflowNotes(ChangeGroup):
    """
    Rebuild every channel on a new bar length, optionally shifting all notes.

    No note content is dropped: notes crossing a new bar boundary are split,
    with continuation flags on the later fragments.
    """

    def __init__(self, doc: SongDocument, new_beats_per_bar: int, parts_to_move: int) -> None:
        """
        Args:
            doc: Document to restructure
            new_beats_per_bar: Bar length of the rebuilt timeline
            parts_to_move: Shift applied to every note, in parts (non-negative)

        Raises:
            ValueError: If parts_to_move is negative
        """
        super().__init__(doc.notifier)
        if parts_to_move < 0:
            raise ValueError(ErrorMessages.NEGATIVE_SHIFT.format(parts=parts_to_move))
        song = doc.song

        pitch_channels: list[Channel] = []
        noise_channels: list[Channel] = []
        mod_channels: list[Channel] = []
        families = {
            ChannelKind.PITCH: pitch_channels,
            ChannelKind.NOISE: noise_channels,
            ChannelKind.MOD: mod_channels,
        }

        old_parts_per_bar = song.parts_per_bar
        new_parts_per_bar = song.config.parts_per_bar(new_beats_per_bar)

        for channel_index in range(song.get_channel_count()):
            old_channel = song.channels[channel_index]
            new_channel = Channel(
                name=old_channel.name,
                muted=old_channel.muted,
                octave=old_channel.octave,
                instruments=list(old_channel.instruments),
            )
            families[song.get_channel_kind(channel_index)].append(new_channel)

            current_bar = -1
            for old_bar in range(song.bar_count):
                old_pattern = song.get_pattern(channel_index, old_bar)
                if old_pattern is None:
                    continue
                old_bar_start = old_bar * old_parts_per_bar
                for old_note in old_pattern.notes:
                    absolute_start = old_note.start + old_bar_start + parts_to_move
                    absolute_end = old_note.end + old_bar_start + parts_to_move
                    start_bar = absolute_start // new_parts_per_bar
                    end_bar = math.ceil(absolute_end / new_parts_per_bar)

                    for bar in range(start_bar, end_bar):
                        bar_start = bar * new_parts_per_bar
                        start_part = max(0, absolute_start - bar_start)
                        end_part = min(new_parts_per_bar, absolute_end - bar_start)
                        if start_part >= end_part:
                            continue

                        if bar > current_bar:
                            while current_bar < bar - 1:
                                current_bar += 1
                                new_channel.bars.append(0)
                            current_bar = bar
                            new_channel.bars.append(0)
                        if new_channel.bars[bar] == 0:
                            # Mod channel notes can arrive out of order.
                            new_channel.patterns.append(
                                Pattern(instruments=list(old_pattern.instruments))
                            )
                            new_channel.bars[bar] = len(new_channel.patterns)

                        pattern = new_channel.patterns[new_channel.bars[bar] - 1]
                        project_note_into_bar(
                            old_note,
                            absolute_start - bar_start - start_part,
                            start_part,
                            end_part,
                            pattern.notes,
                        )

        remove_duplicate_patterns(pitch_channels)
        remove_duplicate_patterns(noise_channels)
        remove_duplicate_patterns(mod_channels)
        logger.debug(
            f"Restructured {song.get_channel_count()} channels to {new_beats_per_bar} beats per bar "
            f"(shift {parts_to_move} parts)"
        )

        with self._batch():
            self.append(ChangeReplacePatterns(doc, pitch_channels, noise_channels, mod_channels))


class _ChangeBeatsPerBarValue(SongSettingChange):
    def __init__(self, doc: SongDocument, new_value: int) -> None:
        super().__init__(doc)
        self._install({"beats_per_bar": new_value})


class ChangeBeatsPerBar(ChangeGroup):
    """
    Change the bar length, treating existing notes according to a strategy.

    - splice: notes past the new bar end are cut off
    - stretch: note timing and tempo are scaled by the beat ratio, then
      re-quantized to the rhythm grid
    - overflow: notes are redistributed over the new bar grid and the loop
      is reset to the whole song
    """

    def __init__(
        self, doc: SongDocument, new_value: int, strategy: BeatsPerBarStrategy | str
    ) -> None:
        super().__init__(doc.notifier)
        strategy = _parse_strategy(BeatsPerBarStrategy, strategy)
        song = doc.song
        old_value = song.beats_per_bar
        if old_value == new_value:
            return

        with self._batch():
            if strategy == BeatsPerBarStrategy.SPLICE:
                if old_value > new_value:
                    self._splice(doc, new_value, old_value)
            elif strategy == BeatsPerBarStrategy.STRETCH:
                self._stretch(doc, new_value, old_value)
            else:
                self.append(ChangeMoveAndOverflowNotes(doc, new_value, 0))
                self.append(ChangeLoop(doc, 0, song.bar_count))

            self.append(_ChangeBeatsPerBarValue(doc, new_value))

    def _splice(self, doc: SongDocument, new_value: int, old_value: int) -> None:
        config = doc.song.config
        for channel in doc.song.channels:
            for pattern in channel.patterns:
                self.append(
                    ChangeNoteTruncate(
                        doc,
                        pattern,
                        config.parts_per_bar(new_value),
                        config.parts_per_bar(old_value),
                        force=True,
                    )
                )

    def _stretch(self, doc: SongDocument, new_value: int, old_value: int) -> None:
        song = doc.song

        def change_rhythm(old_time: int) -> int:
            return round_half_up(old_time * new_value / old_value)

        for channel in song.channels:
            for pattern in channel.patterns:
                i = 0
                while i < len(pattern.notes):
                    note = pattern.notes[i]
                    if change_rhythm(note.start) >= change_rhythm(note.end):
                        self.append(ChangeNoteAdded(doc, pattern, note, i, deletion=True))
                    else:
                        self.append(ChangeRhythmNote(doc, note, change_rhythm))
                        i += 1
                self.append(ChangePatternRhythm(doc, pattern))

        self.append(ChangeTempo(doc, song.tempo * new_value / old_value))


class ChangeMoveNotesSideways(ChangeGroup):
    """
    Shift every note in the song by a number of beats.

    - wrap_around: each pattern is rotated within its own bar
    - overflow: notes move across bar boundaries and the song keeps its bar
      count and loop. A backward shift is done as a forward shift by the
      rest of the bar; the emptied first bar is then dropped, or if it is
      not empty the song grows by one bar and the loop moves with it
    """

    def __init__(
        self, doc: SongDocument, beats_to_move: float, strategy: ShiftStrategy | str
    ) -> None:
        super().__init__(doc.notifier)
        strategy = _parse_strategy(ShiftStrategy, strategy)
        song = doc.song
        parts_per_bar = song.parts_per_bar
        parts_to_move = round_half_up(
            math.fmod(beats_to_move, song.beats_per_bar) * song.config.parts_per_beat
        )
        if parts_to_move < 0:
            parts_to_move += parts_per_bar
        if parts_to_move == 0:
            return

        with self._batch():
            if strategy == ShiftStrategy.WRAP_AROUND:
                self._wrap_around(doc, parts_to_move)
            else:
                self._overflow(doc, beats_to_move, parts_to_move)

    def _wrap_around(self, doc: SongDocument, parts_to_move: int) -> None:
        parts_per_bar = doc.song.parts_per_bar
        for channel in doc.song.channels:
            for pattern in channel.patterns:
                new_notes: list[Note] = []
                # The part that wraps around comes first.
                for bar in (1, 0):
                    bar_start = bar * parts_per_bar
                    for old_note in pattern.notes:
                        absolute_start = old_note.start + parts_to_move
                        absolute_end = old_note.end + parts_to_move
                        start_part = max(0, absolute_start - bar_start)
                        end_part = min(parts_per_bar, absolute_end - bar_start)
                        if start_part < end_part:
                            project_note_into_bar(
                                old_note,
                                absolute_start - bar_start - start_part,
                                start_part,
                                end_part,
                                new_notes,
                            )
                if pattern.notes or new_notes:
                    self.append(ChangePatternNotes(doc, pattern, new_notes))

    def _overflow(self, doc: SongDocument, beats_to_move: float, parts_to_move: int) -> None:
        song = doc.song
        original_bar_count = song.bar_count
        original_loop_start = song.loop_start
        original_loop_length = song.loop_length

        self.append(ChangeMoveAndOverflowNotes(doc, song.beats_per_bar, parts_to_move))

        if beats_to_move < 0:
            if all(channel.bars[0] == 0 for channel in song.channels):
                self.append(ChangeDeleteBars(doc, 0, 1))
            else:
                original_bar_count += 1
                original_loop_start += 1

        if song.bar_count < original_bar_count:
            self.append(ChangeBarCount(doc, original_bar_count))
        self.append(ChangeLoop(doc, original_loop_start, original_loop_length))
