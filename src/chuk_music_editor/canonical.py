"""
Pattern canonicalization - collapsing identical patterns after bulk edits.

Restructuring creates one fresh pattern per touched bar. These helpers fold
patterns with identical content back together so each channel keeps one
pattern per distinct bar content, numbered in order of first use.
"""

from __future__ import annotations

import logging

from chuk_music_editor.models.note import Note
from chuk_music_editor.models.song import Channel, Pattern, Song

logger = logging.getLogger(__name__)


def patterns_contain_same_instruments(first: list[int], second: list[int]) -> bool:
    """Whether two instrument lists hold the same indices, in any order."""
    return (
        len(first) == len(second)
        and all(instrument in second for instrument in first)
        and all(instrument in first for instrument in second)
    )


def discard_invalid_pattern_instruments(
    instruments: list[int], song: Song, channel: Channel
) -> None:
    """
    Clean a pattern's instrument list in place.

    Duplicates and indices past the channel's instrument list are removed,
    the list is capped at the per-pattern maximum, and an empty list falls
    back to [0].
    """
    unique = list(dict.fromkeys(instruments))
    valid = [index for index in unique if index < len(channel.instruments)]
    instruments[:] = valid[: song.get_max_instruments_per_pattern(channel)]
    if not instruments:
        instruments.append(0)


def compare_pattern_notes(a: list[Note], b: list[Note]) -> bool:
    """
    Whether two note lists are structurally identical.

    Notes are compared pairwise by start, end, pitches and pins.
    """
    if len(a) != len(b):
        return False

    for old_note, new_note in zip(a, b):
        if (
            new_note.start != old_note.start
            or new_note.end != old_note.end
            or new_note.pitches != old_note.pitches
            or len(new_note.pins) != len(old_note.pins)
        ):
            return False

        for old_pin, new_pin in zip(old_note.pins, new_note.pins):
            if (
                new_pin.interval != old_pin.interval
                or new_pin.time != old_pin.time
                or new_pin.size != old_pin.size
            ):
                return False

    return True


def remove_duplicate_patterns(channels: list[Channel]) -> None:
    """
    Deduplicate each channel's patterns in place.

    Bars are walked in order; each referenced pattern either matches one
    already kept (same instruments, same notes) and the bar is renumbered to
    it, or it is kept as the next pattern. Patterns no bar references are
    dropped.
    """
    for channel in channels:
        new_patterns: list[Pattern] = []
        for bar, number in enumerate(channel.bars):
            if number == 0:
                continue

            old_pattern = channel.patterns[number - 1]
            for index, new_pattern in enumerate(new_patterns):
                if not patterns_contain_same_instruments(
                    old_pattern.instruments, new_pattern.instruments
                ):
                    continue
                if compare_pattern_notes(old_pattern.notes, new_pattern.notes):
                    channel.bars[bar] = index + 1
                    break
            else:
                new_patterns.append(old_pattern)
                channel.bars[bar] = len(new_patterns)

        logger.debug(f"Kept {len(new_patterns)} of {len(channel.patterns)} patterns")
        channel.patterns = new_patterns
