"""
Scale primitives - Scale flags and scale-to-scale remapping.

A scale is 12 booleans, one per pitch class above the key root. Songs either use
one of the named SCALES or a custom set of flags.

generate_scale_map() finds the best correspondence between the degrees of two
scales and expands it into a chromatic lookup table (old pitch class -> new).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.core.pitch import PITCHES_PER_OCTAVE, role_of

logger = logging.getLogger(__name__)

# Score penalties for moving a degree into a different harmonic role
ROLE_CHANGE_PENALTY = 0.75
SNAP_ROLE_CHANGE_PENALTY = 0.1


@dataclass(frozen=True)
class Scale:
    """
    A named scale defined by which pitch classes it contains.

    flags[i] is True when the pitch i semitones above the root is in the scale.
    The custom scale has no flags of its own; the song supplies them.
    """

    name: str
    flags: tuple[bool, ...] | None

    CUSTOM_NAME: ClassVar[str] = "Custom Scale"

    @classmethod
    def from_semitones(cls, name: str, semitones: Sequence[int]) -> Scale:
        """Build a scale from the semitone offsets it contains."""
        present = set(semitones)
        return cls(name, tuple(i in present for i in range(PITCHES_PER_OCTAVE)))

    @property
    def is_custom(self) -> bool:
        return self.flags is None

    def pitch_classes(self) -> list[int]:
        """Sorted pitch classes in this scale."""
        if self.flags is None:
            return []
        return [i for i, flag in enumerate(self.flags) if flag]

    def __str__(self) -> str:
        return self.name


SCALES: tuple[Scale, ...] = (
    Scale.from_semitones("Free", range(12)),
    Scale.from_semitones("Major", (0, 2, 4, 5, 7, 9, 11)),
    Scale.from_semitones("Minor", (0, 2, 3, 5, 7, 8, 10)),
    Scale.from_semitones("Mixolydian", (0, 2, 4, 5, 7, 9, 10)),
    Scale.from_semitones("Lydian", (0, 2, 4, 6, 7, 9, 11)),
    Scale.from_semitones("Dorian", (0, 2, 3, 5, 7, 9, 10)),
    Scale.from_semitones("Phrygian", (0, 1, 3, 5, 7, 8, 10)),
    Scale.from_semitones("Locrian", (0, 1, 3, 5, 6, 8, 10)),
    Scale.from_semitones("Lydian Dominant", (0, 2, 4, 6, 7, 9, 10)),
    Scale.from_semitones("Phrygian Dominant", (0, 1, 4, 5, 7, 8, 10)),
    Scale.from_semitones("Harmonic Major", (0, 2, 4, 5, 7, 8, 11)),
    Scale.from_semitones("Harmonic Minor", (0, 2, 3, 5, 7, 8, 11)),
    Scale.from_semitones("Melodic Minor", (0, 2, 3, 5, 7, 9, 11)),
    Scale.from_semitones("Blues", (0, 3, 5, 6, 7, 10)),
    Scale.from_semitones("Altered", (0, 1, 3, 4, 6, 8, 10)),
    Scale.from_semitones("Major Pentatonic", (0, 2, 4, 7, 9)),
    Scale.from_semitones("Minor Pentatonic", (0, 3, 5, 7, 10)),
    Scale.from_semitones("Whole Tone", (0, 2, 4, 6, 8, 10)),
    Scale.from_semitones("Octatonic", (0, 2, 3, 5, 6, 8, 9, 11)),
    Scale.from_semitones("Hexatonic", (0, 3, 4, 7, 8, 11)),
    Scale(Scale.CUSTOM_NAME, None),
)

CUSTOM_SCALE_INDEX = len(SCALES) - 1


def scale_index(name: str) -> int:
    """Look up a scale's index by name."""
    for i, scale in enumerate(SCALES):
        if scale.name.lower() == name.lower():
            return i
    raise ValueError(f"Unknown scale: {name}")


def scale_flags(index: int, custom_flags: Sequence[bool]) -> tuple[bool, ...]:
    """
    Resolve a scale index to its 12 flags.

    Args:
        index: Index into SCALES
        custom_flags: Flags to use when the index is the custom scale

    Returns:
        Tuple of 12 booleans
    """
    flags = SCALES[index].flags
    if flags is None:
        flags = tuple(bool(flag) for flag in custom_flags)
    if len(flags) != PITCHES_PER_OCTAVE:
        raise ValueError(ErrorMessages.SCALE_FLAG_COUNT.format(count=len(flags)))
    return flags


def _best_index_map(smaller: list[int], larger: list[int]) -> list[int]:
    """
    Exhaustively search strictly increasing assignments of smaller-scale degrees
    onto larger-scale degrees, returning the lowest-scoring one.

    Uses an explicit stack. Ties keep the first assignment reached.
    """
    best_score = float("inf")
    best: list[int] = []
    stack: list[list[int]] = [[0]]  # Root always maps to root.

    while stack:
        index_map = stack.pop()

        if len(index_map) == len(smaller):
            score = 0.0
            for i, index in enumerate(index_map):
                score += abs(smaller[i] - larger[index])
                if role_of(smaller[i]) != role_of(larger[index]):
                    score += ROLE_CHANGE_PENALTY
            if best_score > score:
                best_score = score
                best = index_map
        else:
            low = index_map[-1] + 1
            high = len(larger) - len(smaller) + len(index_map)
            for i in range(low, high + 1):
                stack.append(index_map + [i])

    return best


def generate_scale_map(old_flags: Sequence[bool], new_flags: Sequence[bool]) -> list[int]:
    """
    Map every chromatic pitch class of the old scale onto the new scale.

    The degrees of the scale with fewer notes are matched against the other
    scale (keeping order, minimizing distance, penalizing role changes). The
    matched pairs become breakpoints of a piecewise-linear map which is then
    snapped to the nearest pitch of the new scale.

    Args:
        old_flags: 12 flags of the current scale
        new_flags: 12 flags of the target scale

    Returns:
        12-entry list, old pitch class -> new pitch class. An entry of 12
        means the root one octave up.
    """
    for flags in (old_flags, new_flags):
        if len(flags) != PITCHES_PER_OCTAVE:
            raise ValueError(ErrorMessages.SCALE_FLAG_COUNT.format(count=len(flags)))

    old_scale = [i for i in range(PITCHES_PER_OCTAVE) if old_flags[i]]
    new_scale = [i for i in range(PITCHES_PER_OCTAVE) if new_flags[i]]
    if not old_scale or not new_scale or old_scale[0] != 0 or new_scale[0] != 0:
        raise ValueError(ErrorMessages.ROOT_NOT_IN_SCALE)

    larger_to_smaller = len(old_scale) > len(new_scale)
    smaller = new_scale if larger_to_smaller else old_scale
    larger = old_scale if larger_to_smaller else new_scale

    best = _best_index_map(smaller, larger)

    # (old pitch, new pitch) breakpoints, increasing on both sides
    sparse: list[tuple[int, int]] = []
    for i, index in enumerate(best):
        if larger_to_smaller:
            sparse.append((larger[index], smaller[i]))
        else:
            sparse.append((smaller[i], larger[index]))

    # Wrap-around breakpoint at the octave.
    sparse.append((PITCHES_PER_OCTAVE, PITCHES_PER_OCTAVE))
    targets = new_scale + [PITCHES_PER_OCTAVE]

    full_map: list[int] = []
    sparse_index = 0
    for pitch in range(PITCHES_PER_OCTAVE):
        old_low, new_low = sparse[sparse_index]
        old_high, new_high = sparse[sparse_index + 1]
        if pitch == old_high - 1:
            sparse_index += 1

        transformed = (pitch - old_low) * (new_high - new_low) / (old_high - old_low) + new_low

        nearest = 0
        nearest_distance = float("inf")
        for candidate in targets:
            distance = abs(candidate - transformed)
            if role_of(candidate) != role_of(pitch):
                distance += SNAP_ROLE_CHANGE_PENALTY
            if nearest_distance > distance:
                nearest_distance = distance
                nearest = candidate

        full_map.append(nearest)

    logger.debug(f"Scale map {old_scale} -> {new_scale}: {full_map}")
    return full_map
