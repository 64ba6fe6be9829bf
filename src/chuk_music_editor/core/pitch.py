"""
Pitch primitives - PitchClass and ScaleRole.

PitchClass represents the 12 chromatic pitches (octave-independent) and doubles
as the song key. ScaleRole is the harmonic function each chromatic step plays
relative to the root; scale remapping penalizes changing it.
"""

from __future__ import annotations

from enum import Enum, IntEnum

# Display name mappings (module level to avoid IntEnum member issues)
_SHARP_NAMES: list[str] = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
_FLAT_NAMES: list[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

PITCHES_PER_OCTAVE = 12


class PitchClass(IntEnum):
    """
    The 12 chromatic pitch classes (0-11).

    Octave-independent - pitch 24 and pitch 36 are both PitchClass.C.
    """

    C = 0
    Cs = 1  # C# / Db
    D = 2
    Ds = 3  # D# / Eb
    E = 4
    F = 5
    Fs = 6  # F# / Gb
    G = 7
    Gs = 8  # G# / Ab
    A = 9
    As = 10  # A# / Bb
    B = 11

    def transpose(self, semitones: int) -> PitchClass:
        """Transpose by a number of semitones (positive or negative)."""
        return PitchClass((self.value + semitones) % PITCHES_PER_OCTAVE)

    def spell(self, prefer_flats: bool = False) -> str:
        """Get human-readable name."""
        names = _FLAT_NAMES if prefer_flats else _SHARP_NAMES
        return names[self.value]

    @property
    def role(self) -> ScaleRole:
        """Harmonic role of this pitch class above the root."""
        return role_of(self.value)

    @classmethod
    def of(cls, pitch: int) -> PitchClass:
        """Extract the pitch class from an absolute pitch."""
        return cls(pitch % PITCHES_PER_OCTAVE)

    @classmethod
    def parse(cls, name: str) -> PitchClass:
        """Parse a pitch class from a string like 'C', 'C#', 'Db'."""
        name = name.strip()
        if name in _SHARP_NAMES:
            return cls(_SHARP_NAMES.index(name))
        if name in _FLAT_NAMES:
            return cls(_FLAT_NAMES.index(name))
        raise ValueError(f"Unknown pitch class: {name}")


class ScaleRole(str, Enum):
    """Harmonic function of a chromatic step above the root."""

    ROOT = "root"
    SECOND = "second"
    THIRD = "third"
    FOURTH = "fourth"
    TRITONE = "tritone"
    FIFTH = "fifth"
    SIXTH = "sixth"
    SEVENTH = "seventh"


# Indexed by semitones above the root; index 12 wraps back to the root.
PITCH_CLASS_ROLES: tuple[ScaleRole, ...] = (
    ScaleRole.ROOT,
    ScaleRole.SECOND,
    ScaleRole.SECOND,
    ScaleRole.THIRD,
    ScaleRole.THIRD,
    ScaleRole.FOURTH,
    ScaleRole.TRITONE,
    ScaleRole.FIFTH,
    ScaleRole.SIXTH,
    ScaleRole.SIXTH,
    ScaleRole.SEVENTH,
    ScaleRole.SEVENTH,
    ScaleRole.ROOT,
)


def role_of(semitones: int) -> ScaleRole:
    """Role of a step 0-12 semitones above the root."""
    return PITCH_CLASS_ROLES[semitones]
