"""
Constants and enums for the editing core.

No magic strings - use enums for constrained values.
"""

from enum import Enum


class ChannelKind(str, Enum):
    """
    Channel families, in the order they appear in a song's channel list.

    Pitch channels come first, then noise (drum) channels, then modulation channels.
    """

    PITCH = "pitch"
    NOISE = "noise"
    MOD = "mod"


class BeatsPerBarStrategy(str, Enum):
    """How existing notes are treated when the beats-per-bar setting changes."""

    SPLICE = "splice"  # Cut notes at the new bar end, discard the rest
    STRETCH = "stretch"  # Rescale timing by the beat ratio
    OVERFLOW = "overflow"  # Redistribute notes across the new bar grid


class ShiftStrategy(str, Enum):
    """How notes moved sideways treat the bar boundary."""

    WRAP_AROUND = "wrap_around"  # Notes leaving a bar re-enter at its other end
    OVERFLOW = "overflow"  # Notes spill into neighbouring bars


class ErrorMessages:
    """Standardized error messages."""

    EMPTY_PINS = "Note has no pins left after edit."
    PIN_CONVERSION = "Error converting pins in note overflow."
    PROJECTION_EMPTY = "Projected note fragment [{start}, {end}) received no pins."
    WRONG_PIN_START = "Wrong pin start interval: {interval}."
    ROOT_NOT_IN_SCALE = "Scale flags must include the root (pitch class 0)."
    SCALE_FLAG_COUNT = "Scale flags must have 12 entries, got {count}."
    UNKNOWN_STRATEGY = "Unrecognized beats-per-bar conversion strategy: '{strategy}'."
    INVALID_PATTERN = "Invalid pattern number {value}; song has {count} patterns per channel."
    ALREADY_UNDONE = "Change has already been undone."
    NOT_UNDONE = "Change has not been undone."
    NOTHING_TO_UNDO = "Nothing to undo."
    NOTHING_TO_REDO = "Nothing to redo."
    SEQUENCE_COMMITTED = "Cannot append to a committed change sequence."
    NEGATIVE_SHIFT = "Parts to move must not be negative, got {parts}."
