"""
Note model - timed notes with piecewise-linear pin envelopes.

A Note has:
- One or more simultaneous base pitches
- A start/end in parts, relative to its pattern
- Pins: (time, interval, size) breakpoints describing pitch bend and volume

Invariants kept by every edit:
- Pin times strictly increase
- First pin is at time 0 with interval 0
- Last pin time == end - start
- continues_last_pattern only when start == 0
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class InvariantError(ValueError):
    """
    A note or pin list violated a structural invariant.

    Raised as a hard failure: it means the caller handed over corrupt data or
    an algorithm has a bug. Nothing in the core attempts to recover from it.
    """


class NotePin(BaseModel):
    """
    One breakpoint of a note's envelope.

    Time is relative to the note start; interval is semitones above the note's pitches.
    """

    interval: int = Field(0, description="Semitone offset from the note's base pitches")
    time: int = Field(..., description="Parts since the note start")
    size: int = Field(..., ge=0, description="Volume at this breakpoint")

    def __repr__(self) -> str:
        return f"NotePin(t={self.time}, i={self.interval}, s={self.size})"


def make_note_pin(interval: int, time: int, size: int) -> NotePin:
    """Create a pin."""
    return NotePin(interval=interval, time=time, size=size)


class Note(BaseModel):
    """
    A note (or chord) in a pattern.

    Notes are mutated in place by Change objects; identity matters, so
    compare notes with `is` when looking for a particular one.
    """

    pitches: list[int] = Field(..., min_length=1, description="Simultaneous base pitches")
    start: int = Field(..., description="Start position in parts within the pattern")
    end: int = Field(..., description="End position in parts within the pattern")
    pins: list[NotePin] = Field(..., min_length=1, description="Envelope breakpoints")
    continues_last_pattern: bool = Field(
        False, description="Sounds as a continuation of the previous bar's last note"
    )

    @classmethod
    def create(cls, pitch: int, start: int, end: int, size: int, fadeout: bool = False) -> Note:
        """
        Create a flat single-pitch note.

        Args:
            pitch: Base pitch
            start: Start part
            end: End part
            size: Volume held across the note
            fadeout: End at size 0 instead of holding the volume

        Returns:
            The new Note
        """
        return cls(
            pitches=[pitch],
            start=start,
            end=end,
            pins=[make_note_pin(0, 0, size), make_note_pin(0, end - start, 0 if fadeout else size)],
        )

    @property
    def length(self) -> int:
        """Length in parts."""
        return self.end - self.start

    def clone(self) -> Note:
        """Deep copy with fresh pins and pitch list."""
        return self.model_copy(deep=True)

    def pickup_interval(self) -> int:
        """Interval of the last pin, where the next continuing note must pick up."""
        return self.pins[-1].interval

    def __repr__(self) -> str:
        return (
            f"Note({self.pitches}, {self.start}-{self.end}, pins={self.pins!r}"
            f"{', continues' if self.continues_last_pattern else ''})"
        )


def remove_redundant_pins(pins: list[NotePin]) -> None:
    """
    Remove interior pins that add nothing to the envelope, in place.

    A pin is redundant when it and both neighbours share interval and size.
    """
    i = 1
    while i < len(pins) - 1:
        if (
            pins[i - 1].interval == pins[i].interval == pins[i + 1].interval
            and pins[i - 1].size == pins[i].size == pins[i + 1].size
        ):
            del pins[i]
        else:
            i += 1


def adjacent_notes_have_matching_pitches(first: Note, second: Note) -> bool:
    """
    Whether `second` can continue `first` without a retrigger.

    Both notes need the same number of pitches, and every pitch of `first`
    bent by its final interval must appear in `second`.
    """
    if len(first.pitches) != len(second.pitches):
        return False
    interval = first.pickup_interval()
    return all(pitch + interval in second.pitches for pitch in first.pitches)
