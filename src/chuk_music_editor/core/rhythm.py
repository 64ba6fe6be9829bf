"""
Rhythm primitives - the beat subdivision grid notes snap to.

A Rhythm divides each beat into steps. Quantizing a part position either rounds
to the nearest step or, for rhythms with round-up thresholds, walks the
thresholds so that slightly-early notes land on the intended step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

# Thresholds below are expressed in parts at this resolution.
REFERENCE_PARTS_PER_BEAT = 24


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding toward +infinity."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class Rhythm:
    """
    A beat subdivision.

    Examples:
        Rhythm("÷4 (standard)", 4, (3, 9, 17, 21)) = sixteenth-note grid
        Rhythm("freehand", 24) = every part is a step
    """

    name: str
    steps_per_beat: int
    round_up_thresholds: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        if self.steps_per_beat <= 0:
            raise ValueError(f"Steps per beat must be positive, got {self.steps_per_beat}")

    def step_size(self, parts_per_beat: int) -> float:
        """Parts per step."""
        return parts_per_beat / self.steps_per_beat

    def quantize(self, part: int, parts_per_beat: int) -> int:
        """
        Snap a part position to this rhythm's grid.

        Args:
            part: Position in parts
            parts_per_beat: Resolution of the song

        Returns:
            Quantized position in parts
        """
        step = self.step_size(parts_per_beat)
        if self.round_up_thresholds is not None:
            scale = parts_per_beat / REFERENCE_PARTS_PER_BEAT
            beat_start = (part // parts_per_beat) * parts_per_beat
            remainder = part - beat_start
            new_part: float = beat_start
            for threshold in self.round_up_thresholds:
                if remainder >= threshold * scale:
                    new_part += step
                else:
                    break
            return round_half_up(new_part)
        return round_half_up(round_half_up(part / step) * step)

    def __str__(self) -> str:
        return self.name


RHYTHMS: tuple[Rhythm, ...] = (
    Rhythm("÷3 (triplets)", 3, (5, 12, 18)),
    Rhythm("÷4 (standard)", 4, (3, 9, 17, 21)),
    Rhythm("÷6", 6),
    Rhythm("÷8", 8),
    Rhythm("freehand", 24),
)

DEFAULT_RHYTHM_INDEX = 1
