"""
Core music primitives - the tables everything else reads.

- PitchClass: The 12 chromatic pitch classes (0-11), also used as the song key
- ScaleRole: Harmonic function of each chromatic step
- Scale: Named 12-flag scales and the custom scale slot
- generate_scale_map: Chromatic remapping between two scales
- Rhythm: Beat subdivision grids for quantization
"""

from chuk_music_editor.core.pitch import PITCH_CLASS_ROLES, PitchClass, ScaleRole, role_of
from chuk_music_editor.core.rhythm import (
    DEFAULT_RHYTHM_INDEX,
    RHYTHMS,
    Rhythm,
    round_half_up,
)
from chuk_music_editor.core.scale import (
    CUSTOM_SCALE_INDEX,
    SCALES,
    Scale,
    generate_scale_map,
    scale_flags,
    scale_index,
)

__all__ = [
    # Pitch
    "PitchClass",
    "ScaleRole",
    "PITCH_CLASS_ROLES",
    "role_of",
    # Scale
    "Scale",
    "SCALES",
    "CUSTOM_SCALE_INDEX",
    "scale_flags",
    "scale_index",
    "generate_scale_map",
    # Rhythm
    "Rhythm",
    "RHYTHMS",
    "DEFAULT_RHYTHM_INDEX",
    "round_half_up",
]
