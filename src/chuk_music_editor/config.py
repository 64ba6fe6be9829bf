"""
Sequencer configuration - the read-only limits the editing core clamps against.

These values belong to the synthesis/instrument layer. The core only reads them:
- Timing resolution (parts per beat)
- Note size (volume) range
- Pitch ceilings for pitched and drum channels
- Song size limits (bars, beats, channels, patterns)

Configuration can be loaded from YAML; missing keys fall back to defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class SequencerConfig(BaseModel):
    """
    Limits and resolutions used by the editing algorithms.

    Immutable once built so a song's config can be shared between songs.
    """

    # Timing
    parts_per_beat: int = Field(24, gt=0, description="Smallest time units per beat")
    beats_per_bar_min: int = Field(1, gt=0, description="Fewest beats a bar may have")
    beats_per_bar_max: int = Field(64, gt=0, description="Most beats a bar may have")
    bar_count_max: int = Field(1024, gt=0, description="Longest song in bars")
    tempo_min: int = Field(1, gt=0, description="Slowest tempo in BPM")
    tempo_max: int = Field(500, gt=0, description="Fastest tempo in BPM")

    # Notes
    note_size_max: int = Field(6, gt=0, description="Loudest pin size")
    max_pitch: int = Field(84, gt=0, description="Highest pitch on pitched channels")
    drum_count: int = Field(12, gt=0, description="Number of drum pitches on noise channels")

    # Channels and patterns
    patterns_per_channel_min: int = Field(8, gt=0, description="Patterns kept per channel")
    pitch_channel_count_min: int = Field(1, ge=0)
    pitch_channel_count_max: int = Field(32, ge=0)
    noise_channel_count_min: int = Field(0, ge=0)
    noise_channel_count_max: int = Field(8, ge=0)
    mod_channel_count_min: int = Field(0, ge=0)
    mod_channel_count_max: int = Field(12, ge=0)
    layered_instrument_count_max: int = Field(4, gt=0)
    pattern_instrument_count_max: int = Field(10, gt=0)

    model_config = {"frozen": True, "extra": "forbid"}

    @model_validator(mode="after")
    def check_ranges(self) -> SequencerConfig:
        """Ensure every min/max pair is ordered."""
        pairs = [
            ("beats_per_bar", self.beats_per_bar_min, self.beats_per_bar_max),
            ("tempo", self.tempo_min, self.tempo_max),
            ("pitch_channel_count", self.pitch_channel_count_min, self.pitch_channel_count_max),
            ("noise_channel_count", self.noise_channel_count_min, self.noise_channel_count_max),
            ("mod_channel_count", self.mod_channel_count_min, self.mod_channel_count_max),
        ]
        for name, low, high in pairs:
            if low > high:
                raise ValueError(f"{name}_min ({low}) exceeds {name}_max ({high})")
        return self

    def parts_per_bar(self, beats_per_bar: int) -> int:
        """Parts in one bar of the given length."""
        return self.parts_per_beat * beats_per_bar

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any] | None) -> SequencerConfig:
        """Build a config from a YAML-parsed mapping (None means all defaults)."""
        return cls(**(data or {}))


DEFAULT_CONFIG = SequencerConfig()


def load_config(path: Path) -> SequencerConfig:
    """
    Load a sequencer config from a YAML file.

    Args:
        path: Path to a YAML mapping of config keys

    Returns:
        The validated SequencerConfig
    """
    with open(path) as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    return SequencerConfig.from_yaml_dict(data)
