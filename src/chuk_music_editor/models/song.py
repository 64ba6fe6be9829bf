"""
Song model - the timeline the editing core restructures.

A Song contains:
- Global timing (beats per bar, bar count, loop, tempo, rhythm)
- Global pitch context (key, scale or custom scale flags)
- Channels: pitch channels, then noise channels, then mod channels
- Per channel: a pattern pool and a bars list of 1-based pattern numbers (0 = empty)

Channels and instruments refer to each other only by integer index.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from chuk_music_editor.config import DEFAULT_CONFIG, SequencerConfig
from chuk_music_editor.constants import ChannelKind
from chuk_music_editor.core.rhythm import DEFAULT_RHYTHM_INDEX, RHYTHMS, Rhythm
from chuk_music_editor.core.scale import SCALES, scale_flags
from chuk_music_editor.models.note import Note

_MAJOR_FLAGS = [True, False, True, False, True, True, False, True, False, True, False, True]


class Instrument(BaseModel):
    """
    Opaque synthesis settings owned by a channel.

    The editing core never reads or writes these parameters; it only counts,
    copies and references instruments by index.
    """

    name: str = Field("", description="Display name")
    params: dict[str, Any] = Field(default_factory=dict, description="Synthesis parameters")


class Pattern(BaseModel):
    """
    A reusable block of notes, assignable to any number of bars in its channel.

    Notes are sorted by start, except in mod channels where they may be out of order.
    """

    notes: list[Note] = Field(default_factory=list, description="Notes in this pattern")
    instruments: list[int] = Field(
        default_factory=lambda: [0], description="Indices of channel instruments played"
    )

    def clone(self) -> Pattern:
        """Deep copy of notes and instrument assignment."""
        return self.model_copy(deep=True)


class Channel(BaseModel):
    """
    One track: a pattern pool plus the bar-by-bar pattern assignment.
    """

    name: str = Field("", description="Channel name")
    muted: bool = Field(False, description="Channel is muted")
    octave: int = Field(0, description="Octave offset for display and entry")
    instruments: list[Instrument] = Field(default_factory=lambda: [Instrument()])
    patterns: list[Pattern] = Field(default_factory=list, description="Pattern pool")
    bars: list[int] = Field(
        default_factory=list, description="Pattern number per bar (1-based, 0 = empty)"
    )

    def get_pattern(self, bar: int) -> Pattern | None:
        """Pattern playing in a bar, or None for an empty bar."""
        if bar < 0 or bar >= len(self.bars):
            return None
        number = self.bars[bar]
        if number == 0:
            return None
        return self.patterns[number - 1]


class Selection(BaseModel):
    """
    The externally owned part-range selection inside the current pattern.
    """

    pattern_selection_start: int = Field(0, description="Selection start in parts")
    pattern_selection_end: int = Field(0, description="Selection end in parts (exclusive)")
    pattern_selection_active: bool = Field(False, description="Whether a selection exists")


class Song(BaseModel):
    """
    A complete song timeline.

    This is the document every Change mutates.
    """

    config: SequencerConfig = Field(default=DEFAULT_CONFIG, description="Read-only limits")

    # Timing
    beats_per_bar: int = Field(8, gt=0, description="Beats in every bar")
    bar_count: int = Field(16, gt=0, description="Number of bars")
    patterns_per_channel: int = Field(8, ge=0, description="Pattern pool size per channel")
    loop_start: int = Field(0, ge=0, description="First looped bar")
    loop_length: int = Field(4, gt=0, description="Looped bar count")
    tempo: int = Field(150, gt=0, description="Tempo in BPM")
    rhythm: int = Field(DEFAULT_RHYTHM_INDEX, ge=0, description="Index into RHYTHMS")

    # Pitch context
    key: int = Field(0, ge=0, le=11, description="Key root pitch class")
    scale: int = Field(0, ge=0, description="Index into SCALES")
    scale_custom: list[bool] = Field(default_factory=lambda: list(_MAJOR_FLAGS))

    # Instruments
    layered_instruments: bool = Field(False, description="Patterns may layer instruments")
    pattern_instruments: bool = Field(False, description="Patterns may pick instruments")

    # Channels: pitch, then noise, then mod
    pitch_channel_count: int = Field(0, ge=0)
    noise_channel_count: int = Field(0, ge=0)
    mod_channel_count: int = Field(0, ge=0)
    channels: list[Channel] = Field(default_factory=list)

    @classmethod
    def create(
        cls,
        pitch_channels: int = 1,
        noise_channels: int = 0,
        mod_channels: int = 0,
        bar_count: int = 16,
        beats_per_bar: int = 8,
        config: SequencerConfig = DEFAULT_CONFIG,
        **kwargs: Any,
    ) -> Song:
        """
        Create an empty song with the given channel layout.

        Every channel gets `patterns_per_channel` empty patterns and all bars empty.
        """
        song = cls(
            config=config,
            bar_count=bar_count,
            beats_per_bar=beats_per_bar,
            pitch_channel_count=pitch_channels,
            noise_channel_count=noise_channels,
            mod_channel_count=mod_channels,
            **kwargs,
        )
        song.loop_length = min(song.loop_length, bar_count)
        for _ in range(pitch_channels + noise_channels + mod_channels):
            song.channels.append(
                Channel(
                    patterns=[Pattern() for _ in range(song.patterns_per_channel)],
                    bars=[0] * bar_count,
                )
            )
        return song

    @property
    def parts_per_bar(self) -> int:
        """Parts in one bar at the current beats per bar."""
        return self.config.parts_per_bar(self.beats_per_bar)

    def get_channel_count(self) -> int:
        return self.pitch_channel_count + self.noise_channel_count + self.mod_channel_count

    def get_channel_kind(self, channel_index: int) -> ChannelKind:
        """Which family a channel index belongs to."""
        if channel_index < self.pitch_channel_count:
            return ChannelKind.PITCH
        if channel_index < self.pitch_channel_count + self.noise_channel_count:
            return ChannelKind.NOISE
        return ChannelKind.MOD

    def get_channel_is_noise(self, channel_index: int) -> bool:
        return self.get_channel_kind(channel_index) == ChannelKind.NOISE

    def get_channel_is_mod(self, channel_index: int) -> bool:
        return self.get_channel_kind(channel_index) == ChannelKind.MOD

    def get_pattern(self, channel_index: int, bar: int) -> Pattern | None:
        """Pattern playing on a channel in a bar, or None."""
        return self.channels[channel_index].get_pattern(bar)

    def get_max_pitch(self, channel_index: int) -> int:
        """Highest pitch allowed on a channel."""
        if self.get_channel_is_noise(channel_index):
            return self.config.drum_count - 1
        return self.config.max_pitch

    def get_max_instruments_per_channel(self) -> int:
        layered = self.config.layered_instrument_count_max if self.layered_instruments else 1
        per_pattern = self.config.pattern_instrument_count_max if self.pattern_instruments else 1
        return max(layered, per_pattern)

    def get_max_instruments_per_pattern(self, channel: Channel) -> int:
        if not self.layered_instruments:
            return 1
        return min(self.config.layered_instrument_count_max, len(channel.instruments))

    def get_scale_flags(self) -> tuple[bool, ...]:
        """Flags of the active scale (resolving the custom scale)."""
        return scale_flags(self.scale, self.scale_custom)

    def get_rhythm(self) -> Rhythm:
        return RHYTHMS[self.rhythm]

    def scale_name(self) -> str:
        return SCALES[self.scale].name
