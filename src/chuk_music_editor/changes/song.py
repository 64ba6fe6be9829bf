"""
Song-level edits - timing settings, bar layout, pattern assignment.

Each change computes the new values first, then installs them through a
forward/backward pair that swaps whole values (bar lists are replaced, never
edited in place), so undo restores the exact previous objects.
"""

from __future__ import annotations

import logging
from typing import Any

from chuk_music_editor.canonical import discard_invalid_pattern_instruments
from chuk_music_editor.changes.base import UndoableChange
from chuk_music_editor.changes.document import SongDocument
from chuk_music_editor.constants import ErrorMessages
from chuk_music_editor.core.pitch import PITCHES_PER_OCTAVE
from chuk_music_editor.core.rhythm import round_half_up
from chuk_music_editor.models.song import Channel, Pattern

logger = logging.getLogger(__name__)


class SongSettingChange(UndoableChange):
    """
    Base for changes that replace song attributes and channel bar lists.

    Subclasses call _install() with the new values; unchanged values make the
    change a no-op.
    """

    def __init__(self, doc: SongDocument) -> None:
        super().__init__(doc.notifier)
        self._doc = doc

    def _install(
        self, new_values: dict[str, Any], new_bars: list[list[int]] | None = None
    ) -> None:
        song = self._doc.song
        channels = list(song.channels)
        old_values = {name: getattr(song, name) for name in new_values}
        old_bars = [channel.bars for channel in channels]

        bars_changed = new_bars is not None and new_bars != old_bars
        if old_values == new_values and not bars_changed:
            return

        def apply(values: dict[str, Any], bars: list[list[int]] | None) -> None:
            for name, value in values.items():
                setattr(song, name, value)
            if bars is not None:
                for channel, channel_bars in zip(channels, bars):
                    channel.bars = channel_bars

        self._record(
            lambda: apply(new_values, new_bars),
            lambda: apply(old_values, old_bars if new_bars is not None else None),
        )


class ChangeKey(SongSettingChange):
    """Set the song key (pitch class 0-11)."""

    def __init__(self, doc: SongDocument, new_value: int) -> None:
        super().__init__(doc)
        self._install({"key": new_value})


class ChangeTempo(SongSettingChange):
    """Set the tempo, rounded and clamped to the configured range."""

    def __init__(self, doc: SongDocument, new_value: float) -> None:
        super().__init__(doc)
        config = doc.song.config
        tempo = max(config.tempo_min, min(config.tempo_max, round_half_up(new_value)))
        self._install({"tempo": tempo})


class ChangeRhythm(SongSettingChange):
    """Select the rhythm grid by index."""

    def __init__(self, doc: SongDocument, new_value: int) -> None:
        super().__init__(doc)
        self._install({"rhythm": new_value})


class ChangeScale(SongSettingChange):
    """Select the scale by index, without touching any notes."""

    def __init__(self, doc: SongDocument, new_value: int) -> None:
        super().__init__(doc)
        self._install({"scale": new_value})


class ChangeCustomScale(SongSettingChange):
    """Replace the 12 flags of the custom scale."""

    def __init__(self, doc: SongDocument, flags: list[bool]) -> None:
        super().__init__(doc)
        if len(flags) != PITCHES_PER_OCTAVE:
            raise ValueError(ErrorMessages.SCALE_FLAG_COUNT.format(count=len(flags)))
        self._install({"scale_custom": [bool(flag) for flag in flags]})


class ChangeLoop(SongSettingChange):
    """Set the loop start bar and length."""

    def __init__(self, doc: SongDocument, new_start: int, new_length: int) -> None:
        super().__init__(doc)
        self._install({"loop_start": new_start, "loop_length": new_length})


class ChangeBarCount(SongSettingChange):
    """
    Resize the song to new_value bars.

    With at_beginning, bars are added or removed at the start and the loop
    moves with the music; otherwise at the end. The loop is kept inside the song.
    """

    def __init__(self, doc: SongDocument, new_value: int, at_beginning: bool = False) -> None:
        super().__init__(doc)
        song = doc.song
        if song.bar_count == new_value:
            return

        new_bars = []
        for channel in song.channels:
            bars = list(channel.bars)
            if at_beginning:
                bars = [0] * max(0, new_value - len(bars)) + bars
                bars = bars[len(bars) - new_value :]
            else:
                bars = (bars + [0] * max(0, new_value - len(bars)))[:new_value]
            new_bars.append(bars)

        loop_start = song.loop_start
        if at_beginning:
            loop_start = max(0, loop_start + new_value - song.bar_count)
        loop_length = min(new_value, song.loop_length)
        loop_start = min(new_value - loop_length, loop_start)

        self._install(
            {"bar_count": new_value, "loop_start": loop_start, "loop_length": loop_length},
            new_bars,
        )


class ChangeInsertBars(SongSettingChange):
    """Insert count empty bars before bar `start`, growing the loop if it spans the insertion."""

    def __init__(self, doc: SongDocument, start: int, count: int) -> None:
        super().__init__(doc)
        song = doc.song
        new_length = min(song.config.bar_count_max, song.bar_count + count)
        count = new_length - song.bar_count
        if count <= 0:
            return

        new_bars = [channel.bars[:start] + [0] * count + channel.bars[start:] for channel in song.channels]

        loop_start = song.loop_start
        loop_length = song.loop_length
        if loop_start >= start:
            loop_start += count
        elif loop_start + loop_length >= start:
            loop_length += count

        self._install(
            {"bar_count": new_length, "loop_start": loop_start, "loop_length": loop_length},
            new_bars,
        )


class ChangeDeleteBars(SongSettingChange):
    """Delete count bars from bar `start`, keeping at least one bar."""

    def __init__(self, doc: SongDocument, start: int, count: int) -> None:
        super().__init__(doc)
        song = doc.song

        new_bars = []
        for channel in song.channels:
            bars = channel.bars[:start] + channel.bars[start + count :]
            new_bars.append(bars or [0])
        bar_count = max(1, song.bar_count - count)

        loop_start = song.loop_start
        loop_length = song.loop_length
        if loop_start >= start:
            loop_start = max(0, loop_start - count)
        elif loop_start + loop_length > start:
            loop_length -= count
        loop_length = max(1, min(bar_count - loop_start, loop_length))

        self._install(
            {"bar_count": bar_count, "loop_start": loop_start, "loop_length": loop_length},
            new_bars,
        )


class ChangePatternNumbers(SongSettingChange):
    """Assign a pattern number (0 = empty) to a rectangle of bars and channels."""

    def __init__(
        self,
        doc: SongDocument,
        value: int,
        start_bar: int,
        start_channel: int,
        width: int,
        height: int,
    ) -> None:
        super().__init__(doc)
        song = doc.song
        if value > song.patterns_per_channel or value < 0:
            raise ValueError(
                ErrorMessages.INVALID_PATTERN.format(value=value, count=song.patterns_per_channel)
            )

        new_bars = [list(channel.bars) for channel in song.channels]
        for channel_index in range(start_channel, start_channel + height):
            for bar in range(start_bar, start_bar + width):
                new_bars[channel_index][bar] = value

        self._install({}, new_bars)


class ChangeReplacePatterns(UndoableChange):
    """
    Install rebuilt channel lists as the song's channels.

    Surplus channels are dropped sparsest first (most empty bars), missing
    ones are padded with empty channels. Bar count and patterns per channel
    are recomputed from the new channels, then every channel is normalized:
    invalid pattern numbers cleared, bars and patterns padded or cut to size,
    instruments capped and pattern instrument lists cleaned. The loop is
    clamped into the new bar range.
    """

    def __init__(
        self,
        doc: SongDocument,
        pitch_channels: list[Channel],
        noise_channels: list[Channel],
        mod_channels: list[Channel],
    ) -> None:
        super().__init__(doc.notifier)
        song = doc.song
        config = song.config

        pitch_channels = list(pitch_channels)
        noise_channels = list(noise_channels)
        mod_channels = list(mod_channels)
        _remove_extra_sparse_channels(pitch_channels, config.pitch_channel_count_max)
        _remove_extra_sparse_channels(noise_channels, config.noise_channel_count_max)
        _remove_extra_sparse_channels(mod_channels, config.mod_channel_count_max)

        while len(pitch_channels) < config.pitch_channel_count_min:
            pitch_channels.append(Channel())
        while len(noise_channels) < config.noise_channel_count_min:
            noise_channels.append(Channel())
        while len(mod_channels) < config.mod_channel_count_min:
            mod_channels.append(Channel())

        channels = pitch_channels + noise_channels + mod_channels
        bar_count = 1
        patterns_per_channel = config.patterns_per_channel_min
        for channel in channels:
            bar_count = max(bar_count, len(channel.bars))
            patterns_per_channel = max(patterns_per_channel, len(channel.patterns))
        bar_count = min(config.bar_count_max, bar_count)
        patterns_per_channel = min(config.bar_count_max, patterns_per_channel)

        old_values = {
            "channels": song.channels,
            "pitch_channel_count": song.pitch_channel_count,
            "noise_channel_count": song.noise_channel_count,
            "mod_channel_count": song.mod_channel_count,
            "bar_count": song.bar_count,
            "patterns_per_channel": song.patterns_per_channel,
            "loop_start": song.loop_start,
            "loop_length": song.loop_length,
        }

        # Instrument limits read the song's flags, which do not change here.
        max_instruments = song.get_max_instruments_per_channel()
        for channel in channels:
            bars = [
                number if 0 <= number <= patterns_per_channel else 0 for number in channel.bars
            ]
            channel.bars = (bars + [0] * bar_count)[:bar_count]
            del channel.instruments[max_instruments:]
            for pattern in channel.patterns:
                discard_invalid_pattern_instruments(pattern.instruments, song, channel)
            while len(channel.patterns) < patterns_per_channel:
                channel.patterns.append(Pattern())
            del channel.patterns[patterns_per_channel:]

        loop_start = max(0, min(bar_count - 1, song.loop_start))
        loop_length = min(bar_count - loop_start, song.loop_length)

        new_values = {
            "channels": channels,
            "pitch_channel_count": len(pitch_channels),
            "noise_channel_count": len(noise_channels),
            "mod_channel_count": len(mod_channels),
            "bar_count": bar_count,
            "patterns_per_channel": patterns_per_channel,
            "loop_start": loop_start,
            "loop_length": loop_length,
        }

        def apply(values: dict[str, Any]) -> None:
            for name, value in values.items():
                setattr(song, name, value)

        self._record(lambda: apply(new_values), lambda: apply(old_values))
        logger.debug(
            f"Replaced channels: {len(pitch_channels)} pitch, {len(noise_channels)} noise, "
            f"{len(mod_channels)} mod, {bar_count} bars, {patterns_per_channel} patterns"
        )


def _remove_extra_sparse_channels(channels: list[Channel], max_length: int) -> None:
    while len(channels) > max_length:
        sparsest_index = len(channels) - 1
        most_zeroes = 0
        for index, channel in enumerate(channels[:-1]):
            zeroes = channel.bars.count(0)
            if zeroes >= most_zeroes:
                sparsest_index = index
                most_zeroes = zeroes
        del channels[sparsest_index]
