"""
Song Validator - non-raising structural checks of notes and songs.

Validates:
- Note pins strictly increase in time, starting at time 0 with interval 0
- Last pin sits at the note length
- Pin sizes stay within the configured maximum
- Continuation flags only on notes starting at part 0
- Notes are sorted and inside the bar (except in mod channels)
- Channel counts match the channel list
- Bar lists match the bar count and reference existing patterns
- Loop lies inside the song
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from chuk_music_editor.config import DEFAULT_CONFIG, SequencerConfig
from chuk_music_editor.models.note import Note
from chuk_music_editor.models.song import Song


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Breaks an editing invariant
    WARNING = "warning"  # Editable, but unusual
    INFO = "info"  # Informational only


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    code: str
    message: str
    location: str | None = None

    def __str__(self) -> str:
        prefix = f"[{self.severity.value.upper()}]"
        location = f" at {self.location}" if self.location else ""
        return f"{prefix} {self.code}: {self.message}{location}"


class ValidationResult:
    """Result of validating a note or song."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add_error(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.ERROR, code, message, location))

    def add_warning(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.WARNING, code, message, location))

    def add_info(self, code: str, message: str, location: str | None = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.INFO, code, message, location))

    @property
    def is_valid(self) -> bool:
        """Return True if no errors (warnings/info are OK)."""
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def codes(self) -> set[str]:
        """Codes of all issues, for quick membership checks."""
        return {i.code for i in self.issues}

    def __bool__(self) -> bool:
        return self.is_valid

    def __str__(self) -> str:
        if not self.issues:
            return "Validation passed: no issues found"
        return "\n".join(str(issue) for issue in self.issues)


class SongValidator:
    """Validates song structure and note invariants."""

    def validate(self, song: Song) -> ValidationResult:
        """
        Validate a song.

        Args:
            song: The song to validate

        Returns:
            ValidationResult with any issues found
        """
        result = ValidationResult()

        self._validate_channels(song, result)
        self._validate_bars(song, result)
        self._validate_loop(song, result)
        self._validate_patterns(song, result)

        return result

    def validate_note(
        self,
        note: Note,
        result: ValidationResult,
        config: SequencerConfig = DEFAULT_CONFIG,
        location: str = "note",
    ) -> None:
        """Check one note's pin invariants, adding issues to result."""
        pins = note.pins
        if not pins:
            result.add_error("NO_PINS", "Note has no pins", location)
            return

        if pins[0].time != 0:
            result.add_error("FIRST_PIN_TIME", f"First pin at time {pins[0].time}", location)
        if pins[0].interval != 0:
            result.add_error(
                "FIRST_PIN_INTERVAL", f"First pin has interval {pins[0].interval}", location
            )
        for prev, pin in zip(pins, pins[1:]):
            if pin.time <= prev.time:
                result.add_error(
                    "PIN_ORDER",
                    f"Pin at time {pin.time} does not follow pin at time {prev.time}",
                    location,
                )
        if pins[-1].time != note.end - note.start:
            result.add_error(
                "LAST_PIN_TIME",
                f"Last pin at time {pins[-1].time}, note length is {note.end - note.start}",
                location,
            )
        for pin in pins:
            if pin.size > config.note_size_max:
                result.add_warning(
                    "PIN_SIZE",
                    f"Pin size {pin.size} exceeds {config.note_size_max}",
                    location,
                )
        if note.continues_last_pattern and note.start != 0:
            result.add_error(
                "CONTINUATION_START",
                f"Continuing note starts at part {note.start}",
                location,
            )

    def _validate_channels(self, song: Song, result: ValidationResult) -> None:
        """Check that channel counts describe the channel list."""
        if song.get_channel_count() != len(song.channels):
            result.add_error(
                "CHANNEL_COUNT",
                f"Counts add up to {song.get_channel_count()} channels, "
                f"song has {len(song.channels)}",
                "channels",
            )

    def _validate_bars(self, song: Song, result: ValidationResult) -> None:
        """Check bar lists against bar count and pattern pools."""
        for channel_index, channel in enumerate(song.channels):
            location = f"channels/{channel_index}/bars"
            if len(channel.bars) != song.bar_count:
                result.add_error(
                    "BAR_COUNT",
                    f"Channel has {len(channel.bars)} bars, song has {song.bar_count}",
                    location,
                )
            for bar, number in enumerate(channel.bars):
                if number < 0 or number > len(channel.patterns):
                    result.add_error(
                        "INVALID_PATTERN_REF",
                        f"Bar {bar} references pattern {number} of {len(channel.patterns)}",
                        location,
                    )

    def _validate_loop(self, song: Song, result: ValidationResult) -> None:
        """Check that the loop lies inside the song."""
        if song.loop_start + song.loop_length > song.bar_count:
            result.add_error(
                "LOOP_RANGE",
                f"Loop {song.loop_start}+{song.loop_length} exceeds {song.bar_count} bars",
                "loop",
            )

    def _validate_patterns(self, song: Song, result: ValidationResult) -> None:
        """Check every note of every pattern."""
        parts_per_bar = song.parts_per_bar
        for channel_index, channel in enumerate(song.channels):
            is_mod = song.get_channel_is_mod(channel_index)
            for pattern_index, pattern in enumerate(channel.patterns):
                location = f"channels/{channel_index}/patterns/{pattern_index}"
                prev_end = 0
                for note_index, note in enumerate(pattern.notes):
                    note_location = f"{location}/notes/{note_index}"
                    self.validate_note(note, result, song.config, note_location)
                    if is_mod:
                        continue
                    if note.start < prev_end:
                        result.add_warning(
                            "NOTE_OVERLAP",
                            f"Note starts at {note.start} before previous note ends at {prev_end}",
                            note_location,
                        )
                    if note.start < 0 or note.end > parts_per_bar:
                        result.add_warning(
                            "NOTE_OUTSIDE_BAR",
                            f"Note spans {note.start}-{note.end}, bar has {parts_per_bar} parts",
                            note_location,
                        )
                    prev_end = max(prev_end, note.end)


def validate_note(note: Note, config: SequencerConfig = DEFAULT_CONFIG) -> ValidationResult:
    """
    Convenience function to validate a single note.

    Args:
        note: The note to validate
        config: Limits to check pin sizes against

    Returns:
        ValidationResult with any issues found
    """
    result = ValidationResult()
    SongValidator().validate_note(note, result, config)
    return result


def validate_song(song: Song) -> ValidationResult:
    """
    Convenience function to validate a song.

    Args:
        song: The song to validate

    Returns:
        ValidationResult with any issues found
    """
    validator = SongValidator()
    return validator.validate(song)
