"""
Tests for the sequencer configuration.

Tests cover:
- Defaults
- YAML loading and validation
- Derived values
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from chuk_music_editor.config import DEFAULT_CONFIG, SequencerConfig, load_config


class TestSequencerConfig:
    """Tests for SequencerConfig."""

    def test_defaults(self) -> None:
        """Default limits match the standard sequencer."""
        assert DEFAULT_CONFIG.parts_per_beat == 24
        assert DEFAULT_CONFIG.tempo_max == 500
        assert DEFAULT_CONFIG.note_size_max == 6
        assert DEFAULT_CONFIG.patterns_per_channel_min == 8

    def test_parts_per_bar(self) -> None:
        """Parts per bar scale with beats."""
        assert DEFAULT_CONFIG.parts_per_bar(4) == 96
        assert SequencerConfig(parts_per_beat=4).parts_per_bar(3) == 12

    def test_frozen(self) -> None:
        """Configs cannot be modified after creation."""
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.tempo_max = 10

    def test_min_above_max_rejected(self) -> None:
        """Inverted ranges are rejected."""
        with pytest.raises(ValueError, match="tempo_min"):
            SequencerConfig(tempo_min=200, tempo_max=100)


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_overrides(self, temp_dir: Path) -> None:
        """Keys in the file override defaults; the rest keep their values."""
        path = temp_dir / "sequencer.yaml"
        path.write_text("parts_per_beat: 12\nmax_pitch: 96\n")

        config = load_config(path)

        assert config.parts_per_beat == 12
        assert config.max_pitch == 96
        assert config.tempo_max == DEFAULT_CONFIG.tempo_max

    def test_empty_file(self, temp_dir: Path) -> None:
        """An empty file yields the defaults."""
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(path) == DEFAULT_CONFIG

    def test_unknown_key(self, temp_dir: Path) -> None:
        """Unknown keys are rejected."""
        path = temp_dir / "bad.yaml"
        path.write_text("parts_per_bear: 12\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_not_a_mapping(self, temp_dir: Path) -> None:
        """A list at the top level is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)
