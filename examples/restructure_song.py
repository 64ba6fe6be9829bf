#!/usr/bin/env python3
"""
Example: Restructuring a Song.

Builds a short two-channel song, then walks it through the edits a piano-roll
editor performs on the whole timeline, printing the bars after each step and
finally unwinding everything through the undo history.

Usage:
    python examples/restructure_song.py

This example shows:
1. Loading sequencer limits from YAML
2. Changing beats per bar with the overflow strategy (notes re-split per bar)
3. Shifting every note sideways across bar lines
4. Switching scale, and detecting the key
5. Undoing all of it in one pass
"""

import logging
from pathlib import Path

from chuk_music_editor import Note, Song, load_config
from chuk_music_editor.changes import (
    ChangeBeatsPerBar,
    ChangeDetectKey,
    ChangeMoveNotesSideways,
    ChangeSongScale,
    SongDocument,
)
from chuk_music_editor.core import scale_index
from chuk_music_editor.validation import validate_song


def describe(song: Song, title: str) -> None:
    """Print the bar layout and every pattern that is played."""
    print(title)
    print(f"   {song.bar_count} bars of {song.beats_per_bar} beats, tempo {song.tempo}")
    print(f"   Key {song.key}, scale {song.scale_name()}")
    print(f"   Loop: bars {song.loop_start}-{song.loop_start + song.loop_length - 1}")
    for channel_index, channel in enumerate(song.channels):
        print(f"   Channel {channel_index} bars: {channel.bars}")
        for number in sorted({n for n in channel.bars if n}):
            notes = ", ".join(
                f"{note.pitches}@{note.start}-{note.end}"
                + ("~" if note.continues_last_pattern else "")
                for note in channel.patterns[number - 1].notes
            )
            print(f"      pattern {number}: {notes or '(empty)'}")
    print()


def main() -> None:
    """Demonstrate whole-song restructuring and undo."""
    logging.basicConfig(level=logging.INFO)

    config = load_config(Path(__file__).parent / "sequencer.yaml")
    song = Song.create(pitch_channels=2, bar_count=2, beats_per_bar=4, config=config)
    song.scale = scale_index("Major")

    bass, lead = song.channels
    bass.patterns[0].notes = [Note.create(31, 0, 48, 6), Note.create(38, 48, 96, 6)]
    bass.bars = [1, 1]
    lead.patterns[0].notes = [Note.create(55, 72, 96, 5)]
    lead.patterns[1].notes = [Note.create(59, 0, 24, 5), Note.create(62, 24, 96, 5)]
    lead.bars = [1, 2]

    doc = SongDocument(song)
    notifications = []
    doc.notifier.watch(lambda: notifications.append(1))

    print("CHUK Music Editor Restructure Demo")
    print("=" * 50)
    print()
    describe(song, "1. Original song")

    doc.record(ChangeBeatsPerBar(doc, 3, "overflow"))
    describe(song, "2. Three beats per bar (overflow)")

    doc.record(ChangeMoveNotesSideways(doc, -1, "overflow"))
    describe(song, "3. Everything one beat earlier")

    doc.record(ChangeSongScale(doc, scale_index("Minor")))
    describe(song, "4. Switched to minor")

    doc.record(ChangeDetectKey(doc))
    describe(song, "5. Key detected")

    result = validate_song(song)
    print(f"Validation: {'passed' if result.is_valid else 'failed'}")
    for issue in result.issues:
        print(f"   {issue}")
    print(f"Notifications so far: {len(notifications)} (one per edit)")
    print()

    while doc.history.can_undo:
        doc.history.undo()
    describe(song, "6. After undoing everything")


if __name__ == "__main__":
    main()
