"""
Note and Chord Types for the Voice-Leading Pipeline

Single source of truth for what a note and a chord are. Every pipeline stage
takes these values and returns new ones; nothing is mutated in place.

A Note is one sounding pitch on the time grid. Position and duration are in
grid units (e.g. 32nd notes), pitch is a MIDI semitone number (60 = C4).
A Chord is every note that starts at one grid position.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Note:
    pitch: int
    position: int
    duration: int
    voice: int | None = None    # 0 = top (melody) ... N-1 = bass
    is_melody: bool = False

    def with_voice(self, voice: int | None) -> Note:
        return replace(self, voice=voice)

    def transposed(self, semitones: int) -> Note:
        return replace(self, pitch=self.pitch + semitones)


@dataclass(frozen=True)
class Chord:
    position: int
    notes: tuple[Note, ...]
    duration: int | None    # gap to the next chord, None for the last one

    def __len__(self) -> int:
        return len(self.notes)

    @property
    def fixed_notes(self) -> list[Note]:
        return [n for n in self.notes if n.voice is not None]

    @property
    def unfixed_notes(self) -> list[Note]:
        return [n for n in self.notes if n.voice is None]

    @property
    def used_voices(self) -> set[int]:
        return {n.voice for n in self.notes if n.voice is not None}

    def by_voice(self) -> list[Note]:
        """Notes sorted by voice index, unassigned notes last."""
        return sorted(self.notes, key=_voice_key)

    def with_notes(self, notes: Iterable[Note]) -> Chord:
        return replace(self, notes=tuple(notes))


def _voice_key(note: Note) -> tuple[int, int]:
    if note.voice is None:
        return (1, 0)
    return (0, note.voice)


def _check_int(value, field_name: str, raw) -> int:
    # bool is an int subclass but never a valid pitch or time value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Note {field_name} must be an integer, got {value!r} in {raw!r}")
    return value


def make_note(pitch, position, duration, is_melody: bool = False) -> Note:
    """Validate raw values and build an unvoiced Note."""
    raw = (pitch, position, duration)
    pitch = _check_int(pitch, 'pitch', raw)
    position = _check_int(position, 'position', raw)
    duration = _check_int(duration, 'duration', raw)
    if position < 0:
        raise ValueError(f"Note position must be >= 0, got {position} in {raw!r}")
    if duration <= 0:
        raise ValueError(f"Note duration must be positive, got {duration} in {raw!r}")
    return Note(pitch=pitch, position=position, duration=duration, is_melody=is_melody)


def coerce_notes(notes: Iterable | None, is_melody: bool = False) -> list[Note]:
    """
    Accept Note objects, (pitch, position, duration) tuples, or mappings with
    'pitch'/'position'/'duration' keys. Any incoming voice is discarded.
    """
    if notes is None:
        return []
    result = []
    for item in notes:
        if isinstance(item, Note):
            result.append(make_note(item.pitch, item.position, item.duration, is_melody))
        elif isinstance(item, Mapping):
            try:
                result.append(make_note(item['pitch'], item['position'], item['duration'], is_melody))
            except KeyError as e:
                raise ValueError(f"Note mapping missing key {e.args[0]!r}: {dict(item)!r}") from None
        else:
            try:
                pitch, position, duration = item
            except (TypeError, ValueError):
                raise ValueError(f"Expected (pitch, position, duration), got {item!r}") from None
            result.append(make_note(pitch, position, duration, is_melody))
    return result


def split_parts(notes: Iterable[Note]) -> tuple[list[Note], list[Note]]:
    """Split optimizer output back into (melody, harmony) lists."""
    melody: list[Note] = []
    harmony: list[Note] = []
    for note in notes:
        (melody if note.is_melody else harmony).append(note)
    return melody, harmony
