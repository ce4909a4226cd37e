"""
Pitch name mapping and display-range policy.

The optimizer works in MIDI numbers only and never clamps. Editors that
draw a fixed range of rows decide here what happens to notes that land
outside it.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterable
from dataclasses import dataclass

import music21

from voice_leading.notes import Note

NOTE_NAMES = ['C', 'C#', 'D', 'Eb', 'E', 'F', 'F#', 'G', 'Ab', 'A', 'Bb', 'B']

_NAME_RE = re.compile(r'^\s*([A-Ga-g])([#b]*)(-?\d+)\s*$')

POLICIES = ('drop', 'clip', 'reject')


def pitch_to_note_name(pitch: int) -> str:
    """60 -> 'C4', 70 -> 'Bb4', 0 -> 'C-1'."""
    return f"{NOTE_NAMES[pitch % 12]}{(pitch // 12) - 1}"


def note_name_to_pitch(name: str) -> int:
    """
    Parse a note name with octave into a MIDI number.

    Accepts sharps '#' and flats 'b' in any letter case: 'C#4', 'Eb4',
    'bb3', 'c4', 'C-1'. A '-' is always an octave sign, never a flat.
    """
    m = _NAME_RE.match(name)
    if not m:
        raise ValueError(f"Invalid note name: {name!r}")
    step, accidental, octave = m.groups()
    # music21 spells flats with '-', so the octave is set on its own
    try:
        p = music21.pitch.Pitch(step.upper() + accidental.replace('b', '-'))
    except music21.exceptions21.Music21Exception as e:
        raise ValueError(f"Invalid note name: {name!r}") from e
    p.octave = int(octave)
    # Pitch.midi folds anything outside 0-127 back into range; ps does not
    return int(p.ps)


def parse_pitch(value: str) -> int:
    """MIDI number or note name."""
    value = value.strip()
    if re.fullmatch(r'-?\d+', value):
        return int(value)
    return note_name_to_pitch(value)


@dataclass(frozen=True)
class DisplayRange:
    low: int = 21      # A0
    high: int = 108    # C8

    def __post_init__(self):
        if self.high - self.low < 11:
            raise ValueError(
                f"Display range {self.low}-{self.high} must span at least an octave"
            )

    def __contains__(self, pitch: int) -> bool:
        return self.low <= pitch <= self.high


def _fold_into(pitch: int, display_range: DisplayRange) -> int:
    while pitch < display_range.low:
        pitch += 12
    while pitch > display_range.high:
        pitch -= 12
    return pitch


def apply_display_range(notes: Iterable[Note], display_range: DisplayRange,
                        policy: str = 'drop') -> list[Note]:
    """
    drop:   leave out notes outside the range, with a warning for each
    clip:   move them by octaves into the range (pitch class kept)
    reject: raise ValueError on the first one
    """
    if policy not in POLICIES:
        raise ValueError(f"Unknown display policy {policy!r}; expected one of {POLICIES}")
    result = []
    for note in notes:
        if note.pitch in display_range:
            result.append(note)
            continue
        where = (
            f"{pitch_to_note_name(note.pitch)} (pitch {note.pitch}) at position {note.position} "
            f"is outside the displayable range {display_range.low}-{display_range.high}"
        )
        if policy == 'reject':
            raise ValueError(where)
        if policy == 'drop':
            warnings.warn(f"Dropping {where}", stacklevel=2)
            continue
        result.append(note.transposed(_fold_into(note.pitch, display_range) - note.pitch))
    return result
