"""
Octave placement passes.

normalize_octaves repairs one chord after its voices are committed:
bass lowest, pitch strictly falling as voice index rises, no adjacent voices
more than an octave apart. Melody notes never move; the harmony is moved
around them.

balance_harmony_octave is the single whole-piece correction that lifts the
accompaniment when it has drifted far below the melody.
"""

from __future__ import annotations

from collections.abc import Sequence

from voice_leading.notes import Chord, Note


def _octaves_up_to_clear(pitch: int, floor_pitch: int, octave: int) -> int:
    """Smallest number of octaves that puts pitch strictly above floor_pitch."""
    if pitch > floor_pitch:
        return 0
    return (floor_pitch - pitch) // octave + 1


def normalize_octaves(chord: Chord, octave: int = 12) -> Chord:
    notes = sorted(chord.notes, key=lambda n: n.voice)
    if len(notes) < 2:
        return chord.with_notes(notes)

    # Bass sinks until it is the lowest sounding note
    bass = notes[-1]
    if not bass.is_melody:
        lowest_other = min(n.pitch for n in notes[:-1])
        pitch = bass.pitch
        while pitch > lowest_other:
            pitch -= octave
        notes[-1] = bass.transposed(pitch - bass.pitch)

    # Upper voices stack strictly above the voice below, at most an octave apart
    for i in range(len(notes) - 2, -1, -1):
        note, below = notes[i], notes[i + 1]
        if note.is_melody:
            continue
        pitch = note.pitch + octave * _octaves_up_to_clear(note.pitch, below.pitch, octave)
        while pitch - below.pitch > octave:
            pitch -= octave
        notes[i] = note.transposed(pitch - note.pitch)

    # Tuck the harmony block under a melody on top
    top = notes[0]
    if top.is_melody:
        highest = notes[1].pitch
        shift = octave * ((top.pitch - 1 - highest) // octave)
        if shift:
            notes = [top] + [n.transposed(shift) for n in notes[1:]]

    return chord.with_notes(notes)


def harmony_gap(chords: Sequence[Chord]) -> int | None:
    """Lowest melody pitch minus highest harmony pitch, or None if a side is missing."""
    melody = [n.pitch for c in chords for n in c.notes if n.is_melody]
    harmony = [n.pitch for c in chords for n in c.notes if not n.is_melody]
    if not melody or not harmony:
        return None
    return min(melody) - max(harmony)


def balance_harmony_octave(chords: Sequence[Chord], octave: int = 12) -> list[Chord]:
    """Raise every harmony note by whole octaves if it sits over an octave below the melody."""
    gap = harmony_gap(chords)
    if gap is None or gap <= octave:
        return list(chords)

    shift = octave * ((gap - 1) // octave)

    def lift(note: Note) -> Note:
        return note if note.is_melody else note.transposed(shift)

    return [c.with_notes(lift(n) for n in c.notes) for c in chords]
