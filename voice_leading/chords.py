"""Grouping notes into chords by start position, and back again."""

from __future__ import annotations

import warnings
from collections.abc import Iterable

from voice_leading.notes import Chord, Note


def _pick_melody(notes: list[Note]) -> tuple[Note | None, list[Note]]:
    """Highest melody note at a position stays melody; any others become harmony."""
    if not notes:
        return None, []
    top = max(notes, key=lambda n: n.pitch)
    demoted = []
    for n in notes:
        if n is top:
            continue
        warnings.warn(
            f"Several melody notes start at position {n.position}; "
            f"keeping pitch {top.pitch} as melody, pitch {n.pitch} joins the harmony",
            stacklevel=3,
        )
        demoted.append(Note(pitch=n.pitch, position=n.position, duration=n.duration))
    return top, demoted


def identify_chords(melody: Iterable[Note], harmony: Iterable[Note]) -> list[Chord]:
    """
    Merge melody and harmony into time-ordered chords.

    Melody notes are tagged voice 0. A harmony note sounding the same pitch at
    the same position as a melody note is the melody note, so it is dropped.
    """
    by_position: dict[int, tuple[list[Note], list[Note]]] = {}
    for n in melody:
        by_position.setdefault(n.position, ([], []))[0].append(n)
    for n in harmony:
        by_position.setdefault(n.position, ([], []))[1].append(n)

    positions = sorted(by_position)
    chords: list[Chord] = []
    for i, position in enumerate(positions):
        melody_notes, harmony_notes = by_position[position]
        top, demoted = _pick_melody(melody_notes)

        notes: list[Note] = []
        if top is not None:
            notes.append(Note(pitch=top.pitch, position=top.position,
                              duration=top.duration, voice=0, is_melody=True))
        for n in demoted + harmony_notes:
            if top is not None and n.pitch == top.pitch:
                warnings.warn(
                    f"Harmony note {n.pitch} at position {position} doubles the melody; merged into it",
                    stacklevel=2,
                )
                continue
            notes.append(Note(pitch=n.pitch, position=n.position, duration=n.duration))

        duration = positions[i + 1] - position if i + 1 < len(positions) else None
        chords.append(Chord(position=position, notes=tuple(notes), duration=duration))
    return chords


def determine_voice_count(chords: Iterable[Chord]) -> int:
    """Number of voices = the largest chord."""
    return max((len(c.notes) for c in chords), default=0)


def flatten_chords(chords: Iterable[Chord]) -> list[Note]:
    notes: list[Note] = []
    for chord in chords:
        notes.extend(chord.by_voice())
    return notes


def group_by_position(notes: Iterable[Note]) -> list[Chord]:
    """Regroup an already-voiced flat note list into chords (no tagging, no merging)."""
    by_position: dict[int, list[Note]] = {}
    for n in notes:
        by_position.setdefault(n.position, []).append(n)
    positions = sorted(by_position)
    return [
        Chord(
            position=p,
            notes=tuple(by_position[p]),
            duration=positions[i + 1] - p if i + 1 < len(positions) else None,
        )
        for i, p in enumerate(positions)
    ]
