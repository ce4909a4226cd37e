"""
Voice-Leading Optimizer

Takes a fixed melody and a movable harmony and returns every note with a
voice (0 = melody/top ... N-1 = bass) and an octave chosen for smooth,
classical voice leading.

Pipeline:
  1. Group notes into chords by start position.
  2. Voice count N = size of the largest chord.
  3. Voice the first chord top-down (melody 0, lowest note N-1).
  4. Each following chord: try voice assignments for its unfixed notes,
     keep the cheapest against the previous chord, fix its octaves.
  5. Lift the whole harmony if it sits more than an octave under the melody.
  6. Flatten back to a note list.

The search is greedy per chord, not optimal across the piece.

Usage:
    from voice_leading import optimize_voice_leading
    notes = optimize_voice_leading([(72, 0, 8)], [(67, 0, 8), (64, 0, 8), (60, 0, 8)])
"""

from __future__ import annotations

from collections.abc import Iterable

from voice_leading.chords import determine_voice_count, flatten_chords, identify_chords
from voice_leading.config import DEFAULT_CONFIG, OptimizerConfig
from voice_leading.notes import Chord, Note, coerce_notes
from voice_leading.octaves import balance_harmony_octave, harmony_gap, normalize_octaves
from voice_leading.search import apply_assignment, exhaustive_assignment, solve_assignment


def assign_first_chord(chord: Chord, num_voices: int) -> Chord:
    """
    Voice the opening chord by pitch: melody keeps 0, the rest count down
    from the top, and the lowest note always takes the bass voice N-1 even if
    that leaves middle voices empty.
    """
    has_melody = any(n.voice == 0 for n in chord.notes)
    unfixed = [i for i, n in enumerate(chord.notes) if n.voice is None]
    remaining = sorted(unfixed, key=lambda i: -chord.notes[i].pitch)

    voices: dict[int, int] = {}    # index in chord.notes -> voice
    next_voice = 1 if has_melody else 0
    for rank, idx in enumerate(remaining):
        if rank == len(remaining) - 1:
            voices[idx] = num_voices - 1
        else:
            voices[idx] = next_voice
            next_voice += 1

    return chord.with_notes(
        n.with_voice(voices[i]) if i in voices else n for i, n in enumerate(chord.notes)
    )


def optimize_chord_voicing(prev: Chord, chord: Chord, num_voices: int,
                           config: OptimizerConfig = DEFAULT_CONFIG) -> Chord:
    """Voice one chord against its voiced predecessor, then fix its octaves."""
    unfixed = chord.unfixed_notes
    if unfixed:
        args = (prev, chord, num_voices, config.weights, config.max_spacing)
        if len(unfixed) > config.exhaustive_limit:
            if config.verbose:
                print(f"  position {chord.position}: {len(unfixed)} notes, using CP-SAT")
            assignment, cost = solve_assignment(*args, time_limit=config.solver_time_limit)
        else:
            assignment, cost = exhaustive_assignment(*args)
        if config.verbose:
            print(f"  position {chord.position}: voices {list(assignment)} cost {cost}")
        chord = apply_assignment(chord, assignment)
    return normalize_octaves(chord, config.octave)


def optimize_chords(chords: list[Chord], config: OptimizerConfig = DEFAULT_CONFIG) -> list[Chord]:
    """Run steps 2-5 on already segmented chords."""
    if not chords:
        return []
    num_voices = determine_voice_count(chords)
    if config.verbose:
        print(f"Voicing {len(chords)} chords in {num_voices} voices.")

    voiced = [normalize_octaves(assign_first_chord(chords[0], num_voices), config.octave)]
    for chord in chords[1:]:
        voiced.append(optimize_chord_voicing(voiced[-1], chord, num_voices, config))

    if config.verbose:
        gap = harmony_gap(voiced)
        if gap is not None and gap > config.octave:
            print(f"Harmony sits {gap} semitones under the melody; lifting it.")
    return balance_harmony_octave(voiced, config.octave)


def optimize_voice_leading(melody: Iterable, harmony: Iterable,
                           config: OptimizerConfig | None = None) -> list[Note]:
    """
    Voice a melody and its harmony.

    melody, harmony: Note objects, (pitch, position, duration) tuples, or
    dicts with those keys. Returns a new list of Notes, each with a voice.
    Pitches are never clamped to any display range.
    """
    config = config or DEFAULT_CONFIG
    melody_notes = coerce_notes(melody, is_melody=True)
    harmony_notes = coerce_notes(harmony)
    chords = identify_chords(melody_notes, harmony_notes)
    return flatten_chords(optimize_chords(chords, config))
