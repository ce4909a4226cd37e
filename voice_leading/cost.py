"""
Voice-Leading Cost Model

Scores a fully voiced candidate chord against the (already voiced) chord
before it. Terms are summed without normalization:

  crossing   a lower-indexed voice sounding below a higher-indexed one
  spacing    adjacent present voices more than an octave apart
  parallel   a voice pair holding a perfect fifth or octave across both chords
  movement   semitones travelled by every voice present in both chords

With the default weights structural faults always outweigh ordinary movement.
"""

from __future__ import annotations

from itertools import combinations

from voice_leading.config import CostWeights
from voice_leading.notes import Chord

DEFAULT_WEIGHTS = CostWeights()


def is_parallel_fifth_or_octave(prev_interval: int, cur_interval: int) -> bool:
    """True when both intervals are fifths, or both octaves (prev not a unison)."""
    prev_interval, cur_interval = abs(prev_interval), abs(cur_interval)
    if prev_interval % 12 == 7 and cur_interval % 12 == 7:
        return True
    return prev_interval % 12 == 0 and cur_interval % 12 == 0 and prev_interval != 0


def is_crossed(upper_pitch: int, lower_pitch: int) -> bool:
    """upper_pitch belongs to the lower voice index and should sound higher."""
    return upper_pitch < lower_pitch


def is_too_wide(upper_pitch: int, lower_pitch: int, max_spacing: int = 12) -> bool:
    return abs(upper_pitch - lower_pitch) > max_spacing


def voice_leading_cost(prev: Chord, candidate: Chord,
                       weights: CostWeights = DEFAULT_WEIGHTS,
                       max_spacing: int = 12) -> int:
    """Cost of moving from prev to candidate; every candidate note must carry a voice."""
    current = sorted(candidate.notes, key=lambda n: n.voice)
    prev_pitch = {n.voice: n.pitch for n in prev.notes if n.voice is not None}
    cur_pitch = {n.voice: n.pitch for n in current}

    cost = 0

    for upper, lower in combinations(current, 2):
        if is_crossed(upper.pitch, lower.pitch):
            cost += weights.crossing

    for upper, lower in zip(current, current[1:]):
        if is_too_wide(upper.pitch, lower.pitch, max_spacing):
            cost += weights.spacing

    shared = sorted(v for v in prev_pitch if v in cur_pitch)
    for va, vb in combinations(shared, 2):
        prev_interval = prev_pitch[va] - prev_pitch[vb]
        cur_interval = cur_pitch[va] - cur_pitch[vb]
        if is_parallel_fifth_or_octave(prev_interval, cur_interval):
            cost += weights.parallel

    for v in shared:
        cost += weights.movement * abs(prev_pitch[v] - cur_pitch[v])

    return cost
