"""
Voice Assignment Search

Finds the cheapest way to hand the unfixed notes of a chord to the free
voices. Two strategies return the same answer:

1. exhaustive_assignment: every ordered assignment of free voices, in
   lexicographic order, first-seen wins ties. O(k!) in the unfixed notes.
2. solve_assignment: the same cost function as a CP-SAT model (OR-Tools),
   with a lexicographic tie-break pass. Used for chords too large to brute
   force.
"""

from __future__ import annotations

import warnings
from collections.abc import Sequence
from itertools import combinations, permutations

from ortools.sat.python import cp_model

from voice_leading.config import CostWeights
from voice_leading.cost import (
    DEFAULT_WEIGHTS, is_crossed, is_parallel_fifth_or_octave, is_too_wide,
    voice_leading_cost,
)
from voice_leading.notes import Chord


class SearchError(RuntimeError):
    """The solver could not produce any voice assignment."""


def available_voices(chord: Chord, num_voices: int) -> list[int]:
    used = chord.used_voices
    return [v for v in range(num_voices) if v not in used]


def apply_assignment(chord: Chord, assignment: Sequence[int]) -> Chord:
    """Give the chord's unfixed notes, in order, the voices in assignment."""
    voices = iter(assignment)
    notes = [n.with_voice(next(voices)) if n.voice is None else n for n in chord.notes]
    return chord.with_notes(notes)


def exhaustive_assignment(prev: Chord, chord: Chord, num_voices: int,
                          weights: CostWeights = DEFAULT_WEIGHTS,
                          max_spacing: int = 12) -> tuple[tuple[int, ...], int]:
    """Brute-force search. Returns (assignment, cost)."""
    free = available_voices(chord, num_voices)
    k = len(chord.unfixed_notes)
    best: tuple[int, ...] | None = None
    best_cost = 0
    for assignment in permutations(free, k):
        cost = voice_leading_cost(prev, apply_assignment(chord, assignment), weights, max_spacing)
        if best is None or cost < best_cost:
            best, best_cost = assignment, cost
    if best is None:
        raise SearchError(f"No free voices for {k} notes at position {chord.position}")
    return best, best_cost


class AssignmentModel:
    """CP-SAT encoding of the voice-leading cost for one chord."""

    def __init__(self, prev: Chord, chord: Chord, num_voices: int,
                 weights: CostWeights = DEFAULT_WEIGHTS, max_spacing: int = 12):
        self.model = cp_model.CpModel()
        self.chord = chord
        self.weights = weights
        self.max_spacing = max_spacing

        self.pitches = [n.pitch for n in chord.unfixed_notes]
        self.fixed = {n.voice: n.pitch for n in chord.fixed_notes}
        self.prev = {n.voice: n.pitch for n in prev.notes if n.voice is not None}
        self.free = available_voices(chord, num_voices)
        self.num_voices = num_voices

        # x[i][v] = note i sings voice v
        self.x = [
            {v: self.model.NewBoolVar(f'x_n{i}_v{v}') for v in self.free}
            for i in range(len(self.pitches))
        ]
        self._terms = []    # (coefficient, literal)

        self._add_assignment_constraints()
        self._add_unary_costs()
        self._add_pair_costs()
        self._add_spacing_costs()

        self.objective = sum(c * lit for c, lit in self._terms)
        self.voice_of = [sum(v * xv for v, xv in row.items()) for row in self.x]

    def _add_assignment_constraints(self):
        for row in self.x:
            self.model.AddExactlyOne(list(row.values()))
        for v in self.free:
            self.model.AddAtMostOne([row[v] for row in self.x])

    def _occupancy(self, voice):
        if voice in self.fixed:
            return 1
        return sum(row[voice] for row in self.x)

    def _add_unary_costs(self):
        """Terms that depend on a single unfixed note's voice."""
        w = self.weights
        for i, pitch in enumerate(self.pitches):
            for v in self.free:
                cost = 0
                if v in self.prev:
                    cost += w.movement * abs(pitch - self.prev[v])
                for fv, fpitch in self.fixed.items():
                    upper, lower = (fpitch, pitch) if fv < v else (pitch, fpitch)
                    if is_crossed(upper, lower):
                        cost += w.crossing
                    if v in self.prev and fv in self.prev:
                        if is_parallel_fifth_or_octave(self.prev[fv] - self.prev[v], fpitch - pitch):
                            cost += w.parallel
                if cost:
                    self._terms.append((cost, self.x[i][v]))

    def _add_pair_costs(self):
        """Crossing and parallels between two unfixed notes."""
        w = self.weights
        for i, pi in enumerate(self.pitches):
            for j, pj in enumerate(self.pitches):
                if i == j:
                    continue
                for v, u in combinations(self.free, 2):
                    # note i on the upper voice v, note j on the lower voice u
                    cost = 0
                    if is_crossed(pi, pj):
                        cost += w.crossing
                    if v in self.prev and u in self.prev:
                        if is_parallel_fifth_or_octave(self.prev[v] - self.prev[u], pi - pj):
                            cost += w.parallel
                    if cost:
                        both = self.model.NewBoolVar(f'pair_n{i}v{v}_n{j}v{u}')
                        self.model.Add(both >= self.x[i][v] + self.x[j][u] - 1)
                        self._terms.append((cost, both))

    def _add_spacing_costs(self):
        """Adjacent present voices wider than max_spacing."""
        w = self.weights
        for v, u in combinations(range(self.num_voices), 2):
            between = range(v + 1, u)
            if any(b in self.fixed for b in between):
                continue
            occupied_between = sum(self._occupancy(b) for b in between)
            for upper_pitch, upper_lit in self._candidates(v):
                for lower_pitch, lower_lit in self._candidates(u):
                    if upper_lit is not None and upper_lit is lower_lit:
                        continue
                    if not is_too_wide(upper_pitch, lower_pitch, self.max_spacing):
                        continue
                    present = [lit for lit in (upper_lit, lower_lit) if lit is not None]
                    wide = self.model.NewBoolVar(f'wide_v{v}_v{u}_{len(self._terms)}')
                    self.model.Add(wide >= sum(present) - (len(present) - 1) - occupied_between)
                    self._terms.append((w.spacing, wide))

    def _candidates(self, voice):
        """(pitch, literal) pairs that could sound on voice; literal None if fixed."""
        if voice in self.fixed:
            return [(self.fixed[voice], None)]
        return [(p, self.x[i][voice]) for i, p in enumerate(self.pitches)]


def _new_solver(time_limit: float) -> cp_model.CpSolver:
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = time_limit
    solver.parameters.num_workers = 1
    solver.parameters.random_seed = 0
    return solver


def solve_assignment(prev: Chord, chord: Chord, num_voices: int,
                     weights: CostWeights = DEFAULT_WEIGHTS, max_spacing: int = 12,
                     time_limit: float = 10.0) -> tuple[tuple[int, ...], int]:
    """CP-SAT search. Returns (assignment, cost) like exhaustive_assignment."""
    am = AssignmentModel(prev, chord, num_voices, weights, max_spacing)
    model = am.model
    solver = _new_solver(time_limit)

    model.Minimize(am.objective)
    status = solver.Solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        raise SearchError(
            f"CP-SAT found no voice assignment at position {chord.position} "
            f"(status {solver.status_name(status)}, {solver.wall_time:.3f}s)"
        )

    def read():
        return tuple(solver.Value(voice) for voice in am.voice_of)

    if status == cp_model.FEASIBLE:
        warnings.warn(
            f"CP-SAT hit its {time_limit}s limit at position {chord.position}; "
            f"using the best assignment found",
            stacklevel=2,
        )
        assignment = read()
    else:
        # Among all optimal assignments pick the lexicographically smallest,
        # matching the first-seen winner of the exhaustive search.
        if am._terms:
            model.Add(am.objective <= round(solver.ObjectiveValue()))
        assignment = read()
        for i, voice in enumerate(am.voice_of):
            model.Minimize(voice)
            status = solver.Solve(model)
            if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
                break
            assignment = read()
            model.Add(voice == assignment[i])

    cost = voice_leading_cost(prev, apply_assignment(chord, assignment), weights, max_spacing)
    return assignment, cost
