"""
Voicing Validation & Scoring Harness

Checks a voiced note list against hard constraints (errors) and soft
constraints (warnings + scores). Every optimizer result should pass with
zero errors; warnings flag what the greedy search had to accept.

Usage:
    python -m voice_leading.validate <token_file>

API:
    from voice_leading.validate import validate
    scorecard = validate(notes)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from itertools import combinations
from pathlib import Path

from voice_leading.chords import determine_voice_count, group_by_position
from voice_leading.notes import Chord, Note
from voice_leading.pitch_names import pitch_to_note_name
from voice_leading.tokens import parse_voiced_tokens


@dataclass
class Issue:
    """A single validation issue (error or warning)."""
    level: str          # 'error' or 'warning'
    check: str          # check name, e.g. 'voice_crossing'
    chord_idx: int      # which chord (0-based), or -1 for global
    position: int | None
    message: str


def _issue(level: str, check: str, idx: int, chord: Chord | None, message: str) -> Issue:
    return Issue(level=level, check=check, chord_idx=idx,
                 position=chord.position if chord is not None else None, message=message)


def _voiced(chord: Chord) -> list[Note]:
    return sorted((n for n in chord.notes if n.voice is not None), key=lambda n: n.voice)


def _voice_map(chord: Chord) -> dict[int, int]:
    return {n.voice: n.pitch for n in chord.notes if n.voice is not None}


# ---------------------------------------------------------------------------
# Hard constraint checks
# ---------------------------------------------------------------------------

def check_voice_assignment(chords: list[Chord], voice_count: int) -> list[Issue]:
    """Every note voiced, voices in [0, N-1], no voice twice in a chord, melody on 0."""
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        seen: set[int] = set()
        for n in chord.notes:
            if n.voice is None:
                issues.append(_issue('error', 'unvoiced', idx, chord,
                                     f"pitch {n.pitch} has no voice"))
                continue
            if not 0 <= n.voice < voice_count:
                issues.append(_issue('error', 'voice_range', idx, chord,
                                     f"voice {n.voice} outside [0, {voice_count - 1}]"))
            if n.voice in seen:
                issues.append(_issue('error', 'duplicate_voice', idx, chord,
                                     f"voice {n.voice} used twice"))
            seen.add(n.voice)
            if n.is_melody and n.voice != 0:
                issues.append(_issue('error', 'melody_voice', idx, chord,
                                     f"melody pitch {n.pitch} on voice {n.voice}"))
    return issues


def check_voice_crossing(chords: list[Chord]) -> list[Issue]:
    """Pitch must fall as voice index rises."""
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        notes = _voiced(chord)
        for upper, lower in zip(notes, notes[1:]):
            if upper.pitch < lower.pitch:
                issues.append(_issue('error', 'voice_crossing', idx, chord,
                                     f"voice {upper.voice}({upper.pitch}) < voice {lower.voice}({lower.pitch})"))
    return issues


def check_spacing(chords: list[Chord], max_spacing: int = 12) -> list[Issue]:
    """Adjacent present voices at most max_spacing apart."""
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        notes = _voiced(chord)
        for upper, lower in zip(notes, notes[1:]):
            gap = abs(upper.pitch - lower.pitch)
            if gap > max_spacing:
                issues.append(_issue('error', 'spacing', idx, chord,
                                     f"voices {upper.voice}-{lower.voice} gap {gap} semitones > {max_spacing}"))
    return issues


def check_bass_lowest(chords: list[Chord]) -> list[Issue]:
    """The highest voice present is the lowest pitch."""
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        notes = _voiced(chord)
        if len(notes) < 2:
            continue
        bass = notes[-1]
        lowest = min(n.pitch for n in notes)
        if bass.pitch > lowest:
            issues.append(_issue('error', 'bass_lowest', idx, chord,
                                 f"bass voice {bass.voice} at {bass.pitch} above lowest pitch {lowest}"))
    return issues


def check_durations(chords: list[Chord]) -> list[Issue]:
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        for n in chord.notes:
            if n.duration <= 0:
                issues.append(_issue('error', 'duration', idx, chord,
                                     f"pitch {n.pitch} dur={n.duration} is not positive"))
    return issues


# ---------------------------------------------------------------------------
# Soft constraint checks
# ---------------------------------------------------------------------------

def check_voice_unisons(chords: list[Chord]) -> list[Issue]:
    """Warn when adjacent voices share a pitch."""
    issues: list[Issue] = []
    for idx, chord in enumerate(chords):
        notes = _voiced(chord)
        for upper, lower in zip(notes, notes[1:]):
            if upper.pitch == lower.pitch:
                issues.append(_issue('warning', 'voice_unison', idx, chord,
                                     f"voices {upper.voice} and {lower.voice} both on {pitch_to_note_name(upper.pitch)}"))
    return issues


def check_voice_leaps(chords: list[Chord]) -> list[Issue]:
    """Warn on voice leaps > 12 semitones between consecutive chords."""
    issues: list[Issue] = []
    for i in range(len(chords) - 1):
        before, after = _voice_map(chords[i]), _voice_map(chords[i + 1])
        for v in sorted(before.keys() & after.keys()):
            interval = abs(after[v] - before[v])
            if interval > 12:
                issues.append(_issue('warning', 'voice_leaps', i + 1, chords[i + 1],
                                     f"voice {v} leaps {interval} semitones between chords {i} and {i + 1}"))
    return issues


def _parallel_pairs(a: Chord, b: Chord):
    """Yield (va, vb, interval mod 12, is_parallel) for voice pairs in both chords."""
    before, after = _voice_map(a), _voice_map(b)
    shared = sorted(before.keys() & after.keys())
    for va, vb in combinations(shared, 2):
        a1, a2, b1, b2 = before[va], after[va], before[vb], after[vb]
        parallel = False
        if not (a1 == a2 and b1 == b2) and (a2 - a1) == (b2 - b1):
            parallel = abs(a2 - b2) % 12 in (0, 7)
        yield va, vb, abs(a2 - b2) % 12, parallel


def check_parallel_fifths_octaves(chords: list[Chord]) -> list[Issue]:
    """Detect parallel perfect 5ths and octaves between voice pairs."""
    issues: list[Issue] = []
    for i in range(len(chords) - 1):
        for va, vb, interval_mod, parallel in _parallel_pairs(chords[i], chords[i + 1]):
            if parallel:
                kind = 'octave' if interval_mod == 0 else 'fifth'
                issues.append(_issue('warning', 'parallel_fifths_octaves', i + 1, chords[i + 1],
                                     f"Parallel {kind} between voices {va} and {vb} at chords {i}-{i + 1}"))
    return issues


def calc_leap_rate(chords: list[Chord]) -> float:
    """Fraction of voice movements > 7 semitones."""
    leaps = total = 0
    for i in range(len(chords) - 1):
        before, after = _voice_map(chords[i]), _voice_map(chords[i + 1])
        for v in before.keys() & after.keys():
            total += 1
            if abs(after[v] - before[v]) > 7:
                leaps += 1
    return leaps / total if total > 0 else 0.0


def calc_parallel_rate(chords: list[Chord]) -> float:
    """Fraction of voice-pair movements that are parallel 5ths/octaves."""
    parallels = total = 0
    for i in range(len(chords) - 1):
        for _, _, _, parallel in _parallel_pairs(chords[i], chords[i + 1]):
            total += 1
            parallels += parallel
    return parallels / total if total > 0 else 0.0


def calc_total_movement(chords: list[Chord]) -> int:
    """Semitones travelled by all voices across the piece."""
    total = 0
    for i in range(len(chords) - 1):
        before, after = _voice_map(chords[i]), _voice_map(chords[i + 1])
        total += sum(abs(after[v] - before[v]) for v in before.keys() & after.keys())
    return total


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------

@dataclass
class Scorecard:
    """Aggregated validation results for a voicing."""
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)
    scores: dict = field(default_factory=dict)
    passed: bool = True

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def overall_score(self) -> float:
        """0-100 quality score. Errors = 0, otherwise weighted soft scores."""
        if self.errors:
            return 0.0
        weights = {
            'leap_rate': 40,
            'parallel_rate': 60,
        }
        total = 0.0
        for key, weight in weights.items():
            total += (1.0 - self.scores.get(key, 0.0)) * weight
        return round(total, 1)


def validate(notes: list[Note], voice_count: int | None = None, max_spacing: int = 12) -> Scorecard:
    """Run all hard and soft checks over voiced notes, return a Scorecard."""
    chords = group_by_position(notes)
    if voice_count is None:
        voice_count = determine_voice_count(chords)
    sc = Scorecard()

    sc.errors.extend(check_voice_assignment(chords, voice_count))
    sc.errors.extend(check_voice_crossing(chords))
    sc.errors.extend(check_spacing(chords, max_spacing))
    sc.errors.extend(check_bass_lowest(chords))
    sc.errors.extend(check_durations(chords))
    sc.passed = len(sc.errors) == 0

    for check_fn in (check_voice_unisons, check_voice_leaps, check_parallel_fifths_octaves):
        sc.warnings.extend(check_fn(chords))

    sc.scores['leap_rate'] = calc_leap_rate(chords)
    sc.scores['parallel_rate'] = calc_parallel_rate(chords)
    sc.scores['movement'] = calc_total_movement(chords)
    sc.scores['voices'] = voice_count
    return sc


def print_scorecard(sc: Scorecard, file=None) -> None:
    """Print a human-readable scorecard."""
    out = file or sys.stdout
    print("=" * 60, file=out)
    print("  VOICING SCORECARD", file=out)
    print("=" * 60, file=out)
    print(file=out)

    status = "PASS" if sc.passed else "FAIL"
    print(f"  Status:         {status}", file=out)
    print(f"  Overall Score:  {sc.overall_score}/100", file=out)
    print(f"  Errors:         {sc.error_count}", file=out)
    print(f"  Warnings:       {sc.warning_count}", file=out)
    print(file=out)

    if sc.errors:
        print("  ERRORS:", file=out)
        for issue in sc.errors[:20]:
            print(f"    [{issue.check}] chord {issue.chord_idx}: {issue.message}", file=out)
        if len(sc.errors) > 20:
            print(f"    ... and {len(sc.errors) - 20} more", file=out)
        print(file=out)

    print("  SCORES:", file=out)
    print(f"    Voices:            {sc.scores.get('voices', 0)}", file=out)
    print(f"    Leap rate:         {sc.scores.get('leap_rate', 0):.1%}  (lower is better)", file=out)
    print(f"    Parallel rate:     {sc.scores.get('parallel_rate', 0):.1%}  (lower is better)", file=out)
    print(f"    Total movement:    {sc.scores.get('movement', 0)} semitones", file=out)
    print(file=out)

    if sc.warnings:
        print(f"  WARNINGS (first 10 of {len(sc.warnings)}):", file=out)
        for issue in sc.warnings[:10]:
            print(f"    [{issue.check}] chord {issue.chord_idx}: {issue.message}", file=out)
        print(file=out)

    print("=" * 60, file=out)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print("Usage: python -m voice_leading.validate <token_file>")
        print("  Validates a voiced token file and prints a scorecard.")
        return 1

    token_file = Path(argv[0])
    if not token_file.exists():
        print(f"File not found: {token_file}")
        return 1

    notes = parse_voiced_tokens(token_file.read_text())
    print(f"Loaded {len(notes)} notes from {token_file}")
    print()

    sc = validate(notes)
    print_scorecard(sc)
    return 0 if sc.passed else 1


if __name__ == '__main__':
    sys.exit(main())
