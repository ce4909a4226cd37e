#!/usr/bin/env python3
"""
Tests for pitch names and the display-range policies.

Usage:
    python -m voice_leading.test_pitch_names
"""

import sys
import warnings

from voice_leading.notes import Note
from voice_leading.pitch_names import (
    DisplayRange, apply_display_range, note_name_to_pitch, parse_pitch,
    pitch_to_note_name,
)


def _assert_eq(actual, expected, msg=""):
    if actual != expected:
        raise AssertionError(f"{msg}\n  expected: {expected!r}\n  actual:   {actual!r}")


def _assert_raises(exc, fn, *args, msg=""):
    try:
        fn(*args)
    except exc:
        return
    raise AssertionError(f"Expected {exc.__name__}: {msg}")


def test_pitch_to_note_name():
    print("Test 1: MIDI number to name")

    _assert_eq(pitch_to_note_name(60), 'C4', "middle C")
    _assert_eq(pitch_to_note_name(70), 'Bb4', "flats spelled with b")
    _assert_eq(pitch_to_note_name(66), 'F#4', "sharps spelled with #")
    _assert_eq(pitch_to_note_name(0), 'C-1', "lowest MIDI note")
    _assert_eq(pitch_to_note_name(127), 'G9', "highest MIDI note")

    print("  PASSED")


def test_note_name_to_pitch():
    print("Test 2: Name to MIDI number")

    cases = {
        'C4': 60, 'c4': 60, 'C#4': 61, 'Eb4': 63, 'bb3': 58,
        'B#3': 60, 'Cb4': 59, 'C-1': 0, 'G9': 127, ' A4 ': 69,
    }
    for name, pitch in cases.items():
        _assert_eq(note_name_to_pitch(name), pitch, name)
    for pitch in (0, 21, 60, 70, 108, 127):
        _assert_eq(note_name_to_pitch(pitch_to_note_name(pitch)), pitch, f"round trip {pitch}")

    _assert_raises(ValueError, note_name_to_pitch, 'H4', msg="no such letter")
    _assert_raises(ValueError, note_name_to_pitch, 'C', msg="octave required")
    _assert_raises(ValueError, note_name_to_pitch, 'C-', msg="dangling sign")

    print("  PASSED")


def test_parse_pitch():
    print("Test 3: Numbers or names")

    _assert_eq(parse_pitch('60'), 60, "number")
    _assert_eq(parse_pitch(' 72 '), 72, "padded number")
    _assert_eq(parse_pitch('G3'), 55, "name")
    _assert_eq(parse_pitch('-3'), -3, "negative numbers pass through")

    print("  PASSED")


def test_display_range():
    print("Test 4: Display range bounds")

    r = DisplayRange()
    _assert_eq((r.low, r.high), (21, 108), "piano range by default")
    _assert_eq(21 in r and 108 in r, True, "inclusive")
    _assert_eq(20 in r or 109 in r, False, "outside")
    _assert_raises(ValueError, DisplayRange, 60, 65, msg="narrower than an octave")

    print("  PASSED")


def test_policies():
    print("Test 5: drop, clip and reject")

    r = DisplayRange(48, 72)
    notes = [Note(40, 0, 8, 2), Note(60, 0, 8, 1), Note(80, 0, 8, 0, True)]

    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        kept = apply_display_range(notes, r, 'drop')
    _assert_eq(kept, [Note(60, 0, 8, 1)], "out-of-range notes dropped")
    _assert_eq(len(w), 2, "one warning per dropped note")
    _assert_eq('E2 (pitch 40)' in str(w[0].message), True, str(w[0].message))

    clipped = apply_display_range(notes, r, 'clip')
    _assert_eq([n.pitch for n in clipped], [52, 60, 68], "folded by octaves")
    _assert_eq([n.voice for n in clipped], [2, 1, 0], "voices kept")
    _assert_eq(clipped[2].is_melody, True, "melody flag kept")

    _assert_raises(ValueError, apply_display_range, notes, r, 'reject', msg="reject")
    _assert_raises(ValueError, apply_display_range, notes, r, 'wrap', msg="unknown policy")
    _assert_eq(apply_display_range([Note(60, 0, 8)], r, 'reject'), [Note(60, 0, 8)], "in range passes")

    print("  PASSED")


def main():
    tests = [
        test_pitch_to_note_name,
        test_note_name_to_pitch,
        test_parse_pitch,
        test_display_range,
        test_policies,
    ]
    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            print(f"  FAILED: {e}")
            failed += 1
    print(f"Results: {len(tests) - failed}/{len(tests)} passed, {failed} failed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
