#!/usr/bin/env python3
"""Tests for optimizer configuration loading."""

import json
import os
import sys
import tempfile

from voice_leading.config import (
    DEFAULT_CONFIG, CostWeights, OptimizerConfig, config_from_dict, load_config,
)
from voice_leading.optimizer import optimize_voice_leading


def _assert_eq(actual, expected, msg=""):
    if actual != expected:
        raise AssertionError(f"{msg}\n  expected: {expected!r}\n  actual:   {actual!r}")


def _assert_raises(exc, fn, *args, msg=""):
    try:
        fn(*args)
    except exc:
        return
    raise AssertionError(f"Expected {exc.__name__}: {msg}")


def test_defaults():
    print("Test 1: Default cost table")

    _assert_eq(DEFAULT_CONFIG.weights, CostWeights(1000, 100, 500, 2), "weights")
    _assert_eq((DEFAULT_CONFIG.octave, DEFAULT_CONFIG.max_spacing), (12, 12), "octave and spacing")
    _assert_eq(DEFAULT_CONFIG.exhaustive_limit, 8, "brute force up to 8 notes")
    _assert_eq(config_from_dict({}), DEFAULT_CONFIG, "empty dict is the default")

    print("  PASSED")


def test_partial_override():
    print("Test 2: Partial overrides keep the other defaults")

    cfg = config_from_dict({'weights': {'movement': 5}, 'verbose': True})
    _assert_eq(cfg.weights, CostWeights(movement=5), "one weight changed")
    _assert_eq(cfg.verbose, True, "verbose")
    _assert_eq(cfg.exhaustive_limit, 8, "untouched field")

    print("  PASSED")


def test_rejects_bad_config():
    print("Test 3: Unknown keys and bad values raise ValueError")

    _assert_raises(ValueError, config_from_dict, {'octaves': 12}, msg="typo in key")
    _assert_raises(ValueError, config_from_dict, {'weights': {'cross': 1}}, msg="typo in weight")
    _assert_raises(ValueError, config_from_dict, {'weights': 3}, msg="weights not an object")
    _assert_raises(ValueError, config_from_dict, {'octave': 0}, msg="zero octave")
    _assert_raises(ValueError, config_from_dict, {'exhaustive_limit': -1}, msg="negative limit")
    _assert_raises(ValueError, config_from_dict, [1, 2], msg="not an object")

    print("  PASSED")


def test_load_config():
    print("Test 4: Load from a JSON file")

    with tempfile.NamedTemporaryFile('w', suffix='.json', delete=False) as f:
        json.dump({'weights': {'crossing': 2000}, 'solver_time_limit': 2.5}, f)
        path = f.name
    try:
        cfg = load_config(path)
    finally:
        os.unlink(path)
    _assert_eq(cfg.weights.crossing, 2000, "crossing weight")
    _assert_eq(cfg.solver_time_limit, 2.5, "time limit")

    print("  PASSED")


def test_weights_change_the_choice():
    print("Test 5: Without a parallel penalty the nearest mapping wins")

    melody = [(72, 0, 8), (74, 8, 8)]
    # 62 is two semitones from the bass (60) but three from voice 2 (65)
    harmony = [(67, 0, 8), (65, 0, 8), (60, 0, 8), (69, 8, 8), (62, 8, 8)]
    default = optimize_voice_leading(melody, harmony)
    _assert_eq({n.pitch: n.voice for n in default if n.position == 8}, {74: 0, 69: 1, 62: 2},
               "parallels avoided by default")

    cfg = OptimizerConfig(weights=CostWeights(parallel=0))
    notes = optimize_voice_leading(melody, harmony, cfg)
    _assert_eq({n.pitch: n.voice for n in notes if n.position == 8}, {74: 0, 69: 1, 62: 3},
               "62 stays on the bass voice")

    print("  PASSED")


def main():
    tests = [
        test_defaults,
        test_partial_override,
        test_rejects_bad_config,
        test_load_config,
        test_weights_change_the_choice,
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
