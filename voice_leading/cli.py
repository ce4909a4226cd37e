"""
Voice a melody and harmony from a token file.

Usage:
  python -m voice_leading song.txt
  python -m voice_leading song.txt -o voiced.txt --score
  python -m voice_leading song.txt --low 36 --high 84 --policy clip
  python -m voice_leading song.txt --config weights.json --verbose
"""

from __future__ import annotations

import argparse
import contextlib
import sys
from dataclasses import replace
from pathlib import Path

from voice_leading.chords import determine_voice_count, group_by_position
from voice_leading.config import DEFAULT_CONFIG, load_config
from voice_leading.optimizer import optimize_voice_leading
from voice_leading.pitch_names import POLICIES, DisplayRange, apply_display_range
from voice_leading.tokens import format_notes, parse_tokens
from voice_leading.validate import print_scorecard, validate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='voice-leading',
        description="Assign harmony notes to voices and octaves under a fixed melody",
    )
    parser.add_argument("input", help="Token file with [part:melody]/[part:harmony] notes")
    parser.add_argument("-o", "--output", default=None,
                        help="Write voiced tokens here (default: stdout)")
    parser.add_argument("--config", default=None, help="JSON optimizer config")
    parser.add_argument("--score", action="store_true", help="Print a validation scorecard")
    parser.add_argument("--strict", action="store_true",
                        help="Exit 1 when the scorecard has errors (implies --score)")
    parser.add_argument("--low", type=int, default=None, help="Lowest displayable pitch")
    parser.add_argument("--high", type=int, default=None, help="Highest displayable pitch")
    parser.add_argument("--policy", choices=POLICIES, default='drop',
                        help="What to do with notes outside --low/--high (default: drop)")
    parser.add_argument("--verbose", action="store_true", help="Print per-chord search progress")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    path = Path(args.input)
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config) if args.config else DEFAULT_CONFIG
        melody, harmony = parse_tokens(path.read_text())
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    # Tokens own stdout unless they go to a file; diagnostics then use stderr
    log = sys.stdout if args.output else sys.stderr
    if args.verbose:
        config = replace(config, verbose=True)
        print(f"Loaded {len(melody)} melody and {len(harmony)} harmony notes from {path}", file=log)

    with contextlib.redirect_stdout(log):
        notes = optimize_voice_leading(melody, harmony, config)
    voice_count = determine_voice_count(group_by_position(notes))

    if args.low is not None or args.high is not None:
        default = DisplayRange()
        try:
            display = DisplayRange(
                low=default.low if args.low is None else args.low,
                high=default.high if args.high is None else args.high,
            )
            notes = apply_display_range(notes, display, args.policy)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    text = format_notes(notes, voice_count)
    if args.output:
        Path(args.output).write_text(text)
        print(f"Wrote {len(notes)} notes to {args.output}")
    else:
        sys.stdout.write(text)

    if args.score or args.strict:
        sc = validate(notes, voice_count, config.max_spacing)
        print_scorecard(sc, file=log)
        if args.strict and not sc.passed:
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
