"""
Token Format for Note Lists

Plain-text interchange for the optimizer's input and output: one note per
line, fields as [type:value] tokens in any order.

Input:
  [part:melody] [pos:0] [pitch:72] [dur:8]
  [part:harmony] [pos:0] [pitch:G4] [dur:8]

Output (format_notes):
  [voices:4]
  [pos:0] [pitch:72] [name:C5] [dur:8] [voice:0] [part:melody]
  [pos:0] [pitch:55] [name:G3] [dur:8] [voice:3] [part:harmony]

Pitches may be MIDI numbers or note names. A line missing its pitch, position
or duration is dropped with a warning. Lines starting with '#' are comments.
"""

from __future__ import annotations

import re
import warnings
from collections.abc import Iterable

from voice_leading.notes import Note, make_note
from voice_leading.pitch_names import parse_pitch, pitch_to_note_name

# Token regex: matches [type:value] patterns
_TOKEN_RE = re.compile(r'\[([a-z_]+):([^\]]+)\]')

PARTS = ('melody', 'harmony')


def _parse_line(tokens: list[tuple[str, str]], lineno: int) -> tuple[str, Note] | None:
    fields: dict = {}
    for token_type, token_value in tokens:
        value = token_value.strip()
        if token_type == 'part':
            fields['part'] = value.lower()
        elif token_type == 'pos':
            fields['pos'] = int(value)
        elif token_type == 'pitch':
            fields['pitch'] = parse_pitch(value)
        elif token_type == 'dur':
            fields['dur'] = int(value)

    missing = [k for k in ('pitch', 'pos', 'dur') if k not in fields]
    if missing:
        warnings.warn(
            f"Dropping line {lineno} with no {', '.join(f'[{k}:]' for k in missing)}; tokens: {tokens}",
            stacklevel=3,
        )
        return None

    part = fields.get('part', 'harmony')
    if part not in PARTS:
        raise ValueError(f"Line {lineno}: unknown part {part!r}, expected one of {PARTS}")
    return part, make_note(fields['pitch'], fields['pos'], fields['dur'], is_melody=(part == 'melody'))


def parse_tokens(text: str) -> tuple[list[Note], list[Note]]:
    """Parse token text into (melody, harmony) note lists. Notes without [part:] are harmony."""
    melody: list[Note] = []
    harmony: list[Note] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        tokens = _TOKEN_RE.findall(line)
        if not tokens or {t for t, _ in tokens} <= {'voices'}:
            continue
        try:
            parsed = _parse_line(tokens, lineno)
        except ValueError as e:
            if str(e).startswith('Line '):
                raise
            raise ValueError(f"Line {lineno}: {e}") from e
        if parsed is None:
            continue
        part, note = parsed
        (melody if part == 'melody' else harmony).append(note)
    return melody, harmony


def format_notes(notes: Iterable[Note], voice_count: int | None = None) -> str:
    """Serialize voiced notes, one per line, optional [voices:N] header."""
    lines = []
    if voice_count is not None:
        lines.append(f"[voices:{voice_count}]")
    for note in notes:
        parts = [
            f"[pos:{note.position}]",
            f"[pitch:{note.pitch}]",
            f"[name:{pitch_to_note_name(note.pitch)}]",
            f"[dur:{note.duration}]",
        ]
        if note.voice is not None:
            parts.append(f"[voice:{note.voice}]")
        parts.append(f"[part:{'melody' if note.is_melody else 'harmony'}]")
        lines.append(' '.join(parts))
    return '\n'.join(lines) + '\n'


def parse_voiced_tokens(text: str) -> list[Note]:
    """Read format_notes output back, keeping each note's [voice:] and [part:]."""
    notes: list[Note] = []
    for line in text.splitlines():
        fields = {t: v.strip() for t, v in _TOKEN_RE.findall(line)}
        if not {'pos', 'pitch', 'dur'} <= fields.keys():
            continue
        notes.append(Note(
            pitch=parse_pitch(fields['pitch']),
            position=int(fields['pos']),
            duration=int(fields['dur']),
            voice=int(fields['voice']) if 'voice' in fields else None,
            is_melody=fields.get('part') == 'melody',
        ))
    return notes
