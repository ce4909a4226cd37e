"""Voice-leading optimizer: voice and octave placement for a harmony under a fixed melody."""

from voice_leading.chords import determine_voice_count, flatten_chords, identify_chords
from voice_leading.config import CostWeights, OptimizerConfig, load_config
from voice_leading.cost import is_parallel_fifth_or_octave, voice_leading_cost
from voice_leading.notes import Chord, Note, split_parts
from voice_leading.octaves import balance_harmony_octave, normalize_octaves
from voice_leading.optimizer import (
    assign_first_chord, optimize_chord_voicing, optimize_voice_leading,
)
from voice_leading.pitch_names import (
    DisplayRange, apply_display_range, note_name_to_pitch, pitch_to_note_name,
)
from voice_leading.search import SearchError

__all__ = [
    'Chord', 'CostWeights', 'DisplayRange', 'Note', 'OptimizerConfig', 'SearchError',
    'apply_display_range', 'assign_first_chord', 'balance_harmony_octave',
    'determine_voice_count', 'flatten_chords', 'identify_chords',
    'is_parallel_fifth_or_octave', 'load_config', 'normalize_octaves',
    'note_name_to_pitch', 'optimize_chord_voicing', 'optimize_voice_leading',
    'pitch_to_note_name', 'split_parts', 'voice_leading_cost',
]
