"""
Optimizer configuration.

Defaults reproduce the classical cost table. A JSON file with the same shape
can override any field:

    {
      "weights": {"crossing": 1000, "spacing": 100, "parallel": 500, "movement": 2},
      "exhaustive_limit": 8,
      "verbose": true
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields


@dataclass(frozen=True)
class CostWeights:
    crossing: int = 1000    # per crossed voice pair
    spacing: int = 100      # per adjacent pair wider than max_spacing
    parallel: int = 500     # per parallel fifth/octave
    movement: int = 2       # per semitone moved, per voice


@dataclass(frozen=True)
class OptimizerConfig:
    weights: CostWeights = field(default_factory=CostWeights)
    octave: int = 12
    max_spacing: int = 12
    # Above this many unfixed notes per chord the CP-SAT solver replaces
    # brute-force permutation search.
    exhaustive_limit: int = 8
    solver_time_limit: float = 10.0
    verbose: bool = False


DEFAULT_CONFIG = OptimizerConfig()


def _check_keys(data: dict, cls, where: str) -> None:
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {where} keys: {', '.join(sorted(unknown))}")


def config_from_dict(data: dict) -> OptimizerConfig:
    """Build an OptimizerConfig from a plain dict, rejecting unknown keys."""
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a JSON object, got {type(data).__name__}")
    _check_keys(data, OptimizerConfig, 'config')
    values = dict(data)
    weights = values.pop('weights', None)
    if weights is not None:
        if not isinstance(weights, dict):
            raise ValueError("'weights' must be an object")
        _check_keys(weights, CostWeights, 'weights')
        values['weights'] = CostWeights(**weights)
    cfg = OptimizerConfig(**values)
    if cfg.octave <= 0:
        raise ValueError(f"octave must be positive, got {cfg.octave}")
    if cfg.exhaustive_limit < 0:
        raise ValueError(f"exhaustive_limit must be >= 0, got {cfg.exhaustive_limit}")
    return cfg


def load_config(path: str) -> OptimizerConfig:
    with open(path, 'r') as f:
        return config_from_dict(json.load(f))
