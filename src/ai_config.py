"""
configuration for the 2048 expectimax player
centralizes the tunable values so the search code never hardcodes them
"""
import os
from dataclasses import dataclass

from heuristics import WEIGHT_PRESETS

# ---------------- CONFIGURATION PARAMETERS ----------------
# Search budget
TIME_LIMIT_MS = 5000           # wall-clock budget per move decision
SAMPLE_CAP = 3                 # empty cells expanded per chance node
DEPTH_SCHEDULE = ((6, 5), (4, 7))  # (min empty cells, max depth), first match wins
DEEPEST_DEPTH = 9              # depth when no schedule entry matches

# Move selection
CORNER_PRESERVATION = True     # never pull a corner-held max tile out if avoidable
WEIGHT_PRESET = 'classic'      # see heuristics.WEIGHT_PRESETS

# Execution
PARALLEL = False               # score root moves on a thread pool
MAX_WORKERS = None             # None -> os.cpu_count()
CACHE_TIMEOUTS = False         # cache evaluations made after the deadline
SEED = None                    # seeds chance sampling and the hash table

_OVERRIDABLE = {
    'time_limit_ms': ('TIME_LIMIT_MS', int),
    'sample_cap': ('SAMPLE_CAP', int),
    'deepest_depth': ('DEEPEST_DEPTH', int),
    'corner_preservation': ('CORNER_PRESERVATION', bool),
    'weight_preset': ('WEIGHT_PRESET', str),
    'parallel': ('PARALLEL', bool),
    'max_workers': ('MAX_WORKERS', int),
    'cache_timeouts': ('CACHE_TIMEOUTS', bool),
    'seed': ('SEED', int),
}

ENV_PREFIX = 'AI2048_'


@dataclass(frozen=True)
class EngineConfig:
    time_limit_ms: int = TIME_LIMIT_MS
    sample_cap: int = SAMPLE_CAP
    depth_schedule: tuple = DEPTH_SCHEDULE
    deepest_depth: int = DEEPEST_DEPTH
    corner_preservation: bool = CORNER_PRESERVATION
    weight_preset: str = WEIGHT_PRESET
    parallel: bool = PARALLEL
    max_workers: int = MAX_WORKERS
    cache_timeouts: bool = CACHE_TIMEOUTS
    seed: int = SEED


def get_config():
    """snapshot of the current module-level settings"""
    return EngineConfig(
        time_limit_ms=TIME_LIMIT_MS,
        sample_cap=SAMPLE_CAP,
        depth_schedule=DEPTH_SCHEDULE,
        deepest_depth=DEEPEST_DEPTH,
        corner_preservation=CORNER_PRESERVATION,
        weight_preset=WEIGHT_PRESET,
        parallel=PARALLEL,
        max_workers=MAX_WORKERS,
        cache_timeouts=CACHE_TIMEOUTS,
        seed=SEED,
    )


def _to_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def apply_overrides(overrides):
    """
    Apply settings to the module configuration.
    Takes a dictionary of setting names and values.
    Returns a list of applied settings.
    """
    if not overrides:
        return []

    pending = {}
    for name, value in overrides.items():
        if name not in _OVERRIDABLE:
            raise ValueError(f"Unknown configuration setting: {name}")
        kind = _OVERRIDABLE[name][1]
        if value is None:
            pending[name] = None
        elif kind is bool:
            pending[name] = _to_bool(value)
        else:
            pending[name] = kind(value)

    # nothing is applied unless every value is valid
    if 'time_limit_ms' in pending and (pending['time_limit_ms'] or 0) <= 0:
        raise ValueError("time_limit_ms must be positive")
    if 'sample_cap' in pending and (pending['sample_cap'] or 0) < 1:
        raise ValueError("sample_cap must be at least 1")
    if 'deepest_depth' in pending and (pending['deepest_depth'] or 0) < 1:
        raise ValueError("deepest_depth must be at least 1")
    if pending.get('max_workers') is not None and pending['max_workers'] < 1:
        raise ValueError("max_workers must be at least 1")
    if 'weight_preset' in pending and pending['weight_preset'] not in WEIGHT_PRESETS:
        raise ValueError(f"Unknown weight preset: {pending['weight_preset']}")

    applied = []
    for name, value in pending.items():
        globals()[_OVERRIDABLE[name][0]] = value
        applied.append(name)
    return applied


def load_env_overrides(environ=None):
    """apply AI2048_* environment variables, e.g. AI2048_TIME_LIMIT_MS=2000"""
    environ = os.environ if environ is None else environ
    overrides = {}
    for key, value in environ.items():
        if key.startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX):].lower()
            if name in _OVERRIDABLE:
                overrides[name] = value
    return apply_overrides(overrides)
