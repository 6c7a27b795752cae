# dynagrad/config.py
"""
Engine configuration.

A single module-level `global_config` holds the knobs read by the value model
and the reverse engine. Read it through module access
(`config_mod.global_config`) so that `use_config()` overrides are seen.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, fields, replace

REVERSE_SCHEDULES = ("topological", "bfs")


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for graph evaluation and differentiation."""
    # Pow(base, e) is exactly 1.0 when |e| is below this threshold
    pow_zero_exponent_eps: float = 1e-15

    # Reverse pass scheduling:
    #   'topological' : a node is processed once every user has contributed
    #   'bfs'         : plain breadth-first, a node is finalized on first pop
    reverse_schedule: str = "topological"

    # Emit DroppedAdjointWarning when the 'bfs' schedule loses a contribution
    warn_on_dropped_adjoint: bool = True

    def __post_init__(self):
        if self.reverse_schedule not in REVERSE_SCHEDULES:
            raise ValueError(
                f"Unknown reverse schedule: {self.reverse_schedule!r}. "
                f"Available: {list(REVERSE_SCHEDULES)}"
            )
        if self.pow_zero_exponent_eps < 0.0:
            raise ValueError(
                f"pow_zero_exponent_eps must be non-negative, got {self.pow_zero_exponent_eps}"
            )


global_config = EngineConfig()


@contextmanager
def use_config(**overrides):
    """
    Context manager to temporarily override configuration fields:
        with use_config(reverse_schedule="bfs"):
            adj = y.rev()
    """
    from . import config as _config_mod  # module access, like use_tape()
    known = {f.name for f in fields(EngineConfig)}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown config field(s): {sorted(unknown)}")
    prev = _config_mod.global_config
    try:
        _config_mod.global_config = replace(prev, **overrides)
        yield _config_mod.global_config
    finally:
        _config_mod.global_config = prev
