# dynagrad/core/__init__.py

"""
Core public API of the engine.

Exports:
    ScalarValue, ValueKind : tagged scalar values and their kinds.
    Var                    : handle to a node of the expression graph.
    Tape, global_tape      : node arena and the default instance.
    use_tape               : context manager to temporarily switch the active tape.
    apply_fwd, fwd         : forward evaluation / forward tangent graph.
    rev, apply_rev         : reverse adjoint graphs / adjoint evaluation.
    zero_adjoints          : forget adjoints recorded on a tape.
    value, grad, grads     : convenience drivers on isolated tapes.
"""

from .value import ScalarValue, ValueKind
from .node import Node, Op
from .tape import Tape, global_tape, use_tape
from .var import Var
from .engine import AdjointMap, apply_fwd, apply_rev, fwd, rev, zero_adjoints
from .seeds import grad, grads, value

__all__ = [
    "ScalarValue", "ValueKind",
    "Node", "Op",
    "Tape", "global_tape", "use_tape",
    "Var",
    "AdjointMap", "apply_fwd", "apply_rev", "fwd", "rev", "zero_adjoints",
    "grad", "grads", "value",
]
