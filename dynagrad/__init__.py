# dynagrad/__init__.py
# Dynamic automatic differentiation over scalar expression graphs

from .core.value import ScalarValue, ValueKind
from .core.tape import Tape, global_tape, use_tape
from .core.var import Var
from .core.engine import (
    AdjointMap,
    apply_fwd,
    apply_rev,
    fwd,
    rev,
    zero_adjoints,
)
from .core.errors import (
    DynagradError,
    MissingValueError,
    UnsupportedTypeError,
    MissingAdjointError,
    DroppedAdjointWarning,
)
from .ops import (
    Leaf, Const, Zero, One, Link,
    Add, Mul, Div, Pow, Sub, Neg,
    Sin, Cos, Tan, Exp, Ln,
)
from .config import EngineConfig, use_config

# Convenience drivers and graph inspection
from .core.seeds import value, grad, grads, derivative, directional_derivative, hessian
from .core.graph_utils import graph_summary, print_graph_summary, print_computation_graph

__all__ = [
    # Values
    'ScalarValue',
    'ValueKind',
    # Graph
    'Tape',
    'global_tape',
    'use_tape',
    'Var',
    'Leaf', 'Const', 'Zero', 'One', 'Link',
    'Add', 'Mul', 'Div', 'Pow', 'Sub', 'Neg',
    'Sin', 'Cos', 'Tan', 'Exp', 'Ln',
    # Engine
    'AdjointMap',
    'apply_fwd',
    'apply_rev',
    'fwd',
    'rev',
    'zero_adjoints',
    # Errors
    'DynagradError',
    'MissingValueError',
    'UnsupportedTypeError',
    'MissingAdjointError',
    'DroppedAdjointWarning',
    # Config
    'EngineConfig',
    'use_config',
    # Drivers
    'value',
    'grad',
    'grads',
    'derivative',
    'directional_derivative',
    'hessian',
    'graph_summary',
    'print_graph_summary',
    'print_computation_graph',
]
