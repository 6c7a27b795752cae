# dynagrad/ops/__init__.py

# Ensure every Operation is registered
from . import primitives
from . import arithmetic
from . import transcendental

# Convenience re-exports so users can do: from dynagrad.ops import Mul, Exp, ...
from .primitives import Leaf, Const, Zero, One, Link
from .arithmetic import Add, Mul, Div, Pow, Sub, Neg
from .transcendental import Sin, Cos, Tan, Exp, Ln
from .registry import Operation, lookup, registered_ops

__all__ = [
    "Leaf", "Const", "Zero", "One", "Link",
    "Add", "Mul", "Div", "Pow", "Sub", "Neg",
    "Sin", "Cos", "Tan", "Exp", "Ln",
    "Operation", "lookup", "registered_ops",
]
