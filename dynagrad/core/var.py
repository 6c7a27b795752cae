# dynagrad/core/var.py
from __future__ import annotations
from typing import Any, List, Optional

from .node import Node, Op
from .tape import Tape
from .value import ScalarValue


class Var:
    """
    Handle to one node of a Tape arena.

    Copying a handle shares the node: mutating it through one handle
    (set_val, active, ...) is visible through every other handle to it.
    Two handles are equal iff they address the same node of the same tape,
    so leaves with equal values stay distinct dictionary keys.

    Attributes
    ----------
    tape  : Tape
        Arena the node lives in.
    index : int
        Position of the node in `tape.nodes`.
    """
    __slots__ = ("tape", "index")

    def __init__(self, tape: Tape, index: int):
        self.tape = tape
        self.index = index

    # ------------------------------------------------------------------ state
    @property
    def node(self) -> Node:
        return self.tape.nodes[self.index]

    @property
    def op(self) -> Op:
        return self.node.op

    @property
    def inputs(self) -> List["Var"]:
        return [Var(self.tape, i) for i in self.node.inputs]

    @property
    def value(self) -> Optional[ScalarValue]:
        """Value cached by the last evaluation (or the stored value of a leaf)."""
        return self.node.value

    @property
    def is_leaf(self) -> bool:
        return self.node.op is Op.LEAF

    @property
    def is_active(self) -> bool:
        return self.node.active

    def set_val(self, value: Any):
        """Overwrite the stored value of a leaf; built graphs see it on their next evaluation."""
        if self.node.op is not Op.LEAF:
            raise TypeError(f"set_val is only defined for leaves, not {self.node.op.name}")
        self.tape.set_value(self.index, ScalarValue.of(value))

    def active(self) -> "Var":
        """Mark this leaf as a forward-mode differentiation target."""
        self.node.active = True
        return self

    def inactive(self) -> "Var":
        self.node.active = False
        return self

    def adjoint(self) -> Optional["Var"]:
        """Adjoint expression left by the last rev() that reached this node, if any."""
        idx = self.node.adjoint
        return None if idx is None else Var(self.tape, idx)

    def reset_adjoint(self):
        self.node.adjoint = None

    # ------------------------------------------------------------ evaluation
    def apply_fwd(self) -> ScalarValue:
        from .engine import apply_fwd
        return apply_fwd(self)

    def apply_rev(self) -> ScalarValue:
        from .engine import apply_rev
        return apply_rev(self)

    def fwd(self) -> "Var":
        from .engine import fwd
        return fwd(self)

    def rev(self, schedule: Optional[str] = None):
        from .engine import rev
        return rev(self, schedule=schedule)

    # ---------------------------------------------------------------- identity
    def __eq__(self, other):
        if not isinstance(other, Var):
            return NotImplemented
        return self.tape is other.tape and self.index == other.index

    def __hash__(self):
        return hash((id(self.tape), self.index))

    def __repr__(self):
        node = self.node
        flag = ", active" if node.active else ""
        return f"Var(#{self.index} {node.op.name}, value={node.value!r}{flag})"

    # Operator overloading for arithmetic operations
    def __add__(self, other):
        from ..ops.arithmetic import Add
        return Add(self, _as_var(other, self))

    def __radd__(self, other):
        from ..ops.arithmetic import Add
        return Add(_as_var(other, self), self)

    def __sub__(self, other):
        from ..ops.arithmetic import Sub
        return Sub(self, _as_var(other, self))

    def __rsub__(self, other):
        from ..ops.arithmetic import Sub
        return Sub(_as_var(other, self), self)

    def __mul__(self, other):
        from ..ops.arithmetic import Mul
        return Mul(self, _as_var(other, self))

    def __rmul__(self, other):
        from ..ops.arithmetic import Mul
        return Mul(_as_var(other, self), self)

    def __truediv__(self, other):
        from ..ops.arithmetic import Div
        return Div(self, _as_var(other, self))

    def __rtruediv__(self, other):
        from ..ops.arithmetic import Div
        return Div(_as_var(other, self), self)

    def __pow__(self, other):
        from ..ops.arithmetic import Pow
        return Pow(self, _as_var(other, self))

    def __rpow__(self, other):
        from ..ops.arithmetic import Pow
        return Pow(_as_var(other, self), self)

    def __neg__(self):
        from ..ops.arithmetic import Neg
        return Neg(self)


def _as_var(x, like: Var) -> Var:
    """Ensure x is a Var; otherwise wrap it as a constant on the tape of `like`."""
    if isinstance(x, Var):
        return x
    from ..ops.primitives import Const
    return Const(ScalarValue.of(x), tape=like.tape)
