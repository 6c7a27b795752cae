# dynagrad/ops/primitives.py
"""
Value-holding nodes (Leaf, Const, Zero, One) and the forward seed marker Link.

Only Leaf is user-facing. Const/Zero/One are built by operation rules and
the engine; Link is produced by the tangent rule of Leaf.
"""
from typing import Any, Optional

from ..core.errors import MissingValueError
from ..core.node import Op
from ..core.tape import Tape
from ..core.value import ScalarValue
from ..core.var import Var
from .registry import make_node, make_value_node, register

_F32_ZERO = ScalarValue.f32(0.0)
_F32_ONE = ScalarValue.f32(1.0)


def Leaf(value: Any, tape: Optional[Tape] = None) -> Var:
    """A differentiation variable (or plain input) holding a mutable scalar."""
    return make_value_node(Op.LEAF, ScalarValue.of(value), tape)


def Const(value: Any, tape: Optional[Tape] = None) -> Var:
    return make_value_node(Op.CONST, ScalarValue.of(value), tape)


def Zero(tape: Optional[Tape] = None) -> Var:
    return make_value_node(Op.ZERO, _F32_ZERO, tape)


def One(tape: Optional[Tape] = None) -> Var:
    return make_value_node(Op.ONE, _F32_ONE, tape)


def Link(target: Var) -> Var:
    """Evaluates to 1 while `target` is active, else 0."""
    return make_node(Op.LINK, target)


def _eval_stored(args, cached):
    if cached is None:
        raise MissingValueError("value missing")
    return cached


def _eval_link(args, cached):
    _, target_active = args[0]
    return _F32_ONE if target_active else _F32_ZERO


def _tangent_zero(node, inputs, d):
    return Zero(tape=node.tape)


def _adjoint_none(node, inputs, out):
    return []


register(Op.LEAF, arity=0, evaluate=_eval_stored,
         tangent=lambda node, inputs, d: Link(node),
         adjoint=_adjoint_none)

for _op in (Op.CONST, Op.ZERO, Op.ONE):
    register(_op, arity=0, evaluate=_eval_stored,
             tangent=_tangent_zero, adjoint=_adjoint_none)

# The indicator is piecewise constant: no derivative flows through a Link.
register(Op.LINK, arity=1, evaluate=_eval_link,
         tangent=_tangent_zero,
         adjoint=lambda node, inputs, out: [Zero(tape=node.tape)])
