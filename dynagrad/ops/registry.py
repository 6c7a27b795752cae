# dynagrad/ops/registry.py
"""
Operation registry.

Every Op tag has exactly one Operation: a capability set of three rules.

    evaluate(args, cached) -> ScalarValue
        args   : [(input_value, input_active), ...] in input order
        cached : the node's previous value (only Leaf/Const/Zero/One read it)

    tangent(node, inputs, d) -> Var
        Build a new node for the forward derivative of `node`.
        d(inp) returns the tangent graph of an input (built lazily, once).

    adjoint(node, inputs, out) -> [Var, ...]
        Distribute the accumulated output adjoint `out` onto the inputs:
        one new adjoint expression per input, in input order.

The engine dispatches on `node.op` only; nothing inspects Python types.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..core.node import Op
from ..core.tape import Tape
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility
from ..core.value import ScalarValue
from ..core.var import Var

EvaluateRule = Callable[[List[Tuple[ScalarValue, bool]], Optional[ScalarValue]], ScalarValue]
TangentRule = Callable[[Var, List[Var], Callable[[Var], Var]], Var]
AdjointRule = Callable[[Var, List[Var], Var], List[Var]]


@dataclass(frozen=True)
class Operation:
    name: str
    arity: int
    evaluate: EvaluateRule
    tangent: TangentRule
    adjoint: AdjointRule


_REGISTRY: Dict[Op, Operation] = {}


def register(op: Op, *, arity: int, evaluate: EvaluateRule,
             tangent: TangentRule, adjoint: AdjointRule) -> Operation:
    if op in _REGISTRY:
        raise ValueError(f"Operation already registered for {op.name}")
    operation = Operation(name=op.value, arity=arity, evaluate=evaluate,
                          tangent=tangent, adjoint=adjoint)
    _REGISTRY[op] = operation
    return operation


def lookup(op: Op) -> Operation:
    try:
        return _REGISTRY[op]
    except KeyError:
        raise NotImplementedError(f"No operation registered for {op.name}") from None


def registered_ops() -> List[Op]:
    return list(_REGISTRY)


def make_node(op: Op, *inputs: Var) -> Var:
    """
    Allocate an operator node on the inputs' tape, then attach its inputs.
    All inputs must be Vars of one tape.
    """
    arity = lookup(op).arity
    if len(inputs) != arity:
        raise ValueError(f"{op.name} takes {arity} input(s), got {len(inputs)}")
    for x in inputs:
        if not isinstance(x, Var):
            raise TypeError(f"{op.name} inputs must be Var, but got {type(x)}")
    tape = inputs[0].tape
    if any(x.tape is not tape for x in inputs):
        raise ValueError(f"{op.name} mixes nodes from different tapes")
    index = tape.new_with_inputs(op, [x.index for x in inputs])
    return Var(tape, index)


def make_value_node(op: Op, value: ScalarValue, tape: Optional[Tape] = None) -> Var:
    tape = tape if tape is not None else tape_mod.global_tape
    return Var(tape, tape.new_with_value(op, value))
