# dynagrad/ops/transcendental.py
from ..core import value as V
from ..core.node import Op
from ..core.var import Var
from .arithmetic import Div, Mul, Neg
from .primitives import One
from .registry import make_node, register


def Sin(a: Var) -> Var:
    return make_node(Op.SIN, a)


def Cos(a: Var) -> Var:
    return make_node(Op.COS, a)


def Tan(a: Var) -> Var:
    return make_node(Op.TAN, a)


def Exp(a: Var) -> Var:
    return make_node(Op.EXP, a)


def Ln(a: Var) -> Var:
    return make_node(Op.LN, a)


def _unary_eval(fn):
    def evaluate(args, cached):
        (x, _), = args
        return fn(x)
    return evaluate


def _sec2(a: Var) -> Var:
    """1 / (cos(a) * cos(a)), the derivative of tan."""
    return Div(One(tape=a.tape), Mul(Cos(a), Cos(a)))


def _reciprocal(a: Var) -> Var:
    return Div(One(tape=a.tape), a)


# Local derivative of each op w.r.t. its single input, as a graph
_LOCAL = {
    Op.SIN: lambda node, a: Cos(a),
    Op.COS: lambda node, a: Neg(Sin(a)),
    Op.TAN: lambda node, a: _sec2(a),
    Op.EXP: lambda node, a: node,           # exp(a) is the node itself
    Op.LN: lambda node, a: _reciprocal(a),
}


def _chain_tangent(op):
    local = _LOCAL[op]

    def tangent(node, inputs, d):
        # f(a)' = f'(a) * a'
        a, = inputs
        return Mul(local(node, a), d(a))
    return tangent


def _chain_adjoint(op):
    local = _LOCAL[op]

    def adjoint(node, inputs, out):
        a, = inputs
        return [Mul(out, local(node, a))]
    return adjoint


for _op, _fn in ((Op.SIN, V.sin), (Op.COS, V.cos), (Op.TAN, V.tan),
                 (Op.EXP, V.exp), (Op.LN, V.ln)):
    register(_op, arity=1, evaluate=_unary_eval(_fn),
             tangent=_chain_tangent(_op), adjoint=_chain_adjoint(_op))
