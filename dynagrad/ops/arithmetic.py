# dynagrad/ops/arithmetic.py
from ..core import value as V
from ..core.node import Op
from ..core.var import Var
from .primitives import Const
from .registry import make_node, register


def Add(a: Var, b: Var) -> Var:
    return make_node(Op.ADD, a, b)


def Mul(a: Var, b: Var) -> Var:
    return make_node(Op.MUL, a, b)


def Div(a: Var, b: Var) -> Var:
    return make_node(Op.DIV, a, b)


def Pow(base: Var, exponent: Var) -> Var:
    return make_node(Op.POW, base, exponent)


# Sugar: no dedicated node types, expressed through Add/Mul and an I32 -1,
# which keeps I32 operands I32 and F32 operands F32
def Neg(a: Var) -> Var:
    return Mul(Const(-1, tape=a.tape), a)


def Sub(a: Var, b: Var) -> Var:
    return Add(a, Neg(b))


# ----- evaluate -----
def _binary_eval(fn):
    def evaluate(args, cached):
        (x, _), (y, _) = args
        return fn(x, y)
    return evaluate


# ----- tangent: '(.) is d(.) -----
def _add_tangent(node, inputs, d):
    # (a + b)' = a' + b'
    a, b = inputs
    return Add(d(a), d(b))


def _mul_tangent(node, inputs, d):
    # (a * b)' = a' * b + a * b'
    a, b = inputs
    return Add(Mul(d(a), b), Mul(a, d(b)))


def _div_tangent(node, inputs, d):
    # (a / b)' = (a' * b - a * b') / (b * b)
    a, b = inputs
    return Div(Sub(Mul(d(a), b), Mul(a, d(b))), Mul(b, b))


def _pow_tangent(node, inputs, d):
    # (a ^ b)' = a^b * (b' * ln(a) + (b / a) * a'),  node is a^b
    from .transcendental import Ln
    a, b = inputs
    return Mul(node, Add(Mul(d(b), Ln(a)), Mul(Div(b, a), d(a))))


# ----- adjoint: out is the accumulated adjoint of node -----
def _add_adjoint(node, inputs, out):
    return [out, out]


def _mul_adjoint(node, inputs, out):
    a, b = inputs
    return [Mul(b, out), Mul(a, out)]


def _div_adjoint(node, inputs, out):
    # d(a/b)/da = 1/b,  d(a/b)/db = -a/b^2
    a, b = inputs
    return [Div(out, b), Neg(Mul(out, Div(a, Mul(b, b))))]


def _pow_adjoint(node, inputs, out):
    # d(a^b)/da = b * a^(b-1),  d(a^b)/db = a^b * ln(a)
    from .transcendental import Ln
    a, b = inputs
    da = Mul(b, Pow(a, Add(b, Const(-1.0, tape=node.tape))))
    db = Mul(node, Ln(a))
    return [Mul(out, da), Mul(out, db)]


register(Op.ADD, arity=2, evaluate=_binary_eval(V.add),
         tangent=_add_tangent, adjoint=_add_adjoint)
register(Op.MUL, arity=2, evaluate=_binary_eval(V.mul),
         tangent=_mul_tangent, adjoint=_mul_adjoint)
register(Op.DIV, arity=2, evaluate=_binary_eval(V.div),
         tangent=_div_tangent, adjoint=_div_adjoint)
register(Op.POW, arity=2, evaluate=_binary_eval(V.pow),
         tangent=_pow_tangent, adjoint=_pow_adjoint)
