"""Per-operation derivative rules and graph construction checks."""

import math

import pytest

from dynagrad import (
    Leaf, Const, Add, Mul, Div, Pow, Sub, Neg, Sin, Cos, Tan, Exp, Ln,
    Tape, ValueKind, use_tape,
)
from dynagrad.core.node import Op
from dynagrad.ops import lookup, registered_ops


def approx(x):
    return pytest.approx(x, abs=0.01)


def fwd_partial(y, x):
    x.active()
    try:
        return float(y.fwd().apply_fwd())
    finally:
        x.inactive()


def rev_partial(y, x):
    return float(y.rev()[x].apply_rev())


class TestRegistry:
    def test_every_op_is_registered(self):
        assert set(registered_ops()) == set(Op)

    def test_arity(self):
        assert lookup(Op.LEAF).arity == 0
        assert lookup(Op.LINK).arity == 1
        assert lookup(Op.SIN).arity == 1
        assert lookup(Op.POW).arity == 2

    def test_operation_name(self):
        assert lookup(Op.MUL).name == "mul"


@pytest.mark.parametrize("partial", [fwd_partial, rev_partial], ids=["fwd", "rev"])
class TestFirstDerivatives:
    def test_add(self, partial):
        a, b = Leaf(3.0), Leaf(4.0)
        assert partial(Add(a, b), a) == approx(1.0)
        assert partial(Add(a, b), b) == approx(1.0)

    def test_div(self, partial):
        a, b = Leaf(3.0), Leaf(4.0)
        y = Div(a, b)
        assert partial(y, a) == approx(0.25)
        assert partial(y, b) == approx(-0.1875)

    def test_pow(self, partial):
        a, b = Leaf(2.0), Leaf(3.0)
        y = Pow(a, b)
        assert partial(y, a) == approx(12.0)
        assert partial(y, b) == approx(8 * math.log(2))

    def test_sin(self, partial):
        x = Leaf(2.0)
        assert partial(Sin(x), x) == approx(math.cos(2))

    def test_cos(self, partial):
        x = Leaf(2.0)
        assert partial(Cos(x), x) == approx(-math.sin(2))

    def test_tan(self, partial):
        x = Leaf(0.5)
        assert partial(Tan(x), x) == approx(1 / math.cos(0.5) ** 2)

    def test_exp(self, partial):
        x = Leaf(1.5)
        assert partial(Exp(x), x) == approx(math.exp(1.5))

    def test_ln(self, partial):
        x = Leaf(2.0)
        assert partial(Ln(x), x) == approx(0.5)

    def test_sub_and_neg(self, partial):
        a, b = Leaf(3.0), Leaf(4.0)
        assert partial(Sub(a, b), b) == approx(-1.0)
        assert partial(Neg(a), a) == approx(-1.0)


class TestSubtraction:
    def test_integers_stay_integer(self):
        r = Sub(Leaf(5), Leaf(3)).apply_fwd()
        assert r.kind is ValueKind.I32
        assert int(r.data) == 2
        assert Neg(Leaf(4)).apply_fwd().kind is ValueKind.I32

    def test_floats_stay_float(self):
        r = Sub(Leaf(5.0), Leaf(3.5)).apply_fwd()
        assert r.kind is ValueKind.F32
        assert float(r) == 1.5


class TestPowEdgeCases:
    def test_unit_exponent_of_negative_base(self):
        # b * a^(b - 1) with b = 1 hits a^0, which is exactly 1
        a, b = Leaf(-2.0), Leaf(1.0)
        assert rev_partial(Pow(a, b), a) == approx(1.0)

    def test_zero_exponent_value(self):
        assert float(Pow(Leaf(-3.0), Leaf(0.0)).apply_fwd()) == 1.0


class TestOperators:
    def test_values(self):
        x = Leaf(2.0)
        assert float((x * 3 + 1).apply_fwd()) == approx(7.0)
        assert float((10 - x).apply_fwd()) == approx(8.0)
        assert float((-x).apply_fwd()) == approx(-2.0)
        assert float((x / 4).apply_fwd()) == approx(0.5)
        assert float((x ** 2).apply_fwd()) == approx(4.0)

    def test_derivatives(self):
        x = Leaf(3.0)
        assert rev_partial(2 ** x, x) == approx(8 * math.log(2))
        x.set_val(4.0)
        assert rev_partial(1 / x, x) == approx(-1 / 16)
        assert rev_partial(10 - x, x) == approx(-1.0)

    def test_numbers_become_constants(self):
        x = Leaf(2.0)
        y = x * 3.0
        assert y.inputs[1].op is Op.CONST

    def test_equality_is_identity_not_value(self):
        assert Leaf(1.0) != Leaf(1.0)
        x = Leaf(1.0)
        assert x == Sin(x).inputs[0]
        assert not (x != Sin(x).inputs[0])
        assert (x == 1.0) is False


class TestConstruction:
    def test_rejects_plain_numbers(self):
        with pytest.raises(TypeError):
            Add(Leaf(1.0), 3)

    def test_rejects_mixed_tapes(self):
        a = Leaf(1.0, tape=Tape())
        b = Leaf(1.0, tape=Tape())
        with pytest.raises(ValueError):
            Mul(a, b)

    def test_set_val_only_on_leaves(self):
        y = Mul(Leaf(1.0), Leaf(2.0))
        with pytest.raises(TypeError):
            y.set_val(3.0)
        with pytest.raises(TypeError):
            Const(1.0).set_val(2.0)

    def test_nodes_land_on_inputs_tape(self):
        other = Tape()
        a = Leaf(1.0, tape=other)
        y = Sin(a)
        assert y.tape is other
        assert len(other) == 2

    def test_use_tape_isolates(self, tape):
        before = len(tape)
        with use_tape() as inner:
            Mul(Leaf(1.0), Leaf(2.0))
            assert len(inner) == 3
        assert len(tape) == before


class TestTape:
    def test_indices_follow_construction_order(self, tape):
        a, b = Leaf(1.0), Leaf(2.0)
        y = Add(a, b)
        assert (a.index, b.index, y.index) == (0, 1, 2)
        assert tape.nodes[y.index].inputs == [0, 1]

    def test_inputs_must_precede_node(self, tape):
        Leaf(1.0)
        idx = tape.new(Op.SIN)
        with pytest.raises(ValueError):
            tape.set_inputs(idx, [idx])
        with pytest.raises(ValueError):
            tape.set_inputs(idx, [idx + 1])

    def test_reset(self, tape):
        Mul(Leaf(1.0), Leaf(2.0))
        tape.reset()
        assert len(tape) == 0
