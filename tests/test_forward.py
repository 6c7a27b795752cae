"""Tests for forward evaluation (apply_fwd) and forward tangent graphs (fwd)."""

import math

import pytest

from dynagrad import (
    Leaf, Add, Mul, Sin, Var, ValueKind,
    MissingValueError, UnsupportedTypeError,
)
from dynagrad.core.node import Op

import numpy as np


def approx(x):
    return pytest.approx(x, abs=0.01)


class TestApplyFwd:
    def test_leaf_value(self):
        assert float(Leaf(4.0).apply_fwd()) == 4.0

    def test_caches_value_on_every_node(self):
        x, c = Leaf(4.0), Leaf(3.0)
        m = Mul(x, x)
        y = Mul(m, c)
        assert m.value is None
        y.apply_fwd()
        assert float(m.value) == 16.0
        assert float(y.value) == 48.0

    def test_integer_graph_stays_integer(self):
        r = Mul(Leaf(3), Leaf(4)).apply_fwd()
        assert r.kind is ValueKind.I32
        assert int(r.data) == 12

    def test_unsupported_kinds_fail(self):
        y = Add(Leaf(np.float64(1.0)), Leaf(1.0))
        with pytest.raises(UnsupportedTypeError):
            y.apply_fwd()

    def test_missing_value(self, tape):
        empty = Var(tape, tape.new(Op.LEAF))
        with pytest.raises(MissingValueError):
            Mul(empty, Leaf(1.0)).apply_fwd()

    def test_recomputes_after_set_val(self):
        x = Leaf(2.0)
        y = Mul(x, x)
        assert float(y.apply_fwd()) == 4.0
        x.set_val(3.0)
        assert float(y.apply_fwd()) == 9.0

    def test_deep_graph(self):
        x = Leaf(1.0)
        y = x
        for _ in range(5000):
            y = Add(y, Leaf(1.0))
        assert float(y.apply_fwd()) == 5001.0


class TestFwd:
    def test_three_x(self):
        # (3x)' = 3 at x = 4
        x = Leaf(4.0).active()
        c = Leaf(3.0)
        assert float(Mul(x, c).fwd().apply_fwd()) == approx(3.0)

    def test_fwd_builds_without_evaluating(self):
        x = Leaf(4.0).active()
        y = Mul(x, Leaf(3.0))
        d = y.fwd()
        assert d.value is None
        assert y.value is None

    def test_looping_product(self):
        # x * 2^10 at x = 2: value 2048, first derivative 1024, second 0
        x = Leaf(2.0).active()
        y = x
        for _ in range(10):
            y = Mul(y, Leaf(2.0))
        assert float(y.apply_fwd()) == approx(2048.0)
        assert float(y.fwd().apply_fwd()) == approx(1024.0)
        assert float(y.fwd().fwd().apply_fwd()) == approx(0.0)

    def test_second_derivative_and_rebuild_avoidance(self):
        # (3x^2)'' = 6, then (7x^2)'' = 14 on the same graph
        x = Leaf(4.0).active()
        c = Leaf(3.0)
        gg = Mul(Mul(x, x), c).fwd().fwd()
        assert float(gg.apply_fwd()) == approx(6.0)
        c.set_val(7.0)
        assert float(gg.apply_fwd()) == approx(14.0)

    def test_first_derivative_follows_leaf_mutation(self):
        x = Leaf(4.0).active()
        g = Mul(Mul(x, x), Leaf(3.0)).fwd()
        assert float(g.apply_fwd()) == approx(24.0)
        x.set_val(1.0)
        assert float(g.apply_fwd()) == approx(6.0)

    def test_sin_chain(self):
        x = Leaf(2.0).active()
        y = Mul(Leaf(3.0), Sin(x))
        assert float(y.apply_fwd()) == approx(3 * math.sin(2))
        assert float(y.fwd().apply_fwd()) == approx(3 * math.cos(2))
        assert float(y.fwd().fwd().apply_fwd()) == approx(-3 * math.sin(2))

    def test_no_active_leaf_gives_zero(self):
        x = Leaf(4.0)
        assert float(Mul(x, x).fwd().apply_fwd()) == 0.0

    def test_deep_chain(self):
        x = Leaf(1.0).active()
        y = x
        for _ in range(3000):
            y = Mul(y, Leaf(1.0))
        d = y.fwd()
        assert float(d.apply_fwd()) == approx(1.0)
        assert float(d.fwd().apply_fwd()) == approx(0.0)

    def test_link_target_gets_no_tangent(self, tape):
        x = Leaf(2.0).active()
        d = x.fwd()
        n = len(tape)
        dd = d.fwd()
        # only the Zero tangent of the Link itself is built
        assert len(tape) == n + 1
        assert dd.op is Op.ZERO


class TestSeedToggling:
    def setup_method(self):
        self.a = Leaf(2.0)
        self.b = Leaf(5.0)
        # built once, re-seeded below
        self.d = Mul(self.a, self.b).fwd()

    def test_select_partial_without_rebuilding(self):
        self.a.active()
        assert float(self.d.apply_fwd()) == approx(5.0)
        self.a.inactive()
        self.b.active()
        assert float(self.d.apply_fwd()) == approx(2.0)

    def test_several_active_leaves_sum(self):
        self.a.active()
        self.b.active()
        assert float(self.d.apply_fwd()) == approx(7.0)

    def test_active_is_fluent(self):
        assert self.a.active() is self.a
        assert self.a.is_active
        assert self.a.inactive() is self.a
        assert not self.a.is_active

    def test_leaf_tangent_is_link(self):
        d = self.a.fwd()
        assert d.op is Op.LINK
        assert d.inputs == [self.a]
        self.a.active()
        assert float(d.apply_fwd()) == 1.0
        self.a.inactive()
        assert float(d.apply_fwd()) == 0.0
