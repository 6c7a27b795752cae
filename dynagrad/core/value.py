# dynagrad/core/value.py
"""
Scalar value model.

ScalarValue is a closed tagged union over four numpy scalar kinds. Values are
immutable; every arithmetic helper returns a new ScalarValue following the
promotion rules below (no widening beyond what is listed).

    add / mul : (F32,F32)->F32  (I32,I32)->I32  (F32,I32)->F32  (I32,F32)->F32
                anything else raises UnsupportedTypeError
    div, pow, exp, ln, sin, cos, tan : operands coerced to F32, result F32
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Tuple

import numpy as np

from .. import config as config_mod  # module access for use_config() compatibility
from .errors import UnsupportedTypeError


class ValueKind(Enum):
    F32 = "F32"
    F64 = "F64"
    I32 = "I32"
    I64 = "I64"


_DTYPES = {
    ValueKind.F32: np.float32,
    ValueKind.F64: np.float64,
    ValueKind.I32: np.int32,
    ValueKind.I64: np.int64,
}

_KIND_OF_DTYPE = {np.dtype(t): k for k, t in _DTYPES.items()}


@dataclass(frozen=True)
class ScalarValue:
    """
    Tagged scalar.

    Attributes
    ----------
    kind : ValueKind
        Which variant this is.
    data : numpy scalar
        The payload, always of the dtype matching `kind`.
    """
    kind: ValueKind
    data: Any

    def __post_init__(self):
        if not isinstance(self.kind, ValueKind):
            raise TypeError(f"ScalarValue kind must be a ValueKind, got {type(self.kind)}")
        if self.data is None:
            raise TypeError("ScalarValue cannot be constructed from None")
        object.__setattr__(self, "data", _DTYPES[self.kind](self.data))

    @classmethod
    def f32(cls, x) -> "ScalarValue":
        return cls(ValueKind.F32, x)

    @classmethod
    def f64(cls, x) -> "ScalarValue":
        return cls(ValueKind.F64, x)

    @classmethod
    def i32(cls, x) -> "ScalarValue":
        return cls(ValueKind.I32, x)

    @classmethod
    def i64(cls, x) -> "ScalarValue":
        return cls(ValueKind.I64, x)

    @classmethod
    def of(cls, x) -> "ScalarValue":
        """
        Wrap a plain number.

        ScalarValue passes through; numpy scalars keep their dtype kind;
        Python float -> F32, Python int -> I32. Anything else (None, bool,
        strings, arrays) raises TypeError.
        """
        if isinstance(x, ScalarValue):
            return x
        if isinstance(x, (bool, np.bool_)):
            raise TypeError("ScalarValue does not accept booleans")
        if isinstance(x, np.generic):
            kind = _KIND_OF_DTYPE.get(x.dtype)
            if kind is None:
                raise TypeError(f"Unsupported numpy scalar dtype: {x.dtype}")
            return cls(kind, x)
        if isinstance(x, float):
            return cls(ValueKind.F32, x)
        if isinstance(x, int):
            return cls(ValueKind.I32, x)
        raise TypeError(
            f"ScalarValue only accepts int, float, numpy scalars or ScalarValue, "
            f"but got {type(x)}"
        )

    @property
    def is_float(self) -> bool:
        return self.kind in (ValueKind.F32, ValueKind.F64)

    def to_f32(self) -> np.float32:
        return np.float32(self.data)

    def __float__(self):
        return float(np.float32(self.data))

    def __repr__(self):
        payload = float(self.data) if self.is_float else int(self.data)
        return f"{self.kind.name}({payload!r})"

    __str__ = __repr__


# ---------------------------------------------------------------------------
# Promotion helpers
# ---------------------------------------------------------------------------
def _promote(a: ScalarValue, b: ScalarValue, op_name: str) -> Tuple[ValueKind, Any, Any]:
    pair = (a.kind, b.kind)
    if pair == (ValueKind.I32, ValueKind.I32):
        return ValueKind.I32, a.data, b.data
    if pair in ((ValueKind.F32, ValueKind.F32),
                (ValueKind.F32, ValueKind.I32),
                (ValueKind.I32, ValueKind.F32)):
        return ValueKind.F32, np.float32(a.data), np.float32(b.data)
    raise UnsupportedTypeError(
        f"{op_name}: unsupported type combination ({a.kind.name}, {b.kind.name})"
    )


def as_f32(v: ScalarValue) -> ScalarValue:
    """Coerce any kind to F32."""
    return v if v.kind is ValueKind.F32 else ScalarValue.f32(v.data)


def add(a: ScalarValue, b: ScalarValue) -> ScalarValue:
    kind, x, y = _promote(a, b, "add")
    return ScalarValue(kind, x + y)


def mul(a: ScalarValue, b: ScalarValue) -> ScalarValue:
    kind, x, y = _promote(a, b, "mul")
    return ScalarValue(kind, x * y)


def div(a: ScalarValue, b: ScalarValue) -> ScalarValue:
    return ScalarValue.f32(np.divide(as_f32(a).data, as_f32(b).data))


def pow(base: ScalarValue, exponent: ScalarValue) -> ScalarValue:
    """
    base ** exponent in F32.

    A near-zero exponent (|e| < pow_zero_exponent_eps) yields exactly 1.0,
    whatever the base. This keeps the reverse rule b * a^(b-1) finite at b == 1.
    """
    e = as_f32(exponent).data
    if abs(float(e)) < config_mod.global_config.pow_zero_exponent_eps:
        return ScalarValue.f32(1.0)
    return ScalarValue.f32(np.power(as_f32(base).data, e))


def _unary_f32(fn: Callable) -> Callable[[ScalarValue], ScalarValue]:
    def apply(v: ScalarValue) -> ScalarValue:
        return ScalarValue.f32(fn(as_f32(v).data))
    apply.__name__ = fn.__name__
    return apply


exp = _unary_f32(np.exp)
ln = _unary_f32(np.log)
sin = _unary_f32(np.sin)
cos = _unary_f32(np.cos)
tan = _unary_f32(np.tan)
