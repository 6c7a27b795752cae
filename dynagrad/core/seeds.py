# dynagrad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1, or an active leaf) and let derivatives grow
# through a graph built on a fresh, isolated tape.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np

from ..ops.primitives import Leaf
from .engine import apply_fwd, fwd, rev
from .tape import use_tape
from .value import ScalarValue
from .var import Var


def value(x: Any) -> Any:
    """Return the numeric value of a Var (evaluated) or ScalarValue; pass through plain numbers."""
    if isinstance(x, Var):
        return float(apply_fwd(x))
    if isinstance(x, ScalarValue):
        return float(x)
    return x


def _ensure_var(v: Any) -> Var:
    """Wrap a plain value as a Leaf if needed; otherwise return the Var itself."""
    return v if isinstance(v, Var) else Leaf(v)


def _adjoint_of(y: Any, x: Var) -> Optional[Var]:
    """Adjoint graph of y w.r.t. x, None when y does not depend on x."""
    if not isinstance(y, Var):
        return None
    return rev(y).get(x)


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Var], Any], x0: Any) -> float:
    """
    Derivative of a scalar function y=f(x) at x0 (single input), one reverse pass.
    """
    with use_tape():
        x = _ensure_var(x0)
        g = _adjoint_of(f(x), x)
        return 0.0 if g is None else value(g)


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Var]], Any],
          inputs: Dict[str, Any]) -> Dict[str, float]:
    """
    All partials of y=f(vars) w.r.t. every input (dict form), from ONE reverse pass.

    Returns
    -------
    dict {name: float}  # in the same key order as `inputs`
    """
    with use_tape():
        xs = {k: _ensure_var(v) for k, v in inputs.items()}
        y = f(xs)
        if not isinstance(y, Var):
            return {k: 0.0 for k in inputs}
        adj = rev(y)
        return {k: (value(adj[x]) if x in adj else 0.0) for k, x in xs.items()}


def derivative(f: Callable[[Var], Any], x0: Any, order: int = 1, mode: str = "rev") -> float:
    """
    n-th derivative of y=f(x) at x0.

    mode='rev' differentiates the adjoint graph again `order` times
    (rev-over-rev); mode='fwd' applies fwd() `order` times with x active.
    order=0 returns f(x0).
    """
    if order < 0:
        raise ValueError(f"order must be >= 0, got {order}")
    if mode not in ("rev", "fwd"):
        raise ValueError(f"Unknown mode: {mode!r}")
    with use_tape():
        x = _ensure_var(x0)
        g = f(x)
        if not isinstance(g, Var):
            return 0.0 if order else float(value(g))
        if mode == "fwd":
            x.active()
        for _ in range(order):
            g = fwd(g) if mode == "fwd" else _adjoint_of(g, x)
            if g is None:
                return 0.0
        return value(g)


def directional_derivative(f: Callable[[Dict[str, Var]], Any],
                           inputs: Dict[str, Any],
                           active: Iterable[str]) -> float:
    """
    Forward-mode derivative of y=f(vars) along the sum of the `active` inputs'
    unit directions: sum of dy/dx_k over k in `active`.
    """
    active = list(active)
    unknown = [k for k in active if k not in inputs]
    if unknown:
        raise ValueError(f"Unknown input name(s): {unknown}")
    with use_tape():
        xs = {k: _ensure_var(v) for k, v in inputs.items()}
        y = f(xs)
        if not isinstance(y, Var):
            return 0.0
        for k, x in xs.items():
            if k in active:
                x.active()
            else:
                x.inactive()
        return value(fwd(y))


def hessian(f: Callable[[Dict[str, Var]], Any], inputs: Dict[str, Any]) -> np.ndarray:
    """
    Dense Hessian of y=f(vars) by reverse-over-reverse.

    Returns
    -------
    np.ndarray [n, n] in the order of inputs.keys().
    """
    names: List[str] = list(inputs)
    n = len(names)
    H = np.zeros((n, n), dtype=float)
    with use_tape():
        xs = [_ensure_var(inputs[k]) for k in names]
        y = f(dict(zip(names, xs)))
        if not isinstance(y, Var):
            return H
        first = rev(y)
        for i, xi in enumerate(xs):
            gi = first.get(xi)
            if gi is None:
                continue
            second = rev(gi)
            for j, xj in enumerate(xs):
                if xj in second:
                    H[i, j] = value(second[xj])
    return H
