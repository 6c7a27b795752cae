# dynagrad/core/engine.py
from __future__ import annotations
import logging
import warnings
from collections import defaultdict, deque
from typing import Dict, List, Optional, Tuple

from .. import config as config_mod  # module access for use_config() compatibility
from ..ops.arithmetic import Add
from ..ops.primitives import One, Zero
from ..ops.registry import lookup
from .errors import DroppedAdjointWarning, MissingAdjointError
from .node import Op
from .tape import Tape
from .value import ScalarValue
from .var import Var

logger = logging.getLogger(__name__)


class AdjointMap(dict):
    """
    Result of rev(): {0-input node handle -> adjoint expression handle}.
    Looking up a node the pass never reached raises MissingAdjointError.
    """
    def __missing__(self, key):
        raise MissingAdjointError(f"{key!r} adjoint missing")


def _reachable(tape: Tape, root: int, stop: Tuple[Op, ...] = ()) -> List[int]:
    """
    Indices of all nodes reachable from `root`, ascending (inputs before users).
    Nodes whose op is in `stop` are included but their inputs are not followed.
    """
    seen = {root}
    stack = [root]
    nodes = tape.nodes
    while stack:
        rec = nodes[stack.pop()]
        if rec.op in stop:
            continue
        for i in rec.inputs:
            if i not in seen:
                seen.add(i)
                stack.append(i)
    return sorted(seen)


# ---------------- Forward: evaluation ---------------- #
def apply_fwd(node: Var) -> ScalarValue:
    """
    Evaluate `node` from its leaves up and return its value.

    Every reachable node is re-evaluated on every call (nothing is memoized
    across calls), so leaf values changed with set_val() and active() flags
    toggled since the last call are always picked up. Within one call a
    shared node is evaluated once. The value of each node is cached on it.

    Nodes are visited in ascending arena order, which is a valid post-order:
    a node can only take earlier nodes as inputs.
    """
    nodes = node.tape.nodes
    for idx in _reachable(node.tape, node.index):
        rec = nodes[idx]
        args = [(nodes[i].value, nodes[i].active) for i in rec.inputs]
        rec.value = lookup(rec.op).evaluate(args, rec.value)
    return nodes[node.index].value


# ---------------- Forward: tangent construction ---------------- #
def fwd(node: Var) -> Var:
    """
    Build (without evaluating) the forward tangent graph of `node`.

    Leaves turn into Link markers, so which partial the result computes is
    chosen at evaluation time by the leaves' active() flags; with several
    active leaves it is the sum of their partials (a directional derivative).
    The tangent of a node shared inside the graph is built once and shared.

    Tangents are built in ascending arena order, so the tangent of every
    input already exists when a node's rule asks for it. The walk stops at
    Link nodes: their tangent is Zero whatever their target.
    """
    tape = node.tape
    tangents: Dict[int, Var] = {}

    def d(x: Var) -> Var:
        return tangents[x.index]

    before = len(tape)
    for idx in _reachable(tape, node.index, stop=(Op.LINK,)):
        x = Var(tape, idx)
        tangents[idx] = lookup(x.op).tangent(x, x.inputs, d)
    logger.debug("fwd(#%d): built %d nodes", node.index, len(tape) - before)
    return tangents[node.index]


# ---------------- Reverse: adjoint propagation ---------------- #
def rev(root: Var, schedule: Optional[str] = None) -> AdjointMap:
    """
    Build adjoint graphs for every 0-input node reachable from `root`.

    Args:
        root: expression to differentiate.
        schedule: 'topological' or 'bfs'; defaults to global_config.reverse_schedule.

    Returns:
        AdjointMap {node -> adjoint expression}. Keys are every reached leaf,
        and also the constants (Const/Zero/One) of the graph.

    Notes:
        - Seed: adjoint(root) = One. Each node hands its accumulated adjoint
          to the operation's adjoint rule, and every input accumulates the
          returned terms symbolically: acc[i] = Add(acc[i] or Zero, term).
        - Accumulators are local to this call. Afterwards each key node
          records its adjoint (see Var.adjoint / apply_rev) and each result
          expression is flagged as an adjoint; no other state is left on nodes.
    """
    cfg = config_mod.global_config
    schedule = schedule or cfg.reverse_schedule
    before = len(root.tape)
    if schedule == "topological":
        result = _rev_topological(root)
    elif schedule == "bfs":
        result = _rev_bfs(root, warn=cfg.warn_on_dropped_adjoint)
    else:
        raise ValueError(f"Unknown reverse schedule: {schedule!r}")

    for key, adj in result.items():
        key.node.adjoint = adj.index
        adj.node.is_adjoint = True
    logger.debug("rev(#%d, %s): %d adjoints, built %d nodes",
                 root.index, schedule, len(result), len(root.tape) - before)
    return result


def _accumulate(acc: Dict[int, Var], target: Var, term: Var):
    prev = acc.get(target.index)
    if prev is None:
        prev = Zero(tape=target.tape)
    acc[target.index] = Add(prev, term)


def _rev_topological(root: Var) -> AdjointMap:
    """
    Queue-driven pass with dependency counting: a node enters the queue only
    once every edge into it from the reachable graph has delivered its term,
    so a node reachable through several paths is finalized with all of them.
    """
    tape = root.tape
    nodes = tape.nodes
    pending = defaultdict(int)  # index -> number of not yet processed users (edge count)
    for idx in _reachable(tape, root.index):
        for i in nodes[idx].inputs:
            pending[i] += 1

    acc: Dict[int, Var] = {root.index: One(tape=tape)}
    result = AdjointMap()
    queue = deque([root.index])
    while queue:
        n = Var(tape, queue.popleft())
        out = acc.pop(n.index, None)
        if out is None:
            out = Zero(tape=tape)
        inputs = n.inputs
        if not inputs:
            result[n] = out
            continue
        for inp, term in zip(inputs, lookup(n.op).adjoint(n, inputs, out)):
            _accumulate(acc, inp, term)
            pending[inp.index] -= 1
            if pending[inp.index] == 0:
                queue.append(inp.index)
    return result


def _rev_bfs(root: Var, warn: bool = True) -> AdjointMap:
    """
    Plain breadth-first pass: inputs are always enqueued, a node is finalized
    the first time it is popped and skipped afterwards.

    A term reaching a node that is already finalized cannot be counted
    anymore; it is dropped (with a DroppedAdjointWarning). This happens when
    a node is reachable through paths of different lengths, e.g. x * sin(x).
    """
    tape = root.tape
    acc: Dict[int, Var] = {root.index: One(tape=tape)}
    visited = set()
    result = AdjointMap()
    queue = deque([root.index])
    while queue:
        idx = queue.popleft()
        if idx in visited:
            continue
        n = Var(tape, idx)
        out = acc.pop(idx, None)
        if out is None:
            out = Zero(tape=tape)
        inputs = n.inputs
        for inp, term in zip(inputs, lookup(n.op).adjoint(n, inputs, out)):
            if inp.index in visited:
                if warn:
                    warnings.warn(
                        f"bfs reverse schedule dropped an adjoint term for node #{inp.index} "
                        f"(already finalized); use reverse_schedule='topological'",
                        DroppedAdjointWarning, stacklevel=3,
                    )
                continue
            _accumulate(acc, inp, term)
        if not inputs:
            result[n] = out
        visited.add(idx)
        queue.extend(i.index for i in inputs)
    return result


def apply_rev(node: Var) -> ScalarValue:
    """
    Evaluate the adjoint held by `node`.

    - an adjoint expression returned by rev() evaluates itself;
    - a node reached by a previous rev() evaluates the adjoint recorded on it;
    - anything else raises MissingAdjointError.
    """
    rec = node.node
    if rec.is_adjoint:
        return apply_fwd(node)
    if rec.adjoint is not None:
        return apply_fwd(Var(node.tape, rec.adjoint))
    raise MissingAdjointError("adjoint missing")


def zero_adjoints(tape: Optional[Tape] = None):
    """
    Forget the adjoints recorded on every node of a tape (the active tape by
    default). Use before reusing leaves in an unrelated reverse pass so that
    apply_rev() cannot pick up a stale result.
    """
    if tape is None:
        from . import tape as tape_mod
        tape = tape_mod.global_tape
    for rec in tape.nodes:
        rec.adjoint = None
