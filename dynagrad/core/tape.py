# dynagrad/core/tape.py
from __future__ import annotations
from typing import List, Optional, Sequence
from contextlib import contextmanager

from .node import Node, Op
from .value import ScalarValue


class Tape:
    """
    Node arena. Nodes are appended in construction order and addressed by
    their index, which never changes while the tape lives. Since a node can
    only reference nodes that already exist, the list is always in
    topological order (inputs before users).
    """
    def __init__(self):
        self.nodes: List[Node] = []

    def __len__(self):
        return len(self.nodes)

    def reset(self):
        self.nodes.clear()

    def _push(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def new(self, op: Op) -> int:
        """Allocate a node with no inputs and no value; inputs are attached later."""
        return self._push(Node(op=op))

    def new_with_inputs(self, op: Op, inputs: Sequence[int]) -> int:
        index = self.new(op)
        self.set_inputs(index, inputs)
        return index

    def new_with_value(self, op: Op, value: ScalarValue) -> int:
        return self._push(Node(op=op, value=value))

    def set_inputs(self, index: int, inputs: Sequence[int]):
        for i in inputs:
            if not 0 <= i < index:
                # only existing, earlier nodes may be referenced: keeps the graph acyclic
                raise ValueError(f"Node {index} cannot take node {i} as input")
        self.nodes[index].inputs = list(inputs)

    def set_value(self, index: int, value: ScalarValue):
        self.nodes[index].value = value


# Global singleton tape (simple and practical for a first implementation)
global_tape = Tape()


@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily use a fresh tape:
        with use_tape():
            ... build graph ...
            y.rev()
    """
    from . import tape as _tape_mod  # local import to avoid cycles
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
