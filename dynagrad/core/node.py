# dynagrad/core/node.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .value import ScalarValue


class Op(Enum):
    """Closed set of operation tags. Every member has one registered Operation."""
    LEAF = "leaf"
    CONST = "const"
    ZERO = "zero"
    ONE = "one"
    LINK = "link"      # forward-mode seed marker, never user-constructed
    ADD = "add"
    MUL = "mul"
    DIV = "div"
    POW = "pow"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    EXP = "exp"
    LN = "ln"


@dataclass
class Node:
    """
    One node of the expression graph, stored in a Tape arena.

    Attributes
    ----------
    op : Op
        Operation tag; fixed at construction.
    inputs : List[int]
        Arena indices of the inputs, in evaluation order (0, 1 or 2 entries).
    value : Optional[ScalarValue]
        Last evaluated value. Set at construction for Leaf/Const/Zero/One,
        overwritten by every evaluation pass otherwise.
    active : bool
        Seed flag, meaningful on leaves: selects the differentiation target
        of a forward tangent graph.
    adjoint : Optional[int]
        Arena index of the adjoint expression computed for this node by the
        most recent rev() that reached it (0-input nodes only).
    is_adjoint : bool
        True on the root of every adjoint expression returned by rev().
    """
    op: Op
    inputs: List[int] = field(default_factory=list)
    value: Optional[ScalarValue] = None
    active: bool = False
    adjoint: Optional[int] = None
    is_adjoint: bool = False
