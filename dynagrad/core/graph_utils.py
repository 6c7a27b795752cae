"""
Graph utilities: print and analyse the expression graph reachable from a node.
"""

from collections import Counter
from typing import Dict, List

import numpy as np

from .engine import _reachable
from .node import Op
from .var import Var


def reachable(root: Var) -> List[Var]:
    """All nodes reachable from `root`, inputs before users."""
    return [Var(root.tape, i) for i in _reachable(root.tape, root.index)]


def graph_summary(root: Var) -> Dict:
    """
    Statistics of the graph reachable from `root`.

    Returns:
        dict with nodes, edges, leaves, max_fan_in, max_fan_out, avg_fan_out,
        depth (longest input chain, a single leaf has depth 0) and
        operations (op name -> count).
    """
    nodes = root.tape.nodes
    order = _reachable(root.tape, root.index)

    fan_out = Counter()
    depth = {}
    for idx in order:
        ins = nodes[idx].inputs
        for i in ins:
            fan_out[i] += 1
        depth[idx] = 1 + max(depth[i] for i in ins) if ins else 0

    fan_ins = [len(nodes[i].inputs) for i in order]
    fan_outs = [fan_out[i] for i in order]
    return {
        'nodes': len(order),
        'edges': sum(fan_ins),
        'leaves': sum(1 for i in order if nodes[i].op is Op.LEAF),
        'max_fan_in': max(fan_ins),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'depth': depth[root.index],
        'operations': dict(Counter(nodes[i].op.value for i in order)),
    }


def print_graph_summary(root: Var, detailed: bool = False) -> Dict:
    """
    Print the graph summary of `root`.

    Args:
        root: graph output node
        detailed: also list the nodes (only for graphs of at most 100 nodes)

    Returns:
        the graph_summary() dict
    """
    stats = graph_summary(root)

    print("\n" + "="*70)
    print("EXPRESSION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Depth:              {stats['depth']}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_name, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_name:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= 100:
        print()
        print("="*70)
        print("DETAILED NODE LIST")
        print("="*70)
        for v in reachable(root):
            parent_info = ", ".join(f"Node{i}" for i in v.node.inputs)
            print(f"Node {v.index:3d}: {v.op.value:12s} <- [{parent_info}]")

    print("="*70 + "\n")
    return stats


def print_computation_graph(root: Var, max_nodes: int = 20) -> None:
    """
    Print the graph structure in code form, one assignment per node:
        v3 = mul(v0, v1)  # F32(12.0)

    Args:
        root: graph output node
        max_nodes: print at most this many nodes (inputs first)
    """
    print("\n" + "="*70)
    print("EXPRESSION GRAPH STRUCTURE")
    print("="*70)

    order = reachable(root)
    for v in order[:max_nodes]:
        rec = v.node
        args = ", ".join(f"v{i}" for i in rec.inputs)
        flag = " [active]" if rec.active else ""
        val = repr(rec.value) if rec.value is not None else "not evaluated"
        print(f"v{v.index} = {rec.op.value}({args})  # {val}{flag}")

    if len(order) > max_nodes:
        print(f"... ({len(order) - max_nodes} more nodes)")
    print("="*70 + "\n")
