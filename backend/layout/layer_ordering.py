"""
Layer ordering for level-grouped practice trees.

Levels map a level number to an ordered list of nodes; a node's `dependencies`
lists the ids it points to. Crossing reduction uses the barycenter heuristic
with alternating downward/upward sweeps and keeps the best ordering seen.
"""

import math
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from config import LAYOUT_ITERATIONS
from shared.graph import node_dependency_ids

from .constants import DEFAULT_LEVEL_HEIGHT

Levels = Mapping[int, Sequence[Mapping[str, Any]]]


def _node_id(node: Mapping[str, Any]) -> Any:
    return node.get("id")


# ---------------------------------------------------------------------------
# 1. Crossings
# ---------------------------------------------------------------------------

def _edges_between(upper: Sequence[Mapping], lower: Sequence[Mapping]) -> List[Tuple[int, int]]:
    pos_lower = {_node_id(n): i for i, n in enumerate(lower)}
    return [
        (i, pos_lower[dep])
        for i, n in enumerate(upper)
        for dep in node_dependency_ids(n)
        if dep in pos_lower
    ]


def _count_crossings(upper: Sequence[Mapping], lower: Sequence[Mapping]) -> int:
    """Count edge crossings between two adjacent levels."""
    edges = _edges_between(upper, lower)
    crossings = 0
    for i in range(len(edges)):
        for j in range(i + 1, len(edges)):
            if (edges[i][0] - edges[j][0]) * (edges[i][1] - edges[j][1]) < 0:
                crossings += 1
    return crossings


def _total_crossings(layers: List[List[Mapping]]) -> int:
    return sum(_count_crossings(layers[i], layers[i + 1]) for i in range(len(layers) - 1))


def count_crossings(levels: Levels) -> int:
    """Total pairwise edge crossings between adjacent levels."""
    return _total_crossings([list(levels[k]) for k in sorted(levels)])


# ---------------------------------------------------------------------------
# 2. Barycenter sweeps
# ---------------------------------------------------------------------------

def _barycenter_sort(fixed: List[Mapping], free: List[Mapping], downward: bool) -> List[Mapping]:
    """Reorder free to reduce crossings with fixed. Ties keep the previous order."""
    if downward:
        parents: Dict[Any, List[int]] = {}
        for i, p in enumerate(fixed):
            for dep in node_dependency_ids(p):
                parents.setdefault(dep, []).append(i)
        neighbor_pos = [parents.get(_node_id(n), []) for n in free]
    else:
        fixed_pos = {_node_id(n): i for i, n in enumerate(fixed)}
        neighbor_pos = [
            [fixed_pos[d] for d in node_dependency_ids(n) if d in fixed_pos] for n in free
        ]

    anchored: List[Tuple[float, int]] = []
    unanchored: List[int] = []
    for idx, relevant in enumerate(neighbor_pos):
        if relevant:
            anchored.append((sum(relevant) / len(relevant), idx))
        else:
            unanchored.append(idx)
    anchored.sort()

    result = [idx for _, idx in anchored]
    for u in unanchored:
        best = len(result)
        for i, r in enumerate(result):
            if r > u:
                best = i
                break
        result.insert(best, u)

    return [free[i] for i in result]


def optimize_layer_ordering(levels: Levels, iterations: int = LAYOUT_ITERATIONS) -> Dict[int, List[Mapping]]:
    """
    Reorder nodes within each level to reduce edge crossings.
    Same keys and node sets per level; the input is not mutated.
    """
    keys = sorted(levels)
    layers = [list(levels[k]) for k in keys]
    if len(layers) <= 1 or iterations <= 0:
        return {k: layers[i] for i, k in enumerate(keys)}

    best_order = [list(layer) for layer in layers]
    best_crossings = _total_crossings(layers)

    for iteration in range(iterations):
        if best_crossings == 0:
            break
        if iteration % 2 == 0:
            for i in range(1, len(layers)):
                layers[i] = _barycenter_sort(layers[i - 1], layers[i], downward=True)
        else:
            for i in range(len(layers) - 2, -1, -1):
                layers[i] = _barycenter_sort(layers[i + 1], layers[i], downward=False)

        c = _total_crossings(layers)
        if c < best_crossings:
            best_crossings = c
            best_order = [list(layer) for layer in layers]

    return {k: best_order[i] for i, k in enumerate(keys)}


# ---------------------------------------------------------------------------
# 3. Scoring and grouping
# ---------------------------------------------------------------------------

def calculate_total_connection_length(levels: Levels, level_height: float = DEFAULT_LEVEL_HEIGHT) -> float:
    """Sum of straight-line lengths of every parent -> dependency edge, nodes at (index, level * level_height)."""
    positions: Dict[Any, Tuple[float, float]] = {}
    for level in sorted(levels):
        for idx, node in enumerate(levels[level]):
            positions.setdefault(_node_id(node), (idx, level * level_height))

    total = 0.0
    for level in sorted(levels):
        for node in levels[level]:
            src = positions[_node_id(node)]
            for dep in node_dependency_ids(node):
                dst = positions.get(dep)
                if dst is not None:
                    total += math.hypot(dst[0] - src[0], dst[1] - src[1])
    return total


def group_by_category(levels: Levels) -> Dict[int, List[Mapping]]:
    """Cluster same-category nodes within each level, categories in first-seen order."""
    out: Dict[int, List[Mapping]] = {}
    for level in sorted(levels):
        groups: Dict[Any, List[Mapping]] = {}
        for node in levels[level]:
            groups.setdefault(node.get("category"), []).append(node)
        out[level] = [n for group in groups.values() for n in group]
    return out
