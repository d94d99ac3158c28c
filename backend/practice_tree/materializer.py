"""
Tree Materializer - expands a catalog into a nested practice tree rooted at a practice.

A practice reachable through several paths is emitted once, at its deepest
depth (longest path from the root), under the first parent at the level above
it in traversal order. A practice already on the current path is emitted as a
terminal leaf so malformed cyclic data still produces a finite tree.
"""

from collections import deque
from typing import Any, Dict, List, Mapping, Optional, Set

from loguru import logger

from catalog.models import Catalog, Practice
from shared.graph import find_back_edges, graph_from_catalog, longest_path_depths


def _tree_node(practice: Practice, dependencies: List[Dict[str, Any]]) -> Dict[str, Any]:
    node = {
        "id": practice.id,
        "name": practice.name,
        "category": practice.category.value,
        "description": practice.description,
        "requirements": list(practice.requirements),
        "benefits": list(practice.benefits),
        "maturityLevel": practice.maturity_level,
        "requirementCount": practice.requirement_count,
        "benefitCount": practice.benefit_count,
        "dependencies": dependencies,
    }
    if practice.quick_start_guide is not None:
        node["quickStartGuide"] = practice.quick_start_guide
    return node


def build_tree(catalog: Catalog, root_id: str) -> Optional[Dict[str, Any]]:
    """Materialize the practice tree for root_id. None when the root is absent."""
    by_id = catalog.practice_by_id()
    if root_id not in by_id:
        return None

    G = graph_from_catalog(catalog)
    adjacency = catalog.adjacency()
    depth = longest_path_depths(G, root_id)
    back_edges = find_back_edges(G, root_id)
    emitted: Set[str] = set()

    def expand(pid: str, level: int, path: Set[str]) -> Dict[str, Any]:
        emitted.add(pid)
        children = []
        for dep in adjacency.get(pid, []):
            if dep in path:
                logger.debug("Cycle guard hit: {} -> {}", pid, dep)
                children.append(_tree_node(by_id[dep], []))
                continue
            if (pid, dep) in back_edges or dep in emitted or depth.get(dep) != level + 1:
                continue
            children.append(expand(dep, level + 1, path | {dep}))
        return _tree_node(by_id[pid], children)

    return expand(root_id, 0, {root_id})


def flatten_tree(tree: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Breadth-first list of nodes with a `level` key.
    A node seen at several depths is kept once, at the deepest one; order is
    level first, then first-seen order within the level.
    """
    if tree is None:
        return []

    occurrences: List[tuple] = []
    queue = deque([(tree, 0, frozenset())])
    while queue:
        node, level, ancestors = queue.popleft()
        nid = node.get("id")
        # cycle-guard leaves repeat an ancestor and do not count as placements
        if nid in ancestors:
            continue
        occurrences.append((node, level))
        for child in node.get("dependencies") or []:
            if isinstance(child, Mapping):
                queue.append((child, level + 1, ancestors | {nid}))

    deepest: Dict[Any, int] = {}
    for node, level in occurrences:
        nid = node.get("id")
        deepest[nid] = max(level, deepest.get(nid, level))

    result = []
    placed: Set[Any] = set()
    for node, level in occurrences:
        nid = node.get("id")
        if nid in placed or level != deepest[nid]:
            continue
        placed.add(nid)
        result.append({**node, "level": level})
    result.sort(key=lambda n: n["level"])
    return result


def group_by_level(flat: List[Mapping[str, Any]]) -> Dict[int, List[Mapping[str, Any]]]:
    """level -> nodes in order (optimizer input)."""
    levels: Dict[int, List[Mapping[str, Any]]] = {}
    for node in flat:
        levels.setdefault(node.get("level", 0), []).append(node)
    return dict(sorted(levels.items()))


def count_practices(tree: Optional[Mapping[str, Any]]) -> int:
    if tree is None:
        return 0
    return 1 + sum(count_practices(c) for c in tree.get("dependencies") or [] if isinstance(c, Mapping))


def collect_transitive_categories(tree: Optional[Mapping[str, Any]]) -> List[str]:
    """Sorted distinct categories of every descendant of tree (excluding itself)."""
    if tree is None:
        return []
    categories: Set[str] = set()
    seen: Set[Any] = {tree.get("id")}
    stack = [c for c in tree.get("dependencies") or [] if isinstance(c, Mapping)]
    while stack:
        node = stack.pop()
        nid = node.get("id")
        if nid in seen:
            continue
        seen.add(nid)
        if node.get("category"):
            categories.add(node["category"])
        stack.extend(c for c in node.get("dependencies") or [] if isinstance(c, Mapping))
    return sorted(categories)
