"""
Graph utilities for practice dependencies.
Edges point from a practice to the practice it requires (practice -> depends_on).
Shared by the validator, tree materializer, selection filter and repository.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import networkx as nx


def build_requirement_graph(
    practice_ids: Iterable[Any],
    edges: Iterable[Tuple[Any, Any]],
    ids: Optional[Set[str]] = None,
) -> nx.DiGraph:
    """Build requirement graph. ids: if provided, only include nodes in ids. Non-string ids are skipped."""
    G = nx.DiGraph()
    for pid in practice_ids:
        if isinstance(pid, str) and (ids is None or pid in ids):
            G.add_node(pid)
    for src, dst in edges:
        if not isinstance(src, str) or not isinstance(dst, str):
            continue
        if ids is not None and (src not in ids or dst not in ids):
            continue
        G.add_edge(src, dst)
    return G


def graph_from_catalog(catalog) -> nx.DiGraph:
    """Requirement graph over a Catalog's known practices."""
    known = set(catalog.valid_practice_ids())
    return build_requirement_graph(
        [p.id for p in catalog.practices],
        [(d.practice_id, d.depends_on_id) for d in catalog.dependencies],
        ids=known,
    )


def graph_from_raw(data: Mapping[str, Any]) -> nx.DiGraph:
    """Requirement graph from raw catalog data. Dangling endpoints become nodes."""
    practices = [p.get("id") for p in data.get("practices") or [] if isinstance(p, Mapping)]
    edges = [
        (d.get("practice_id"), d.get("depends_on_id"))
        for d in data.get("dependencies") or []
        if isinstance(d, Mapping)
    ]
    return build_requirement_graph(practices, edges)


def graph_from_nodes(nodes: Iterable[Mapping[str, Any]]) -> nx.DiGraph:
    """Requirement graph from tree/flat nodes carrying a `dependencies` list of ids or {id} refs."""
    nodes = list(nodes)
    ids = {n.get("id") for n in nodes if isinstance(n.get("id"), str)}
    edges = [(n.get("id"), dep_id) for n in nodes for dep_id in node_dependency_ids(n)]
    return build_requirement_graph(ids, edges, ids=ids)


def node_dependency_ids(node: Any) -> List[str]:
    """Dependency ids of a node; refs may be ids, mappings or objects with `id`."""
    if node is None:
        return []
    deps = node.get("dependencies") if isinstance(node, Mapping) else getattr(node, "dependencies", None)
    out: List[str] = []
    for dep in deps or []:
        dep_id = ref_id(dep)
        if dep_id:
            out.append(dep_id)
    return out


def ref_id(ref: Any) -> Optional[str]:
    """Resolve an id from a plain id, a mapping with `id` or an object with `id`."""
    if ref is None:
        return None
    if isinstance(ref, str):
        return ref or None
    if isinstance(ref, Mapping):
        value = ref.get("id")
    else:
        value = getattr(ref, "id", None)
    return value if isinstance(value, str) and value else None


def find_back_edges(G: nx.DiGraph, root: str) -> Set[Tuple[str, str]]:
    """Edges closing a cycle in a depth-first walk from root (target already on the current path)."""
    back: Set[Tuple[str, str]] = set()
    if root not in G:
        return back
    on_path: Set[str] = {root}
    visited: Set[str] = {root}
    stack: List[Tuple[str, Any]] = [(root, iter(G.successors(root)))]
    while stack:
        node, it = stack[-1]
        nxt = next(it, None)
        if nxt is None:
            stack.pop()
            on_path.discard(node)
            continue
        if nxt in on_path:
            back.add((node, nxt))
        elif nxt not in visited:
            visited.add(nxt)
            on_path.add(nxt)
            stack.append((nxt, iter(G.successors(nxt))))
    return back


def longest_path_depths(G: nx.DiGraph, root: str) -> Dict[str, int]:
    """Depth of every node reachable from root = longest path length from root. Cycle-safe."""
    if root not in G:
        return {}
    reachable = {root} | nx.descendants(G, root)
    H = G.subgraph(reachable).copy()
    H.remove_edges_from(find_back_edges(G, root))
    depth: Dict[str, int] = {}
    for n in nx.topological_sort(H):
        preds = [p for p in H.predecessors(n) if p in depth]
        depth[n] = max(depth[p] for p in preds) + 1 if preds else 0
    return depth
