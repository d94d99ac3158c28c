"""
Adoption Engine - pure functions over adoption sets (frozensets of practice ids).
"""

import math
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from catalog.models import Catalog
from shared.graph import node_dependency_ids, ref_id


def toggle(state: Optional[Iterable[str]], practice_id: str) -> FrozenSet[str]:
    """New set with practice_id flipped."""
    current = frozenset(state or ())
    if practice_id in current:
        return current - {practice_id}
    return current | {practice_id}


def calculate_adopted_dependencies(
    practice: Any,
    adopted: Optional[Iterable[str]],
    practice_map: Optional[Mapping[str, Any]] = None,
) -> Dict[str, int]:
    """
    Count adopted dependencies of a practice -> {adoptedCount, totalCount}.

    With a practice_map (id -> practice with `dependencies`) the whole transitive
    closure is counted, each practice once; without one only direct dependencies.
    """
    if practice is None:
        return {"adoptedCount": 0, "totalCount": 0}
    adopted = frozenset(adopted or ())
    direct = node_dependency_ids(practice)

    if not practice_map:
        unique = list(dict.fromkeys(direct))
        return {"adoptedCount": sum(1 for d in unique if d in adopted), "totalCount": len(unique)}

    root_id = ref_id(practice)
    visited = {root_id} if root_id else set()
    closure: List[str] = []
    stack = list(reversed(direct))
    while stack:
        dep = stack.pop()
        if dep in visited:
            continue
        visited.add(dep)
        closure.append(dep)
        stack.extend(reversed(node_dependency_ids(practice_map.get(dep))))

    return {"adoptedCount": sum(1 for d in closure if d in adopted), "totalCount": len(closure)}


def calculate_adoption_percentage(adopted: float, total: float) -> int:
    """Round-half-up percentage in 0..100; 0 when either value is not positive."""
    if adopted is None or total is None or adopted <= 0 or total <= 0:
        return 0
    pct = math.floor(adopted / total * 100 + 0.5)
    return max(0, min(100, int(pct)))


def filter_valid_practice_ids(
    candidates: Optional[Iterable[str]], valid: Optional[Iterable[str]]
) -> FrozenSet[str]:
    if candidates is None or valid is None:
        return frozenset()
    valid = valid if isinstance(valid, (set, frozenset)) else set(valid)
    return frozenset(c for c in candidates if c in valid)


def build_practice_map(catalog: Catalog) -> Dict[str, Dict[str, Any]]:
    """id -> {id, dependencies: [ids]} from the catalog's edges."""
    adjacency = catalog.adjacency()
    return {pid: {"id": pid, "dependencies": list(deps)} for pid, deps in adjacency.items()}


def summarize_adoption(catalog: Catalog, adopted: Optional[Iterable[str]]) -> Dict[str, Any]:
    """Overall adoption figures plus transitive per-practice counts."""
    valid = catalog.valid_practice_ids()
    sanitized = filter_valid_practice_ids(adopted or (), valid)
    practice_map = build_practice_map(catalog)
    per_practice = {}
    for pid, node in practice_map.items():
        counts = calculate_adopted_dependencies(node, sanitized, practice_map)
        per_practice[pid] = {
            **counts,
            "adopted": pid in sanitized,
            "percentage": calculate_adoption_percentage(counts["adoptedCount"], counts["totalCount"]),
        }
    return {
        "adoptedPractices": sorted(sanitized),
        "adoptedCount": len(sanitized),
        "totalPractices": len(valid),
        "adoptionPercentage": calculate_adoption_percentage(len(sanitized), len(valid)),
        "practices": per_practice,
    }
