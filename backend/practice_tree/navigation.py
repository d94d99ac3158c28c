"""
Drill-down navigation over a path of expanded practice ids (root first).
All functions return new lists; the input path is never mutated.
"""

from typing import List


def expand_practice(path: List[str], practice_id: str) -> List[str]:
    """Push practice_id, or step back when it is already the current practice."""
    if is_practice_expanded(path, practice_id):
        return navigate_back(path)
    return [*path, practice_id]


def navigate_back(path: List[str]) -> List[str]:
    """Drop the current practice; never goes below the root."""
    if len(path) <= 1:
        return list(path)
    return list(path[:-1])


def navigate_to_ancestor(path: List[str], index: int) -> List[str]:
    """Truncate the path after index. Out-of-range or current index leaves it unchanged."""
    if index < 0 or index >= len(path) - 1:
        return list(path)
    return list(path[: index + 1])


def is_practice_expanded(path: List[str], practice_id: str) -> bool:
    """True when practice_id is the current (last) practice below the root."""
    return len(path) > 1 and path[-1] == practice_id
