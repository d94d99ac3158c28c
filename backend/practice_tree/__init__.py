"""Practice tree module - materialization, flattening, navigation and selection."""

from .materializer import (
    build_tree,
    collect_transitive_categories,
    count_practices,
    flatten_tree,
    group_by_level,
)
from .navigation import expand_practice, is_practice_expanded, navigate_back, navigate_to_ancestor
from .selection import filter_tree_by_selection

__all__ = [
    "build_tree",
    "collect_transitive_categories",
    "count_practices",
    "expand_practice",
    "filter_tree_by_selection",
    "flatten_tree",
    "group_by_level",
    "is_practice_expanded",
    "navigate_back",
    "navigate_to_ancestor",
]
