"""Layout module - layer ordering, connection paths and tree coordinates."""

from .connections import create_curve_path
from .layer_ordering import (
    calculate_total_connection_length,
    count_crossings,
    group_by_category,
    optimize_layer_ordering,
)
from .tree_layout import compute_tree_layout

__all__ = [
    "calculate_total_connection_length",
    "compute_tree_layout",
    "count_crossings",
    "create_curve_path",
    "group_by_category",
    "optimize_layer_ordering",
]
