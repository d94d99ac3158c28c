"""Shared utilities for catalog, practice tree, adoption and layout."""

from .graph import (
    build_requirement_graph,
    find_back_edges,
    graph_from_catalog,
    graph_from_nodes,
    graph_from_raw,
    longest_path_depths,
    node_dependency_ids,
    ref_id,
)

__all__ = [
    "build_requirement_graph",
    "find_back_edges",
    "graph_from_catalog",
    "graph_from_nodes",
    "graph_from_raw",
    "longest_path_depths",
    "node_dependency_ids",
    "ref_id",
]
