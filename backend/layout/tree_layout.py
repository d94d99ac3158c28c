"""
Level-order layout for practice trees.
Each node gets a fixed slot; every level is centered within the widest level.
Edges are cubic curves from a parent's bottom-center to a child's top-center.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from shared.graph import node_dependency_ids

from .connections import create_curve_path
from .constants import (
    DEFAULT_NODE_H,
    DEFAULT_NODE_SEP,
    DEFAULT_NODE_W,
    DEFAULT_PADDING,
    DEFAULT_RANK_SEP,
)


def compute_tree_layout(
    levels: Mapping[int, Sequence[Mapping[str, Any]]],
    node_w: int = DEFAULT_NODE_W,
    node_h: int = DEFAULT_NODE_H,
    node_sep: int = DEFAULT_NODE_SEP,
    rank_sep: int = DEFAULT_RANK_SEP,
    padding: int = DEFAULT_PADDING,
) -> Optional[Dict[str, Any]]:
    """
    Place an (already ordered) level mapping on a canvas.
    Returns {nodes: {id: {x,y,w,h,level}}, edges: [{from,to,path}], width, height}
    or None when there are no nodes.
    """
    keys = [k for k in sorted(levels) if levels[k]]
    if not keys:
        return None

    slot_w = node_w + node_sep
    max_level_width = max(len(levels[k]) * slot_w - node_sep for k in keys)

    # offset = (container - content) / 2 per level
    nodes_out: Dict[str, Dict[str, Any]] = {}
    for depth, key in enumerate(keys):
        layer = levels[key]
        y = padding + depth * (node_h + rank_sep)
        level_width = len(layer) * slot_w - node_sep
        level_offset = padding + (max_level_width - level_width) / 2
        for idx, node in enumerate(layer):
            nid = node.get("id")
            if nid in nodes_out:
                continue
            nodes_out[nid] = {
                "x": round(level_offset + idx * slot_w, 1),
                "y": round(y, 1),
                "w": node_w,
                "h": node_h,
                "level": key,
            }

    edges_out: List[Dict[str, Any]] = []
    for key in keys:
        for node in levels[key]:
            src = nodes_out.get(node.get("id"))
            for dep in node_dependency_ids(node):
                dst = nodes_out.get(dep)
                if src is None or dst is None:
                    continue
                path = create_curve_path(
                    round(src["x"] + src["w"] / 2, 1),
                    round(src["y"] + src["h"], 1),
                    round(dst["x"] + dst["w"] / 2, 1),
                    round(dst["y"], 1),
                )
                edges_out.append({"from": node.get("id"), "to": dep, "path": path})

    width = round(max_level_width + padding * 2, 1)
    height = round(len(keys) * (node_h + rank_sep) - rank_sep + padding * 2, 1)
    return {"nodes": nodes_out, "edges": edges_out, "width": width, "height": height}
