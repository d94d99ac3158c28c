"""Selection filter - narrow a flat practice list to one practice and its relatives."""

from typing import Any, List, Mapping, Optional

import networkx as nx

from shared.graph import graph_from_nodes


def filter_tree_by_selection(
    flat: List[Mapping[str, Any]], selected_id: Optional[str]
) -> List[Mapping[str, Any]]:
    """
    Keep the selected practice, everything it transitively depends on and
    everything that transitively depends on it. Input order is preserved.
    Returns the full list when nothing (or an unknown id) is selected.
    """
    if not selected_id or not any(n.get("id") == selected_id for n in flat):
        return list(flat)
    G = graph_from_nodes(flat)
    keep = {selected_id} | nx.descendants(G, selected_id) | nx.ancestors(G, selected_id)
    return [n for n in flat if n.get("id") in keep]
