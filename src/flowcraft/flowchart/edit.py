"""In-place style edits that never trigger a re-layout."""

from __future__ import annotations

from dataclasses import replace

from ..core.exceptions import NodeNotFoundError
from .model import Flowchart


def update_node_label(flowchart: Flowchart, node_id: str, label: str) -> Flowchart:
    """Return a copy of `flowchart` with one node relabelled.

    Level, position, shape and every edge are carried over untouched.
    """
    if flowchart.get_node(node_id) is None:
        raise NodeNotFoundError(f"Unknown node id: {node_id}", {"node_id": node_id})
    return flowchart.with_nodes(
        replace(node, label=label) if node.id == node_id else node
        for node in flowchart.nodes
    )
