"""Rank assignment for layout.

Levels come from a single breadth-first traversal out of an inferred root.
This is an approximation of longest-path layering: a node is frozen at the
level where it is first discovered, so a merge point reachable by a short and
a long path sits one below the *short* path's predecessor. The freeze is what
keeps ranking finite on cyclic flowcharts without separate cycle handling.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, Dict, List, Optional, Tuple

from .model import FlowNode, Flowchart


@dataclass(frozen=True)
class LevelAssignment:
    root: Optional[str]
    levels: Dict[str, int] = field(default_factory=dict)
    # child id -> source id of the edge that discovered it
    discovered_by: Dict[str, str] = field(default_factory=dict)
    unreachable: Tuple[str, ...] = field(default_factory=tuple)


def _children(flowchart: Flowchart) -> Dict[str, List[str]]:
    children: Dict[str, List[str]] = {node.id: [] for node in flowchart.nodes}
    for edge in flowchart.edges:
        if edge.source in children and edge.target in children:
            children[edge.source].append(edge.target)
    return children


def infer_root(flowchart: Flowchart) -> Optional[str]:
    """First node in listing order that no edge points at, else the first node."""
    if not flowchart.nodes:
        return None
    targets = {edge.target for edge in flowchart.edges}
    for node in flowchart.nodes:
        if node.id not in targets:
            return node.id
    return flowchart.nodes[0].id


def rank_nodes(flowchart: Flowchart) -> LevelAssignment:
    root = infer_root(flowchart)
    levels = {node.id: 0 for node in flowchart.nodes}
    if root is None:
        return LevelAssignment(root=None)

    children = _children(flowchart)
    discovered_by: Dict[str, str] = {}
    visited = {root}
    queue: Deque[Tuple[str, int]] = deque([(root, 0)])

    while queue:
        node_id, level = queue.popleft()
        levels[node_id] = max(levels[node_id], level)
        for child in children[node_id]:
            if child in visited:
                continue
            visited.add(child)
            discovered_by[child] = node_id
            queue.append((child, level + 1))

    unreachable = tuple(node.id for node in flowchart.nodes if node.id not in visited)
    return LevelAssignment(
        root=root,
        levels=levels,
        discovered_by=discovered_by,
        unreachable=unreachable,
    )


def assign_levels(flowchart: Flowchart) -> Flowchart:
    ranking = rank_nodes(flowchart)
    return flowchart.with_nodes(
        replace(node, level=ranking.levels.get(node.id, 0))
        for node in flowchart.nodes
    )


def order_nodes(flowchart: Flowchart) -> List[FlowNode]:
    """Nodes sorted by (level, id); unleveled nodes count as level 0."""
    return sorted(flowchart.nodes, key=lambda node: (node.level or 0, node.id))
