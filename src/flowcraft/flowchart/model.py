"""Flowchart schema and normalization.

Flowcharts are immutable values: every pass over a flowchart (sanitize,
rank, layout, label edit) returns a new instance and leaves its input as it
was.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class NodeShape(str, Enum):
    """Visual kind of a node. Values are the wire names used by renderers."""

    PROCESS = "rectangle"
    DECISION = "diamond"
    TERMINAL = "pill"
    DATA_IO = "parallelogram"

    @classmethod
    def coerce(cls, value: Any) -> "NodeShape":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        return _SHAPE_ALIASES.get(key, cls.PROCESS)


_SHAPE_ALIASES: Dict[str, NodeShape] = {
    "rectangle": NodeShape.PROCESS,
    "process": NodeShape.PROCESS,
    "subprocess": NodeShape.PROCESS,
    "diamond": NodeShape.DECISION,
    "decision": NodeShape.DECISION,
    "pill": NodeShape.TERMINAL,
    "terminal": NodeShape.TERMINAL,
    "start": NodeShape.TERMINAL,
    "end": NodeShape.TERMINAL,
    "parallelogram": NodeShape.DATA_IO,
    "data_io": NodeShape.DATA_IO,
    "io": NodeShape.DATA_IO,
    "data": NodeShape.DATA_IO,
    "input": NodeShape.DATA_IO,
    "output": NodeShape.DATA_IO,
}


def _coerce_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _coerce_level(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value >= 0:
        return value
    return None


def _unique_id(prefix: str, used: set[str]) -> str:
    idx = 1
    base = prefix or "node"
    candidate = f"{base}_{idx}"
    while candidate in used:
        idx += 1
        candidate = f"{base}_{idx}"
    used.add(candidate)
    return candidate


def _raw_id(value: Any) -> Optional[str]:
    # 0 is a valid id; None, booleans and blank strings are not.
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _first_present(entry: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


@dataclass(frozen=True)
class FlowNode:
    id: str
    label: str
    shape: NodeShape = NodeShape.PROCESS
    level: Optional[int] = None
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_decision(self) -> bool:
        return self.shape is NodeShape.DECISION

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "shape": self.shape.value,
        }
        if self.level is not None:
            data["level"] = self.level
        if self.x is not None and self.y is not None:
            data["x"] = self.x
            data["y"] = self.y
        return data


@dataclass(frozen=True)
class FlowEdge:
    source: str
    target: str
    label: Optional[str] = None

    @property
    def has_label(self) -> bool:
        return bool(self.label and self.label.strip())

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source, "target": self.target}
        if self.label is not None:
            data["label"] = self.label
        return data


@dataclass(frozen=True)
class Flowchart:
    nodes: Tuple[FlowNode, ...] = field(default_factory=tuple)
    edges: Tuple[FlowEdge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable but always store tuples.
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def with_nodes(self, nodes: Iterable[FlowNode]) -> "Flowchart":
        return replace(self, nodes=tuple(nodes))

    def with_edges(self, edges: Iterable[FlowEdge]) -> "Flowchart":
        return replace(self, edges=tuple(edges))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flowchart":
        """Build a flowchart from loosely-structured JSON.

        Node entries are normalized (missing ids synthesized, duplicate ids
        renamed, unknown shapes mapped to a process box). Synthesized ids
        never take an id some other entry declares, so edges keep pointing
        at the node that declared it. Edge entries only need a source and a
        target; whether those exist is left to `sanitize()`.
        """
        nodes_raw = data.get("nodes")
        edges_raw = data.get("edges")
        if not isinstance(nodes_raw, list):
            nodes_raw = []
        if not isinstance(edges_raw, list):
            edges_raw = []

        entries = [node for node in nodes_raw if isinstance(node, dict)]
        declared = {
            raw_id
            for raw_id in (_raw_id(node.get("id")) for node in entries)
            if raw_id is not None
        }

        nodes: List[FlowNode] = []
        used_ids: set[str] = set()

        for idx, node in enumerate(nodes_raw):
            if not isinstance(node, dict):
                continue
            raw_id = _raw_id(node.get("id"))
            if raw_id is None:
                raw_id = f"n{idx + 1}"
                if raw_id in declared:
                    raw_id = _unique_id(raw_id, used_ids | declared)
            node_id = raw_id
            if node_id in used_ids:
                node_id = _unique_id(raw_id, used_ids | declared)
            used_ids.add(node_id)

            x = _coerce_float(node.get("x"))
            y = _coerce_float(node.get("y"))
            if x is None or y is None:
                x = y = None

            nodes.append(
                FlowNode(
                    id=node_id,
                    label=str(node.get("label") or ""),
                    shape=NodeShape.coerce(node.get("shape") or node.get("type")),
                    level=_coerce_level(node.get("level")),
                    x=x,
                    y=y,
                )
            )

        edges: List[FlowEdge] = []
        for edge in edges_raw:
            if not isinstance(edge, dict):
                continue
            source = _raw_id(_first_present(edge, "source", "from"))
            target = _raw_id(_first_present(edge, "target", "to"))
            if source is None or target is None:
                continue
            label = edge.get("label")
            edges.append(
                FlowEdge(
                    source=source,
                    target=target,
                    label=None if label is None else str(label),
                )
            )

        return cls(nodes=tuple(nodes), edges=tuple(edges))
