"""Repair of model-generated flowcharts before layout.

Three edge filters, evaluated in order:
1. Both endpoints must be declared node ids.
2. No self-loops.
3. Edges leaving a decision node must carry a non-blank label.

Nodes are never touched. Nothing here raises for malformed content; bad edges
are dropped and reported.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

from ..utils.logging import get_logger
from .model import FlowEdge, Flowchart

logger = get_logger(__name__)


class DropReason(str, Enum):
    DANGLING_REFERENCE = "dangling_reference"
    SELF_LOOP = "self_loop"
    UNLABELED_DECISION_BRANCH = "unlabeled_decision_branch"


@dataclass(frozen=True)
class DroppedEdge:
    edge: FlowEdge
    reason: DropReason


@dataclass(frozen=True)
class SanitizeReport:
    flowchart: Flowchart
    dropped: Tuple[DroppedEdge, ...] = field(default_factory=tuple)

    def count(self, reason: DropReason) -> int:
        return sum(1 for item in self.dropped if item.reason is reason)


def _rejection(
    edge: FlowEdge, node_ids: Set[str], decision_ids: Set[str]
) -> Optional[DropReason]:
    if edge.source not in node_ids or edge.target not in node_ids:
        return DropReason.DANGLING_REFERENCE
    if edge.source == edge.target:
        return DropReason.SELF_LOOP
    if edge.source in decision_ids and not edge.has_label:
        return DropReason.UNLABELED_DECISION_BRANCH
    return None


def sanitize_with_report(flowchart: Flowchart) -> SanitizeReport:
    node_ids = flowchart.node_ids()
    decision_ids = {node.id for node in flowchart.nodes if node.is_decision}

    kept: List[FlowEdge] = []
    dropped: List[DroppedEdge] = []
    for edge in flowchart.edges:
        reason = _rejection(edge, node_ids, decision_ids)
        if reason is None:
            kept.append(edge)
        else:
            dropped.append(DroppedEdge(edge=edge, reason=reason))

    if dropped:
        counts = Counter(item.reason.value for item in dropped)
        logger.info(
            "Dropped %d edge(s) while sanitizing flowchart",
            len(dropped),
            extra={"dropped_by_reason": dict(counts)},
        )

    return SanitizeReport(flowchart=flowchart.with_edges(kept), dropped=tuple(dropped))


def sanitize(flowchart: Flowchart) -> Flowchart:
    return sanitize_with_report(flowchart).flowchart
