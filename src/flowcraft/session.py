"""Caller-side state for one user's flowchart.

Layout itself is stateless; this object keeps the latest laid-out flowchart,
makes sure a slow, superseded generation request never replaces a newer
result, and re-runs layout when the direction changes.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from .flowchart.edit import update_node_label
from .flowchart.layout import LayoutConfig, LayoutDirection, compute_layout
from .flowchart.model import Flowchart
from .flowchart.nl import NodeDensity, Verbosity, generate_flowchart
from .utils.logging import get_logger

logger = get_logger(__name__)

GenerateFn = Callable[[str, Verbosity, NodeDensity], Flowchart]


class FlowchartSession:
    def __init__(
        self,
        generate_fn: GenerateFn = generate_flowchart,
        *,
        config: Optional[LayoutConfig] = None,
        direction: LayoutDirection = LayoutDirection.TOP_BOTTOM,
        verbosity: Verbosity = Verbosity.MODERATE,
        density: NodeDensity = NodeDensity.MODERATE,
    ):
        self.generate_fn = generate_fn
        self.config = config
        self.direction = LayoutDirection(direction)
        self.verbosity = Verbosity(verbosity)
        self.density = NodeDensity(density)
        self.flowchart: Optional[Flowchart] = None
        self._lock = threading.Lock()
        self._latest_ticket = 0

    def begin_request(self) -> int:
        with self._lock:
            self._latest_ticket += 1
            return self._latest_ticket

    def accept(self, ticket: int, raw: Flowchart) -> Optional[Flowchart]:
        """Lay out `raw` and make it current, unless a newer request exists."""
        with self._lock:
            if ticket != self._latest_ticket:
                logger.info(
                    "Discarding superseded generation result",
                    extra={"ticket": ticket, "latest_ticket": self._latest_ticket},
                )
                return None
            self.flowchart = compute_layout(raw, self.direction, self.config)
            return self.flowchart

    def generate(self, prompt: str) -> Optional[Flowchart]:
        ticket = self.begin_request()
        raw = self.generate_fn(prompt, self.verbosity, self.density)
        return self.accept(ticket, raw)

    def set_direction(self, direction: LayoutDirection) -> Optional[Flowchart]:
        direction = LayoutDirection(direction)
        with self._lock:
            self.direction = direction
            if self.flowchart is not None:
                self.flowchart = compute_layout(self.flowchart, self.direction, self.config)
            return self.flowchart

    def edit_label(self, node_id: str, label: str) -> Flowchart:
        with self._lock:
            self.flowchart = update_node_label(self.flowchart or Flowchart(), node_id, label)
            return self.flowchart
