"""Flowchart layout and crossing detection."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import ConfigurationError
from ..utils.logging import get_logger
from .levels import assign_levels, order_nodes
from .model import FlowNode, Flowchart
from .sanitize import sanitize

logger = get_logger(__name__)

Point = Tuple[float, float]


class LayoutDirection(str, Enum):
    TOP_BOTTOM = "top-bottom"
    ZIG_ZAG = "zig-zag"


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry shared by both layout strategies, in canvas units."""

    node_width: float = 220
    node_height: float = 140
    x_gap: float = 60
    y_gap: float = 100
    padding: float = 50
    snake_columns: int = 4

    def __post_init__(self) -> None:
        if self.node_width <= 0 or self.node_height <= 0:
            raise ConfigurationError(
                "Node size must be positive",
                {"node_width": self.node_width, "node_height": self.node_height},
            )
        if self.x_gap < 0 or self.y_gap < 0 or self.padding < 0:
            raise ConfigurationError(
                "Gaps and padding cannot be negative",
                {"x_gap": self.x_gap, "y_gap": self.y_gap, "padding": self.padding},
            )
        if self.snake_columns < 1:
            raise ConfigurationError(
                "Zig-zag layout needs at least one column",
                {"snake_columns": self.snake_columns},
            )

    @property
    def column_step(self) -> float:
        return self.node_width + self.x_gap

    @property
    def row_step(self) -> float:
        return self.node_height + self.y_gap


DEFAULT_LAYOUT = LayoutConfig()


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def to_dict(self) -> Dict[str, float]:
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
            "width": self.width,
            "height": self.height,
        }


def layout_top_bottom(
    ordered: Sequence[FlowNode], config: LayoutConfig = DEFAULT_LAYOUT
) -> Dict[str, Point]:
    """One centred row per level, rows stacked by level."""
    rows: Dict[int, List[FlowNode]] = {}
    for node in ordered:
        rows.setdefault(node.level or 0, []).append(node)

    # Widest row measured with its trailing gap, which leaves a small margin.
    max_row_width = max((len(row) * config.column_step for row in rows.values()), default=0)

    positions: Dict[str, Point] = {}
    for level, row in rows.items():
        row_width = len(row) * config.column_step - config.x_gap
        start_x = (max_row_width - row_width) / 2 + config.padding
        y = level * config.row_step + config.padding + config.node_height / 2
        for idx, node in enumerate(row):
            x = start_x + idx * config.column_step + config.node_width / 2
            positions[node.id] = (x, y)
    return positions


def layout_zig_zag(
    ordered: Sequence[FlowNode], config: LayoutConfig = DEFAULT_LAYOUT
) -> Dict[str, Point]:
    """Fixed-width grid filled boustrophedon style: odd rows run right to left."""
    columns = config.snake_columns
    positions: Dict[str, Point] = {}
    for idx, node in enumerate(ordered):
        row, col = divmod(idx, columns)
        if row % 2 == 1:
            col = columns - 1 - col
        x = col * config.column_step + config.padding + config.node_width / 2
        y = row * config.row_step + config.padding + config.node_height / 2
        positions[node.id] = (x, y)
    return positions


_STRATEGIES = {
    LayoutDirection.TOP_BOTTOM: layout_top_bottom,
    LayoutDirection.ZIG_ZAG: layout_zig_zag,
}


def compute_layout(
    flowchart: Flowchart,
    direction: LayoutDirection = LayoutDirection.TOP_BOTTOM,
    config: Optional[LayoutConfig] = None,
) -> Flowchart:
    """Sanitize, rank and position a flowchart.

    Returns a new flowchart whose edges have been sanitized and whose nodes,
    in their original order, all carry a level and centre coordinates. An
    empty flowchart is returned unchanged. Calling this again with another
    direction only changes levels and coordinates.
    """
    if not flowchart.nodes:
        return flowchart

    config = config or DEFAULT_LAYOUT
    direction = LayoutDirection(direction)

    leveled = assign_levels(sanitize(flowchart))
    positions = _STRATEGIES[direction](order_nodes(leveled), config)

    nodes = [
        replace(node, x=positions[node.id][0], y=positions[node.id][1])
        for node in leveled.nodes
    ]
    logger.debug(
        "Computed %s layout",
        direction.value,
        extra={"nodes": len(nodes), "edges": len(leveled.edges)},
    )
    return leveled.with_nodes(nodes)


def layout_bounds(
    flowchart: Flowchart, config: Optional[LayoutConfig] = None
) -> Bounds:
    """Extent of all positioned node boxes plus canvas padding on every side."""
    config = config or DEFAULT_LAYOUT
    placed = [node.position for node in flowchart.nodes if node.position is not None]
    if not placed:
        return Bounds(0.0, 0.0, 0.0, 0.0)

    half_w = config.node_width / 2
    half_h = config.node_height / 2
    return Bounds(
        min_x=min(x for x, _ in placed) - half_w - config.padding,
        min_y=min(y for _, y in placed) - half_h - config.padding,
        max_x=max(x for x, _ in placed) + half_w + config.padding,
        max_y=max(y for _, y in placed) + half_h + config.padding,
    )


def count_edge_crossings(flowchart: Flowchart) -> int:
    """Pairs of edges whose straight centre-to-centre segments intersect.

    Edges that share an endpoint position never count, and edges touching an
    unpositioned or unknown node are skipped.
    """
    placed = {node.id: node.position for node in flowchart.nodes if node.position is not None}
    segments = [
        (placed[edge.source], placed[edge.target])
        for edge in flowchart.edges
        if edge.source in placed and edge.target in placed
    ]
    return sum(1 for first, second in combinations(segments, 2) if _intersects(first, second))


def _intersects(first: Tuple[Point, Point], second: Tuple[Point, Point]) -> bool:
    p, q = first
    r, s = second
    if {p, q} & {r, s}:
        return False
    return _turn(p, q, r) * _turn(p, q, s) < 0 and _turn(r, s, p) * _turn(r, s, q) < 0


def _turn(a: Point, b: Point, c: Point) -> int:
    cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
    return (cross > 0) - (cross < 0)
