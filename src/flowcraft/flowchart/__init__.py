"""Flowchart domain models, repair and layout."""

from .model import Flowchart, FlowEdge, FlowNode, NodeShape
from .sanitize import DropReason, SanitizeReport, sanitize, sanitize_with_report
from .levels import LevelAssignment, assign_levels, infer_root, order_nodes, rank_nodes
from .layout import (
    Bounds,
    LayoutConfig,
    LayoutDirection,
    compute_layout,
    count_edge_crossings,
    layout_bounds,
    layout_top_bottom,
    layout_zig_zag,
)
from .edit import update_node_label
from .nl import NodeDensity, Verbosity, generate_flowchart, parse_flowchart_json

__all__ = [
    "Flowchart",
    "FlowEdge",
    "FlowNode",
    "NodeShape",
    "DropReason",
    "SanitizeReport",
    "sanitize",
    "sanitize_with_report",
    "LevelAssignment",
    "assign_levels",
    "infer_root",
    "order_nodes",
    "rank_nodes",
    "Bounds",
    "LayoutConfig",
    "LayoutDirection",
    "compute_layout",
    "count_edge_crossings",
    "layout_bounds",
    "layout_top_bottom",
    "layout_zig_zag",
    "update_node_label",
    "NodeDensity",
    "Verbosity",
    "generate_flowchart",
    "parse_flowchart_json",
]
