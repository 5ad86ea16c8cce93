import pytest

from flowcraft.core.exceptions import ConfigurationError
from flowcraft.flowchart.layout import (
    LayoutConfig,
    LayoutDirection,
    compute_layout,
    count_edge_crossings,
    layout_bounds,
)
from flowcraft.flowchart.model import Flowchart, FlowEdge, FlowNode


def _positions(flowchart):
    return {node.id: node.position for node in flowchart.nodes}


def test_top_bottom_rows_are_centred(branching_flowchart):
    laid_out = compute_layout(branching_flowchart, LayoutDirection.TOP_BOTTOM)
    assert _positions(laid_out) == {
        "E": (190.0, 120.0),
        "S": (470.0, 120.0),
        "A": (330.0, 360.0),
        "B": (330.0, 600.0),
        "C": (190.0, 840.0),
        "D": (470.0, 840.0),
    }
    assert [node.level for node in laid_out.nodes] == [0, 1, 2, 3, 3, 0]
    assert len(laid_out.edges) == 4


def test_zig_zag_wraps_rows_in_alternating_direction(chain_factory):
    laid_out = compute_layout(chain_factory(9), LayoutDirection.ZIG_ZAG)
    positions = _positions(laid_out)
    step = 220 + 60
    column_x = [50 + 110 + col * step for col in range(4)]

    assert [positions[f"n{i}"][0] for i in range(4)] == column_x
    assert [positions[f"n{i}"][0] for i in range(4, 8)] == column_x[::-1]
    assert positions["n4"] == (column_x[3], 360.0)
    assert positions["n7"] == (column_x[0], 360.0)
    assert positions["n8"] == (column_x[0], 600.0)


def test_consecutive_row_members_are_one_column_step_apart(branching_flowchart):
    laid_out = compute_layout(branching_flowchart)
    c, d = laid_out.get_node("C"), laid_out.get_node("D")
    assert d.x - c.x == 220 + 60
    assert c.y == d.y


def test_layout_is_deterministic_across_direction_switches(branching_flowchart):
    first = compute_layout(branching_flowchart, LayoutDirection.TOP_BOTTOM)
    zig = compute_layout(first, LayoutDirection.ZIG_ZAG)
    back = compute_layout(zig, LayoutDirection.TOP_BOTTOM)

    assert back == first
    assert compute_layout(branching_flowchart, "zig-zag") == zig
    assert [(n.id, n.label, n.shape) for n in zig.nodes] == [
        (n.id, n.label, n.shape) for n in branching_flowchart.nodes
    ]


def test_compute_layout_leaves_input_untouched(branching_flowchart):
    compute_layout(branching_flowchart)
    assert all(node.position is None for node in branching_flowchart.nodes)
    assert len(branching_flowchart.edges) == 5


def test_empty_flowchart_is_returned_unchanged():
    empty = Flowchart()
    assert compute_layout(empty) is empty


def test_injected_geometry_is_used(chain_factory):
    config = LayoutConfig(node_width=100, node_height=50, x_gap=20, y_gap=10, padding=0, snake_columns=2)
    positions = _positions(compute_layout(chain_factory(3), LayoutDirection.ZIG_ZAG, config))
    assert positions == {"n0": (50.0, 25.0), "n1": (170.0, 25.0), "n2": (170.0, 85.0)}


@pytest.mark.parametrize(
    "kwargs",
    [{"snake_columns": 0}, {"node_width": 0}, {"x_gap": -1}, {"padding": -5}],
)
def test_invalid_layout_config_is_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        LayoutConfig(**kwargs)


def test_layout_bounds_wrap_node_boxes_with_padding(chain_factory):
    bounds = layout_bounds(compute_layout(chain_factory(9), LayoutDirection.ZIG_ZAG))
    assert (bounds.min_x, bounds.min_y) == (0.0, 0.0)
    assert (bounds.width, bounds.height) == (1160.0, 720.0)


def test_layout_bounds_of_unpositioned_flowchart_is_empty(branching_flowchart):
    assert layout_bounds(branching_flowchart).to_dict()["width"] == 0.0


def _placed(points, edges):
    return Flowchart(
        nodes=[FlowNode(node_id, node_id, x=x, y=y) for node_id, (x, y) in points.items()],
        edges=[FlowEdge(source, target) for source, target in edges],
    )


def test_crossing_count_sees_an_x_but_not_shared_endpoints():
    points = {"nw": (0, 0), "ne": (200, 0), "sw": (0, 200), "se": (200, 200)}
    assert count_edge_crossings(_placed(points, [("nw", "se"), ("ne", "sw")])) == 1
    # Diagonals meeting at a corner touch, they do not cross.
    assert count_edge_crossings(_placed(points, [("nw", "se"), ("se", "ne"), ("nw", "ne")])) == 0
    # Parallel sides never cross.
    assert count_edge_crossings(_placed(points, [("nw", "ne"), ("sw", "se")])) == 0


def test_crossing_count_skips_unplaced_and_unknown_nodes():
    flowchart = Flowchart(
        nodes=[FlowNode("a", "A", x=0, y=0), FlowNode("b", "B"), FlowNode("c", "C", x=5, y=5)],
        edges=[FlowEdge("a", "b"), FlowEdge("a", "ghost"), FlowEdge("c", "a")],
    )
    assert count_edge_crossings(flowchart) == 0


def test_laid_out_scenarios_have_no_crossings(branching_flowchart, chain_factory):
    assert count_edge_crossings(compute_layout(branching_flowchart)) == 0
    assert count_edge_crossings(compute_layout(chain_factory(9), LayoutDirection.ZIG_ZAG)) == 0
