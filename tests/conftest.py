"""Shared test fixtures for flowchart tests."""

from typing import Callable, List

import pytest

from flowcraft.flowchart.model import Flowchart, FlowEdge, FlowNode, NodeShape
from flowcraft.flowchart.nl import NodeDensity, Verbosity


@pytest.fixture
def branching_flowchart() -> Flowchart:
    """Start -> step -> decision with Yes/No branches and one unlabeled ghost edge."""
    return Flowchart(
        nodes=[
            FlowNode("S", "Start", NodeShape.TERMINAL),
            FlowNode("A", "Collect form", NodeShape.PROCESS),
            FlowNode("B", "Form valid?", NodeShape.DECISION),
            FlowNode("C", "Approve", NodeShape.PROCESS),
            FlowNode("D", "Reject", NodeShape.PROCESS),
            FlowNode("E", "End", NodeShape.TERMINAL),
        ],
        edges=[
            FlowEdge("S", "A"),
            FlowEdge("A", "B"),
            FlowEdge("B", "C", "Yes"),
            FlowEdge("B", "D", "No"),
            FlowEdge("B", "E"),
        ],
    )


def make_chain(count: int) -> Flowchart:
    nodes = [FlowNode(f"n{idx}", f"Step {idx}") for idx in range(count)]
    edges = [FlowEdge(f"n{idx}", f"n{idx + 1}") for idx in range(count - 1)]
    return Flowchart(nodes=nodes, edges=edges)


@pytest.fixture
def chain_factory() -> Callable[[int], Flowchart]:
    return make_chain


class FakeGenerator:
    """Stands in for the LLM-backed generator; records every call."""

    def __init__(self, flowchart: Flowchart):
        self.flowchart = flowchart
        self.calls: List[tuple] = []

    def __call__(self, prompt: str, verbosity: Verbosity, density: NodeDensity) -> Flowchart:
        self.calls.append((prompt, verbosity, density))
        return self.flowchart


@pytest.fixture
def fake_generator(branching_flowchart: Flowchart) -> FakeGenerator:
    return FakeGenerator(branching_flowchart)
