"""Flowcraft - natural-language process descriptions to laid-out flowcharts."""

from typing import TYPE_CHECKING

__all__ = ["Settings", "FlowchartSession", "compute_layout"]

if TYPE_CHECKING:
    from .config.settings import Settings
    from .flowchart.layout import compute_layout
    from .session import FlowchartSession


def __getattr__(name: str):
    if name == "Settings":
        from .config.settings import Settings

        return Settings
    if name == "FlowchartSession":
        from .session import FlowchartSession

        return FlowchartSession
    if name == "compute_layout":
        from .flowchart.layout import compute_layout

        return compute_layout
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
