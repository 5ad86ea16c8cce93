"""Custom exception hierarchy for Flowcraft."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class FlowcraftError(Exception):
    """Base exception type for all Flowcraft errors."""

    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class ConfigurationError(FlowcraftError):
    """Raised when configuration is missing or invalid."""


class FlowchartGenerationError(FlowcraftError):
    """Raised when the language model cannot produce a usable flowchart."""


class NodeNotFoundError(FlowcraftError):
    """Raised when an operation names a node id the flowchart does not have."""
