"""Natural language flowchart generation."""

from __future__ import annotations

import json
import os
import re
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Protocol

from ..core.exceptions import FlowchartGenerationError
from ..utils.logging import get_logger
from .model import Flowchart, NodeShape

if TYPE_CHECKING:
    from ..config.settings import Settings

logger = get_logger(__name__)

DEBUG_FLOWCHART = os.getenv("FLOWCRAFT_FLOWCHART_DEBUG") == "1"
GENERATION_FAILED_MESSAGE = (
    "Failed to generate flowchart. Please check your API key and try again."
)


class Verbosity(str, Enum):
    PRECISE = "precise"
    MODERATE = "moderate"
    EXHAUSTIVE = "exhaustive"


class NodeDensity(str, Enum):
    AGGRESSIVE = "aggressive"
    MODERATE = "moderate"
    DEFAULT = "default"


class CompletionClient(Protocol):
    def complete(
        self,
        *,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        json_mode: bool = True,
    ) -> str: ...


_VERBOSITY_RULES = {
    Verbosity.PRECISE: "Labels should be 2-5 words.",
    Verbosity.MODERATE: "Labels should be complete sentences.",
    Verbosity.EXHAUSTIVE: "Labels can be detailed descriptions.",
}

_DENSITY_RULES = {
    NodeDensity.AGGRESSIVE: "Use strictly as few nodes as possible. Combine steps where logical.",
    NodeDensity.MODERATE: "Add a necessary and moderate amount of nodes.",
    NodeDensity.DEFAULT: "Give a standard detailed breakdown of the process.",
}

GENERATE_SCHEMA = """Return ONLY valid JSON with this schema:
{
  "nodes": [{"id":"node1","label":"...","shape":"pill|rectangle|diamond|parallelogram"}],
  "edges": [{"source":"node1","target":"node2","label":"Yes"}]
}
"""


def build_system_prompt(verbosity: Verbosity, density: NodeDensity) -> str:
    verbosity = Verbosity(verbosity)
    density = NodeDensity(density)
    return (
        "You are an expert system that generates structured data for flowchart diagrams.\n"
        "Analyze the user's topic and create a logical, step-by-step flowchart.\n\n"
        "Rules:\n"
        f"1. The flowchart must have a single logical starting point (shape: '{NodeShape.TERMINAL.value}') "
        "and one or more ending points.\n"
        f"2. Use '{NodeShape.PROCESS.value}' for process steps, '{NodeShape.DECISION.value}' for decisions, "
        f"and '{NodeShape.DATA_IO.value}' for data input/output.\n"
        f"3. Verbosity: {verbosity.value}. {_VERBOSITY_RULES[verbosity]}\n"
        f"4. Node density: {density.value}. {_DENSITY_RULES[density]}\n"
        "5. Ensure all node ids are unique.\n"
        "6. Ensure every edge 'source' and 'target' is a valid node id.\n"
        "7. Decision nodes need at least two outgoing edges with labels (e.g. \"Yes\", \"No\").\n"
        "8. Output JSON only (no markdown).\n\n"
        + GENERATE_SCHEMA
    )


def generate_flowchart(
    prompt: str,
    verbosity: Verbosity = Verbosity.MODERATE,
    density: NodeDensity = NodeDensity.MODERATE,
    *,
    client: Optional[CompletionClient] = None,
    settings: Optional["Settings"] = None,
) -> Flowchart:
    """Ask the language model for a raw (unsanitized, unpositioned) flowchart.

    Raises:
        FlowchartGenerationError: blank prompt, client/parse failure, or an
            answer without nodes. No retries are attempted.
    """
    if not prompt or not prompt.strip():
        raise FlowchartGenerationError("Please describe the process to chart.")

    system = build_system_prompt(verbosity, density)
    text = ""
    try:
        if client is None:
            from ..api.openai_client import AzureOpenAIClient

            if settings is None:
                client = AzureOpenAIClient.from_env()
            else:
                client = AzureOpenAIClient(settings)

        text = client.complete(prompt=prompt.strip(), system=system)
        if DEBUG_FLOWCHART:
            logger.info(
                "Flowchart generate raw response",
                extra={"response_preview": text[:2000]},
            )
        if not text.strip():
            raise ValueError("No content generated")
        flowchart = parse_flowchart_json(text)
        if not flowchart.nodes:
            raise ValueError("Generated flowchart has no nodes")
    except Exception as exc:
        logger.warning(
            "Flowchart generation failed",
            extra={"error": str(exc), "response_preview": (text or "")[:800]},
        )
        raise FlowchartGenerationError(
            GENERATION_FAILED_MESSAGE, {"error": str(exc)}
        ) from exc

    logger.info(
        "Generated flowchart",
        extra={"nodes": len(flowchart.nodes), "edges": len(flowchart.edges)},
    )
    return flowchart


def parse_flowchart_json(text: str) -> Flowchart:
    data = _extract_json_payload(text)

    if isinstance(data, dict):
        if isinstance(data.get("flowchart"), dict):
            data = data["flowchart"]
        return Flowchart.from_dict(data)

    if isinstance(data, list):
        if all(isinstance(item, dict) for item in data):
            return Flowchart.from_dict({"nodes": data, "edges": []})

    raise ValueError("Flowchart response was not a JSON object")


def _extract_json_payload(text: str) -> Any:
    def _strip_fences(raw: str) -> List[str]:
        return [
            match.group(1)
            for match in re.finditer(r"```(?:json)?\s*(.*?)```", raw, re.DOTALL | re.IGNORECASE)
        ]

    def _extract_balanced(raw: str, open_ch: str, close_ch: str) -> List[str]:
        payloads: List[str] = []
        depth = 0
        start = None
        in_string = False
        escape = False
        for idx, ch in enumerate(raw):
            if in_string:
                if escape:
                    escape = False
                elif ch == "\\":
                    escape = True
                elif ch == "\"":
                    in_string = False
                continue

            if ch == "\"":
                in_string = True
                continue
            if ch == open_ch:
                if depth == 0:
                    start = idx
                depth += 1
            elif ch == close_ch and depth > 0:
                depth -= 1
                if depth == 0 and start is not None:
                    payloads.append(raw[start : idx + 1])
                    start = None
        return payloads

    candidates = _strip_fences(text) + [text.strip()]

    for candidate in candidates:
        if not candidate:
            continue
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass

        for open_ch, close_ch in (("{", "}"), ("[", "]")):
            for payload in _extract_balanced(candidate, open_ch, close_ch):
                try:
                    return json.loads(payload)
                except json.JSONDecodeError:
                    continue

    raise ValueError("No JSON payload found")
