"""HTTP routes for the API server.

Routes are stateless: the client sends the flowchart it holds and gets the
transformed flowchart back.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

from flask import Flask, jsonify, request

from ..core.exceptions import FlowchartGenerationError, NodeNotFoundError
from ..flowchart.edit import update_node_label
from ..flowchart.layout import (
    LayoutConfig,
    LayoutDirection,
    compute_layout,
    count_edge_crossings,
    layout_bounds,
)
from ..flowchart.model import Flowchart
from ..flowchart.nl import NodeDensity, Verbosity
from ..session import GenerateFn

logger = logging.getLogger("flowcraft.web")


class InvalidRequest(ValueError):
    pass


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidRequest("Request body must be a JSON object.")
    return payload


def _enum_arg(payload: Dict[str, Any], key: str, enum_cls: Any, default: Any) -> Any:
    raw = payload.get(key)
    if raw in (None, ""):
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRequest(f"Invalid {key} '{raw}'. Expected one of: {allowed}.")


def _flowchart_arg(payload: Dict[str, Any]) -> Flowchart:
    data = payload.get("flowchart")
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must include a 'flowchart' object.")
    return Flowchart.from_dict(data)


def register_routes(app: Flask, *, layout_config: LayoutConfig, generate_fn: GenerateFn) -> None:
    def laid_out(flowchart: Flowchart, direction: LayoutDirection) -> Dict[str, Any]:
        positioned = compute_layout(flowchart, direction, layout_config)
        return {
            "flowchart": positioned.to_dict(),
            "bounds": layout_bounds(positioned, layout_config).to_dict(),
            "crossings": count_edge_crossings(positioned),
            "direction": direction.value,
        }

    @app.before_request
    def log_request() -> None:
        logger.info("HTTP %s %s", request.method, request.path)

    @app.errorhandler(InvalidRequest)
    def handle_invalid_request(exc: InvalidRequest) -> Tuple[Any, int]:
        return jsonify({"error": str(exc)}), 400

    @app.get("/api/info")
    def api_info() -> Any:
        return jsonify(
            {
                "name": "Flowcraft",
                "endpoints": {
                    "generate": "/api/flowcharts/generate",
                    "layout": "/api/flowcharts/layout",
                    "label": "/api/flowcharts/label",
                },
                "directions": [d.value for d in LayoutDirection],
                "verbosity": [v.value for v in Verbosity],
                "density": [d.value for d in NodeDensity],
            }
        )

    @app.post("/api/flowcharts/generate")
    def generate() -> Any:
        payload = _json_body()
        prompt = str(payload.get("prompt") or "").strip()
        if not prompt:
            raise InvalidRequest("Prompt is required.")
        verbosity = _enum_arg(payload, "verbosity", Verbosity, Verbosity.MODERATE)
        density = _enum_arg(payload, "density", NodeDensity, NodeDensity.MODERATE)
        direction = _enum_arg(payload, "direction", LayoutDirection, LayoutDirection.TOP_BOTTOM)

        try:
            raw = generate_fn(prompt, verbosity, density)
        except FlowchartGenerationError as exc:
            return jsonify({"error": exc.message}), 502
        return jsonify(laid_out(raw, direction))

    @app.post("/api/flowcharts/layout")
    def layout() -> Any:
        payload = _json_body()
        flowchart = _flowchart_arg(payload)
        direction = _enum_arg(payload, "direction", LayoutDirection, LayoutDirection.TOP_BOTTOM)
        return jsonify(laid_out(flowchart, direction))

    @app.post("/api/flowcharts/label")
    def edit_label() -> Any:
        payload = _json_body()
        flowchart = _flowchart_arg(payload)
        node_id = str(payload.get("node_id") or "")
        label = payload.get("label")
        if not node_id or not isinstance(label, str):
            raise InvalidRequest("'node_id' and a string 'label' are required.")
        try:
            updated = update_node_label(flowchart, node_id, label)
        except NodeNotFoundError as exc:
            return jsonify({"error": exc.message}), 404
        return jsonify({"flowchart": updated.to_dict()})
