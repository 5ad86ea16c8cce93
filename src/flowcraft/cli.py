"""CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config.settings import Settings
from .core.exceptions import FlowcraftError
from .flowchart.layout import (
    LayoutDirection,
    compute_layout,
    count_edge_crossings,
    layout_bounds,
)
from .flowchart.model import Flowchart
from .flowchart.nl import NodeDensity, Verbosity, generate_flowchart
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _read_flowchart(source: str) -> Flowchart:
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise FlowcraftError("Input must be a JSON object with 'nodes' and 'edges'.")
    return Flowchart.from_dict(data)


def _emit(flowchart: Flowchart, settings: Settings, output: Optional[str]) -> None:
    payload = {
        "flowchart": flowchart.to_dict(),
        "bounds": layout_bounds(flowchart, settings.layout_config()).to_dict(),
        "crossings": count_edge_crossings(flowchart),
    }
    text = json.dumps(payload, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote flowchart", extra={"path": output})
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowcraft", description="Turn process descriptions into laid-out flowcharts"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    direction_kwargs = dict(
        choices=[d.value for d in LayoutDirection],
        default=LayoutDirection.TOP_BOTTOM.value,
        help="Layout strategy",
    )

    gen = sub.add_parser("generate", help="Generate a flowchart from a description")
    gen.add_argument("prompt", help="Natural-language process description")
    gen.add_argument(
        "--verbosity", choices=[v.value for v in Verbosity], default=Verbosity.MODERATE.value
    )
    gen.add_argument(
        "--density", choices=[d.value for d in NodeDensity], default=NodeDensity.MODERATE.value
    )
    gen.add_argument("--direction", **direction_kwargs)
    gen.add_argument("--output", "-o", help="Write JSON here instead of stdout")

    lay = sub.add_parser("layout", help="Sanitize and lay out an existing flowchart JSON")
    lay.add_argument("input", help="Path to flowchart JSON, or '-' for stdin")
    lay.add_argument("--direction", **direction_kwargs)
    lay.add_argument("--output", "-o", help="Write JSON here instead of stdout")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--debug", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    try:
        if args.command == "serve":
            from .web import create_app

            create_app(settings).run(host=args.host, port=args.port, debug=args.debug)
            return 0

        direction = LayoutDirection(args.direction)
        if args.command == "generate":
            raw = generate_flowchart(
                args.prompt,
                Verbosity(args.verbosity),
                NodeDensity(args.density),
                settings=settings,
            )
        else:
            raw = _read_flowchart(args.input)

        _emit(compute_layout(raw, direction, settings.layout_config()), settings, args.output)
    except FlowcraftError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
