"""Flask app factory for the API server."""

from __future__ import annotations

from functools import partial
from typing import Optional

from flask import Flask
from flask_cors import CORS

from ..config.settings import Settings
from ..flowchart.nl import generate_flowchart
from ..session import GenerateFn
from ..utils.logging import configure_logging
from .routes import register_routes


def create_app(
    settings: Optional[Settings] = None,
    generate_fn: Optional[GenerateFn] = None,
) -> Flask:
    settings = settings or Settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    app = Flask(__name__)
    CORS(app, origins=settings.cors_origin_list())
    register_routes(
        app,
        layout_config=settings.layout_config(),
        generate_fn=generate_fn or partial(generate_flowchart, settings=settings),
    )
    return app
