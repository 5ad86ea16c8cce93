"""HTTP surface for flowchart generation and layout."""

from .app import create_app

__all__ = ["create_app"]
