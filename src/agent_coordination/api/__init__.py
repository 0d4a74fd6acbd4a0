"""HTTP API for the multi-agent system."""

from .server import create_app

__all__ = ["create_app"]
