"""HTTP surface re-exposing task creation and status lookups."""

from .app import create_app
from .routes import router

__all__ = ["create_app", "router"]
