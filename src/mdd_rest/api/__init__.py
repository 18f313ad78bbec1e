"""HTTP API: application factory, per-model routers and dependencies."""

from .app import create_app
from .router import build_model_router

__all__ = ["build_model_router", "create_app"]
