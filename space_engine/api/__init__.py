"""
Space Engine API module.

Provides FastAPI HTTP endpoints for availability, pricing, booking and search.
"""

from space_engine.api.main import app, create_app, run_server

__all__ = ["app", "create_app", "run_server"]
