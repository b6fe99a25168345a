"""
FastAPI server module for the chat agent.

Provides the search, agent and health endpoints.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
