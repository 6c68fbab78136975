"""Routers module - FastAPI route handlers"""

from . import annotate, config

__all__ = ["annotate", "config"]
