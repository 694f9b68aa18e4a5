"""API routes package.

This package contains all API route handlers for the application.
"""
from . import generate
from . import levels
from . import sessions

__all__ = [
    "generate",
    "levels",
    "sessions",
]
