"""
Shared helpers for cross-cutting concerns (logging).
"""

from app.utils.logging import configure_logging

__all__ = ["configure_logging"]
