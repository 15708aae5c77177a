"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import presence

__all__ = ["presence"]
