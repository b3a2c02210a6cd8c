"""
Middleware for the library API: CORS and request timing.
"""

from .cors import add_cors_middleware
from .manager import setup_middlewares
from .timing import TimingMiddleware

__all__ = ["setup_middlewares", "add_cors_middleware", "TimingMiddleware"]
