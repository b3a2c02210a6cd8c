"""
Application factory for the library API.
"""

from bibliocore.factory.app import configure_app, create_app

__all__ = ["configure_app", "create_app"]
