"""
bibliocore: a JSON:API facade over a library-management database.

The list-query engine lives in :mod:`bibliocore.api`; the FastAPI application
is built by :func:`bibliocore.factory.create_app`.
"""

__version__ = "0.1.0"
