"""
Resource endpoints of the library API.

Every module declares its resource definition (columns, allow-lists,
relations) and a router; ``api_router`` bundles them all.
"""

from fastapi import APIRouter

from bibliocore.resources import (
    biblios,
    contents,
    files,
    items,
    loans,
    lookups,
    members,
    settings,
    visitors,
)

api_router = APIRouter()
for _module in (members, items, loans, biblios, visitors, files, contents, lookups, settings):
    api_router.include_router(_module.router)

__all__ = ["api_router"]
