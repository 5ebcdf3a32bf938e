"""
Top-level router for version 1 of the HTTP bridge.

Both endpoint modules define their full paths internally, so they are
included without a prefix.
"""

from fastapi import APIRouter

from .endpoints import actions, health

router = APIRouter()

router.include_router(actions.router, tags=["actions"])
router.include_router(health.router, tags=["health"])
