"""
Health endpoint for API v1.

Reports that the process is up and how many records each store holds.
Reading the counts touches every snapshot, so a broken data directory
shows up here as a 503.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from forum_api.app.api.deps import get_container
from forum_api.app.container import ServiceContainer
from forum_api.app.core.errors import StorageError

router = APIRouter()


@router.get("/health", response_model=Dict[str, Any])
def health(container: ServiceContainer = Depends(get_container)) -> Dict[str, Any]:
    try:
        return {
            "status": "ok",
            "users": container.users.count(),
            "posts": container.posts.count(),
            "comments": container.comments.count(),
        }
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message) from exc
