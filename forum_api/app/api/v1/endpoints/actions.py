"""
Action endpoint for API v1.

Accepts the same ``{"action": ..., "body": ...}`` envelope as the TCP
transport and answers with the same response envelope.  The HTTP status
code mirrors the envelope's ``status``.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from forum_api.app.api.deps import get_dispatcher
from forum_api.app.server.dispatcher import RequestDispatcher

router = APIRouter()


@router.post("/actions")
async def run_action(request: Request, dispatcher: RequestDispatcher = Depends(get_dispatcher)) -> JSONResponse:
    """Dispatch one action.

    The raw body is handed to the dispatcher untouched so that malformed
    JSON gets the same 400 envelope as on the TCP transport.  Service
    calls block on file locks, so they run in the threadpool.
    """
    data = await request.body()
    response = await run_in_threadpool(dispatcher.handle_bytes, data)
    return JSONResponse(status_code=response.status, content=response.to_wire())
