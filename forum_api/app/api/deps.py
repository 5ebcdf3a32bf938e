"""
FastAPI dependencies.

The container and dispatcher are created once by ``create_app`` and
kept on ``app.state``; endpoints receive them through ``Depends``.
"""

from fastapi import Request

from forum_api.app.container import ServiceContainer
from forum_api.app.server.dispatcher import RequestDispatcher


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_dispatcher(request: Request) -> RequestDispatcher:
    return request.app.state.dispatcher
