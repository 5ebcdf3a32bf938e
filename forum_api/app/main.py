"""
HTTP bridge application.

``create_app`` assembles the FastAPI application around a service
container.  The TCP server and the HTTP bridge started by ``run.py``
share the same container, and therefore the same stores and locks.
Serve it with uvicorn, e.g.::

    uvicorn forum_api.app.main:create_app --factory
"""

from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .container import ServiceContainer, build_container
from .core.config import settings
from .core.logging_config import setup_logging
from .server.dispatcher import RequestDispatcher


def create_app(
    container: Optional[ServiceContainer] = None,
    dispatcher: Optional[RequestDispatcher] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    container : Optional[ServiceContainer]
        Services to expose.  Built from ``settings`` when omitted.
    dispatcher : Optional[RequestDispatcher]
        Dispatcher over ``container``; created when omitted.

    Returns
    -------
    FastAPI
        A configured application instance.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    container = container or build_container(settings)
    app = FastAPI(title=container.settings.project_name, version=container.settings.api_version)
    app.state.container = container
    app.state.dispatcher = dispatcher or RequestDispatcher(container)

    app.include_router(v1_router, prefix="/api/v1")
    return app
