"""Unified entry point for the TCP server and the HTTP bridge.

This script builds one service container and serves it over both
transports concurrently: the threaded TCP server (one JSON request per
connection) and, unless ``HTTP_ENABLED`` is false, the FastAPI bridge
under uvicorn.  Both share the same stores, so they see the same data
and the same locks.

Configuration is read from environment variables; see
``forum_api/app/core/config.py`` for the full list.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from forum_api.app.container import build_container
from forum_api.app.core.config import settings
from forum_api.app.core.logging_config import setup_logging
from forum_api.app.main import create_app
from forum_api.app.server.dispatcher import RequestDispatcher
from forum_api.app.server.tcp_server import create_tcp_server


async def run_tcp(dispatcher: RequestDispatcher) -> None:
    """Serve the TCP transport until cancelled.

    ``serve_forever`` blocks, so it runs in a worker thread; cancelling
    this coroutine shuts the server down.
    """
    server = create_tcp_server(
        dispatcher,
        settings.tcp_host,
        settings.tcp_port,
        connection_timeout=settings.connection_timeout,
        max_request_bytes=settings.max_request_bytes,
    )
    try:
        await asyncio.to_thread(server.serve_forever)
    finally:
        server.shutdown()
        server.server_close()


async def run_http(app) -> None:
    """Start the HTTP bridge using Uvicorn on ``HTTP_HOST``/``HTTP_PORT``."""
    config = Config(app=app, host=settings.http_host, port=settings.http_port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


async def main() -> None:
    """Run both transports; stop everything when one of them stops."""
    setup_logging(settings.log_level, settings.log_file or None)
    container = build_container(settings)
    dispatcher = RequestDispatcher(container)

    tasks = [asyncio.create_task(run_tcp(dispatcher))]
    if settings.http_enabled:
        app = create_app(container, dispatcher)
        tasks.append(asyncio.create_task(run_http(app)))

    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in done:
        if exception := task.exception():
            logging.exception("Exception in service", exc_info=exception)
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
