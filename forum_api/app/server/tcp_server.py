"""
Threaded TCP transport: one JSON request per connection.

Each accepted connection is handled on its own daemon thread.  The
handler reads until it holds one complete JSON value (or the client
sends a newline, or half-closes the socket), passes the bytes to the
``RequestDispatcher``, writes exactly one JSON line back and closes the
connection.  Reads are bounded by ``connection_timeout`` and
``max_request_bytes``; both limits produce a 400 reply rather than a
silent drop.
"""

import json
import logging
import socket
import socketserver
from typing import Tuple

from ..core.errors import ClientError
from ..schemas.request import Response
from .dispatcher import INTERNAL_ERROR, RequestDispatcher

logger = logging.getLogger(__name__)

_RECV_SIZE = 4096
_decoder = json.JSONDecoder()


class RequestTimeoutError(ClientError):
    pass


class RequestTooLargeError(ClientError):
    pass


def _holds_complete_value(buffer: bytearray) -> bool:
    try:
        text = buffer.decode("utf-8").strip()
    except UnicodeDecodeError:
        # Possibly a multi-byte character split across reads.
        return False
    if not text:
        return False
    try:
        _decoder.raw_decode(text)
    except json.JSONDecodeError:
        return False
    return True


def read_request(sock: socket.socket, max_bytes: int) -> bytes:
    """Read one request from ``sock``.

    Raises ``RequestTimeoutError`` when the socket times out first and
    ``RequestTooLargeError`` once more than ``max_bytes`` arrive.
    """
    buffer = bytearray()
    while True:
        try:
            chunk = sock.recv(_RECV_SIZE)
        except socket.timeout as exc:
            raise RequestTimeoutError("Request timed out.") from exc
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise RequestTooLargeError("Request too large.")
        if b"\n" in chunk:
            break
        # Only a chunk ending in a closing bracket can complete an
        # envelope, so the whole buffer is not re-parsed on every read.
        tail = chunk.rstrip()
        if tail.endswith((b"}", b"]")) and _holds_complete_value(buffer):
            break
    return bytes(buffer)


class ForumRequestHandler(socketserver.BaseRequestHandler):
    server: "ForumTCPServer"

    def handle(self) -> None:
        dispatcher = self.server.dispatcher
        logger.debug("Accepted connection from %s:%s", *self.client_address[:2])
        self.request.settimeout(self.server.connection_timeout)
        try:
            data = read_request(self.request, self.server.max_request_bytes)
            reply = dispatcher.handle_raw(data)
        except ClientError as exc:
            logger.info("Rejected request from %s: %s", self.client_address[0], exc.message)
            reply = dispatcher.encode(Response.error(exc.status_code, exc.message))
        except OSError as exc:
            logger.warning("Connection from %s failed while reading: %s", self.client_address[0], exc)
            return
        except Exception:
            logger.exception("Unexpected error while handling connection from %s", self.client_address[0])
            reply = dispatcher.encode(Response.error(500, INTERNAL_ERROR))
        try:
            self.request.sendall(reply)
        except OSError as exc:
            logger.warning("Could not send reply to %s: %s", self.client_address[0], exc)

    def finish(self) -> None:
        logger.debug("Closing connection from %s:%s", *self.client_address[:2])


class ForumTCPServer(socketserver.ThreadingTCPServer):
    """``ThreadingTCPServer`` carrying the dispatcher and read limits."""

    daemon_threads = True
    allow_reuse_address = True

    def __init__(
        self,
        address: Tuple[str, int],
        dispatcher: RequestDispatcher,
        connection_timeout: float = 10.0,
        max_request_bytes: int = 1024 * 1024,
    ) -> None:
        self.dispatcher = dispatcher
        self.connection_timeout = connection_timeout
        self.max_request_bytes = max_request_bytes
        super().__init__(address, ForumRequestHandler)


def create_tcp_server(dispatcher: RequestDispatcher, host: str, port: int, **limits) -> ForumTCPServer:
    server = ForumTCPServer((host, port), dispatcher, **limits)
    bound_host, bound_port = server.server_address[:2]
    logger.info("TCP server listening on %s:%s", bound_host, bound_port)
    return server
