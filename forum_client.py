"""Forum API client.

Two small clients speaking the action envelope used by the server:

* :class:`ForumClient` talks to the TCP transport (one request per
  connection, one JSON line back).
* :class:`ForumHTTPClient` posts the same envelope to the HTTP bridge
  using the ``requests`` library.

Both return the full response envelope ``{"status": ..., "body": ...}``
so callers can inspect the status code the same way regardless of the
transport.  A few convenience wrappers cover the most common actions.

The module also works as a command line tool::

    python forum_client.py post/get-all
    python forum_client.py post/get --body '{"postId": 1}'
    python forum_client.py user/authenticate --body '{"userName": "a", "password": "b"}' \\
        --http http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import json
import logging
import socket
import sys
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)

Envelope = Dict[str, Any]


class ForumClient:
    """Client for the TCP transport.

    Every call opens a fresh connection, since the server answers exactly
    one request per connection and then closes it.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 34567, timeout: float = 10.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def send(self, action: str, body: Optional[Dict[str, Any]] = None) -> Envelope:
        """Send one action and return the decoded response envelope."""
        payload = json.dumps({"action": action, "body": body or {}}) + "\n"
        logger.debug("Sending %s to %s:%s", action, self.host, self.port)
        with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
            sock.sendall(payload.encode("utf-8"))
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return json.loads(b"".join(chunks).decode("utf-8"))

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------
    def create_user(self, username: str, password: str, role: str = "USER") -> Envelope:
        return self.send("user/create", {"userName": username, "password": password, "role": role})

    def authenticate(self, username: str, password: str) -> Envelope:
        return self.send("user/authenticate", {"userName": username, "password": password})

    def create_post(self, title: str, username: str, content: str) -> Envelope:
        return self.send("post/create", {"title": title, "userName": username, "content": content})

    def get_post(self, post_id: int) -> Envelope:
        return self.send("post/get", {"postId": post_id})

    def create_comment(self, post_id: int, username: str, content: str) -> Envelope:
        return self.send("comment/create", {"postId": post_id, "userName": username, "content": content})

    def search_comments(self, pattern: str) -> Envelope:
        return self.send("comment/search-contents", {"searchPattern": pattern})


class ForumHTTPClient(ForumClient):
    """Client for the HTTP bridge; same wrappers, different transport."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, action: str, body: Optional[Dict[str, Any]] = None) -> Envelope:
        url = f"{self.base_url}/api/v1/actions"
        logger.debug("Sending %s to %s", action, url)
        response = self.session.post(url, json={"action": action, "body": body or {}}, timeout=self.timeout)
        # Error statuses still carry a response envelope.
        try:
            return response.json()
        except ValueError:
            return {"status": response.status_code, "body": {"error": response.text}}


def main(argv: Optional[list] = None) -> int:
    ap = argparse.ArgumentParser(description="Send one action to a Forum API server.")
    ap.add_argument("action", help="Action in the form <resource>/<verb>, e.g. post/get-all")
    ap.add_argument("--body", default="{}", help="JSON object with the action's fields")
    ap.add_argument("--host", default="127.0.0.1", help="TCP host (default: 127.0.0.1)")
    ap.add_argument("--port", type=int, default=34567, help="TCP port (default: 34567)")
    ap.add_argument("--http", metavar="BASE_URL", help="Use the HTTP bridge at BASE_URL instead of TCP")
    args = ap.parse_args(argv)

    try:
        body = json.loads(args.body)
    except json.JSONDecodeError as exc:
        print(f"[!] --body is not valid JSON: {exc}", file=sys.stderr)
        return 2

    client = ForumHTTPClient(args.http) if args.http else ForumClient(args.host, args.port)
    try:
        envelope = client.send(args.action, body)
    except (OSError, requests.RequestException) as exc:
        print(f"[!] Request failed: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(envelope, indent=2))
    return 0 if envelope.get("status") == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
