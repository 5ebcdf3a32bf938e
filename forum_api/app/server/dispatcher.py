"""
Request routing.

``RequestDispatcher`` turns one decoded request envelope into one
response envelope.  It is transport independent: the TCP server feeds
it raw bytes read from a socket, the HTTP bridge feeds it request
bodies.

Routing is a two-level table ``resource -> verb -> (body model,
handler)``.  The body is validated against its pydantic model before
the handler runs, so handlers only ever see well-formed, typed input.
Failures map to statuses as follows:

* malformed JSON, bad action format, unknown resource or verb, invalid
  body -> 400;
* single-entity fetch that finds nothing -> 404;
* anything else (storage failure, bug) -> 500, logged with traceback.

Edit and remove operations answer ``{"result": false}`` both when the
entity is missing and when the requester is not allowed.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Tuple, Type

from pydantic import BaseModel, ValidationError

from ..container import ServiceContainer
from ..core.errors import ClientError, ForumError, NotFoundError
from ..schemas.request import (
    CommentCreateBody,
    CommentEditBody,
    CommentIdBody,
    CommentRemoveBody,
    EmptyBody,
    PostCreateBody,
    PostEditBody,
    PostIdBody,
    PostRemoveBody,
    RequestEnvelope,
    Response,
    SearchBody,
    UserCreateBody,
    UserCredentialsBody,
    UserEditBody,
    UserRemoveBody,
)
from ..schemas.user import UserRead

logger = logging.getLogger(__name__)

ACTION_PATTERN = re.compile(r"^\s*([a-z][a-z-]*)/([a-z][a-z-]*)\s*$", re.IGNORECASE)

INTERNAL_ERROR = "Internal server error."

Handler = Callable[[Any], Response]
Route = Tuple[Type[BaseModel], Handler]


def _validation_details(exc: ValidationError) -> list:
    return exc.errors(include_url=False, include_context=False, include_input=False)


class RequestDispatcher:
    def __init__(self, container: ServiceContainer) -> None:
        self.users = container.users
        self.posts = container.posts
        self.comments = container.comments
        self.routes: Dict[str, Dict[str, Route]] = {
            "user": {
                "create": (UserCreateBody, self._create_user),
                "edit": (UserEditBody, self._edit_user),
                "remove": (UserRemoveBody, self._remove_user),
                "authenticate": (UserCredentialsBody, self._authenticate),
                "get": (UserCredentialsBody, self._get_user),
            },
            "post": {
                "create": (PostCreateBody, self._create_post),
                "edit": (PostEditBody, self._edit_post),
                "remove": (PostRemoveBody, self._remove_post),
                "get": (PostIdBody, self._get_post),
                "get-all": (EmptyBody, self._get_all_posts),
                "get-comments": (PostIdBody, self._get_post_comments),
                "search-titles": (SearchBody, self._search_post_titles),
                "search-contents": (SearchBody, self._search_post_contents),
            },
            "comment": {
                "create": (CommentCreateBody, self._create_comment),
                "edit": (CommentEditBody, self._edit_comment),
                "remove": (CommentRemoveBody, self._remove_comment),
                "get": (CommentIdBody, self._get_comment),
                "get-all": (EmptyBody, self._get_all_comments),
                "search-contents": (SearchBody, self._search_comment_contents),
            },
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def dispatch(self, payload: Any) -> Response:
        """Route one decoded JSON value; never raises."""
        try:
            return self._route(payload)
        except ForumError as exc:
            if exc.status_code >= 500:
                logger.error("Request failed: %s", exc.message, exc_info=True)
                return Response.error(exc.status_code, INTERNAL_ERROR)
            logger.info("Rejected request (%s): %s", exc.status_code, exc.message)
            return Response.error(exc.status_code, exc.message, exc.details)
        except Exception:
            logger.exception("Unhandled error while dispatching request")
            return Response.error(500, INTERNAL_ERROR)

    def handle_bytes(self, data: bytes) -> Response:
        """Decode a raw request and dispatch it."""
        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.info("Rejected undecodable request: %s", exc)
            return Response.error(400, "Malformed JSON request.")
        return self.dispatch(payload)

    def handle_raw(self, data: bytes) -> bytes:
        return self.encode(self.handle_bytes(data))

    @staticmethod
    def encode(response: Response) -> bytes:
        """Serialize a response as one JSON line."""
        try:
            text = json.dumps(response.to_wire())
        except (TypeError, ValueError):
            logger.exception("Failed to encode response with status %s", response.status)
            text = json.dumps(Response.error(500, INTERNAL_ERROR).to_wire())
        return (text + "\n").encode("utf-8")

    def _route(self, payload: Any) -> Response:
        try:
            envelope = RequestEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise ClientError("Invalid request envelope.", _validation_details(exc)) from exc

        match = ACTION_PATTERN.match(envelope.action)
        if not match:
            raise ClientError("Invalid action format.")
        resource, verb = (part.lower() for part in match.groups())

        verbs = self.routes.get(resource)
        if verbs is None:
            raise ClientError(f"Unknown resource: {resource}")
        route = verbs.get(verb)
        if route is None:
            raise ClientError(f"Unknown action for {resource} resource.")

        body_model, handler = route
        try:
            body = body_model.model_validate(envelope.body)
        except ValidationError as exc:
            raise ClientError(f"Invalid request message for {resource}.", _validation_details(exc)) from exc

        logger.info("Handling %s/%s", resource, verb)
        return handler(body)

    # ------------------------------------------------------------------
    # user/*
    # ------------------------------------------------------------------
    def _create_user(self, body: UserCreateBody) -> Response:
        return Response.ok(self.users.create_user(body.username, body.password, body.role))

    def _edit_user(self, body: UserEditBody) -> Response:
        result = self.users.edit_user(
            body.editor_name, body.username, body.old_password, body.new_password, body.new_role
        )
        return Response.ok(result)

    def _remove_user(self, body: UserRemoveBody) -> Response:
        return Response.ok(self.users.remove_user(body.remover_name, body.username, body.password))

    def _authenticate(self, body: UserCredentialsBody) -> Response:
        return Response.ok(self.users.authenticate(body.username, body.password))

    def _get_user(self, body: UserCredentialsBody) -> Response:
        user = self.users.get_user(body.username, body.password)
        if user is None:
            raise NotFoundError("User Not Found")
        return Response.ok(UserRead(username=user.username, role=user.role))

    # ------------------------------------------------------------------
    # post/*
    # ------------------------------------------------------------------
    def _create_post(self, body: PostCreateBody) -> Response:
        post = self.posts.create_post(body.title, body.username, body.content)
        return Response.ok("Post created successfully", id=post.id)

    def _edit_post(self, body: PostEditBody) -> Response:
        return Response.ok(self.posts.edit_post(body.post_id, body.title, body.username, body.content))

    def _remove_post(self, body: PostRemoveBody) -> Response:
        return Response.ok(self.posts.remove_post(body.post_id, body.username))

    def _get_post(self, body: PostIdBody) -> Response:
        post = self.posts.get_post_by_id(body.post_id)
        if post is None:
            raise NotFoundError("Post Not Found")
        return Response.ok(post)

    def _get_all_posts(self, body: EmptyBody) -> Response:
        return Response.ok(self.posts.get_all_posts())

    def _get_post_comments(self, body: PostIdBody) -> Response:
        return Response.ok(self.posts.get_post_comments(body.post_id))

    def _search_post_titles(self, body: SearchBody) -> Response:
        return Response.ok(self.posts.search_titles(body.search_pattern))

    def _search_post_contents(self, body: SearchBody) -> Response:
        return Response.ok(self.posts.search_contents(body.search_pattern))

    # ------------------------------------------------------------------
    # comment/*
    # ------------------------------------------------------------------
    def _create_comment(self, body: CommentCreateBody) -> Response:
        comment = self.comments.create_comment(body.post_id, body.username, body.content)
        return Response.ok("Comment created successfully", id=comment.id)

    def _edit_comment(self, body: CommentEditBody) -> Response:
        return Response.ok(self.comments.edit_comment(body.comment_id, body.username, body.content))

    def _remove_comment(self, body: CommentRemoveBody) -> Response:
        return Response.ok(self.comments.remove_comment(body.comment_id, body.username))

    def _get_comment(self, body: CommentIdBody) -> Response:
        comment = self.comments.get_comment_by_id(body.comment_id)
        if comment is None:
            raise NotFoundError("Comment Not Found")
        return Response.ok(comment)

    def _get_all_comments(self, body: EmptyBody) -> Response:
        return Response.ok(self.comments.get_all_comments())

    def _search_comment_contents(self, body: SearchBody) -> Response:
        return Response.ok(self.comments.search_contents(body.search_pattern))
