"""
Business logic for comments.

Comment ids come from their own allocator, independent from post ids.
Creating a comment does not check that the referenced post exists.
"""

import logging
from typing import Callable, List, Optional

from ..core.authorization import can_edit_owned, can_remove_owned
from ..core.storage import IdentifierAllocator, PersistentMap
from ..schemas.comment import Comment
from ..schemas.search import SearchResult
from .post_service import epoch_millis
from .search_service import search_items
from .user_service import UserService

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(
        self,
        comments: PersistentMap[int, Comment],
        users: UserService,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.comments = comments
        self.users = users
        self.clock = clock or epoch_millis
        self.ids = IdentifierAllocator.from_store(comments, lambda comment: comment.id)

    def create_comment(self, post_id: int, username: str, content: str) -> Comment:
        comment = Comment(
            id=self.ids.next(),
            post_id=post_id,
            author_username=username,
            content=content,
            created_at=self.clock(),
            edited=False,
        )
        self.comments.put(comment.id, comment)
        logger.info("User %s commented on post %s (comment %s)", username, post_id, comment.id)
        return comment

    def edit_comment(self, comment_id: int, username: str, content: str) -> bool:
        with self.comments.locked():
            comment = self.comments.get(comment_id)
            if comment is None or not can_edit_owned(comment.author_username == username):
                return False
            self.comments.put(comment_id, comment.model_copy(update={"content": content, "edited": True}))
        logger.info("User %s edited comment %s", username, comment_id)
        return True

    def remove_comment(self, comment_id: int, username: str) -> bool:
        """Allowed for the author, an admin or a moderator."""
        role = self.users.get_role(username)
        with self.comments.locked():
            comment = self.comments.get(comment_id)
            if comment is None:
                return False
            if not can_remove_owned(role, comment.author_username == username):
                logger.info("User %s is not allowed to remove comment %s", username, comment_id)
                return False
            self.comments.remove(comment_id)
        logger.info("User %s removed comment %s", username, comment_id)
        return True

    def get_comment_by_id(self, comment_id: int) -> Optional[Comment]:
        return self.comments.get(comment_id)

    def get_all_comments(self) -> List[Comment]:
        return self.comments.all_values()

    def search_contents(self, pattern: str) -> SearchResult:
        return search_items(self.comments.all_values(), pattern, lambda comment: comment.content)

    def count(self) -> int:
        return len(self.comments)
