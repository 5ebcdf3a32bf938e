"""
Business logic for posts.

Posts get ids from an ``IdentifierAllocator`` seeded from the post
store.  Removing a post also removes its comments.  That cascade holds
the comment store's lock and then the post store's lock (always in this
order, so it cannot deadlock with another cascade), which makes it
all-or-nothing for concurrent readers.  It is recorded in the
``CascadeJournal`` so a crash between the two snapshot writes is
repaired by ``recover_pending_cascades`` at the next start.
"""

import logging
import time
from typing import Callable, List, Optional

from ..core.authorization import can_edit_owned, can_remove_owned
from ..core.errors import StorageError
from ..core.journal import CascadeJournal
from ..core.storage import IdentifierAllocator, PersistentMap
from ..schemas.comment import Comment
from ..schemas.post import Post
from ..schemas.search import SearchResult
from .search_service import search_items
from .user_service import UserService

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    return int(time.time() * 1000)


class PostService:
    """Create, edit, remove, fetch and search posts."""

    def __init__(
        self,
        posts: PersistentMap[int, Post],
        comments: PersistentMap[int, Comment],
        users: UserService,
        journal: CascadeJournal,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.posts = posts
        self.comments = comments
        self.users = users
        self.journal = journal
        self.clock = clock or epoch_millis
        self.ids = IdentifierAllocator.from_store(posts, lambda post: post.id)

    def create_post(self, title: str, username: str, content: str) -> Post:
        post = Post(
            id=self.ids.next(),
            title=title,
            author_username=username,
            content=content,
            created_at=self.clock(),
            edited=False,
        )
        self.posts.put(post.id, post)
        logger.info("User %s created post %s", username, post.id)
        return post

    def edit_post(self, post_id: int, title: str, username: str, content: str) -> bool:
        """Only the author may edit; roles grant nothing here."""
        with self.posts.locked():
            post = self.posts.get(post_id)
            if post is None or not can_edit_owned(post.author_username == username):
                return False
            updated = post.model_copy(update={"title": title, "content": content, "edited": True})
            self.posts.put(post_id, updated)
        logger.info("User %s edited post %s", username, post_id)
        return True

    def remove_post(self, post_id: int, username: str) -> bool:
        """Remove a post and every comment attached to it.

        Allowed for the author, an admin or a moderator.  Returns
        ``False`` when the post does not exist or the requester is not
        allowed.
        """
        # Looked up before taking the post/comment locks so the user
        # store's lock is never held while waiting on them.
        role = self.users.get_role(username)
        with self.comments.locked(), self.posts.locked():
            post = self.posts.get(post_id)
            if post is None:
                return False
            if not can_remove_owned(role, post.author_username == username):
                logger.info("User %s is not allowed to remove post %s", username, post_id)
                return False
            self.journal.begin(post_id)
            try:
                removed = self.comments.remove_where(lambda comment: comment.post_id == post_id)
            except StorageError:
                # Nothing was written; drop the journal entry again.
                self.journal.complete(post_id)
                raise
            try:
                self.posts.remove(post_id)
            except StorageError:
                logger.error(
                    "Post %s lost %d comments but the post itself was not removed; "
                    "cascade left in journal for recovery",
                    post_id,
                    len(removed),
                )
                raise
            self.journal.complete(post_id)
        logger.info("User %s removed post %s and %d comments", username, post_id, len(removed))
        return True

    def recover_pending_cascades(self) -> List[int]:
        """Finish cascades interrupted by a crash; return their post ids."""
        recovered = []
        for post_id in self.journal.pending():
            with self.comments.locked(), self.posts.locked():
                removed = self.comments.remove_where(lambda comment: comment.post_id == post_id)
                self.posts.remove(post_id)
                self.journal.complete(post_id)
            logger.warning(
                "Recovered interrupted cascade for post %s (%d comments removed)", post_id, len(removed)
            )
            recovered.append(post_id)
        return recovered

    def get_post_by_id(self, post_id: int) -> Optional[Post]:
        return self.posts.get(post_id)

    def get_all_posts(self) -> List[Post]:
        return self.posts.all_values()

    def get_post_comments(self, post_id: int) -> List[Comment]:
        return [comment for comment in self.comments.all_values() if comment.post_id == post_id]

    def search_titles(self, pattern: str) -> SearchResult:
        return search_items(self.posts.all_values(), pattern, lambda post: post.title)

    def search_contents(self, pattern: str) -> SearchResult:
        return search_items(self.posts.all_values(), pattern, lambda post: post.content)

    def count(self) -> int:
        return len(self.posts)
