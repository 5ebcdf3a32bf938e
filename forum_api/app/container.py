"""
Wiring of stores and services.

``build_container`` creates one ``PersistentMap`` per entity type inside
the configured data directory and hands the same instances to every
service that needs them; the lock ordering used by post cascades relies
on the post and comment services sharing one comment store.  Pending
cascades from a previous run are finished before the container is
returned.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .core.config import Settings, settings as default_settings
from .core.journal import CascadeJournal
from .core.storage import PersistentMap
from .schemas.comment import Comment
from .schemas.post import Post
from .schemas.user import User
from .services.comment_service import CommentService
from .services.post_service import PostService
from .services.user_service import UserService

logger = logging.getLogger(__name__)

USERS_FILE = "users.json"
POSTS_FILE = "posts.json"
COMMENTS_FILE = "comments.json"
JOURNAL_FILE = "cascade_journal.json"


@dataclass
class ServiceContainer:
    settings: Settings
    users: UserService
    posts: PostService
    comments: CommentService


def build_container(config: Optional[Settings] = None) -> ServiceContainer:
    config = config or default_settings
    data_dir = config.get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    user_store = PersistentMap(data_dir / USERS_FILE, User, str)
    post_store = PersistentMap(data_dir / POSTS_FILE, Post, int)
    comment_store = PersistentMap(data_dir / COMMENTS_FILE, Comment, int)
    journal = CascadeJournal(data_dir / JOURNAL_FILE)

    users = UserService(user_store, iterations=config.password_hash_iterations)
    posts = PostService(post_store, comment_store, users, journal)
    comments = CommentService(comment_store, users)

    recovered = posts.recover_pending_cascades()
    if recovered:
        logger.warning("Finished %d interrupted post removals: %s", len(recovered), recovered)
    logger.info("Loaded data from %s", data_dir)
    return ServiceContainer(settings=config, users=users, posts=posts, comments=comments)
