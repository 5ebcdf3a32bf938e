import os

# Keep password hashing cheap; must be set before the config module is
# imported, since ``settings`` is read once.
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from forum_api.app.container import build_container
from forum_api.app.core.config import Settings
from forum_api.app.schemas.user import Role
from forum_api.app.server.dispatcher import RequestDispatcher


@pytest.fixture
def forum_settings(tmp_path):
    return Settings(data_dir=str(tmp_path / "data"), password_hash_iterations=1000, http_enabled=False)


@pytest.fixture
def container(forum_settings):
    return build_container(forum_settings)


@pytest.fixture
def users(container):
    return container.users


@pytest.fixture
def posts(container):
    return container.posts


@pytest.fixture
def comments(container):
    return container.comments


@pytest.fixture
def dispatcher(container):
    return RequestDispatcher(container)


@pytest.fixture
def seeded(users):
    """Admin, moderator and two plain users; passwords equal the names."""
    users.create_user("admin", "admin", role=Role.ADMIN)
    users.create_user("mod", "mod", role=Role.MODERATOR)
    users.create_user("alice", "alice")
    users.create_user("bob", "bob")
    return users
