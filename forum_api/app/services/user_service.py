"""
Business logic for users.

Users are keyed by username.  Passwords are stored as digests produced
by ``core.security``; raw passwords never reach the store.  Every
check-then-write sequence runs inside the user store's critical
section, so two concurrent signups with the same name cannot both win.
"""

import logging
from typing import Optional

from ..core.authorization import can_edit_user, can_remove_user
from ..core.security import hash_password, verify_password
from ..core.storage import PersistentMap
from ..schemas.user import Role, User

logger = logging.getLogger(__name__)


class UserService:
    """Signup, credential checks and admin/self management of users."""

    def __init__(self, users: PersistentMap[str, User], iterations: Optional[int] = None) -> None:
        self.users = users
        # PBKDF2 rounds for new digests; ``None`` uses the global setting.
        self.iterations = iterations

    def create_user(self, username: str, raw_password: str, role: Role = Role.USER) -> bool:
        """Register ``username``; return ``False`` if the name is taken.

        The existing record, if any, is left untouched.
        """
        digest = hash_password(raw_password, iterations=self.iterations)
        user = User(username=username, password_digest=digest, role=role)
        created = self.users.put_if_absent(username, user)
        if created:
            logger.info("Registered user %s with role %s", username, role.value)
        else:
            logger.info("Signup rejected: username %s already exists", username)
        return created

    def edit_user(
        self,
        editor_name: str,
        username: str,
        old_raw_password: str,
        new_raw_password: str,
        new_role: Role,
    ) -> bool:
        """Replace a user's password and role.

        Allowed for an admin editor, or for the user itself when
        ``old_raw_password`` matches.  Returns ``False`` when the target
        does not exist or the editor is not allowed.
        """
        new_digest = hash_password(new_raw_password, iterations=self.iterations)
        with self.users.locked():
            target = self.users.get(username)
            if target is None:
                return False
            editor = self.users.get(editor_name)
            editor_role = editor.role if editor else None
            editor_is_target = editor is not None and editor.username == username
            verifies = editor_is_target and verify_password(old_raw_password, target.password_digest)
            if not can_edit_user(editor_role, editor_is_target, verifies):
                logger.info("User %s is not allowed to edit %s", editor_name, username)
                return False
            self.users.put(username, User(username=username, password_digest=new_digest, role=new_role))
        logger.info("User %s edited by %s", username, editor_name)
        return True

    def remove_user(self, remover_name: str, username: str, raw_password: str) -> bool:
        """Delete a user; same permission rules as ``edit_user``."""
        with self.users.locked():
            target = self.users.get(username)
            if target is None:
                return False
            remover = self.users.get(remover_name)
            remover_role = remover.role if remover else None
            remover_is_target = remover is not None and remover.username == username
            verifies = remover_is_target and verify_password(raw_password, target.password_digest)
            if not can_remove_user(remover_role, remover_is_target, verifies):
                logger.info("User %s is not allowed to remove %s", remover_name, username)
                return False
            self.users.remove(username)
        logger.info("User %s removed by %s", username, remover_name)
        return True

    def authenticate(self, username: str, raw_password: str) -> bool:
        user = self.users.get(username)
        if user is None:
            return False
        return verify_password(raw_password, user.password_digest)

    def get_user(self, username: str, raw_password: str) -> Optional[User]:
        """Return the record only when the credentials are correct."""
        user = self.users.get(username)
        if user is None or not verify_password(raw_password, user.password_digest):
            return None
        return user

    def get_role(self, username: str) -> Optional[Role]:
        user = self.users.get(username)
        return user.role if user else None

    def count(self) -> int:
        return len(self.users)
