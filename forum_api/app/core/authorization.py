"""
Authorization rules for mutating operations.

Pure predicates with no side effects.  Services look up the facts
(roles, ownership, password checks) and ask these functions for the
decision, so the whole permission matrix lives in one place:

* posts and comments can be edited only by their author;
* posts and comments can be removed by their author, an admin or a
  moderator;
* a user record can be edited or removed by an admin, or by the user
  itself after confirming its current password.
"""

from typing import Optional

from ..schemas.user import Role

_MODERATING_ROLES = frozenset({Role.ADMIN, Role.MODERATOR})


def can_edit_owned(actor_is_owner: bool) -> bool:
    return actor_is_owner


def can_remove_owned(actor_role: Optional[Role], actor_is_owner: bool) -> bool:
    """``actor_role`` is ``None`` when the requester is not a known user."""
    return actor_is_owner or actor_role in _MODERATING_ROLES


def can_edit_user(editor_role: Optional[Role], editor_is_target: bool, old_password_verifies: bool) -> bool:
    return editor_role == Role.ADMIN or (editor_is_target and old_password_verifies)


def can_remove_user(remover_role: Optional[Role], remover_is_target: bool, password_verifies: bool) -> bool:
    return remover_role == Role.ADMIN or (remover_is_target and password_verifies)
