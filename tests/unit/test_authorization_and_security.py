import pytest

from forum_api.app.core.authorization import can_edit_owned, can_edit_user, can_remove_owned, can_remove_user
from forum_api.app.core.security import hash_password, verify_password
from forum_api.app.schemas.user import Role


def test_only_owner_edits_content():
    assert can_edit_owned(True)
    assert not can_edit_owned(False)


@pytest.mark.parametrize(
    "role, is_owner, expected",
    [
        (Role.USER, True, True),
        (Role.USER, False, False),
        (Role.MODERATOR, False, True),
        (Role.ADMIN, False, True),
        (None, False, False),
        (None, True, True),
    ],
)
def test_remove_owned(role, is_owner, expected):
    assert can_remove_owned(role, is_owner) is expected


@pytest.mark.parametrize("check", [can_edit_user, can_remove_user])
def test_user_record_rules(check):
    assert check(Role.ADMIN, False, False)
    assert check(Role.USER, True, True)
    assert not check(Role.USER, True, False)
    assert not check(Role.MODERATOR, False, True)
    assert not check(None, False, False)


def test_password_digest_round_trip():
    digest = hash_password("s3cret", iterations=1000)
    assert digest.startswith("pbkdf2_sha256$1000$")
    assert "s3cret" not in digest
    assert verify_password("s3cret", digest)
    assert not verify_password("wrong", digest)


def test_salts_differ():
    assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)


@pytest.mark.parametrize("digest", ["", "plain", "md5$1$aa$bb", "pbkdf2_sha256$x$zz$zz"])
def test_malformed_digest_never_verifies(digest):
    assert not verify_password("anything", digest)
