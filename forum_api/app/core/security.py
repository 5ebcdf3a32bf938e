"""
Password hashing helpers.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a random 16-byte salt.
The stored digest has the form ``pbkdf2_sha256$<iterations>$<salt>$<hash>``
(salt and hash in hex) so that verification keeps working after the
configured iteration count changes.  The rest of the code treats the
digest as opaque and only ever calls ``hash_password`` and
``verify_password``.
"""

import hashlib
import hmac
import os
from typing import Optional

from .config import settings

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    Parameters
    ----------
    password : str
        The plain text password to hash.
    iterations : Optional[int]
        Number of PBKDF2 rounds.  Defaults to
        ``settings.password_hash_iterations``.

    Returns
    -------
    str
        The self-describing digest string.
    """
    rounds = iterations or settings.password_hash_iterations
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return f"{_ALGORITHM}${rounds}${salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a digest from ``hash_password``.

    Returns ``False`` for malformed digests instead of raising, so a
    corrupted record behaves like a wrong password.
    """
    try:
        algorithm, rounds, salt_hex, hash_hex = hashed_password.split("$", 3)
        if algorithm != _ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
        dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, int(rounds))
    except (AttributeError, ValueError):
        return False
    return hmac.compare_digest(dk, stored_hash)
