"""
Utility functions for the auth module.
"""

import hashlib
import hmac

HASH_PREFIX = "sha256:"


def hash_password(password: str) -> str:
    """
    Return the stored form of a password: "sha256:" + hex digest.

    Note:
        This is only for demo purposes.
        In production, use a strong hashing library such as passlib[bcrypt].
    """
    return HASH_PREFIX + hashlib.sha256(password.encode()).hexdigest()


def verify_password(stored: str, password: str) -> bool:
    """Compare against a plain-text (demo) or "sha256:" stored password in constant time."""
    candidate = hash_password(password) if stored.startswith(HASH_PREFIX) else password
    return hmac.compare_digest(stored.encode(), candidate.encode())
