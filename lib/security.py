# =============================================================================
# lib/security.py - Password Hashing and Paste Identifiers
# =============================================================================
# Paste passwords are hashed with Argon2id (salted, memory-hard) and never
# stored in plaintext. Paste ids are short URL-safe random tokens.
#
# Usage:
#   from lib.security import PasswordHasher, generate_paste_id
#   digest = PasswordHasher().hash("hunter2")
#   PasswordHasher().verify("hunter2", digest)  # True
# =============================================================================

import logging
import secrets

from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError

logger = logging.getLogger(__name__)

# 8 random bytes -> 11 base64url characters, 64 bits of entropy
DEFAULT_ID_BYTES = 8


def generate_paste_id(nbytes: int = DEFAULT_ID_BYTES) -> str:
    """
    Generate a short, URL-safe, collision-resistant paste identifier.

    Args:
        nbytes: Random bytes to draw from the OS CSPRNG

    Returns:
        Base64url token without padding (11 chars for the default 8 bytes)
    """
    return secrets.token_urlsafe(nbytes)


class PasswordHasher:
    """
    One-way password hashing for protected pastes.

    Thin wrapper around argon2-cffi that exposes the two calls the paste
    service needs and turns every verification failure into False.
    """

    def __init__(self, time_cost: int = 3, memory_cost: int = 65536, parallelism: int = 4):
        self._hasher = _Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a plaintext password. Every call uses a fresh salt."""
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a plaintext password against a stored digest."""
        try:
            return self._hasher.verify(digest, plaintext)
        except VerificationError:
            return False
        except InvalidHashError:
            logger.warning("Stored password digest is not a valid Argon2 hash")
            return False
