"""
auth/passwords.py -- Password hashing (bcrypt).

Security design decisions:
  bcrypt is the right choice for low-entropy secrets (passwords) because its
  cost factor makes brute-force expensive. Every digest embeds its own random
  salt, so hashing the same password twice yields different bytes that both
  verify.

  bcrypt only looks at the first 72 bytes of its input, and bcrypt 5.x refuses
  longer input outright. hash_password() rejects such passwords with
  HashingError on every bcrypt version so nothing is silently truncated.
  verify_password() answers False for them: no stored digest can match.

  A wrong password is NOT an exception. verify_password() returns False for
  it. A digest bcrypt cannot parse is an infrastructure fault and raises
  HashingError, so callers never mistake a corrupt row for a bad password.

  The _DUMMY_HASH constant enables timing equalization in the login flow so
  response time does not reveal whether an email is registered.

Layer rule: no imports from api/, core/, or storage/.
"""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12

_MAX_PASSWORD_BYTES = 72


class HashingError(Exception):
    """bcrypt could not hash the input or could not parse a stored digest."""


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> bytes:
    """Return a salted bcrypt digest of the given plaintext password."""
    secret = plain.encode("utf-8")
    if len(secret) > _MAX_PASSWORD_BYTES:
        raise HashingError(f"password exceeds {_MAX_PASSWORD_BYTES} bytes")
    try:
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds))
    except ValueError as err:
        raise HashingError(str(err)) from err


def verify_password(plain: str, digest: bytes) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    Raises HashingError when the digest itself is malformed.
    """
    secret = plain.encode("utf-8")
    if len(secret) > _MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, digest)
    except (ValueError, TypeError) as err:
        raise HashingError(f"malformed password digest: {err}") from err


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. The login flow verifies against it when the
# email is unknown, so both failure paths pay the same bcrypt cost.
_DUMMY_HASH: bytes = hash_password("sso_timing_dummy")


def burn_verify(plain: str) -> None:
    """Run a full bcrypt comparison against the dummy digest and discard the result."""
    verify_password(plain, _DUMMY_HASH)
