"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). The storage gateway
builds these from rows; the service and the token issuer only read them.

Layer rule: no imports from api/, core/, or storage/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """A registered identity.

    pass_hash is the bcrypt digest produced by auth.passwords.hash_password().
    The plaintext password is never held on this object.
    """

    id: int
    email: str
    pass_hash: bytes
    is_admin: bool = False


@dataclass(frozen=True)
class App:
    """A client application that users sign in to.

    secret is the HS256 key used to sign tokens minted for this app, so a
    token issued for one app does not verify under another app's secret.
    """

    id: int
    name: str
    secret: str
