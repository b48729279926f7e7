"""Storage capabilities consumed by AuthService.

Each protocol covers one narrow capability so the service depends only on
what it calls. A single storage object may implement all three; they are
still passed to AuthService separately.

Implementations raise the exceptions from storage.errors: UserNotFoundError,
AppNotFoundError, UserExistsError, or StorageError for anything else.
"""

from __future__ import annotations

from typing import Protocol

from auth.models import App, User


class UserSaver(Protocol):
    """Persists new users."""

    async def save_user(self, email: str, pass_hash: bytes) -> int:
        """Insert a user and return its assigned id. Raises UserExistsError on a duplicate email."""
        ...


class UserProvider(Protocol):
    """Reads users and their admin flag."""

    async def user(self, email: str) -> User:
        """Return the user with this email. Raises UserNotFoundError."""
        ...

    async def is_admin(self, user_id: int) -> bool:
        """Return the stored admin flag. Raises UserNotFoundError."""
        ...


class AppProvider(Protocol):
    """Reads registered client applications."""

    async def app(self, app_id: int) -> App:
        """Return the app with this id. Raises AppNotFoundError."""
        ...
