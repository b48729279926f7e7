"""
auth/errors.py -- Error categories raised by AuthService.

Callers (the HTTP routes) branch on the exception class, never on message
text. Every error carries the name of the failing operation in `op` and is
raised with `from err` so the underlying storage, bcrypt, or jose exception
stays available in logs.

  InvalidCredentialsError -- unknown email OR wrong password. One category
      for both so responses cannot be used to enumerate registered emails.
  NotFoundError           -- a referenced app or user does not exist.
  InfrastructureError     -- storage, hashing, or signing failed.
  UserExistsError         -- email already registered (constraint failure,
      an InfrastructureError subclass).
"""

from __future__ import annotations


class AuthServiceError(Exception):
    code = "internal_error"

    def __init__(self, op: str, message: str) -> None:
        super().__init__(f"{op}: {message}")
        self.op = op
        self.message = message


class InvalidCredentialsError(AuthServiceError):
    code = "invalid_credentials"

    def __init__(self, op: str) -> None:
        super().__init__(op, "invalid credentials")


class NotFoundError(AuthServiceError):
    code = "not_found"


class InfrastructureError(AuthServiceError):
    code = "internal_error"


class UserExistsError(InfrastructureError):
    code = "user_exists"

    def __init__(self, op: str) -> None:
        super().__init__(op, "user already exists")
