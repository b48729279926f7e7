"""
auth/service.py -- Login, Register and IsAdmin.

AuthService owns every business-error decision. Storage, bcrypt and jose
failures come in as their own exception types and leave as one of the
categories in auth/errors.py, chained with `from err`.

Step order is strict and every step short-circuits:

  login:    user(email) -> verify_password -> app(app_id) -> new_token
  register: hash_password -> save_user
  is_admin: is_admin(user_id)

Unknown email and wrong password both raise InvalidCredentialsError. The
logs keep them apart (warning vs info) for operators; the caller cannot.
When the email is unknown a bcrypt comparison still runs against a dummy
digest so the two cases also take the same time.

bcrypt is CPU-bound and deliberately slow. It runs via asyncio.to_thread so
a login never stalls the event loop. asyncio.CancelledError is never caught
here; cancelling the calling task aborts the operation at its current await.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from auth.errors import InfrastructureError, InvalidCredentialsError, NotFoundError, UserExistsError
from auth.interfaces import AppProvider, UserProvider, UserSaver
from auth.passwords import DEFAULT_ROUNDS, HashingError, burn_verify, hash_password, verify_password
from auth.tokens import TokenError, new_token
from core.log import with_fields
from storage import errors as storage_errors

logger = logging.getLogger("sso.auth")


class AuthService:
    def __init__(
        self,
        user_saver: UserSaver,
        user_provider: UserProvider,
        app_provider: AppProvider,
        token_ttl: timedelta,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self._user_saver = user_saver
        self._user_provider = user_provider
        self._app_provider = app_provider
        self._token_ttl = token_ttl
        self._bcrypt_rounds = bcrypt_rounds

    async def login(self, email: str, password: str, app_id: int) -> str:
        """Check credentials and return a token signed for the given app.

        Raises:
            InvalidCredentialsError: unknown email or wrong password.
            NotFoundError: app_id does not name a registered app.
            InfrastructureError: storage, bcrypt, or signing failure.
        """
        op = "Auth.Login"
        log = with_fields(logger, op=op, email=email)

        log.info("attempting to login user")

        try:
            user = await self._user_provider.user(email)
        except storage_errors.UserNotFoundError as err:
            await asyncio.to_thread(burn_verify, password)
            log.warning("user not found")
            raise InvalidCredentialsError(op) from err
        except storage_errors.StorageError as err:
            log.error("failed to get user: %s", err)
            raise InfrastructureError(op, "failed to get user") from err

        try:
            matches = await asyncio.to_thread(verify_password, password, user.pass_hash)
        except HashingError as err:
            log.error("failed to compare password hash: %s", err)
            raise InfrastructureError(op, "failed to compare password hash") from err
        if not matches:
            log.info("invalid credentials")
            raise InvalidCredentialsError(op)

        try:
            app = await self._app_provider.app(app_id)
        except storage_errors.AppNotFoundError as err:
            log.error("app not found: app_id=%s", app_id)
            raise NotFoundError(op, f"app {app_id} not found") from err
        except storage_errors.StorageError as err:
            log.error("failed to get app: %s", err)
            raise InfrastructureError(op, "failed to get app") from err

        try:
            token = new_token(user, app, self._token_ttl)
        except TokenError as err:
            log.error("failed to create token: %s", err)
            raise InfrastructureError(op, "failed to create token") from err

        log.bind(user_id=user.id, app_id=app.id).info("user logged in successfully")
        return token

    async def register(self, email: str, password: str) -> int:
        """Store a new user and return its id.

        Uniqueness of the email is enforced by storage; a duplicate raises
        UserExistsError and the existing user is left as it was.
        """
        op = "Auth.Register"
        log = with_fields(logger, op=op, email=email)

        log.info("attempting to register user")

        try:
            pass_hash = await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)
        except HashingError as err:
            log.error("failed to hash password: %s", err)
            raise InfrastructureError(op, "failed to hash password") from err

        try:
            user_id = await self._user_saver.save_user(email, pass_hash)
        except storage_errors.UserExistsError as err:
            log.warning("user already exists")
            raise UserExistsError(op) from err
        except storage_errors.StorageError as err:
            log.error("failed to save user: %s", err)
            raise InfrastructureError(op, "failed to save user") from err

        log.bind(user_id=user_id).info("user registered")
        return user_id

    async def is_admin(self, user_id: int) -> bool:
        op = "Auth.IsAdmin"
        log = with_fields(logger, op=op, user_id=user_id)

        log.info("checking if user is admin")

        try:
            is_admin = await self._user_provider.is_admin(user_id)
        except storage_errors.UserNotFoundError as err:
            log.warning("user not found")
            raise NotFoundError(op, f"user {user_id} not found") from err
        except storage_errors.StorageError as err:
            log.error("failed to check if user is admin: %s", err)
            raise InfrastructureError(op, "failed to check if user is admin") from err

        log.bind(is_admin=is_admin).info("checked if user is admin")
        return is_admin
