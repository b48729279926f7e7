"""
storage/sqlite.py -- SQLAlchemy Core persistence layer for users and apps.

Pattern: Repository + Data Mapper.
Storage is the repository; _row_to_user / _row_to_app are the mappers.
The auth service never touches SQL; it sees Storage only through the
UserSaver / UserProvider / AppProvider protocols in auth/interfaces.py.

Async boundary:
  SQLAlchemy Core calls here are blocking. Every public method runs its
  query through asyncio.to_thread so the event loop keeps serving other
  requests during the round-trip. Cancellation of the awaiting task
  propagates immediately; the worker thread finishes its statement and
  the result is discarded.

Security:
  All queries use bound parameters. No f-strings in SQL.

Error mapping:
  IntegrityError on insert       -> UserExistsError / AppExistsError
  missing row                    -> UserNotFoundError / AppNotFoundError
  any other SQLAlchemyError      -> StorageError
  id outside SQLite INTEGER range -> StorageError
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar

from sqlalchemy import Column, Integer, LargeBinary, MetaData, String, Table, Text, create_engine, event, select, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from auth.models import App, User
from storage.errors import (
    AppExistsError,
    AppNotFoundError,
    StorageError,
    UserExistsError,
    UserNotFoundError,
)

logger = logging.getLogger("sso.storage")

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("pass_hash", LargeBinary, nullable=False),
    Column("is_admin", Integer, nullable=False, server_default="0"),
)

_apps = Table(
    "apps",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("secret", Text, nullable=False),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _is_sqlite_url(db_url: str) -> bool:
    return make_url(db_url).get_backend_name() == "sqlite"


def _is_memory_url(db_url: str) -> bool:
    url = make_url(db_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class Storage:
    """Repository for User and App records.

    Usage:
        storage = Storage("sqlite:///storage/sso.db")
        user_id = await storage.save_user("a@x.com", hash_password("pw123"))
        user = await storage.user("a@x.com")
        storage.close()
    """

    def __init__(self, db_url: str) -> None:
        engine_args: dict[str, Any] = {}
        if _is_sqlite_url(db_url):
            engine_args["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(db_url):
            # One shared connection: otherwise each worker thread would get
            # its own blank in-memory database.
            engine_args["poolclass"] = StaticPool
        self.engine: Engine = create_engine(db_url, **engine_args)
        if _is_sqlite_url(db_url) and not _is_memory_url(db_url):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(fn, *args)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def save_user(self, email: str, pass_hash: bytes) -> int:
        """Insert a new user and return its assigned id.

        Raises UserExistsError if the email is already registered. The
        existing row is left untouched.
        """
        if not email:
            raise StorageError("save_user: email must not be empty")
        if not pass_hash:
            raise StorageError("save_user: password hash must not be empty")
        return await self._run(self._save_user, email, pass_hash)

    def _save_user(self, email: str, pass_hash: bytes) -> int:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_users.insert().values(email=email, pass_hash=pass_hash))
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as err:
            raise UserExistsError(f"user with email {email!r} already exists") from err
        except (SQLAlchemyError, OverflowError) as err:
            raise StorageError(f"save_user: {err}") from err

    async def user(self, email: str) -> User:
        """Look up a user by exact email. Raises UserNotFoundError."""
        return await self._run(self._user, email)

    def _user(self, email: str) -> User:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        except (SQLAlchemyError, OverflowError) as err:
            raise StorageError(f"user: {err}") from err
        if row is None:
            raise UserNotFoundError("user not found")
        return _row_to_user(row)

    async def is_admin(self, user_id: int) -> bool:
        """Return the admin flag for a user id. Raises UserNotFoundError."""
        return await self._run(self._is_admin, user_id)

    def _is_admin(self, user_id: int) -> bool:
        try:
            with self.engine.connect() as conn:
                flag = conn.execute(select(_users.c.is_admin).where(_users.c.id == user_id)).fetchone()
        except (SQLAlchemyError, OverflowError) as err:
            raise StorageError(f"is_admin: {err}") from err
        if flag is None:
            raise UserNotFoundError(f"user {user_id} not found")
        return bool(flag.is_admin)

    # ------------------------------------------------------------------
    # Apps
    # ------------------------------------------------------------------

    async def app(self, app_id: int) -> App:
        """Look up a client application by id. Raises AppNotFoundError."""
        return await self._run(self._app, app_id)

    def _app(self, app_id: int) -> App:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_apps.select().where(_apps.c.id == app_id)).fetchone()
        except (SQLAlchemyError, OverflowError) as err:
            raise StorageError(f"app: {err}") from err
        if row is None:
            raise AppNotFoundError(f"app {app_id} not found")
        return _row_to_app(row)

    async def save_app(self, name: str, secret: str) -> int:
        """Register a client application and return its id.

        Provisioning path for the add-app CLI command; the auth service
        never writes apps.
        """
        return await self._run(self._save_app, name, secret)

    def _save_app(self, name: str, secret: str) -> int:
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_apps.insert().values(name=name, secret=secret))
                conn.commit()
                return result.inserted_primary_key[0]
        except IntegrityError as err:
            raise AppExistsError(f"app {name!r} already exists") from err
        except (SQLAlchemyError, OverflowError) as err:
            raise StorageError(f"save_app: {err}") from err

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        return await self._run(self._ping)

    def _ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        pass_hash=bytes(row.pass_hash),
        is_admin=bool(row.is_admin),
    )


def _row_to_app(row) -> App:
    return App(id=row.id, name=row.name, secret=row.secret)
