"""
storage/errors.py -- Exceptions raised by the storage gateway.

StorageError is the base for every storage failure, including connectivity
problems. The subclasses are the outcomes callers are expected to branch on.
"""


class StorageError(Exception):
    """Base class for storage gateway failures."""


class UserExistsError(StorageError):
    """An insert hit the UNIQUE(email) constraint."""


class UserNotFoundError(StorageError):
    """No user matched the lookup key."""


class AppExistsError(StorageError):
    """An insert hit the UNIQUE(name) constraint on apps."""


class AppNotFoundError(StorageError):
    """No app matched the lookup key."""
