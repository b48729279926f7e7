"""
core/log.py -- Logging setup and per-call structured fields.

configure_logging() is called once by the entry points (api/main.py, main.py).
Library modules only ever call logging.getLogger("sso.<area>").

with_fields() returns a LoggerAdapter carrying call-scoped fields such as the
operation name and the email being processed. The adapter is created at the
top of each service call and passed explicitly; nothing is stored on the
module-level logger, so concurrent calls never see each other's fields.

Fields are rendered as key=value pairs after the message:
    2024-05-01 10:00:00 INFO  sso.auth attempting to login user op=Auth.Login email=a@x.com

Never pass passwords, digests, or tokens as fields.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "local": logging.DEBUG,
    "dev": logging.DEBUG,
    "prod": logging.INFO,
}


def configure_logging(env: str) -> None:
    """Configure the root logger for the given environment name."""
    logging.basicConfig(
        level=_LEVELS.get(env, logging.INFO),
        format=_FORMAT,
        datefmt=_DATEFMT,
    )


class FieldsAdapter(logging.LoggerAdapter):
    """LoggerAdapter that appends its extra fields to every message as key=value."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        fields = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return (f"{msg} {fields}" if fields else msg), kwargs

    def bind(self, **fields: Any) -> FieldsAdapter:
        """Return a new adapter with additional fields; this one is left unchanged."""
        return FieldsAdapter(self.logger, {**self.extra, **fields})


def with_fields(logger: logging.Logger, **fields: Any) -> FieldsAdapter:
    return FieldsAdapter(logger, fields)
