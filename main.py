#!/usr/bin/env python3
"""
SSO service command line.

Usage:
  python main.py serve
  python main.py serve --port 8080
  python main.py add-app --name billing --secret "$(openssl rand -hex 32)"

Environment variables (see core/config.py):
  ENV                 local | dev | prod (log level)
  DATABASE_URL        SQLAlchemy URL of the user/app database
  TOKEN_TTL_SECONDS   lifetime of issued tokens
  BCRYPT_ROUNDS       bcrypt cost factor
  HOST, PORT          HTTP listen address for `serve`
"""

import argparse
import asyncio
import sys

from core.config import get_settings
from core.log import configure_logging
from storage.errors import StorageError
from storage.sqlite import Storage

_MIN_SECRET_LENGTH = 32


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level="info",
    )
    return 0


def _add_app(args: argparse.Namespace) -> int:
    """Register a client application and print its id.

    Tokens for the app are signed with the given secret, so it needs the same
    entropy as any HS256 key.
    """
    if len(args.secret) < _MIN_SECRET_LENGTH:
        print(f"  [!] --secret must be at least {_MIN_SECRET_LENGTH} characters.", file=sys.stderr)
        return 2

    storage = Storage(get_settings().database_url)
    try:
        app_id = asyncio.run(storage.save_app(args.name, args.secret))
    except StorageError as e:
        print(f"  [!] Could not register app '{args.name}': {e}", file=sys.stderr)
        return 1
    finally:
        storage.close()

    print(f"  App '{args.name}' registered with id {app_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sso", description="Single sign-on authentication service.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Listen address (default: HOST setting).")
    serve.add_argument("--port", type=int, default=None, help="Listen port (default: PORT setting).")
    serve.set_defaults(func=_serve)

    add_app = sub.add_parser("add-app", help="Register a client application.")
    add_app.add_argument("--name", required=True, help="Unique application name.")
    add_app.add_argument("--secret", required=True, help="Token signing secret (min 32 characters).")
    add_app.set_defaults(func=_add_app)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().env)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
