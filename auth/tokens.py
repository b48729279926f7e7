"""
auth/tokens.py -- Session token issuance (JWT via python-jose).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry uid, email, app_id, iat and exp
       and are signed with the secret of the app the user is signing in to.
       A token minted for app A therefore fails signature checks made with
       app B's secret.

  Tokens are stateless bearer credentials. Nothing is persisted at issue
       time; validity is signature plus exp. Verification lives in the
       consuming services, not here.

  Signing failures raise TokenError. The caller decides how to surface them;
       this module never returns an empty or unsigned token.

Layer rule: no imports from api/, core/, or storage/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JOSEError, jwt

if TYPE_CHECKING:
    from auth.models import App, User

ALGORITHM = "HS256"


class TokenError(Exception):
    """The token could not be signed (missing or invalid key material)."""


def new_token(user: User, app: App, ttl: timedelta) -> str:
    """Encode a signed JWT binding the user to the app until now + ttl.

    Args:
        user: Authenticated user; id and email become the uid/email claims.
        app:  Target application; id becomes app_id, secret is the HS256 key.
        ttl:  Token lifetime. exp is computed from the same instant as iat.
    """
    if not app.secret:
        raise TokenError(f"app {app.id} has no signing secret")

    issued_at = datetime.now(timezone.utc)
    claims = {
        "uid": user.id,
        "email": user.email,
        "app_id": app.id,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    try:
        return jwt.encode(claims, app.secret, algorithm=ALGORITHM)
    except JOSEError as err:
        raise TokenError(f"failed to sign token for app {app.id}: {err}") from err
