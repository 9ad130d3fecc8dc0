"""Verification of access tokens issued by the platform's auth server."""

from __future__ import annotations

from typing import Any

import jwt

from ..config import get_settings

ACCESS_TOKEN_AUDIENCE = "authenticated"


def decode_access_token(token: str, secret: str | None = None) -> dict[str, Any]:
    """Decode and verify a platform access token returning its payload.

    Parameters
    ----------
    token:
        Encoded JWT from the ``Authorization`` header of a signed-in user.
    secret:
        HS256 signing secret; defaults to the project's configured JWT secret.

    Returns
    -------
    dict[str, Any]
        The decoded payload if signature, expiry and audience checks succeed.

    Raises
    ------
    jwt.PyJWTError
        Propagated when the token is invalid, expired, or meant for another audience.
    """

    signing_secret = secret if secret is not None else get_settings().supabase_jwt_secret
    return jwt.decode(
        token,
        signing_secret,
        algorithms=["HS256"],
        audience=ACCESS_TOKEN_AUDIENCE,
        options={"require": ["sub", "exp"]},
    )


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
