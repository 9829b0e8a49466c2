"""
Access guard: turn a bearer credential into a verified identity.

Tokens are HS256 JWTs issued by the login flow with the user id in "sub" (older tokens use
"_id") and the display name in "displayName". Issuing tokens is not this service's job.
"""
import logging
from dataclasses import dataclass

import jwt

from app.config import settings
from app.core.errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    display_name: str


def resolve_identity(
    credential: str | None,
    *,
    secret: str | None = None,
    algorithm: str | None = None,
) -> Identity:
    """Verify credential and return who it belongs to. Raises Unauthenticated if missing, invalid or expired."""
    token = (credential or "").strip()
    if not token:
        raise Unauthenticated()
    key = secret if secret is not None else settings.jwt_secret
    if not key:
        logger.warning("JWT_SECRET is not configured; rejecting all credentials")
        raise Unauthenticated()
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=[algorithm or settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise Unauthenticated("Your login has expired. Please log in again.") from e
    except jwt.InvalidTokenError as e:
        raise Unauthenticated() from e
    user_id = claims.get("sub") or claims.get("_id")
    display_name = claims.get("displayName")
    if not isinstance(user_id, str) or not user_id or not isinstance(display_name, str) or not display_name:
        raise Unauthenticated()
    return Identity(user_id=user_id, display_name=display_name)
