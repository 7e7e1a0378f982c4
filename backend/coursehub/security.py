"""
CourseHub Backend: Authentication & Role Checks
===============================================

What:  Bearer-token authentication and role-based route guards.
How:   Tokens are HS256 JWTs whose `sub` claim is the user's UUID. The
       LMS login service issues them with the shared JWT_SECRET_KEY;
       `create_access_token` mints the same shape for operators and tests.
Who:   `get_current_user` is a dependency of every forum, chat and
       notification route; `require_roles` guards instructor-only routes.

Failure modes:
    no / malformed / expired token, unknown user  → 401 AuthenticationError
    authenticated but wrong role                  → 403 PermissionDeniedError
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coursehub.config import settings
from coursehub.database import get_db_session
from coursehub.exceptions import AuthenticationError, PermissionDeniedError
from coursehub.models.user import User

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our 401 envelope instead of
# FastAPI's bare 403
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(
    user: User,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Mint a signed access token for `user`."""
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload: Dict[str, Any] = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": expires,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Validate signature and expiry, return the user id from `sub`.

    Raises:
        AuthenticationError: expired, tampered, or structurally invalid token
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug("Rejected token: %s", e)
        raise AuthenticationError(message="Invalid token")

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise AuthenticationError(message="Invalid token")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    FastAPI dependency resolving the bearer token to a `User` row.

    The session is the request's own session (FastAPI caches dependencies
    per request), so the returned user can be compared and related to
    objects loaded later in the same handler.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authorized, no token provided")

    user_id = decode_access_token(credentials.credentials)
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise AuthenticationError(message="User belonging to this token no longer exists")
    return user


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.put("/{post_id}/pin")
        async def pin(..., user: User = Depends(require_roles(UserRole.INSTRUCTOR))):
    """

    async def checker(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(*roles):
            raise PermissionDeniedError(
                message="Access denied",
                context={"required_roles": [str(getattr(r, "value", r)) for r in roles]},
            )
        return user

    return checker
