"""Dependency injection for FastAPI."""

import hmac
from collections.abc import AsyncGenerator

from fastapi import Header, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from xpot_draw.config import settings
from xpot_draw.db.engine import async_session_factory
from xpot_draw.errors import Forbidden, NotConfigured, Unauthorized

ADMIN_HEADER = "x-admin-token"
INTERNAL_HEADER = "x-xpot-internal-key"
USER_HEADER = "x-user-id"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for request scope."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _matches(incoming: str | None, expected: str) -> bool:
    if not incoming:
        return False
    return hmac.compare_digest(incoming.encode(), expected.encode())


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def require_admin(
    x_admin_token: str | None = Header(None, alias=ADMIN_HEADER),
    authorization: str | None = Header(None),
) -> None:
    """Allow the request only with the configured admin token.

    Accepts ``x-admin-token: <token>`` or ``Authorization: Bearer <token>``.
    An unset ``ADMIN_TOKEN`` denies everything.
    """
    expected = settings.ADMIN_TOKEN
    if not expected:
        logger.warning("ADMIN_TOKEN is not set; admin endpoints are disabled")
        raise NotConfigured("ADMIN_TOKEN_NOT_CONFIGURED")

    incoming = x_admin_token or _bearer_token(authorization)
    if not _matches(incoming, expected):
        raise Unauthorized("UNAUTHORIZED")


async def require_internal_key(
    x_internal_key: str | None = Header(None, alias=INTERNAL_HEADER),
) -> None:
    expected = settings.INTERNAL_CRON_KEY
    if not expected or not _matches(x_internal_key, expected):
        raise Unauthorized("UNAUTHORIZED")


async def require_dev(secret: str | None = Query(None)) -> None:
    """Gate for destructive development routes."""
    if settings.APP_ENV != "development":
        raise Forbidden("RESET_DISABLED_IN_PROD")
    expected = settings.DEV_RESET_SECRET
    if not expected or not _matches(secret, expected):
        raise Unauthorized("BAD_SECRET")


async def current_user_id(
    x_user_id: str | None = Header(None, alias=USER_HEADER),
) -> str:
    """External user id forwarded by the identity proxy."""
    if not x_user_id:
        raise Unauthorized("UNAUTHENTICATED")
    return x_user_id
