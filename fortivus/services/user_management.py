"""
Admin actions on a single user account, applied locally or through the
remote manage-user function.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fortivus.core.config import settings
from fortivus.core.db import get_session_factory
from fortivus.core.errors import Forbidden, NotFound, ValidationFailed
from fortivus.models.user import User
from fortivus.services.remote_functions import FunctionsClient

logger = logging.getLogger(__name__)

ACTIONS = ("ban", "unban", "delete")


class UserManager(Protocol):
    async def apply(self, target_user_id: int, action: str) -> None: ...


async def manage_user(
    db: AsyncSession,
    target_user_id: int,
    action: str,
    acting_user_id: int | None = None,
) -> None:
    if action not in ACTIONS:
        raise ValidationFailed("Invalid action")
    if acting_user_id is not None and acting_user_id == target_user_id:
        raise Forbidden("Cannot perform this action on yourself")

    user = await db.get(User, target_user_id)
    if not user:
        raise NotFound("User not found")

    if action == "ban":
        user.banned_at = datetime.now(timezone.utc)
    elif action == "unban":
        user.banned_at = None
    else:
        # Owned rows go with the user through ON DELETE CASCADE
        await db.delete(user)

    await db.commit()
    logger.info("Applied %s to user %s", action, target_user_id)


class LocalUserManager:
    """Applies each action in its own session so concurrent calls never share one."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        # SQLite has a single write lock; queue local writes instead of racing for it
        self._write_lock = asyncio.Lock()

    async def apply(self, target_user_id: int, action: str) -> None:
        async with self._write_lock, self._session_factory() as db:
            await manage_user(db, target_user_id, action)


class HttpUserManager:
    def __init__(self, client: FunctionsClient):
        self._client = client

    async def apply(self, target_user_id: int, action: str) -> None:
        await self._client.invoke("manage-user", {"targetUserId": target_user_id, "action": action})


def get_user_manager(session_factory: async_sessionmaker[AsyncSession] | None = None) -> UserManager:
    if settings.FUNCTIONS_BASE_URL:
        return HttpUserManager(
            FunctionsClient(
                settings.FUNCTIONS_BASE_URL,
                api_key=settings.FUNCTIONS_API_KEY,
                timeout=settings.REMOTE_TIMEOUT_SECONDS,
            )
        )
    return LocalUserManager(session_factory or get_session_factory())


async def list_users(
    db: AsyncSession,
    *,
    search: str | None = None,
    banned: bool | None = None,
    is_admin: bool | None = None,
    limit: int = 25,
    offset: int = 0,
) -> tuple[list[User], int]:
    filters = []
    if search and search.strip():
        term = search.strip()
        filters.append(
            or_(
                User.email.icontains(term, autoescape=True),
                User.display_name.icontains(term, autoescape=True),
            )
        )
    if banned is not None:
        filters.append(User.banned_at.is_not(None) if banned else User.banned_at.is_(None))
    if is_admin is not None:
        filters.append(User.is_admin.is_(is_admin))

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar() or 0
    res = await db.execute(
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc(), User.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all()), int(total)
