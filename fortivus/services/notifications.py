from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fortivus.core.errors import NotFound
from fortivus.models.notification import Notification

logger = logging.getLogger(__name__)

KIND_PERSONAL_RECORD = "personal_record"


def _format_weight(weight: float) -> str:
    return f"{weight:g}"


async def publish_pr_celebration(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: int,
    exercise_name: str,
    weight: float,
    reps: int | None,
) -> None:
    """Fire-and-forget: runs after the response, failures are only logged."""
    body = f"{_format_weight(weight)} lbs on {exercise_name}"
    if reps:
        body += f" for {reps} reps"
    body += "!"

    try:
        async with session_factory() as db:
            db.add(
                Notification(
                    user_id=user_id,
                    kind=KIND_PERSONAL_RECORD,
                    title="New PR!",
                    body=body,
                )
            )
            await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to publish PR notification for user %s", user_id)


async def list_notifications(db: AsyncSession, user_id: int, unread_only: bool = False) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.read_at.is_(None))
    res = await db.execute(stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(50))
    return list(res.scalars().all())


async def mark_read(db: AsyncSession, user_id: int, notification_id: int) -> Notification:
    res = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    n = res.scalar_one_or_none()
    if not n:
        raise NotFound("Notification not found")
    if n.read_at is None:
        n.read_at = datetime.now(timezone.utc)
        await db.commit()
    return n
