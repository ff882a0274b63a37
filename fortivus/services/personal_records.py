from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.models.personal_record import PersonalRecord

logger = logging.getLogger(__name__)

RECORD_WEIGHT = "weight"


async def best_weight(db: AsyncSession, owner_id: int, exercise_id: int) -> float | None:
    res = await db.execute(
        select(func.max(PersonalRecord.value)).where(
            PersonalRecord.user_id == owner_id,
            PersonalRecord.exercise_id == exercise_id,
            PersonalRecord.record_type == RECORD_WEIGHT,
        )
    )
    return res.scalar()


async def evaluate_personal_record(
    db: AsyncSession,
    *,
    owner_id: int,
    exercise_id: int,
    weight: float | None,
    reps: int | None,
    session_id: int | None,
    achieved_at: datetime,
) -> PersonalRecord | None:
    """
    Append a weight PR when `weight` beats the owner's best for the exercise.

    Only strictly heavier counts; matching the best (at any rep count) does not.
    The caller commits.
    """
    if weight is None or weight <= 0:
        return None

    prior = await best_weight(db, owner_id, exercise_id)
    if prior is not None and weight <= prior:
        return None

    pr = PersonalRecord(
        user_id=owner_id,
        exercise_id=exercise_id,
        session_id=session_id,
        record_type=RECORD_WEIGHT,
        value=weight,
        reps_at_weight=reps,
        achieved_at=achieved_at,
    )
    db.add(pr)
    await db.flush()
    logger.info("New PR for user %s exercise %s: %s (previous %s)", owner_id, exercise_id, weight, prior)
    return pr


async def list_personal_records(
    db: AsyncSession,
    owner_id: int,
    exercise_id: int | None = None,
) -> list[PersonalRecord]:
    stmt = select(PersonalRecord).where(PersonalRecord.user_id == owner_id)
    if exercise_id is not None:
        stmt = stmt.where(PersonalRecord.exercise_id == exercise_id)
    res = await db.execute(stmt.order_by(PersonalRecord.achieved_at.desc(), PersonalRecord.id.desc()))
    return list(res.scalars().all())
