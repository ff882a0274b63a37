"""
Workout session lifecycle.

    (none) --start--> active --finish--> finished
                         \\----cancel--> cancelled

Finished and cancelled are terminal. Exercises and sets can only be
changed while the session is active.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.config import settings
from fortivus.core.errors import (
    ActiveSessionExists,
    Conflict,
    DuplicateExercise,
    NotFound,
    SessionNotActive,
    SetAlreadyCompleted,
    ValidationFailed,
)
from fortivus.models.exercise import Exercise
from fortivus.models.exercise_set import ExerciseSet
from fortivus.models.personal_record import PersonalRecord
from fortivus.models.session_exercise import SessionExercise
from fortivus.models.user import User
from fortivus.models.workout_session import (
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    STATUS_FINISHED,
    WorkoutSession,
)
from fortivus.services.personal_records import evaluate_personal_record
from fortivus.services.template_builder import get_owned_template, get_template_entries

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


@dataclass
class SetCompletion:
    set: ExerciseSet
    personal_record: PersonalRecord | None
    exercise_name: str


@dataclass
class SessionSummary:
    exercises_count: int
    completed_sets: int
    total_volume: float
    duration_minutes: int
    xp_awarded: int


@dataclass
class ExerciseBlock:
    entry: SessionExercise
    exercise: Exercise
    sets: list[ExerciseSet] = field(default_factory=list)


def _require_active(session: WorkoutSession) -> None:
    if session.status != STATUS_ACTIVE:
        raise SessionNotActive(f"Workout session is {session.status}")


async def get_owned_session(db: AsyncSession, owner_id: int, session_id: int) -> WorkoutSession:
    res = await db.execute(
        select(WorkoutSession).where(
            WorkoutSession.id == session_id,
            WorkoutSession.user_id == owner_id,
        )
    )
    session = res.scalar_one_or_none()
    if not session:
        raise NotFound("Session not found")
    return session


async def get_active_session(db: AsyncSession, owner_id: int) -> WorkoutSession | None:
    res = await db.execute(
        select(WorkoutSession).where(
            WorkoutSession.user_id == owner_id,
            WorkoutSession.status == STATUS_ACTIVE,
        )
    )
    return res.scalar_one_or_none()


async def _insert_session(db: AsyncSession, session: WorkoutSession) -> None:
    # The partial unique index catches a start racing another start
    db.add(session)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ActiveSessionExists()


async def start_session(
    db: AsyncSession,
    owner_id: int,
    name: str,
    template_id: int | None = None,
    now: datetime | None = None,
) -> WorkoutSession:
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Workout name is required")

    if await get_active_session(db, owner_id):
        raise ActiveSessionExists()

    session = WorkoutSession(
        user_id=owner_id,
        name=name,
        template_id=template_id,
        status=STATUS_ACTIVE,
        started_at=now or utcnow(),
    )
    await _insert_session(db, session)
    await db.commit()

    logger.info("User %s started workout %s (%r)", owner_id, session.id, name)
    return session


async def start_from_template(
    db: AsyncSession,
    owner_id: int,
    template_id: int,
    now: datetime | None = None,
) -> WorkoutSession:
    """Start a session pre-filled with the template's exercises and pending target sets."""
    template = await get_owned_template(db, owner_id, template_id)

    if await get_active_session(db, owner_id):
        raise ActiveSessionExists()

    session = WorkoutSession(
        user_id=owner_id,
        name=template.name,
        template_id=template.id,
        status=STATUS_ACTIVE,
        started_at=now or utcnow(),
        notes=template.description,
    )
    await _insert_session(db, session)

    for entry, exercise in await get_template_entries(db, template.id):
        se = SessionExercise(
            session_id=session.id,
            exercise_id=exercise.id,
            order_index=entry.sort_order,
            source_template_exercise_id=entry.id,
        )
        db.add(se)
        await db.flush()

        for n in range(entry.target_sets):
            db.add(
                ExerciseSet(
                    session_id=session.id,
                    session_exercise_id=se.id,
                    exercise_id=exercise.id,
                    set_number=n + 1,
                    reps=entry.target_reps,
                )
            )

    await db.commit()
    logger.info("User %s started workout %s from template %s", owner_id, session.id, template.id)
    return session


async def _get_session_exercise(db: AsyncSession, session_id: int, exercise_id: int) -> SessionExercise:
    res = await db.execute(
        select(SessionExercise).where(
            SessionExercise.session_id == session_id,
            SessionExercise.exercise_id == exercise_id,
        )
    )
    se = res.scalar_one_or_none()
    if not se:
        raise NotFound("Exercise is not part of this workout")
    return se


async def add_exercise(db: AsyncSession, owner_id: int, session_id: int, exercise_id: int) -> SessionExercise:
    session = await get_owned_session(db, owner_id, session_id)
    _require_active(session)

    exercise = await db.get(Exercise, exercise_id)
    if not exercise:
        raise NotFound("Exercise not found")

    res = await db.execute(
        select(SessionExercise.exercise_id).where(SessionExercise.session_id == session.id)
    )
    present = [r[0] for r in res.all()]
    if exercise_id in present:
        raise DuplicateExercise()

    se = SessionExercise(session_id=session.id, exercise_id=exercise_id, order_index=len(present))
    db.add(se)
    await db.commit()
    return se


async def remove_exercise(db: AsyncSession, owner_id: int, session_id: int, exercise_id: int) -> None:
    session = await get_owned_session(db, owner_id, session_id)
    _require_active(session)
    se = await _get_session_exercise(db, session.id, exercise_id)

    res = await db.execute(
        select(func.count(ExerciseSet.id)).where(
            ExerciseSet.session_exercise_id == se.id,
            ExerciseSet.is_completed.is_(True),
        )
    )
    if res.scalar():
        raise Conflict("Exercises with completed sets cannot be removed")

    await db.execute(delete(ExerciseSet).where(ExerciseSet.session_exercise_id == se.id))
    await db.delete(se)
    await db.commit()


async def add_set(
    db: AsyncSession,
    owner_id: int,
    session_id: int,
    exercise_id: int,
    weight: float | None = None,
    reps: int | None = None,
    is_warmup: bool = False,
) -> ExerciseSet:
    """Append a pending set; missing weight/reps carry over from the previous set."""
    session = await get_owned_session(db, owner_id, session_id)
    _require_active(session)
    se = await _get_session_exercise(db, session.id, exercise_id)

    res = await db.execute(
        select(ExerciseSet)
        .where(ExerciseSet.session_exercise_id == se.id)
        .order_by(ExerciseSet.set_number.asc(), ExerciseSet.id.asc())
    )
    existing = res.scalars().all()
    last = existing[-1] if existing else None

    s = ExerciseSet(
        session_id=session.id,
        session_exercise_id=se.id,
        exercise_id=exercise_id,
        set_number=(last.set_number if last else 0) + 1,
        weight=weight if weight is not None else (last.weight if last else None),
        reps=reps if reps is not None else (last.reps if last else None),
        is_warmup=is_warmup,
        is_completed=False,
    )
    db.add(s)
    await db.commit()
    return s


async def _get_owned_set(db: AsyncSession, owner_id: int, set_id: int) -> tuple[ExerciseSet, WorkoutSession]:
    res = await db.execute(
        select(ExerciseSet, WorkoutSession)
        .join(WorkoutSession, ExerciseSet.session_id == WorkoutSession.id)
        .where(
            ExerciseSet.id == set_id,
            WorkoutSession.user_id == owner_id,
        )
    )
    row = res.one_or_none()
    if not row:
        raise NotFound("Set not found")
    return row[0], row[1]


async def update_set(
    db: AsyncSession,
    owner_id: int,
    set_id: int,
    weight: float | None = None,
    reps: int | None = None,
) -> ExerciseSet:
    s, session = await _get_owned_set(db, owner_id, set_id)
    _require_active(session)
    if s.is_completed:
        raise SetAlreadyCompleted()

    if weight is not None:
        s.weight = weight
    if reps is not None:
        s.reps = reps

    await db.commit()
    return s


async def complete_set(
    db: AsyncSession,
    owner_id: int,
    set_id: int,
    weight: float | None = None,
    reps: int | None = None,
    now: datetime | None = None,
) -> SetCompletion:
    """
    Mark a pending set completed (exactly once) and check it for a weight PR.
    """
    s, session = await _get_owned_set(db, owner_id, set_id)
    _require_active(session)
    if s.is_completed:
        raise SetAlreadyCompleted()

    if weight is not None:
        s.weight = weight
    if reps is not None:
        s.reps = reps

    completed_at = now or utcnow()
    s.is_completed = True
    s.completed_at = completed_at

    pr = await evaluate_personal_record(
        db,
        owner_id=owner_id,
        exercise_id=s.exercise_id,
        weight=s.weight,
        reps=s.reps,
        session_id=session.id,
        achieved_at=completed_at,
    )
    exercise = await db.get(Exercise, s.exercise_id)

    await db.commit()
    return SetCompletion(set=s, personal_record=pr, exercise_name=exercise.name if exercise else "")


async def delete_set(db: AsyncSession, owner_id: int, set_id: int) -> None:
    s, session = await _get_owned_set(db, owner_id, set_id)
    _require_active(session)
    if s.is_completed:
        raise Conflict("Completed sets cannot be removed")

    await db.delete(s)
    await db.commit()


async def _summarize(db: AsyncSession, session_id: int) -> tuple[int, int, float]:
    ex_res = await db.execute(
        select(func.count(SessionExercise.id)).where(SessionExercise.session_id == session_id)
    )
    sums = await db.execute(
        select(
            func.count(ExerciseSet.id).label("completed_sets"),
            func.coalesce(func.sum(ExerciseSet.weight * ExerciseSet.reps), 0).label("total_volume"),
        ).where(
            ExerciseSet.session_id == session_id,
            ExerciseSet.is_completed.is_(True),
        )
    )
    row = sums.one()
    return int(ex_res.scalar() or 0), int(row.completed_sets or 0), float(row.total_volume or 0)


async def finish_session(
    db: AsyncSession,
    owner_id: int,
    session_id: int,
    notes: str | None = None,
    now: datetime | None = None,
) -> tuple[WorkoutSession, SessionSummary]:
    session = await get_owned_session(db, owner_id, session_id)
    _require_active(session)

    started_at = as_utc(session.started_at)
    finished_at = max(now or utcnow(), started_at)
    duration_minutes = int((finished_at - started_at).total_seconds() // 60)

    session.status = STATUS_FINISHED
    session.finished_at = finished_at
    session.duration_minutes = duration_minutes
    if notes is not None:
        session.notes = notes

    xp = settings.WORKOUT_FINISH_XP
    await db.execute(update(User).where(User.id == owner_id).values(total_xp=User.total_xp + xp))

    exercises_count, completed_sets, total_volume = await _summarize(db, session.id)
    await db.commit()

    logger.info("User %s finished workout %s after %s min", owner_id, session.id, duration_minutes)
    return session, SessionSummary(
        exercises_count=exercises_count,
        completed_sets=completed_sets,
        total_volume=total_volume,
        duration_minutes=duration_minutes,
        xp_awarded=xp,
    )


async def cancel_session(
    db: AsyncSession,
    owner_id: int,
    session_id: int,
    now: datetime | None = None,
) -> WorkoutSession:
    """Discard everything logged in the session; the row stays as cancelled."""
    session = await get_owned_session(db, owner_id, session_id)
    _require_active(session)

    await db.execute(delete(ExerciseSet).where(ExerciseSet.session_id == session.id))
    await db.execute(delete(SessionExercise).where(SessionExercise.session_id == session.id))
    # PRs set during a discarded workout do not stand
    await db.execute(delete(PersonalRecord).where(PersonalRecord.session_id == session.id))

    session.status = STATUS_CANCELLED
    session.finished_at = now or utcnow()
    await db.commit()

    logger.info("User %s cancelled workout %s", owner_id, session.id)
    return session


async def get_exercise_blocks(db: AsyncSession, session_id: int) -> list[ExerciseBlock]:
    res = await db.execute(
        select(SessionExercise, Exercise)
        .join(Exercise, SessionExercise.exercise_id == Exercise.id)
        .where(SessionExercise.session_id == session_id)
        .order_by(SessionExercise.order_index.asc(), SessionExercise.id.asc())
    )
    blocks = [ExerciseBlock(entry=row[0], exercise=row[1]) for row in res.all()]
    if not blocks:
        return blocks

    by_entry = {b.entry.id: b for b in blocks}
    set_res = await db.execute(
        select(ExerciseSet)
        .where(ExerciseSet.session_id == session_id)
        .order_by(ExerciseSet.session_exercise_id.asc(), ExerciseSet.set_number.asc(), ExerciseSet.id.asc())
    )
    for s in set_res.scalars().all():
        block = by_entry.get(s.session_exercise_id)
        if block:
            block.sets.append(s)
    return blocks


async def list_history(db: AsyncSession, owner_id: int, limit: int = 20, offset: int = 0) -> list[WorkoutSession]:
    res = await db.execute(
        select(WorkoutSession)
        .where(
            WorkoutSession.user_id == owner_id,
            WorkoutSession.status == STATUS_FINISHED,
        )
        .order_by(WorkoutSession.finished_at.desc(), WorkoutSession.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all())


async def previous_sets(db: AsyncSession, owner_id: int, exercise_id: int, limit: int = 10) -> list[ExerciseSet]:
    """Most recent completed sets of an exercise from finished sessions."""
    res = await db.execute(
        select(ExerciseSet)
        .join(WorkoutSession, ExerciseSet.session_id == WorkoutSession.id)
        .where(
            ExerciseSet.exercise_id == exercise_id,
            ExerciseSet.is_completed.is_(True),
            WorkoutSession.user_id == owner_id,
            WorkoutSession.status == STATUS_FINISHED,
        )
        .order_by(ExerciseSet.completed_at.desc(), ExerciseSet.id.desc())
        .limit(limit)
    )
    return list(res.scalars().all())
