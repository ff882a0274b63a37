from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fortivus.core.config import settings
from fortivus.core.db import get_db, get_session_factory
from fortivus.core.deps import get_current_user
from fortivus.models.exercise import Exercise
from fortivus.models.user import User
from fortivus.models.workout_session import WorkoutSession
from fortivus.schemas.workouts import (
    AddExerciseIn,
    AddSetIn,
    CompleteSetIn,
    CompleteSetOut,
    FinishSessionIn,
    FinishSessionOut,
    HistoryOut,
    PersonalRecordOut,
    SessionDetailOut,
    SessionExerciseOut,
    SessionOut,
    SessionSummaryOut,
    SetOut,
    StartSessionIn,
    UpdateSetIn,
)
from fortivus.services import workout_sessions as sessions
from fortivus.services.notifications import publish_pr_celebration
from fortivus.services.personal_records import list_personal_records

router = APIRouter(prefix="/workouts", tags=["workouts"])


async def _detail(db: AsyncSession, session: WorkoutSession) -> SessionDetailOut:
    blocks = await sessions.get_exercise_blocks(db, session.id)
    out = SessionDetailOut.model_validate(session)
    out.exercises = [
        SessionExerciseOut(
            id=b.entry.id,
            exercise_id=b.exercise.id,
            name=b.exercise.name,
            order_index=b.entry.order_index,
            sets=[SetOut.model_validate(s) for s in b.sets],
        )
        for b in blocks
    ]
    return out


@router.post("/session/start", response_model=SessionOut, status_code=201)
async def start_session(
    payload: StartSessionIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await sessions.start_session(db, user.id, payload.name)
    return SessionOut.model_validate(session)


@router.get("/session/active")
async def get_active_session(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await sessions.get_active_session(db, user.id)
    if not session:
        return {"active": False, "session": None}
    return {"active": True, "session": await _detail(db, session)}


@router.get("/session/{session_id}", response_model=SessionDetailOut)
async def get_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await sessions.get_owned_session(db, user.id, session_id)
    return await _detail(db, session)


@router.post("/session/{session_id}/exercises", response_model=SessionExerciseOut, status_code=201)
async def add_exercise(
    session_id: int,
    payload: AddExerciseIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    se = await sessions.add_exercise(db, user.id, session_id, payload.exercise_id)
    exercise = await db.get(Exercise, se.exercise_id)
    return SessionExerciseOut(
        id=se.id,
        exercise_id=se.exercise_id,
        name=exercise.name,
        order_index=se.order_index,
        sets=[],
    )


@router.delete("/session/{session_id}/exercises/{exercise_id}")
async def remove_exercise(
    session_id: int,
    exercise_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await sessions.remove_exercise(db, user.id, session_id, exercise_id)
    return {"deleted": True, "exercise_id": exercise_id}


@router.post("/session/{session_id}/exercises/{exercise_id}/sets", response_model=SetOut, status_code=201)
async def add_set(
    session_id: int,
    exercise_id: int,
    payload: AddSetIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    s = await sessions.add_set(
        db,
        user.id,
        session_id,
        exercise_id,
        weight=payload.weight,
        reps=payload.reps,
        is_warmup=payload.is_warmup,
    )
    return SetOut.model_validate(s)


@router.patch("/sets/{set_id}", response_model=SetOut)
async def update_set(
    set_id: int,
    payload: UpdateSetIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    s = await sessions.update_set(db, user.id, set_id, weight=payload.weight, reps=payload.reps)
    return SetOut.model_validate(s)


@router.post("/sets/{set_id}/complete", response_model=CompleteSetOut)
async def complete_set(
    set_id: int,
    payload: CompleteSetIn,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    done = await sessions.complete_set(db, user.id, set_id, weight=payload.weight, reps=payload.reps)

    pr_out = None
    if done.personal_record is not None:
        pr_out = PersonalRecordOut.model_validate(done.personal_record)
        background.add_task(
            publish_pr_celebration,
            session_factory,
            user.id,
            done.exercise_name,
            done.personal_record.value,
            done.personal_record.reps_at_weight,
        )

    return CompleteSetOut(set=SetOut.model_validate(done.set), personal_record=pr_out)


@router.delete("/sets/{set_id}")
async def delete_set(
    set_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await sessions.delete_set(db, user.id, set_id)
    return {"deleted": True, "set_id": set_id}


@router.post("/session/{session_id}/finish", response_model=FinishSessionOut)
async def finish_session(
    session_id: int,
    payload: FinishSessionIn | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session, summary = await sessions.finish_session(
        db, user.id, session_id, notes=payload.notes if payload else None
    )
    return FinishSessionOut(
        session=SessionOut.model_validate(session),
        summary=SessionSummaryOut(**vars(summary)),
    )


@router.post("/session/{session_id}/cancel", response_model=SessionOut)
async def cancel_session(
    session_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await sessions.cancel_session(db, user.id, session_id)
    return SessionOut.model_validate(session)


@router.get("/history", response_model=HistoryOut)
async def workout_history(
    limit: int = 20,
    offset: int = 0,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    limit = max(1, min(limit, settings.HISTORY_PAGE_MAX))
    offset = max(0, offset)
    items = await sessions.list_history(db, user.id, limit=limit, offset=offset)
    return HistoryOut(items=[SessionOut.model_validate(s) for s in items], limit=limit, offset=offset)


@router.get("/prs", response_model=list[PersonalRecordOut])
async def personal_records(
    exercise_id: int | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    records = await list_personal_records(db, user.id, exercise_id)
    return [PersonalRecordOut.model_validate(r) for r in records]


@router.get("/exercises/{exercise_id}/previous", response_model=list[SetOut])
async def previous_sets(
    exercise_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [SetOut.model_validate(s) for s in await sessions.previous_sets(db, user.id, exercise_id)]
