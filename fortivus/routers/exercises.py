from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.db import get_db
from fortivus.core.deps import get_current_user
from fortivus.models.user import User
from fortivus.schemas.exercises import CreateExerciseIn, ExerciseOut, ResolveExerciseIn, ResolveExerciseOut
from fortivus.services.exercise_catalog import create_exercise, list_exercises, resolve_exercise

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.get("", response_model=list[ExerciseOut])
async def list_catalog(
    muscle_group: str | None = None,
    search: str | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [ExerciseOut.model_validate(e) for e in await list_exercises(db, muscle_group=muscle_group, search=search)]


@router.post("", response_model=ExerciseOut, status_code=201)
async def create_custom_exercise(
    payload: CreateExerciseIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    ex, _ = await create_exercise(
        db,
        name=payload.name,
        muscle_group=payload.muscle_group,
        equipment=payload.equipment,
        owner_id=user.id,
    )
    await db.commit()
    await db.refresh(ex)
    return ExerciseOut.model_validate(ex)


@router.post("/resolve", response_model=ResolveExerciseOut)
async def resolve_catalog_exercise(
    payload: ResolveExerciseIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    exercise_id, created = await resolve_exercise(
        db, payload.name, payload.focus, user.id, payload.workout_location
    )
    await db.commit()
    return ResolveExerciseOut(exercise_id=exercise_id, created=created)
