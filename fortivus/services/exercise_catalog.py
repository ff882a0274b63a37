"""
Shared exercise catalog: lookup by free-text name, create-if-absent.

Catalog rows are visible to every user; custom rows keep their provenance
in `is_custom` / `created_by`.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.errors import ExerciseCreationError, ValidationFailed
from fortivus.models.exercise import Exercise, normalize_name

logger = logging.getLogger(__name__)

# First keyword contained in the focus label wins
FOCUS_MUSCLE_GROUPS: tuple[tuple[str, str], ...] = (
    ("leg", "quadriceps"),
    ("chest", "chest"),
    ("back", "back"),
    ("shoulder", "shoulders"),
    ("arm", "biceps"),
)
DEFAULT_MUSCLE_GROUP = "core"

LOCATION_EQUIPMENT = {
    "bodyweight": "bodyweight",
    "minimal": "dumbbells",
}
DEFAULT_EQUIPMENT = "barbell"


def infer_muscle_group(focus: str) -> str:
    focus_l = (focus or "").lower()
    for keyword, group in FOCUS_MUSCLE_GROUPS:
        if keyword in focus_l:
            return group
    return DEFAULT_MUSCLE_GROUP


def infer_equipment(workout_location: str) -> str:
    return LOCATION_EQUIPMENT.get((workout_location or "").strip().lower(), DEFAULT_EQUIPMENT)


async def find_exercise(db: AsyncSession, name: str) -> Exercise | None:
    """Case-insensitive substring match; lowest id wins when several rows match."""
    res = await db.execute(
        select(Exercise)
        .where(Exercise.name.icontains(name.strip(), autoescape=True))
        .order_by(Exercise.id.asc())
        .limit(1)
    )
    return res.scalar_one_or_none()


async def _find_by_normalized(db: AsyncSession, normalized: str) -> Exercise | None:
    res = await db.execute(select(Exercise).where(Exercise.name_normalized == normalized))
    return res.scalar_one_or_none()


async def create_exercise(
    db: AsyncSession,
    *,
    name: str,
    muscle_group: str,
    equipment: str,
    owner_id: int | None,
    is_custom: bool = True,
) -> tuple[Exercise, bool]:
    """
    Insert a catalog row, or return the row that already owns the normalized name.

    The insert runs in a SAVEPOINT so a unique-name conflict (another request
    created the same exercise first) only rolls back this insert.
    Returns (exercise, created).
    """
    clean = " ".join(name.split())
    normalized = normalize_name(clean)

    row = await _find_by_normalized(db, normalized)
    if row:
        return row, False

    ex = Exercise(
        name=clean,
        name_normalized=normalized,
        muscle_group=muscle_group,
        equipment=equipment,
        is_custom=is_custom,
        created_by=owner_id,
    )
    try:
        async with db.begin_nested():
            db.add(ex)
    except IntegrityError:
        row = await _find_by_normalized(db, normalized)
        if row is None:
            raise ExerciseCreationError(f"Failed to create exercise {clean!r}")
        logger.info("Exercise %r was created concurrently, reusing id=%s", clean, row.id)
        return row, False
    except SQLAlchemyError as exc:
        logger.warning("Error creating exercise %r: %s", clean, exc)
        raise ExerciseCreationError(f"Failed to create exercise {clean!r}") from exc

    logger.info("Created custom exercise %r (id=%s, muscle_group=%s, equipment=%s)", clean, ex.id, muscle_group, equipment)
    return ex, True


async def resolve_exercise(
    db: AsyncSession,
    name: str,
    context_focus: str,
    owner_id: int,
    workout_location: str,
) -> tuple[int, bool]:
    """
    Map a free-text exercise name to a catalog id, creating a custom entry if nothing matches.

    `context_focus` (the workout-day label) only drives muscle-group inference and
    `workout_location` only drives equipment inference. Returns (exercise_id, created).
    """
    if not name or not name.strip():
        raise ValidationFailed("Exercise name is required")

    found = await find_exercise(db, name)
    if found:
        return found.id, False

    ex, created = await create_exercise(
        db,
        name=name,
        muscle_group=infer_muscle_group(context_focus),
        equipment=infer_equipment(workout_location),
        owner_id=owner_id,
    )
    return ex.id, created


async def list_exercises(
    db: AsyncSession,
    *,
    muscle_group: str | None = None,
    search: str | None = None,
) -> list[Exercise]:
    stmt = select(Exercise)
    if muscle_group:
        stmt = stmt.where(Exercise.muscle_group == muscle_group)
    if search and search.strip():
        stmt = stmt.where(Exercise.name.icontains(search.strip(), autoescape=True))
    res = await db.execute(stmt.order_by(Exercise.muscle_group.asc(), Exercise.name.asc()))
    return list(res.scalars().all())
