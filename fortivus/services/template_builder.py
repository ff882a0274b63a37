"""
Workout templates built from exercise lists (manual or generated).

Exercise names are reconciled against the shared catalog one by one; an
exercise that cannot be resolved is skipped and the rest of the template
is still written.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.config import settings
from fortivus.core.errors import (
    ConfirmationRequired,
    ExerciseCreationError,
    FortivusError,
    NotFound,
    ValidationFailed,
)
from fortivus.models.exercise import Exercise
from fortivus.models.template_exercise import TemplateExercise
from fortivus.models.workout_template import WorkoutTemplate
from fortivus.schemas.plans import DayPlan
from fortivus.schemas.templates import TemplateExerciseIn
from fortivus.services.exercise_catalog import resolve_exercise

logger = logging.getLogger(__name__)

_FIRST_INT = re.compile(r"\d+")


def parse_reps(reps: str | None, default: int | None = None) -> int:
    """
    First integer in a free-text rep prescription: "8-12" -> 8, "8-10 each side" -> 8.
    Text without digits ("AMRAP") falls back to the default target.
    """
    fallback = settings.DEFAULT_TARGET_REPS if default is None else default
    m = _FIRST_INT.search(reps or "")
    return int(m.group(0)) if m else fallback


def plan_description(goals: str) -> str:
    return f"Generated from AI Personal Plan: {(goals or '')[:100]}"


def day_template_name(day: DayPlan) -> str:
    return f"{day.day} - {day.focus}" if day.focus else day.day


@dataclass
class BuildOutcome:
    template_id: int
    entries_created: int
    skipped: list[str] = field(default_factory=list)


@dataclass
class BulkBuildOutcome:
    created: int
    template_ids: list[int]
    failed_days: list[str] = field(default_factory=list)


async def get_owned_template(db: AsyncSession, owner_id: int, template_id: int) -> WorkoutTemplate:
    res = await db.execute(
        select(WorkoutTemplate).where(
            WorkoutTemplate.id == template_id,
            WorkoutTemplate.user_id == owner_id,
        )
    )
    template = res.scalar_one_or_none()
    if not template:
        raise NotFound("Template not found")
    return template


async def _insert_entries(
    db: AsyncSession,
    template_id: int,
    exercises: Sequence[TemplateExerciseIn],
    owner_id: int,
    context_focus: str,
    workout_location: str,
) -> tuple[int, list[str]]:
    created = 0
    skipped: list[str] = []

    for i, item in enumerate(exercises):
        try:
            exercise_id, _ = await resolve_exercise(db, item.name, context_focus, owner_id, workout_location)
        except (ExerciseCreationError, ValidationFailed) as exc:
            logger.warning("Skipping exercise %r for template %s: %s", item.name, template_id, exc.detail)
            skipped.append(item.name)
            continue

        db.add(
            TemplateExercise(
                template_id=template_id,
                exercise_id=exercise_id,
                sort_order=i,
                target_sets=item.sets,
                target_reps=parse_reps(item.reps),
                rest_seconds=settings.DEFAULT_REST_SECONDS,
                notes=item.notes or None,
            )
        )
        created += 1

    await db.flush()
    return created, skipped


async def build_template(
    db: AsyncSession,
    *,
    owner_id: int,
    name: str,
    description: str | None,
    exercises: Sequence[TemplateExerciseIn],
    context_focus: str = "",
    workout_location: str = "",
    template_id: int | None = None,
    confirmed: bool = False,
) -> BuildOutcome:
    """
    Create a template, or with `template_id` resave an existing one.

    Resaving deletes every existing entry before writing the new list and
    is refused unless `confirmed` is set.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationFailed("Template name is required")
    if not exercises:
        raise ValidationFailed("This workout day has no exercises to create a template from")

    if template_id is None:
        template = WorkoutTemplate(user_id=owner_id, name=name, description=description)
        db.add(template)
        await db.flush()
    else:
        if not confirmed:
            raise ConfirmationRequired("Resaving replaces all exercises in this template; confirm to continue")
        template = await get_owned_template(db, owner_id, template_id)
        removed = await db.execute(delete(TemplateExercise).where(TemplateExercise.template_id == template.id))
        logger.info("Resaving template %s: removed %s entries", template.id, removed.rowcount)
        template.name = name
        template.description = description
        template.updated_at = datetime.now(timezone.utc)
        await db.flush()

    created, skipped = await _insert_entries(db, template.id, exercises, owner_id, context_focus, workout_location)
    await db.commit()

    return BuildOutcome(template_id=template.id, entries_created=created, skipped=skipped)


async def build_all_templates(
    db: AsyncSession,
    *,
    owner_id: int,
    days: Sequence[DayPlan],
    goals: str,
    workout_location: str = "",
) -> BulkBuildOutcome:
    """One template per day that has exercises; a failing day is skipped, the rest still land."""
    workout_days = [d for d in days if d.exercises]
    if not workout_days:
        raise ValidationFailed("Your plan doesn't have any workout days with exercises")

    description = plan_description(goals)
    template_ids: list[int] = []
    failed_days: list[str] = []

    for day in workout_days:
        try:
            async with db.begin_nested():
                template = WorkoutTemplate(user_id=owner_id, name=day_template_name(day), description=description)
                db.add(template)
                await db.flush()
                created, _ = await _insert_entries(
                    db, template.id, day.exercises, owner_id, day.focus, workout_location
                )
                if not created:
                    # Rolls the empty template back with the savepoint
                    raise ValidationFailed(f"No usable exercises for {day.day}")
        except (SQLAlchemyError, FortivusError) as exc:
            logger.warning("Error creating template for %s: %s", day.day, exc)
            failed_days.append(day.day)
            continue
        template_ids.append(template.id)

    await db.commit()
    logger.info("Created %s of %s weekly templates for user %s", len(template_ids), len(workout_days), owner_id)

    return BulkBuildOutcome(created=len(template_ids), template_ids=template_ids, failed_days=failed_days)


async def list_templates(db: AsyncSession, owner_id: int) -> list[WorkoutTemplate]:
    res = await db.execute(
        select(WorkoutTemplate)
        .where(WorkoutTemplate.user_id == owner_id)
        .order_by(WorkoutTemplate.created_at.desc(), WorkoutTemplate.id.desc())
    )
    return list(res.scalars().all())


async def get_template_entries(db: AsyncSession, template_id: int) -> list[tuple[TemplateExercise, Exercise]]:
    res = await db.execute(
        select(TemplateExercise, Exercise)
        .join(Exercise, TemplateExercise.exercise_id == Exercise.id)
        .where(TemplateExercise.template_id == template_id)
        .order_by(TemplateExercise.sort_order.asc(), TemplateExercise.id.asc())
    )
    return [(row[0], row[1]) for row in res.all()]


async def update_template(
    db: AsyncSession,
    owner_id: int,
    template_id: int,
    *,
    name: str | None = None,
    description: str | None = None,
) -> WorkoutTemplate:
    template = await get_owned_template(db, owner_id, template_id)
    if name is not None:
        if not name.strip():
            raise ValidationFailed("Template name is required")
        template.name = name.strip()
    if description is not None:
        template.description = description
    template.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(template)
    return template


async def delete_template(db: AsyncSession, owner_id: int, template_id: int) -> None:
    template = await get_owned_template(db, owner_id, template_id)
    await db.execute(delete(TemplateExercise).where(TemplateExercise.template_id == template.id))
    await db.delete(template)
    await db.commit()
