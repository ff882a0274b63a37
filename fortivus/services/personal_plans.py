"""
AI personal plans: generation through the remote function, validation at
the boundary, storage, and turning plan days into workout templates.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.errors import NotFound, PlanValidationError, ValidationFailed
from fortivus.models.personal_plan import PersonalPlan
from fortivus.schemas.plans import GeneratePlanIn, PersonalPlanData, SavePlanIn
from fortivus.services.remote_functions import FunctionsClient
from fortivus.services.template_builder import (
    BuildOutcome,
    BulkBuildOutcome,
    build_all_templates,
    build_template,
    day_template_name,
    plan_description,
)

logger = logging.getLogger(__name__)

GENERATE_FUNCTION = "generate-personal-plan"


def validate_plan(raw: object) -> PersonalPlanData:
    """Generated output is untrusted; reject anything that does not fit the plan schema."""
    try:
        return PersonalPlanData.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Generated plan failed validation: %s", exc.errors())
        raise PlanValidationError("Failed to parse AI response") from exc


async def generate_plan(client: FunctionsClient, payload: GeneratePlanIn) -> PersonalPlanData:
    if not payload.goals.strip():
        raise ValidationFailed("Please describe your fitness goals")

    body = payload.model_dump(by_alias=True, mode="json")
    data = await client.invoke(GENERATE_FUNCTION, body)
    return validate_plan(data.get("plan"))


async def save_plan(db: AsyncSession, owner_id: int, payload: SavePlanIn) -> PersonalPlan:
    if not payload.goals.strip():
        raise ValidationFailed("Please describe your fitness goals")

    row = PersonalPlan(
        user_id=owner_id,
        goals=payload.goals,
        current_stats=payload.current_stats.model_dump(by_alias=True, mode="json"),
        preferences=payload.preferences.model_dump(by_alias=True, mode="json"),
        plan_data=payload.plan.model_dump(by_alias=True, mode="json"),
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


async def list_plans(db: AsyncSession, owner_id: int) -> list[PersonalPlan]:
    res = await db.execute(
        select(PersonalPlan)
        .where(PersonalPlan.user_id == owner_id)
        .order_by(PersonalPlan.created_at.desc(), PersonalPlan.id.desc())
    )
    return list(res.scalars().all())


async def get_owned_plan(db: AsyncSession, owner_id: int, plan_id: int) -> PersonalPlan:
    res = await db.execute(
        select(PersonalPlan).where(PersonalPlan.id == plan_id, PersonalPlan.user_id == owner_id)
    )
    row = res.scalar_one_or_none()
    if not row:
        raise NotFound("Plan not found")
    return row


async def delete_plan(db: AsyncSession, owner_id: int, plan_id: int) -> None:
    row = await get_owned_plan(db, owner_id, plan_id)
    await db.delete(row)
    await db.commit()


def _workout_location(row: PersonalPlan) -> str:
    return (row.preferences or {}).get("workoutLocation") or ""


async def build_day_template(
    db: AsyncSession,
    owner_id: int,
    row: PersonalPlan,
    day_index: int,
    name: str | None = None,
) -> BuildOutcome:
    plan = validate_plan(row.plan_data)
    schedule = plan.workout.weekly_schedule
    if day_index < 0 or day_index >= len(schedule):
        raise NotFound("Workout day not found in plan")

    day = schedule[day_index]
    if not day.exercises:
        raise ValidationFailed("This workout day has no exercises to create a template from")

    return await build_template(
        db,
        owner_id=owner_id,
        name=(name or "").strip() or day_template_name(day),
        description=plan_description(row.goals),
        exercises=day.exercises,
        context_focus=day.focus,
        workout_location=_workout_location(row),
    )


async def build_week_templates(db: AsyncSession, owner_id: int, row: PersonalPlan) -> BulkBuildOutcome:
    plan = validate_plan(row.plan_data)
    return await build_all_templates(
        db,
        owner_id=owner_id,
        days=plan.workout.weekly_schedule,
        goals=row.goals,
        workout_location=_workout_location(row),
    )
