from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.db import get_db
from fortivus.core.deps import get_current_user
from fortivus.models.personal_plan import PersonalPlan
from fortivus.models.user import User
from fortivus.schemas.plans import (
    GeneratePlanIn,
    PersonalPlanData,
    PlanDayTemplateIn,
    SavedPlanOut,
    SavePlanIn,
)
from fortivus.schemas.templates import BuildTemplateOut, BulkBuildOut
from fortivus.services import personal_plans
from fortivus.services.remote_functions import FunctionsClient, get_functions_client

router = APIRouter(prefix="/plans", tags=["plans"])


def _saved(row: PersonalPlan) -> SavedPlanOut:
    return SavedPlanOut(
        id=row.id,
        goals=row.goals,
        current_stats=row.current_stats,
        preferences=row.preferences,
        plan=personal_plans.validate_plan(row.plan_data),
        created_at=row.created_at,
    )


@router.post("/generate", response_model=PersonalPlanData)
async def generate_plan(
    payload: GeneratePlanIn,
    user: User = Depends(get_current_user),
    client: FunctionsClient = Depends(get_functions_client),
):
    return await personal_plans.generate_plan(client, payload)


@router.post("", response_model=SavedPlanOut, status_code=201)
async def save_plan(
    payload: SavePlanIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _saved(await personal_plans.save_plan(db, user.id, payload))


@router.get("", response_model=list[SavedPlanOut])
async def list_plans(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [_saved(row) for row in await personal_plans.list_plans(db, user.id)]


@router.get("/{plan_id}", response_model=SavedPlanOut)
async def get_plan(
    plan_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return _saved(await personal_plans.get_owned_plan(db, user.id, plan_id))


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await personal_plans.delete_plan(db, user.id, plan_id)
    return {"deleted": True, "plan_id": plan_id}


@router.post("/{plan_id}/templates", response_model=BuildTemplateOut, status_code=201)
async def create_day_template(
    plan_id: int,
    payload: PlanDayTemplateIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await personal_plans.get_owned_plan(db, user.id, plan_id)
    outcome = await personal_plans.build_day_template(db, user.id, row, payload.day_index, payload.name)
    return BuildTemplateOut(**vars(outcome))


@router.post("/{plan_id}/templates/week", response_model=BulkBuildOut, status_code=201)
async def create_week_templates(
    plan_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await personal_plans.get_owned_plan(db, user.id, plan_id)
    outcome = await personal_plans.build_week_templates(db, user.id, row)
    return BulkBuildOut(**vars(outcome))
