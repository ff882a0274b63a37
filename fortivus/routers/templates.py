from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.db import get_db
from fortivus.core.deps import get_current_user
from fortivus.models.user import User
from fortivus.models.workout_template import WorkoutTemplate
from fortivus.schemas.templates import (
    BuildTemplateIn,
    BuildTemplateOut,
    ResaveTemplateIn,
    TemplateDetailOut,
    TemplateEntryOut,
    TemplateOut,
    UpdateTemplateIn,
)
from fortivus.schemas.workouts import SessionOut
from fortivus.services import template_builder
from fortivus.services.workout_sessions import start_from_template

router = APIRouter(prefix="/templates", tags=["templates"])


async def _detail(db: AsyncSession, template: WorkoutTemplate) -> TemplateDetailOut:
    entries = await template_builder.get_template_entries(db, template.id)
    return TemplateDetailOut(
        id=template.id,
        name=template.name,
        description=template.description,
        created_at=template.created_at,
        updated_at=template.updated_at,
        exercises=[
            TemplateEntryOut(
                id=entry.id,
                exercise_id=exercise.id,
                exercise_name=exercise.name,
                muscle_group=exercise.muscle_group,
                sort_order=entry.sort_order,
                target_sets=entry.target_sets,
                target_reps=entry.target_reps,
                rest_seconds=entry.rest_seconds,
                notes=entry.notes,
            )
            for entry, exercise in entries
        ],
    )


@router.get("", response_model=list[TemplateOut])
async def list_templates(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [TemplateOut.model_validate(t) for t in await template_builder.list_templates(db, user.id)]


@router.post("", response_model=BuildTemplateOut, status_code=201)
async def build_template(
    payload: BuildTemplateIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    outcome = await template_builder.build_template(
        db,
        owner_id=user.id,
        name=payload.name,
        description=payload.description,
        exercises=payload.exercises,
        context_focus=payload.focus,
        workout_location=payload.workout_location,
    )
    return BuildTemplateOut(**vars(outcome))


@router.get("/{template_id}", response_model=TemplateDetailOut)
async def get_template(
    template_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    template = await template_builder.get_owned_template(db, user.id, template_id)
    return await _detail(db, template)


@router.patch("/{template_id}", response_model=TemplateOut)
async def update_template(
    template_id: int,
    payload: UpdateTemplateIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    template = await template_builder.update_template(
        db, user.id, template_id, name=payload.name, description=payload.description
    )
    return TemplateOut.model_validate(template)


@router.put("/{template_id}", response_model=BuildTemplateOut)
async def resave_template(
    template_id: int,
    payload: ResaveTemplateIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    outcome = await template_builder.build_template(
        db,
        owner_id=user.id,
        name=payload.name,
        description=payload.description,
        exercises=payload.exercises,
        context_focus=payload.focus,
        workout_location=payload.workout_location,
        template_id=template_id,
        confirmed=payload.confirm,
    )
    return BuildTemplateOut(**vars(outcome))


@router.delete("/{template_id}")
async def delete_template(
    template_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await template_builder.delete_template(db, user.id, template_id)
    return {"deleted": True, "template_id": template_id}


@router.post("/{template_id}/start", response_model=SessionOut, status_code=201)
async def start_session_from_template(
    template_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    session = await start_from_template(db, user.id, template_id)
    return SessionOut.model_validate(session)
