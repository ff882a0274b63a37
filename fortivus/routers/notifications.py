from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fortivus.core.db import get_db
from fortivus.core.deps import get_current_user
from fortivus.models.user import User
from fortivus.schemas.notifications import NotificationOut
from fortivus.services.notifications import list_notifications, mark_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def get_notifications(
    unread: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return [NotificationOut.model_validate(n) for n in await list_notifications(db, user.id, unread_only=unread)]


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def read_notification(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return NotificationOut.model_validate(await mark_read(db, user.id, notification_id))
