from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fortivus.core.db import get_db, get_session_factory
from fortivus.core.deps import get_admin_user
from fortivus.core.errors import Forbidden
from fortivus.models.user import User
from fortivus.schemas.admin import AdminUserOut, BulkActionIn, BulkActionOut, ManageUserIn, UserPage
from fortivus.services.admin_actions import apply_bulk_action
from fortivus.services.user_management import UserManager, get_user_manager, list_users

router = APIRouter(prefix="/admin", tags=["admin"])

PAGE_MAX = 100


def user_manager(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> UserManager:
    return get_user_manager(session_factory)


async def _page(
    db: AsyncSession,
    search: str | None = None,
    banned: bool | None = None,
    is_admin: bool | None = None,
    limit: int = 25,
    offset: int = 0,
) -> UserPage:
    limit = max(1, min(limit, PAGE_MAX))
    offset = max(0, offset)
    users, total = await list_users(
        db, search=search, banned=banned, is_admin=is_admin, limit=limit, offset=offset
    )
    return UserPage(
        items=[AdminUserOut.model_validate(u) for u in users],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/users", response_model=UserPage)
async def get_users(
    search: str | None = None,
    banned: bool | None = None,
    is_admin: bool | None = None,
    limit: int = 25,
    offset: int = 0,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await _page(db, search, banned, is_admin, limit, offset)


@router.post("/users/manage")
async def manage_user(
    payload: ManageUserIn,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
    manager: UserManager = Depends(user_manager),
):
    if payload.target_user_id == admin.id:
        raise Forbidden("Cannot perform this action on yourself")

    # End the auth read transaction; the manager writes through its own sessions
    await db.commit()
    await manager.apply(payload.target_user_id, payload.action)
    return {"success": True, "action": payload.action, "target_user_id": payload.target_user_id}


@router.post("/users/bulk", response_model=BulkActionOut)
async def bulk_action(
    payload: BulkActionIn,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
    manager: UserManager = Depends(user_manager),
):
    await db.commit()
    result = await apply_bulk_action(payload.action, payload.target_user_ids, admin.id, manager)

    # Changes were made through other sessions
    db.expire_all()
    return BulkActionOut(
        action=payload.action,
        succeeded=result.succeeded,
        failed=result.failed,
        users=await _page(db),
    )
