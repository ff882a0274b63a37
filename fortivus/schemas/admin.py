from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

UserAction = Literal["ban", "unban", "delete"]


class ManageUserIn(BaseModel):
    target_user_id: int
    action: UserAction


class BulkActionIn(BaseModel):
    action: UserAction
    target_user_ids: list[int] = Field(min_length=1)


class AdminUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str | None = None
    is_admin: bool
    banned_at: datetime | None = None
    total_xp: int
    created_at: datetime


class UserPage(BaseModel):
    items: list[AdminUserOut]
    total: int
    limit: int
    offset: int


class BulkActionOut(BaseModel):
    action: UserAction
    succeeded: int
    failed: list[int]
    users: UserPage
