from pydantic import BaseModel, ConfigDict, EmailStr
from datetime import datetime

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    display_name: str | None = None
    is_admin: bool
    banned_at: datetime | None = None
    total_xp: int
    created_at: datetime
