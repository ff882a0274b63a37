from fastapi import APIRouter, Depends

from fortivus.core.deps import get_current_user
from fortivus.models.user import User
from fortivus.schemas.user import UserOut

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserOut)
async def read_me(user: User = Depends(get_current_user)):
    return UserOut.model_validate(user)
