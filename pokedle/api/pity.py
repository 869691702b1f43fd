from typing import Annotated

from fastapi import APIRouter, Depends

from pokedle.core.security import get_current_user, require_admin
from pokedle.models.user import User
from pokedle.schemas.common import APIResponse
from pokedle.schemas.pity import PityReset, PityState, PityStatusResponse
from pokedle.services.pity import PityService

router = APIRouter(prefix="/pity", tags=["pity"])


@router.get("/")
async def get_pity(
    service: Annotated[PityService, Depends()],
    user: Annotated[User, Depends(get_current_user)],
) -> APIResponse[PityStatusResponse]:
    status = await service.get_pity_status(user.id)
    return APIResponse(data=status)


@router.post("/{user_id}/reset")
async def reset_pity(
    user_id: int,
    body: PityReset,
    service: Annotated[PityService, Depends()],
    _admin: Annotated[User, Depends(require_admin)],
) -> APIResponse[PityState]:
    """Zero a user's pity counters (admin only)."""
    state = await service.reset_pity(user_id, reason=body.reason)
    return APIResponse(data=state, message="Pity reset successfully")
