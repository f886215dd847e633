"""Profile router: the signed-in user's own account."""
from fastapi import APIRouter

from gatehouse.interfaces.api.v1.schemas.identity import (
    ChangePasswordRequest,
    ProfileUpdateRequest,
    UserResponse,
)
from gatehouse.interfaces.dependencies import CurrentUser, Facade

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUser):
    return UserResponse.from_entity(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_me(body: ProfileUpdateRequest, facade: Facade, current_user: CurrentUser):
    user = await facade.update_profile(current_user.id, body.first_name, body.last_name)
    return UserResponse.from_entity(user)


@router.post("/me/password", response_model=UserResponse)
async def change_password(body: ChangePasswordRequest, facade: Facade, current_user: CurrentUser):
    user = await facade.change_password(current_user.id, body.current_password, body.new_password)
    return UserResponse.from_entity(user)
