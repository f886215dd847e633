"""Admin router: user accounts."""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from gatehouse.interfaces.api.v1.schemas.identity import (
    AdminPasswordRequest,
    AdminUserUpdateRequest,
    UserListResponse,
    UserResponse,
)
from gatehouse.interfaces.dependencies import AdminUser, Facade, require_admin

router = APIRouter(prefix="/admin/users", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("", response_model=UserListResponse)
async def list_users(
    facade: Facade,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    users, total = await facade.list_users(limit, offset)
    return UserListResponse(
        items=[UserResponse.from_entity(u) for u in users], total=total, limit=limit, offset=offset,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, facade: Facade):
    return UserResponse.from_entity(await facade.get_user(user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: UUID, body: AdminUserUpdateRequest, facade: Facade, admin: AdminUser):
    changes = body.model_dump(exclude_none=True)
    if "email" in changes:
        changes["email"] = str(changes["email"])
    return UserResponse.from_entity(await facade.update_user(user_id, admin.id, **changes))


@router.post("/{user_id}/password", response_model=UserResponse)
async def set_password(user_id: UUID, body: AdminPasswordRequest, facade: Facade):
    return UserResponse.from_entity(await facade.set_user_password(user_id, body.new_password))


@router.post("/{user_id}/roles/{role_id}", response_model=UserResponse)
async def assign_role(user_id: UUID, role_id: UUID, facade: Facade, admin: AdminUser):
    return UserResponse.from_entity(await facade.assign_role(user_id, role_id, admin.id))


@router.delete("/{user_id}/roles/{role_id}", response_model=UserResponse)
async def remove_role(user_id: UUID, role_id: UUID, facade: Facade):
    return UserResponse.from_entity(await facade.remove_role(user_id, role_id))


@router.post("/{user_id}/activate", response_model=UserResponse)
async def activate(user_id: UUID, facade: Facade):
    return UserResponse.from_entity(await facade.activate_user(user_id))


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate(user_id: UUID, facade: Facade):
    return UserResponse.from_entity(await facade.deactivate_user(user_id))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, facade: Facade):
    await facade.delete_user(user_id)
