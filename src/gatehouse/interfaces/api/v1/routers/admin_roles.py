"""Admin router: roles and the permission catalogue."""
from uuid import UUID

from fastapi import APIRouter, Depends, status

from gatehouse.interfaces.api.v1.schemas.identity import (
    PermissionResponse,
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)
from gatehouse.interfaces.dependencies import AdminUser, Facade, require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/permissions", response_model=list[PermissionResponse])
async def list_permissions(facade: Facade):
    return [PermissionResponse.from_entity(p) for p in await facade.list_permissions()]


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(facade: Facade):
    return [RoleResponse.from_entity(r) for r in await facade.list_roles()]


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(body: RoleCreateRequest, facade: Facade):
    role = await facade.create_role(body.name, body.description, body.permission_ids, body.is_default)
    return RoleResponse.from_entity(role)


@router.get("/roles/{role_id}", response_model=RoleResponse)
async def get_role(role_id: UUID, facade: Facade):
    return RoleResponse.from_entity(await facade.get_role(role_id))


@router.patch("/roles/{role_id}", response_model=RoleResponse)
async def update_role(role_id: UUID, body: RoleUpdateRequest, facade: Facade):
    role = await facade.update_role(role_id, **body.model_dump(exclude_none=True))
    return RoleResponse.from_entity(role)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(role_id: UUID, facade: Facade, admin: AdminUser):
    await facade.delete_role(role_id, admin.id)


@router.post("/roles/{role_id}/permissions/{permission_id}", response_model=RoleResponse)
async def assign_permission(role_id: UUID, permission_id: UUID, facade: Facade):
    return RoleResponse.from_entity(await facade.assign_permission(role_id, permission_id))


@router.delete("/roles/{role_id}/permissions/{permission_id}", response_model=RoleResponse)
async def remove_permission(role_id: UUID, permission_id: UUID, facade: Facade):
    return RoleResponse.from_entity(await facade.remove_permission(role_id, permission_id))
