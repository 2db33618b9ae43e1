import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from app.core.deps import AuthorizationService
from app.schemas.admin.user import AdminUserUpdate
from app.services.admin.user import UserService

router = APIRouter(prefix="/admin/users", tags=["ADMIN USER"])


@router.get("")
async def get_users(
    search: Optional[str] = Query(None, description="Name, email or username"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    user_service: UserService = Depends(UserService),
):
    await authorization.require_admin()
    return await user_service.get_users_async(page, limit, search)


@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    user_service: UserService = Depends(UserService),
):
    await authorization.require_admin()
    return await user_service.get_user_async(user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    schema: AdminUserUpdate = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    user_service: UserService = Depends(UserService),
):
    admin = await authorization.require_admin()
    return await user_service.update_user_async(admin.id, user_id, schema)


@router.delete("/{user_id}")
async def delete_user(
    user_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    user_service: UserService = Depends(UserService),
):
    admin = await authorization.require_admin()
    return await user_service.delete_user_async(admin.id, user_id)
