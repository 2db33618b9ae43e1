import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from app.core.deps import AuthorizationService
from app.schemas.user.social import FriendAdd
from app.services.user.social import SocialService

router = APIRouter(tags=["Social"])


@router.get("/friends")
async def get_friends(
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    user = await authorization.get_current_user()
    return await social_service.get_friends_async(user.id)


@router.post("/friends")
async def add_friend(
    schema: FriendAdd = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    user = await authorization.get_current_user()
    return await social_service.add_friend_async(user.id, schema.friend_id)


@router.delete("/friends/{friend_id}")
async def remove_friend(
    friend_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    user = await authorization.get_current_user()
    return await social_service.remove_friend_async(user.id, friend_id)


@router.get("/users")
async def search_users(
    search: Optional[str] = Query(None, description="Name or username"),
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    await authorization.get_current_user()
    return await social_service.search_users_async(search)


@router.get("/users/{user_id}")
async def get_user_profile(
    user_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    await authorization.get_current_user()
    return await social_service.get_public_profile_async(user_id)


@router.get("/leaderboard")
async def get_leaderboard(
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    await authorization.get_current_user()
    return await social_service.get_leaderboard_async()


@router.get("/compare/{compare_id}")
async def compare_with_user(
    compare_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    social_service: SocialService = Depends(SocialService),
):
    user = await authorization.get_current_user()
    return await social_service.compare_async(user.id, compare_id)
