from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from app.core.deps import AuthorizationService
from app.libs.formats.text import parse_include
from app.services.shares.profile import ProfileService

router = APIRouter(prefix="/profile", tags=["User Profile"])


@router.get("", status_code=status.HTTP_200_OK)
async def get_profile(
    include: Optional[str] = Query(None, description="progress,allUsers"),
    profile_service: ProfileService = Depends(ProfileService),
    authorization_service: AuthorizationService = Depends(AuthorizationService),
):
    user = await authorization_service.get_current_user()
    return await profile_service.get_profile_async(user.id, parse_include(include))


@router.put("", status_code=status.HTTP_200_OK)
async def update_profile(
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    english_level: Optional[str] = Form(None),
    age: Optional[int] = Form(None, ge=1, le=150),
    bio: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    profile_service: ProfileService = Depends(ProfileService),
    authorization_service: AuthorizationService = Depends(AuthorizationService),
):
    user = await authorization_service.get_current_user()
    return await profile_service.update_profile_async(
        user.id, first_name, last_name, english_level, age, bio, avatar
    )
