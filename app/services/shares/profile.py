import uuid
from typing import Optional

from fastapi import Depends, HTTPException, UploadFile
from loguru import logger
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enum import FileType
from app.core.exceptions import InternalError, NotFoundError
from app.db.models.database import Courses, Progress, User, UserFriends
from app.db.session import get_session
from app.libs.formats.users import user_brief, user_detail
from app.services.shares.storage import StorageService

ALL_USERS_LIMIT = 50


class ProfileService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        storage: StorageService = Depends(StorageService),
    ):
        self.db = db
        self.storage = storage

    async def get_friends_async(self, user_id: uuid.UUID) -> list[dict]:
        friends = (
            await self.db.scalars(
                select(User)
                .join(UserFriends, UserFriends.friend_id == User.id)
                .where(UserFriends.user_id == user_id)
                .order_by(UserFriends.created_at)
            )
        ).all()
        return [user_brief(f) for f in friends]

    async def get_progress_with_courses_async(self, user_id: uuid.UUID) -> list[dict]:
        rows = (
            await self.db.execute(
                select(Progress, Courses)
                .join(Courses, Courses.id == Progress.course_id)
                .where(Progress.user_id == user_id)
                .order_by(desc(Progress.last_accessed))
            )
        ).all()
        return [
            {
                "id": p.id,
                "course": {
                    "id": c.id,
                    "title": c.title,
                    "image": c.image,
                    "level": c.level,
                },
                "progress": p.progress,
                "current_lesson_id": p.current_lesson_id,
                "last_accessed": p.last_accessed,
            }
            for p, c in rows
        ]

    # ==============================
    # 👤 OWN PROFILE
    # ==============================

    async def get_profile_async(self, user_id: uuid.UUID, include: set[str]):
        user = await self.db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise NotFoundError("User not found")

        data = user_detail(user)
        data["friends"] = await self.get_friends_async(user_id)

        if "progress" in include:
            data["progress"] = await self.get_progress_with_courses_async(user_id)

        if "allUsers" in include:
            users = (
                await self.db.scalars(
                    select(User).order_by(desc(User.rating)).limit(ALL_USERS_LIMIT)
                )
            ).all()
            data["all_users"] = [
                {**user_brief(u), "rating": u.rating, "english_level": u.english_level}
                for u in users
            ]

        return data

    async def update_profile_async(
        self,
        user_id: uuid.UUID,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        english_level: Optional[str] = None,
        age: Optional[int] = None,
        bio: Optional[str] = None,
        avatar: Optional[UploadFile] = None,
    ):
        stored_avatar = None
        try:
            user = await self.db.scalar(select(User).where(User.id == user_id))
            if not user:
                raise NotFoundError("User not found")

            # only fields that were actually sent
            changes = {
                "first_name": first_name,
                "last_name": last_name,
                "english_level": english_level,
                "age": age,
                "bio": bio,
            }
            for field, value in changes.items():
                if value is not None:
                    setattr(user, field, value)

            if avatar is not None and avatar.filename:
                stored_avatar = await self.storage.save_image_async(avatar, FileType.AVATAR)
                user.avatar = stored_avatar

            await self.db.commit()
            logger.info(f"👤 Profile updated for {user_id}")
            return {"message": "Profile updated", "user": user_detail(user)}
        except HTTPException:
            await self.db.rollback()
            self.storage.discard(stored_avatar)
            raise
        except Exception as e:
            await self.db.rollback()
            self.storage.discard(stored_avatar)
            logger.exception(f"Profile update failed: {e}")
            raise InternalError("Could not update profile")
