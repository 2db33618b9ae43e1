import uuid
from typing import Optional

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, InternalError, NotFoundError
from app.db.models.database import Progress, ProgressLessons, User, UserFriends
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.users import display_name, user_brief
from app.services.shares.profile import ProfileService

SEARCH_LIMIT = 20
LEADERBOARD_SIZE = 10


class SocialService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        profile: ProfileService = Depends(ProfileService),
    ):
        self.db = db
        self.profile = profile

    async def _get_user_or_404(self, user_id: uuid.UUID, message: str = "User not found") -> User:
        user = await self.db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise NotFoundError(message)
        return user

    # ==============================
    # 🤝 FRIENDS
    # ==============================

    async def get_friends_async(self, user_id: uuid.UUID):
        return await self.profile.get_friends_async(user_id)

    async def add_friend_async(self, user_id: uuid.UUID, friend_id: uuid.UUID):
        try:
            if user_id == friend_id:
                raise BadRequestError("You cannot add yourself as a friend")

            await self._get_user_or_404(friend_id, "Friend not found")

            async def work():
                exists = await self.db.scalar(
                    select(UserFriends.user_id).where(
                        UserFriends.user_id == user_id, UserFriends.friend_id == friend_id
                    )
                )
                if exists:
                    raise BadRequestError("Already friends")

                # stored in both directions
                self.db.add(UserFriends(user_id=user_id, friend_id=friend_id))
                self.db.add(UserFriends(user_id=friend_id, friend_id=user_id))
                await self.db.flush()

            try:
                await run_atomic(self.db, work)
            except IntegrityError:
                raise BadRequestError("Already friends")

            logger.info(f"🤝 {user_id} and {friend_id} are now friends")
            return {
                "message": "Friend added",
                "friends": await self.profile.get_friends_async(user_id),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Adding friend failed: {e}")
            raise InternalError("Could not add friend")

    async def remove_friend_async(self, user_id: uuid.UUID, friend_id: uuid.UUID):
        try:
            await self._get_user_or_404(friend_id, "Friend not found")

            async def work():
                await self.db.execute(
                    delete(UserFriends).where(
                        or_(
                            (UserFriends.user_id == user_id) & (UserFriends.friend_id == friend_id),
                            (UserFriends.user_id == friend_id) & (UserFriends.friend_id == user_id),
                        )
                    )
                )

            await run_atomic(self.db, work)
            return {
                "message": "Friend removed",
                "friends": await self.profile.get_friends_async(user_id),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Removing friend failed: {e}")
            raise InternalError("Could not remove friend")

    # ==============================
    # 🔎 USERS
    # ==============================

    async def search_users_async(self, search: Optional[str] = None):
        stmt = select(User).where(User.is_active.is_(True))
        if search and search.strip():
            kw = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    User.first_name.ilike(kw),
                    User.last_name.ilike(kw),
                    User.username.ilike(kw),
                )
            )
        users = (
            await self.db.scalars(stmt.order_by(asc(User.username)).limit(SEARCH_LIMIT))
        ).all()
        return [user_brief(u) for u in users]

    async def get_public_profile_async(self, user_id: uuid.UUID):
        user = await self._get_user_or_404(user_id)
        return {
            **user_brief(user),
            "english_level": user.english_level,
            "bio": user.bio,
            "age": user.age,
            "rating": user.rating,
            "is_premium": user.is_premium,
            "is_teacher": user.is_teacher,
            "created_at": user.created_at,
            "friends": await self.profile.get_friends_async(user_id),
        }

    # ==============================
    # 🏆 RANKING
    # ==============================

    async def get_leaderboard_async(self):
        users = (
            await self.db.scalars(
                select(User)
                .where(User.is_active.is_(True))
                .order_by(desc(User.rating), asc(User.created_at))
                .limit(LEADERBOARD_SIZE)
            )
        ).all()
        return [
            {
                "id": u.id,
                "name": display_name(u),
                "avatar": u.avatar,
                "rating": u.rating,
                "rank": index + 1,
            }
            for index, u in enumerate(users)
        ]

    async def _learning_stats(self, user: User) -> dict:
        completed_courses = await self.db.scalar(
            select(func.count())
            .select_from(Progress)
            .where(Progress.user_id == user.id, Progress.progress == 100)
        )
        completed_lessons = await self.db.scalar(
            select(func.count())
            .select_from(ProgressLessons)
            .join(Progress, Progress.id == ProgressLessons.progress_id)
            .where(Progress.user_id == user.id)
        )
        return {
            "id": user.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "completed_courses": completed_courses or 0,
            "completed_lessons": completed_lessons or 0,
            "rating": user.rating,
        }

    async def compare_async(self, user_id: uuid.UUID, compare_id: uuid.UUID):
        current = await self._get_user_or_404(user_id)
        other = await self._get_user_or_404(compare_id)
        return {
            "current": await self._learning_stats(current),
            "compare": await self._learning_stats(other),
        }
