import uuid
from typing import Optional

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, ConflictError, InternalError, NotFoundError
from app.db.models.database import Courses, CourseStudents, Payments, Progress, User
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.pagination import paginate
from app.libs.formats.users import user_detail
from app.schemas.admin.user import AdminUserUpdate
from app.services.admin.audit import AuditService, diff_fields


class UserService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        audit: AuditService = Depends(AuditService),
    ):
        self.db = db
        self.audit = audit

    async def _get_user_or_404(self, user_id: uuid.UUID) -> User:
        user = await self.db.scalar(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        if not user:
            raise NotFoundError("User not found")
        return user

    async def get_users_async(self, page: int, size: int, search: Optional[str] = None):
        stmt = select(User)
        count_stmt = select(func.count(User.id))
        if search and search.strip():
            kw = f"%{search.strip()}%"
            condition = or_(
                User.first_name.ilike(kw),
                User.last_name.ilike(kw),
                User.email.ilike(kw),
                User.username.ilike(kw),
            )
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total_items = await self.db.scalar(count_stmt) or 0
        users = (
            await self.db.scalars(
                stmt.order_by(desc(User.created_at)).offset((page - 1) * size).limit(size)
            )
        ).all()
        return paginate([user_detail(u) for u in users], page, size, total_items)

    async def get_user_async(self, user_id: uuid.UUID):
        user = await self._get_user_or_404(user_id)

        teaching = await self.db.scalar(
            select(func.count(Courses.id)).where(Courses.teacher_id == user_id)
        )
        enrolled = await self.db.scalar(
            select(func.count(CourseStudents.id)).where(CourseStudents.user_id == user_id)
        )
        spent = await self.db.scalar(
            select(func.coalesce(func.sum(Payments.amount), 0)).where(
                Payments.user_id == user_id
            )
        )
        avg_progress = await self.db.scalar(
            select(func.avg(Progress.progress)).where(Progress.user_id == user_id)
        )
        return {
            **user_detail(user),
            "courses_teaching": teaching or 0,
            "courses_enrolled": enrolled or 0,
            "coins_spent": int(spent or 0),
            "average_progress": round(float(avg_progress), 2) if avg_progress is not None else 0,
        }

    async def update_user_async(
        self, admin_id: uuid.UUID, user_id: uuid.UUID, schema: AdminUserUpdate
    ):
        updates = schema.model_dump(exclude_unset=True, exclude_none=True)

        async def work():
            user = await self._get_user_or_404(user_id)
            changes = diff_fields(user, updates)
            for field, change in changes.items():
                setattr(user, field, change["new"])
            if changes:
                self.audit.record(admin_id, "user.update", "user", user_id, changes)
            await self.db.flush()
            return user, changes

        try:
            user, changes = await run_atomic(self.db, work)
            if changes:
                logger.info(f"🛠️ Admin {admin_id} updated user {user_id}: {sorted(changes)}")
            return {"message": "User updated", "user": user_detail(user)}
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Admin user update failed: {e}")
            raise InternalError("Could not update user")

    async def delete_user_async(self, admin_id: uuid.UUID, user_id: uuid.UUID):
        if admin_id == user_id:
            raise BadRequestError("You cannot delete your own account")

        async def work():
            user = await self._get_user_or_404(user_id)

            teaching = await self.db.scalar(
                select(func.count(Courses.id)).where(Courses.teacher_id == user_id)
            )
            if teaching:
                raise ConflictError(
                    f"User teaches {teaching} course(s); delete or reassign them first",
                    courses=teaching,
                )

            snapshot = {"username": user.username, "email": user.email}
            # progress, payments, friendships, likes, comments, messages cascade
            await self.db.execute(delete(User).where(User.id == user_id))
            self.audit.record(admin_id, "user.delete", "user", user_id, snapshot)

        try:
            await run_atomic(self.db, work)
            logger.info(f"🗑️ Admin {admin_id} deleted user {user_id}")
            return {"message": "User deleted"}
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Admin user delete failed: {e}")
            raise InternalError("Could not delete user")
