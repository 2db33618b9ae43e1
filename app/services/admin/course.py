import uuid
from typing import Optional

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enum import CourseStatusFilter
from app.core.exceptions import InternalError, NotFoundError
from app.db.models.database import (
    Courses,
    CourseStudents,
    Lessons,
    Progress,
    ProgressLessons,
    Quizzes,
    User,
)
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.pagination import paginate
from app.libs.formats.users import user_brief
from app.schemas.admin.course import AdminCourseUpdate
from app.services.admin.audit import AuditService, diff_fields
from app.services.shares.rating import RatingService
from app.services.user.courses import count_likes, count_lessons, count_students, course_summary

STATUS_FILTERS = {
    CourseStatusFilter.APPROVED: Courses.is_approved.is_(True),
    CourseStatusFilter.PENDING: Courses.is_approved.is_(False),
    CourseStatusFilter.ACTIVE: Courses.is_active.is_(True),
    CourseStatusFilter.INACTIVE: Courses.is_active.is_(False),
}


class AdminCourseService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        audit: AuditService = Depends(AuditService),
        rating: RatingService = Depends(RatingService),
    ):
        self.db = db
        self.audit = audit
        self.rating = rating

    async def _get_course_or_404(self, course_id: uuid.UUID) -> Courses:
        course = await self.db.scalar(
            select(Courses)
            .where(Courses.id == course_id)
            .options(selectinload(Courses.teacher))
            .execution_options(populate_existing=True)
        )
        if not course:
            raise NotFoundError("Course not found")
        return course

    async def get_courses_async(
        self,
        page: int,
        size: int,
        search: Optional[str] = None,
        status: CourseStatusFilter = CourseStatusFilter.ALL,
    ):
        conditions = []
        if status in STATUS_FILTERS:
            conditions.append(STATUS_FILTERS[status])
        if search and search.strip():
            kw = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Courses.title.ilike(kw),
                    Courses.description.ilike(kw),
                    Courses.category.ilike(kw),
                )
            )

        total_items = (
            await self.db.scalar(select(func.count(Courses.id)).where(*conditions)) or 0
        )
        rows = (
            await self.db.execute(
                select(Courses, count_students(), count_likes(), count_lessons())
                .options(selectinload(Courses.teacher))
                .where(*conditions)
                .order_by(desc(Courses.created_at))
                .offset((page - 1) * size)
                .limit(size)
            )
        ).all()
        return paginate(
            [course_summary(c, s, l, n) for c, s, l, n in rows], page, size, total_items
        )

    async def get_course_async(self, course_id: uuid.UUID):
        course = await self.db.scalar(
            select(Courses)
            .where(Courses.id == course_id)
            .options(
                selectinload(Courses.teacher),
                selectinload(Courses.lessons),
                selectinload(Courses.quizzes).selectinload(Quizzes.questions),
            )
        )
        if not course:
            raise NotFoundError("Course not found")

        students = await self.db.scalar(
            select(func.count(CourseStudents.id)).where(CourseStudents.course_id == course_id)
        )
        data = course_summary(course, students or 0, lessons_count=len(course.lessons))
        data["lessons"] = [
            {
                "id": lesson.id,
                "title": lesson.title,
                "order": lesson.order_index,
                "video_url": lesson.video_url,
                "content": lesson.content,
                "materials": lesson.materials,
                "duration": lesson.duration,
            }
            for lesson in course.lessons
        ]
        data["quizzes"] = [
            {
                "id": quiz.id,
                "lesson_id": quiz.lesson_id,
                "questions": [
                    {
                        "id": q.id,
                        "question": q.question,
                        "options": q.options,
                        "correct_answer": q.correct_answer,
                    }
                    for q in quiz.questions
                ],
            }
            for quiz in course.quizzes
        ]
        return data

    async def _apply_changes(
        self, admin_id: uuid.UUID, course_id: uuid.UUID, updates: dict, action: str
    ):
        async def work():
            course = await self._get_course_or_404(course_id)
            changes = diff_fields(course, updates)
            for field, change in changes.items():
                setattr(course, field, change["new"])
            if changes:
                self.audit.record(admin_id, action, "course", course_id, changes)
            await self.db.flush()
            return course, changes

        course, changes = await run_atomic(self.db, work)
        if changes:
            logger.info(f"🛠️ Admin {admin_id} {action} {course_id}: {sorted(changes)}")
        return course

    async def update_course_async(
        self, admin_id: uuid.UUID, course_id: uuid.UUID, schema: AdminCourseUpdate
    ):
        try:
            updates = schema.model_dump(exclude_unset=True, exclude_none=True)
            course = await self._apply_changes(admin_id, course_id, updates, "course.update")
            return {"message": "Course updated", "course": course_summary(course)}
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Admin course update failed: {e}")
            raise InternalError("Could not update course")

    async def approve_course_async(
        self, admin_id: uuid.UUID, course_id: uuid.UUID, approved: bool
    ):
        try:
            course = await self._apply_changes(
                admin_id, course_id, {"is_approved": approved}, "course.approve"
            )
            return {
                "message": "Course approved" if approved else "Course approval revoked",
                "course": course_summary(course),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Course approval failed: {e}")
            raise InternalError("Could not change course approval")

    async def delete_course_async(self, admin_id: uuid.UUID, course_id: uuid.UUID):
        async def work():
            course = await self._get_course_or_404(course_id)
            snapshot = {"title": course.title, "teacher_id": str(course.teacher_id)}
            student_ids = (
                await self.db.scalars(
                    select(Progress.user_id).where(Progress.course_id == course_id)
                )
            ).all()

            # lessons, quizzes, comments, likes, students, progress, payments cascade
            await self.db.execute(delete(Courses).where(Courses.id == course_id))
            for student_id in student_ids:
                await self.rating.recompute_async(student_id)

            self.audit.record(
                admin_id,
                "course.delete",
                "course",
                course_id,
                snapshot,
            )

        try:
            await run_atomic(self.db, work)
            logger.info(f"🗑️ Admin {admin_id} deleted course {course_id}")
            return {"message": "Course deleted"}
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Admin course delete failed: {e}")
            raise InternalError("Could not delete course")

    async def get_participants_async(self, course_id: uuid.UUID, page: int, size: int):
        course = await self._get_course_or_404(course_id)
        total_lessons = await self.db.scalar(
            select(func.count(Lessons.id)).where(Lessons.course_id == course_id)
        )
        total_items = await self.db.scalar(
            select(func.count(CourseStudents.id)).where(CourseStudents.course_id == course_id)
        ) or 0

        completed_count = (
            select(func.count(ProgressLessons.lesson_id))
            .where(ProgressLessons.progress_id == Progress.id)
            .correlate(Progress)
            .scalar_subquery()
        )
        rows = (
            await self.db.execute(
                select(User, CourseStudents.enrolled_at, Progress, completed_count)
                .join(CourseStudents, CourseStudents.user_id == User.id)
                .outerjoin(
                    Progress,
                    (Progress.user_id == User.id) & (Progress.course_id == course_id),
                )
                .where(CourseStudents.course_id == course_id)
                .order_by(desc(CourseStudents.enrolled_at))
                .offset((page - 1) * size)
                .limit(size)
            )
        ).all()

        items = [
            {
                "user": {**user_brief(user), "email": user.email},
                "enrolled_at": enrolled_at,
                "progress": progress.progress if progress else 0,
                "completed_lessons": completed if progress else 0,
                "last_accessed": progress.last_accessed if progress else None,
            }
            for user, enrolled_at, progress, completed in rows
        ]
        return {
            "course": {"id": course.id, "title": course.title, "total_lessons": total_lessons or 0},
            **paginate(items, page, size, total_items),
        }
