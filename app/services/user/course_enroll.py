import uuid

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enum import PaymentStatus, PaymentType
from app.core.exceptions import BadRequestError, InternalError, NotFoundError
from app.db.models.database import (
    Courses,
    CourseStudents,
    Lessons,
    Payments,
    Progress,
    ProgressLessons,
)
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.users import user_brief
from app.services.shares.rating import RatingService
from app.services.shares.wallets import WalletsService


def progress_view(progress: Progress, completed_lessons: list[uuid.UUID] | None = None) -> dict:
    return {
        "id": progress.id,
        "course_id": progress.course_id,
        "progress": progress.progress,
        "current_lesson_id": progress.current_lesson_id,
        "completed_lessons": completed_lessons or [],
        "last_accessed": progress.last_accessed,
    }


class CourseEnrolls:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        wallets: WalletsService = Depends(WalletsService),
        rating: RatingService = Depends(RatingService),
    ):
        self.db = db
        self.wallets = wallets
        self.rating = rating

    async def _ensure_progress(
        self, course_id: uuid.UUID, user_id: uuid.UUID
    ) -> tuple[Progress, bool]:
        progress = await self.db.scalar(
            select(Progress).where(
                Progress.user_id == user_id, Progress.course_id == course_id
            )
        )
        if progress:
            return progress, False

        first_lesson_id = await self.db.scalar(
            select(Lessons.id)
            .where(Lessons.course_id == course_id)
            .order_by(Lessons.order_index)
            .limit(1)
        )
        progress = Progress(
            user_id=user_id,
            course_id=course_id,
            current_lesson_id=first_lesson_id,
            progress=0,
        )
        self.db.add(progress)
        await self.db.flush()
        return progress, True

    async def _completed_lesson_ids(self, progress_id: uuid.UUID) -> list[uuid.UUID]:
        return list(
            (
                await self.db.scalars(
                    select(ProgressLessons.lesson_id)
                    .where(ProgressLessons.progress_id == progress_id)
                    .order_by(ProgressLessons.completed_at)
                )
            ).all()
        )

    async def _already_enrolled_work(self, course_id: uuid.UUID, user_id: uuid.UUID):
        progress, created = await self._ensure_progress(course_id, user_id)
        if created:
            await self.rating.recompute_async(user_id)
        return True, progress

    # ==============================
    # 🎓 ENROLL
    # ==============================

    async def enroll_async(self, course_id: uuid.UUID, user_id: uuid.UUID):
        """
        Debit, payment record, student row, progress and rating commit as one unit.
        - already enrolled: terminal, nothing is charged
        - insufficient coins: terminal, nothing is written
        """

        async def work():
            course = await self.db.scalar(select(Courses).where(Courses.id == course_id))
            if not course:
                raise NotFoundError("Course not found")
            if not (course.is_active and course.is_approved):
                raise BadRequestError("Course is not available for enrollment")

            enrolled = await self.db.scalar(
                select(CourseStudents.id).where(
                    CourseStudents.course_id == course_id,
                    CourseStudents.user_id == user_id,
                )
            )
            if enrolled:
                return await self._already_enrolled_work(course_id, user_id)

            if course.price > 0:
                await self.wallets.debit_async(user_id, course.price)
                self.db.add(
                    Payments(
                        user_id=user_id,
                        course_id=course_id,
                        amount=course.price,
                        type=PaymentType.COURSE_PURCHASE.value,
                        status=PaymentStatus.COMPLETED.value,
                    )
                )

            self.db.add(CourseStudents(course_id=course_id, user_id=user_id))
            await self.db.flush()
            progress, _ = await self._ensure_progress(course_id, user_id)
            await self.rating.recompute_async(user_id)
            return False, progress

        try:
            try:
                already, progress = await run_atomic(self.db, work)
            except IntegrityError:
                # lost a race against a parallel enrollment of the same user
                already, progress = await run_atomic(
                    self.db, lambda: self._already_enrolled_work(course_id, user_id)
                )

            if not already:
                logger.info(f"🎓 User {user_id} enrolled in course {course_id}")

            return {
                "message": "Already enrolled" if already else "Enrolled successfully",
                "already_enrolled": already,
                "coins": await self.wallets.get_balance_async(user_id),
                "progress": progress_view(
                    progress, await self._completed_lesson_ids(progress.id)
                ),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Enrollment failed: {e}")
            raise InternalError("Could not enroll in course")

    # ==============================
    # 🛒 MY COURSES
    # ==============================

    async def get_user_courses_async(self, user_id: uuid.UUID):
        rows = (
            await self.db.execute(
                select(Courses, CourseStudents.enrolled_at, Progress)
                .join(CourseStudents, CourseStudents.course_id == Courses.id)
                .outerjoin(
                    Progress,
                    (Progress.course_id == Courses.id) & (Progress.user_id == user_id),
                )
                .options(selectinload(Courses.teacher))
                .where(CourseStudents.user_id == user_id)
                .order_by(desc(CourseStudents.enrolled_at))
            )
        ).all()

        return [
            {
                "id": course.id,
                "title": course.title,
                "image": course.image,
                "level": course.level,
                "category": course.category,
                "teacher": user_brief(course.teacher),
                "enrolled_at": enrolled_at,
                "progress": progress.progress if progress else 0,
                "current_lesson_id": progress.current_lesson_id if progress else None,
                "last_accessed": progress.last_accessed if progress else None,
            }
            for course, enrolled_at, progress in rows
        ]
