import math
import uuid
from typing import Optional, Sequence

from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ForbiddenError, InternalError, NotFoundError
from app.core.settings import settings
from app.db.models.database import (
    Courses,
    Lessons,
    Progress,
    ProgressLessons,
    QuizQuestions,
    QuizResults,
    Quizzes,
)
from app.db.session import get_session
from app.db.transaction import run_atomic
from app.libs.formats.datetime import now as get_now
from app.services.shares.rating import RatingService
from app.services.shares.wallets import WalletsService

PASS_RATIO = 0.6
HIGH_SCORE_RATIO = 0.8


# ==============================
# 🧮 SCORING
# ==============================


def score_answers(
    questions: Sequence[QuizQuestions], answers: Sequence[Optional[int]]
) -> int:
    """Count positions where the submitted index equals the correct one; missing positions score 0."""
    return sum(
        1
        for i, question in enumerate(questions)
        if i < len(answers) and answers[i] == question.correct_answer
    )


def quiz_reward(ratio: float) -> int:
    if ratio >= HIGH_SCORE_RATIO:
        return settings.QUIZ_HIGH_REWARD
    if ratio >= PASS_RATIO:
        return settings.QUIZ_MEDIUM_REWARD
    return 0


def percent(part: int, whole: int) -> int:
    """Whole percent, halves rounded up (1/8 -> 13)."""
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def completion_percent(completed: int, total: int) -> int:
    return min(100, percent(completed, total))


class LearningService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        wallets: WalletsService = Depends(WalletsService),
        rating: RatingService = Depends(RatingService),
    ):
        self.db = db
        self.wallets = wallets
        self.rating = rating

    async def _get_progress_or_403(
        self, course_id: uuid.UUID, user_id: uuid.UUID, lock: bool = False
    ) -> Progress:
        stmt = select(Progress).where(
            Progress.user_id == user_id, Progress.course_id == course_id
        )
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        progress = await self.db.scalar(stmt)
        if not progress:
            raise ForbiddenError("You are not enrolled in this course")
        return progress

    async def _get_lesson_or_404(self, course_id: uuid.UUID, lesson_id: uuid.UUID) -> Lessons:
        lesson = await self.db.scalar(
            select(Lessons).where(Lessons.id == lesson_id, Lessons.course_id == course_id)
        )
        if not lesson:
            raise NotFoundError("Lesson not found")
        return lesson

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

    # ==============================
    # 📖 LESSON VIEW
    # ==============================

    async def get_lesson_async(
        self, course_id: uuid.UUID, lesson_id: uuid.UUID, user_id: uuid.UUID
    ):
        try:
            course = await self.db.scalar(select(Courses).where(Courses.id == course_id))
            if not course:
                raise NotFoundError("Course not found")

            progress = await self._get_progress_or_403(course_id, user_id)
            lesson = await self._get_lesson_or_404(course_id, lesson_id)

            progress.current_lesson_id = lesson.id
            progress.last_accessed = get_now()
            await self.db.commit()

            quizzes = (
                await self.db.scalars(
                    select(Quizzes)
                    .where(Quizzes.course_id == course_id, Quizzes.lesson_id == lesson_id)
                    .options(selectinload(Quizzes.questions))
                )
            ).all()
            completed = await self.db.scalar(
                select(func.count())
                .select_from(ProgressLessons)
                .where(
                    ProgressLessons.progress_id == progress.id,
                    ProgressLessons.lesson_id == lesson_id,
                )
            )

            return {
                "lesson": {
                    "id": lesson.id,
                    "title": lesson.title,
                    "order": lesson.order_index,
                    "video_url": lesson.video_url,
                    "content": lesson.content,
                    "materials": lesson.materials,
                    "duration": lesson.duration,
                },
                # answers stay server-side
                "quizzes": [
                    {
                        "id": quiz.id,
                        "questions": [
                            {"question": q.question, "options": q.options}
                            for q in quiz.questions
                        ],
                    }
                    for quiz in quizzes
                ],
                "course": {"id": course.id, "title": course.title, "teacher_id": course.teacher_id},
                "is_completed": bool(completed),
                "progress": progress.progress,
            }
        except HTTPException:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Lesson view failed: {e}")
            raise InternalError("Could not load lesson")

    # ==============================
    # ✅ COMPLETE LESSON
    # ==============================

    async def complete_lesson_async(
        self, course_id: uuid.UUID, lesson_id: uuid.UUID, user_id: uuid.UUID
    ):
        async def work():
            progress = await self._get_progress_or_403(course_id, user_id, lock=True)
            await self._get_lesson_or_404(course_id, lesson_id)

            already_done = await self.db.scalar(
                select(ProgressLessons.lesson_id).where(
                    ProgressLessons.progress_id == progress.id,
                    ProgressLessons.lesson_id == lesson_id,
                )
            )
            if already_done:
                return progress.progress, 0, progress.id

            self.db.add(ProgressLessons(progress_id=progress.id, lesson_id=lesson_id))
            await self.db.flush()

            completed = await self.db.scalar(
                select(func.count())
                .select_from(ProgressLessons)
                .where(ProgressLessons.progress_id == progress.id)
            )
            total = await self.db.scalar(
                select(func.count()).select_from(Lessons).where(Lessons.course_id == course_id)
            )
            progress.progress = completion_percent(completed, total)
            progress.last_accessed = get_now()
            await self.db.flush()

            reward = settings.LESSON_REWARD
            await self.wallets.credit_async(user_id, reward)
            await self.rating.recompute_async(user_id)
            return progress.progress, reward, progress.id

        try:
            progress_value, coins_added, progress_id = await run_atomic(self.db, work)
            if coins_added:
                logger.info(f"✅ User {user_id} completed lesson {lesson_id} (+{coins_added} coins)")
            return {
                "message": "Lesson completed" if coins_added else "Lesson already completed",
                "progress": progress_value,
                "coins_added": coins_added,
                "coins": await self.wallets.get_balance_async(user_id),
                "completed_lessons": await self._completed_lesson_ids(progress_id),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Lesson completion failed: {e}")
            raise InternalError("Could not complete lesson")

    # ==============================
    # 📝 QUIZ
    # ==============================

    async def submit_quiz_async(
        self,
        course_id: uuid.UUID,
        quiz_id: uuid.UUID,
        user_id: uuid.UUID,
        answers: list[Optional[int]],
    ):
        async def work():
            quiz = await self.db.scalar(
                select(Quizzes)
                .where(Quizzes.id == quiz_id, Quizzes.course_id == course_id)
                .options(selectinload(Quizzes.questions))
            )
            if not quiz:
                raise NotFoundError("Quiz not found")

            progress = await self._get_progress_or_403(course_id, user_id, lock=True)

            total = len(quiz.questions)
            score = score_answers(quiz.questions, answers)
            ratio = score / total if total else 0.0
            reward = quiz_reward(ratio)

            result = await self.db.scalar(
                select(QuizResults).where(
                    QuizResults.progress_id == progress.id,
                    QuizResults.quiz_id == quiz_id,
                )
            )
            if result is None:
                result = QuizResults(progress_id=progress.id, quiz_id=quiz_id)
                self.db.add(result)
            result.score = score
            result.total_questions = total
            result.answers = list(answers)
            result.completed_at = get_now()
            progress.last_accessed = get_now()
            await self.db.flush()

            if reward:
                await self.wallets.credit_async(user_id, reward)
            return score, total, ratio, reward

        try:
            score, total, ratio, reward = await run_atomic(self.db, work)
            logger.info(f"📝 User {user_id} scored {score}/{total} on quiz {quiz_id} (+{reward} coins)")
            return {
                "score": score,
                "total_questions": total,
                "success_rate": percent(score, total),
                "coins_earned": reward,
                "passed": ratio >= PASS_RATIO,
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Quiz submission failed: {e}")
            raise InternalError("Could not submit quiz")

    # ==============================
    # 📈 PROGRESS
    # ==============================

    async def get_progress_list_async(self, user_id: uuid.UUID):
        records = (
            await self.db.scalars(
                select(Progress)
                .where(Progress.user_id == user_id)
                .order_by(desc(Progress.last_accessed))
            )
        ).all()
        if not records:
            return []

        progress_ids = [p.id for p in records]
        courses = {
            c.id: c
            for c in (
                await self.db.scalars(
                    select(Courses).where(Courses.id.in_([p.course_id for p in records]))
                )
            ).all()
        }

        completed: dict[uuid.UUID, list[uuid.UUID]] = {pid: [] for pid in progress_ids}
        for progress_id, lesson_id in (
            await self.db.execute(
                select(ProgressLessons.progress_id, ProgressLessons.lesson_id)
                .where(ProgressLessons.progress_id.in_(progress_ids))
                .order_by(ProgressLessons.completed_at)
            )
        ).all():
            completed[progress_id].append(lesson_id)

        results: dict[uuid.UUID, list[dict]] = {pid: [] for pid in progress_ids}
        for r in (
            await self.db.scalars(
                select(QuizResults)
                .where(QuizResults.progress_id.in_(progress_ids))
                .order_by(QuizResults.completed_at)
            )
        ).all():
            results[r.progress_id].append(
                {
                    "quiz_id": r.quiz_id,
                    "score": r.score,
                    "total_questions": r.total_questions,
                    "completed_at": r.completed_at,
                }
            )

        items = []
        for p in records:
            course = courses.get(p.course_id)
            items.append(
                {
                    "id": p.id,
                    "course": {
                        "id": course.id,
                        "title": course.title,
                        "image": course.image,
                        "level": course.level,
                    }
                    if course
                    else None,
                    "progress": p.progress,
                    "current_lesson_id": p.current_lesson_id,
                    "completed_lessons": completed[p.id],
                    "quiz_results": results[p.id],
                    "last_accessed": p.last_accessed,
                }
            )
        return items
