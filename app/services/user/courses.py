import uuid
from collections import defaultdict
from typing import Optional

from fastapi import Depends, HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder
from loguru import logger
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enum import FileType
from app.core.exceptions import BadRequestError, InternalError, NotFoundError
from app.db.models.database import (
    CommentLikes,
    CourseComments,
    CourseLikes,
    Courses,
    CourseStudents,
    Lessons,
    QuizQuestions,
    Quizzes,
    User,
)
from app.db.session import get_session
from app.libs.formats.users import user_brief
from app.schemas.user.courses import CommentCreate, LessonIn, QuizIn
from app.services.shares.storage import StorageService

lessons_adapter = TypeAdapter(list[LessonIn])
quizzes_adapter = TypeAdapter(list[QuizIn])


def count_students():
    return (
        select(func.count(CourseStudents.id))
        .where(CourseStudents.course_id == Courses.id)
        .correlate(Courses)
        .scalar_subquery()
    )


def count_likes():
    return (
        select(func.count(CourseLikes.user_id))
        .where(CourseLikes.course_id == Courses.id)
        .correlate(Courses)
        .scalar_subquery()
    )


def count_lessons():
    return (
        select(func.count(Lessons.id))
        .where(Lessons.course_id == Courses.id)
        .correlate(Courses)
        .scalar_subquery()
    )


def course_summary(
    course: Courses,
    students_count: int = 0,
    likes_count: int = 0,
    lessons_count: int = 0,
) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "level": course.level,
        "category": course.category,
        "price": course.price,
        "image": course.image,
        "teacher": user_brief(course.teacher),
        "students_count": students_count,
        "likes_count": likes_count,
        "lessons_count": lessons_count,
        "is_active": course.is_active,
        "is_approved": course.is_approved,
        "created_at": course.created_at,
    }


class CourseService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        storage: StorageService = Depends(StorageService),
    ):
        self.db = db
        self.storage = storage

    async def _get_course_or_404(self, course_id: uuid.UUID) -> Courses:
        course = await self.db.scalar(select(Courses).where(Courses.id == course_id))
        if not course:
            raise NotFoundError("Course not found")
        return course

    # ==============================
    # 📚 CATALOG
    # ==============================

    async def list_courses_async(
        self,
        level: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ):
        stmt = (
            select(Courses, count_students(), count_likes(), count_lessons())
            .options(selectinload(Courses.teacher))
            .where(Courses.is_active.is_(True), Courses.is_approved.is_(True))
        )
        if level:
            stmt = stmt.where(Courses.level == level)
        if category:
            stmt = stmt.where(Courses.category == category)
        if search:
            kw = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(Courses.title.ilike(kw), Courses.description.ilike(kw))
            )

        rows = (await self.db.execute(stmt.order_by(desc(Courses.created_at)))).all()
        return [course_summary(c, s, l, n) for c, s, l, n in rows]

    async def get_course_detail_async(self, course_id: uuid.UUID, include: set[str]):
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

        students = (
            await self.db.scalars(
                select(User)
                .join(CourseStudents, CourseStudents.user_id == User.id)
                .where(CourseStudents.course_id == course_id)
                .order_by(CourseStudents.enrolled_at)
            )
        ).all()
        likes_count = await self.db.scalar(
            select(func.count(CourseLikes.user_id)).where(CourseLikes.course_id == course_id)
        )

        data = course_summary(course, len(students), likes_count or 0, len(course.lessons))
        data["students"] = [user_brief(s) for s in students]
        # outline only; content is served by the lesson view to enrolled users
        data["lessons"] = [
            {
                "id": lesson.id,
                "title": lesson.title,
                "duration": lesson.duration,
                "order": lesson.order_index,
            }
            for lesson in course.lessons
        ]
        data["quizzes"] = [
            {
                "id": quiz.id,
                "lesson_id": quiz.lesson_id,
                "question_count": len(quiz.questions),
            }
            for quiz in course.quizzes
        ]

        if "likes" in include:
            data["likes"] = await self.get_likers_async(course_id)
        if "comments" in include:
            data["comments"] = await self.get_comment_tree_async(course_id)

        return data

    # ==============================
    # 👩‍🏫 TEACHER
    # ==============================

    async def create_course_async(
        self,
        teacher_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
        level: Optional[str] = None,
        category: Optional[str] = None,
        price: int = 0,
        lessons_json: Optional[str] = None,
        quizzes_json: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ):
        image_url = None
        try:
            title = title.strip()
            if not title:
                raise BadRequestError("Title is required")

            try:
                lessons = lessons_adapter.validate_json(lessons_json) if lessons_json else []
                quizzes = quizzes_adapter.validate_json(quizzes_json) if quizzes_json else []
            except ValidationError as e:
                raise BadRequestError(
                    "Invalid lessons or quizzes payload",
                    details=jsonable_encoder(e.errors(include_url=False, include_context=False)),
                )

            for quiz in quizzes:
                if quiz.lesson_index is not None and quiz.lesson_index >= len(lessons):
                    raise BadRequestError(
                        f"Quiz lesson_index {quiz.lesson_index} is out of range"
                    )

            if image is not None and image.filename:
                image_url = await self.storage.save_image_async(image, FileType.THUMBNAILS)

            course = Courses(
                id=uuid.uuid4(),
                title=title,
                teacher_id=teacher_id,
                description=description,
                level=level,
                category=category,
                price=price,
                image=image_url,
                is_active=True,
                is_approved=False,
            )
            self.db.add(course)

            lesson_rows = []
            for index, lesson in enumerate(lessons):
                row = Lessons(
                    id=uuid.uuid4(),
                    course_id=course.id,
                    title=lesson.title,
                    order_index=index,
                    video_url=lesson.video_url,
                    content=lesson.content,
                    materials=lesson.materials,
                    duration=lesson.duration,
                )
                lesson_rows.append(row)
                self.db.add(row)

            for quiz in quizzes:
                quiz_row = Quizzes(
                    id=uuid.uuid4(),
                    course_id=course.id,
                    lesson_id=(
                        lesson_rows[quiz.lesson_index].id
                        if quiz.lesson_index is not None
                        else None
                    ),
                )
                self.db.add(quiz_row)
                for index, question in enumerate(quiz.questions):
                    self.db.add(
                        QuizQuestions(
                            quiz_id=quiz_row.id,
                            question=question.question,
                            options=question.options,
                            correct_answer=question.correct_answer,
                            order_index=index,
                        )
                    )

            await self.db.commit()
            logger.info(f"📚 Course '{title}' ({course.id}) created by {teacher_id}")
            return {
                "message": "Course created and sent for approval",
                "course": {
                    "id": course.id,
                    "title": course.title,
                    "price": course.price,
                    "image": course.image,
                    "lessons_count": len(lesson_rows),
                    "quizzes_count": len(quizzes),
                    "is_active": course.is_active,
                    "is_approved": course.is_approved,
                },
            }
        except HTTPException:
            await self.db.rollback()
            self.storage.discard(image_url)
            raise
        except Exception as e:
            await self.db.rollback()
            self.storage.discard(image_url)
            logger.exception(f"Course creation failed: {e}")
            raise InternalError("Could not create course")

    async def get_teacher_courses_async(self, teacher_id: uuid.UUID):
        rows = (
            await self.db.execute(
                select(Courses, count_likes(), count_lessons())
                .options(selectinload(Courses.teacher))
                .where(Courses.teacher_id == teacher_id)
                .order_by(desc(Courses.created_at))
            )
        ).all()

        course_ids = [c.id for c, _, _ in rows]
        students_by_course: dict[uuid.UUID, list[dict]] = defaultdict(list)
        if course_ids:
            student_rows = (
                await self.db.execute(
                    select(CourseStudents.course_id, User)
                    .join(User, User.id == CourseStudents.user_id)
                    .where(CourseStudents.course_id.in_(course_ids))
                    .order_by(CourseStudents.enrolled_at)
                )
            ).all()
            for course_id, student in student_rows:
                students_by_course[course_id].append(user_brief(student))

        items = []
        for course, likes, lessons in rows:
            students = students_by_course[course.id]
            data = course_summary(course, len(students), likes, lessons)
            data["students"] = students
            items.append(data)
        return items

    # ==============================
    # ❤️ LIKES
    # ==============================

    async def get_likers_async(self, course_id: uuid.UUID) -> list[dict]:
        users = (
            await self.db.scalars(
                select(User)
                .join(CourseLikes, CourseLikes.user_id == User.id)
                .where(CourseLikes.course_id == course_id)
                .order_by(CourseLikes.created_at)
            )
        ).all()
        return [user_brief(u) for u in users]

    async def toggle_like_async(self, course_id: uuid.UUID, user_id: uuid.UUID):
        try:
            await self._get_course_or_404(course_id)

            existing = await self.db.scalar(
                select(CourseLikes).where(
                    CourseLikes.course_id == course_id, CourseLikes.user_id == user_id
                )
            )
            if existing:
                await self.db.delete(existing)
                liked = False
            else:
                self.db.add(CourseLikes(course_id=course_id, user_id=user_id))
                liked = True

            try:
                await self.db.commit()
            except IntegrityError:
                # a parallel request inserted the same like
                await self.db.rollback()
                liked = True

            likes = await self.get_likers_async(course_id)
            return {"liked": liked, "likes_count": len(likes), "likes": likes}
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Like toggle failed: {e}")
            raise InternalError("Could not update like")

    # ==============================
    # 💬 COMMENTS
    # ==============================

    async def get_comment_tree_async(self, course_id: uuid.UUID) -> list[dict]:
        rows = (
            await self.db.execute(
                select(CourseComments, User)
                .join(User, User.id == CourseComments.user_id)
                .where(CourseComments.course_id == course_id)
                .order_by(CourseComments.created_at)
            )
        ).all()
        if not rows:
            return []

        like_rows = (
            await self.db.execute(
                select(CommentLikes.comment_id, User)
                .join(User, User.id == CommentLikes.user_id)
                .where(CommentLikes.comment_id.in_([c.id for c, _ in rows]))
                .order_by(CommentLikes.created_at)
            )
        ).all()
        likes_by_comment: dict[uuid.UUID, list[dict]] = defaultdict(list)
        for comment_id, liker in like_rows:
            likes_by_comment[comment_id].append(user_brief(liker))

        nodes: dict[uuid.UUID, dict] = {}
        top_level: list[dict] = []
        for comment, author in rows:
            likes = likes_by_comment[comment.id]
            node = {
                "id": comment.id,
                "user": user_brief(author),
                "text": comment.text,
                "likes": likes,
                "likes_count": len(likes),
                "created_at": comment.created_at,
            }
            if comment.parent_id is None:
                node["replies"] = []
                top_level.append(node)
            nodes[comment.id] = node

        for comment, _ in rows:
            if comment.parent_id is not None and comment.parent_id in nodes:
                nodes[comment.parent_id]["replies"].append(nodes[comment.id])

        return top_level

    async def add_comment_async(
        self, course_id: uuid.UUID, user_id: uuid.UUID, schema: CommentCreate
    ):
        try:
            await self._get_course_or_404(course_id)

            text = schema.text.strip()
            if not text:
                raise BadRequestError("Comment text is required")

            if schema.reply_to is not None:
                parent = await self.db.scalar(
                    select(CourseComments).where(
                        CourseComments.id == schema.reply_to,
                        CourseComments.course_id == course_id,
                        CourseComments.parent_id.is_(None),
                    )
                )
                if not parent:
                    raise NotFoundError("Comment to reply to not found")

            comment = CourseComments(
                course_id=course_id,
                user_id=user_id,
                text=text,
                parent_id=schema.reply_to,
            )
            self.db.add(comment)
            await self.db.commit()

            return {
                "message": "Reply added" if schema.reply_to else "Comment added",
                "comment_id": comment.id,
                "comments": await self.get_comment_tree_async(course_id),
            }
        except HTTPException:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Adding comment failed: {e}")
            raise InternalError("Could not add comment")

    async def toggle_comment_like_async(
        self, course_id: uuid.UUID, comment_id: uuid.UUID, user_id: uuid.UUID
    ):
        try:
            await self._get_course_or_404(course_id)

            comment = await self.db.scalar(
                select(CourseComments).where(
                    CourseComments.id == comment_id,
                    CourseComments.course_id == course_id,
                )
            )
            if not comment:
                raise NotFoundError("Comment not found")

            removed = await self.db.execute(
                delete(CommentLikes).where(
                    CommentLikes.comment_id == comment_id,
                    CommentLikes.user_id == user_id,
                )
            )
            liked = removed.rowcount == 0
            if liked:
                self.db.add(CommentLikes(comment_id=comment_id, user_id=user_id))

            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                liked = True

            tree = await self.get_comment_tree_async(course_id)
            node = next((c for c in tree if c["id"] == comment_id), None)
            if node is None:
                node = next(
                    r for c in tree for r in c["replies"] if r["id"] == comment_id
                )
            return {"liked": liked, "comment": node}
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Comment like toggle failed: {e}")
            raise InternalError("Could not update comment like")
