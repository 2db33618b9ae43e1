import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile, status

from app.core.deps import AuthorizationService
from app.libs.formats.text import parse_include
from app.schemas.user.courses import CommentCreate
from app.services.user.courses import CourseService

router = APIRouter(tags=["Courses"])


@router.get("/courses")
async def get_courses(
    level: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Title or description"),
    course_service: CourseService = Depends(CourseService),
):
    return await course_service.list_courses_async(level, category, search)


@router.get("/courses/{course_id}")
async def get_course_detail(
    course_id: uuid.UUID,
    include: Optional[str] = Query(None, description="likes,comments"),
    course_service: CourseService = Depends(CourseService),
):
    return await course_service.get_course_detail_async(course_id, parse_include(include))


@router.post("/courses", status_code=status.HTTP_201_CREATED)
async def create_course(
    title: str = Form(...),
    description: Optional[str] = Form(None),
    level: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: int = Form(0, ge=0),
    lessons: Optional[str] = Form(None, description="JSON array of lessons"),
    quizzes: Optional[str] = Form(None, description="JSON array of quizzes"),
    image: Optional[UploadFile] = File(None),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: CourseService = Depends(CourseService),
):
    teacher = await authorization.require_teacher()
    return await course_service.create_course_async(
        teacher.id, title, description, level, category, price, lessons, quizzes, image
    )


@router.get("/teacher/courses")
async def get_my_teaching_courses(
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: CourseService = Depends(CourseService),
):
    user = await authorization.get_current_user()
    return await course_service.get_teacher_courses_async(user.id)


@router.post("/courses/{course_id}/like")
async def toggle_course_like(
    course_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: CourseService = Depends(CourseService),
):
    user = await authorization.get_current_user()
    return await course_service.toggle_like_async(course_id, user.id)


@router.post("/courses/{course_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    course_id: uuid.UUID,
    schema: CommentCreate = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: CourseService = Depends(CourseService),
):
    user = await authorization.get_current_user()
    return await course_service.add_comment_async(course_id, user.id, schema)


@router.post("/courses/{course_id}/comments/{comment_id}/like")
async def toggle_comment_like(
    course_id: uuid.UUID,
    comment_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: CourseService = Depends(CourseService),
):
    user = await authorization.get_current_user()
    return await course_service.toggle_comment_like_async(course_id, comment_id, user.id)
