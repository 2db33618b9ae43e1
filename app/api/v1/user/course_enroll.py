import uuid

from fastapi import APIRouter, Depends

from app.core.deps import AuthorizationService
from app.db.models.database import User
from app.services.user.course_enroll import CourseEnrolls

router = APIRouter(tags=["User Course Enrollments"])


@router.post("/courses/{course_id}/enroll")
async def enroll_course(
    course_id: uuid.UUID,
    authorization_service: AuthorizationService = Depends(AuthorizationService),
    enroll_service: CourseEnrolls = Depends(CourseEnrolls),
):
    user: User = await authorization_service.get_current_user()
    return await enroll_service.enroll_async(course_id, user.id)


@router.get("/purchases/courses")
async def get_my_courses(
    authorization_service: AuthorizationService = Depends(AuthorizationService),
    purchase_service: CourseEnrolls = Depends(CourseEnrolls),
):
    user: User = await authorization_service.get_current_user()
    return await purchase_service.get_user_courses_async(user.id)
