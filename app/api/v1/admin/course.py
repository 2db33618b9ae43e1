import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from app.core.deps import AuthorizationService
from app.core.enum import CourseStatusFilter
from app.schemas.admin.course import AdminCourseUpdate, CourseApprove
from app.services.admin.course import AdminCourseService

router = APIRouter(prefix="/admin/courses", tags=["ADMIN COURSE"])


@router.get("")
async def get_courses(
    search: Optional[str] = Query(None),
    status: CourseStatusFilter = Query(CourseStatusFilter.ALL),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    await authorization.require_admin()
    return await course_service.get_courses_async(page, limit, search, status)


@router.get("/{course_id}")
async def get_course(
    course_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    await authorization.require_admin()
    return await course_service.get_course_async(course_id)


@router.put("/{course_id}")
async def update_course(
    course_id: uuid.UUID,
    schema: AdminCourseUpdate = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    admin = await authorization.require_admin()
    return await course_service.update_course_async(admin.id, course_id, schema)


@router.delete("/{course_id}")
async def delete_course(
    course_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    admin = await authorization.require_admin()
    return await course_service.delete_course_async(admin.id, course_id)


@router.post("/{course_id}/approve")
async def approve_course(
    course_id: uuid.UUID,
    schema: Optional[CourseApprove] = Body(None),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    admin = await authorization.require_admin()
    approved = schema.approved if schema else True
    return await course_service.approve_course_async(admin.id, course_id, approved)


@router.get("/{course_id}/participants")
async def get_participants(
    course_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    course_service: AdminCourseService = Depends(AdminCourseService),
):
    await authorization.require_admin()
    return await course_service.get_participants_async(course_id, page, limit)
