import os
import uuid

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.core.exceptions import NotFoundError
from app.core.settings import settings

router = APIRouter(tags=["Pages"], include_in_schema=False)


def html_page(name: str) -> FileResponse:
    path = os.path.join(settings.PUBLIC_DIR, f"{name}.html")
    if not os.path.isfile(path):
        raise NotFoundError("Page not found")
    return FileResponse(path, media_type="text/html")


@router.get("/")
async def index_page():
    return html_page("index")


@router.get("/login")
async def login_page():
    return html_page("login")


@router.get("/register")
async def register_page():
    return html_page("register")


@router.get("/courses")
async def courses_page():
    return html_page("courses")


@router.get("/course/{course_id}")
async def course_page(course_id: uuid.UUID):
    return html_page("course")


@router.get("/profile")
async def profile_page():
    return html_page("profile")


@router.get("/teacher")
async def teacher_page():
    return html_page("teacher")


@router.get("/admin")
async def admin_page():
    return html_page("admin")
