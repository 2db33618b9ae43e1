import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

# --- ADMIN ROUTES ---
from app.api.v1.admin import course as admin_course
from app.api.v1.admin import payments as admin_payments
from app.api.v1.admin import stats as admin_stats
from app.api.v1.admin import user as admin_user

# ===== IMPORT ROUTERS =====
from app.api.v1 import auth, pages
from app.api.v1.shares import profile, wallets

# --- USER ROUTES ---
from app.api.v1.user import chat, course_enroll, learning, social
from app.api.v1.user import courses as user_courses
from app.core.exceptions import register_exception_handlers
from app.core.logging import configure_logging
from app.core.settings import settings
from app.db.bootstrap import bootstrap
from app.db.session import Database

# --- MIDDLEWARE ---
from app.middleware.request_context import RequestContextMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):

    # ================================
    # 1) FILES + DATABASE
    # ================================
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    os.makedirs(settings.PUBLIC_DIR, exist_ok=True)
    app.state.db = Database(settings.DATABASE_ASYNC_URL, echo=settings.DB_ECHO)
    await app.state.db.create_all()

    # ================================
    # 2) DEFAULT ADMIN / DEMO DATA
    # ================================
    await bootstrap(app.state.db)
    logger.info(f"🚀 EnglishMaster API ready on port {settings.PORT}")

    try:
        yield
    finally:
        await app.state.db.dispose()


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="EnglishMaster API",
        description="Courses, lessons, quizzes and a coin economy for English learners",
        version="0.1.0",
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    # --- STATIC FILES (directories are created on startup) ---
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")
    app.mount("/static", StaticFiles(directory=settings.PUBLIC_DIR, check_dir=False), name="static")

    prefix = "/api"

    # ===== REGISTER ROUTERS =====

    # --- Share ---
    app.include_router(auth.router, prefix=prefix)
    app.include_router(profile.router, prefix=prefix)
    app.include_router(wallets.router, prefix=prefix)

    # --- USER ROUTES ---
    app.include_router(user_courses.router, prefix=prefix)
    app.include_router(course_enroll.router, prefix=prefix)
    app.include_router(learning.router, prefix=prefix)
    app.include_router(social.router, prefix=prefix)
    app.include_router(chat.router, prefix=prefix)

    # --- ADMIN ROUTES ---
    app.include_router(admin_stats.router, prefix=prefix)
    app.include_router(admin_user.router, prefix=prefix)
    app.include_router(admin_course.router, prefix=prefix)
    app.include_router(admin_payments.router, prefix=prefix)

    # --- HTML PAGES ---
    app.include_router(pages.router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
