import uuid

from loguru import logger
from sqlalchemy import select

from app.core.security import SecurityService
from app.core.settings import settings
from app.db.models.database import Courses, Lessons, User
from app.db.session import Database

DEMO_VIDEO = "https://www.youtube.com/embed/dQw4w9WgXcQ"

DEMO_COURSES = [
    {
        "title": "English for Beginners",
        "description": "Learn the basics of the English language",
        "level": "beginner",
        "category": "General English",
        "price": 0,
        "lessons": [
            {
                "title": "Greetings",
                "content": "Hello, how are you? This is a basic greeting in English. Practice saying it with friends.",
                "duration": 30,
            },
            {
                "title": "Introducing yourself",
                "content": "My name is John. I am from Uzbekistan. What is your name?",
                "duration": 45,
            },
        ],
    },
    {
        "title": "Business English - Intermediate",
        "description": "A course in English for business",
        "level": "intermediate",
        "category": "Business",
        "price": 500,
        "lessons": [
            {
                "title": "Writing emails",
                "content": "Formal emails: Dear Sir/Madam, I am writing to inquire about...",
                "duration": 60,
            },
        ],
    },
]


async def ensure_admin(database: Database) -> User | None:
    if not settings.ADMIN_PASSWORD:
        logger.warning("⚠️ ADMIN_PASSWORD is empty, default admin account not created")
        return None

    async with database.session_factory() as db:
        admin = await db.scalar(select(User).where(User.email == settings.ADMIN_EMAIL.lower()))
        if admin:
            logger.info(f"👑 Admin account present: {admin.email}")
            return admin

        async with SecurityService() as security:
            password = await security.hash_password(settings.ADMIN_PASSWORD)

        admin = User(
            username=settings.ADMIN_USERNAME,
            email=settings.ADMIN_EMAIL.lower(),
            password=password,
            first_name="System",
            last_name="Administrator",
            is_admin=True,
            is_teacher=True,
            is_premium=True,
            coins=10000,
            rating=1000,
        )
        db.add(admin)
        await db.commit()
        logger.info(f"👑 Default admin account created: {admin.email}")
        return admin


async def seed_demo_courses(database: Database, teacher_id: uuid.UUID) -> None:
    async with database.session_factory() as db:
        for data in DEMO_COURSES:
            exists = await db.scalar(select(Courses.id).where(Courses.title == data["title"]))
            if exists:
                continue

            course = Courses(
                id=uuid.uuid4(),
                title=data["title"],
                teacher_id=teacher_id,
                description=data["description"],
                level=data["level"],
                category=data["category"],
                price=data["price"],
                is_active=True,
                is_approved=True,
            )
            db.add(course)
            for index, lesson in enumerate(data["lessons"]):
                db.add(
                    Lessons(
                        course_id=course.id,
                        title=lesson["title"],
                        order_index=index,
                        video_url=DEMO_VIDEO,
                        content=lesson["content"],
                        materials=[],
                        duration=lesson["duration"],
                    )
                )
            logger.info(f"📚 Demo course created: {data['title']}")
        await db.commit()


async def bootstrap(database: Database) -> None:
    admin = await ensure_admin(database)
    if settings.SEED_DEMO_COURSES and admin is not None:
        await seed_demo_courses(database, admin.id)
