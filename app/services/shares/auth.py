from fastapi import Depends, HTTPException
from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    InternalError,
)
from app.core.security import SecurityService
from app.core.settings import settings
from app.db.models.database import User
from app.db.session import get_session
from app.libs.formats.users import public_user
from app.schemas.auth.user import LoginUser, UserCreate

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        security: SecurityService = Depends(SecurityService),
    ):
        self.db = db
        self.security = security

    async def register_async(self, schema: UserCreate):
        try:
            email = schema.email.lower()
            existing = await self.db.scalar(
                select(User.id).where(
                    or_(User.email == email, User.username == schema.username)
                )
            )
            if existing:
                raise ConflictError("Email or username is already taken")

            user = User(
                username=schema.username,
                email=email,
                password=await self.security.hash_password(schema.password),
                first_name=schema.first_name,
                last_name=schema.last_name,
                english_level=schema.english_level or "beginner",
                age=schema.age,
                bio=schema.bio,
                coins=settings.STARTING_COINS,
            )
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise ConflictError("Email or username is already taken")

            logger.info(f"👤 Registered user {user.username} ({user.id})")
            return {
                "message": "Registration successful",
                "token": await self.security.create_access_token(str(user.id)),
                "user": public_user(user),
            }
        except HTTPException:
            raise
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"Registration failed: {e}")
            raise InternalError("Registration failed")

    async def login_async(self, schema: LoginUser):
        user = await self.db.scalar(
            select(User).where(User.email == schema.email.lower())
        )

        # 1️⃣ unknown email and wrong password answer the same way
        password_ok = await self.security.verify_password(
            schema.password, user.password if user else None
        )
        if not user or not password_ok:
            raise BadRequestError(INVALID_CREDENTIALS)

        # 2️⃣ deactivated by an admin
        if not user.is_active:
            raise ForbiddenError("Account is deactivated")

        logger.info(f"🔑 Login {user.username}")
        return {
            "message": "Login successful",
            "token": await self.security.create_access_token(str(user.id)),
            "user": public_user(user),
        }
