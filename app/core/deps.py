# app/core/deps.py
import uuid

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.context import get_request
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import SecurityService
from app.db.models.database import User
from app.db.session import get_session


class AuthorizationService:
    def __init__(
        self,
        db: AsyncSession = Depends(get_session),
        security: SecurityService = Depends(SecurityService),
    ):
        self.db = db
        self.security = security

    # ==============================
    # 🧩 CORE AUTH CHECKS
    # ==============================

    @staticmethod
    def _read_bearer_token() -> str | None:
        request = get_request()
        header = request.headers.get("authorization")
        if not header:
            return None
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None

    async def get_current_user(self) -> User:
        """Load the user named by the `Authorization: Bearer` token."""
        token = self._read_bearer_token()
        if not token:
            raise UnauthorizedError("Token is required")

        try:
            payload = await self.security.decode_access_token(token)
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise ForbiddenError("Invalid or expired token")

        user = await self.db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise ForbiddenError("Invalid or expired token")
        if not user.is_active:
            raise ForbiddenError("Account is deactivated")
        return user

    # ==============================
    # 🧩 ROLE-BASED ACCESS CONTROL
    # ==============================

    async def require_admin(self) -> User:
        user = await self.get_current_user()
        if not user.is_admin:
            raise ForbiddenError("Admin access required")
        return user

    async def require_teacher(self) -> User:
        user = await self.get_current_user()
        if not (user.is_teacher or user.is_admin):
            raise ForbiddenError("Only teachers can perform this action")
        return user
