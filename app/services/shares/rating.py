import math
import uuid

from fastapi import Depends
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.database import Progress, User
from app.db.session import get_session


class RatingService:
    def __init__(self, db: AsyncSession = Depends(get_session)):
        self.db = db

    async def recompute_async(self, user_id: uuid.UUID) -> int:
        """rating = floor(mean progress %) over the user's progress records, 0 with none.

        Runs inside the caller's transaction; the caller commits.
        """
        avg = await self.db.scalar(
            select(func.avg(Progress.progress)).where(Progress.user_id == user_id)
        )
        rating = int(math.floor(float(avg))) if avg is not None else 0
        await self.db.execute(
            update(User).where(User.id == user_id).values(rating=rating)
        )
        return rating
