from typing import Optional

from fastapi import Depends
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enum import PaymentType
from app.db.models.database import Courses, Payments, User
from app.db.session import get_session
from app.libs.formats.pagination import paginate
from app.libs.formats.users import user_brief


class AdminPaymentsService:
    def __init__(self, db: AsyncSession = Depends(get_session)):
        self.db = db

    async def get_payments_async(
        self, page: int, size: int, payment_type: Optional[PaymentType] = None
    ):
        stmt = (
            select(Payments, User, Courses.title)
            .join(User, User.id == Payments.user_id)
            .outerjoin(Courses, Courses.id == Payments.course_id)
        )
        count_stmt = select(func.count(Payments.id))
        if payment_type:
            stmt = stmt.where(Payments.type == payment_type.value)
            count_stmt = count_stmt.where(Payments.type == payment_type.value)

        total_items = await self.db.scalar(count_stmt) or 0
        rows = (
            await self.db.execute(
                stmt.order_by(desc(Payments.created_at))
                .offset((page - 1) * size)
                .limit(size)
            )
        ).all()

        items = [
            {
                "id": payment.id,
                "user": {**user_brief(user), "email": user.email},
                "course": {"id": payment.course_id, "title": course_title}
                if payment.course_id
                else None,
                "amount": payment.amount,
                "type": payment.type,
                "status": payment.status,
                "created_at": payment.created_at,
            }
            for payment, user, course_title in rows
        ]
        return paginate(items, page, size, total_items)

    async def get_premium_subscriptions_async(self, page: int, size: int):
        return await self.get_payments_async(page, size, PaymentType.PREMIUM_SUBSCRIPTION)
