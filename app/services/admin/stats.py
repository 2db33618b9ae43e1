from datetime import datetime, timedelta

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enum import PaymentStatus, PaymentType, RevenuePeriod
from app.db.models.database import Courses, CourseStudents, Payments, User
from app.db.session import get_session
from app.libs.formats.datetime import now as get_now
from app.libs.formats.datetime import start_of_day, start_of_month, start_of_week

# period -> (look-back window in days or None for all time, bucket start, label)
REVENUE_WINDOWS = {
    RevenuePeriod.DAILY: (30, start_of_day, "%Y-%m-%d"),
    RevenuePeriod.WEEKLY: (365, start_of_week, "%Y-%m-%d"),
    RevenuePeriod.MONTHLY: (365, start_of_month, "%Y-%m"),
    RevenuePeriod.YEARLY: (None, lambda dt: start_of_month(dt).replace(month=1), "%Y"),
}


class AdminStatsService:
    def __init__(self, db: AsyncSession = Depends(get_session)):
        self.db = db

    async def _revenue_since(self, since: datetime) -> int:
        total = await self.db.scalar(
            select(func.coalesce(func.sum(Payments.amount), 0)).where(
                Payments.status == PaymentStatus.COMPLETED.value,
                Payments.created_at >= since,
            )
        )
        return int(total or 0)

    async def get_stats_async(self):
        now = get_now()

        total_users = await self.db.scalar(select(func.count(User.id)))
        total_teachers = await self.db.scalar(
            select(func.count(User.id)).where(User.is_teacher.is_(True))
        )
        total_premium = await self.db.scalar(
            select(func.count(User.id)).where(User.is_premium.is_(True))
        )
        total_courses = await self.db.scalar(select(func.count(Courses.id)))

        # students per course, then averaged per level
        students = (
            select(
                Courses.id.label("course_id"),
                Courses.level.label("level"),
                func.count(CourseStudents.id).label("students"),
            )
            .outerjoin(CourseStudents, CourseStudents.course_id == Courses.id)
            .group_by(Courses.id, Courses.level)
            .subquery()
        )
        level_rows = (
            await self.db.execute(
                select(
                    students.c.level,
                    func.count(students.c.course_id),
                    func.avg(students.c.students),
                )
                .group_by(students.c.level)
                .order_by(students.c.level)
            )
        ).all()

        return {
            "total_users": total_users or 0,
            "total_teachers": total_teachers or 0,
            "total_courses": total_courses or 0,
            "total_premium_users": total_premium or 0,
            "monthly_revenue": await self._revenue_since(start_of_month(now)),
            "weekly_revenue": await self._revenue_since(start_of_week(now)),
            "courses_stats": [
                {
                    "level": level,
                    "count": count,
                    "avg_students": round(float(avg or 0), 2),
                }
                for level, count, avg in level_rows
            ],
        }

    async def get_revenue_async(self, period: RevenuePeriod = RevenuePeriod.MONTHLY):
        window_days, bucket_start, label_format = REVENUE_WINDOWS[period]

        stmt = select(Payments.created_at, Payments.amount, Payments.type).where(
            Payments.status == PaymentStatus.COMPLETED.value
        )
        if window_days is not None:
            stmt = stmt.where(Payments.created_at >= get_now() - timedelta(days=window_days))

        buckets: dict[datetime, dict] = {}
        for created_at, amount, payment_type in (
            await self.db.execute(stmt.order_by(Payments.created_at))
        ).all():
            start = bucket_start(created_at)
            bucket = buckets.get(start)
            if bucket is None:
                bucket = buckets[start] = {
                    "period": start.strftime(label_format),
                    "start": start,
                    "total_revenue": 0,
                    "transaction_count": 0,
                    "course_purchases": 0,
                    "premium_subscriptions": 0,
                }
            bucket["total_revenue"] += amount
            bucket["transaction_count"] += 1
            if payment_type == PaymentType.COURSE_PURCHASE.value:
                bucket["course_purchases"] += 1
            elif payment_type == PaymentType.PREMIUM_SUBSCRIPTION.value:
                bucket["premium_subscriptions"] += 1

        return {"period": period.value, "buckets": [buckets[k] for k in sorted(buckets)]}
