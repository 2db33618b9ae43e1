import uuid
from typing import Any, Optional

from fastapi import Depends
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.database import AdminAuditLogs, User
from app.db.session import get_session
from app.libs.formats.pagination import paginate
from app.libs.formats.users import user_brief


def diff_fields(target: Any, updates: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """{field: {"old", "new"}} for the values in `updates` that differ from `target`."""
    changes = {}
    for field, value in updates.items():
        old = getattr(target, field)
        if old != value:
            changes[field] = {"old": old, "new": value}
    return changes


class AuditService:
    def __init__(self, db: AsyncSession = Depends(get_session)):
        self.db = db

    def record(
        self,
        admin_id: uuid.UUID,
        action: str,
        entity_type: str,
        entity_id: Optional[uuid.UUID],
        changes: Optional[dict[str, Any]] = None,
    ) -> AdminAuditLogs:
        """Stage an audit row in the caller's transaction."""
        log = AdminAuditLogs(
            admin_id=admin_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            changes=changes or {},
        )
        self.db.add(log)
        return log

    async def list_logs_async(
        self, page: int, size: int, entity_type: Optional[str] = None
    ):
        stmt = select(AdminAuditLogs, User).outerjoin(
            User, User.id == AdminAuditLogs.admin_id
        )
        count_stmt = select(func.count()).select_from(AdminAuditLogs)
        if entity_type:
            stmt = stmt.where(AdminAuditLogs.entity_type == entity_type)
            count_stmt = count_stmt.where(AdminAuditLogs.entity_type == entity_type)

        total = await self.db.scalar(count_stmt) or 0
        rows = (
            await self.db.execute(
                stmt.order_by(desc(AdminAuditLogs.created_at))
                .offset((page - 1) * size)
                .limit(size)
            )
        ).all()

        items = [
            {
                "id": log.id,
                "admin": user_brief(admin),
                "action": log.action,
                "entity_type": log.entity_type,
                "entity_id": log.entity_id,
                "changes": log.changes,
                "created_at": log.created_at,
            }
            for log, admin in rows
        ]
        return paginate(items, page, size, total)
