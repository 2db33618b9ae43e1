from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import AuthorizationService
from app.core.enum import PaymentType
from app.services.admin.audit import AuditService
from app.services.admin.payments import AdminPaymentsService

router = APIRouter(prefix="/admin", tags=["ADMIN PAYMENTS"])


@router.get("/payments")
async def get_payments(
    type: Optional[PaymentType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    payments_service: AdminPaymentsService = Depends(AdminPaymentsService),
):
    await authorization.require_admin()
    return await payments_service.get_payments_async(page, limit, type)


@router.get("/premium-subscriptions")
async def get_premium_subscriptions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    payments_service: AdminPaymentsService = Depends(AdminPaymentsService),
):
    await authorization.require_admin()
    return await payments_service.get_premium_subscriptions_async(page, limit)


@router.get("/audit-logs")
async def get_audit_logs(
    entity_type: Optional[str] = Query(None, description="user or course"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    authorization: AuthorizationService = Depends(AuthorizationService),
    audit_service: AuditService = Depends(AuditService),
):
    await authorization.require_admin()
    return await audit_service.list_logs_async(page, limit, entity_type)
