from fastapi import APIRouter, Depends, Query

from app.core.deps import AuthorizationService
from app.core.enum import RevenuePeriod
from app.services.admin.stats import AdminStatsService

router = APIRouter(prefix="/admin", tags=["ADMIN STATS"])


@router.get("/stats")
async def get_stats(
    authorization: AuthorizationService = Depends(AuthorizationService),
    stats_service: AdminStatsService = Depends(AdminStatsService),
):
    await authorization.require_admin()
    return await stats_service.get_stats_async()


@router.get("/revenue")
async def get_revenue(
    period: RevenuePeriod = Query(RevenuePeriod.MONTHLY),
    authorization: AuthorizationService = Depends(AuthorizationService),
    stats_service: AdminStatsService = Depends(AdminStatsService),
):
    await authorization.require_admin()
    return await stats_service.get_revenue_async(period)
