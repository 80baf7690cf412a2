"""
Analytics router.
"""

from fastapi import APIRouter, Depends

from talentflow.core.dependencies import get_analytics_service
from talentflow.schemas.analytics import AnalyticsReport, DashboardStats
from talentflow.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsReport)
async def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
    """Stage distribution, funnel conversion and time-to-hire."""
    return await service.build_report()


@router.get("/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.dashboard_stats()
