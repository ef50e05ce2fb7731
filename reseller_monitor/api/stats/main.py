# reseller_monitor/api/stats/main.py
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from ...db.engine import get_session
from ...services.dashboard_service import get_dashboard_summary
from .models import DashboardSummaryResponse

router = APIRouter()


@router.get("/stats/dashboard", response_model=DashboardSummaryResponse)
async def get_dashboard(session: AsyncSession = Depends(get_session)):
    summary = await get_dashboard_summary(session)
    return DashboardSummaryResponse.model_validate(summary)
