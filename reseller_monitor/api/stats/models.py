# reseller_monitor/api/stats/models.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


# --- Modelos Pydantic ---
class ResellerStatsResponse(BaseModel):
    id: uuid.UUID
    name: str
    session_count: int
    bandwidth_bps: int
    total_bytes: int
    bandwidth_cap_mbps: int | None = None
    model_config = ConfigDict(from_attributes=True)


class RouterStatsResponse(BaseModel):
    id: uuid.UUID
    name: str
    site_name: str | None = None
    is_online: bool
    session_count: int
    last_seen_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class DashboardSummaryResponse(BaseModel):
    total_routers: int
    online_routers: int
    total_sessions: int
    total_bandwidth_bps: int
    resellers: list[ResellerStatsResponse]
    routers: list[RouterStatsResponse]
    model_config = ConfigDict(from_attributes=True)
