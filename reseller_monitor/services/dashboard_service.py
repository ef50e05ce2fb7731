"""
Read-side projections over the reconciled session table.
Nothing here is stored: every figure is derived from the current rows.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from ..db.resellers_db import get_resellers_in_stored_order
from ..db.router_db import get_all_routers
from ..db.sessions_db import get_active_sessions
from ..models.reseller import Reseller
from ..models.router import Router
from ..models.session import PPPoESession


@dataclass
class ResellerStats:
    id: uuid.UUID
    name: str
    session_count: int
    bandwidth_bps: int
    total_bytes: int
    bandwidth_cap_mbps: Optional[int] = None


@dataclass
class RouterStats:
    id: uuid.UUID
    name: str
    site_name: Optional[str]
    is_online: bool
    session_count: int
    last_seen_at: Optional[datetime] = None


@dataclass
class DashboardSummary:
    total_routers: int
    online_routers: int
    total_sessions: int
    total_bandwidth_bps: int
    resellers: list[ResellerStats]
    routers: list[RouterStats]


def _bandwidth(session: PPPoESession) -> int:
    return (session.tx_rate_bps or 0) + (session.rx_rate_bps or 0)


def build_dashboard_summary(
    routers: Sequence[Router], resellers: Sequence[Reseller], sessions: Sequence[PPPoESession]
) -> DashboardSummary:
    """Aggregates active sessions per reseller and per router."""
    active = [s for s in sessions if s.is_active]

    reseller_stats = []
    for reseller in resellers:
        owned = [s for s in active if s.reseller_id == reseller.id]
        reseller_stats.append(
            ResellerStats(
                id=reseller.id,
                name=reseller.name,
                session_count=len(owned),
                bandwidth_bps=sum(_bandwidth(s) for s in owned),
                total_bytes=sum((s.tx_bytes or 0) + (s.rx_bytes or 0) for s in owned),
                bandwidth_cap_mbps=reseller.bandwidth_cap_mbps,
            )
        )
    reseller_stats.sort(key=lambda r: r.bandwidth_bps, reverse=True)

    router_stats = [
        RouterStats(
            id=router.id,
            name=router.name,
            site_name=router.site_name,
            is_online=bool(router.is_online),
            session_count=sum(1 for s in active if s.router_id == router.id),
            last_seen_at=router.last_seen_at,
        )
        for router in routers
    ]

    return DashboardSummary(
        total_routers=len(routers),
        online_routers=sum(1 for r in routers if r.is_online),
        total_sessions=len(active),
        total_bandwidth_bps=sum(_bandwidth(s) for s in active),
        resellers=reseller_stats,
        routers=router_stats,
    )


async def get_dashboard_summary(session: AsyncSession) -> DashboardSummary:
    routers = await get_all_routers(session)
    resellers = await get_resellers_in_stored_order(session)
    sessions = await get_active_sessions(session)
    return build_dashboard_summary(routers, resellers, sessions)
