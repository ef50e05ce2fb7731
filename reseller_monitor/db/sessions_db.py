# reseller_monitor/db/sessions_db.py
"""
Escrituras sobre pppoe_sessions.

Las funciones de reconciliación no hacen commit: el coordinador agrupa
"marcar inactivas + upsert" de un router en una sola transacción.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import and_, or_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.constants import AttributionSource
from ..core.exceptions import PersistenceFailure
from ..models.session import PPPoESession
from ..services.attribution_service import Attribution
from ..utils.device_clients.mikrotik.ppp import ActiveSession

logger = logging.getLogger(__name__)

# Columnas que el router reporta y que se sobrescriben en cada upsert
_UPSERT_COLUMNS = (
    "assigned_ip",
    "interface",
    "comment",
    "profile",
    "uptime_seconds",
    "tx_bytes",
    "rx_bytes",
    "tx_rate_bps",
    "rx_rate_bps",
    "is_active",
    "reseller_id",
    "attribution_source",
    "last_updated_at",
)


def _insert_for(session: AsyncSession):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise PersistenceFailure(f"Upsert not supported for database dialect '{dialect}'")


async def get_manual_assignments(session: AsyncSession, router_id: uuid.UUID) -> dict[str, uuid.UUID]:
    """
    reseller_id puestos a mano para un router: manual_reseller_id, o un
    reseller_id con attribution_source NULL/"manual" escrito por fuera del poller.
    Los asignados por mapeo o por regla no cuentan: se recalculan en cada ciclo.
    """
    stmt = select(
        PPPoESession.username, PPPoESession.manual_reseller_id, PPPoESession.reseller_id
    ).where(
        PPPoESession.router_id == router_id,
        or_(
            PPPoESession.manual_reseller_id.is_not(None),
            and_(
                PPPoESession.reseller_id.is_not(None),
                or_(
                    PPPoESession.attribution_source.is_(None),
                    PPPoESession.attribution_source == AttributionSource.MANUAL.value,
                ),
            ),
        ),
    )
    result = await session.exec(stmt)
    return {
        username: manual_id if manual_id is not None else reseller_id
        for username, manual_id, reseller_id in result.all()
    }


async def deactivate_router_sessions(session: AsyncSession, router_id: uuid.UUID) -> int:
    """Marca como inactivas todas las sesiones activas del router. No hace commit."""
    stmt = (
        update(PPPoESession)
        .where(PPPoESession.router_id == router_id, PPPoESession.is_active == True)  # noqa: E712
        .values(is_active=False)
    )
    result = await session.exec(stmt)
    return result.rowcount or 0


async def upsert_active_session(
    session: AsyncSession,
    router_id: uuid.UUID,
    active: ActiveSession,
    attribution: Optional[Attribution],
    now: datetime,
) -> None:
    """
    INSERT ... ON CONFLICT (router_id, username) DO UPDATE.
    The router's answer is authoritative, every mutable column is overwritten.
    No hace commit.
    """
    values = {
        "router_id": router_id,
        "username": active.username,
        "assigned_ip": active.assigned_ip,
        "interface": active.interface,
        "comment": active.comment,
        "profile": active.profile,
        "uptime_seconds": active.uptime_seconds,
        "tx_bytes": active.tx_bytes,
        "rx_bytes": active.rx_bytes,
        "tx_rate_bps": active.tx_rate_bps,
        "rx_rate_bps": active.rx_rate_bps,
        "is_active": True,
        "reseller_id": attribution.reseller_id if attribution else None,
        "attribution_source": attribution.source.value if attribution else None,
        "last_updated_at": now,
    }
    insert = _insert_for(session)
    stmt = insert(PPPoESession).values(id=uuid.uuid4(), created_at=now, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["router_id", "username"],
        set_={column: stmt.excluded[column] for column in _UPSERT_COLUMNS},
    )
    try:
        await session.exec(stmt)
    except SQLAlchemyError as e:
        raise PersistenceFailure(f"Failed to upsert session {active.username}: {e}") from e


async def assign_session_reseller(
    session: AsyncSession, router_id: uuid.UUID, username: str, reseller_id: Optional[uuid.UUID]
) -> int:
    """
    Override manual del reseller de una sesión. Con reseller_id=None se
    elimina el override y el poller vuelve a calcular la atribución.
    El override queda en manual_reseller_id aunque luego gane un mapeo.
    Devuelve el número de filas afectadas.
    """
    source = AttributionSource.MANUAL.value if reseller_id else None
    stmt = (
        update(PPPoESession)
        .where(PPPoESession.router_id == router_id, PPPoESession.username == username)
        .values(reseller_id=reseller_id, attribution_source=source, manual_reseller_id=reseller_id)
    )
    try:
        result = await session.exec(stmt)
        await session.commit()
        return result.rowcount or 0
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error en sessions_db.assign_session_reseller para {username}: {e}")
        raise PersistenceFailure(str(e)) from e


async def get_active_sessions(session: AsyncSession) -> Sequence[PPPoESession]:
    result = await session.exec(select(PPPoESession).where(PPPoESession.is_active == True))  # noqa: E712
    return result.all()
