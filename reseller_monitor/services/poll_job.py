# reseller_monitor/services/poll_job.py
import logging
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core.config import POLL_MAX_WORKERS, ROUTER_POLL_TIMEOUT
from ..core.exceptions import PollSetupError
from ..db.resellers_db import get_resellers_in_stored_order, get_user_mappings
from ..db.router_db import get_routers_to_poll
from ..models.router import Router
from .attribution_service import AttributionSnapshot
from .reconciliation_service import ReconciliationService, RouterPollResult

# Configuración del logging
logger = logging.getLogger("PollJob")


@dataclass
class PollRunReport:
    success: bool
    polled_count: int = 0
    results: list[RouterPollResult] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for item in data["results"]:
            item["router_id"] = str(item["router_id"])
            item["status"] = item["status"].value
        return data


async def load_setup(
    session_maker: async_sessionmaker, router_id: Optional[uuid.UUID] = None
) -> tuple[list[Router], AttributionSnapshot]:
    """
    Carga el registro de routers y la foto de resellers/mapeos, una vez por ciclo.
    Raises PollSetupError when either cannot be read.
    """
    try:
        async with session_maker() as session:
            routers = await get_routers_to_poll(session, router_id)
            resellers = await get_resellers_in_stored_order(session)
            mappings = await get_user_mappings(session)
    except (SQLAlchemyError, OSError) as e:
        raise PollSetupError(f"Failed to fetch routers: {e}") from e
    return routers, AttributionSnapshot.from_models(resellers, mappings)


async def run_poll_cycle(
    session_maker: async_sessionmaker,
    router_id: Optional[uuid.UUID] = None,
    timeout: float = ROUTER_POLL_TIMEOUT,
    max_workers: int = POLL_MAX_WORKERS,
) -> PollRunReport:
    """
    Ejecuta UN ciclo de consulta de routers.
    Solo un fallo al cargar la configuración marca el ciclo como fallido;
    los fallos de cada router quedan en su resultado.
    """
    logger.info("--- Iniciando ciclo de consulta ---")
    try:
        routers, snapshot = await load_setup(session_maker, router_id)
    except PollSetupError as e:
        logger.error(f"Poll cycle aborted: {e}")
        return PollRunReport(success=False, error=str(e))

    if not routers:
        logger.info("No hay routers para consultar.")
        return PollRunReport(success=True)

    service = ReconciliationService(session_maker, snapshot, timeout=timeout, max_workers=max_workers)
    results = await service.reconcile_all(routers)

    online = sum(1 for r in results if r.is_online)
    logger.info(f"--- Ciclo completado: {len(results)} routers, {online} online ---")
    return PollRunReport(success=True, polled_count=len(results), results=results)
