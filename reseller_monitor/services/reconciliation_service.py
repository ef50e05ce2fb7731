import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import POLL_MAX_WORKERS, ROUTER_POLL_TIMEOUT
from ..core.constants import PollStatus
from ..core.exceptions import PersistenceFailure
from ..db.router_db import update_router_reachability
from ..db.sessions_db import (
    deactivate_router_sessions,
    get_manual_assignments,
    upsert_active_session,
)
from ..models.router import Router
from ..utils.device_clients.mikrotik.ppp import normalize_active_session
from ..utils.device_clients.mikrotik.rest_client import PollOutcome, poll_router
from .attribution_service import AttributionSnapshot, SessionFacts, resolve_attribution

logger = logging.getLogger(__name__)


@dataclass
class RouterPollResult:
    """Per-router entry of the run report."""

    router_id: uuid.UUID
    router_name: str
    status: PollStatus
    is_online: bool
    session_count: int = 0
    failed_sessions: int = 0
    skipped_records: int = 0
    error: Optional[str] = None
    persistence_errors: list[str] = field(default_factory=list)


class ReconciliationService:
    """
    Sincroniza pppoe_sessions con lo que reporta cada router.

    Las consultas de red se hacen en paralelo (hilos, acotadas por
    max_workers); las escrituras se aplican router por router, cada una
    en su propia transacción.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker,
        snapshot: AttributionSnapshot,
        timeout: float = ROUTER_POLL_TIMEOUT,
        max_workers: int = POLL_MAX_WORKERS,
    ):
        self.session_maker = session_maker
        self.snapshot = snapshot
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(max(1, max_workers))

    async def fetch(self, router: Router) -> PollOutcome:
        """Poll one router in a worker thread. Never raises."""
        async with self._semaphore:
            logger.info(f"--- Consultando router {router.name} ({router.host}) ---")
            try:
                return await asyncio.to_thread(poll_router, router, self.timeout)
            except Exception as e:
                logger.exception(f"Unexpected error polling router {router.name} ({router.host})")
                return PollOutcome(status=PollStatus.UNREACHABLE, error=f"Unexpected error: {e}")

    async def reconcile_all(self, routers: Sequence[Router]) -> list[RouterPollResult]:
        outcomes = await asyncio.gather(*(self.fetch(r) for r in routers))
        results = []
        for router, outcome in zip(routers, outcomes):
            results.append(await self.apply(router, outcome))
        return results

    async def apply(self, router: Router, outcome: PollOutcome) -> RouterPollResult:
        """Persist reachability and, when the poll succeeded, the router's sessions."""
        result = RouterPollResult(
            router_id=router.id,
            router_name=router.name,
            status=outcome.status,
            is_online=outcome.is_online,
            error=outcome.error,
        )

        # Dialecto no soportado: no hubo consulta, no se toca el estado del router
        if outcome.status == PollStatus.UNSUPPORTED:
            return result

        now = datetime.utcnow()
        async with self.session_maker() as session:
            try:
                await update_router_reachability(session, router.id, outcome.is_online, now)
            except PersistenceFailure as e:
                result.persistence_errors.append(str(e))

        if outcome.status != PollStatus.OK:
            if outcome.is_online:
                logger.warning(f"Router {router.name} ({router.host}) online but poll failed: {outcome.error}")
            else:
                logger.warning(f"Estado de Router {router.name} ({router.host}): OFFLINE ({outcome.error})")
            return result

        async with self.session_maker() as session:
            await self._reconcile_sessions(session, router, outcome.sessions, now, result)

        logger.info(
            f"Router {router.name} ({router.host}): {result.session_count} active sessions"
            + (f", {result.failed_sessions} failed" if result.failed_sessions else "")
        )
        return result

    async def _reconcile_sessions(
        self,
        session: AsyncSession,
        router: Router,
        raw_sessions: list[dict],
        now: datetime,
        result: RouterPollResult,
    ) -> None:
        """
        Marcar todas como inactivas y luego upsert de las observadas,
        dentro de una sola transacción. Cada upsert va en un SAVEPOINT.
        """
        try:
            manual = await get_manual_assignments(session, router.id)
            await deactivate_router_sessions(session, router.id)
        except SQLAlchemyError as e:
            await session.rollback()
            message = f"Could not reset sessions for router {router.name}: {e}"
            logger.error(message)
            result.persistence_errors.append(message)
            result.failed_sessions = len(raw_sessions)
            return

        seen: set[str] = set()
        for raw in raw_sessions:
            active = normalize_active_session(raw)
            if active is None:
                result.skipped_records += 1
                logger.warning(f"Router {router.name}: skipping /ppp/active record without name")
                continue
            # Una fila por (router, username): gana la primera aparición
            if active.username in seen:
                result.skipped_records += 1
                logger.warning(f"Router {router.name}: duplicate session {active.username} in /ppp/active, skipped")
                continue
            seen.add(active.username)

            facts = SessionFacts(
                username=active.username,
                profile=active.profile,
                comment=active.comment,
                reseller_id=manual.get(active.username),
            )
            attribution = resolve_attribution(facts, self.snapshot)

            try:
                async with session.begin_nested():
                    await upsert_active_session(session, router.id, active, attribution, now)
                result.session_count += 1
            except PersistenceFailure as e:
                logger.error(f"Router {router.name}: {e}")
                result.failed_sessions += 1
                result.persistence_errors.append(str(e))

        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            message = f"Could not commit sessions for router {router.name}: {e}"
            logger.error(message)
            result.persistence_errors.append(message)
            result.failed_sessions += result.session_count
            result.session_count = 0
