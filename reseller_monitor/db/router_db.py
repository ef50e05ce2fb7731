import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.exceptions import PersistenceFailure
from ..models.router import Router
from ..utils.security import decrypt_data

logger = logging.getLogger(__name__)


def _with_plain_password(router: Router) -> Router:
    """Return a copy with decrypted password, the stored row is left untouched."""
    router_out = router.model_copy()
    if router_out.password:
        router_out.password = decrypt_data(router_out.password)
    return router_out


async def get_routers_to_poll(session: AsyncSession, router_id: Optional[uuid.UUID] = None) -> list[Router]:
    """
    Obtiene los routers a consultar: todos, o solo uno si se indica router_id.
    Las contraseñas se devuelven descifradas. Los errores de BD se propagan.
    """
    stmt = select(Router).order_by(Router.name)
    if router_id is not None:
        stmt = stmt.where(Router.id == router_id)
    result = await session.exec(stmt)
    return [_with_plain_password(r) for r in result.all()]


async def get_all_routers(session: AsyncSession) -> Sequence[Router]:
    """Obtiene todos los routers (sin credenciales descifradas) ordenados por nombre."""
    result = await session.exec(select(Router).order_by(Router.name))
    return result.all()


async def update_router_reachability(
    session: AsyncSession, router_id: uuid.UUID, is_online: bool, seen_at: Optional[datetime] = None
) -> None:
    """
    Guarda is_online. last_seen_at solo se toca cuando el router respondió.
    """
    values = {"is_online": is_online, "updated_at": datetime.utcnow()}
    if is_online:
        values["last_seen_at"] = seen_at or datetime.utcnow()

    try:
        await session.exec(update(Router).where(Router.id == router_id).values(**values))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error en router_db.update_router_reachability para {router_id}: {e}")
        raise PersistenceFailure(f"Could not update router status: {e}") from e
