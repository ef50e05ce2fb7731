from typing import Sequence

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models.reseller import Reseller, ResellerUserMapping


async def get_resellers_in_stored_order(session: AsyncSession) -> Sequence[Reseller]:
    """
    Resellers in the order detection rules are evaluated:
    creation time, then name, then id so ties never depend on the backend.
    """
    stmt = select(Reseller).order_by(Reseller.created_at, Reseller.name, Reseller.id)
    result = await session.exec(stmt)
    return result.all()


async def get_user_mappings(session: AsyncSession) -> Sequence[ResellerUserMapping]:
    result = await session.exec(select(ResellerUserMapping).order_by(ResellerUserMapping.pppoe_username))
    return result.all()
