# reseller_monitor/models/session.py
"""
PPPoE session model.

One row per (router_id, username). Rows are never deleted by the poller:
sessions that disappear from a router are kept with is_active=False.
"""
import uuid
from typing import Optional
from datetime import datetime

from sqlalchemy import BigInteger, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


class PPPoESession(SQLModel, table=True):
    __tablename__ = "pppoe_sessions"
    __table_args__ = (
        UniqueConstraint("router_id", "username", name="uq_pppoe_sessions_router_username"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    router_id: uuid.UUID = Field(foreign_key="routers.id", nullable=False, index=True)
    username: str = Field(nullable=False)

    assigned_ip: Optional[str] = None
    interface: Optional[str] = None
    comment: Optional[str] = None
    profile: Optional[str] = None

    uptime_seconds: int = Field(default=0)
    tx_bytes: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    rx_bytes: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    tx_rate_bps: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    rx_rate_bps: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))

    is_active: bool = Field(default=True, index=True)
    reseller_id: Optional[uuid.UUID] = Field(default=None, foreign_key="resellers.id")
    # "mapping" | "manual" | "rule"; NULL with a reseller_id means set by hand
    attribution_source: Optional[str] = Field(default=None)
    # Override puesto a mano; el upsert del poller nunca lo sobrescribe
    manual_reseller_id: Optional[uuid.UUID] = Field(default=None, foreign_key="resellers.id")

    last_updated_at: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow)
