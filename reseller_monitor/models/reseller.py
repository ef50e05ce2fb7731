import uuid
from typing import Any, Optional
from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Reseller(SQLModel, table=True):
    __tablename__ = "resellers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False, index=True)
    bandwidth_cap_mbps: Optional[int] = Field(default=None)
    # Lista ordenada de {"type": "prefix|profile|comment", "value": "..."}
    detection_rules: Optional[list[dict[str, Any]]] = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ResellerUserMapping(SQLModel, table=True):
    """Explicit pin of a PPPoE username to a reseller."""

    __tablename__ = "reseller_user_mappings"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    reseller_id: uuid.UUID = Field(foreign_key="resellers.id", nullable=False)
    pppoe_username: str = Field(unique=True, index=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
