import uuid
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime

from ..core.constants import RouterOSVersion


class Router(SQLModel, table=True):
    __tablename__ = "routers"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False)
    site_name: Optional[str] = Field(default=None)
    host: str = Field(nullable=False)
    port: int = Field(default=443)
    username: str = Field(nullable=False)
    password: str = Field(nullable=False)
    # Solo "v7" (API REST) se puede consultar
    routeros_version: str = Field(default=RouterOSVersion.V7.value)
    use_https: bool = Field(default=True)

    # Written only by the poller
    is_online: bool = Field(default=False)
    last_seen_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
