# reseller_monitor/api/poll/models.py
import uuid

from pydantic import BaseModel, ConfigDict, field_validator


class PollRequest(BaseModel):
    router_id: uuid.UUID | None = None

    @field_validator("router_id", mode="before")
    @classmethod
    def empty_means_all(cls, value):
        # "" o null: consultar todos los routers
        if value == "":
            return None
        return value


class RouterPollResultResponse(BaseModel):
    router_id: uuid.UUID
    router_name: str
    status: str
    is_online: bool
    session_count: int = 0
    failed_sessions: int = 0
    skipped_records: int = 0
    error: str | None = None
    persistence_errors: list[str] = []
    model_config = ConfigDict(from_attributes=True)


class PollRunResponse(BaseModel):
    success: bool
    polled_count: int = 0
    results: list[RouterPollResultResponse] = []
    error: str | None = None
