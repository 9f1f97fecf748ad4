from pydantic import BaseModel, ValidationError, field_validator
from typing import Any, Optional
from datetime import datetime, timezone
from enum import Enum
from dataclasses import dataclass

from app.errors import InvalidEmail
from app.utils.validation import normalize_email

class SubscriberRecord(BaseModel):
    email: str
    created_at: datetime
    ip: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # naive timestamps in older documents are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class InsertStatus(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"

@dataclass(frozen=True)
class InsertOutcome:
    status: InsertStatus
    record: Optional[SubscriberRecord] = None

    @property
    def inserted(self) -> bool:
        return self.status == InsertStatus.INSERTED

    @classmethod
    def created(cls, record: SubscriberRecord) -> "InsertOutcome":
        return cls(InsertStatus.INSERTED, record)

    @classmethod
    def already_exists(cls) -> "InsertOutcome":
        return cls(InsertStatus.ALREADY_EXISTS)

class NotifyRequest(BaseModel):
    """Body of POST /api/notify, email is canonical once validated"""
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def canonical_email(cls, value: Any) -> str:
        try:
            return normalize_email(value)
        except InvalidEmail as e:
            raise ValueError(e.message)

def parse_notify_request(body: Any) -> NotifyRequest:
    """Validate a decoded JSON body, raising InvalidEmail on any failure"""
    if not isinstance(body, dict):
        raise InvalidEmail()
    try:
        return NotifyRequest.model_validate(body)
    except ValidationError:
        raise InvalidEmail()

class NotifyResponse(BaseModel):
    ok: bool = True
    message: str

class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
