import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.api.modules.v1.waitlist.models.waitlist_model import WaitlistStatus


def normalize_email(value: str) -> str:
    """Trim and lower-case an email so lookups are case and whitespace insensitive."""
    return value.strip().lower()


class WaitlistEmailRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value


class WaitlistJoinRequest(WaitlistEmailRequest):
    user_id: Optional[str] = Field(default=None, max_length=255)


class WaitlistApproveRequest(WaitlistEmailRequest):
    send_invite: Optional[bool] = None


class WaitlistPromoteAllRequest(BaseModel):
    status: Literal["pending", "approved"] = "approved"


class WaitlistEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    status: WaitlistStatus
    position: int
    user_id: Optional[str] = None
    invited_at: Optional[datetime] = None
    created_at: datetime


class WaitlistStatusResponse(BaseModel):
    """Status check payload. ``position`` is only serialized when exposed."""

    email: str
    status: WaitlistStatus
    created_at: datetime
    position: Optional[int] = None


class WaitlistPositionResponse(BaseModel):
    email: str
    position: Optional[int]
    status: WaitlistStatus


class WaitlistListResponse(BaseModel):
    entries: List[WaitlistEntryResponse]
    total: int


class WaitlistStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class WaitlistPromoteAllResponse(BaseModel):
    promoted: int
    entries: List[WaitlistEntryResponse]


class WaitlistCompleteResponse(BaseModel):
    success: bool = True
    entry: WaitlistEntryResponse
