import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime
from sqlmodel import Field, SQLModel


class WaitlistStatus(str, Enum):
    """Lifecycle states of a waitlist entry."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def now_utc_aware():
    """Return current UTC datetime with timezone awareness."""
    return datetime.now(timezone.utc)


class WaitlistEntry(SQLModel, table=True):
    """Database model for one email's place on the waitlist.

    Attributes:
        id: Unique identifier assigned at creation.
        email: Normalized (trimmed, lower-cased) email; unique across entries.
        status: Current lifecycle state. Only ``pending`` entries are ranked.
        position: Stored queue position assigned at join time. Renumbered
            when positions are recalculated, frozen once the entry leaves
            ``pending``.
        user_id: Optional reference to a user record owned by the host auth
            service. Not enforced as a foreign key.
        invited_at: Set when an invite was sent (on approval or promotion).
        created_at: Timestamp of the join; never updated.
    """

    __tablename__ = "waitlist_entries"
    __table_args__ = (
        CheckConstraint("position > 0", name="ck_waitlist_entries_position_positive"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True, nullable=False)
    email: str = Field(unique=True, index=True, max_length=255, nullable=False)
    status: WaitlistStatus = Field(default=WaitlistStatus.PENDING, index=True, nullable=False)
    position: int = Field(index=True, ge=1, nullable=False)
    user_id: Optional[str] = Field(default=None, max_length=255)
    invited_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=now_utc_aware,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
