from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.api.core.config import Settings, settings


class WaitlistOptions(BaseModel):
    """Per-deployment waitlist behavior. Immutable once built.

    Attributes:
        require_admin: Admin endpoints need a valid session.
        max_entries: Capacity over all entries, any status. 0 means unlimited.
        enabled: When False, joins are refused.
        allow_status_check: When False, the status endpoint is refused.
        show_position: Include the pending rank in status responses.
        mark_invited_on_approve: Default for ``send_invite`` on approval.
        recalculate_positions: Close position gaps among pending entries when
            one is approved or rejected.
        position_count_scope: Entries counted to assign a new position,
            ``all`` or only ``pending`` ones.
    """

    model_config = ConfigDict(frozen=True)

    require_admin: bool = True
    max_entries: int = Field(default=0, ge=0)
    enabled: bool = True
    allow_status_check: bool = True
    show_position: bool = False
    mark_invited_on_approve: bool = False
    recalculate_positions: bool = False
    position_count_scope: Literal["all", "pending"] = "all"

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "WaitlistOptions":
        return cls(
            require_admin=app_settings.WAITLIST_REQUIRE_ADMIN,
            max_entries=app_settings.WAITLIST_MAX_ENTRIES,
            enabled=app_settings.WAITLIST_ENABLED,
            allow_status_check=app_settings.WAITLIST_ALLOW_STATUS_CHECK,
            show_position=app_settings.WAITLIST_SHOW_POSITION,
            mark_invited_on_approve=app_settings.WAITLIST_MARK_INVITED_ON_APPROVE,
            recalculate_positions=app_settings.WAITLIST_RECALCULATE_POSITIONS,
            position_count_scope=app_settings.WAITLIST_POSITION_COUNT_SCOPE,
        )
