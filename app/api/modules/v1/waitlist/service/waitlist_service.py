import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError

from app.api.modules.v1.waitlist.models.waitlist_model import (
    WaitlistEntry,
    WaitlistStatus,
    now_utc_aware,
)
from app.api.modules.v1.waitlist.schemas.waitlist_options import WaitlistOptions
from app.api.modules.v1.waitlist.schemas.waitlist_schema import (
    WaitlistCompleteResponse,
    WaitlistEntryResponse,
    WaitlistListResponse,
    WaitlistPositionResponse,
    WaitlistPromoteAllResponse,
    WaitlistStats,
    WaitlistStatusResponse,
    normalize_email,
)
from app.api.modules.v1.waitlist.service.waitlist_hooks import WaitlistHooks
from app.api.modules.v1.waitlist.service.waitlist_repository import WaitlistRepository

logger = logging.getLogger("app")

NOT_FOUND_MESSAGE = "Email not found in waitlist"


class WaitlistService:
    """Business logic for the waitlist entry lifecycle.

    Status moves from ``pending`` to ``approved`` or ``rejected``; an entry
    is only refused a transition into the state it is already in. Completing
    an entry deletes it whatever its status.
    """

    def __init__(
        self,
        repository: WaitlistRepository,
        options: Optional[WaitlistOptions] = None,
        hooks: Optional[WaitlistHooks] = None,
    ):
        self.repository = repository
        self.options = options or WaitlistOptions()
        self.hooks = hooks or WaitlistHooks()

    async def _get_entry_or_404(self, email: str) -> WaitlistEntry:
        entry = await self.repository.find_by_email(normalize_email(email))
        if not entry:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
        return entry

    async def _pending_rank(self, entry: WaitlistEntry) -> int:
        """1-based rank among pending entries, ignoring gaps in stored positions."""
        ahead = await self.repository.count(
            status=WaitlistStatus.PENDING, position_below=entry.position
        )
        return ahead + 1

    async def join(self, email: str, user_id: Optional[str] = None) -> WaitlistEntryResponse:
        """
        Add an email to the waitlist.

        Handles:
        - Closed waitlist and capacity checks
        - Duplicate checking
        - Position assignment from the live entry count
        - on_join notification, once the entry is committed
        """
        if not self.options.enabled:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Waitlist is closed")

        email = normalize_email(email)

        if self.options.max_entries > 0:
            count = await self.repository.count()
            if count >= self.options.max_entries:
                logger.warning(f"Waitlist full ({count} entries), refused: {email}")
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN, detail="Waitlist is full"
                )

        if await self.repository.find_by_email(email):
            logger.warning(f"Attempted duplicate signup: {email}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Email already on waitlist"
            )

        if self.options.position_count_scope == "pending":
            count = await self.repository.count(status=WaitlistStatus.PENDING)
        else:
            count = await self.repository.count()

        try:
            entry = await self.repository.create(email=email, position=count + 1, user_id=user_id)
        except IntegrityError:
            # Lost a race with a concurrent join for the same email
            await self.repository.rollback()
            logger.warning(f"Duplicate signup rejected by database: {email}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Email already on waitlist"
            )

        response = WaitlistEntryResponse.model_validate(entry)
        logger.info(f"New waitlist signup: {email} at position {entry.position}")
        await self.repository.commit()

        await self.hooks.on_join(response)
        return response

    async def get_status(self, email: str) -> WaitlistStatusResponse:
        """
        Look up an entry's status.

        ``position`` is only set on the response when the deployment shows
        positions; serialize with ``exclude_unset`` to omit it otherwise.
        """
        if not self.options.allow_status_check:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Status check is disabled"
            )

        entry = await self._get_entry_or_404(email)
        data = {"email": entry.email, "status": entry.status, "created_at": entry.created_at}

        if self.options.show_position:
            data["position"] = (
                await self._pending_rank(entry) if entry.status == WaitlistStatus.PENDING else None
            )

        return WaitlistStatusResponse(**data)

    async def get_position(self, email: str) -> WaitlistPositionResponse:
        entry = await self._get_entry_or_404(email)

        if entry.status != WaitlistStatus.PENDING:
            return WaitlistPositionResponse(email=entry.email, position=None, status=entry.status)

        return WaitlistPositionResponse(
            email=entry.email,
            position=await self._pending_rank(entry),
            status=entry.status,
        )

    async def list_entries(
        self,
        status_filter: Optional[WaitlistStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> WaitlistListResponse:
        entries = await self.repository.find_many(status=status_filter, limit=limit, offset=offset)
        total = await self.repository.count(status=status_filter)

        return WaitlistListResponse(
            entries=[WaitlistEntryResponse.model_validate(e) for e in entries],
            total=total,
        )

    async def stats(self) -> WaitlistStats:
        # Independent counts; no snapshot across them
        return WaitlistStats(
            total=await self.repository.count(),
            pending=await self.repository.count(status=WaitlistStatus.PENDING),
            approved=await self.repository.count(status=WaitlistStatus.APPROVED),
            rejected=await self.repository.count(status=WaitlistStatus.REJECTED),
        )

    async def _transition(
        self, email: str, target: WaitlistStatus, **extra
    ) -> WaitlistEntryResponse:
        entry = await self._get_entry_or_404(email)

        if entry.status == target:
            logger.warning(f"Entry {entry.email} is already {target.value}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Entry is already {target.value}",
            )

        previous_status = entry.status
        position = entry.position

        updated = await self.repository.update(entry.id, status=target, **extra)
        if not updated:
            logger.error(f"Update returned no row for waitlist entry {entry.id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update waitlist entry",
            )

        if self.options.recalculate_positions and previous_status == WaitlistStatus.PENDING:
            await self.repository.shift_pending_positions_after(position)

        logger.info(f"Waitlist entry {updated.email}: {previous_status.value} -> {target.value}")
        return WaitlistEntryResponse.model_validate(updated)

    async def approve(self, email: str, send_invite: Optional[bool] = None) -> WaitlistEntryResponse:
        """
        Approve an entry.

        Args:
            email: Entry email, normalized before lookup
            send_invite: Mark the entry invited now. Falls back to the
                deployment's ``mark_invited_on_approve`` when None.
        """
        if send_invite is None:
            send_invite = self.options.mark_invited_on_approve

        extra = {"invited_at": now_utc_aware()} if send_invite else {}
        response = await self._transition(email, WaitlistStatus.APPROVED, **extra)
        await self.repository.commit()

        await self.hooks.on_approve(response)
        return response

    async def reject(self, email: str) -> WaitlistEntryResponse:
        # Renumbering mirrors approve; pending product confirmation
        response = await self._transition(email, WaitlistStatus.REJECTED)
        await self.repository.commit()

        await self.hooks.on_reject(response)
        return response

    async def promote(self, email: str) -> WaitlistEntryResponse:
        """Mark a single approved entry as invited."""
        entry = await self._get_entry_or_404(email)

        if entry.status != WaitlistStatus.APPROVED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Entry must be approved before promoting",
            )

        if entry.invited_at:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invite already sent"
            )

        updated = await self.repository.update(entry.id, invited_at=now_utc_aware())
        if not updated:
            logger.error(f"Update returned no row for waitlist entry {entry.id}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to promote waitlist entry",
            )

        logger.info(f"Invite marked for {updated.email}")
        return WaitlistEntryResponse.model_validate(updated)

    async def promote_all(
        self, status_filter: WaitlistStatus = WaitlistStatus.APPROVED
    ) -> WaitlistPromoteAllResponse:
        """
        Invite every uninvited entry with ``status_filter``, in position order.

        Entries that disappear before their update are left out of the result.
        """
        entries = await self.repository.find_many(status=status_filter, uninvited_only=True)

        promoted: list[WaitlistEntryResponse] = []
        for entry in entries:
            updated = await self.repository.update(entry.id, invited_at=now_utc_aware())
            if updated:
                promoted.append(WaitlistEntryResponse.model_validate(updated))

        logger.info(f"Promoted {len(promoted)} of {len(entries)} {status_filter.value} entries")
        return WaitlistPromoteAllResponse(promoted=len(promoted), entries=promoted)

    async def complete(self, email: str) -> WaitlistCompleteResponse:
        """Remove an entry, notifying on_complete with its last state first."""
        entry = await self._get_entry_or_404(email)
        snapshot = WaitlistEntryResponse.model_validate(entry)

        await self.hooks.on_complete(snapshot)
        await self.repository.delete(entry.id)

        logger.info(f"Completed waitlist entry {snapshot.email} ({snapshot.status.value})")
        return WaitlistCompleteResponse(success=True, entry=snapshot)
