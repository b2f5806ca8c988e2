import logging
import uuid
from typing import Any, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.modules.v1.waitlist.models.waitlist_model import WaitlistEntry, WaitlistStatus

logger = logging.getLogger("app")


class WaitlistRepository:
    """Persistence adapter for waitlist entries.

    Writes are flushed, not committed. The service commits explicitly
    before notifying hooks; anything left is committed by ``get_db``.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _filtered(self, query, status: Optional[WaitlistStatus], uninvited_only: bool):
        if status is not None:
            query = query.where(WaitlistEntry.status == status)
        if uninvited_only:
            query = query.where(WaitlistEntry.invited_at.is_(None))
        return query

    async def find_by_email(self, email: str) -> Optional[WaitlistEntry]:
        """
        Get an entry by its normalized email.

        Args:
            email: Normalized email address

        Returns:
            WaitlistEntry or None if not found
        """
        result = await self.db.execute(select(WaitlistEntry).where(WaitlistEntry.email == email))
        return result.scalar_one_or_none()

    async def find_many(
        self,
        status: Optional[WaitlistStatus] = None,
        uninvited_only: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[WaitlistEntry]:
        """
        Get entries ordered by stored position ascending.

        Args:
            status: Optional status filter
            uninvited_only: Only entries whose invite has not been sent
            limit: Maximum number of results, unbounded when None
            offset: Number of matching entries to skip

        Returns:
            List of WaitlistEntry objects
        """
        query = self._filtered(select(WaitlistEntry), status, uninvited_only)
        query = query.order_by(WaitlistEntry.position.asc(), WaitlistEntry.created_at.asc())
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(
        self,
        status: Optional[WaitlistStatus] = None,
        position_below: Optional[int] = None,
    ) -> int:
        """
        Count entries, optionally by status and with a stored position strictly
        below ``position_below``.
        """
        query = self._filtered(select(func.count()).select_from(WaitlistEntry), status, False)
        if position_below is not None:
            query = query.where(WaitlistEntry.position < position_below)

        result = await self.db.execute(query)
        return result.scalar_one()

    async def create(self, email: str, position: int, user_id: Optional[str] = None) -> WaitlistEntry:
        """
        Insert a new pending entry.

        Raises:
            IntegrityError: If the email is already taken at flush time
        """
        entry = WaitlistEntry(
            email=email,
            status=WaitlistStatus.PENDING,
            position=position,
            user_id=user_id,
            invited_at=None,
        )

        self.db.add(entry)
        await self.db.flush()
        await self.db.refresh(entry)

        logger.info("Created waitlist entry: id=%s, email=%s, position=%d", entry.id, email, position)
        return entry

    async def update(self, entry_id: uuid.UUID, **values: Any) -> Optional[WaitlistEntry]:
        """
        Apply ``values`` to the entry with ``entry_id``.

        Returns:
            The updated entry, or None when the row no longer exists
        """
        entry = await self.db.get(WaitlistEntry, entry_id)
        if entry is None:
            return None

        for field, value in values.items():
            setattr(entry, field, value)

        self.db.add(entry)
        await self.db.flush()
        await self.db.refresh(entry)
        return entry

    async def delete(self, entry_id: uuid.UUID) -> bool:
        entry = await self.db.get(WaitlistEntry, entry_id)
        if entry is None:
            return False

        await self.db.delete(entry)
        await self.db.flush()
        return True

    async def shift_pending_positions_after(self, position: int) -> int:
        """
        Move every pending entry stored after ``position`` one place forward.

        Runs as a single UPDATE so the shift is applied all-or-nothing.

        Returns:
            Number of entries renumbered
        """
        stmt = (
            update(WaitlistEntry)
            .where(WaitlistEntry.status == WaitlistStatus.PENDING)
            .where(WaitlistEntry.position > position)
            .values(position=WaitlistEntry.position - 1)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        await self.db.flush()

        logger.info("Renumbered %d pending entries after position %d", result.rowcount, position)
        return result.rowcount

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
