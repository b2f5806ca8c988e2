import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.core.dependencies.auth import AuthSession, get_optional_session
from app.api.db.database import get_db
from app.api.modules.v1.waitlist.schemas.waitlist_options import WaitlistOptions
from app.api.modules.v1.waitlist.service.waitlist_hooks import WaitlistHooks
from app.api.modules.v1.waitlist.service.waitlist_repository import WaitlistRepository
from app.api.modules.v1.waitlist.service.waitlist_service import WaitlistService

logger = logging.getLogger("app")

_default_hooks = WaitlistHooks()


def get_waitlist_options() -> WaitlistOptions:
    """Deployment options built from settings. Override to reconfigure."""
    return WaitlistOptions.from_settings()


def get_waitlist_hooks() -> WaitlistHooks:
    """No-op hooks unless the deployment overrides this dependency."""
    return _default_hooks


def get_waitlist_service(
    db: AsyncSession = Depends(get_db),
    options: WaitlistOptions = Depends(get_waitlist_options),
    hooks: WaitlistHooks = Depends(get_waitlist_hooks),
) -> WaitlistService:
    return WaitlistService(WaitlistRepository(db), options=options, hooks=hooks)


async def require_waitlist_admin(
    session: Optional[AuthSession] = Depends(get_optional_session),
    options: WaitlistOptions = Depends(get_waitlist_options),
) -> Optional[AuthSession]:
    """
    Guard for admin endpoints.

    Raises:
        HTTPException: 401 when admin is required and no valid session is present
    """
    if options.require_admin and session is None:
        logger.warning("Waitlist admin endpoint called without a session")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required"
        )
    return session
