import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import EmailStr

from app.api.modules.v1.waitlist.dependencies import (
    get_waitlist_service,
    require_waitlist_admin,
)
from app.api.modules.v1.waitlist.models.waitlist_model import WaitlistStatus
from app.api.modules.v1.waitlist.schemas.waitlist_schema import (
    WaitlistApproveRequest,
    WaitlistEmailRequest,
    WaitlistJoinRequest,
    WaitlistPromoteAllRequest,
)
from app.api.modules.v1.waitlist.service.waitlist_service import WaitlistService
from app.api.utils.response_payloads import success_response

router = APIRouter(prefix="/waitlist", tags=["Waitlist"])
logger = logging.getLogger("app")

admin_only = [Depends(require_waitlist_admin)]


@router.post("/join", status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    payload: WaitlistJoinRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    """
    Add an email to the waitlist.

    Returns:
    - 201: Entry created, with its assigned position
    - 400: Email already on the waitlist
    - 403: Waitlist closed or full
    - 422: Invalid email
    """
    entry = await service.join(payload.email, user_id=payload.user_id)

    return success_response(
        status.HTTP_201_CREATED,
        "Successfully added to waitlist.",
        data=entry.model_dump(),
    )


@router.get("/status")
async def get_waitlist_status(
    email: EmailStr = Query(...),
    service: WaitlistService = Depends(get_waitlist_service),
):
    """
    Check an entry's status. Includes the pending rank only when the
    deployment shows positions.
    """
    result = await service.get_status(email)

    return success_response(
        status.HTTP_200_OK,
        "Waitlist status retrieved.",
        data=result.model_dump(exclude_unset=True),
    )


@router.get("/position")
async def get_waitlist_position(
    email: EmailStr = Query(...),
    service: WaitlistService = Depends(get_waitlist_service),
):
    """Rank among pending entries, or null once the entry has left the queue."""
    result = await service.get_position(email)

    return success_response(
        status.HTTP_200_OK,
        "Waitlist position retrieved.",
        data=result.model_dump(),
    )


@router.get("/list", dependencies=admin_only)
async def list_waitlist(
    status_filter: Optional[WaitlistStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: WaitlistService = Depends(get_waitlist_service),
):
    result = await service.list_entries(status_filter=status_filter, limit=limit, offset=offset)

    return success_response(
        status.HTTP_200_OK,
        "Waitlist entries retrieved.",
        data=result.model_dump(),
    )


@router.get("/stats", dependencies=admin_only)
async def waitlist_stats(service: WaitlistService = Depends(get_waitlist_service)):
    result = await service.stats()

    return success_response(
        status.HTTP_200_OK,
        "Waitlist stats retrieved.",
        data=result.model_dump(),
    )


@router.post("/approve", dependencies=admin_only)
async def approve_waitlist_entry(
    payload: WaitlistApproveRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    """
    Approve an entry, optionally marking the invite as sent.

    Returns:
    - 200: Updated entry
    - 400: Entry already approved
    - 401: Admin session required
    - 404: Email not on the waitlist
    """
    entry = await service.approve(payload.email, send_invite=payload.send_invite)

    return success_response(status.HTTP_200_OK, "Waitlist entry approved.", data=entry.model_dump())


@router.post("/reject", dependencies=admin_only)
async def reject_waitlist_entry(
    payload: WaitlistEmailRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    entry = await service.reject(payload.email)

    return success_response(status.HTTP_200_OK, "Waitlist entry rejected.", data=entry.model_dump())


@router.post("/promote", dependencies=admin_only)
async def promote_waitlist_entry(
    payload: WaitlistEmailRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    entry = await service.promote(payload.email)

    return success_response(status.HTTP_200_OK, "Waitlist entry promoted.", data=entry.model_dump())


@router.post("/promote-all", dependencies=admin_only)
async def promote_all_waitlist(
    payload: Optional[WaitlistPromoteAllRequest] = None,
    service: WaitlistService = Depends(get_waitlist_service),
):
    payload = payload or WaitlistPromoteAllRequest()
    result = await service.promote_all(WaitlistStatus(payload.status))

    return success_response(
        status.HTTP_200_OK,
        f"Promoted {result.promoted} waitlist entries.",
        data=result.model_dump(),
    )


@router.post("/complete", dependencies=admin_only)
async def complete_waitlist_entry(
    payload: WaitlistEmailRequest,
    service: WaitlistService = Depends(get_waitlist_service),
):
    result = await service.complete(payload.email)

    return success_response(
        status.HTTP_200_OK,
        "Waitlist entry completed.",
        data=result.model_dump(),
    )
