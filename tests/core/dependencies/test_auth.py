from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from app.api.core.dependencies.auth import get_optional_session
from app.api.modules.v1.waitlist.dependencies import require_waitlist_admin
from app.api.modules.v1.waitlist.schemas.waitlist_options import WaitlistOptions
from app.api.utils.jwt import create_access_token


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
async def test_no_credentials_means_no_session():
    assert await get_optional_session(None) is None


@pytest.mark.asyncio
async def test_valid_token_resolves_session():
    token = create_access_token(user_id="user-1", role="admin")

    session = await get_optional_session(bearer(token))

    assert session.user_id == "user-1"
    assert session.role == "admin"
    assert session.jti


@pytest.mark.asyncio
async def test_expired_token_means_no_session():
    token = create_access_token(user_id="user-1", expires_delta=timedelta(seconds=-5))

    assert await get_optional_session(bearer(token)) is None


@pytest.mark.asyncio
async def test_garbage_token_means_no_session():
    assert await get_optional_session(bearer("definitely.not.valid")) is None


@pytest.mark.asyncio
async def test_admin_guard_requires_session_only_when_configured():
    with pytest.raises(HTTPException) as exc_info:
        await require_waitlist_admin(None, WaitlistOptions(require_admin=True))

    assert exc_info.value.status_code == 401
    assert await require_waitlist_admin(None, WaitlistOptions(require_admin=False)) is None
