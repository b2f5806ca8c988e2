import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from app.api.modules.v1.waitlist.schemas.waitlist_schema import WaitlistEntryResponse

WaitlistCallback = Callable[[WaitlistEntryResponse], Union[None, Awaitable[Any]]]


class WaitlistHooks:
    """Lifecycle notifications fired by the waitlist service.

    Every method is awaited inline by the operation that triggers it, after
    the change has been written to the session. The base class does nothing;
    deployments subclass it and override what they need.
    """

    async def on_join(self, entry: WaitlistEntryResponse) -> None:
        return None

    async def on_approve(self, entry: WaitlistEntryResponse) -> None:
        return None

    async def on_reject(self, entry: WaitlistEntryResponse) -> None:
        return None

    async def on_complete(self, entry: WaitlistEntryResponse) -> None:
        """Receives the entry snapshot taken before deletion."""
        return None


class CallbackWaitlistHooks(WaitlistHooks):
    """Adapt plain callables (sync or async) to the hooks interface."""

    def __init__(
        self,
        on_join: Optional[WaitlistCallback] = None,
        on_approve: Optional[WaitlistCallback] = None,
        on_reject: Optional[WaitlistCallback] = None,
        on_complete: Optional[WaitlistCallback] = None,
    ):
        self._on_join = on_join
        self._on_approve = on_approve
        self._on_reject = on_reject
        self._on_complete = on_complete

    async def _call(self, callback: Optional[WaitlistCallback], entry: WaitlistEntryResponse):
        if callback is None:
            return
        result = callback(entry)
        if inspect.isawaitable(result):
            await result

    async def on_join(self, entry: WaitlistEntryResponse) -> None:
        await self._call(self._on_join, entry)

    async def on_approve(self, entry: WaitlistEntryResponse) -> None:
        await self._call(self._on_approve, entry)

    async def on_reject(self, entry: WaitlistEntryResponse) -> None:
        await self._call(self._on_reject, entry)

    async def on_complete(self, entry: WaitlistEntryResponse) -> None:
        await self._call(self._on_complete, entry)
