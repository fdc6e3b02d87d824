"""Cancellation handle for in-flight streaming calls."""

import asyncio


class CancellationToken:
    """One-shot signal that asks a running stream to stop.

    The caller keeps the token and calls ``cancel()``; the streaming call
    waits on it alongside the transport read and aborts the read when the
    token fires first.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
