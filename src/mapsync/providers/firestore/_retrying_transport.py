"""httpx transport that retries transient Firestore failures."""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

_LOG = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_DEFAULT_RETRY_AFTER = 1.0


class RetryingTransport(httpx.AsyncBaseTransport):
    """Retries connection errors and 429/5xx responses with capped exponential backoff.

    A 429 additionally holds back every request sharing this transport until
    its ``Retry-After`` has passed, so a fan-out of document reads backs off
    together instead of hammering the quota. After *max_retries* extra
    attempts the last response is returned (or the last transport error
    raised) for the caller to map.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 3,
        backoff_cap: float = 4.0,
    ) -> None:
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._max_retries = max_retries
        self._backoff_cap = backoff_cap

        self._pause_lock = asyncio.Lock()
        self._resume = asyncio.Event()
        self._resume.set()
        self._paused_until = 0.0

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            await self._resume.wait()
            try:
                response = await self._transport.handle_async_request(request)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise
                _LOG.debug("Firestore transport error on %s: %s", request.url.path, exc)
            else:
                if response.status_code not in _RETRYABLE_STATUS_CODES:
                    return response
                if response.status_code == 429:
                    await self._apply_rate_limit_pause(self._parse_retry_after(response))
                if attempt >= self._max_retries:
                    return response
                await response.aclose()

            await self._sleep_backoff(request, attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _apply_rate_limit_pause(self, retry_after: float) -> None:
        deadline = time.monotonic() + retry_after
        async with self._pause_lock:
            if deadline <= self._paused_until:
                return
            self._paused_until = deadline
            self._resume.clear()

        await asyncio.sleep(max(0.0, deadline - time.monotonic()))

        async with self._pause_lock:
            if time.monotonic() >= self._paused_until:
                self._resume.set()

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float:
        try:
            return max(0.0, float(response.headers.get("Retry-After", "")))
        except ValueError:
            return _DEFAULT_RETRY_AFTER

    async def _sleep_backoff(self, request: httpx.Request, attempt: int) -> None:
        delay = min(self._backoff_cap, 0.5 * 2**attempt) * random.uniform(0.5, 1.0)
        _LOG.warning(
            "Retrying Firestore %s %s in %.2fs (attempt %d)", request.method, request.url.path, delay, attempt + 1
        )
        await asyncio.sleep(delay)
