"""View Poller — client side of the polling view protocol.

Invariants:
    - Sleeps the server-provided poll_after_ms between successful polls
    - Calls on_change only when the ordered snapshot differs from the last one seen
    - Stops on the terminal view (session ended or never started) and returns it
    - Unknown handle (404): ResourceNotFoundError, no retry
    - Other 4xx: ViewSyncError immediately
    - Transport errors and 5xx: exponential backoff with jitter (or the
      server's Retry-After), ViewSyncError after max_failures consecutive failures

Design Decisions:
    - Takes an httpx.AsyncClient so callers choose base_url, timeouts, transport
    - ±25% jitter on backoff: a restarted server is not hit by every display at once
"""

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from uuid import UUID

import httpx

from tunely.config import Settings
from tunely.core.domain_types import ViewerRole
from tunely.core.errors import ResourceNotFoundError, ViewSyncError
from tunely.core.view_sync import is_terminal, snapshot_fingerprint

logger = logging.getLogger(__name__)

OnChange = Callable[[dict], Awaitable[None] | None]


class ViewPoller:
    """Polls one viewer endpoint until the session stops accepting requests."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        handle: str,
        role: ViewerRole,
        *,
        artist_id: UUID | None = None,
        max_failures: int = 5,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.handle = handle
        self.role = role
        self.artist_id = artist_id
        self.max_failures = max_failures
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls, client: httpx.AsyncClient, handle: str, role: ViewerRole,
        settings: Settings, **kwargs,
    ) -> "ViewPoller":
        """Poller using the deployment's retry policy."""
        return cls(
            client, handle, role,
            max_failures=settings.view_poll_max_failures,
            base_delay_ms=settings.view_poll_base_delay_ms,
            max_delay_ms=settings.view_poll_max_delay_ms,
            **kwargs,
        )

    @property
    def path(self) -> str:
        return f"/api/v1/views/{self.handle}/{self.role.value}"

    async def fetch(self) -> dict:
        """One poll. Raises httpx errors for the caller's retry policy."""
        headers = {"X-Artist-Id": str(self.artist_id)} if self.artist_id else {}
        response = await self.client.get(self.path, headers=headers)
        if response.status_code == 404:
            raise ResourceNotFoundError("Artist", self.handle)
        response.raise_for_status()
        return response.json()

    async def run(
        self, on_change: OnChange, max_polls: int | None = None,
    ) -> dict | None:
        """Poll until terminal (or max_polls). Returns the last view received."""
        last_fingerprint = None
        failures = 0
        polls = 0
        view = None

        while max_polls is None or polls < max_polls:
            polls += 1
            try:
                current = await self.fetch()
            except httpx.HTTPStatusError as e:
                if e.response.status_code < 500:
                    raise ViewSyncError(
                        f"server rejected poll with HTTP {e.response.status_code}",
                        polls,
                    )
                failures = await self._back_off(
                    failures, e, _retry_after_ms(e.response),
                )
                continue
            except httpx.TransportError as e:
                failures = await self._back_off(failures, e)
                continue

            failures = 0
            view = current
            fingerprint = snapshot_fingerprint(view)
            if fingerprint != last_fingerprint:
                last_fingerprint = fingerprint
                result = on_change(view)
                if inspect.isawaitable(result):
                    await result

            if is_terminal(view):
                logger.info(
                    "Session not accepting requests, polling stopped",
                    extra={"role": self.role.value, "session_id": view.get("session_id")},
                )
                return view
            await self._sleep(view["poll_after_ms"] / 1000)

        return view

    async def _back_off(
        self, failures: int, error: Exception, retry_after_ms: int | None = None,
    ) -> int:
        failures += 1
        if failures > self.max_failures:
            raise ViewSyncError(str(error), failures)
        delay_ms = retry_after_ms or self._backoff_ms(failures)
        logger.warning(
            f"Poll failed ({error}), retrying in {delay_ms}ms",
            extra={"role": self.role.value},
        )
        await self._sleep(delay_ms / 1000)
        return failures

    def _backoff_ms(self, failures: int) -> int:
        delay = min(self.base_delay_ms * (2 ** (failures - 1)), self.max_delay_ms)
        jitter = delay * 0.25 * (2 * random.random() - 1)
        return int(delay + jitter)


def _retry_after_ms(response: httpx.Response) -> int | None:
    """Retry-After in milliseconds; only the delay-seconds form is honored."""
    value = response.headers.get("retry-after", "")
    return int(value) * 1000 if value.isdigit() else None
