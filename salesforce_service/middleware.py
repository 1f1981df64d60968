"""Pure ASGI middleware enforcing a per-request time budget."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from prometheus_client import Counter
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

REQUEST_TIMEOUTS = Counter(
    "salesforce_request_timeouts_total",
    "Requests answered with 408 after exceeding the configured timeout.",
)


class RequestTimeoutMiddleware:
    """Reply 408 when the downstream app has not answered within ``timeout_ms``.

    The abandoned handler task is cancelled, but sync endpoints keep running in
    their worker thread until the storage call returns; whatever they send after
    the timeout is dropped.
    """

    def __init__(self, app: Any, timeout_ms: int) -> None:
        self.app = app
        self.timeout = timeout_ms / 1000

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] != "http" or self.timeout <= 0:
            await self.app(scope, receive, send)
            return

        timed_out = False
        response_started = False

        async def guarded_send(message: dict[str, Any]) -> None:
            nonlocal response_started
            if timed_out:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        task = asyncio.ensure_future(self.app(scope, receive, guarded_send))
        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if task in done or response_started:
            await task
            return

        timed_out = True
        task.add_done_callback(_log_abandoned)
        task.cancel()
        REQUEST_TIMEOUTS.inc()
        logger.warning(
            "request %s %s exceeded %d ms",
            scope.get("method"),
            scope.get("path"),
            int(self.timeout * 1000),
        )
        response = JSONResponse(
            status_code=408,
            content={"detail": "request timeout", "message": "The request took too long to process"},
        )
        await response(scope, receive, send)


def _log_abandoned(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("abandoned request failed after timeout: %s", exc)
