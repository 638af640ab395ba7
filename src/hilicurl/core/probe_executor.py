import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from hilicurl.abstractions.executor import Executor
from hilicurl.contracts.probe_outcome import (
    ProbeOutcome,
    Success,
    TimedOut,
    TransportError,
)

logger = logging.getLogger(__name__)


class BodyReadError(Exception):
    """The response head arrived but its body could not be read in full."""


class ConnectionClock:
    """
    httpx trace hook that notes when a usable connection starts carrying the request.

    Fresh and pooled connections both emit "<protocol>.send_request_headers.started"
    once the pool has handed them out, so that event marks connection-ready for
    either case and leaves DNS and dial time out of the measurement.
    """

    def __init__(self):
        self.issued_at = time.perf_counter()
        self.connected_at = None

    async def trace(self, event_name: str, info: dict):
        if self.connected_at is None and event_name.endswith(
            "send_request_headers.started"
        ):
            self.connected_at = time.perf_counter()

    def elapsed_until(self, finished_at: float) -> float:
        # Transports without a connection pool (mocks, ASGI) emit no events
        start = self.connected_at if self.connected_at is not None else self.issued_at
        return max(0.0, finished_at - start)


class ProbeExecutor(Executor):
    """
    Sends one GET per call through a shared httpx.AsyncClient and classifies it.
    """

    def __init__(self, client: httpx.AsyncClient):
        """
        Args:
            client (httpx.AsyncClient): Client shared by all probes so keep-alive
                connections are reused between them.
        """
        self.client = client

    async def execute(
        self,
        url: str,
        timeout: float,
        cancel_event: Optional[asyncio.Event] = None,
        requested_at: Optional[datetime] = None,
    ) -> ProbeOutcome:
        if requested_at is None:
            requested_at = datetime.now(timezone.utc)
        fetch = asyncio.ensure_future(self._fetch(url, timeout))
        waiters = {fetch}
        aborted = None
        if cancel_event is not None:
            aborted = asyncio.ensure_future(cancel_event.wait())
            waiters.add(aborted)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if fetch in done:
            status = self._classify(url, fetch)
        elif aborted is not None and aborted in done:
            logger.warning(f"Probe aborted for {url}: run cancelled")
            status = TimedOut()
        else:
            logger.warning(f"Probe timed out for {url} after {timeout:g}s")
            status = TimedOut()
        return ProbeOutcome(requested_at=requested_at, status=status)

    async def _fetch(self, url: str, timeout: float):
        clock = ConnectionClock()
        async with self.client.stream(
            "GET", url, timeout=timeout, extensions={"trace": clock.trace}
        ) as response:
            try:
                body = await response.aread()
            except httpx.TimeoutException:
                raise
            except httpx.HTTPError as e:
                raise BodyReadError(f"reading body: {e}") from e
            finished_at = time.perf_counter()
        return response, len(body), clock.elapsed_until(finished_at)

    def _classify(self, url: str, fetch: asyncio.Future):
        try:
            response, body_length, elapsed = fetch.result()
        except httpx.TimeoutException as e:
            logger.warning(f"Probe timed out for {url}: {str(e) or type(e).__name__}")
            return TimedOut()
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Probe error for {url}: {message}")
            return TransportError(message=message)

        logger.info(
            f"{response.status_code} {response.reason_phrase}: "
            f"length={body_length} bytes time={int(elapsed * 1000)} ms"
        )
        return Success(
            status_code=response.status_code,
            body_length=body_length,
            elapsed=elapsed,
        )
