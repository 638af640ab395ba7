import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from hilicurl.abstractions.executor import Executor
from hilicurl.contracts.run_config import RunConfig
from hilicurl.contracts.run_report import RunReport
from hilicurl.core.metrics_manager import MetricsManager
from hilicurl.core.stats_aggregator import StatsAggregator

logger = logging.getLogger(__name__)


class ProbeScheduler:
    """
    Dispatches one probe per interval until cancelled, then reports.

    Probes run as independent tasks; the loop never waits for one to finish
    before dispatching the next. At shutdown the report is built from whatever
    outcomes were recorded by then (after an optional grace period), and the
    probes still in flight are aborted rather than counted.
    """

    def __init__(
        self,
        executor: Executor,
        aggregator: Optional[StatsAggregator] = None,
        metrics_manager: Optional[MetricsManager] = None,
    ):
        self.executor = executor
        self.aggregator = aggregator if aggregator is not None else StatsAggregator()
        self.metrics_manager = metrics_manager
        self.dispatched = 0
        self._tasks = set()
        # Upper bound on every in-flight probe's deadline
        self._abort = asyncio.Event()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def run(self, config: RunConfig, cancel_event: asyncio.Event) -> RunReport:
        logger.info(f"GET {config.url}")
        while not cancel_event.is_set():
            self._dispatch(config)
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=config.interval)
            except asyncio.TimeoutError:
                pass
        return await self._finalize(config)

    def _dispatch(self, config: RunConfig):
        self.dispatched += 1
        if self.metrics_manager:
            self.metrics_manager.probe_started()
        requested_at = datetime.now(timezone.utc)
        task = asyncio.create_task(self._probe(config, requested_at))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _probe(self, config: RunConfig, requested_at: datetime):
        try:
            outcome = await self.executor.execute(
                config.url, config.timeout, self._abort, requested_at=requested_at
            )
            await self.aggregator.append(outcome)
            if self.metrics_manager:
                self.metrics_manager.probe_finished(outcome)
        finally:
            if self.metrics_manager:
                self.metrics_manager.probe_settled()

    async def _finalize(self, config: RunConfig) -> RunReport:
        if config.grace > 0 and self._tasks:
            logger.info(
                f"Waiting up to {config.grace:g}s for {len(self._tasks)} in-flight probes"
            )
            await asyncio.wait(set(self._tasks), timeout=config.grace)

        report = await self.aggregator.report(config.url)
        uncounted = self.dispatched - report.requests_sent
        if uncounted > 0:
            logger.warning(
                f"{uncounted} of {self.dispatched} dispatched probes were still in flight and are not counted"
            )

        self._abort.set()
        remaining = list(self._tasks)
        if remaining:
            await asyncio.gather(*remaining, return_exceptions=True)
        return report
