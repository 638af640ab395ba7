import asyncio
import logging

from hilicurl.contracts.probe_outcome import ProbeOutcome
from hilicurl.contracts.run_report import RunReport

logger = logging.getLogger(__name__)


class StatsAggregator:
    """
    Owns the outcomes of a run. Every probe task appends here concurrently, so
    all access goes through a single asyncio.Lock.
    """

    def __init__(self):
        self._outcomes = []
        self._lock = asyncio.Lock()

    def __len__(self):
        return len(self._outcomes)

    async def append(self, outcome: ProbeOutcome):
        async with self._lock:
            self._outcomes.append(outcome)
        logger.debug(f"Recorded {outcome!r}")

    async def report(self, url: str = "") -> RunReport:
        """
        Compute the run summary from the outcomes recorded so far.

        Args:
            url (str): Target URL, used for the report header.

        Returns:
            RunReport: Sent/received counts and the timeout rate.
        """
        async with self._lock:
            sent = len(self._outcomes)
            received = sum(1 for outcome in self._outcomes if outcome.succeeded)
        return RunReport.from_counts(url, sent, received)
