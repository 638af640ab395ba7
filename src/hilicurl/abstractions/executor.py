import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from hilicurl.contracts.probe_outcome import ProbeOutcome


class Executor(ABC):
    """
    Abstract base class for probe executors. Implementations perform exactly one
    bounded request and classify it; they never raise for a failed probe.
    """

    @abstractmethod
    async def execute(
        self,
        url: str,
        timeout: float,
        cancel_event: Optional[asyncio.Event] = None,
        requested_at: Optional[datetime] = None,
    ) -> ProbeOutcome:
        """
        Run one probe against a URL.

        Args:
            url (str): Target URL.
            timeout (float): Deadline for the whole probe, in seconds.
            cancel_event (asyncio.Event): Optional signal that ends the probe early.
            requested_at (datetime): When the probe was scheduled; defaults to now.

        Returns:
            ProbeOutcome: The classified result.
        """
