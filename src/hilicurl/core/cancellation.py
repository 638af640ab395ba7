import asyncio
import logging
import signal

logger = logging.getLogger(__name__)


class CancellationSource:
    """
    Turns an operator interrupt into a single, non-resettable cancellation event.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self):
        self.event = asyncio.Event()
        self._installed = []
        self._loop = None

    @property
    def cancelled(self) -> bool:
        return self.event.is_set()

    def cancel(self, reason: str = "cancelled"):
        if self.event.is_set():
            return
        logger.info(reason)
        self.event.set()

    def install(self, loop: asyncio.AbstractEventLoop):
        """
        Route SIGINT/SIGTERM to cancel(). Falls back to signal.signal on loops
        without add_signal_handler (Windows).
        """
        self._loop = loop
        for sig in self.SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                signal.signal(
                    sig, lambda signum, frame: loop.call_soon_threadsafe(self._on_signal, signum)
                )
            self._installed.append(sig)

    def remove(self):
        for sig in self._installed:
            try:
                self._loop.remove_signal_handler(sig)
            except NotImplementedError:
                signal.signal(sig, signal.SIG_DFL)
        self._installed = []

    def _on_signal(self, sig):
        if sig == signal.SIGINT:
            self.cancel("Ctrl+C pressed in Terminal")
        else:
            self.cancel(f"Received {signal.Signals(sig).name}, shutting down")
