import asyncio
import signal
from typing import Optional

from entry_importer.core.logging import get_logger

logger = get_logger(module="shutdown")

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Process-wide stop flag flipped by SIGINT/SIGTERM.

    The dispatcher only looks at the flag when admitting the next entry;
    tasks already running are never cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def stopped(self) -> bool:
        return self._event.is_set()

    def request_stop(self, signame: Optional[str] = None) -> None:
        if self._event.is_set():
            return
        self._event.set()
        logger.info("stop signal received, preparing termination...", signal=signame)

    async def wait(self) -> None:
        await self._event.wait()

    def install(self) -> None:
        self._loop = asyncio.get_running_loop()
        for sig in STOP_SIGNALS:
            self._loop.add_signal_handler(sig, self.request_stop, sig.name)

    def uninstall(self) -> None:
        if self._loop is None:
            return
        for sig in STOP_SIGNALS:
            self._loop.remove_signal_handler(sig)
        self._loop = None
