import asyncio
from dataclasses import dataclass
from typing import List, Sequence

import httpx

from entry_importer.core.config import Settings
from entry_importer.core.logging import get_logger
from entry_importer.models.entry import Entry
from entry_importer.services.importer import import_entry
from entry_importer.services.recorder import ResultRecorder
from entry_importer.services.shutdown import ShutdownCoordinator

logger = get_logger(module="dispatcher")


@dataclass
class RunSummary:
    total: int = 0
    admitted: int = 0
    imported: int = 0
    errored: int = 0
    unrecorded: int = 0

    @property
    def skipped(self) -> int:
        return self.total - self.admitted


class Dispatcher:
    """Runs one import task per entry, at most ``settings.concurrency`` at a time.

    Entries are admitted in batch order. Admission waits for a free permit
    or for the stop flag, whichever comes first; once the stop flag is seen
    no further entry is admitted, and the run only waits for the tasks it
    already started.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        recorder: ResultRecorder,
        shutdown: ShutdownCoordinator,
    ) -> None:
        self._settings = settings
        self._client = client
        self._recorder = recorder
        self._shutdown = shutdown
        self._permits = asyncio.BoundedSemaphore(settings.concurrency)
        self.active = 0
        self.peak_active = 0

    async def _admit(self) -> bool:
        if self._shutdown.stopped:
            return False

        acquire = asyncio.ensure_future(self._permits.acquire())
        stop = asyncio.ensure_future(self._shutdown.wait())
        try:
            await asyncio.wait({acquire, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()

        if not self._shutdown.stopped:
            return True

        if acquire.done() and not acquire.cancelled():
            self._permits.release()
        else:
            acquire.cancel()
        return False

    async def _run_entry(self, entry: Entry, summary: RunSummary) -> None:
        self.active += 1
        self.peak_active = max(self.peak_active, self.active)
        try:
            logger.info("processing entry", uid=entry.uid)
            await import_entry(self._client, self._settings, entry)
            recorded = await asyncio.to_thread(self._recorder.record, entry)
            if entry.succeeded:
                summary.imported += 1
            else:
                summary.errored += 1
            if not recorded:
                summary.unrecorded += 1
        except Exception:
            summary.unrecorded += 1
            logger.exception("unexpected failure while processing entry", uid=entry.uid)
        finally:
            self.active -= 1
            self._permits.release()

    async def run(self, entries: Sequence[Entry]) -> RunSummary:
        summary = RunSummary(total=len(entries))
        tasks: List[asyncio.Task] = []

        for entry in entries:
            if not await self._admit():
                break
            summary.admitted += 1
            tasks.append(asyncio.create_task(self._run_entry(entry, summary)))

        if summary.skipped:
            logger.info("entries left pending for the next run", skipped=summary.skipped)

        await asyncio.gather(*tasks)

        logger.info(
            "run finished",
            total=summary.total,
            admitted=summary.admitted,
            imported=summary.imported,
            errored=summary.errored,
            unrecorded=summary.unrecorded,
            skipped=summary.skipped,
        )
        return summary
