from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from entry_importer.core.logging import get_logger
from entry_importer.models.entry import Entry, ImportRow, utc_timestamp

logger = get_logger(module="recorder")


class ResultRecorder:
    """Persists the outcome of one import back to the ``imports`` table.

    Each call runs one UPDATE keyed by uid in a session of its own, so it is
    safe to call from several threads at once for different entries.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def mark_imported(self, entry: Entry) -> None:
        imported_at = utc_timestamp()
        with self._session_factory() as db:
            db.query(ImportRow).filter(ImportRow.uid == entry.uid).update(
                {
                    ImportRow.response_id: entry.response_id,
                    ImportRow.imported_at: imported_at,
                    ImportRow.import_time_ms: entry.import_time_ms,
                    # an error left by an earlier attempt no longer applies
                    ImportRow.error: None,
                },
                synchronize_session=False,
            )
            db.commit()
        entry.imported_at = imported_at

    def mark_errored(self, entry: Entry) -> None:
        with self._session_factory() as db:
            db.query(ImportRow).filter(ImportRow.uid == entry.uid).update(
                {ImportRow.error: entry.error},
                synchronize_session=False,
            )
            db.commit()

    def record(self, entry: Entry) -> bool:
        """Write the entry outcome; returns False when the write failed."""
        try:
            if entry.succeeded:
                self.mark_imported(entry)
            else:
                self.mark_errored(entry)
        except SQLAlchemyError as exc:
            action = "import" if entry.succeeded else "error"
            logger.error(f"failed to mark {action} for entry", uid=entry.uid, error=str(exc))
            return False
        return True
