from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, Text

from entry_importer.core.db import Base

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


class ImportRow(Base):
    __tablename__ = "imports"

    uid = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)
    response_id = Column(String, nullable=True)
    imported_at = Column(String, nullable=True, index=True)
    error = Column(Text, nullable=True)
    import_time_ms = Column(Integer, nullable=True)


@dataclass
class Entry:
    """One pending payload and the outcome of its import attempt.

    ``uid`` and ``payload`` come from the store and are never changed here.
    The remaining fields are filled in by the import task and the recorder,
    each entry being owned by a single task for its whole lifetime.
    """

    uid: str
    payload: str
    response_id: Optional[str] = None
    imported_at: Optional[str] = None
    error: Optional[str] = None
    import_time_ms: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.response_id is not None

    @classmethod
    def from_row(cls, row: ImportRow) -> "Entry":
        return cls(uid=row.uid, payload=row.payload, imported_at=row.imported_at)
