from typing import List

from sqlalchemy.orm import Session

from entry_importer.models.entry import Entry, ImportRow


def fetch_pending_entries(db: Session) -> List[Entry]:
    rows = db.query(ImportRow).filter(ImportRow.imported_at.is_(None)).all()
    return [Entry.from_row(row) for row in rows]
