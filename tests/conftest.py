"""Test configuration."""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from entry_importer.core.config import Settings
from entry_importer.core.db import create_db_engine, create_session_factory, init_schema
from entry_importer.core.logging import configure_logging
from entry_importer.models.entry import ImportRow

configure_logging("DEBUG")

API_URL = "https://api.test/v2"
RESPONSES_URL = f"{API_URL}/responses"
TOKEN = "secret-token"


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "import.db")


@pytest.fixture
def engine(db_path: str) -> Iterable[Engine]:
    engine = create_db_engine(f"sqlite:///{db_path}")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> "sessionmaker[Session]":
    return create_session_factory(engine)


@pytest.fixture
def settings(db_path: str) -> Settings:
    return Settings(
        api_token=TOKEN,
        api_url=API_URL + "/",
        database_url=f"sqlite:///{db_path}",
        concurrency=2,
    )


@pytest.fixture
def seed_entries(session_factory) -> Callable[..., None]:
    """Insert ``(uid, payload)`` pairs; ``imported`` uids get a timestamp."""

    def _seed(pairs: List[Tuple[str, str]], imported: Optional[List[str]] = None) -> None:
        imported = imported or []
        with session_factory() as db:
            for uid, payload in pairs:
                db.add(
                    ImportRow(
                        uid=uid,
                        payload=payload,
                        imported_at="2024-01-01T00:00:00Z" if uid in imported else None,
                        response_id=f"old-{uid}" if uid in imported else None,
                    )
                )
            db.commit()

    return _seed


@pytest.fixture
def stored_rows(session_factory) -> Callable[[], Dict[str, ImportRow]]:
    def _rows() -> Dict[str, ImportRow]:
        with session_factory() as db:
            rows = db.query(ImportRow).all()
            db.expunge_all()
        return {row.uid: row for row in rows}

    return _rows
