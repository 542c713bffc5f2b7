import argparse
import asyncio
from typing import Callable, List, Optional, Sequence

import httpx
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from entry_importer.core.config import Settings, database_url_from_path, load_settings
from entry_importer.core.db import create_db_engine, create_session_factory, init_schema
from entry_importer.core.logging import configure_logging, get_logger
from entry_importer.models.entry import Entry
from entry_importer.services import (
    Dispatcher,
    ResultRecorder,
    RunSummary,
    ShutdownCoordinator,
    fetch_pending_entries,
)

logger = get_logger(module="main")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="entry-importer",
        description="Submit pending entries to the responses API and record the outcome",
    )
    ap.add_argument("-j", "--concurrency", type=int, default=None, help="level of concurrency (simultaneous tasks)")
    ap.add_argument("--db", default=None, help="path or SQLAlchemy URL of the database to import")
    ap.add_argument("--token", default=None, help="API token")
    ap.add_argument("--url", default=None, help="API base URL")
    ap.add_argument("--log-level", default=None)
    ap.add_argument("--json-logs", action="store_true", default=None)
    ap.add_argument("--create-schema", action="store_true", help="create the imports table if missing")
    return ap


async def run_import(
    settings: Settings,
    session_factory: Callable[[], Session],
    entries: Sequence[Entry],
) -> RunSummary:
    shutdown = ShutdownCoordinator()
    shutdown.install()
    try:
        # no deadline on in-flight requests
        async with httpx.AsyncClient(timeout=httpx.Timeout(None)) as client:
            dispatcher = Dispatcher(settings, client, ResultRecorder(session_factory), shutdown)
            return await dispatcher.run(entries)
    finally:
        shutdown.uninstall()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            concurrency=args.concurrency,
            database_url=database_url_from_path(args.db) if args.db else None,
            api_token=args.token,
            api_url=args.url,
            log_level=args.log_level,
            json_logs=args.json_logs,
        )
    except ValidationError as exc:
        configure_logging()
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"])
            logger.error("invalid configuration", field=field, reason=err["msg"])
        return 1

    configure_logging(settings.log_level, settings.json_logs)

    try:
        engine = create_db_engine(settings.database_url)
    except SQLAlchemyError as exc:
        logger.error("failed to open database", error=str(exc))
        return 1

    try:
        if args.create_schema:
            try:
                init_schema(engine)
            except SQLAlchemyError as exc:
                logger.error("failed to create schema", error=str(exc))
                return 1

        session_factory = create_session_factory(engine)
        try:
            with session_factory() as db:
                entries = fetch_pending_entries(db)
        except SQLAlchemyError as exc:
            logger.error("failed to fetch data", error=str(exc))
            return 1

        logger.info(f"{len(entries)} entries to process")
        if not entries:
            return 0

        asyncio.run(run_import(settings, session_factory, entries))
        return 0
    finally:
        engine.dispose()


if __name__ == "__main__":
    raise SystemExit(main())
