import time
from typing import Any, Optional

import httpx

from entry_importer.core.config import Settings
from entry_importer.core.logging import get_logger
from entry_importer.models.entry import Entry

logger = get_logger(module="importer")


class ApiError(Exception):
    """The API answered with something other than 201 Created."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"API error: HTTP {status} > {body}")


class ImportFailed(Exception):
    """A 201 response whose body does not carry a response id."""


def _extract_response_id(r: httpx.Response) -> Optional[str]:
    try:
        data: Any = r.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    # keys are matched case-insensitively ("id" or "ID")
    for key, value in data.items():
        if key.lower() == "id" and isinstance(value, (str, int)) and not isinstance(value, bool):
            return str(value)
    return None


def _elapsed_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)


async def import_entry(client: httpx.AsyncClient, settings: Settings, entry: Entry) -> Entry:
    """POST the entry payload to the API and store the outcome on the entry.

    Never raises for request, transport or API failures: they end up as a
    human-readable description in ``entry.error``. A bad base URL or a
    token that cannot be sent as a header fails while the request is built.
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": settings.api_token,
    }
    log = logger.bind(uid=entry.uid)

    t0 = time.perf_counter()
    try:
        r = await client.post(settings.responses_url, content=entry.payload.encode(), headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
        entry.import_time_ms = _elapsed_ms(t0)
        entry.error = str(exc) or exc.__class__.__name__
        log.warning("failed to import entry", error=entry.error)
        return entry
    entry.import_time_ms = _elapsed_ms(t0)

    try:
        if r.status_code != 201:
            raise ApiError(r.status_code, r.text)
        response_id = _extract_response_id(r)
        if response_id is None:
            raise ImportFailed(f"failed to parse payload: {r.text}")
    except (ApiError, ImportFailed) as exc:
        entry.error = str(exc)
        log.warning("failed to import entry", error=entry.error, import_time_ms=entry.import_time_ms)
        return entry

    entry.response_id = response_id
    entry.error = None
    log.info("entry imported", response_id=response_id, import_time_ms=entry.import_time_ms)
    return entry
