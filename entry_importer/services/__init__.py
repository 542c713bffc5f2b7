from .dispatcher import Dispatcher, RunSummary
from .fetcher import fetch_pending_entries
from .importer import ApiError, ImportFailed, import_entry
from .recorder import ResultRecorder
from .shutdown import ShutdownCoordinator

__all__ = [
    "ApiError",
    "Dispatcher",
    "ImportFailed",
    "ResultRecorder",
    "RunSummary",
    "ShutdownCoordinator",
    "fetch_pending_entries",
    "import_entry",
]
