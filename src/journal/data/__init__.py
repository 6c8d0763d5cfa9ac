"""Record and object storage for the journal."""

from journal.data.database import JournalDatabase
from journal.data.screenshots import (
    LocalScreenshotStore,
    ScreenshotStore,
    screenshot_extension,
    screenshot_path,
)
from journal.data.store import SqliteTradeStore, TradeStore

__all__ = [
    "JournalDatabase",
    "LocalScreenshotStore",
    "ScreenshotStore",
    "SqliteTradeStore",
    "TradeStore",
    "screenshot_extension",
    "screenshot_path",
]
