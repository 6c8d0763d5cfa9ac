"""Async SQLite database manager for journal trade records.

Uses aiosqlite with WAL mode so aggregate reads do not block trade writes.
"""

import os
from typing import Self

import aiosqlite

from journal.exceptions import StorageError
from journal.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS trades (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    account_id TEXT NOT NULL,
    account_name TEXT NOT NULL DEFAULT '',
    trade_date TEXT NOT NULL,
    symbol TEXT NOT NULL,
    asset_class TEXT NOT NULL,
    direction TEXT NOT NULL,
    status TEXT NOT NULL,
    entry_price TEXT NOT NULL,
    exit_price TEXT,
    stop_loss TEXT,
    take_profit TEXT,
    risk_mode TEXT NOT NULL,
    risk_value TEXT NOT NULL,
    capital TEXT NOT NULL,
    commission TEXT NOT NULL DEFAULT '0',
    duration TEXT NOT NULL DEFAULT 'day',
    entry_time TEXT,
    exit_time TEXT,
    entry_date TEXT,
    exit_date TEXT,
    stop_loss_pips TEXT,
    take_profit_pips TEXT,
    lot_size TEXT,
    risk_money TEXT,
    projected_pnl_at_tp TEXT,
    projected_pnl_at_sl TEXT,
    reward_risk_ratio TEXT,
    realized_pips TEXT,
    gross_pnl TEXT,
    realized_pnl TEXT,
    outcome TEXT,
    notes TEXT NOT NULL DEFAULT '',
    setup TEXT NOT NULL DEFAULT '',
    strategy TEXT NOT NULL DEFAULT '',
    before_screenshot TEXT,
    after_screenshot TEXT,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_trades_account_date
    ON trades(user_id, account_id, trade_date);
"""


class JournalDatabase:
    """Async SQLite connection manager for the trade journal.

    Usage:
        async with JournalDatabase("data/journal.db") as database:
            store = SqliteTradeStore(database)
            trades = await store.list_trades(user_id, account_id)
    """

    def __init__(self, db_path: str = "data/journal.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection. Raises RuntimeError before connect()."""
        if self._connection is None:
            raise RuntimeError("Journal database is not connected")
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Open the database file (creating its directory) and migrate it.

        Raises:
            StorageError: If the file was written by a newer schema version.
        """
        if self._db_path != ":memory:":
            parent = os.path.dirname(self._db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)

        connection = await aiosqlite.connect(self._db_path)
        connection.row_factory = aiosqlite.Row
        await connection.execute("PRAGMA journal_mode=WAL")
        await connection.execute("PRAGMA synchronous=NORMAL")
        try:
            await self._migrate(connection)
        except StorageError:
            await connection.close()
            raise

        self._connection = connection
        logger.info("journal_db_connected", db_path=self._db_path)

    async def _migrate(self, connection: aiosqlite.Connection) -> None:
        await connection.executescript(_CREATE_TABLES_SQL + _CREATE_INDEXES_SQL)
        async with connection.execute("SELECT MAX(version) FROM schema_version") as cursor:
            row = await cursor.fetchone()
        found = row[0] if row is not None else None

        if found is None:
            await connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )
            logger.info("schema_version_set", version=SCHEMA_VERSION)
        elif found > SCHEMA_VERSION:
            raise StorageError(
                f"Journal database {self._db_path!r} has schema version {found}, "
                f"this build supports up to {SCHEMA_VERSION}"
            )
        await connection.commit()

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("journal_db_closed", db_path=self._db_path)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
