"""Trade record storage: abstract contract and SQLite implementation.

The journal service depends only on TradeStore. SqliteTradeStore keeps all
SQL behind that interface.

CRITICAL: All monetary/price/pip values stored as TEXT in SQLite, restored as
Decimal on read. Dates and times are stored as ISO-8601 text.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import fields
from datetime import date
from datetime import time as dt_time
from decimal import Decimal
from enum import Enum
from typing import Any

import aiosqlite

from journal.data.database import JournalDatabase
from journal.exceptions import StorageError, TradeNotFound
from journal.logging import get_logger
from journal.models import (
    AssetClass,
    Direction,
    Outcome,
    RiskMode,
    TradeDuration,
    TradeRecord,
    TradeStatus,
)

logger = get_logger(__name__)

_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(TradeRecord))

_DECIMAL_COLUMNS = frozenset({
    "entry_price",
    "exit_price",
    "stop_loss",
    "take_profit",
    "risk_value",
    "capital",
    "commission",
    "stop_loss_pips",
    "take_profit_pips",
    "lot_size",
    "risk_money",
    "projected_pnl_at_tp",
    "projected_pnl_at_sl",
    "reward_risk_ratio",
    "realized_pips",
    "gross_pnl",
    "realized_pnl",
})
_DATE_COLUMNS = frozenset({"trade_date", "entry_date", "exit_date"})
_TIME_COLUMNS = frozenset({"entry_time", "exit_time"})
_ENUM_COLUMNS: dict[str, type[Enum]] = {
    "asset_class": AssetClass,
    "direction": Direction,
    "status": TradeStatus,
    "risk_mode": RiskMode,
    "duration": TradeDuration,
    "outcome": Outcome,
}
_IMMUTABLE_COLUMNS = frozenset({"id", "user_id", "created_at"})


def _to_db(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, dt_time)):
        return value.isoformat()
    return value


def _from_db(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in _DECIMAL_COLUMNS:
        return Decimal(value)
    if column in _DATE_COLUMNS:
        return date.fromisoformat(value)
    if column in _TIME_COLUMNS:
        return dt_time.fromisoformat(value)
    if column in _ENUM_COLUMNS:
        return _ENUM_COLUMNS[column](value)
    return value


def record_to_row(record: TradeRecord) -> dict[str, Any]:
    """Flatten a TradeRecord into SQLite column values."""
    return {column: _to_db(getattr(record, column)) for column in _COLUMNS}


def row_to_record(row: aiosqlite.Row | dict[str, Any]) -> TradeRecord:
    """Rebuild a TradeRecord from a trades row."""
    return TradeRecord(**{column: _from_db(column, row[column]) for column in _COLUMNS})


class TradeStore(ABC):
    """Abstract record store for journal trades."""

    @abstractmethod
    async def insert_trade(self, record: TradeRecord) -> TradeRecord:
        """Persist a new trade and return the stored record."""
        ...

    @abstractmethod
    async def update_trade(self, trade_id: str, changes: dict[str, Any]) -> TradeRecord:
        """Apply field changes to an existing trade.

        Raises:
            TradeNotFound: If trade_id does not exist.
        """
        ...

    @abstractmethod
    async def get_trade(self, trade_id: str) -> TradeRecord | None:
        """Return one trade, or None if it does not exist."""
        ...

    @abstractmethod
    async def list_trades(
        self,
        user_id: str,
        account_id: str,
        since: date | None = None,
        until: date | None = None,
    ) -> list[TradeRecord]:
        """All trades of one user and account, newest trade date first.

        An account without trades yields an empty list, not an error.
        """
        ...

    @abstractmethod
    async def delete_trade(self, trade_id: str) -> None:
        """Remove a trade.

        Raises:
            TradeNotFound: If trade_id does not exist.
        """
        ...


class SqliteTradeStore(TradeStore):
    """TradeStore backed by JournalDatabase.

    Every aiosqlite failure surfaces as StorageError.

    Usage:
        async with JournalDatabase("data/journal.db") as database:
            store = SqliteTradeStore(database)
            record = await store.insert_trade(record)
    """

    def __init__(self, database: JournalDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def insert_trade(self, record: TradeRecord) -> TradeRecord:
        now = time.time()
        if not record.created_at:
            record.created_at = now
        record.updated_at = now

        row = record_to_row(record)
        placeholders = ", ".join("?" for _ in _COLUMNS)
        try:
            await self._database.db.execute(
                f"INSERT INTO trades ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                [row[c] for c in _COLUMNS],
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            logger.error("trade_insert_failed", trade_id=record.id, error=str(e))
            raise StorageError(f"Failed to insert trade {record.id!r}: {e}") from e

        logger.info(
            "trade_inserted",
            trade_id=record.id,
            account_id=record.account_id,
            symbol=record.symbol,
            status=record.status.value,
        )
        return record

    async def update_trade(self, trade_id: str, changes: dict[str, Any]) -> TradeRecord:
        unknown = set(changes) - set(_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown trade fields: {sorted(unknown)}")
        frozen = set(changes) & _IMMUTABLE_COLUMNS
        if frozen:
            raise ValueError(f"Trade fields cannot be changed: {sorted(frozen)}")

        updates = dict(changes)
        updates["updated_at"] = time.time()
        assignments = ", ".join(f"{column} = ?" for column in updates)
        params = [_to_db(value) for value in updates.values()]
        params.append(trade_id)

        try:
            cursor = await self._database.db.execute(
                f"UPDATE trades SET {assignments} WHERE id = ?",
                params,
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            logger.error("trade_update_failed", trade_id=trade_id, error=str(e))
            raise StorageError(f"Failed to update trade {trade_id!r}: {e}") from e

        if cursor.rowcount == 0:
            raise TradeNotFound(trade_id)

        record = await self.get_trade(trade_id)
        if record is None:
            raise TradeNotFound(trade_id)

        logger.debug("trade_updated", trade_id=trade_id, fields=sorted(changes))
        return record

    async def delete_trade(self, trade_id: str) -> None:
        try:
            cursor = await self._database.db.execute(
                "DELETE FROM trades WHERE id = ?", (trade_id,)
            )
            await self._database.db.commit()
        except aiosqlite.Error as e:
            logger.error("trade_delete_failed", trade_id=trade_id, error=str(e))
            raise StorageError(f"Failed to delete trade {trade_id!r}: {e}") from e

        if cursor.rowcount == 0:
            raise TradeNotFound(trade_id)
        logger.info("trade_deleted", trade_id=trade_id)

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_trade(self, trade_id: str) -> TradeRecord | None:
        try:
            cursor = await self._database.db.execute(
                f"SELECT {', '.join(_COLUMNS)} FROM trades WHERE id = ?", (trade_id,)
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to read trade {trade_id!r}: {e}") from e
        if row is None:
            return None
        return row_to_record(row)

    async def list_trades(
        self,
        user_id: str,
        account_id: str,
        since: date | None = None,
        until: date | None = None,
    ) -> list[TradeRecord]:
        conditions = ["user_id = ?", "account_id = ?"]
        params: list = [user_id, account_id]

        if since is not None:
            conditions.append("trade_date >= ?")
            params.append(since.isoformat())
        if until is not None:
            conditions.append("trade_date <= ?")
            params.append(until.isoformat())

        where = " AND ".join(conditions)
        try:
            cursor = await self._database.db.execute(
                f"SELECT {', '.join(_COLUMNS)} FROM trades WHERE {where} "
                f"ORDER BY trade_date DESC, created_at DESC",
                params,
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"Failed to list trades: {e}") from e
        return [row_to_record(row) for row in rows]
