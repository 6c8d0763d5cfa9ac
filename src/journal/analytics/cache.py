"""Per-account memo of computed month and year aggregates.

Aggregates are pure functions of an account's closed trades and the
capital baseline, so a cached value stays valid until that account's trade
set changes. The journal service invalidates an account on every insert,
edit and delete.

Each account carries a generation number that invalidate() bumps. A view
reads the generation before loading trades and hands it back to put(); an
aggregate computed from a trade set that changed in the meantime is not
stored.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from journal.analytics.aggregation import MonthAggregate, YearAggregate
from journal.logging import get_logger

logger = get_logger(__name__)

# (user_id, account_id, year, month, capital); month is None for year views.
CacheKey = tuple[str, str, int, int | None, Decimal]


class AggregateCache:
    """In-memory aggregate cache scoped by user and account.

    Only the most recent capital is kept per (account, period): storing a
    value under a new capital replaces the one cached under the old.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._entries: dict[CacheKey, MonthAggregate | YearAggregate] = {}
        self._generations: dict[tuple[str, str], int] = defaultdict(int)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def generation(self, user_id: str, account_id: str) -> int:
        """Current generation of an account's trade set."""
        return self._generations[(user_id, account_id)]

    def get(self, key: CacheKey) -> MonthAggregate | YearAggregate | None:
        if not self._enabled:
            return None
        return self._entries.get(key)

    def put(
        self,
        key: CacheKey,
        value: MonthAggregate | YearAggregate,
        generation: int | None = None,
    ) -> bool:
        """Store value unless the account changed since generation was read.

        Returns True if the value was stored.
        """
        if not self._enabled:
            return False
        user_id, account_id, year, month, _ = key
        if generation is not None and generation != self.generation(user_id, account_id):
            logger.debug(
                "aggregate_cache_put_skipped",
                user_id=user_id,
                account_id=account_id,
                year=year,
                month=month,
            )
            return False

        for other in [k for k in self._entries if k[:4] == key[:4] and k != key]:
            del self._entries[other]
        self._entries[key] = value
        return True

    def invalidate(self, user_id: str, account_id: str) -> int:
        """Drop every cached aggregate of one account. Returns the count dropped."""
        self._generations[(user_id, account_id)] += 1
        stale = [k for k in self._entries if k[0] == user_id and k[1] == account_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(
                "aggregate_cache_invalidated",
                user_id=user_id,
                account_id=account_id,
                dropped=len(stale),
            )
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
