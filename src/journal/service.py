"""Journal service: trade lifecycle and aggregate views for one account.

Save flow for a new trade:
1. Validate user input (no storage call on failure)
2. Run the risk calculator; a closed trade must have a realized P&L
3. Insert the record with its frozen derived fields
4. Upload screenshots to {user_id}/{trade_id}/{before|after}.{ext}
5. Write the screenshot URLs in a separate update

Upload failures and a failed URL update never undo the insert; they are
logged and the trade is kept without its screenshot URLs.
"""

from __future__ import annotations

import calendar
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from typing import Any

from journal.analytics import (
    AggregateCache,
    EquityPoint,
    MonthAggregate,
    OverallStats,
    YearAggregate,
    available_months,
    closed_entries,
    equity_curve,
    month_aggregate,
    overall_stats,
    year_aggregate,
)
from journal.config import JournalSettings
from journal.data.screenshots import ScreenshotStore, screenshot_extension, screenshot_path
from journal.data.store import TradeStore
from journal.exceptions import StorageError, TradeNotFound, TradeValidationError
from journal.instruments.catalog import InstrumentCatalog
from journal.logging import bind_journal_context, get_logger
from journal.models import (
    FROZEN_DERIVED_FIELDS,
    Direction,
    RiskMode,
    RiskSpecification,
    TradeCalculation,
    TradeDuration,
    TradeInput,
    TradeRecord,
    TradeStatus,
)
from journal.risk.calculator import RiskCalculator

logger = get_logger(__name__)

_ZERO = Decimal("0")

# Derived fields a closed trade cannot be saved without.
CLOSED_TRADE_REQUIRED = ("realized_pips", "realized_pnl", "outcome")


@dataclass
class TradeSubmission:
    """Values entered on the trade form, for a new trade or a full edit."""

    user_id: str
    account_id: str
    trade_date: date | None
    symbol: str
    direction: Direction
    entry_price: Decimal | None
    risk: RiskSpecification
    capital: Decimal
    status: TradeStatus = TradeStatus.OPEN
    account_name: str = ""
    exit_price: Decimal | None = None
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None
    commission: Decimal = _ZERO
    duration: TradeDuration = TradeDuration.DAY
    entry_time: time | None = None
    exit_time: time | None = None
    entry_date: date | None = None
    exit_date: date | None = None
    notes: str = ""
    setup: str = ""
    strategy: str = ""

    def to_input(self) -> TradeInput:
        return TradeInput(
            symbol=self.symbol,
            direction=self.direction,
            entry_price=self.entry_price,
            risk=self.risk,
            status=self.status,
            exit_price=self.exit_price,
            stop_loss=self.stop_loss,
            take_profit=self.take_profit,
            account_capital=self.capital,
            commission=self.commission,
        )


@dataclass(frozen=True)
class ScreenshotUpload:
    """An uploaded image file."""

    content: bytes
    filename: str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class JournalSummary:
    """Dashboard block: overall stats, equity curve and latest trades."""

    stats: OverallStats
    equity_curve: list[EquityPoint]
    recent_trades: list[TradeRecord]
    months: list[tuple[int, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "stats": self.stats.to_dict(),
            "equity_curve": [p.to_dict() for p in self.equity_curve],
            "recent_trades": [t.to_dict() for t in self.recent_trades],
            "months": [{"year": y, "month": m} for y, m in self.months],
        }


def validate_submission(
    submission: TradeSubmission,
    catalog: InstrumentCatalog,
    has_after_screenshot: bool,
) -> None:
    """Check user-entered values before anything is calculated or stored.

    Raises:
        TradeValidationError: With one message per offending form field.
    """
    errors: dict[str, str] = {}

    if submission.trade_date is None:
        errors["trade_date"] = "Trade date is required"
    if not submission.symbol:
        errors["symbol"] = "Symbol is required"
    elif submission.symbol not in catalog:
        errors["symbol"] = f"Unknown instrument {submission.symbol!r}"
    if submission.entry_price is None:
        errors["entry_price"] = "Entry price is required"
    elif submission.entry_price <= _ZERO:
        errors["entry_price"] = "Entry price must be positive"
    if submission.risk.mode == RiskMode.LOT and submission.risk.value <= _ZERO:
        errors["risk_value"] = "Lot size is required"
    if submission.commission < _ZERO:
        errors["commission"] = "Commission cannot be negative"

    if (
        submission.duration == TradeDuration.SWING
        and submission.entry_date is not None
        and submission.exit_date is not None
        and submission.exit_date < submission.entry_date
    ):
        errors["exit_date"] = "Exit date cannot be before entry date"

    if submission.status == TradeStatus.CLOSED:
        if submission.exit_price is None:
            errors["exit_price"] = "Exit price is required for closed trades"
        if submission.exit_time is None:
            errors["exit_time"] = "Exit time is required for closed trades"
        if submission.duration == TradeDuration.SWING and submission.exit_date is None:
            errors.setdefault("exit_date", "Exit date is required for closed swing trades")
        if not has_after_screenshot:
            errors["after_screenshot"] = "After-trade screenshot is required for closed trades"

    if errors:
        logger.info(
            "trade_validation_failed",
            symbol=submission.symbol,
            fields=sorted(errors),
        )
        raise TradeValidationError(errors)


class JournalService:
    """Trade lifecycle and aggregate views over injected collaborators.

    Args:
        calculator: Risk calculator (owns the instrument catalog).
        trade_store: Record store.
        screenshot_store: Object store for screenshots.
        settings: ROI baseline and reporting parameters.
        cache: Aggregate cache; one is created from settings if omitted.
        id_factory: Trade id generator (uuid4 hex by default).
    """

    def __init__(
        self,
        calculator: RiskCalculator,
        trade_store: TradeStore,
        screenshot_store: ScreenshotStore,
        settings: JournalSettings,
        cache: AggregateCache | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._calculator = calculator
        self._trades = trade_store
        self._screenshots = screenshot_store
        self._settings = settings
        self._cache = cache if cache is not None else AggregateCache(
            enabled=settings.aggregate_cache_enabled
        )
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)

    @property
    def calculator(self) -> RiskCalculator:
        return self._calculator

    @property
    def cache(self) -> AggregateCache:
        return self._cache

    # ──────────────────────────────────────────────
    # Calculation
    # ──────────────────────────────────────────────

    def preview(self, trade: TradeInput) -> TradeCalculation:
        """Live calculation for the entry form; nothing is stored.

        Raises:
            UnknownInstrument: If the symbol has no specification.
        """
        self._calculator.catalog.require(trade.symbol)
        return self._calculator.calculate(trade)

    def _calculate_for_save(self, submission: TradeSubmission) -> TradeCalculation:
        calculation = self._calculator.calculate(submission.to_input())
        if submission.status == TradeStatus.CLOSED:
            for name in CLOSED_TRADE_REQUIRED:
                calculation.require(name)
        return calculation

    # ──────────────────────────────────────────────
    # Trade lifecycle
    # ──────────────────────────────────────────────

    async def create_trade(
        self,
        submission: TradeSubmission,
        before: ScreenshotUpload | None = None,
        after: ScreenshotUpload | None = None,
    ) -> TradeRecord:
        """Validate, calculate, insert, then attach screenshots.

        Raises:
            TradeValidationError: On invalid form values (nothing stored).
            InputIncomplete: If a closed trade's realized P&L is not computable.
            StorageError: If the insert fails.
        """
        bind_journal_context(submission.user_id, submission.account_id)
        validate_submission(submission, self._calculator.catalog, after is not None)
        calculation = self._calculate_for_save(submission)

        spec = self._calculator.catalog.require(submission.symbol)
        assert submission.trade_date is not None
        assert submission.entry_price is not None
        swing = submission.duration == TradeDuration.SWING
        record = TradeRecord(
            id=self._new_id(),
            user_id=submission.user_id,
            account_id=submission.account_id,
            account_name=submission.account_name,
            trade_date=submission.trade_date,
            symbol=submission.symbol,
            asset_class=spec.asset_class,
            direction=submission.direction,
            status=submission.status,
            entry_price=submission.entry_price,
            risk_mode=submission.risk.mode,
            risk_value=submission.risk.value,
            capital=submission.capital,
            exit_price=submission.exit_price,
            stop_loss=submission.stop_loss,
            take_profit=submission.take_profit,
            commission=submission.commission,
            duration=submission.duration,
            entry_time=submission.entry_time,
            exit_time=submission.exit_time,
            entry_date=submission.entry_date if swing else None,
            exit_date=submission.exit_date if swing else None,
            notes=submission.notes,
            setup=submission.setup,
            strategy=submission.strategy,
        ).with_calculation(calculation)

        record = await self._trades.insert_trade(record)
        self._cache.invalidate(record.user_id, record.account_id)

        return await self._attach_screenshots(record, before, after)

    async def edit_trade(
        self,
        user_id: str,
        account_id: str,
        trade_id: str,
        submission: TradeSubmission,
        before: ScreenshotUpload | None = None,
        after: ScreenshotUpload | None = None,
    ) -> TradeRecord:
        """Replace a trade's inputs and re-derive every calculated field.

        Existing screenshot URLs are kept unless a new file is uploaded. A trade
        never moves to another user or account.

        Raises:
            TradeNotFound: If trade_id does not exist in this account.
            TradeValidationError: On invalid form values, or a submission
                scoped to a different user or account.
            InputIncomplete: If a closed trade's realized P&L is not computable.
        """
        existing = await self.get_trade(user_id, account_id, trade_id)
        bind_journal_context(user_id, account_id)
        if (submission.user_id, submission.account_id) != (user_id, account_id):
            raise TradeValidationError(
                {"account_id": "A trade cannot be moved to another user or account"}
            )
        has_after = after is not None or bool(existing.after_screenshot)
        validate_submission(submission, self._calculator.catalog, has_after)
        calculation = self._calculate_for_save(submission)

        spec = self._calculator.catalog.require(submission.symbol)
        swing = submission.duration == TradeDuration.SWING
        changes: dict[str, Any] = {
            "account_name": submission.account_name,
            "trade_date": submission.trade_date,
            "symbol": submission.symbol,
            "asset_class": spec.asset_class,
            "direction": submission.direction,
            "status": submission.status,
            "entry_price": submission.entry_price,
            "risk_mode": submission.risk.mode,
            "risk_value": submission.risk.value,
            "capital": submission.capital,
            "exit_price": submission.exit_price,
            "stop_loss": submission.stop_loss,
            "take_profit": submission.take_profit,
            "commission": submission.commission,
            "duration": submission.duration,
            "entry_time": submission.entry_time,
            "exit_time": submission.exit_time,
            "entry_date": submission.entry_date if swing else None,
            "exit_date": submission.exit_date if swing else None,
            "notes": submission.notes,
            "setup": submission.setup,
            "strategy": submission.strategy,
        }
        # The derived fields are always replaced as a whole.
        derived = calculation.derived_fields()
        changes.update({name: derived[name] for name in FROZEN_DERIVED_FIELDS})

        record = await self._trades.update_trade(trade_id, changes)
        self._cache.invalidate(user_id, account_id)

        logger.info("trade_edited", trade_id=trade_id, status=record.status.value)
        return await self._attach_screenshots(record, before, after)

    async def update_notes(
        self, user_id: str, account_id: str, trade_id: str, notes: str
    ) -> TradeRecord:
        """Change a trade's notes only. Derived fields are untouched.

        Raises:
            TradeNotFound: If trade_id does not exist in this account.
        """
        await self.get_trade(user_id, account_id, trade_id)
        record = await self._trades.update_trade(trade_id, {"notes": notes})
        logger.info("trade_notes_updated", trade_id=trade_id)
        return record

    async def delete_trade(self, user_id: str, account_id: str, trade_id: str) -> None:
        """Raises TradeNotFound if trade_id does not exist in this account."""
        await self.get_trade(user_id, account_id, trade_id)
        await self._trades.delete_trade(trade_id)
        self._cache.invalidate(user_id, account_id)

    async def get_trade(self, user_id: str, account_id: str, trade_id: str) -> TradeRecord:
        """Fetch one trade of this account.

        A trade owned by another user or account is reported as not found.
        """
        record = await self._trades.get_trade(trade_id)
        if record is None:
            raise TradeNotFound(trade_id)
        if (record.user_id, record.account_id) != (user_id, account_id):
            logger.warning(
                "trade_scope_mismatch", trade_id=trade_id, user_id=user_id, account_id=account_id
            )
            raise TradeNotFound(trade_id)
        return record

    async def list_trades(self, user_id: str, account_id: str) -> list[TradeRecord]:
        return await self._trades.list_trades(user_id, account_id)

    async def _attach_screenshots(
        self,
        record: TradeRecord,
        before: ScreenshotUpload | None,
        after: ScreenshotUpload | None,
    ) -> TradeRecord:
        urls: dict[str, str] = {}
        for kind, upload in (("before", before), ("after", after)):
            if upload is None:
                continue
            ext = screenshot_extension(upload.filename, upload.content_type)
            path = screenshot_path(record.user_id, record.id, kind, ext)
            url = await self._screenshots.upload_screenshot(
                upload.content, path, upload.content_type
            )
            if url is None:
                logger.warning("screenshot_not_attached", trade_id=record.id, kind=kind)
                continue
            urls[f"{kind}_screenshot"] = url

        if not urls:
            return record

        try:
            return await self._trades.update_trade(record.id, urls)
        except StorageError as e:
            logger.error(
                "screenshot_url_update_failed",
                trade_id=record.id,
                fields=sorted(urls),
                error=str(e),
            )
            return record

    # ──────────────────────────────────────────────
    # Aggregate views
    # ──────────────────────────────────────────────

    def roi_capital(self, account_capital: Decimal | None) -> Decimal:
        """The single ROI baseline used by every view."""
        if self._settings.roi_baseline == "reference":
            return self._settings.reference_capital
        return account_capital if account_capital is not None else _ZERO

    async def account_capital(
        self,
        user_id: str,
        account_id: str,
        supplied: Decimal | None = None,
    ) -> Decimal:
        """Capital supplied by the caller, else the latest trade's snapshot, else 0."""
        if supplied is not None:
            return supplied
        records = await self._trades.list_trades(user_id, account_id)
        return records[0].capital if records else _ZERO

    async def month_view(
        self,
        user_id: str,
        account_id: str,
        year: int,
        month: int,
        account_capital: Decimal | None = None,
    ) -> MonthAggregate:
        capital = self.roi_capital(account_capital)
        key = (user_id, account_id, year, month, capital)
        cached = self._cache.get(key)
        if isinstance(cached, MonthAggregate):
            return cached
        generation = self._cache.generation(user_id, account_id)

        records = await self._trades.list_trades(
            user_id,
            account_id,
            since=date(year, month, 1),
            until=date(year, month, calendar.monthrange(year, month)[1]),
        )
        aggregate = month_aggregate(year, month, closed_entries(records), capital)
        self._cache.put(key, aggregate, generation)
        return aggregate

    async def year_view(
        self,
        user_id: str,
        account_id: str,
        year: int,
        account_capital: Decimal | None = None,
    ) -> YearAggregate:
        capital = self.roi_capital(account_capital)
        key = (user_id, account_id, year, None, capital)
        cached = self._cache.get(key)
        if isinstance(cached, YearAggregate):
            return cached
        generation = self._cache.generation(user_id, account_id)

        records = await self._trades.list_trades(
            user_id, account_id, since=date(year, 1, 1), until=date(year, 12, 31)
        )
        aggregate = year_aggregate(year, closed_entries(records), capital)
        self._cache.put(key, aggregate, generation)
        return aggregate

    async def summary(
        self,
        user_id: str,
        account_id: str,
        account_capital: Decimal | None = None,
    ) -> JournalSummary:
        records = await self._trades.list_trades(user_id, account_id)
        entries = closed_entries(records)
        capital = self.roi_capital(account_capital)
        return JournalSummary(
            stats=overall_stats(entries, capital),
            equity_curve=equity_curve(entries, capital),
            recent_trades=records[: self._settings.recent_trades_limit],
            months=available_months(entries),
        )
