"""Calendar, year and summary views over an account's closed trades.

Scoped by the user_id and account_id query parameters. The optional capital
parameter is the account's capital; when omitted the latest trade's capital
snapshot is used. ROI for every view is measured against one baseline.
"""

from __future__ import annotations

from datetime import MAXYEAR, MINYEAR
from decimal import Decimal

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from journal.api.parsing import FieldParser
from journal.api.responses import error_response, json_response
from journal.exceptions import JournalError, TradeValidationError
from journal.formatting import (
    format_large_pnl,
    format_percent,
    format_profit_factor,
    format_signed_currency,
)
from journal.service import JournalService

log = structlog.get_logger(__name__)

router = APIRouter()


def _period_errors(year: int, month: int | None = None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not MINYEAR <= year <= MAXYEAR:
        errors["year"] = f"Invalid year: {year}"
    if month is not None and not 1 <= month <= 12:
        errors["month"] = f"Invalid month: {month}"
    return errors


async def _resolve(
    request: Request, service: JournalService
) -> tuple[str, str, Decimal]:
    parser = FieldParser(request.query_params)
    user_id = parser.text("user_id", required=True)
    account_id = parser.text("account_id", required=True)
    supplied = parser.decimal("capital")
    parser.raise_for_errors()
    capital = await service.account_capital(user_id, account_id, supplied)
    return user_id, account_id, capital


@router.get("/calendar/{year}/{month}")
async def month_view(request: Request, year: int, month: int) -> JSONResponse:
    """Month calendar: day cells, weekly rows and month statistics."""
    service: JournalService = request.app.state.service
    errors = _period_errors(year, month)
    if errors:
        return error_response(TradeValidationError(errors))

    try:
        user_id, account_id, capital = await _resolve(request, service)
        aggregate = await service.month_view(user_id, account_id, year, month, capital)
    except JournalError as e:
        return error_response(e)

    content = aggregate.to_dict()
    content["display"] = {
        "total_pnl": format_signed_currency(aggregate.total_pnl),
        "win_rate": format_percent(aggregate.win_rate),
        "profit_factor": format_profit_factor(aggregate.profit_factor),
        "roi": format_percent(aggregate.roi_percent),
        "days": {
            d.isoformat(): format_large_pnl(day.pnl)
            for d, day in sorted(aggregate.days.items())
        },
    }
    return json_response(content)


@router.get("/years/{year}")
async def year_view(request: Request, year: int) -> JSONResponse:
    """Year view: twelve months, four quarters and yearly totals."""
    service: JournalService = request.app.state.service
    errors = _period_errors(year)
    if errors:
        return error_response(TradeValidationError(errors))

    try:
        user_id, account_id, capital = await _resolve(request, service)
        aggregate = await service.year_view(user_id, account_id, year, capital)
    except JournalError as e:
        return error_response(e)

    content = aggregate.to_dict()
    content["display"] = {
        "total_pnl": format_signed_currency(aggregate.total_pnl),
        "win_rate": format_percent(aggregate.win_rate),
        "roi": format_percent(aggregate.roi_percent),
        "months": [format_large_pnl(m.total_pnl) for m in aggregate.months],
    }
    return json_response(content)


@router.get("/summary")
async def summary(request: Request) -> JSONResponse:
    """Overall stats, equity curve and most recent trades."""
    service: JournalService = request.app.state.service
    try:
        user_id, account_id, capital = await _resolve(request, service)
        result = await service.summary(user_id, account_id, capital)
    except JournalError as e:
        return error_response(e)

    content = result.to_dict()
    content["display"] = {
        "total_pnl": format_signed_currency(result.stats.total_pnl),
        "win_rate": format_percent(result.stats.win_rate),
        "profit_factor": format_profit_factor(result.stats.profit_factor),
    }
    log.debug("summary_served", trades=result.stats.total_trades)
    return json_response(content)
