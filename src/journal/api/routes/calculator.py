"""Instrument list and live risk calculation for the trade entry form."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from journal.api.parsing import parse_trade_input
from journal.api.responses import error_response, json_response
from journal.exceptions import JournalError
from journal.formatting import format_signed_currency
from journal.service import JournalService

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/instruments")
async def get_instruments(request: Request) -> JSONResponse:
    """Offered symbols per asset class with their contract specifications."""
    service: JournalService = request.app.state.service
    catalog = service.calculator.catalog

    result = {}
    for asset_class, symbols in catalog.offered_by_class().items():
        entries = []
        for symbol in symbols:
            spec = catalog.require(symbol)
            entries.append({
                "symbol": spec.symbol,
                "pip_size": spec.pip_size,
                "contract_size": spec.contract_size,
                "quote_currency": spec.quote_currency,
                "pip_value_per_lot": service.calculator.pip_value_for(symbol),
            })
        result[asset_class.value] = entries

    return json_response(result)


@router.post("/calculate")
async def calculate(request: Request) -> JSONResponse:
    """Live preview: derive pips, size and money figures without saving.

    Accepts a JSON object with the trade form fields. Fields that cannot be
    derived are null and listed under "issues".
    """
    service: JournalService = request.app.state.service
    try:
        body = await request.json()
    except ValueError:
        return json_response({"error": "Invalid JSON body"}, 400)
    if not isinstance(body, dict):
        return json_response({"error": "Invalid JSON body"}, 400)

    try:
        trade = parse_trade_input(body)
        calculation = service.preview(trade)
    except JournalError as e:
        return error_response(e)

    content = calculation.to_dict()
    content["display"] = {
        "risk_money": format_signed_currency(calculation.risk_money),
        "projected_pnl_at_tp": format_signed_currency(calculation.projected_pnl_at_tp),
        "projected_pnl_at_sl": format_signed_currency(
            -calculation.projected_pnl_at_sl
            if calculation.projected_pnl_at_sl is not None
            else None
        ),
        "realized_pnl": format_signed_currency(calculation.realized_pnl),
    }
    log.debug("calculation_previewed", symbol=trade.symbol)
    return json_response(content)
