"""Entry point for the trade journal API.

Wires all components together and serves the FastAPI app with uvicorn.
The database connection is opened and closed by the app lifespan.

Component wiring order (in _build_components):
1. InstrumentCatalog + ExchangeRateTable (static market data)
2. RiskCalculator
3. JournalDatabase + SqliteTradeStore (record storage)
4. LocalScreenshotStore (object storage)
5. AggregateCache
6. JournalService
"""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from journal.analytics import AggregateCache
from journal.config import AppSettings
from journal.data import JournalDatabase, LocalScreenshotStore, SqliteTradeStore
from journal.instruments import ExchangeRateTable, InstrumentCatalog
from journal.logging import get_logger, setup_logging
from journal.risk import RiskCalculator
from journal.service import JournalService


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all journal components from settings.

    Note: Does NOT connect the database -- that happens in the lifespan.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    catalog = InstrumentCatalog.default()
    rates = ExchangeRateTable.from_settings(settings.market)
    calculator = RiskCalculator(catalog, rates)

    database = JournalDatabase(settings.storage.db_path)
    trade_store = SqliteTradeStore(database)

    os.makedirs(settings.storage.screenshot_dir, exist_ok=True)
    screenshot_store = LocalScreenshotStore(
        settings.storage.screenshot_dir,
        base_url=settings.storage.screenshot_base_url,
    )

    cache = AggregateCache(enabled=settings.journal.aggregate_cache_enabled)

    service = JournalService(
        calculator=calculator,
        trade_store=trade_store,
        screenshot_store=screenshot_store,
        settings=settings.journal,
        cache=cache,
    )

    return {
        "catalog": catalog,
        "rates": rates,
        "calculator": calculator,
        "database": database,
        "trade_store": trade_store,
        "screenshot_store": screenshot_store,
        "cache": cache,
        "service": service,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and close it on shutdown.

    Stores the service and database on app.state for route handlers.
    """
    logger = get_logger("journal.main")
    settings = app.state.settings
    components = app.state.components

    app.state.service = components["service"]
    app.state.database = components["database"]

    await components["database"].connect()
    logger.info(
        "lifespan_started",
        instruments=len(components["catalog"]),
        roi_baseline=settings.journal.roi_baseline,
    )

    try:
        yield
    finally:
        await components["database"].close()
        logger.info("trade_journal_stopped")


async def run() -> None:
    """Run the journal API server."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("journal.main")

    # 3. Build all components
    components = _build_components(settings)

    from journal.api.app import create_app

    app = create_app(
        lifespan=lifespan,
        screenshot_dir=settings.storage.screenshot_dir,
        screenshot_base_url=settings.storage.screenshot_base_url,
    )
    app.state.settings = settings
    app.state.components = components

    logger.info(
        "starting_journal_api",
        host=settings.server.host,
        port=settings.server.port,
        db_path=settings.storage.db_path,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
