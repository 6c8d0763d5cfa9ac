"""Custom exceptions for the trade journal.

Calculation-layer, validation and storage exceptions live here to avoid
circular imports between the risk, data and service modules.
"""


class JournalError(Exception):
    """Base exception for all journal errors."""


class InputIncomplete(JournalError):
    """Raised when a derived field is required but its inputs are missing.

    The calculator itself never raises this: it marks the field as not
    computable. Callers that need the value (e.g. saving a closed trade
    needs its realized P&L) raise it through TradeCalculation.require().
    """

    def __init__(self, field: str, reason: str = "input_incomplete") -> None:
        super().__init__(f"{field} is not computable ({reason})")
        self.field = field
        self.reason = reason


class UnknownInstrument(JournalError):
    """Raised when a symbol (or its quote currency) has no specification."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"No instrument specification for {symbol!r}")
        self.symbol = symbol


class TradeValidationError(JournalError):
    """Raised when user-entered trade values fail sanity rules.

    Detected before any storage call. ``errors`` maps form field names to
    human-readable messages.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class StorageError(JournalError):
    """Raised when the record or object store fails (network, backend, unknown id)."""


class TradeNotFound(StorageError):
    """Raised when a trade id does not exist in the store."""

    def __init__(self, trade_id: str) -> None:
        super().__init__(f"Trade {trade_id!r} not found")
        self.trade_id = trade_id
