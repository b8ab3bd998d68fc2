# products/services/errors.py

"""
STOCK SERVICE ERRORS

Centralized domain errors for the stock core.

- StockNotFoundError          -> product / lot missing, inactive, or outside the venue
- InvalidStockArgumentError   -> malformed input, rejected before any read
- InvalidStockOperationError  -> the operation would break a stock invariant
                                 (negative product / lot balance, infeasible plan)

Database errors are never translated into these.
"""


class StockServiceError(Exception):
    """Base exception for all stock service failures."""


class StockNotFoundError(StockServiceError):
    """Raised when a referenced product or lot does not exist in the venue."""


class InvalidStockArgumentError(StockServiceError):
    """Raised on bad input (non-positive allocation quantity, malformed metadata)."""


class InvalidStockOperationError(StockServiceError):
    """Raised when applying the operation would drive stock negative or is infeasible."""
