"""
Error taxonomy for the backtester.

Recoverable per-order rejections (insufficient funds / position) are NOT exceptions:
they are reported as OrderOutcome values by the ledger and dropped by the engine.
"""


class BacktestError(Exception):
    """Base class for all backtester errors"""


class InvalidInputError(BacktestError, ValueError):
    """Non-positive price/quantity/strike/volatility or an invalid date range"""


class PricingDomainError(InvalidInputError):
    """Pricing inputs for which the model is undefined (e.g. zero volatility with T > 0)"""


class InvariantViolationError(BacktestError, RuntimeError):
    """Internal contract violated, e.g. executing an order that fails its own pre-check"""


class DataProviderError(BacktestError):
    """Source data is missing, unreadable or incomplete"""


class InsufficientCapitalError(BacktestError):
    """Capital is below the strategy's minimum requirement and enforcement is enabled"""
