"""
Options Strategy Backtester

A deterministic, single-threaded backtesting engine: strategies turn daily price observations
into orders, a cash/position ledger accepts or rejects them, and the run produces P&L analytics.
Option legs are synthetic (model-estimated premiums settled at intrinsic value).
"""

__version__ = "0.1.0"
