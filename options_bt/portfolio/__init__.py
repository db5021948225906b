"""
Portfolio layer: orders, ledger, mark-to-market.
"""

from .portfolio import Order, OrderOutcome, OrderResult, PortfolioLedger, Side, Trade, validate_order

__all__ = ["Order", "OrderOutcome", "OrderResult", "PortfolioLedger", "Side", "Trade", "validate_order"]
