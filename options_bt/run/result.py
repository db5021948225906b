"""
Backtest result: trade log, per-order outcomes, equity curve and derived metrics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from ..money import percent
from ..portfolio import OrderOutcome, OrderResult, Trade

TRADING_DAYS_PER_YEAR = 252


@dataclass(frozen=True)
class EquityPoint:
    timestamp: datetime
    cash: Decimal
    total_value: Decimal


@dataclass(frozen=True)
class BacktestResult:
    """Immutable outcome of one engine run."""

    strategy_name: str
    start_date: date
    end_date: date
    trades: Tuple[Trade, ...]
    final_value: Decimal
    initial_capital: Decimal
    order_results: Tuple[OrderResult, ...] = ()
    equity_curve: Tuple[EquityPoint, ...] = ()

    @property
    def total_return(self) -> Decimal:
        return self.final_value - self.initial_capital

    @property
    def return_pct(self) -> Decimal:
        return percent(self.total_return, self.initial_capital)

    @property
    def trade_count(self) -> int:
        return len(self.trades)

    @property
    def rejected_count(self) -> int:
        return sum(1 for r in self.order_results if r.outcome is not OrderOutcome.EXECUTED)

    def trades_frame(self) -> pd.DataFrame:
        columns = ["timestamp", "symbol", "side", "quantity", "price", "notional"]
        rows = [
            {
                "timestamp": t.timestamp,
                "symbol": t.symbol,
                "side": t.side.value,
                "quantity": t.quantity,
                "price": float(t.price),
                "notional": float(t.notional),
            }
            for t in self.trades
        ]
        return pd.DataFrame(rows, columns=columns)

    def equity_frame(self) -> pd.DataFrame:
        """Equity curve with running drawdown (fraction of the running peak, <= 0)."""
        df = pd.DataFrame(
            [
                {"timestamp": p.timestamp, "cash": float(p.cash), "total_value": float(p.total_value)}
                for p in self.equity_curve
            ],
            columns=["timestamp", "cash", "total_value"],
        )
        if df.empty:
            df["drawdown"] = pd.Series(dtype=float)
            return df
        peak = df["total_value"].cummax()
        df["drawdown"] = np.where(peak > 0, df["total_value"] / peak.where(peak > 0, 1.0) - 1.0, 0.0)
        return df

    def metrics(self) -> Dict[str, Any]:
        equity = self.equity_frame()
        max_drawdown = float(equity["drawdown"].min() * 100.0) if not equity.empty else 0.0

        sharpe = 0.0
        if len(equity) > 2:
            rets = equity["total_value"].pct_change().dropna()
            if rets.std() != 0 and not np.isnan(rets.std()):
                sharpe = float(rets.mean() / rets.std() * np.sqrt(TRADING_DAYS_PER_YEAR))

        return {
            "strategy": self.strategy_name,
            "initial_capital": self.initial_capital,
            "final_value": self.final_value,
            "total_return": self.total_return,
            "total_return_pct": self.return_pct,
            "total_trades": self.trade_count,
            "rejected_orders": self.rejected_count,
            "max_drawdown_pct": max_drawdown,
            "sharpe": sharpe,
        }

    def summary(self) -> str:
        lines = [
            f"Strategy: {self.strategy_name}",
            f"Period: {self.start_date} to {self.end_date}",
            f"Initial Capital: ${self.initial_capital}",
            f"Final Value: ${self.final_value}",
            f"Total Return: ${self.total_return} ({self.return_pct}%)",
            f"Total Trades: {self.trade_count}",
        ]
        if self.rejected_count:
            lines.append(f"Rejected Orders: {self.rejected_count}")
        return "\n".join(lines)
