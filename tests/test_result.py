"""
Tests for BacktestResult derived values and frames.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from options_bt.portfolio import Order, OrderOutcome, OrderResult, Side
from options_bt.run import BacktestResult, EquityPoint


def _point(day, value):
    return EquityPoint(timestamp=datetime(2024, 1, day), cash=Decimal("0"), total_value=Decimal(value))


def _result(values, initial="100", trades=(), order_results=()):
    curve = tuple(_point(i + 2, v) for i, v in enumerate(values))
    return BacktestResult(
        strategy_name="Test",
        start_date=date(2024, 1, 2),
        end_date=date(2024, 1, 31),
        trades=tuple(trades),
        final_value=Decimal(values[-1]) if values else Decimal(initial),
        initial_capital=Decimal(initial),
        order_results=tuple(order_results),
        equity_curve=curve,
    )


def test_return_rounding():
    result = _result(["100", "100.123456"])
    assert result.total_return == Decimal("0.123456")
    # 0.00123456 -> 0.0012 -> 0.12%
    assert result.return_pct == Decimal("0.12")


def test_return_pct_zero_capital():
    assert _result(["0"], initial="0").return_pct == 0


def test_max_drawdown():
    metrics = _result(["100", "120", "90", "110"]).metrics()
    assert metrics["max_drawdown_pct"] == pytest.approx(-25.0)
    assert metrics["total_return_pct"] == Decimal("10")


def test_equity_frame():
    frame = _result(["100", "80"]).equity_frame()
    assert list(frame.columns) == ["timestamp", "cash", "total_value", "drawdown"]
    assert frame["drawdown"].tolist() == pytest.approx([0.0, -0.2])


def test_empty_result_metrics():
    result = _result([])
    assert result.equity_frame().empty
    metrics = result.metrics()
    assert metrics["max_drawdown_pct"] == 0.0
    assert metrics["total_trades"] == 0


def test_trades_frame_and_counts():
    ts = datetime(2024, 1, 2)
    buy = Order(symbol="SPY", side=Side.BUY, quantity=2, price=Decimal("10.50"), timestamp=ts)
    sell = Order(symbol="SPY_20240201_C_95", side=Side.SELL, quantity=1, price=Decimal("1.50"), timestamp=ts)
    result = _result(
        ["100", "101"],
        trades=[buy],
        order_results=[
            OrderResult(buy, OrderOutcome.EXECUTED),
            OrderResult(sell, OrderOutcome.REJECTED_INSUFFICIENT_POSITION),
        ],
    )

    frame = result.trades_frame()
    assert frame.to_dict("records") == [
        {"timestamp": ts, "symbol": "SPY", "side": "BUY", "quantity": 2, "price": 10.5, "notional": 21.0}
    ]
    assert result.trade_count == 1
    assert result.rejected_count == 1
    assert "Rejected Orders: 1" in result.summary()
    assert "Strategy: Test" in result.summary()
