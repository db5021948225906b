"""
Tests for the four strategy state machines.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from options_bt.data.models import MarketObservation
from options_bt.portfolio import Side
from options_bt.strategy import (
    BuyAndHoldStrategy,
    CoveredCallStrategy,
    LongStraddleStrategy,
    PositionState,
    ProtectivePutStrategy,
    get_strategy,
)


def _obs(day, price, month=1, symbol="SPY"):
    price = Decimal(str(price))
    return MarketObservation(
        symbol=symbol, timestamp=datetime(2024, month, day), price=price, bid=price, ask=price
    )


# --- Buy and hold ---

def test_buy_and_hold_invests_95_percent():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 10000})
    orders = strategy.generate_orders(_obs(2, 100))

    assert len(orders) == 1
    assert orders[0].side is Side.BUY
    assert orders[0].quantity == 95
    assert orders[0].price == Decimal("100")
    assert strategy.book.state is PositionState.OPEN
    assert strategy.name == "Buy and Hold Strategy"


def test_buy_and_hold_sells_on_sell_date_and_stays_out():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 10000, "sell_date": "2024-01-10"})
    strategy.generate_orders(_obs(2, 100))

    assert strategy.generate_orders(_obs(9, 104)) == []
    orders = strategy.generate_orders(_obs(10, 110))
    assert [(o.side, o.quantity, o.price) for o in orders] == [(Side.SELL, 95, Decimal("110"))]
    assert strategy.book.state is PositionState.FLAT
    assert strategy.generate_orders(_obs(11, 111)) == []


def test_buy_and_hold_without_sell_date_holds():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 10000})
    strategy.generate_orders(_obs(2, 100))
    assert strategy.generate_orders(_obs(30, 200)) == []


def test_buy_and_hold_cannot_afford_a_share():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 50})
    assert strategy.generate_orders(_obs(2, 100)) == []
    assert strategy.book.state is PositionState.FLAT


def test_other_symbols_are_ignored():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 10000})
    assert strategy.generate_orders(_obs(2, 100, symbol="QQQ")) == []
    assert strategy.book.state is PositionState.FLAT


def test_engine_capital_overrides_param():
    strategy = BuyAndHoldStrategy({"symbol": "SPY", "capital": 10000})
    strategy.set_available_capital(Decimal("50000"))
    assert strategy.generate_orders(_obs(2, 100))[0].quantity == 475


# --- Covered call ---

def test_covered_call_entry():
    strategy = CoveredCallStrategy({"symbol": "SPY", "strike_offset": 5, "share_quantity": 100})
    orders = strategy.generate_orders(_obs(2, 90))

    assert len(orders) == 2
    shares, call = orders
    assert (shares.symbol, shares.side, shares.quantity, shares.price) == ("SPY", Side.BUY, 100, Decimal("90"))
    assert call.side is Side.SELL
    assert call.quantity == 1
    assert call.symbol == "SPY_20240201_C_95"
    # out of the money: 30 days * 0.05 of time value
    assert call.price == Decimal("1.50")


def test_covered_call_exit_buys_back_at_intrinsic():
    strategy = CoveredCallStrategy({"symbol": "SPY", "days_to_expiration": 30})
    strategy.generate_orders(_obs(2, 90))

    assert strategy.generate_orders(_obs(31, 93)) == []
    orders = strategy.generate_orders(_obs(1, 100, month=2))
    assert [(o.symbol, o.side, o.quantity, o.price) for o in orders] == [
        ("SPY", Side.SELL, 100, Decimal("100")),
        ("SPY_20240201_C_95", Side.BUY, 1, Decimal("5")),
    ]
    assert strategy.book.state is PositionState.FLAT


def test_covered_call_lot_below_100_writes_no_calls():
    strategy = CoveredCallStrategy({"symbol": "SPY", "share_quantity": 50})
    orders = strategy.generate_orders(_obs(2, 90))
    assert [(o.side, o.quantity) for o in orders] == [(Side.BUY, 50)]


def test_covered_call_in_the_money_premium():
    strategy = CoveredCallStrategy({"symbol": "SPY", "strike_offset": -10, "days_to_expiration": 10})
    call = strategy.generate_orders(_obs(2, 90))[1]
    assert call.price == Decimal("10.50")


def test_covered_call_skips_non_positive_strike():
    strategy = CoveredCallStrategy({"symbol": "SPY", "strike_offset": -100})
    assert strategy.generate_orders(_obs(2, 90)) == []
    assert strategy.book.state is PositionState.FLAT


def test_covered_call_minimum_capital():
    strategy = CoveredCallStrategy({"symbol": "SPY", "share_quantity": 200})
    assert strategy.minimum_capital_required(_obs(2, 90)) == Decimal("18000")


# --- Protective put ---

def test_protective_put_entry_in_100_share_lots():
    strategy = ProtectivePutStrategy({"symbol": "SPY", "capital": 10000})
    orders = strategy.generate_orders(_obs(2, 90))

    shares, put = orders
    assert (shares.side, shares.quantity, shares.price) == (Side.BUY, 100, Decimal("90"))
    assert (put.symbol, put.side, put.quantity, put.price) == ("SPY_20240201_P_85", Side.BUY, 1, Decimal("1.50"))


def test_protective_put_skips_when_under_100_shares():
    strategy = ProtectivePutStrategy({"symbol": "SPY", "capital": 5000})
    assert strategy.generate_orders(_obs(2, 90)) == []
    assert strategy.book.state is PositionState.FLAT


def test_protective_put_exit_sells_put_at_intrinsic():
    strategy = ProtectivePutStrategy({"symbol": "SPY", "capital": 20000, "days_to_expiration": 5})
    entry = strategy.generate_orders(_obs(2, 90))
    assert entry[0].quantity == 200
    assert entry[1].quantity == 2

    assert strategy.generate_orders(_obs(5, 80)) == []
    orders = strategy.generate_orders(_obs(8, 80))
    assert [(o.side, o.quantity, o.price) for o in orders] == [
        (Side.SELL, 200, Decimal("80")),
        (Side.SELL, 2, Decimal("5")),
    ]


def test_protective_put_skips_non_positive_strike():
    strategy = ProtectivePutStrategy({"symbol": "SPY", "capital": 10000, "strike_offset": 5})
    assert strategy.generate_orders(_obs(2, 3)) == []
    assert strategy.book.state is PositionState.FLAT


def test_protective_put_minimum_capital():
    strategy = ProtectivePutStrategy({"symbol": "SPY"})
    # (100 * 90 + 1.50) / 0.95 rounded up to the cent
    assert strategy.minimum_capital_required(_obs(2, 90)) == Decimal("9475.27")


# --- Long straddle ---

def test_long_straddle_entry():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 10000})
    orders = strategy.generate_orders(_obs(2, 100))

    call, put = orders
    assert call.symbol == "SPY_20240201_C_100"
    assert put.symbol == "SPY_20240201_P_100"
    assert call.side is Side.BUY and put.side is Side.BUY
    assert call.quantity == put.quantity == 1
    # sqrt(30/365) * 0.25 * 100 * 0.4 = 2.8669...
    assert call.price == put.price == Decimal("2.87")
    assert strategy.book.entry_cost == Decimal("5.74")


def test_long_straddle_safety_cap_limits_quantity():
    strategy = LongStraddleStrategy(
        {"symbol": "SPY", "capital": 1000, "days_to_expiration": 1, "max_contracts": 10000}
    )
    orders = strategy.generate_orders(_obs(2, 1))

    # premium floors at 0.10 per leg: 950 / 0.20 = 4750 affordable, capped at 1000 / 10 = 100
    assert orders[0].price == Decimal("0.10")
    assert orders[0].quantity == orders[1].quantity == 100


def test_long_straddle_at_least_one_contract_when_affordable():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 5, "days_to_expiration": 1, "max_contracts": 10})
    orders = strategy.generate_orders(_obs(2, 1))
    assert [o.quantity for o in orders] == [1, 1]


def test_long_straddle_unaffordable():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 5})
    assert strategy.generate_orders(_obs(2, 100)) == []
    assert strategy.book.state is PositionState.FLAT


def test_long_straddle_profit_target_exit():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 100000, "profit_threshold": 50})
    entry = strategy.generate_orders(_obs(2, 150))
    assert strategy.book.entry_cost == Decimal("8.60")
    assert entry[0].quantity == 1

    assert strategy.generate_orders(_obs(3, 155)) == []
    orders = strategy.generate_orders(_obs(4, 210))
    assert [(o.side, o.price) for o in orders] == [(Side.SELL, Decimal("60")), (Side.SELL, Decimal("0"))]
    assert strategy.book.state is PositionState.FLAT


def test_long_straddle_expiration_exit():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 10000})
    strategy.generate_orders(_obs(2, 100))

    orders = strategy.generate_orders(_obs(1, 101, month=2))
    assert [(o.side, o.price) for o in orders] == [(Side.SELL, Decimal("1")), (Side.SELL, Decimal("0"))]


def test_long_straddle_reenters_after_exit():
    strategy = LongStraddleStrategy({"symbol": "SPY", "capital": 10000, "days_to_expiration": 1})
    strategy.generate_orders(_obs(2, 100))
    strategy.generate_orders(_obs(3, 100))
    assert strategy.book.state is PositionState.FLAT
    assert len(strategy.generate_orders(_obs(4, 100))) == 2


def test_long_straddle_minimum_capital():
    strategy = LongStraddleStrategy({"symbol": "SPY"})
    # 5.74 / 0.95 = 6.0421... rounded up
    assert strategy.minimum_capital_required(_obs(2, 100)) == Decimal("6.05")


# --- Shared behaviour ---

@pytest.mark.parametrize(
    "name", ["buy_and_hold", "covered_call", "protective_put", "long_straddle"]
)
def test_reset_returns_to_flat(name):
    strategy = get_strategy(name, {"symbol": "SPY", "capital": 100000})
    assert strategy.generate_orders(_obs(2, 100))
    assert strategy.book.state is PositionState.OPEN

    strategy.reset()
    assert strategy.book.state is PositionState.FLAT
    assert strategy.book.entry_date is None


def test_missing_symbol_rejected():
    with pytest.raises(ValueError, match="symbol"):
        get_strategy("covered_call", {})


def test_invalid_params_rejected():
    with pytest.raises(ValueError, match="max_contracts"):
        get_strategy("long_straddle", {"symbol": "SPY", "max_contracts": 0})
