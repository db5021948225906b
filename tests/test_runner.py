"""
End-to-end tests: config -> CSV provider -> engine, and the CLI entrypoint.
"""

import json
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from options_bt.config import RunConfig
from options_bt.data import CsvDataProvider, HolidayCalendar
from options_bt.errors import DataProviderError, InsufficientCapitalError
from options_bt.run import run_backtest, run_many
from options_bt.run.cli import main


@pytest.fixture
def price_dir(tmp_path):
    """SPY closes for every January 2024 trading day, rising 1.00 per day from 470"""
    calendar = HolidayCalendar.for_range(date(2024, 1, 1), date(2024, 1, 31))
    days = calendar.trading_days(date(2024, 1, 1), date(2024, 1, 31))
    rows = [
        [d.isoformat(), f"{470 + i}.00", f"{471 + i}.00", f"{469 + i}.00", f"{470 + i}.00", 1000000]
        for i, d in enumerate(days)
    ]
    pd.DataFrame(rows, columns=["Date", "Open", "High", "Low", "Close", "Volume"]).to_csv(
        tmp_path / "SPY.csv", index=False
    )
    return tmp_path


def _config(price_dir, strategy="buy_and_hold", params=None, **engine):
    engine_cfg = {"symbol": "SPY", "start": "2024-01-02", "end": "2024-01-30", "initial_capital": 50000}
    engine_cfg.update(engine)
    return RunConfig(
        data={"csv_dir": str(price_dir)},
        engine=engine_cfg,
        strategy={"name": strategy, "params": params or {}},
    )


def test_run_buy_and_hold(price_dir):
    result = run_backtest(_config(price_dir, params={"sell_date": "2024-01-30"}))

    # 20 trading days from Jan 2 to Jan 30; bought at 470, sold at 489
    assert len(result.equity_curve) == 20
    assert result.trade_count == 2
    assert result.trades[0].quantity == 101
    assert result.final_value == Decimal("50000") + 101 * Decimal("19")


def test_run_long_straddle(price_dir):
    result = run_backtest(_config(price_dir, "long_straddle", {"max_contracts": 500}))
    assert result.strategy_name == "Long Straddle Strategy"
    assert result.trade_count >= 2
    assert all(p.cash >= 0 for p in result.equity_curve)


def test_run_many_isolated(price_dir):
    configs = [_config(price_dir, name) for name in ("buy_and_hold", "covered_call", "protective_put", "long_straddle")]
    results = run_many(configs)
    assert [r.strategy_name for r in results] == [
        "Buy and Hold Strategy",
        "Covered Call Strategy",
        "Protective Put Strategy",
        "Long Straddle Strategy",
    ]
    assert all(r.initial_capital == Decimal("50000") for r in results)


def test_source_data_read_once(price_dir, monkeypatch):
    calls = []
    original = CsvDataProvider.get_market_data

    def counting(self, symbol, start, end):
        calls.append((symbol, start, end))
        return original(self, symbol, start, end)

    monkeypatch.setattr(CsvDataProvider, "get_market_data", counting)

    result = run_backtest(_config(price_dir, "covered_call", initial_capital=1000))

    assert calls == [("SPY", date(2024, 1, 2), date(2024, 1, 30))]
    assert len(result.equity_curve) == 20


def test_enforced_minimum_capital(price_dir):
    config = _config(price_dir, "covered_call", initial_capital=1000, enforce_min_capital=True)
    with pytest.raises(InsufficientCapitalError):
        run_backtest(config)


def test_minimum_capital_warning_only(price_dir, caplog):
    result = run_backtest(_config(price_dir, "covered_call", initial_capital=1000))
    assert "Insufficient capital" in caplog.text
    assert result.trade_count == 0
    assert result.rejected_count > 0


def test_missing_day_fails_run(price_dir):
    df = pd.read_csv(price_dir / "SPY.csv")
    df[df["Date"] != "2024-01-10"].to_csv(price_dir / "SPY.csv", index=False)

    with pytest.raises(DataProviderError, match="2024-01-10"):
        run_backtest(_config(price_dir))

    config = _config(price_dir)
    config.data.validate_calendar = False
    assert len(run_backtest(config).equity_curve) == 19


def test_cli_run(price_dir, tmp_path, capsys):
    path = tmp_path / "run.json"
    path.write_text(json.dumps(_config(price_dir).model_dump(mode="json")))

    code = main(["--config", str(path), "--end", "2024-01-10", "--set", "engine.initial_capital=20000"])

    assert code == 0
    out = capsys.readouterr().out
    assert "BACKTEST SUMMARY" in out
    assert "Initial Capital: $20,000.00" in out


def test_cli_dry_run(price_dir, tmp_path, capsys):
    path = tmp_path / "run.json"
    path.write_text(json.dumps(_config(price_dir).model_dump(mode="json")))

    assert main(["--config", str(path), "--dry-run", "--strategy", "long_straddle"]) == 0
    assert "Strategy: long_straddle" in capsys.readouterr().out


def test_cli_errors(tmp_path, capsys):
    assert main([]) == 1
    assert main(["--config", str(tmp_path / "missing.yaml")]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_cli_list_strategies(capsys):
    assert main(["--list-strategies"]) == 0
    out = capsys.readouterr().out
    for name in ("buy_and_hold", "covered_call", "protective_put", "long_straddle"):
        assert name in out
