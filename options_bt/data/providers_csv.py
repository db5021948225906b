"""
CSV data provider for daily OHLCV files.

One file per symbol: <csv_dir>/<SYMBOL>.csv with header Date,Open,High,Low,Close,Volume.
Close is used as the observation price; bid/ask are synthesized from a fixed spread.
"""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from ..errors import DataProviderError
from ..money import BASIS, quantize, to_decimal
from .calendars import HolidayCalendar
from .models import MarketObservation

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = ["Date", "Open", "High", "Low", "Close", "Volume"]
DEFAULT_SPREAD_PCT = Decimal("0.0005")  # 0.05%


class CsvDataProvider:
    """
    File-backed provider.

    If a HolidayCalendar is given, every trading day in the requested range must have a row;
    otherwise DataProviderError lists the missing dates.
    """

    def __init__(
        self,
        csv_dir: Union[str, Path],
        spread_pct: Union[Decimal, float, str] = DEFAULT_SPREAD_PCT,
        calendar: Optional[HolidayCalendar] = None,
    ):
        """
        Args:
            csv_dir: Directory containing <SYMBOL>.csv files
            spread_pct: Full bid/ask spread as a fraction of close (0.0005 = 0.05%)
            calendar: Holiday calendar used for completeness checks (None = no check)
        """
        self.csv_dir = Path(csv_dir)
        self.spread_pct = to_decimal(spread_pct)
        self.calendar = calendar

    def _path_for(self, symbol: str) -> Path:
        return self.csv_dir / f"{symbol}.csv"

    def has_data_for_symbol(self, symbol: str) -> bool:
        return self._path_for(symbol).is_file()

    def _read_frame(self, symbol: str) -> pd.DataFrame:
        path = self._path_for(symbol)
        if not path.is_file():
            raise DataProviderError(f"CSV file not found for symbol {symbol}: {path}")

        try:
            df = pd.read_csv(path, dtype=str, skipinitialspace=True)
        except pd.errors.EmptyDataError:
            raise DataProviderError(f"Empty CSV file for symbol: {symbol}") from None

        if len(df.columns) < len(EXPECTED_COLUMNS):
            raise DataProviderError(
                f"Invalid CSV format for {symbol} - expected headers: {','.join(EXPECTED_COLUMNS)}"
            )
        for i, expected in enumerate(EXPECTED_COLUMNS):
            actual = str(df.columns[i]).strip()
            if actual.lower() != expected.lower():
                logger.warning(f"Header mismatch at position {i}: expected '{expected}', got '{actual}'")

        # Positional columns: header names are advisory
        df = df.iloc[:, : len(EXPECTED_COLUMNS)].copy()
        df.columns = EXPECTED_COLUMNS
        return df

    def _to_observation(self, symbol: str, row: pd.Series) -> MarketObservation:
        day = datetime.strptime(str(row["Date"]).strip(), "%Y-%m-%d").date()
        close = to_decimal(str(row["Close"]))
        volume = int(str(row["Volume"]).strip())
        if close <= 0:
            raise ValueError(f"non-positive close {close}")

        half_spread = quantize(close * self.spread_pct / 2, BASIS)
        return MarketObservation(
            symbol=symbol,
            timestamp=datetime.combine(day, time.min),
            price=close,
            bid=close - half_spread,
            ask=close + half_spread,
            volume=volume,
        )

    def get_market_data(self, symbol: str, start: date, end: date) -> List[MarketObservation]:
        """
        Load observations for symbol in [start, end], sorted by date.

        Unparsable rows are logged and skipped. Duplicate dates keep the last row.
        """
        df = self._read_frame(symbol)

        by_date = {}
        for _, row in df.iterrows():
            try:
                obs = self._to_observation(symbol, row)
            except Exception as e:
                logger.warning(f"Failed to parse row {row.to_dict()} for {symbol}: {e}")
                continue
            if start <= obs.trade_date <= end:
                by_date[obs.trade_date] = obs

        if self.calendar is not None:
            missing = [d for d in self.calendar.trading_days(start, end) if d not in by_date]
            if missing:
                raise DataProviderError(
                    f"Missing data for {symbol} on dates: {[d.isoformat() for d in missing]}"
                )

        observations = [by_date[d] for d in sorted(by_date)]
        logger.info(f"Loaded {len(observations)} observations for {symbol} ({start} to {end})")
        return observations
