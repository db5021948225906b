"""
Configuration schemas using Pydantic for validation and type safety.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Literal, Dict, Any
from pydantic import BaseModel, Field, field_validator, model_validator


class DataConfig(BaseModel):
    """Market data source configuration"""
    provider: Literal["csv"] = Field(default="csv", description="Data provider type")
    csv_dir: str = Field(default="data", description="Directory holding one <SYMBOL>.csv per underlying")
    spread_pct: Decimal = Field(default=Decimal("0.0005"), description="Synthetic bid/ask spread as a fraction of close")
    validate_calendar: bool = Field(default=True, description="Fail when a trading day is missing from the CSV")

    @field_validator("spread_pct")
    @classmethod
    def validate_spread(cls, v):
        if v < 0:
            raise ValueError(f"spread_pct must be >= 0, got {v}")
        return v


class EngineConfig(BaseModel):
    """Backtest window and capital"""
    symbol: str = Field(default="SPY", description="Underlying symbol")
    start: date = Field(description="Start date (ISO format, e.g., '2024-01-02')")
    end: date = Field(description="End date (ISO format, e.g., '2024-01-30')")
    initial_capital: Decimal = Field(default=Decimal("10000"), description="Starting cash")
    enforce_min_capital: bool = Field(
        default=False, description="Raise instead of warn when capital is below the strategy minimum"
    )

    @field_validator("start", "end", mode="before")
    @classmethod
    def validate_date(cls, v):
        """Accept datetimes by dropping the time part"""
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("initial_capital")
    @classmethod
    def validate_capital(cls, v):
        if v < 0:
            raise ValueError(f"initial_capital must be >= 0, got {v}")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) is before start ({self.start})")
        return self


class StrategyConfig(BaseModel):
    """Strategy configuration"""
    name: str = Field(description="Strategy name (must be registered)")
    params: Dict[str, Any] = Field(default_factory=dict, description="Strategy parameters")


class RunConfig(BaseModel):
    """Top-level run configuration"""
    data: DataConfig = Field(default_factory=DataConfig)
    engine: EngineConfig
    strategy: StrategyConfig
    name: Optional[str] = Field(default=None, description="Optional label for the run")

    def strategy_params(self) -> Dict[str, Any]:
        """Strategy params with symbol and capital filled in from the engine section."""
        params = dict(self.strategy.params)
        params.setdefault("symbol", self.engine.symbol)
        params.setdefault("capital", self.engine.initial_capital)
        return params
