"""
Black-Scholes pricing and Greeks for European options.

Pure functions. Math runs in float (numpy/scipy); currency results are returned as
Decimal rounded to 10 significant digits (half-up). Greeks are plain floats.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Tuple

import numpy as np
from scipy.stats import norm

from ..errors import InvalidInputError, PricingDomainError
from ..money import Number, ZERO, round_significant, to_decimal

DAYS_PER_YEAR = 365.0


class OptionType(str, Enum):
    CALL = "CALL"
    PUT = "PUT"

    @property
    def code(self) -> str:
        return self.value[0]


def _validate(spot: Number, strike: Number, t: float, sigma: float) -> Tuple[Decimal, Decimal]:
    s = to_decimal(spot)
    k = to_decimal(strike)
    if not s.is_finite() or s <= 0:
        raise InvalidInputError(f"spot must be positive, got {spot}")
    if not k.is_finite() or k <= 0:
        raise InvalidInputError(f"strike must be positive, got {strike}")
    if t is None or math.isnan(t):
        raise InvalidInputError(f"time to expiration must be a number, got {t}")
    if t > 0 and (sigma is None or math.isnan(sigma) or sigma <= 0):
        raise PricingDomainError(f"volatility must be positive when T > 0, got {sigma}")
    return s, k


def _d1_d2(s: float, k: float, t: float, r: float, sigma: float) -> Tuple[float, float]:
    vol_sqrt_t = sigma * np.sqrt(t)
    d1 = (np.log(s / k) + (r + 0.5 * sigma * sigma) * t) / vol_sqrt_t
    return float(d1), float(d1 - vol_sqrt_t)


def intrinsic_value(spot: Number, strike: Number, option_type: OptionType) -> Decimal:
    """Exercise value: CALL max(S-K, 0), PUT max(K-S, 0). Exact decimal arithmetic."""
    s = to_decimal(spot)
    k = to_decimal(strike)
    value = s - k if option_type == OptionType.CALL else k - s
    return value if value > 0 else ZERO


def option_price(
    spot: Number,
    strike: Number,
    time_to_expiration: float,
    risk_free_rate: float,
    volatility: float,
    option_type: OptionType,
) -> Decimal:
    """
    Black-Scholes premium.

    Args:
        spot: Underlying price S (> 0)
        strike: Strike K (> 0)
        time_to_expiration: T in years; T <= 0 returns intrinsic value
        risk_free_rate: Continuously compounded r
        volatility: Annualized sigma (> 0 when T > 0)
        option_type: CALL or PUT

    Returns:
        Premium floored at 0, rounded to 10 significant digits

    Raises:
        InvalidInputError: non-positive spot/strike
        PricingDomainError: sigma <= 0 with T > 0
    """
    t = float(time_to_expiration)
    s_dec, k_dec = _validate(spot, strike, t, volatility)
    if t <= 0:
        return round_significant(intrinsic_value(s_dec, k_dec, option_type))

    s, k, r, sigma = float(s_dec), float(k_dec), float(risk_free_rate), float(volatility)
    d1, d2 = _d1_d2(s, k, t, r, sigma)
    discount = k * np.exp(-r * t)

    if option_type == OptionType.CALL:
        price = s * norm.cdf(d1) - discount * norm.cdf(d2)
    else:
        price = discount * norm.cdf(-d2) - s * norm.cdf(-d1)

    return round_significant(max(0.0, float(price)))


def delta(
    spot: Number,
    strike: Number,
    time_to_expiration: float,
    risk_free_rate: float,
    volatility: float,
    option_type: OptionType,
) -> float:
    """dPrice/dSpot. CALL in [0, 1], PUT in [-1, 0]; 0 at or after expiration."""
    t = float(time_to_expiration)
    s_dec, k_dec = _validate(spot, strike, t, volatility)
    if t <= 0:
        return 0.0
    d1, _ = _d1_d2(float(s_dec), float(k_dec), t, float(risk_free_rate), float(volatility))
    if option_type == OptionType.CALL:
        return float(norm.cdf(d1))
    return float(norm.cdf(d1) - 1.0)


def theta(
    spot: Number,
    strike: Number,
    time_to_expiration: float,
    risk_free_rate: float,
    volatility: float,
    option_type: OptionType,
) -> float:
    """Time decay per calendar day; 0 at or after expiration."""
    t = float(time_to_expiration)
    s_dec, k_dec = _validate(spot, strike, t, volatility)
    if t <= 0:
        return 0.0

    s, k, r, sigma = float(s_dec), float(k_dec), float(risk_free_rate), float(volatility)
    d1, d2 = _d1_d2(s, k, t, r, sigma)
    term1 = -s * norm.pdf(d1) * sigma / (2 * np.sqrt(t))
    discount = k * np.exp(-r * t)
    if option_type == OptionType.CALL:
        term2 = -r * discount * norm.cdf(d2)
    else:
        term2 = r * discount * norm.cdf(-d2)
    return float((term1 + term2) / DAYS_PER_YEAR)


def time_to_expiration(current: date, expiration: date) -> float:
    """Whole calendar days to expiration in years; 0 once past expiration."""
    if current > expiration:
        return 0.0
    return (expiration - current).days / DAYS_PER_YEAR


@dataclass(frozen=True)
class OptionContract:
    """A synthetic listed option on an underlying."""

    underlying: str
    option_type: OptionType
    strike: Decimal
    expiration: date

    def __post_init__(self):
        strike = to_decimal(self.strike)
        if not strike.is_finite() or strike <= 0:
            raise InvalidInputError(f"strike must be positive, got {self.strike}")
        object.__setattr__(self, "option_type", OptionType(self.option_type))
        object.__setattr__(self, "strike", strike)

    @property
    def symbol(self) -> str:
        """e.g. SPY_20240201_C_47500 for a 475.00 call expiring 2024-02-01"""
        strike_digits = str(self.strike).replace(".", "")
        return f"{self.underlying}_{self.expiration.strftime('%Y%m%d')}_{self.option_type.code}_{strike_digits}"

    def is_expired(self, current: date) -> bool:
        return current > self.expiration

    def intrinsic(self, spot: Number) -> Decimal:
        return intrinsic_value(spot, self.strike, self.option_type)

    def price(self, spot: Number, as_of: date, risk_free_rate: float, volatility: float) -> Decimal:
        return option_price(
            spot,
            self.strike,
            time_to_expiration(as_of, self.expiration),
            risk_free_rate,
            volatility,
            self.option_type,
        )
