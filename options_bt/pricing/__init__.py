"""
Option pricing: Black-Scholes premium, Greeks, intrinsic value
"""

from .black_scholes import (
    OptionType,
    OptionContract,
    option_price,
    intrinsic_value,
    delta,
    theta,
    time_to_expiration,
)

__all__ = [
    "OptionType",
    "OptionContract",
    "option_price",
    "intrinsic_value",
    "delta",
    "theta",
    "time_to_expiration",
]
