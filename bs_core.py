"""
bs_core.py
Black–Scholes pricing for European options with a continuous dividend yield:
call/put prices, d1/d2, the five Greeks and moneyness tags.

Rates and volatility are entered as percentages (20 means 20%) and converted
once in OptionInput.decimal_rates(). Out-of-domain inputs give None, not an
exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging
import math

from normal_dist import norm_cdf as _N, norm_pdf as _n
from settings import PCT, DAYS_PER_YEAR

logger = logging.getLogger(__name__)


# -----------------------------
# Inputs / results
# -----------------------------
@dataclass(frozen=True)
class OptionInput:
    spot_price: float
    strike_price: float
    time_to_maturity: float      # years
    volatility: float            # % per year
    risk_free_rate: float = 0.0  # % per year, continuous
    dividend_yield: float = 0.0  # % per year, continuous

    def is_valid(self) -> bool:
        return min(self.spot_price, self.strike_price, self.time_to_maturity, self.volatility) > 0

    def decimal_rates(self) -> Tuple[float, float, float]:
        """(sigma, r, q) as decimals."""
        return self.volatility / PCT, self.risk_free_rate / PCT, self.dividend_yield / PCT


@dataclass(frozen=True)
class GreeksResult:
    call_price: float
    put_price: float
    call_delta: float
    put_delta: float
    gamma: float
    call_theta: float  # per calendar day
    put_theta: float   # per calendar day
    vega: float        # per 1 vol point
    call_rho: float    # per 1 rate point
    put_rho: float     # per 1 rate point
    d1: float
    d2: float


# -----------------------------
# Black–Scholes core
# -----------------------------
def d1_d2(inp: OptionInput) -> Optional[Tuple[float, float]]:
    """d1, d2 with continuous dividend yield q; None for invalid inputs."""
    if not inp.is_valid():
        logger.debug("d1_d2: out-of-domain input %r", inp)
        return None
    S, K, T = inp.spot_price, inp.strike_price, inp.time_to_maturity
    sigma, r, q = inp.decimal_rates()
    vsqrt = sigma * math.sqrt(T)
    d1 = (math.log(S / K) + (r - q + 0.5 * sigma * sigma) * T) / vsqrt
    d2 = d1 - vsqrt
    return d1, d2


def bs_prices(inp: OptionInput) -> Optional[Tuple[float, float, float, float]]:
    """
    Return (call, put, d1, d2), or None for invalid inputs.
    """
    d = d1_d2(inp)
    if d is None:
        return None
    d1, d2 = d
    S, K, T = inp.spot_price, inp.strike_price, inp.time_to_maturity
    _, r, q = inp.decimal_rates()
    disc_r = math.exp(-r * T)
    disc_q = math.exp(-q * T)
    call = S * disc_q * _N(d1) - K * disc_r * _N(d2)
    put = K * disc_r * _N(-d2) - S * disc_q * _N(-d1)
    return call, put, d1, d2


def price_and_greeks(inp: OptionInput) -> Optional[GreeksResult]:
    """
    Prices plus Greeks for both legs:
      - delta (call/put)
      - gamma (shared)
      - theta per calendar day (call/put)
      - vega per 1 vol point (shared)
      - rho per 1 rate point (call/put)
    """
    priced = bs_prices(inp)
    if priced is None:
        return None
    call, put, d1, d2 = priced

    S, K, T = inp.spot_price, inp.strike_price, inp.time_to_maturity
    sigma, r, q = inp.decimal_rates()
    sqrt_t = math.sqrt(T)
    nd1 = _n(d1)
    Nd1, Nd2 = _N(d1), _N(d2)
    Nmd1, Nmd2 = _N(-d1), _N(-d2)
    disc_r = math.exp(-r * T)
    disc_q = math.exp(-q * T)

    decay = -(S * nd1 * sigma * disc_q) / (2.0 * sqrt_t)
    theta_call = decay - r * K * disc_r * Nd2 + q * S * disc_q * Nd1
    theta_put = decay + r * K * disc_r * Nmd2 - q * S * disc_q * Nmd1

    return GreeksResult(
        call_price=call,
        put_price=put,
        call_delta=disc_q * Nd1,
        put_delta=disc_q * (Nd1 - 1.0),
        gamma=disc_q * nd1 / (S * sigma * sqrt_t),
        call_theta=theta_call / DAYS_PER_YEAR,
        put_theta=theta_put / DAYS_PER_YEAR,
        vega=S * disc_q * nd1 * sqrt_t / PCT,
        call_rho=K * T * disc_r * Nd2 / PCT,
        put_rho=-K * T * disc_r * Nmd2 / PCT,
        d1=d1,
        d2=d2,
    )


# -----------------------------
# Moneyness
# -----------------------------
def moneyness(spot: float, strike: float) -> Dict[str, str]:
    """ITM/ATM/OTM label for each leg; exact equality is ATM."""
    if spot > strike:
        return {"call": "ITM", "put": "OTM"}
    if spot < strike:
        return {"call": "OTM", "put": "ITM"}
    return {"call": "ATM", "put": "ATM"}


__all__ = [
    "OptionInput",
    "GreeksResult",
    "d1_d2",
    "bs_prices",
    "price_and_greeks",
    "moneyness",
]
