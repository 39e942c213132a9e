"""
bonds.py
----------
Fixed-coupon bond valuation with flexible coupon frequencies
(annual, semiannual, quarterly, monthly).

Supports:
- Price as the PV of remaining cash flows at the per-period market rate
- Yield-to-Maturity (YTM) solving by Newton–Raphson
- Current yield, Macaulay/modified duration and convexity
- Clean/dirty price (valuation is assumed to fall on a coupon date, so
  accrued interest is zero)
- Rate-shock sensitivity table (duration + convexity Taylor approximation)
- Exact price–yield curve across a grid of rates

Rates are entered as percentages (3 means 3%) and converted once in
BondInput.decimal_rates(). Invalid bonds give None, not an exception.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import logging
import math

import numpy as np
import pandas as pd

from settings import (
    PCT,
    YTM_PRICE_TOL,
    YTM_MAX_ITER,
    YTM_NEG_CLAMP,
    YTM_MIN_DERIVATIVE,
    DEFAULT_RATE_SHOCKS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BondInput:
    face_value: float
    coupon_rate: float        # % per year
    years_to_maturity: float
    market_rate: float        # % per year
    payment_frequency: int = 2

    def is_valid(self) -> bool:
        return self.face_value > 0 and self.years_to_maturity > 0 and self.payment_frequency > 0

    def decimal_rates(self) -> Tuple[float, float]:
        """(coupon, market) as decimals."""
        return self.coupon_rate / PCT, self.market_rate / PCT


@dataclass(frozen=True)
class BondResult:
    price: float
    ytm: float                # %
    current_yield: float      # %
    macaulay_duration: float  # years
    modified_duration: float
    convexity: float
    accrued_interest: float
    clean_price: float
    dirty_price: float


# ---------------------------
# Cash flows
# ---------------------------

def _n_periods(years: float, freq: int) -> int:
    return max(int(round(years * freq)), 1)


def _cash_flows(inp: BondInput) -> List[float]:
    """Coupon every period, principal added to the last one."""
    coupon, _ = inp.decimal_rates()
    m = inp.payment_frequency
    n = _n_periods(inp.years_to_maturity, m)
    c = inp.face_value * coupon / m
    return [c if t < n else c + inp.face_value for t in range(1, n + 1)]


def _discount(log_base: float, t: float) -> float:
    """(1+i)^-t from log1p(i); underflows to 0 instead of overflowing."""
    return math.exp(-t * log_base)


def _price_and_derivative(cfs: List[float], y: float, freq: int) -> Tuple[float, float]:
    """Price at annual yield y and dP/dy."""
    log_base = math.log1p(y / freq)
    price = 0.0
    deriv = 0.0
    for t, cf in enumerate(cfs, start=1):
        price += cf * _discount(log_base, t)
        deriv -= (t / freq) * cf * _discount(log_base, t + 1)
    return price, deriv


# ---------------------------
# Valuation
# ---------------------------

def price_bond(inp: BondInput, target_price: Optional[float] = None) -> Optional[BondResult]:
    """
    Price, yield and risk measures at the market rate.

    If ``target_price`` is given, ``ytm`` is solved from it; otherwise it
    echoes the market rate.
    """
    if not inp.is_valid():
        return None

    _, r = inp.decimal_rates()
    m = inp.payment_frequency
    i = r / m
    if 1.0 + i <= 0.0:
        return None

    log_base = math.log1p(i)
    disc2 = _discount(log_base, 2)
    price = 0.0
    weighted_time = 0.0
    convexity_sum = 0.0
    for t, cf in enumerate(_cash_flows(inp), start=1):
        pv = cf * _discount(log_base, t)
        price += pv
        weighted_time += (t / m) * pv
        convexity_sum += t * (t + 1) * pv * disc2

    # Negative coupons can push the PV to zero or below; durations need P > 0
    if price <= 0.0:
        return None

    mac = weighted_time / price
    coupon, _ = inp.decimal_rates()

    ytm = inp.market_rate
    if target_price is not None and target_price > 0:
        solved = solve_ytm(inp, target_price)
        if solved is not None:
            ytm = solved

    accrued = 0.0
    return BondResult(
        price=price,
        ytm=ytm,
        current_yield=inp.face_value * coupon / price * PCT,
        macaulay_duration=mac,
        modified_duration=mac / (1.0 + i),
        convexity=convexity_sum / (price * m * m),
        accrued_interest=accrued,
        clean_price=price,
        dirty_price=price + accrued,
    )


def solve_ytm(
    inp: BondInput,
    target_price: float,
    tol: float = YTM_PRICE_TOL,
    max_iter: int = YTM_MAX_ITER,
) -> Optional[float]:
    """
    Newton–Raphson YTM (in %) starting from the market rate.

    Hitting ``max_iter`` or a flat derivative returns the current estimate.
    """
    if not inp.is_valid() or target_price <= 0:
        return None

    m = inp.payment_frequency
    cfs = _cash_flows(inp)
    _, guess = inp.decimal_rates()
    if 1.0 + guess / m <= 0.0:
        guess = YTM_NEG_CLAMP

    for k in range(max_iter):
        price, deriv = _price_and_derivative(cfs, guess, m)
        diff = price - target_price
        if abs(diff) < tol:
            logger.debug("solve_ytm converged in %d iterations", k)
            return guess * PCT
        if abs(deriv) < YTM_MIN_DERIVATIVE:
            logger.warning("solve_ytm: flat derivative at y=%.6f, returning estimate", guess)
            return guess * PCT
        step = guess - diff / deriv
        if not math.isfinite(step):
            logger.warning("solve_ytm: non-finite step from y=%.6f, returning estimate", guess)
            return guess * PCT
        guess = step if step >= 0 else YTM_NEG_CLAMP

    logger.warning("solve_ytm: no convergence after %d iterations, y=%.6f", max_iter, guess)
    return guess * PCT


# ---------------------------
# Sensitivity / classification
# ---------------------------

def sensitivity_table(
    result: BondResult,
    deltas: Iterable[float] = DEFAULT_RATE_SHOCKS,
) -> pd.DataFrame:
    """
    Approximate repricing for parallel rate shocks (percentage points):

        %dP = -D_mod * d + 0.5 * C * d^2 / 100
        P'  = P * (1 + %dP / 100)

    This is a second-order Taylor estimate, not a re-discount; compare with
    price_yield_curve() for exact values.

    The convexity term carries the /100 because d is in points. The
    calculator this replaces used 0.5 * C * d^2, which overstates that
    term 100x and makes a +1pp shock raise the price.
    """
    rows = []
    for d in deltas:
        d = float(d)
        pct = -result.modified_duration * d + 0.5 * result.convexity * d * d / PCT
        rows.append(
            {
                "rate_change": d,
                "price_change_pct": pct,
                "new_price": result.price * (1.0 + pct / PCT),
            }
        )
    return pd.DataFrame(rows, columns=["rate_change", "price_change_pct", "new_price"])


def bond_type(inp: BondInput) -> str:
    if inp.market_rate > inp.coupon_rate:
        return "discount"
    if inp.market_rate < inp.coupon_rate:
        return "premium"
    return "par"


def price_yield_curve(inp: BondInput, rates: Iterable[float]) -> np.ndarray:
    """Exact prices across a grid of market rates (in %); NaN where undefined."""
    rates = np.asarray(list(rates), dtype=float)
    if not inp.is_valid():
        return np.full(rates.shape, np.nan)
    m = inp.payment_frequency
    cfs = np.asarray(_cash_flows(inp), dtype=float)
    t = np.arange(1, len(cfs) + 1, dtype=float)
    base = 1.0 + rates / PCT / m
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        prices = (cfs[None, :] / base[:, None] ** t[None, :]).sum(axis=1)
    return np.where(base > 0.0, prices, np.nan)


__all__ = [
    "BondInput",
    "BondResult",
    "price_bond",
    "solve_ytm",
    "sensitivity_table",
    "bond_type",
    "price_yield_curve",
]
