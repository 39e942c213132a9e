"""
Unit tests for bonds.py
Covers:
- Par / discount / premium pricing
- Duration and convexity relationships
- Newton–Raphson YTM inversion, clamps and caps
- Sensitivity table and price–yield curve
- Rejection of invalid bonds
"""

import logging

import numpy as np
import pytest

from bonds import (
    BondInput,
    bond_type,
    price_bond,
    price_yield_curve,
    sensitivity_table,
    solve_ytm,
)


def test_annual_par_bond():
    """At par: coupon rate = market rate."""
    res = price_bond(BondInput(100, 6, 1, 6, 1))
    assert abs(res.price - 100.0) < 1e-6


@pytest.mark.parametrize("freq", [1, 2, 4, 12])
def test_par_bond_any_frequency(freq):
    res = price_bond(BondInput(1000, 4.5, 7, 4.5, freq))
    assert res.price == pytest.approx(1000.0, rel=1e-6)
    assert bond_type(BondInput(1000, 4.5, 7, 4.5, freq)) == "par"


def test_discount_scenario_price_and_class():
    inp = BondInput(10000, 3, 5, 4, 2)
    res = price_bond(inp)
    assert res.price == pytest.approx(9550.87, abs=0.01)
    assert bond_type(inp) == "discount"


def test_premium_bond_price_above_par():
    inp = BondInput(100, 8, 5, 6, 2)
    assert price_bond(inp).price > 100
    assert bond_type(inp) == "premium"


def test_price_decreases_as_market_rate_rises():
    prices = [price_bond(BondInput(1000, 5, 10, r, 2)).price for r in (2, 3, 4, 5, 6, 7)]
    assert all(a > b for a, b in zip(prices, prices[1:]))


def test_duration_ordering_and_zero_coupon():
    res = price_bond(BondInput(1000, 5, 10, 6, 2))
    assert res.modified_duration < res.macaulay_duration < 10.0

    # Zero coupon: Macaulay duration equals maturity
    zc = price_bond(BondInput(1000, 0, 10, 6, 2))
    assert zc.macaulay_duration == pytest.approx(10.0, rel=1e-12)


def test_current_yield_and_clean_dirty():
    res = price_bond(BondInput(10000, 3, 5, 4, 2))
    assert res.current_yield == pytest.approx(300.0 / res.price * 100.0)
    assert res.accrued_interest == 0.0
    assert res.clean_price == res.price
    assert res.dirty_price == res.clean_price + res.accrued_interest


def test_convexity_matches_finite_difference():
    inp = BondInput(1000, 5, 10, 6, 2)
    res = price_bond(inp)
    h = 0.01  # in %
    up, mid, dn = price_yield_curve(inp, [6 + h, 6, 6 - h])
    # Convexity is d2P/dy2 / P
    numeric = (up + dn - 2 * mid) / (mid * (h / 100.0) ** 2)
    assert res.convexity > 0
    assert res.convexity == pytest.approx(numeric, rel=1e-3)


def test_ytm_defaults_to_market_rate():
    res = price_bond(BondInput(10000, 3, 5, 4, 2))
    assert res.ytm == 4


@pytest.mark.parametrize("rate", [0.5, 3.0, 4.0, 7.25, 12.0])
def test_ytm_round_trip(rate):
    inp = BondInput(10000, 3, 5, rate, 2)
    price = price_bond(inp).price
    # Start the solver away from the answer
    start = BondInput(10000, 3, 5, 6.0, 2)
    assert solve_ytm(start, price) == pytest.approx(rate, abs=0.01)


def test_price_bond_with_target_price_solves_ytm():
    inp = BondInput(10000, 3, 5, 4, 2)
    res = price_bond(inp, target_price=9500)
    assert res.ytm > 4.0
    assert price_bond(BondInput(10000, 3, 5, res.ytm, 2)).price == pytest.approx(9500, abs=1e-3)


def test_ytm_negative_guess_is_clamped():
    # Target above the undiscounted cash flows needs a negative yield,
    # which the solver clamps; it must stay finite and non-negative.
    inp = BondInput(100, 2, 2, 3, 1)
    y = solve_ytm(inp, 110.0)
    assert y is not None
    assert np.isfinite(y)
    assert y >= 0.0


def test_ytm_iteration_cap_returns_estimate(caplog):
    inp = BondInput(100, 5, 10, 20, 2)
    target = price_bond(BondInput(100, 5, 10, 5, 2)).price
    with caplog.at_level(logging.WARNING, logger="bonds"):
        y = solve_ytm(inp, target, max_iter=1)
    assert y is not None and np.isfinite(y)
    assert "no convergence" in caplog.text


def test_ytm_rejects_bad_target():
    assert solve_ytm(BondInput(100, 5, 10, 5, 2), 0) is None


def test_sensitivity_table_default_shocks():
    res = price_bond(BondInput(10000, 3, 5, 4, 2))
    tbl = sensitivity_table(res)
    assert list(tbl["rate_change"]) == [-1.0, -0.5, 0.0, 0.5, 1.0]
    assert tbl.loc[tbl["rate_change"] == 0.0, "new_price"].iloc[0] == pytest.approx(res.price)
    # Prices fall as rates rise
    assert tbl["new_price"].is_monotonic_decreasing
    expected = -res.modified_duration * 1.0 + 0.5 * res.convexity / 100.0
    assert tbl["price_change_pct"].iloc[-1] == pytest.approx(expected)


def test_sensitivity_table_close_to_exact_repricing():
    inp = BondInput(10000, 3, 5, 4, 2)
    res = price_bond(inp)
    tbl = sensitivity_table(res, deltas=[-1, 1])
    exact = price_yield_curve(inp, [3, 5])
    assert np.allclose(tbl["new_price"].to_numpy(), exact, rtol=1e-3)


def test_price_yield_curve_matches_price_bond():
    inp = BondInput(1000, 5, 10, 6, 2)
    grid = np.linspace(1, 10, 10)
    curve = price_yield_curve(inp, grid)
    ref = [price_bond(BondInput(1000, 5, 10, r, 2)).price for r in grid]
    assert np.allclose(curve, ref, rtol=1e-12)


@pytest.mark.parametrize(
    "inp",
    [
        BondInput(0, 3, 5, 4, 2),
        BondInput(-100, 3, 5, 4, 2),
        BondInput(100, 3, 0, 4, 2),
        BondInput(100, 3, 5, 4, 0),
    ],
)
def test_invalid_bonds_give_none(inp):
    assert price_bond(inp) is None
    assert solve_ytm(inp, 95.0) is None
    assert np.isnan(price_yield_curve(inp, [4.0])).all()


def test_ytm_flat_derivative_stops_solver(caplog):
    # An absurd starting yield leaves dP/dy numerically flat
    inp = BondInput(100, 5, 10, 1e9, 2)
    with caplog.at_level(logging.WARNING, logger="bonds"):
        y = solve_ytm(inp, 95.0)
    assert y == pytest.approx(1e9)
    assert "flat derivative" in caplog.text


def test_extreme_market_rate_prices_without_overflow():
    # (1 + i)^t would overflow a float here; discounts underflow to 0 instead
    res = price_bond(BondInput(100, 5, 100, 1e6, 1))
    assert res is not None
    assert np.isfinite(res.price) and res.price > 0.0
    assert np.isfinite(res.macaulay_duration)
    assert np.isfinite(res.convexity)
    assert np.isfinite(price_yield_curve(BondInput(100, 5, 100, 1e6, 1), [1e6])).all()


def test_ytm_tiny_target_returns_finite_estimate(caplog):
    inp = BondInput(100, 5, 30, 5, 12)
    with caplog.at_level(logging.WARNING, logger="bonds"):
        y = solve_ytm(inp, 1e-300)
    assert y is not None
    assert np.isfinite(y) and y > 5.0


def test_target_price_without_solution_keeps_market_rate():
    inp = BondInput(10000, 3, 5, 4, 2)
    assert solve_ytm(inp, 0.0) is None
    assert price_bond(inp, target_price=0.0).ytm == 4


def test_non_positive_present_value_gives_none():
    # Coupons of -50% a year outweigh the discounted principal
    assert price_bond(BondInput(100, -50, 5, 4, 1)) is None
