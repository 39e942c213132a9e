# app.py
import logging

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import streamlit as st

from bonds import (
    BondInput,
    price_bond,
    solve_ytm,
    sensitivity_table,
    bond_type,
    price_yield_curve,
)
from bs_core import (
    OptionInput,
    bs_prices,
    price_and_greeks,
    moneyness,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

BOND_TYPE_LABELS = {
    "discount": "Discount bond (market rate > coupon)",
    "premium": "Premium bond (market rate < coupon)",
    "par": "Par bond (market rate = coupon)",
}


# ---------------------------
# Page config
# ---------------------------
st.set_page_config(page_title="Bond & Option Calculators", page_icon="📊", layout="wide")

st.title("📊 Bond & Option Calculators")
st.caption(
    "Price a fixed-coupon bond or a European option and see how it reacts to rates, time and volatility."
)

tab_bond, tab_opt = st.tabs(["💰 Bond Calculator", "🎯 Option Greeks"])


# ===== TAB 1: Bonds =====
with tab_bond:
    st.subheader("Bond Pricer — Price, YTM, Duration & Convexity")

    st.markdown(
        """
**Quick guide:**
- To get **bond price**: enter coupon, maturity and market rate → we give you price + durations.
- To get **YTM**: enter a **target price** → we solve the yield with Newton–Raphson.
"""
    )

    mode_bond = st.radio("Mode", ["Inputs → Price", "Price → YTM"], horizontal=True)

    bc1, bc2, bc3 = st.columns(3)
    face = bc1.number_input("Face value", min_value=0.0, value=10000.0, step=100.0)
    coupon_pct = bc2.number_input(
        "Coupon rate (% per year)", value=3.00, step=0.10, format="%.2f"
    )
    freq = int(
        bc3.selectbox(
            "Payments per year", options=[1, 2, 4, 12], index=1
        )
    )

    bc4, bc5 = st.columns(2)
    T_years = bc4.number_input(
        "Years to maturity", min_value=0.0, value=5.0, step=0.5
    )
    market_pct = bc5.number_input(
        "Market rate (% per year)", value=4.00, step=0.10, format="%.2f"
    )

    target_price = None
    if mode_bond == "Price → YTM":
        target_price = st.number_input(
            "Target price", min_value=0.0, value=9500.0, step=10.0
        )

    bond = BondInput(face, coupon_pct, T_years, market_pct, freq)
    res = price_bond(bond)
    ytm_solved = solve_ytm(bond, target_price) if target_price is not None else None

    if res is None:
        st.warning("Enter a positive face value and maturity to see bond metrics.")
    else:
        c1, c2, c3, c4 = st.columns(4)
        if mode_bond == "Inputs → Price":
            c1.metric("Price", f"{res.price:,.2f}")
        elif ytm_solved is None:
            c1.metric("Solved YTM", "n/a")
            st.warning("Enter a positive target price to solve the YTM.")
        else:
            c1.metric("Solved YTM", f"{ytm_solved:.4f}%")
        c2.metric("Current yield", f"{res.current_yield:.3f}%")
        c3.metric("Macaulay Duration (yrs)", f"{res.macaulay_duration:,.4f}")
        c4.metric("Modified Duration", f"{res.modified_duration:,.4f}")

        c5, c6, c7, c8 = st.columns(4)
        c5.metric("Convexity", f"{res.convexity:,.4f}")
        c6.metric("Accrued interest", f"{res.accrued_interest:,.2f}")
        c7.metric("Clean price", f"{res.clean_price:,.2f}")
        c8.metric("Dirty price", f"{res.dirty_price:,.2f}")

        st.info(BOND_TYPE_LABELS[bond_type(bond)])

        st.markdown("### Rate sensitivity")
        st.caption(
            "Duration + convexity approximation (not a full re-discount). "
            "The exact column re-prices every cash flow at the shocked rate."
        )
        tbl = sensitivity_table(res)
        tbl["exact_price"] = price_yield_curve(bond, market_pct + tbl["rate_change"])
        st.dataframe(
            tbl.rename(
                columns={
                    "rate_change": "Rate change (pp)",
                    "price_change_pct": "Price change (%)",
                    "new_price": "Approx. price",
                    "exact_price": "Exact price",
                }
            ).style.format("{:,.4f}"),
            use_container_width=True,
        )

        y_grid = np.linspace(max(market_pct - 4.0, 0.0), market_pct + 4.0, 81)
        fig, ax = plt.subplots()
        ax.plot(y_grid, price_yield_curve(bond, y_grid), label="Exact price")
        approx_tbl = sensitivity_table(res, deltas=y_grid - market_pct)
        ax.plot(y_grid, approx_tbl["new_price"], linestyle="--", label="Duration + convexity")
        ax.scatter([market_pct], [res.price], marker="o")
        ax.set_xlabel("Market rate (%)")
        ax.set_ylabel("Price")
        ax.set_title("Price–yield curve")
        ax.legend()
        st.pyplot(fig, use_container_width=True)


# ===== TAB 2: Options =====
with tab_opt:
    st.subheader("European Options — Black–Scholes Greeks")

    with st.expander("⚙️ Option inputs", expanded=True):
        colA, colB, colC = st.columns(3)
        S0 = colA.number_input("Spot price (S₀)", min_value=0.0, value=100.0, step=1.0)
        K = colB.number_input("Strike price (K)", min_value=0.0, value=100.0, step=1.0)
        T = colC.number_input(
            "Time to maturity (years)", min_value=0.0, value=0.5, step=0.05,
            help="Example: 0.5 ≈ 6 months.",
        )
        colD, colE, colF = st.columns(3)
        vol = colD.number_input("Volatility (% per year)", min_value=0.0, value=20.0, step=0.5)
        r = colE.number_input("Risk-free rate (% per year)", value=3.0, step=0.25)
        q = colF.number_input("Dividend yield (% per year)", value=0.0, step=0.25)

    inp = OptionInput(S0, K, T, vol, r, q)
    G = price_and_greeks(inp)

    if G is None:
        st.warning("Spot, strike, time and volatility must all be positive.")
    else:
        tags = moneyness(S0, K)
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Call price", f"{G.call_price:,.4f}")
        m2.metric("Put price", f"{G.put_price:,.4f}")
        m3.metric("Call", tags["call"])
        m4.metric("Put", tags["put"])

        with st.expander("d₁ / d₂", expanded=False):
            dc1, dc2 = st.columns(2)
            dc1.metric("d₁", f"{G.d1:.4f}")
            dc2.metric("d₂", f"{G.d2:.4f}")

        st.markdown("### Sensitivities (Greeks)")
        greek_df = pd.DataFrame(
            {
                "Greek": ["Delta", "Gamma", "Theta/day", "Vega (per 1% σ)", "Rho (per 1% r)"],
                "Call": [G.call_delta, G.gamma, G.call_theta, G.vega, G.call_rho],
                "Put": [G.put_delta, G.gamma, G.put_theta, G.vega, G.put_rho],
            }
        )
        st.dataframe(
            greek_df.style.format({"Call": "{:.6f}", "Put": "{:.6f}"}),
            use_container_width=True,
        )

        S_grid = np.linspace(max(0.01, S0 * 0.5), S0 * 1.5, 200)
        call_vals, put_vals = [], []
        for s_ in S_grid:
            c_, p_, *_ = bs_prices(OptionInput(float(s_), K, T, vol, r, q))
            call_vals.append(c_)
            put_vals.append(p_)

        fig2, ax2 = plt.subplots()
        ax2.plot(S_grid, call_vals, label="Call value (today)")
        ax2.plot(S_grid, put_vals, label="Put value (today)")
        ax2.axvline(S0, linestyle="--", linewidth=1, label="Current spot")
        ax2.set_xlabel("Spot (S₀)")
        ax2.set_ylabel("Option value today")
        ax2.set_title("Black–Scholes value vs spot")
        ax2.legend()
        st.pyplot(fig2, use_container_width=True)
