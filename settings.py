"""
settings.py
Central numeric constants for the bond and option engines.

Change values here rather than inside the engines.
"""

from __future__ import annotations

# Inputs arrive as percentages (3 means 3%)
PCT = 100.0

# Newton–Raphson YTM solver
YTM_PRICE_TOL = 1e-4       # stop when |price(guess) - target| < tol
YTM_MAX_ITER = 100
YTM_NEG_CLAMP = 0.001      # a negative guess is reset to this (decimal)
YTM_MIN_DERIVATIVE = 1e-12 # |dP/dy| below this stops the solver

# Rate shocks (percentage points) for the sensitivity table
DEFAULT_RATE_SHOCKS = (-1.0, -0.5, 0.0, 0.5, 1.0)

# Theta is reported per calendar day
DAYS_PER_YEAR = 365.0
