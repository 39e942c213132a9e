"""
normal_dist.py
Standard normal PDF/CDF shared by the option engine.

The CDF uses the Abramowitz–Stegun 7.1.26 rational approximation of erf
(absolute error below 7.5e-8), so no SciPy is required.
"""

from __future__ import annotations

import math

SQRT2 = math.sqrt(2.0)
SQRT2PI = math.sqrt(2.0 * math.pi)

# Abramowitz–Stegun 7.1.26
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


def norm_pdf(x: float) -> float:
    """Standard normal PDF."""
    return math.exp(-0.5 * x * x) / SQRT2PI


def norm_cdf(x: float) -> float:
    """
    Standard normal CDF.

    The polynomial is evaluated on |x| only and the sign is applied last,
    so norm_cdf(-x) == 1 - norm_cdf(x).
    """
    sign = -1.0 if x < 0 else 1.0
    z = abs(x) / SQRT2
    t = 1.0 / (1.0 + _P * z)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    erf_z = 1.0 - poly * math.exp(-z * z)
    return 0.5 * (1.0 + sign * erf_z)


__all__ = ["norm_pdf", "norm_cdf"]
