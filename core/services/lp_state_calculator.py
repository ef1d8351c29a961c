"""
Concentrated-liquidity (CLMM) position math.

Square-root-price relations for a position with liquidity L active on [pa, pb],
prices expressed as token1 priced in token2:

  in range:  x = L * (1/√p - 1/√pb),  y = L * (√p - √pa)
  below pa:  x = 0,                  y = L * (√pb - √pa)
  above pb:  x = L * (1/√pa - 1/√pb), y = 0

Value is x*p + y; delta (token1 exposure) is x.
"""

import logging
import math
from dataclasses import dataclass

from core.domain.exceptions import (
    DegenerateRangeError,
    InvalidRangeError,
    LiquidityEstimationError,
)

logger = logging.getLogger(__name__)

# Lower bound on the fallback estimator's denominator.
LIQUIDITY_DENOMINATOR_FLOOR = 0.001


@dataclass(frozen=True)
class LPState:
    token_amount1: float  # x
    token_amount2: float  # y
    portfolio_value_usd: float
    delta: float


ZERO_LP_STATE = LPState(0.0, 0.0, 0.0, 0.0)


def compute_lp_state(p: float, L: float, pa: float, pb: float) -> LPState:
    """LP state at price p for the position (L, pa, pb)."""
    if p <= 0:
        return ZERO_LP_STATE

    sqrt_pa = math.sqrt(pa)
    sqrt_pb = math.sqrt(pb)

    if p < pa:
        y_full = L * (sqrt_pb - sqrt_pa)
        return LPState(0.0, y_full, y_full, 0.0)

    if p > pb:
        x_full = L * (1.0 / sqrt_pa - 1.0 / sqrt_pb)
        return LPState(x_full, 0.0, x_full * p, x_full)

    sqrt_p = math.sqrt(p)
    x = L * (1.0 / sqrt_p - 1.0 / sqrt_pb)
    y = L * (sqrt_p - sqrt_pa)
    return LPState(x, y, x * p + y, x)


def compute_liquidity_from_notional(V: float, p0: float, pa: float, pb: float) -> float:
    """
    Liquidity L such that the in-range value at p0 equals V:

        V = L * [ (1/√p0 - 1/√pb) * p0 + (√p0 - √pa) ]

    :raises InvalidRangeError: p0/pa/pb not finite and positive, or pa >= pb.
    :raises DegenerateRangeError: the bracketed denominator is <= 0
        (p0 below the range).
    """
    if not all(math.isfinite(v) for v in (p0, pa, pb)):
        raise InvalidRangeError(f"Invalid inputs for L: p0={p0}, pa={pa}, pb={pb}")
    if p0 <= 0 or pa <= 0 or pb <= 0 or not (pa < pb):
        raise InvalidRangeError(f"Invalid inputs for L: p0={p0}, pa={pa}, pb={pb}")

    sqrt_pa = math.sqrt(pa)
    sqrt_pb = math.sqrt(pb)
    sqrt_p0 = math.sqrt(p0)
    denom = (1.0 / sqrt_p0 - 1.0 / sqrt_pb) * p0 + (sqrt_p0 - sqrt_pa)

    if denom <= 0:
        raise DegenerateRangeError(
            f"Invalid parameters for L: denom={denom} (p0={p0}, pa={pa}, pb={pb})"
        )
    return V / denom


def range_mid_price(pa: float, pb: float) -> float:
    return (pa + pb) / 2.0


def estimate_liquidity_fallback(V: float, reference_price: float, pa: float, pb: float) -> float:
    """
    Rough L when the exact inversion is not usable: the upper-leg term is taken
    at the range midpoint, the lower-leg term at the clamped reference price.
    """
    mid = range_mid_price(pa, pb)
    sqrt_pa = math.sqrt(pa)
    sqrt_pb = math.sqrt(pb)
    sqrt_p = math.sqrt(min(pb, max(pa, reference_price)))
    range_factor = (1.0 / sqrt_pa - 1.0 / sqrt_pb) * mid + (sqrt_p - sqrt_pa)
    return V / max(range_factor, LIQUIDITY_DENOMINATOR_FLOOR)


def liquidity_reference_price(reference_price: float, pa: float, pb: float) -> float:
    """Reference price when it lies inside [pa, pb], otherwise the range midpoint."""
    if pa <= reference_price <= pb:
        return reference_price
    return range_mid_price(pa, pb)


def estimate_liquidity(V: float, reference_price: float, pa: float, pb: float) -> float:
    """
    Liquidity implied by an LP worth V at `reference_price`.

    Never raises the range errors: those fall back to
    `estimate_liquidity_fallback`.
    """
    p0 = liquidity_reference_price(reference_price, pa, pb)
    try:
        return compute_liquidity_from_notional(V, p0, pa, pb)
    except LiquidityEstimationError as exc:
        logger.warning(
            "liquidity inversion failed, using fallback estimate. V=%s p=%s pa=%s pb=%s err=%s",
            V,
            reference_price,
            pa,
            pb,
            exc,
        )
        return estimate_liquidity_fallback(V, reference_price, pa, pb)
