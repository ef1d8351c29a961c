"""
Hedge quality and liquidation-risk metrics.
"""

from typing import List, Optional

from core.common.utils import safe_pct
from core.domain.entities.snapshot_entity import CrossPositionRebalanceSuggestion

# LP moves smaller than this (USD) are too small to judge the hedge on.
HEDGE_QUALITY_EPSILON_USD = 1.0

# Cross-position rebalance aims this many points above the threshold buffer.
CROSS_POSITION_TARGET_MARGIN_PCT = 10.0

# Never suggest pulling more than this fraction of the LP leg.
MAX_LP_DRAWDOWN_FRACTION = 0.3


def calculate_hedge_quality_score(
    lp_pnl_usd: float,
    hedge1_pnl_usd: float,
    hedge2_pnl_usd: float,
    funding_paid_usd: float = 0.0,
    epsilon: float = HEDGE_QUALITY_EPSILON_USD,
) -> float:
    """
    1.0 when the hedges fully offset the LP move, 0.0 when they offset nothing.

    score = 1 - min(1, |lp + h1 + h2 - funding| / |lp|), or 1.0 when |lp| < epsilon.
    """
    net_pnl_usd = lp_pnl_usd + hedge1_pnl_usd + hedge2_pnl_usd - funding_paid_usd
    abs_lp_move_usd = abs(lp_pnl_usd)

    if abs_lp_move_usd < epsilon:
        return 1.0

    ratio = abs(net_pnl_usd) / abs_lp_move_usd
    return 1.0 - min(1.0, ratio)


def _leg_buffer_pct(price: float, liquidation_price: float, position_size: float) -> float:
    if position_size > 0:
        # long: liquidated on the way down
        return (price - liquidation_price) / price * 100.0
    return (liquidation_price - price) / price * 100.0


def calculate_liquidation_buffer(
    token1_price: float,
    token2_price: float,
    hedge1_liquidation_price: Optional[float],
    hedge2_liquidation_price: Optional[float],
    hedge1_position_size: float,
    hedge2_position_size: float,
) -> Optional[float]:
    """
    Distance to liquidation in percent of price for the most at-risk leg.

    Legs without a positive liquidation price or a positive mark price are
    skipped; None when no leg is left.
    """
    buffers: List[float] = []

    if token1_price > 0 and hedge1_liquidation_price and hedge1_liquidation_price > 0:
        buffers.append(_leg_buffer_pct(token1_price, hedge1_liquidation_price, hedge1_position_size))

    if token2_price > 0 and hedge2_liquidation_price and hedge2_liquidation_price > 0:
        buffers.append(_leg_buffer_pct(token2_price, hedge2_liquidation_price, hedge2_position_size))

    if not buffers:
        return None
    return min(buffers)


def calculate_cross_position_rebalance(
    lp_value_usd: float,
    account_equity_usd: float,
    starting_capital_usd: float,
    liquidation_buffer_pct: Optional[float],
    threshold_pct: float,
    target_margin_pct: float = CROSS_POSITION_TARGET_MARGIN_PCT,
) -> CrossPositionRebalanceSuggestion:
    """
    Suggest moving capital from the LP leg to hedge margin when the
    liquidation buffer drops under `threshold_pct * 100`.

    The amount aims for a buffer of threshold + `target_margin_pct` points and
    is capped at `MAX_LP_DRAWDOWN_FRACTION` of the LP value. Advisory only.
    `starting_capital_usd` is accepted for call-site symmetry with the other
    snapshot metrics and does not affect the sizing.
    """
    total_value = lp_value_usd + account_equity_usd
    current_lp_pct = safe_pct(lp_value_usd, total_value)
    current_hedge_pct = safe_pct(account_equity_usd, total_value)

    threshold_buffer_pct = threshold_pct * 100.0
    if liquidation_buffer_pct is None or liquidation_buffer_pct >= threshold_buffer_pct:
        return CrossPositionRebalanceSuggestion(
            should_rebalance=False,
            reason="",
            suggested_lp_allocation_pct=current_lp_pct,
            suggested_hedge_allocation_pct=current_hedge_pct,
            capital_to_move=0.0,
            current_liquidation_buffer_pct=liquidation_buffer_pct or 0.0,
        )

    target_buffer_pct = threshold_buffer_pct + target_margin_pct
    buffer_deficit_pct = target_buffer_pct - liquidation_buffer_pct

    estimated_capital_needed = account_equity_usd * (buffer_deficit_pct / 100.0)
    capital_to_move = min(estimated_capital_needed, lp_value_usd * MAX_LP_DRAWDOWN_FRACTION)

    return CrossPositionRebalanceSuggestion(
        should_rebalance=True,
        reason=(
            f"Liquidation buffer low ({liquidation_buffer_pct:.2f}%). "
            "Move capital from LP to hedge to increase margin."
        ),
        suggested_lp_allocation_pct=safe_pct(lp_value_usd - capital_to_move, total_value),
        suggested_hedge_allocation_pct=safe_pct(account_equity_usd + capital_to_move, total_value),
        capital_to_move=capital_to_move,
        current_liquidation_buffer_pct=liquidation_buffer_pct,
        target_liquidation_buffer_pct=target_buffer_pct,
        buffer_deficit_pct=buffer_deficit_pct,
    )
