"""
Derives the computed block of a snapshot from (strategy, observation, previous).

Pure and synchronous: storage lookups (previous snapshot, strategy) are done
by the caller, see `core.usecases.record_snapshot_use_case`.
"""

import logging
from typing import Optional

from core.domain.entities.snapshot_entity import (
    HedgeLegSuggestion,
    HedgeRebalanceSuggestion,
    SnapshotEntity,
    SnapshotMetrics,
    SnapshotObservation,
)
from core.domain.entities.strategy_entity import StrategyEntity
from core.domain.enums.rebalance_enums import RebalanceReason
from core.services.hedge_target_calculator import (
    calculate_adjustment,
    calculate_target_hedge_positions,
)
from core.services.lp_state_calculator import compute_lp_state, estimate_liquidity
from core.services.quality_risk_metrics import (
    calculate_cross_position_rebalance,
    calculate_hedge_quality_score,
    calculate_liquidation_buffer,
)
from core.services.trigger_engine import evaluate_triggers

logger = logging.getLogger(__name__)

# Share of starting capital assumed to sit in the LP leg at open (rest is hedge margin).
INITIAL_LP_ALLOCATION = 0.5

# Adjustments at or below this size are reported as no-ops.
ADJUSTMENT_TOLERANCE = 0.001


def calculate_lp_value_usd(
    token1_amount: float,
    token2_amount: float,
    token1_price: float,
    token2_price: float,
) -> float:
    return token1_amount * token1_price + token2_amount * token2_price


def calculate_hedge_pnl(position_size: float, entry_price: float, current_price: float) -> float:
    return position_size * (current_price - entry_price)


def resolve_lp_price(obs: SnapshotObservation) -> float:
    """LP price (token1 in token2): the supplied one, else the USD price ratio."""
    if obs.lp_price:
        return obs.lp_price
    if obs.token2_price <= 0:
        return 0.0
    return obs.token1_price / obs.token2_price


def _leg_suggestion(current: float, target: float, adjustment: float) -> HedgeLegSuggestion:
    reason = RebalanceReason.DELTA_DRIFT if abs(adjustment) > ADJUSTMENT_TOLERANCE else RebalanceReason.NONE
    return HedgeLegSuggestion(current=current, target=target, adjustment=adjustment, reason=reason)


def compute_snapshot_metrics(
    strategy: StrategyEntity,
    obs: SnapshotObservation,
    previous: Optional[SnapshotEntity] = None,
) -> SnapshotMetrics:
    """
    Build the derived record for one observation.

    `previous` must be the snapshot immediately preceding this one in time for
    the same strategy (or None for the first snapshot).
    """
    prev_metrics = previous.metrics if previous is not None else None

    # 1-2) LP value and PnL
    lp_value_usd = calculate_lp_value_usd(
        obs.lp_token1_amount,
        obs.lp_token2_amount,
        obs.token1_price,
        obs.token2_price,
    )
    if prev_metrics is not None:
        lp_pnl_usd = lp_value_usd - prev_metrics.lp_value_usd
    else:
        lp_pnl_usd = lp_value_usd - strategy.starting_capital_usd * INITIAL_LP_ALLOCATION

    # 3) hedge legs
    hedge1_pnl_usd = calculate_hedge_pnl(obs.hedge1.position_size, obs.hedge1.entry_price, obs.token1_price)
    hedge2_pnl_usd = calculate_hedge_pnl(obs.hedge2.position_size, obs.hedge2.entry_price, obs.token2_price)
    total_hedge_pnl_usd = hedge1_pnl_usd + hedge2_pnl_usd

    # 4) sums
    margin_used_usd = obs.hedge1.margin_usd + obs.hedge2.margin_usd
    funding_paid_usd = obs.hedge1.funding_paid_usd + obs.hedge2.funding_paid_usd
    lp_fees_usd = (
        obs.lp_token1_fees_earned * obs.token1_price
        + obs.lp_token2_fees_earned * obs.token2_price
    )

    # 5) strategy totals
    total_strategy_value_usd = lp_value_usd + obs.account_equity_usd
    total_strategy_pnl_usd = lp_pnl_usd + total_hedge_pnl_usd - funding_paid_usd
    total_strategy_pnl_pct = total_strategy_pnl_usd / strategy.starting_capital_usd * 100.0

    # 6-8) LP model at the reference price and hedge targets
    lp_price = resolve_lp_price(obs)
    liquidity = estimate_liquidity(lp_value_usd, lp_price, strategy.pa, strategy.pb)
    lp_state = compute_lp_state(lp_price, liquidity, strategy.pa, strategy.pb)

    targets = calculate_target_hedge_positions(lp_state)
    adjustment1 = calculate_adjustment(targets.target_hedge1, obs.hedge1.position_size)
    adjustment2 = calculate_adjustment(targets.target_hedge2, obs.hedge2.position_size)

    # 9) quality, risk and triggers
    hedge_quality_score = calculate_hedge_quality_score(
        lp_pnl_usd,
        hedge1_pnl_usd,
        hedge2_pnl_usd,
        funding_paid_usd,
    )
    liquidation_buffer_pct = calculate_liquidation_buffer(
        obs.token1_price,
        obs.token2_price,
        obs.hedge1.liquidation_price,
        obs.hedge2.liquidation_price,
        obs.hedge1.position_size,
        obs.hedge2.position_size,
    )
    cross = calculate_cross_position_rebalance(
        lp_value_usd,
        obs.account_equity_usd,
        strategy.starting_capital_usd,
        liquidation_buffer_pct,
        strategy.cross_position_rebalance_threshold_pct,
    )

    has_previous = previous is not None
    triggers = evaluate_triggers(
        has_previous=has_previous,
        token1_price=obs.token1_price,
        token2_price=obs.token2_price,
        previous_token1_price=previous.observation.token1_price if has_previous else None,
        previous_token2_price=previous.observation.token2_price if has_previous else None,
        price_move_threshold_pct=strategy.price_move_threshold_pct,
        adjustment1=adjustment1,
        adjustment2=adjustment2,
        target_hedge1=targets.target_hedge1,
        target_hedge2=targets.target_hedge2,
        delta_drift_threshold_pct=strategy.delta_drift_threshold_pct,
        cross_position_fired=cross.should_rebalance,
    )

    # 10) suggestions
    hedge_suggestion = HedgeRebalanceSuggestion(
        token1=_leg_suggestion(obs.hedge1.position_size, targets.target_hedge1, adjustment1),
        token2=_leg_suggestion(obs.hedge2.position_size, targets.target_hedge2, adjustment2),
    )

    if triggers.reason != RebalanceReason.NONE:
        logger.info(
            "rebalance advised strategy=%s reason=%s adj1=%.6f adj2=%.6f buffer=%s",
            strategy.id,
            triggers.reason.value,
            adjustment1,
            adjustment2,
            liquidation_buffer_pct,
        )

    return SnapshotMetrics(
        lp_value_usd=lp_value_usd,
        lp_pnl_usd=lp_pnl_usd,
        hedge1_pnl_usd=hedge1_pnl_usd,
        hedge2_pnl_usd=hedge2_pnl_usd,
        total_hedge_pnl_usd=total_hedge_pnl_usd,
        margin_used_usd=margin_used_usd,
        funding_paid_usd=funding_paid_usd,
        lp_fees_usd=lp_fees_usd,
        total_strategy_value_usd=total_strategy_value_usd,
        total_strategy_pnl_usd=total_strategy_pnl_usd,
        total_strategy_pnl_pct=total_strategy_pnl_pct,
        lp_reference_price=lp_price,
        estimated_liquidity=liquidity,
        target_hedge1=targets.target_hedge1,
        target_hedge2=targets.target_hedge2,
        hedge_quality_score=hedge_quality_score,
        liquidation_buffer_pct=liquidation_buffer_pct,
        hedge_rebalance_suggestion=hedge_suggestion,
        # None on the first snapshot even when the buffer is below threshold
        cross_position_rebalance_suggestion=cross if triggers.cross_position else None,
        rebalance_reason=triggers.reason,
    )
