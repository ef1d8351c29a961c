"""
Rebalance trigger evaluation.

Three independent signal families are checked against the previous snapshot:
price move (per token), delta drift (per hedge leg) and the cross-position
liquidation-buffer check. Exactly one RebalanceReason comes out; a fired
cross-position signal replaces whatever the other two produced.
"""

from dataclasses import dataclass
from typing import Optional

from core.domain.enums.rebalance_enums import RebalanceReason


@dataclass(frozen=True)
class TriggerEvaluation:
    price_move1: bool = False
    price_move2: bool = False
    delta_drift1: bool = False
    delta_drift2: bool = False
    cross_position: bool = False
    reason: RebalanceReason = RebalanceReason.NONE

    @property
    def price_move(self) -> bool:
        return self.price_move1 or self.price_move2

    @property
    def delta_drift(self) -> bool:
        return self.delta_drift1 or self.delta_drift2


NO_TRIGGERS = TriggerEvaluation()


def check_price_move_trigger(
    current_price: float,
    previous_price: Optional[float],
    threshold_pct: float,
) -> bool:
    if not previous_price or previous_price <= 0:
        return False
    move_pct = abs(current_price - previous_price) / previous_price
    return move_pct > threshold_pct


def check_delta_drift_trigger(adjustment: float, target_hedge: float, threshold_pct: float) -> bool:
    return abs(adjustment) > abs(target_hedge) * threshold_pct


def classify_rebalance_reason(
    price_move: bool,
    delta_drift: bool,
    cross_position: bool,
) -> RebalanceReason:
    if cross_position:
        return RebalanceReason.CROSS_POSITION
    if price_move and delta_drift:
        return RebalanceReason.BOTH
    if price_move:
        return RebalanceReason.PRICE_MOVE
    if delta_drift:
        return RebalanceReason.DELTA_DRIFT
    return RebalanceReason.NONE


def evaluate_triggers(
    *,
    has_previous: bool,
    token1_price: float,
    token2_price: float,
    previous_token1_price: Optional[float],
    previous_token2_price: Optional[float],
    price_move_threshold_pct: float,
    adjustment1: float,
    adjustment2: float,
    target_hedge1: float,
    target_hedge2: float,
    delta_drift_threshold_pct: float,
    cross_position_fired: bool,
) -> TriggerEvaluation:
    """
    Run every signal and classify. With no previous snapshot nothing fires.
    """
    # cross-position is gated too: a first snapshot with a thin liquidation
    # buffer still reports NONE and carries no cross-position suggestion
    if not has_previous:
        return NO_TRIGGERS

    pm1 = check_price_move_trigger(token1_price, previous_token1_price, price_move_threshold_pct)
    pm2 = check_price_move_trigger(token2_price, previous_token2_price, price_move_threshold_pct)
    dd1 = check_delta_drift_trigger(adjustment1, target_hedge1, delta_drift_threshold_pct)
    dd2 = check_delta_drift_trigger(adjustment2, target_hedge2, delta_drift_threshold_pct)

    return TriggerEvaluation(
        price_move1=pm1,
        price_move2=pm2,
        delta_drift1=dd1,
        delta_drift2=dd2,
        cross_position=cross_position_fired,
        reason=classify_rebalance_reason(pm1 or pm2, dd1 or dd2, cross_position_fired),
    )
