# core/domain/entities/snapshot_entity.py
from typing import Optional
from pydantic import BaseModel, ConfigDict
from ..enums.rebalance_enums import RebalanceReason
from .base_entity import MongoEntity


class HedgeLegObservation(BaseModel):
    """One perp hedge leg. `position_size` is signed: negative = short."""

    position_size: float
    entry_price: float
    leverage: float
    margin_usd: float
    funding_paid_usd: float = 0.0  # cumulative
    liquidation_price: Optional[float] = None

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class SnapshotObservation(BaseModel):
    """Raw, operator-supplied fields of a snapshot."""

    token1_price: float
    token2_price: float
    lp_price: Optional[float] = None  # token1 priced in token2; derived from USD prices when absent

    lp_token1_amount: float
    lp_token2_amount: float
    lp_token1_fees_earned: float = 0.0
    lp_token2_fees_earned: float = 0.0

    hedge1: HedgeLegObservation
    hedge2: HedgeLegObservation

    account_equity_usd: float

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class HedgeLegSuggestion(BaseModel):
    current: float
    target: float
    adjustment: float  # positive = buy/increase, negative = sell/decrease
    reason: RebalanceReason = RebalanceReason.NONE

    model_config = ConfigDict(use_enum_values=True)


class HedgeRebalanceSuggestion(BaseModel):
    token1: HedgeLegSuggestion
    token2: HedgeLegSuggestion


class CrossPositionRebalanceSuggestion(BaseModel):
    should_rebalance: bool = False
    reason: str = ""
    suggested_lp_allocation_pct: float = 0.0
    suggested_hedge_allocation_pct: float = 0.0
    capital_to_move: float = 0.0  # positive = move from LP to hedge margin
    current_liquidation_buffer_pct: float = 0.0
    target_liquidation_buffer_pct: float = 0.0
    buffer_deficit_pct: float = 0.0


class SnapshotMetrics(BaseModel):
    """Engine-derived block of a snapshot."""

    lp_value_usd: float
    lp_pnl_usd: float
    hedge1_pnl_usd: float
    hedge2_pnl_usd: float
    total_hedge_pnl_usd: float
    margin_used_usd: float
    funding_paid_usd: float
    lp_fees_usd: float

    total_strategy_value_usd: float
    total_strategy_pnl_usd: float
    total_strategy_pnl_pct: float

    # LP model state at the reference price
    lp_reference_price: float
    estimated_liquidity: float
    target_hedge1: float
    target_hedge2: float

    hedge_quality_score: Optional[float] = None
    liquidation_buffer_pct: Optional[float] = None

    hedge_rebalance_suggestion: Optional[HedgeRebalanceSuggestion] = None
    cross_position_rebalance_suggestion: Optional[CrossPositionRebalanceSuggestion] = None
    rebalance_reason: RebalanceReason = RebalanceReason.NONE

    model_config = ConfigDict(use_enum_values=True)


class SnapshotEntity(MongoEntity):
    strategy_id: str
    timestamp: int  # epoch ms
    timestamp_iso: Optional[str] = None

    observation: SnapshotObservation
    metrics: Optional[SnapshotMetrics] = None
