# core/domain/entities/strategy_entity.py
from typing import Optional
from pydantic import ConfigDict, Field, model_validator
from .base_entity import MongoEntity

class StrategyEntity(MongoEntity):
    """
    One LP + two-perp hedge strategy.

    `pa`/`pb` bound the LP price range (token1 priced in token2).
    Thresholds are fractions: 0.02 means 2%.
    """
    name: str
    token1: str
    token2: str
    lp_protocol: Optional[str] = None
    perp_venue: Optional[str] = None

    starting_capital_usd: float = Field(..., gt=0.0)
    open_date: Optional[str] = None

    pa: float = Field(..., gt=0.0)
    pb: float = Field(..., gt=0.0)

    price_move_threshold_pct: float = Field(0.02, ge=0.0)
    delta_drift_threshold_pct: float = Field(0.10, ge=0.0)
    cross_position_rebalance_threshold_pct: float = Field(0.20, ge=0.0)

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_range(self) -> "StrategyEntity":
        if not (self.pa < self.pb):
            raise ValueError(f"pa must be < pb (pa={self.pa}, pb={self.pb})")
        return self
