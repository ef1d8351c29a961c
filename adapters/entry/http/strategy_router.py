from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from config.settings import settings
from core.domain.entities.strategy_entity import StrategyEntity
from core.domain.exceptions import StrategyNotFoundError
from core.repositories.snapshot_repository import SnapshotRepository
from core.repositories.strategy_repository import StrategyRepository
from core.usecases.delete_strategy_use_case import DeleteStrategyUseCase
from core.usecases.strategy_overview_use_case import StrategyOverview, StrategyOverviewUseCase

from .deps import get_snapshot_repo, get_strategy_repo

router = APIRouter(prefix="/strategies", tags=["strategies"])

# =========================
# DTOs
# =========================

class StrategyCreateDTO(BaseModel):
    name: str = Field(..., examples=["eth_sol_clmm_v1"])
    token1: str = Field(..., examples=["ETH"])
    token2: str = Field(..., examples=["SOL"])
    lp_protocol: Optional[str] = Field(None, description="informational, e.g. 'orca'")
    perp_venue: Optional[str] = Field(None, description="informational, e.g. 'hyperliquid'")
    starting_capital_usd: float = Field(..., gt=0.0)
    open_date: Optional[str] = None

    pa: float = Field(..., gt=0.0, description="lower bound of the LP range (token1 in token2)")
    pb: float = Field(..., gt=0.0, description="upper bound of the LP range (token1 in token2)")

    price_move_threshold_pct: float = Field(
        default_factory=lambda: settings.DEFAULT_PRICE_MOVE_THRESHOLD_PCT, ge=0.0
    )
    delta_drift_threshold_pct: float = Field(
        default_factory=lambda: settings.DEFAULT_DELTA_DRIFT_THRESHOLD_PCT, ge=0.0
    )
    cross_position_rebalance_threshold_pct: float = Field(
        default_factory=lambda: settings.DEFAULT_CROSS_POSITION_THRESHOLD_PCT, ge=0.0
    )

    model_config = ConfigDict(allow_inf_nan=False)

    @field_validator("token1", "token2")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def _check_range(self) -> "StrategyCreateDTO":
        if not (self.pa < self.pb):
            raise ValueError("pa must be < pb")
        return self


class StrategyUpdateDTO(BaseModel):
    name: Optional[str] = None
    token1: Optional[str] = None
    token2: Optional[str] = None
    lp_protocol: Optional[str] = None
    perp_venue: Optional[str] = None
    starting_capital_usd: Optional[float] = Field(None, gt=0.0)
    open_date: Optional[str] = None
    pa: Optional[float] = Field(None, gt=0.0)
    pb: Optional[float] = Field(None, gt=0.0)
    price_move_threshold_pct: Optional[float] = Field(None, ge=0.0)
    delta_drift_threshold_pct: Optional[float] = Field(None, ge=0.0)
    cross_position_rebalance_threshold_pct: Optional[float] = Field(None, ge=0.0)

    model_config = ConfigDict(allow_inf_nan=False)

    @field_validator("token1", "token2")
    @classmethod
    def upper_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v is not None else v


# =========================
# Routes
# =========================

@router.get("", response_model=List[StrategyEntity])
async def list_strategies(strategy_repo: StrategyRepository = Depends(get_strategy_repo)):
    return await strategy_repo.list_all()


@router.post("", response_model=StrategyEntity)
async def create_strategy(
    dto: StrategyCreateDTO,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
):
    stored = await strategy_repo.create(StrategyEntity(**dto.model_dump()))
    if not stored:
        raise HTTPException(status_code=500, detail="Failed to create strategy")
    return stored


@router.get("/{strategy_id}", response_model=StrategyEntity)
async def get_strategy(strategy_id: str, strategy_repo: StrategyRepository = Depends(get_strategy_repo)):
    strategy = await strategy_repo.get_by_id(strategy_id)
    if strategy is None:
        raise HTTPException(status_code=404, detail="Strategy not found")
    return strategy


@router.patch("/{strategy_id}", response_model=StrategyEntity)
async def update_strategy(
    strategy_id: str,
    dto: StrategyUpdateDTO,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
):
    existing = await strategy_repo.get_by_id(strategy_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Strategy not found")

    changes: Dict[str, Any] = dto.model_dump(exclude_unset=True)
    # re-validate the merged config so pa < pb still holds
    try:
        StrategyEntity(**{**existing.model_dump(), **changes})
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    updated = await strategy_repo.update(strategy_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Strategy not found")
    return updated


@router.delete("/{strategy_id}")
async def delete_strategy(
    strategy_id: str,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
) -> Dict[str, Any]:
    uc = DeleteStrategyUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)
    try:
        removed = await uc.execute(strategy_id)
    except StrategyNotFoundError:
        raise HTTPException(status_code=404, detail="Strategy not found")
    return {"ok": True, "strategy_id": strategy_id, "snapshots_removed": removed}


@router.get("/{strategy_id}/overview", response_model=StrategyOverview)
async def strategy_overview(
    strategy_id: str,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
):
    uc = StrategyOverviewUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)
    try:
        return await uc.execute(strategy_id)
    except StrategyNotFoundError:
        raise HTTPException(status_code=404, detail="Strategy not found")
