import logging
from typing import Optional

from pydantic import BaseModel

from core.common.utils import safe_pct
from core.domain.entities.snapshot_entity import SnapshotEntity
from core.domain.entities.strategy_entity import StrategyEntity
from core.domain.enums.rebalance_enums import RangeStatus
from core.domain.exceptions import StrategyNotFoundError

from ..repositories.snapshot_repository import SnapshotRepository
from ..repositories.strategy_repository import StrategyRepository


class StrategyOverview(BaseModel):
    strategy: StrategyEntity
    snapshot_count: int
    latest_snapshot: Optional[SnapshotEntity] = None
    lp_allocation_pct: Optional[float] = None
    hedge_allocation_pct: Optional[float] = None
    range_status: Optional[RangeStatus] = None


def range_status(price: float, pa: float, pb: float) -> RangeStatus:
    if price < pa:
        return RangeStatus.BELOW_RANGE
    if price > pb:
        return RangeStatus.ABOVE_RANGE
    return RangeStatus.IN_RANGE


class StrategyOverviewUseCase:
    """
    Read model for the strategy dashboard: latest snapshot, current capital
    split between LP and hedge account, and where the LP price sits vs. range.
    """

    def __init__(
        self,
        strategy_repo: StrategyRepository,
        snapshot_repo: SnapshotRepository,
        logger: Optional[logging.Logger] = None,
    ):
        self._strategy_repo = strategy_repo
        self._snapshot_repo = snapshot_repo
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    async def execute(self, strategy_id: str) -> StrategyOverview:
        strategy = await self._strategy_repo.get_by_id(strategy_id)
        if strategy is None:
            raise StrategyNotFoundError(strategy_id)

        count = await self._snapshot_repo.count_by_strategy(strategy_id)
        latest = await self._snapshot_repo.get_latest(strategy_id)

        overview = StrategyOverview(strategy=strategy, snapshot_count=count, latest_snapshot=latest)
        if latest is None or latest.metrics is None:
            return overview

        m = latest.metrics
        overview.lp_allocation_pct = safe_pct(m.lp_value_usd, m.total_strategy_value_usd)
        overview.hedge_allocation_pct = safe_pct(
            latest.observation.account_equity_usd, m.total_strategy_value_usd
        )
        overview.range_status = range_status(m.lp_reference_price, strategy.pa, strategy.pb)
        return overview
