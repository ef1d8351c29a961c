import logging
from typing import Optional

from core.domain.exceptions import StrategyNotFoundError

from ..repositories.snapshot_repository import SnapshotRepository
from ..repositories.strategy_repository import StrategyRepository


class DeleteStrategyUseCase:
    """
    Deletes a strategy together with all of its snapshots.
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

    async def execute(self, strategy_id: str) -> int:
        deleted = await self._strategy_repo.delete(strategy_id)
        if not deleted:
            raise StrategyNotFoundError(strategy_id)
        removed = await self._snapshot_repo.delete_by_strategy(strategy_id)
        self._logger.info("strategy deleted id=%s snapshots_removed=%d", strategy_id, removed)
        return removed
