import logging
import uuid
from typing import Optional

from core.common.utils import ms_to_iso, now_ms_iso
from core.domain.entities.snapshot_entity import SnapshotEntity, SnapshotObservation
from core.domain.entities.strategy_entity import StrategyEntity
from core.domain.exceptions import SnapshotNotFoundError, StrategyNotFoundError
from core.services.hedge_target_calculator import format_position_size
from core.services.snapshot_pipeline import compute_snapshot_metrics

from ..repositories.snapshot_repository import SnapshotRepository
from ..repositories.strategy_repository import StrategyRepository


class RecordSnapshotUseCase:
    """
    Creates or edits a snapshot and (re)computes its derived block.

    Resolves the previous snapshot (nearest strictly-earlier timestamp of the
    same strategy) before handing (strategy, observation, previous) to the
    pure snapshot pipeline, then persists the result.
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

    async def _load_strategy(self, strategy_id: str) -> StrategyEntity:
        strategy = await self._strategy_repo.get_by_id(strategy_id)
        if strategy is None:
            raise StrategyNotFoundError(strategy_id)
        return strategy

    async def create(
        self,
        strategy_id: str,
        observation: SnapshotObservation,
        timestamp: Optional[int] = None,
    ) -> SnapshotEntity:
        strategy = await self._load_strategy(strategy_id)

        if timestamp is None:
            ts, ts_iso = now_ms_iso()
        else:
            ts, ts_iso = int(timestamp), ms_to_iso(int(timestamp))

        previous = await self._snapshot_repo.get_previous(strategy_id, ts)
        metrics = compute_snapshot_metrics(strategy, observation, previous)

        snapshot = SnapshotEntity(
            id=f"snap_{uuid.uuid4().hex}",
            strategy_id=strategy_id,
            timestamp=ts,
            timestamp_iso=ts_iso,
            observation=observation,
            metrics=metrics,
        )
        stored = await self._snapshot_repo.insert(snapshot)

        self._logger.info(
            "snapshot recorded strategy=%s id=%s ts=%s reason=%s hedge1=%s target1=%s hedge2=%s target2=%s",
            strategy_id,
            stored.id,
            ts_iso,
            metrics.rebalance_reason,
            format_position_size(observation.hedge1.position_size, strategy.token1),
            format_position_size(metrics.target_hedge1, strategy.token1),
            format_position_size(observation.hedge2.position_size, strategy.token2),
            format_position_size(metrics.target_hedge2, strategy.token2),
        )
        return stored

    async def edit(
        self,
        strategy_id: str,
        snapshot_id: str,
        observation: SnapshotObservation,
    ) -> SnapshotEntity:
        """
        Replace the observation of an existing snapshot and recompute it
        against the snapshot that precedes it, not the latest one.
        """
        strategy = await self._load_strategy(strategy_id)

        existing = await self._snapshot_repo.get_by_id(strategy_id, snapshot_id)
        if existing is None:
            raise SnapshotNotFoundError(snapshot_id)

        previous = await self._snapshot_repo.get_previous(strategy_id, existing.timestamp)
        metrics = compute_snapshot_metrics(strategy, observation, previous)

        updated = existing.model_copy(update={"observation": observation, "metrics": metrics})
        stored = await self._snapshot_repo.replace(updated)

        self._logger.info(
            "snapshot recomputed strategy=%s id=%s previous=%s reason=%s",
            strategy_id,
            snapshot_id,
            previous.id if previous else None,
            metrics.rebalance_reason,
        )
        return stored
