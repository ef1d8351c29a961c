import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field, field_validator

from core.domain.entities.snapshot_entity import SnapshotEntity, SnapshotObservation
from core.domain.exceptions import SnapshotNotFoundError, StrategyNotFoundError
from core.repositories.snapshot_repository import SnapshotRepository
from core.repositories.strategy_repository import StrategyRepository
from core.usecases.record_snapshot_use_case import RecordSnapshotUseCase

from .deps import get_snapshot_repo, get_strategy_repo

router = APIRouter(prefix="/strategies/{strategy_id}/snapshots", tags=["snapshots"])


class SnapshotCreateDTO(SnapshotObservation):
    timestamp: Optional[int] = Field(
        None, description="Observation time in ms. Defaults to now; earlier values backfill history."
    )

    @field_validator("timestamp")
    @classmethod
    def _valid_ts(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        v = int(v)
        if v <= 0:
            raise ValueError("timestamp must be a positive integer (ms)")
        return v


def _build_use_case(strategy_repo: StrategyRepository, snapshot_repo: SnapshotRepository) -> RecordSnapshotUseCase:
    return RecordSnapshotUseCase(
        strategy_repo=strategy_repo,
        snapshot_repo=snapshot_repo,
        logger=logging.getLogger("RecordSnapshot"),
    )


@router.get("", response_model=List[SnapshotEntity])
async def list_snapshots(
    strategy_id: str,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
):
    if await strategy_repo.get_by_id(strategy_id) is None:
        raise HTTPException(status_code=404, detail="Strategy not found")
    return await snapshot_repo.list_by_strategy(strategy_id)


@router.post("", response_model=SnapshotEntity)
async def create_snapshot(
    strategy_id: str,
    dto: SnapshotCreateDTO,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
):
    uc = _build_use_case(strategy_repo, snapshot_repo)
    observation = SnapshotObservation(**dto.model_dump(exclude={"timestamp"}))
    try:
        return await uc.create(strategy_id, observation, timestamp=dto.timestamp)
    except StrategyNotFoundError:
        raise HTTPException(status_code=404, detail="Strategy not found")


@router.get("/{snapshot_id}", response_model=SnapshotEntity)
async def get_snapshot(
    strategy_id: str,
    snapshot_id: str,
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
):
    snapshot = await snapshot_repo.get_by_id(strategy_id, snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Snapshot not found")
    return snapshot


@router.patch("/{snapshot_id}", response_model=SnapshotEntity)
async def edit_snapshot(
    strategy_id: str,
    snapshot_id: str,
    dto: SnapshotObservation,
    strategy_repo: StrategyRepository = Depends(get_strategy_repo),
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
):
    uc = _build_use_case(strategy_repo, snapshot_repo)
    try:
        return await uc.edit(strategy_id, snapshot_id, dto)
    except StrategyNotFoundError:
        raise HTTPException(status_code=404, detail="Strategy not found")
    except SnapshotNotFoundError:
        raise HTTPException(status_code=404, detail="Snapshot not found")


@router.delete("/{snapshot_id}")
async def delete_snapshot(
    strategy_id: str,
    snapshot_id: str,
    snapshot_repo: SnapshotRepository = Depends(get_snapshot_repo),
) -> Dict[str, Any]:
    deleted = await snapshot_repo.delete(strategy_id, snapshot_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Snapshot not found")
    return {"ok": True, "snapshot_id": snapshot_id}
