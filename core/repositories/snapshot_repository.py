from abc import ABC, abstractmethod
from typing import List, Optional

from core.domain.entities.snapshot_entity import SnapshotEntity


class SnapshotRepository(ABC):
    """
    Repository contract for strategy snapshots.

    Snapshots are ordered by `timestamp` (epoch ms) within a strategy.
    Implementations are the only writers of a snapshot document; concurrent
    edits of the same record must be serialized here, not in the engine.
    """

    @abstractmethod
    async def ensure_indexes(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def insert(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, strategy_id: str, snapshot_id: str) -> Optional[SnapshotEntity]:
        raise NotImplementedError

    @abstractmethod
    async def list_by_strategy(self, strategy_id: str) -> List[SnapshotEntity]:
        """All snapshots of a strategy, ascending by timestamp."""
        raise NotImplementedError

    @abstractmethod
    async def get_previous(self, strategy_id: str, before_ts: int) -> Optional[SnapshotEntity]:
        """
        Nearest snapshot with timestamp strictly earlier than `before_ts`.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_latest(self, strategy_id: str) -> Optional[SnapshotEntity]:
        raise NotImplementedError

    @abstractmethod
    async def count_by_strategy(self, strategy_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def replace(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        """Overwrite observation + metrics of an existing snapshot."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, strategy_id: str, snapshot_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def delete_by_strategy(self, strategy_id: str) -> int:
        """Delete every snapshot of a strategy; returns how many were removed."""
        raise NotImplementedError
