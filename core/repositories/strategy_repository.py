from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.domain.entities.strategy_entity import StrategyEntity


class StrategyRepository(ABC):
    """
    Repository interface for LP hedge strategies.
    """

    @abstractmethod
    async def ensure_indexes(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def create(self, strategy: StrategyEntity) -> StrategyEntity:
        """Persist a new strategy; assigns id and created_at."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, strategy_id: str) -> Optional[StrategyEntity]:
        raise NotImplementedError

    @abstractmethod
    async def list_all(self) -> List[StrategyEntity]:
        """All strategies, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, strategy_id: str, changes: Dict[str, Any]) -> Optional[StrategyEntity]:
        """
        Apply a partial update. Returns the stored strategy, or None if missing.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, strategy_id: str) -> bool:
        raise NotImplementedError
