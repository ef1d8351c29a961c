"""Shared fixtures: in-memory repositories and sample strategy/observations."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, List, Optional

import pytest

from core.domain.entities.snapshot_entity import (
    HedgeLegObservation,
    SnapshotEntity,
    SnapshotObservation,
)
from core.domain.entities.strategy_entity import StrategyEntity
from core.repositories.snapshot_repository import SnapshotRepository
from core.repositories.strategy_repository import StrategyRepository


class InMemoryStrategyRepository(StrategyRepository):
    def __init__(self) -> None:
        self.items: Dict[str, StrategyEntity] = {}
        self._seq = 0

    async def ensure_indexes(self) -> None:
        return None

    async def create(self, strategy: StrategyEntity) -> StrategyEntity:
        self._seq += 1
        stored = strategy.model_copy(
            update={"id": strategy.id or f"strategy_{uuid.uuid4().hex}", "created_at": self._seq}
        )
        self.items[stored.id] = stored
        return stored

    async def get_by_id(self, strategy_id: str) -> Optional[StrategyEntity]:
        return self.items.get(strategy_id)

    async def list_all(self) -> List[StrategyEntity]:
        return sorted(self.items.values(), key=lambda s: s.created_at or 0, reverse=True)

    async def update(self, strategy_id: str, changes: Dict[str, Any]) -> Optional[StrategyEntity]:
        existing = self.items.get(strategy_id)
        if existing is None:
            return None
        updated = StrategyEntity(**{**existing.model_dump(), **changes})
        self.items[strategy_id] = updated
        return updated

    async def delete(self, strategy_id: str) -> bool:
        return self.items.pop(strategy_id, None) is not None


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self) -> None:
        self.items: Dict[str, SnapshotEntity] = {}

    async def ensure_indexes(self) -> None:
        return None

    def _of(self, strategy_id: str) -> List[SnapshotEntity]:
        return sorted(
            (s for s in self.items.values() if s.strategy_id == strategy_id),
            key=lambda s: s.timestamp,
        )

    async def insert(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        self.items[snapshot.id] = copy.deepcopy(snapshot)
        return snapshot

    async def get_by_id(self, strategy_id: str, snapshot_id: str) -> Optional[SnapshotEntity]:
        snap = self.items.get(snapshot_id)
        if snap is None or snap.strategy_id != strategy_id:
            return None
        return snap

    async def list_by_strategy(self, strategy_id: str) -> List[SnapshotEntity]:
        return self._of(strategy_id)

    async def get_previous(self, strategy_id: str, before_ts: int) -> Optional[SnapshotEntity]:
        earlier = [s for s in self._of(strategy_id) if s.timestamp < before_ts]
        return earlier[-1] if earlier else None

    async def get_latest(self, strategy_id: str) -> Optional[SnapshotEntity]:
        snaps = self._of(strategy_id)
        return snaps[-1] if snaps else None

    async def count_by_strategy(self, strategy_id: str) -> int:
        return len(self._of(strategy_id))

    async def replace(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        self.items[snapshot.id] = copy.deepcopy(snapshot)
        return snapshot

    async def delete(self, strategy_id: str, snapshot_id: str) -> bool:
        snap = self.items.get(snapshot_id)
        if snap is None or snap.strategy_id != strategy_id:
            return False
        del self.items[snapshot_id]
        return True

    async def delete_by_strategy(self, strategy_id: str) -> int:
        ids = [s.id for s in self._of(strategy_id)]
        for sid in ids:
            del self.items[sid]
        return len(ids)


def make_observation(**overrides: Any) -> SnapshotObservation:
    """ETH/SOL-style book: LP price 2000/100 = 20, inside a [15, 25] range."""
    hedge1 = dict(position_size=-1.0, entry_price=2000.0, leverage=3.0, margin_usd=700.0)
    hedge2 = dict(position_size=-25.0, entry_price=100.0, leverage=3.0, margin_usd=800.0)
    hedge1.update(overrides.pop("hedge1", {}))
    hedge2.update(overrides.pop("hedge2", {}))
    data: Dict[str, Any] = dict(
        token1_price=2000.0,
        token2_price=100.0,
        lp_token1_amount=1.25,
        lp_token2_amount=25.0,
        lp_token1_fees_earned=0.0,
        lp_token2_fees_earned=0.0,
        account_equity_usd=5000.0,
    )
    data.update(overrides)
    return SnapshotObservation(
        hedge1=HedgeLegObservation(**hedge1),
        hedge2=HedgeLegObservation(**hedge2),
        **data,
    )


@pytest.fixture
def strategy() -> StrategyEntity:
    return StrategyEntity(
        id="strategy_test",
        name="eth_sol_clmm",
        token1="ETH",
        token2="SOL",
        lp_protocol="orca",
        perp_venue="hyperliquid",
        starting_capital_usd=10_000.0,
        pa=15.0,
        pb=25.0,
        price_move_threshold_pct=0.02,
        delta_drift_threshold_pct=0.10,
        cross_position_rebalance_threshold_pct=0.20,
    )


@pytest.fixture
def strategy_repo() -> InMemoryStrategyRepository:
    return InMemoryStrategyRepository()


@pytest.fixture
def snapshot_repo() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


@pytest.fixture
def make_obs():
    return make_observation
