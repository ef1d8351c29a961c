import pytest
import pytest_asyncio

from core.domain.enums.rebalance_enums import RangeStatus, RebalanceReason
from core.domain.exceptions import SnapshotNotFoundError, StrategyNotFoundError
from core.usecases.delete_strategy_use_case import DeleteStrategyUseCase
from core.usecases.record_snapshot_use_case import RecordSnapshotUseCase
from core.usecases.strategy_overview_use_case import StrategyOverviewUseCase


@pytest_asyncio.fixture
async def stored_strategy(strategy, strategy_repo):
    return await strategy_repo.create(strategy)


@pytest.fixture
def record_uc(strategy_repo, snapshot_repo):
    return RecordSnapshotUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)


@pytest.mark.asyncio
async def test_create_first_snapshot(stored_strategy, record_uc, snapshot_repo, make_obs):
    snap = await record_uc.create(stored_strategy.id, make_obs(lp_token2_amount=27.0), timestamp=1_000)

    assert snap.id.startswith("snap_")
    assert snap.timestamp == 1_000
    assert snap.timestamp_iso == "1970-01-01T00:00:01.000Z"
    assert snap.metrics.lp_pnl_usd == pytest.approx(200.0)
    assert snap.metrics.rebalance_reason == RebalanceReason.NONE
    assert await snapshot_repo.count_by_strategy(stored_strategy.id) == 1


@pytest.mark.asyncio
async def test_create_defaults_timestamp_to_now(stored_strategy, record_uc, make_obs):
    snap = await record_uc.create(stored_strategy.id, make_obs())
    assert snap.timestamp > 1_600_000_000_000
    assert snap.timestamp_iso.endswith("Z")


@pytest.mark.asyncio
async def test_create_unknown_strategy(record_uc, make_obs):
    with pytest.raises(StrategyNotFoundError):
        await record_uc.create("missing", make_obs())


@pytest.mark.asyncio
async def test_second_snapshot_uses_previous(stored_strategy, record_uc, make_obs):
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)
    snap = await record_uc.create(stored_strategy.id, make_obs(lp_token1_amount=1.3), timestamp=2_000)
    assert snap.metrics.lp_pnl_usd == pytest.approx(100.0)
    assert snap.metrics.rebalance_reason == RebalanceReason.DELTA_DRIFT


@pytest.mark.asyncio
async def test_backfilled_snapshot_uses_earlier_neighbor(stored_strategy, record_uc, make_obs):
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)                       # 5000
    await record_uc.create(stored_strategy.id, make_obs(lp_token1_amount=2.0), timestamp=3_000)   # 6500
    snap = await record_uc.create(stored_strategy.id, make_obs(lp_token1_amount=1.5), timestamp=2_000)
    # 5500 vs the 1_000 snapshot, not the later 3_000 one
    assert snap.metrics.lp_pnl_usd == pytest.approx(500.0)


@pytest.mark.asyncio
async def test_edit_historical_snapshot_recomputes_against_predecessor(
    stored_strategy, record_uc, snapshot_repo, make_obs
):
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)
    middle = await record_uc.create(stored_strategy.id, make_obs(), timestamp=2_000)
    await record_uc.create(stored_strategy.id, make_obs(lp_token1_amount=3.0), timestamp=3_000)

    edited = await record_uc.edit(stored_strategy.id, middle.id, make_obs(lp_token1_amount=1.1))

    assert edited.id == middle.id
    assert edited.timestamp == 2_000
    # 4700 vs 5000 at ts=1_000 (the 3_000 snapshot is later and must be ignored)
    assert edited.metrics.lp_pnl_usd == pytest.approx(-300.0)
    stored = await snapshot_repo.get_by_id(stored_strategy.id, middle.id)
    assert stored.observation.lp_token1_amount == 1.1


@pytest.mark.asyncio
async def test_edit_first_snapshot_has_no_previous(stored_strategy, record_uc, make_obs):
    first = await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=2_000)

    edited = await record_uc.edit(stored_strategy.id, first.id, make_obs(lp_token2_amount=27.0))
    assert edited.metrics.lp_pnl_usd == pytest.approx(200.0)
    assert edited.metrics.rebalance_reason == RebalanceReason.NONE


@pytest.mark.asyncio
async def test_edit_missing_snapshot(stored_strategy, record_uc, make_obs):
    with pytest.raises(SnapshotNotFoundError):
        await record_uc.edit(stored_strategy.id, "snap_missing", make_obs())


@pytest.mark.asyncio
async def test_overview(stored_strategy, record_uc, strategy_repo, snapshot_repo, make_obs):
    uc = StrategyOverviewUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)

    empty = await uc.execute(stored_strategy.id)
    assert empty.snapshot_count == 0
    assert empty.latest_snapshot is None
    assert empty.range_status is None

    await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)
    await record_uc.create(stored_strategy.id, make_obs(lp_price=30.0), timestamp=2_000)

    ov = await uc.execute(stored_strategy.id)
    assert ov.snapshot_count == 2
    assert ov.latest_snapshot.timestamp == 2_000
    assert ov.lp_allocation_pct == pytest.approx(50.0)
    assert ov.hedge_allocation_pct == pytest.approx(50.0)
    assert ov.range_status == RangeStatus.ABOVE_RANGE


@pytest.mark.asyncio
async def test_overview_unknown_strategy(strategy_repo, snapshot_repo):
    uc = StrategyOverviewUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)
    with pytest.raises(StrategyNotFoundError):
        await uc.execute("missing")


@pytest.mark.asyncio
async def test_delete_strategy_cascades(stored_strategy, record_uc, strategy_repo, snapshot_repo, make_obs):
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=1_000)
    await record_uc.create(stored_strategy.id, make_obs(), timestamp=2_000)

    uc = DeleteStrategyUseCase(strategy_repo=strategy_repo, snapshot_repo=snapshot_repo)
    assert await uc.execute(stored_strategy.id) == 2
    assert await strategy_repo.get_by_id(stored_strategy.id) is None
    assert await snapshot_repo.count_by_strategy(stored_strategy.id) == 0

    with pytest.raises(StrategyNotFoundError):
        await uc.execute(stored_strategy.id)
