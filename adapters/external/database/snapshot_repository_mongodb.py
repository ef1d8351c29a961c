from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.common.utils import now_ms_iso
from core.domain.entities.snapshot_entity import SnapshotEntity
from core.repositories.snapshot_repository import SnapshotRepository


class SnapshotRepositoryMongoDB(SnapshotRepository):
    """
    MongoDB implementation for SnapshotRepository using Motor.
    """

    COLLECTION = "snapshots"

    def __init__(self, db: AsyncIOMotorDatabase):
        self._col = db[self.COLLECTION]

    async def ensure_indexes(self) -> None:
        """
        (strategy_id, timestamp) drives every ordered read: previous/latest/list.
        """
        await self._col.create_index(
            [("strategy_id", 1), ("timestamp", -1)],
            name="ix_strategy_timestamp",
        )

    async def insert(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        doc = snapshot.to_new_mongo()
        await self._col.insert_one(doc)
        return SnapshotEntity.from_mongo(doc)

    async def get_by_id(self, strategy_id: str, snapshot_id: str) -> Optional[SnapshotEntity]:
        doc = await self._col.find_one({"_id": snapshot_id, "strategy_id": strategy_id})
        return SnapshotEntity.from_mongo(doc)

    async def list_by_strategy(self, strategy_id: str) -> List[SnapshotEntity]:
        cursor = self._col.find({"strategy_id": strategy_id}, sort=[("timestamp", 1)])
        docs = await cursor.to_list(length=None)
        return [SnapshotEntity.from_mongo(d) for d in docs if d]

    async def get_previous(self, strategy_id: str, before_ts: int) -> Optional[SnapshotEntity]:
        doc = await self._col.find_one(
            {"strategy_id": strategy_id, "timestamp": {"$lt": int(before_ts)}},
            sort=[("timestamp", -1)],
        )
        return SnapshotEntity.from_mongo(doc)

    async def get_latest(self, strategy_id: str) -> Optional[SnapshotEntity]:
        doc = await self._col.find_one(
            {"strategy_id": strategy_id},
            sort=[("timestamp", -1)],
        )
        return SnapshotEntity.from_mongo(doc)

    async def count_by_strategy(self, strategy_id: str) -> int:
        return await self._col.count_documents({"strategy_id": strategy_id})

    async def replace(self, snapshot: SnapshotEntity) -> SnapshotEntity:
        now_ms, now_iso = now_ms_iso()
        doc = snapshot.to_mongo()
        await self._col.update_one(
            {"_id": snapshot.id, "strategy_id": snapshot.strategy_id},
            {
                "$set": {
                    "observation": doc["observation"],
                    "metrics": doc.get("metrics"),
                    "updated_at": now_ms,
                    "updated_at_iso": now_iso,
                }
            },
        )
        found = await self._col.find_one({"_id": snapshot.id})
        return SnapshotEntity.from_mongo(found)

    async def delete(self, strategy_id: str, snapshot_id: str) -> bool:
        res = await self._col.delete_one({"_id": snapshot_id, "strategy_id": strategy_id})
        return res.deleted_count > 0

    async def delete_by_strategy(self, strategy_id: str) -> int:
        res = await self._col.delete_many({"strategy_id": strategy_id})
        return res.deleted_count
