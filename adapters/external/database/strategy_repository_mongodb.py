import uuid
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from core.common.utils import now_ms_iso
from core.domain.entities.strategy_entity import StrategyEntity
from core.repositories.strategy_repository import StrategyRepository


class StrategyRepositoryMongoDB(StrategyRepository):
    """
    Mongo implementation for strategies.
    """

    COLLECTION = "strategies"

    def __init__(self, db: AsyncIOMotorDatabase):
        self._col = db[self.COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("created_at", -1)], name="ix_created_at")
        await self._col.create_index([("name", 1)], name="ix_name")

    async def create(self, strategy: StrategyEntity) -> StrategyEntity:
        doc = strategy.to_new_mongo()
        doc.setdefault("_id", f"strategy_{uuid.uuid4().hex}")
        await self._col.insert_one(doc)
        return StrategyEntity.from_mongo(doc)

    async def get_by_id(self, strategy_id: str) -> Optional[StrategyEntity]:
        doc = await self._col.find_one({"_id": strategy_id})
        return StrategyEntity.from_mongo(doc)

    async def list_all(self) -> List[StrategyEntity]:
        cursor = self._col.find({}, sort=[("created_at", -1)])
        docs = await cursor.to_list(length=None)
        return [StrategyEntity.from_mongo(d) for d in docs if d]

    async def update(self, strategy_id: str, changes: Dict[str, Any]) -> Optional[StrategyEntity]:
        now_ms, now_iso = now_ms_iso()
        # partial updates never touch the key or creation stamps
        set_doc = {
            k: v
            for (k, v) in changes.items()
            if k not in ("_id", "id", "created_at", "created_at_iso")
        }
        doc = await self._col.find_one_and_update(
            {"_id": strategy_id},
            {"$set": {**set_doc, "updated_at": now_ms, "updated_at_iso": now_iso}},
            return_document=ReturnDocument.AFTER,
        )
        return StrategyEntity.from_mongo(doc)

    async def delete(self, strategy_id: str) -> bool:
        res = await self._col.delete_one({"_id": strategy_id})
        return res.deleted_count > 0
