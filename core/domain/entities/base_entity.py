# core/domain/entities/base_entity.py
from typing import Any, Optional, TypeVar, Type

from pydantic import BaseModel, ConfigDict

from core.common.utils import now_ms_iso

E = TypeVar("E", bound="MongoEntity")


class MongoEntity(BaseModel):
    """
    Base for documents stored in Mongo.

    `id` is the document `_id` (always a string key like `strategy_<hex>`);
    created/updated stamps are epoch ms plus their ISO rendering.
    """
    id: Optional[str] = None
    created_at: Optional[int] = None
    created_at_iso: Optional[str] = None
    updated_at: Optional[int] = None
    updated_at_iso: Optional[str] = None

    model_config = ConfigDict(
        extra="ignore",
        use_enum_values=True,
    )

    @classmethod
    def from_mongo(cls: Type[E], doc: Optional[dict[str, Any]]) -> Optional[E]:
        if not doc:
            return None
        data = dict(doc)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_mongo(self) -> dict[str, Any]:
        # json mode: nested models and enums become plain BSON types
        data = self.model_dump(mode="json", exclude_none=True)
        if "id" in data:
            data["_id"] = data.pop("id")
        return data

    def to_new_mongo(self) -> dict[str, Any]:
        """Document for a first insert, with created/updated stamped to now."""
        now_ms, now_iso = now_ms_iso()
        doc = self.to_mongo()
        doc.update(
            {
                "created_at": now_ms,
                "created_at_iso": now_iso,
                "updated_at": now_ms,
                "updated_at_iso": now_iso,
            }
        )
        return doc
