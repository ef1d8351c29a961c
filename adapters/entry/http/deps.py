from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.repositories.snapshot_repository import SnapshotRepository
from core.repositories.strategy_repository import StrategyRepository

from ...external.database.snapshot_repository_mongodb import SnapshotRepositoryMongoDB
from ...external.database.strategy_repository_mongodb import StrategyRepositoryMongoDB


def get_db(request: Request) -> AsyncIOMotorDatabase:
    db = getattr(request.app.state, "mongo_db", None)
    if db is None:
        raise RuntimeError("MongoDB database not initialized. Check app lifespan startup.")
    return db


def get_strategy_repo(db: AsyncIOMotorDatabase = Depends(get_db)) -> StrategyRepository:
    return StrategyRepositoryMongoDB(db)


def get_snapshot_repo(db: AsyncIOMotorDatabase = Depends(get_db)) -> SnapshotRepository:
    return SnapshotRepositoryMongoDB(db)
