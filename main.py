import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from adapters.entry.http.error_handlers import register_exception_handlers
from adapters.entry.http.snapshot_router import router as snapshots_router
from adapters.entry.http.strategy_router import router as strategies_router

from adapters.external.database.mongodb_client import get_mongo_client
from adapters.external.database.snapshot_repository_mongodb import SnapshotRepositoryMongoDB
from adapters.external.database.strategy_repository_mongodb import StrategyRepositoryMongoDB
from config.settings import settings


def _setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    _setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Starting %s (lifespan startup)...", settings.APP_NAME)

    mongo_client = get_mongo_client()
    db = mongo_client[settings.MONGODB_DB_NAME]

    app.state.mongo_client = mongo_client
    app.state.mongo_db = db

    try:
        await db.command("ping")
        logger.info("MongoDB ping ok.")
    except Exception:
        logger.exception("MongoDB ping failed (startup).")
        raise

    if settings.ENSURE_INDEXES_ON_START:
        await StrategyRepositoryMongoDB(db).ensure_indexes()
        await SnapshotRepositoryMongoDB(db).ensure_indexes()
        logger.info("MongoDB indexes ensured.")

    try:
        yield
    finally:
        logger.info("Shutting down %s (lifespan shutdown)...", settings.APP_NAME)
        mongo_client.close()
        logger.info("MongoDB client closed.")


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
register_exception_handlers(app)

# Routers are included outside the lifespan
app.include_router(strategies_router)
app.include_router(snapshots_router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
