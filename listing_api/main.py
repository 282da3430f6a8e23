import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .database import SessionLocal, init_db
from .errors import register_error_handlers
from .middleware.audit import audit_middleware
from .redis_client import redis_client
from .routers import visits

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database schema ready")
    yield


app = FastAPI(title="Property Visits API", lifespan=lifespan)

app.middleware("http")(audit_middleware)
register_error_handlers(app)

app.include_router(visits.router)
app.include_router(visits.property_router)


@app.get("/health")
def health():
    try:
        with SessionLocal() as db:
            database_ok = db.execute(text("SELECT 1")).scalar() == 1
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database_ok = False

    try:
        redis_ok = bool(redis_client.ping())
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        redis_ok = False

    return {"database": database_ok, "redis": redis_ok}
