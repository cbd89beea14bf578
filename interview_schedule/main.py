from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .error_handlers import register_exception_handlers
from .middleware.audit import audit_middleware
from .redis_client import get_redis
from .routers import owner_schedule, public_schedule

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Interview schedule API started")
    yield


app = FastAPI(title="Interview Schedule API", lifespan=lifespan)

# ===== Middleware =====
app.middleware("http")(audit_middleware)

# ===== Errors =====
register_exception_handlers(app)

# ===== Routers =====
app.include_router(public_schedule.router)
app.include_router(owner_schedule.router)


@app.get("/health")
def health():
    redis = get_redis()
    if redis is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis.ping()}
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return {"status": "ok", "redis": False}
