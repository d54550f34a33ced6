from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from app.core.config import get_settings
from app.core.lifespan import lifespan
from app.api.v1.routers.health import router as health_router
from app.api.v1.routers.sessions import router as sessions_router
from app.api.v1.routers.cart import router as cart_router
from app.api.v1.routers.assistant import router as assistant_router
from app.api.v1.routers.orders import router as orders_router
from app.core.logging import configure_logging
from app.utils.locks import LockTimeout

from fastapi.middleware.cors import CORSMiddleware
import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. ALLOWED_ORIGINS="https://shop.example.com,https://www.shop.example.com"
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins or ["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)

# ------- Errors -------
@app.exception_handler(LockTimeout)
async def _session_busy(request: Request, exc: LockTimeout):
    logger.warning("session lock timeout key=%s path=%s", exc, request.url.path)
    return JSONResponse(status_code=409, content={"detail": "Session is busy, retry shortly."})

@app.exception_handler(RedisError)
async def _storage_down(request: Request, exc: RedisError):
    logger.error("redis error path=%s err=%s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Session storage unavailable."})

# ------- Routes -------
app.include_router(health_router)
app.include_router(sessions_router)          # session profile + events
app.include_router(cart_router)              # cart lines
app.include_router(assistant_router)         # recommendations + cart advice
app.include_router(orders_router)            # checkout + orders
