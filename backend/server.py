from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent

# Load .env only if it exists (development fallback); deployments inject env vars.
env_path = ROOT_DIR / ".env"
if env_path.exists():
    load_dotenv(env_path)

from fastapi import Depends, FastAPI  # noqa: E402
from starlette.middleware.cors import CORSMiddleware  # noqa: E402

from tourbook import config  # noqa: E402
from tourbook.db import close_mongo, connect_mongo, get_db  # noqa: E402
from tourbook.exception_handlers import register_exception_handlers  # noqa: E402
from tourbook.middleware.correlation_id import CorrelationIdMiddleware  # noqa: E402
from tourbook.middleware.structured_logging_middleware import StructuredLoggingMiddleware  # noqa: E402
from tourbook.routers.admin_bookings import router as admin_bookings_router  # noqa: E402
from tourbook.routers.admin_users import router as admin_users_router  # noqa: E402
from tourbook.routers.auth import router as auth_router  # noqa: E402
from tourbook.routers.bookings import router as bookings_router  # noqa: E402
from tourbook.routers.tours import router as tours_router  # noqa: E402
from tourbook.seed import ensure_seed_data  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("tour-booking")

app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(StructuredLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# Routers (/api prefix is on each router)
app.include_router(auth_router)
app.include_router(tours_router)
app.include_router(bookings_router)
app.include_router(admin_bookings_router)
app.include_router(admin_users_router)


@app.get("/api/health")
async def health(db=Depends(get_db)) -> dict[str, Any]:
    """Health check with database ping"""
    ok = False
    try:
        await db.command("ping")
        ok = True
    except Exception:
        logger.warning("Database ping failed", exc_info=True)
    return {"ok": ok, "service": "tour-booking"}


@app.get("/health")
async def deployment_health() -> dict[str, Any]:
    return {"ok": True, "service": "tour-booking", "status": "healthy"}


@app.on_event("startup")
async def _startup() -> None:
    await connect_mongo()
    await ensure_seed_data(await get_db())
    logger.info("Startup complete")


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_mongo()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
