import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conversion_app.core.config import ALLOWED_ORIGINS, BUILD_ID, LOG_LEVEL
from conversion_app.core.db import close_pool
from conversion_app.core.routers import forecasts, health
from conversion_app.billing import router as billing_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Pool opens lazily on first query.
    yield
    await close_pool()


app = FastAPI(title="Conversion Toolkit", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],   # includes X-Store-Id
)

# -------------------------------
# Router registration
# -------------------------------

# Pro gating happens per route via require_pro_subscription
app.include_router(forecasts.router, prefix="/api", tags=["forecasts"])
app.include_router(billing_router)

# Health checks must remain public
app.include_router(health.router)

def log_routes(application: FastAPI) -> None:
    for r in application.routes:
        logger.info("ROUTE %s %s", getattr(r, "path", ""), getattr(r, "methods", ""))


log_routes(app)


@app.get("/whoami")
def whoami():
    return {"module": "conversion_app.app", "build_id": BUILD_ID}
