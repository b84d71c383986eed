from fastapi import APIRouter

from conversion_app.core.config import BUILD_ID
from conversion_app.core.db import get_conn

router = APIRouter(tags=["health"])


async def ping_database() -> bool:
    async with get_conn() as conn:
        async with conn.cursor() as cur:
            await cur.execute("SELECT 1;")
            row = await cur.fetchone()
    return bool(row and row[0] == 1)


@router.get("/healthz")
async def healthz():
    # Round-trips the ledger DB so the container check catches a dead pool.
    return {"ok": await ping_database(), "build_id": BUILD_ID}
