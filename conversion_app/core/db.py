# conversion_app/core/db.py
import logging
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from .config import DATABASE_DSN, DB_POOL_MAX, DB_POOL_MIN

logger = logging.getLogger(__name__)

_pool: AsyncConnectionPool | None = None


async def init_pool() -> AsyncConnectionPool:
    """Open the process-wide pool on the cart ledger DB; later calls reuse it."""
    global _pool
    if _pool is None:
        pool = AsyncConnectionPool(
            conninfo=DATABASE_DSN,
            min_size=DB_POOL_MIN,
            max_size=DB_POOL_MAX,
            open=False,
            timeout=10,
        )
        # Raises if the DSN is wrong or the DB is unreachable.
        await pool.open(wait=True, timeout=10)
        _pool = pool
        logger.info(f"Ledger DB pool open (min={DB_POOL_MIN}, max={DB_POOL_MAX})")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Ledger DB pool closed")


@asynccontextmanager
async def get_conn():
    """Borrow a ledger connection, opening the pool on first use."""
    pool = await init_pool()
    async with pool.connection() as conn:
        yield conn
