import os
from dotenv import load_dotenv

load_dotenv()

DB_HOST = os.getenv("DB_HOST", "localhost")
DB_NAME = os.getenv("DB_NAME", "conversion")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_SSLMODE = os.getenv("DB_SSLMODE", "prefer")  # 'require' for managed Postgres
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", "5"))

# psycopg DSN
DATABASE_DSN = (
    f"host={DB_HOST} dbname={DB_NAME} user={DB_USER} password={DB_PASSWORD} sslmode={DB_SSLMODE}"
)

ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if o.strip()
]

BUILD_ID = os.getenv("BUILD_ID", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Forecast tunables. Presentational constants, not fitted values.
FORECAST_WEIGHT_BASE = float(os.getenv("FORECAST_WEIGHT_BASE", "1.1"))
FORECAST_HORIZON_DAYS = int(os.getenv("FORECAST_HORIZON_DAYS", "30"))
FORECAST_PREVIEW_DAYS = int(os.getenv("FORECAST_PREVIEW_DAYS", "7"))
