# conversion_app/core/routers/forecasts.py
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from conversion_app.billing import SubscriptionState, require_pro_subscription
from conversion_app.core.config import (
    FORECAST_HORIZON_DAYS,
    FORECAST_PREVIEW_DAYS,
    FORECAST_WEIGHT_BASE,
)
from conversion_app.core.db import get_conn
from conversion_app.forecasting import history as revenue_history
from conversion_app.forecasting.projector import (
    HistoryPoint,
    Projection,
    ProjectorConfig,
    RevenueProjector,
)

logger = logging.getLogger(__name__)

router = APIRouter()

projector = RevenueProjector(
    ProjectorConfig(
        weight_base=FORECAST_WEIGHT_BASE,
        horizon_days=FORECAST_HORIZON_DAYS,
    )
)

# Keeps every projected figure finite, and so JSON-encodable.
MAX_REVENUE = 1e12


# ============================================
# Pydantic Models for Request
# ============================================

class HistoryPointIn(BaseModel):
    """One day of revenue"""
    date: str = Field(..., min_length=1, max_length=32, description="Day label, e.g. 2024-05-01")
    revenue: float = Field(..., ge=0, le=MAX_REVENUE, allow_inf_nan=False, description="Revenue for the day")


class ProjectionRequest(BaseModel):
    """Request model for projecting a caller-supplied history"""
    current_revenue: float = Field(
        ..., ge=-MAX_REVENUE, le=MAX_REVENUE, allow_inf_nan=False, description="Baseline for the growth rate"
    )
    history: List[HistoryPointIn] = Field(default_factory=list, max_length=3660)

    @field_validator("history")
    @classmethod
    def strip_dates(cls, v: List[HistoryPointIn]) -> List[HistoryPointIn]:
        for p in v:
            if not p.date.strip():
                raise ValueError("history dates must not be blank")
        return v

    def to_history(self) -> List[HistoryPoint]:
        return [HistoryPoint(date=p.date.strip(), revenue=p.revenue) for p in self.history]


# ---------------------------
# Helpers
# ---------------------------

async def fetch_recovered_carts(store_id: str, since: datetime) -> List[Tuple[datetime, float]]:
    """Recovered carts for a store created at or after `since`."""
    sql = """
    SELECT created_at, total_price
    FROM abandoned_carts
    WHERE store_id = %s
      AND recovered = true
      AND created_at >= %s
    ORDER BY created_at;
    """
    async with get_conn() as conn:
        async with conn.cursor() as cur:
            await cur.execute(sql, (store_id, since))
            rows = await cur.fetchall()
            return [(created_at, float(total or 0)) for created_at, total in rows]


def projection_metrics(current_revenue: float, projection: Projection) -> Dict[str, Any]:
    return {
        "current_revenue": round(current_revenue, 2),
        "horizon_days": projector.config.horizon_days,
        "next_period_total": round(projection.total_next_period, 2),
        "following_periods_total": round(projection.total_following_periods, 2),
        "growth_rate": round(projection.growth_rate, 4),
        "growth_percent": round(projection.growth_rate * 100),
    }


def dated_forecast(projection: Projection, last_day: date) -> List[Dict[str, Any]]:
    return [
        {
            "date": (last_day + timedelta(days=i)).isoformat(),
            "forecast_revenue": round(value, 2),
        }
        for i, value in enumerate(projection.daily_forecast, start=1)
    ]


# ---------------------------
# Revenue forecast
# ---------------------------

@router.get("/forecasts/revenue")
async def forecast_revenue(
    days: int = Query(30, ge=1, le=365, description="History window in days"),
    subscription: SubscriptionState = Depends(require_pro_subscription),
):
    """
    Revenue forecast from recovered-cart history using:
      - zero-filled daily revenue over the window
      - recency-weighted linear trend
      - fixed-ratio fallback when history is too short
    """
    store_id = subscription.store_id
    today = datetime.now(timezone.utc).date()
    since = datetime.combine(today - timedelta(days=days - 1), datetime.min.time(), tzinfo=timezone.utc)

    rows = await fetch_recovered_carts(store_id, since)
    series = revenue_history.daily_revenue_series(rows, days, today)
    # Growth compares forecast and baseline over the same number of days.
    baseline = revenue_history.baseline_revenue(series, projector.config.horizon_days)

    projection = projector.project(baseline, series)
    logger.info(
        f"Revenue forecast for store {store_id}: method={projection.method}, "
        f"points={len(series)}, carts={len(rows)}"
    )

    chart = revenue_history.preview(series, FORECAST_PREVIEW_DAYS)
    metrics = projection_metrics(baseline, projection)
    metrics["window_days"] = days
    metrics["window_revenue"] = round(revenue_history.current_revenue(series), 2)
    return {
        "historical": [{"date": p.date, "revenue": round(p.revenue, 2)} for p in chart],
        "forecast": dated_forecast(projection, today),
        "metrics": metrics,
        "method": projection.method,
    }


@router.post("/forecasts/revenue/project")
async def project_revenue(
    request: ProjectionRequest,
    subscription: SubscriptionState = Depends(require_pro_subscription),
):
    """
    Project a caller-supplied history. Points are taken in the order given;
    their index, not the date label, drives the trend.
    """
    series = request.to_history()
    projection = projector.project(request.current_revenue, series)
    logger.info(
        f"Ad-hoc projection for store {subscription.store_id}: "
        f"method={projection.method}, points={len(series)}"
    )

    return {
        "daily_forecast": [round(v, 2) for v in projection.daily_forecast],
        "metrics": projection_metrics(request.current_revenue, projection),
        "method": projection.method,
    }
