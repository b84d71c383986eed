# conversion_app/forecasting/history.py
from datetime import date, datetime, timezone, timedelta
from typing import Iterable, List, Sequence, Tuple, Union

from conversion_app.forecasting.projector import HistoryPoint

Timestamp = Union[datetime, date]


def _as_day(ts: Timestamp) -> date:
    if isinstance(ts, datetime):
        if ts.tzinfo is not None:
            ts = ts.astimezone(timezone.utc)
        return ts.date()
    return ts


def daily_revenue_series(
    rows: Iterable[Tuple[Timestamp, float]],
    days: int,
    today: date,
) -> List[HistoryPoint]:
    """
    Bucket recovered-cart (created_at, total_price) rows into one point per
    day for the `days` calendar days ending at `today`.

    Days without recoveries are zero-filled so the series has no gaps.
    Rows outside the window are dropped.
    """
    if days <= 0:
        return []

    start = today - timedelta(days=days - 1)
    buckets = {start + timedelta(days=i): 0.0 for i in range(days)}

    for created_at, total_price in rows:
        day = _as_day(created_at)
        if day in buckets:
            buckets[day] += float(total_price or 0)

    return [HistoryPoint(date=d.isoformat(), revenue=v) for d, v in sorted(buckets.items())]


def current_revenue(history: Sequence[HistoryPoint]) -> float:
    """Recovered revenue across the whole window."""
    return sum(p.revenue for p in history)


def baseline_revenue(history: Sequence[HistoryPoint], period_days: int) -> float:
    """
    Window revenue rescaled to `period_days`, so it compares like for like
    with a forecast total over the same number of days.
    """
    if not history or period_days <= 0:
        return 0.0
    return current_revenue(history) / len(history) * period_days


def preview(history: Sequence[HistoryPoint], window: int) -> List[HistoryPoint]:
    """Trailing chart window. The projection always fits the full history."""
    if window <= 0:
        return []
    return list(history[-window:])
