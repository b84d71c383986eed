from datetime import date, datetime, timedelta, timezone

from conversion_app.forecasting.history import baseline_revenue, current_revenue, daily_revenue_series, preview
from conversion_app.forecasting.projector import HistoryPoint

TODAY = date(2024, 5, 10)


def test_series_is_zero_filled_and_chronological():
    rows = [
        (datetime(2024, 5, 9, 12, tzinfo=timezone.utc), 20.0),
        (datetime(2024, 5, 9, 18, tzinfo=timezone.utc), 5.5),
        (date(2024, 5, 10), 10.0),
    ]

    series = daily_revenue_series(rows, 3, TODAY)

    assert series == [
        HistoryPoint(date="2024-05-08", revenue=0.0),
        HistoryPoint(date="2024-05-09", revenue=25.5),
        HistoryPoint(date="2024-05-10", revenue=10.0),
    ]


def test_rows_outside_window_are_dropped():
    rows = [
        (datetime(2024, 5, 1, tzinfo=timezone.utc), 99.0),
        (datetime(2024, 5, 11, tzinfo=timezone.utc), 42.0),
    ]

    series = daily_revenue_series(rows, 3, TODAY)

    assert [p.revenue for p in series] == [0.0, 0.0, 0.0]


def test_aware_timestamps_bucket_on_utc_day():
    plus_five = timezone(timedelta(hours=5))
    rows = [(datetime(2024, 5, 10, 1, 0, tzinfo=plus_five), 30.0)]

    series = daily_revenue_series(rows, 2, TODAY)

    assert series[0] == HistoryPoint(date="2024-05-09", revenue=30.0)
    assert series[1].revenue == 0.0


def test_missing_price_counts_as_zero():
    series = daily_revenue_series([(date(2024, 5, 10), None)], 1, TODAY)
    assert series == [HistoryPoint(date="2024-05-10", revenue=0.0)]


def test_empty_window():
    assert daily_revenue_series([(TODAY, 10.0)], 0, TODAY) == []


def test_current_revenue_sums_window():
    history = [HistoryPoint("2024-05-09", 12.5), HistoryPoint("2024-05-10", 7.5)]
    assert current_revenue(history) == 20.0
    assert current_revenue([]) == 0


def test_preview_keeps_trailing_points():
    history = [HistoryPoint(f"2024-05-{d:02d}", float(d)) for d in range(1, 11)]

    assert [p.revenue for p in preview(history, 7)] == [4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
    assert preview(history[:3], 7) == history[:3]
    assert preview(history, 0) == []


def test_baseline_is_scaled_to_forecast_period():
    week = [HistoryPoint(f"2024-05-{d:02d}", 100.0) for d in range(1, 8)]

    assert baseline_revenue(week, 30) == 3000.0
    assert baseline_revenue(week, 7) == current_revenue(week)
    assert baseline_revenue([], 30) == 0.0
