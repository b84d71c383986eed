# conversion_app/forecasting/projector.py
"""
Revenue projection from daily recovered-revenue history.

Fits a recency-weighted linear trend (revenue vs. day index) and rolls it
forward over the forecast horizon. Degenerate inputs never raise: they
resolve to fixed-ratio heuristic figures instead.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

METHOD_REGRESSION = "regression"
METHOD_HEURISTIC = "heuristic"


@dataclass(frozen=True)
class HistoryPoint:
    date: str
    revenue: float


@dataclass(frozen=True)
class Projection:
    daily_forecast: List[float] = field(default_factory=list)
    total_next_period: float = 0.0
    total_following_periods: float = 0.0
    growth_rate: float = 0.0
    method: str = METHOD_HEURISTIC


@dataclass(frozen=True)
class ProjectorConfig:
    """
    Tunables for the projection.

    weight_base:            recency weight per day (1.0 gives plain OLS)
    horizon_days:           number of forecast days
    following_multiplier:   longer-horizon total as a multiple of the next period
    zero_sum_factor:        baseline multiplier when the regression totals zero
    default_growth_rate:    shown when the computed growth is exactly zero
    heuristic_*:            fixed ratios used without enough history
    min_history:            points required before regressing
    """
    weight_base: float = 1.1
    horizon_days: int = 30
    following_multiplier: float = 3.0
    zero_sum_factor: float = 1.1
    default_growth_rate: float = 0.1
    heuristic_next_factor: float = 1.15
    heuristic_following_factor: float = 1.52
    heuristic_growth_rate: float = 0.15
    min_history: int = 2

    def __post_init__(self):
        if not (self.weight_base > 0 and math.isfinite(self.weight_base)):
            raise ValueError(f"weight_base must be a positive number, got {self.weight_base}")
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be >= 1, got {self.horizon_days}")
        if self.min_history < 2:
            raise ValueError(f"min_history must be >= 2, got {self.min_history}")


DEFAULT_CONFIG = ProjectorConfig()


# ---------------------------
# Helpers
# ---------------------------

def recency_weights(n: int, base: float) -> List[float]:
    """
    Exponential weights base**i for i in 0..n-1.

    Scaled so the largest weight is 1.0; the fit is invariant to a common
    factor and this keeps long histories from overflowing.
    """
    if n <= 0:
        return []
    if base >= 1.0:
        return [base ** (i - (n - 1)) for i in range(n)]
    return [base ** i for i in range(n)]


def weighted_linear_regression(
    values: Sequence[float],
    weights: Sequence[float],
) -> Optional[Tuple[float, float]]:
    """
    Weighted least squares of y=values on x=[0..n-1].

    Returns (slope, intercept), or None when the system is degenerate.
    """
    sw = swx = swy = swxx = swxy = 0.0
    for i, (y, w) in enumerate(zip(values, weights)):
        sw += w
        swx += w * i
        swy += w * y
        swxx += w * i * i
        swxy += w * i * y

    den = sw * swxx - swx * swx
    if den == 0 or not math.isfinite(den) or sw == 0:
        return None

    slope = (sw * swxy - swx * swy) / den
    intercept = (swy - slope * swx) / sw
    if not (math.isfinite(slope) and math.isfinite(intercept)):
        return None
    return slope, intercept


def growth_against(total: float, baseline: float, default: float) -> float:
    growth = (total - baseline) / baseline if baseline > 0 else 0.0
    # Display fallback only.
    return growth if growth != 0 else default


# ---------------------------
# Projector
# ---------------------------

class RevenueProjector:
    """Stateless projector; one instance can serve concurrent callers."""

    def __init__(self, config: ProjectorConfig = DEFAULT_CONFIG):
        self.config = config

    def heuristic(self, current_revenue: float) -> Projection:
        cfg = self.config
        return Projection(
            daily_forecast=[],
            total_next_period=current_revenue * cfg.heuristic_next_factor,
            total_following_periods=current_revenue * cfg.heuristic_following_factor,
            growth_rate=cfg.heuristic_growth_rate,
            method=METHOD_HEURISTIC,
        )

    def project(self, current_revenue: float, history: Sequence[HistoryPoint]) -> Projection:
        cfg = self.config
        n = len(history)
        if n < cfg.min_history:
            return self.heuristic(current_revenue)

        revenues = [float(p.revenue) for p in history]
        fit = weighted_linear_regression(revenues, recency_weights(n, cfg.weight_base))
        if fit is None:
            logger.debug(f"Degenerate regression over {n} points, using heuristic")
            return self.heuristic(current_revenue)
        slope, intercept = fit

        daily = [max(0.0, slope * x + intercept) for x in range(n, n + cfg.horizon_days)]

        total = sum(daily)
        if total == 0:
            total = current_revenue * cfg.zero_sum_factor

        following = total * cfg.following_multiplier
        growth = growth_against(total, current_revenue, cfg.default_growth_rate)
        if not all(math.isfinite(v) for v in (following, growth)):
            logger.debug(f"Projection over {n} points overflowed, using heuristic")
            return self.heuristic(current_revenue)

        return Projection(
            daily_forecast=daily,
            total_next_period=total,
            total_following_periods=following,
            growth_rate=growth,
            method=METHOD_REGRESSION,
        )


def project(
    current_revenue: float,
    history: Sequence[HistoryPoint],
    config: ProjectorConfig = DEFAULT_CONFIG,
) -> Projection:
    """Project with a one-off projector for the given config."""
    return RevenueProjector(config).project(current_revenue, history)
