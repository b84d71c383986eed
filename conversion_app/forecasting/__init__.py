from conversion_app.forecasting.projector import (
    DEFAULT_CONFIG,
    HistoryPoint,
    Projection,
    ProjectorConfig,
    RevenueProjector,
    project,
)

__all__ = [
    "DEFAULT_CONFIG",
    "HistoryPoint",
    "Projection",
    "ProjectorConfig",
    "RevenueProjector",
    "project",
]
