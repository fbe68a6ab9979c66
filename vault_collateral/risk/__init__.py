"""Position risk engine."""
from .engine import (
    BPS_DENOMINATOR,
    LIQUIDATION_HEALTH_FACTOR,
    NO_DEBT,
    HealthStatus,
    RiskEngine,
    RiskMetrics,
    borrow_ratio,
    classify,
    format_health_factor,
    format_ratio,
    health_factor,
    is_healthy,
)

__all__ = [
    "BPS_DENOMINATOR",
    "LIQUIDATION_HEALTH_FACTOR",
    "NO_DEBT",
    "HealthStatus",
    "RiskEngine",
    "RiskMetrics",
    "borrow_ratio",
    "classify",
    "format_health_factor",
    "format_ratio",
    "health_factor",
    "is_healthy",
]
