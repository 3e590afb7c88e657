"""
Static vital-sign range table and dashboard timing constants.

Loaded once at import time and never mutated.
"""
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType


@dataclass(frozen=True)
class Band:
    """Closed interval [low, high]; a value equal to a bound is inside."""
    low: float
    high: float

    def contains(self, value) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class IntervalRange:
    """Vital classified against nested critical/warning intervals."""
    critical: Band
    warning: Band
    plausible: Band


@dataclass(frozen=True)
class FloorRange:
    """Vital classified against lower thresholds only (SpO2)."""
    critical: float
    warning: float
    plausible: Band


@dataclass(frozen=True)
class PairRange:
    """Blood pressure: systolic and diastolic bands checked independently."""
    systolic: IntervalRange
    diastolic: IntervalRange


VITAL_RANGES = MappingProxyType({
    'hr': IntervalRange(
        critical=Band(60, 100),
        warning=Band(70, 90),
        plausible=Band(30, 200),
    ),
    'temp': IntervalRange(
        critical=Band(36, 37.5),
        warning=Band(36.5, 37.2),
        plausible=Band(30, 45),
    ),
    'spo2': FloorRange(
        critical=95,
        warning=97,
        plausible=Band(70, 100),
    ),
    'bp': PairRange(
        systolic=IntervalRange(
            critical=Band(90, 140),
            warning=Band(100, 130),
            plausible=Band(80, 180),
        ),
        diastolic=IntervalRange(
            critical=Band(60, 90),
            warning=Band(65, 85),
            plausible=Band(50, 110),
        ),
    ),
})

TIME_RANGES = MappingProxyType({
    '1h': timedelta(hours=1),
    '6h': timedelta(hours=6),
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
})

DEFAULT_TIME_RANGE = '24h'

# Seconds
DASHBOARD_REFRESH_INTERVAL = 10
ANALYTICS_REFRESH_INTERVAL = 30
FETCH_TIMEOUT = 15

DASHBOARD_READING_LIMIT = 100
VOLUNTEER_READING_LIMIT = 500
