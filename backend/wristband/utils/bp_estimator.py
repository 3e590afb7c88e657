"""
Blood pressure estimate from heart rate and SpO2.

A heuristic surrogate used when a wristband does not report BP directly.
It is not a medical measurement.
"""
import math
from wristband.utils.vital_ranges import VITAL_RANGES


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: int, low, high) -> int:
    return int(max(low, min(high, value)))


def estimate_blood_pressure(heart_rate, blood_oxygen):
    """Return (systolic, diastolic) clamped to the plausible BP bounds."""
    bands = VITAL_RANGES['bp']

    systolic = _round_half_up(90 + (heart_rate - 60) * 0.8 + (100 - blood_oxygen) * 1.2)
    diastolic = _round_half_up(60 + (heart_rate - 60) * 0.4 + (100 - blood_oxygen) * 0.8)

    return (
        _clamp(systolic, bands.systolic.plausible.low, bands.systolic.plausible.high),
        _clamp(diastolic, bands.diastolic.plausible.low, bands.diastolic.plausible.high),
    )
