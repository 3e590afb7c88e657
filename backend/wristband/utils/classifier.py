"""
Three-level vital status classification (normal / moderate / danger).
"""
import enum
from wristband.utils.vital_ranges import VITAL_RANGES, IntervalRange


class VitalStatus(enum.Enum):
    NORMAL = 'normal'
    MODERATE = 'moderate'
    DANGER = 'danger'

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __str__(self):
        return self.value


_SEVERITY = {
    VitalStatus.NORMAL: 0,
    VitalStatus.MODERATE: 1,
    VitalStatus.DANGER: 2,
}


def _classify_interval(ranges: IntervalRange, value) -> VitalStatus:
    if not ranges.critical.contains(value):
        return VitalStatus.DANGER
    if not ranges.warning.contains(value):
        return VitalStatus.MODERATE
    return VitalStatus.NORMAL


def classify_blood_pressure(systolic, diastolic) -> VitalStatus:
    """Either component outside its band decides the level."""
    bp = VITAL_RANGES['bp']
    if not bp.systolic.critical.contains(systolic) or not bp.diastolic.critical.contains(diastolic):
        return VitalStatus.DANGER
    if not bp.systolic.warning.contains(systolic) or not bp.diastolic.warning.contains(diastolic):
        return VitalStatus.MODERATE
    return VitalStatus.NORMAL


def classify_vital(kind: str, value) -> VitalStatus:
    """Classify one vital.

    ``kind`` is one of 'hr', 'temp', 'spo2' or 'bp'. For 'bp' the value is a
    (systolic, diastolic) pair. Unknown kinds are reported as normal.
    """
    if kind in ('hr', 'temp'):
        return _classify_interval(VITAL_RANGES[kind], value)
    if kind == 'spo2':
        spo2 = VITAL_RANGES['spo2']
        if value < spo2.critical:
            return VitalStatus.DANGER
        if value < spo2.warning:
            return VitalStatus.MODERATE
        return VitalStatus.NORMAL
    if kind == 'bp':
        systolic, diastolic = value
        return classify_blood_pressure(systolic, diastolic)
    return VitalStatus.NORMAL


def most_severe(statuses) -> VitalStatus:
    """danger > moderate > normal; an empty input is normal."""
    return max(statuses, key=lambda s: s.severity, default=VitalStatus.NORMAL)


def classify_reading(reading) -> dict:
    """Per-vital statuses for a reading, keyed by vital kind."""
    return {
        'hr': classify_vital('hr', reading.hr),
        'temp': classify_vital('temp', reading.temp),
        'spo2': classify_vital('spo2', reading.spo2),
        'bp': classify_vital('bp', (reading.bp_sys, reading.bp_dia)),
    }


def overall_status(reading) -> VitalStatus:
    """Whole-record status used to triage patients."""
    return most_severe(classify_reading(reading).values())
