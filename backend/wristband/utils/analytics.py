"""
Read-model views derived from a sequence of readings.

Pure functions: nothing here touches the store. Inputs are objects with the
Reading attributes (device_id, user_id, hr, temp, spo2, bp_sys, bp_dia,
created_at).
"""
from datetime import datetime, timezone
from wristband.errors import ValidationError
from wristband.utils.classifier import VitalStatus, classify_reading, overall_status
from wristband.utils.vital_ranges import TIME_RANGES

ALL_DEVICES = 'ALL'

HR_BUCKET_BOUNDS = (50, 60, 70, 80, 90, 100, 110, 120)


def time_window_start(range_key: str, now: datetime = None) -> datetime:
    """Start of the 1h/6h/24h/7d window ending at ``now``."""
    if range_key not in TIME_RANGES:
        raise ValidationError(f'Unknown time range: {range_key}',
                              errors=[f'range must be one of {", ".join(TIME_RANGES)}'])
    now = now or datetime.now(timezone.utc)
    return now - TIME_RANGES[range_key]


def filter_by_device(readings, device_id=None):
    if not device_id or device_id == ALL_DEVICES:
        return list(readings)
    return [r for r in readings if r.device_id == device_id]


def device_ids(readings):
    """Distinct device ids in first-seen order."""
    return list(dict.fromkeys(r.device_id for r in readings))


def mean(values):
    values = list(values)
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def percent_trend(latest, previous) -> float:
    """(latest - previous) / previous * 100, 0 when undefined."""
    if latest is None or previous is None or not previous:
        return 0.0
    return round((latest - previous) / previous * 100, 1)


def compute_stats(readings) -> dict:
    """Averages and trends over readings ordered oldest first."""
    readings = list(readings)
    if not readings:
        return {}

    latest = readings[-1]
    previous = readings[-2] if len(readings) > 1 else None
    heart_rates = [r.hr for r in readings]

    def trend(attr):
        if previous is None:
            return 0.0
        return percent_trend(getattr(latest, attr), getattr(previous, attr))

    return {
        'avg_hr': mean(heart_rates),
        'avg_temp': mean(r.temp for r in readings),
        'avg_spo2': mean(r.spo2 for r in readings),
        'min_hr': min(heart_rates),
        'max_hr': max(heart_rates),
        'total_readings': len(readings),
        'devices': len(device_ids(readings)),
        'hr_trend': trend('hr'),
        'temp_trend': trend('temp'),
        'spo2_trend': trend('spo2'),
    }


def hr_distribution(readings) -> list:
    """Heart-rate histogram: 0-49, 50-59, ..., 110-119, 120+."""
    readings = list(readings)
    buckets = []
    lower = 0
    for upper in HR_BUCKET_BOUNDS:
        count = sum(1 for r in readings if lower <= r.hr < upper)
        buckets.append({'range': f'{lower}-{upper - 1}', 'count': count})
        lower = upper
    over = sum(1 for r in readings if r.hr >= HR_BUCKET_BOUNDS[-1])
    buckets.append({'range': f'{HR_BUCKET_BOUNDS[-1]}+', 'count': over})
    return buckets


def chart_series(readings) -> list:
    """Points for the time-series charts, one per reading."""
    return [
        {
            'time': r.created_at.isoformat() if r.created_at else None,
            'hr': r.hr,
            'temp': r.temp,
            'spo2': r.spo2,
            'bp_sys': r.bp_sys,
            'bp_dia': r.bp_dia,
            'device': r.device_id,
        }
        for r in readings
    ]


def _newest_by(readings, key):
    newest = {}
    for reading in readings:
        k = key(reading)
        current = newest.get(k)
        if current is None or _sort_time(reading) > _sort_time(current):
            newest[k] = reading
    return newest


def _sort_time(reading):
    return reading.created_at or datetime.min.replace(tzinfo=timezone.utc)


def latest_by_device(readings) -> dict:
    """Newest reading per device for one patient's dashboard."""
    return _newest_by(readings, lambda r: r.device_id)


def latest_by_patient_device(readings) -> list:
    """Newest reading per (patient, device) pair for the volunteer view."""
    return list(_newest_by(readings, lambda r: (r.user_id, r.device_id)).values())


def reading_with_status(reading) -> dict:
    """Reading payload annotated with per-vital and whole-record status."""
    data = reading.to_dict()
    data['status'] = {kind: str(status) for kind, status in classify_reading(reading).items()}
    data['overall_status'] = str(overall_status(reading))
    return data


def status_breakdown(readings) -> dict:
    """Triage counts by whole-record status plus cohort averages.

    ``readings`` holds one latest reading per (patient, device); counts and
    percentages are per device, ``total_patients`` counts distinct patients.
    """
    readings = list(readings)
    counts = {status: 0 for status in VitalStatus}
    for reading in readings:
        counts[overall_status(reading)] += 1

    total = len(readings)
    return {
        'total_patients': len({r.user_id for r in readings}),
        'total_devices': total,
        'danger_count': counts[VitalStatus.DANGER],
        'moderate_count': counts[VitalStatus.MODERATE],
        'normal_count': counts[VitalStatus.NORMAL],
        'danger_percent': round(counts[VitalStatus.DANGER] / total * 100, 1) if total else 0.0,
        'moderate_percent': round(counts[VitalStatus.MODERATE] / total * 100, 1) if total else 0.0,
        'normal_percent': round(counts[VitalStatus.NORMAL] / total * 100, 1) if total else 0.0,
        'avg_hr': mean(r.hr for r in readings),
        'avg_temp': mean(r.temp for r in readings),
        'avg_spo2': mean(r.spo2 for r in readings),
    }
