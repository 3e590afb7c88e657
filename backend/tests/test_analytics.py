"""Tests for aggregation and CSV export."""
from datetime import datetime, timedelta, timezone

import pytest

from wristband.errors import ValidationError
from wristband.models import Reading
from wristband.utils import analytics
from wristband.utils.export import READING_CSV_COLUMNS, generate_readings_csv

BASE = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def reading(hr, temp=36.8, spo2=98, device='device-001', user='1', minute=0,
            bp_sys=120, bp_dia=78):
    return Reading(device_id=device, user_id=user, hr=hr, temp=temp, spo2=spo2,
                   bp_sys=bp_sys, bp_dia=bp_dia, created_at=BASE + timedelta(minutes=minute))


class TestStats:
    """Averages, extremes and trends."""

    def test_empty_input_gives_empty_stats(self):
        assert analytics.compute_stats([]) == {}

    def test_means_and_extremes(self):
        readings = [
            reading(70, temp=36.5, spo2=97, minute=0),
            reading(80, temp=36.7, spo2=98, minute=1, device='device-002'),
            reading(90, temp=36.9, spo2=99, minute=2),
        ]
        stats = analytics.compute_stats(readings)
        assert stats['avg_hr'] == 80.0
        assert stats['avg_temp'] == pytest.approx(36.7)
        assert stats['avg_spo2'] == 98.0
        assert stats['min_hr'] == 70
        assert stats['max_hr'] == 90
        assert stats['total_readings'] == 3
        assert stats['devices'] == 2

    def test_trend_uses_last_two_readings(self):
        readings = [reading(60, minute=0), reading(80, minute=1), reading(100, minute=2)]
        stats = analytics.compute_stats(readings)
        # (100 - 80) / 80 * 100
        assert stats['hr_trend'] == 25.0

    def test_negative_trend(self):
        readings = [reading(80, spo2=100, minute=0), reading(72, spo2=95, minute=1)]
        stats = analytics.compute_stats(readings)
        assert stats['hr_trend'] == -10.0
        assert stats['spo2_trend'] == -5.0

    def test_single_reading_has_zero_trend(self):
        stats = analytics.compute_stats([reading(75)])
        assert stats['hr_trend'] == 0
        assert stats['temp_trend'] == 0
        assert stats['spo2_trend'] == 0

    def test_percent_trend_undefined_cases(self):
        assert analytics.percent_trend(10, 0) == 0.0
        assert analytics.percent_trend(10, None) == 0.0


class TestHeartRateDistribution:
    """Fixed 10 bpm buckets."""

    def test_bucket_membership(self):
        readings = [reading(hr) for hr in (45, 50, 59, 60, 75, 119, 120, 150)]
        buckets = {b['range']: b['count'] for b in analytics.hr_distribution(readings)}
        assert list(buckets) == [
            '0-49', '50-59', '60-69', '70-79', '80-89', '90-99', '100-109', '110-119', '120+',
        ]
        assert buckets['0-49'] == 1
        assert buckets['50-59'] == 2
        assert buckets['60-69'] == 1
        assert buckets['70-79'] == 1
        assert buckets['110-119'] == 1
        assert buckets['120+'] == 2
        assert sum(buckets.values()) == len(readings)

    def test_empty_input_has_all_buckets_at_zero(self):
        buckets = analytics.hr_distribution([])
        assert len(buckets) == 9
        assert all(b['count'] == 0 for b in buckets)


class TestGrouping:
    """Device filters and latest-reading views."""

    def test_filter_by_device(self):
        readings = [reading(70, device='a'), reading(80, device='b'), reading(90, device='a')]
        assert [r.hr for r in analytics.filter_by_device(readings, 'a')] == [70, 90]
        assert len(analytics.filter_by_device(readings, 'ALL')) == 3
        assert len(analytics.filter_by_device(readings, None)) == 3

    def test_latest_by_device(self):
        readings = [
            reading(70, device='a', minute=5),
            reading(71, device='a', minute=1),
            reading(80, device='b', minute=3),
        ]
        latest = analytics.latest_by_device(readings)
        assert latest['a'].hr == 70
        assert latest['b'].hr == 80

    def test_latest_by_patient_device(self):
        readings = [
            reading(70, device='a', user='1', minute=1),
            reading(72, device='a', user='1', minute=2),
            reading(90, device='a', user='2', minute=1),
        ]
        latest = {(r.user_id, r.device_id): r.hr for r in analytics.latest_by_patient_device(readings)}
        assert latest == {('1', 'a'): 72, ('2', 'a'): 90}

    def test_status_breakdown(self):
        readings = [
            reading(80, device='a'),                     # normal
            reading(95, device='b'),                     # moderate
            reading(80, spo2=90, device='a', user='2'),   # danger
            reading(110, spo2=96, device='a', user='3'),  # danger
        ]
        breakdown = analytics.status_breakdown(readings)
        assert breakdown['total_patients'] == 3
        assert breakdown['total_devices'] == 4
        assert breakdown['danger_count'] == 2
        assert breakdown['moderate_count'] == 1
        assert breakdown['normal_count'] == 1
        assert breakdown['danger_percent'] == 50.0

    def test_reading_with_status(self):
        data = analytics.reading_with_status(reading(95, spo2=93))
        assert data['status']['hr'] == 'moderate'
        assert data['status']['spo2'] == 'danger'
        assert data['overall_status'] == 'danger'

    def test_time_window(self):
        now = datetime(2026, 10, 18, tzinfo=timezone.utc)
        assert analytics.time_window_start('6h', now) == now - timedelta(hours=6)
        assert analytics.time_window_start('7d', now) == now - timedelta(days=7)
        with pytest.raises(ValidationError):
            analytics.time_window_start('2y', now)


class TestCsvExport:
    """Flat CSV with a fixed column order."""

    def test_n_readings_give_n_plus_one_lines(self):
        readings = [reading(70 + i, minute=i) for i in range(5)]
        lines = generate_readings_csv(readings).getvalue().splitlines()
        assert len(lines) == 6
        assert lines[0] == 'device_id,hr,temp,spo2,bp_sys,bp_dia,created_at'
        assert lines[0].split(',') == READING_CSV_COLUMNS

    def test_row_values_in_column_order(self):
        lines = generate_readings_csv([reading(72, temp=36.6, spo2=97)]).getvalue().splitlines()
        assert lines[1] == 'device-001,72,36.6,97,120,78,2026-10-01T12:00:00+00:00'

    def test_empty_export_is_header_only(self):
        assert generate_readings_csv([]).getvalue().splitlines() == [','.join(READING_CSV_COLUMNS)]
