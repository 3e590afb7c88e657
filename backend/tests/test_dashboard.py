"""Tests for the patient dashboard, analytics, export, and profile."""
import threading

import pytest

from wristband import db
from wristband.errors import PersistenceError
from wristband.models import UserProfile


class TestDashboard:
    """GET /dashboard"""

    def test_latest_reading_per_device(self, client, patient, patient_headers, add_reading):
        add_reading(patient.id, 'device-001', hr=70, minutes_ago=10)
        add_reading(patient.id, 'device-001', hr=95, minutes_ago=1)
        add_reading(patient.id, 'device-002', hr=80, spo2=92, minutes_ago=5)
        add_reading('someone-else', 'device-003', hr=120)

        response = client.get('/dashboard', headers=patient_headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body['device_count'] == 2

        devices = {d['device_id']: d for d in body['devices']}
        assert set(devices) == {'device-001', 'device-002'}
        assert devices['device-001']['hr'] == 95
        assert devices['device-001']['status']['hr'] == 'moderate'
        assert devices['device-002']['overall_status'] == 'danger'

    def test_empty_dashboard(self, client, patient_headers):
        body = client.get('/dashboard', headers=patient_headers).get_json()
        assert body['devices'] == []
        assert body['device_count'] == 0

    def test_requires_login(self, client):
        assert client.get('/dashboard').status_code == 401

    def test_slow_fetch_times_out(self, app, client, patient_headers, monkeypatch):
        release = threading.Event()
        store = app.extensions['reading_store']

        def slow_fetch(user_id, limit):
            release.wait(2)
            return []

        monkeypatch.setattr(store, 'latest_for_user', slow_fetch)
        app.config['FETCH_TIMEOUT_SECONDS'] = 0.05

        response = client.get('/dashboard', headers=patient_headers)
        release.set()
        assert response.status_code == 504
        assert 'Connection timeout' in response.get_json()['error']

    def test_store_failure_is_500(self, app, client, patient_headers, monkeypatch):
        def broken(user_id, limit):
            raise PersistenceError('Failed to fetch readings')

        monkeypatch.setattr(app.extensions['reading_store'], 'latest_for_user', broken)
        response = client.get('/dashboard', headers=patient_headers)
        assert response.status_code == 500
        assert response.get_json() == {'error': 'Failed to fetch readings'}


class TestAnalytics:
    """GET /dashboard/analytics"""

    def test_window_and_stats(self, client, patient, patient_headers, add_reading):
        add_reading(patient.id, hr=60, minutes_ago=30)
        add_reading(patient.id, hr=80, minutes_ago=20)
        add_reading(patient.id, hr=100, minutes_ago=10)
        add_reading(patient.id, hr=150, minutes_ago=120)

        response = client.get('/dashboard/analytics?range=1h', headers=patient_headers)
        assert response.status_code == 200
        body = response.get_json()
        assert body['range'] == '1h'
        assert body['stats']['total_readings'] == 3
        assert body['stats']['avg_hr'] == 80.0
        assert body['stats']['hr_trend'] == 25.0
        assert [p['hr'] for p in body['chart']] == [60, 80, 100]
        assert sum(b['count'] for b in body['hr_distribution']) == 3

    def test_default_range_is_24h(self, client, patient, patient_headers, add_reading):
        add_reading(patient.id, minutes_ago=23 * 60)
        add_reading(patient.id, minutes_ago=25 * 60)
        body = client.get('/dashboard/analytics', headers=patient_headers).get_json()
        assert body['range'] == '24h'
        assert body['stats']['total_readings'] == 1

    def test_device_filter(self, client, patient, patient_headers, add_reading):
        add_reading(patient.id, 'device-001', hr=70, minutes_ago=3)
        add_reading(patient.id, 'device-002', hr=90, minutes_ago=2)

        body = client.get('/dashboard/analytics?device=device-002',
                          headers=patient_headers).get_json()
        assert body['devices'] == ['device-001', 'device-002']
        assert body['stats']['total_readings'] == 1
        assert body['stats']['avg_hr'] == 90.0

    def test_empty_window_has_empty_stats(self, client, patient_headers):
        body = client.get('/dashboard/analytics', headers=patient_headers).get_json()
        assert body['stats'] == {}
        assert body['chart'] == []

    def test_unknown_range_is_400(self, client, patient_headers):
        response = client.get('/dashboard/analytics?range=1y', headers=patient_headers)
        assert response.status_code == 400


class TestExport:
    """GET /dashboard/analytics/export.csv"""

    def test_csv_download(self, client, patient, patient_headers, add_reading):
        for minutes_ago in (3, 2, 1):
            add_reading(patient.id, minutes_ago=minutes_ago)

        response = client.get('/dashboard/analytics/export.csv', headers=patient_headers)
        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        disposition = response.headers['Content-Disposition']
        assert disposition.startswith('attachment; filename=wristband_data_')
        assert disposition.endswith('.csv')

        lines = response.get_data(as_text=True).splitlines()
        assert len(lines) == 4
        assert lines[0] == 'device_id,hr,temp,spo2,bp_sys,bp_dia,created_at'

    def test_nothing_to_export_is_404(self, client, patient_headers):
        response = client.get('/dashboard/analytics/export.csv', headers=patient_headers)
        assert response.status_code == 404


class TestProfile:
    """GET/PUT /dashboard/profile"""

    def test_get_profile(self, client, patient_headers):
        body = client.get('/dashboard/profile', headers=patient_headers).get_json()
        assert body['full_name'] == 'Pat Ient'
        assert body['email'] == 'patient@example.com'

    def test_update_profile(self, client, patient, patient_headers):
        response = client.put('/dashboard/profile', headers=patient_headers, json={
            'full_name': 'Patricia Ient',
            'age': '42',
            'city': 'Lyon',
            'allergies': 'penicillin',
        })
        assert response.status_code == 200
        body = response.get_json()
        assert body['full_name'] == 'Patricia Ient'
        assert body['age'] == 42
        assert body['city'] == 'Lyon'

        profile = db.session.get(UserProfile, patient.id)
        assert profile._allergies_encrypted != 'penicillin'
        assert profile.allergies == 'penicillin'

    @pytest.mark.parametrize('payload,message', [
        ({'age': 200}, 'age must be between 0 and 130'),
        ({'height': 'tall'}, 'height must be a number'),
        ({'date_of_birth': '01/02/1990'}, 'Date of birth must be in YYYY-MM-DD format'),
        ({'smoking': 'sometimes'}, 'Invalid smoking value'),
    ])
    def test_invalid_update_rejected(self, client, patient_headers, payload, message):
        response = client.put('/dashboard/profile', headers=patient_headers, json=payload)
        assert response.status_code == 400
        assert message in response.get_json()['error']
