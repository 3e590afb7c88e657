"""Shared fixtures: an app on a throwaway SQLite file, accounts and tokens."""
import base64
from datetime import datetime, timedelta, timezone

import pytest

from wristband import create_app, db
from wristband.models import User, UserProfile, Volunteer, WristbandReading
from wristband.utils.auth import PATIENT, VOLUNTEER, generate_token

TEST_PHI_KEY = base64.b64encode(b'0123456789abcdef0123456789abcdef').decode()


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'wristband.db'}",
        'JWT_SECRET_KEY': 'test-jwt-secret',
        'JWT_ACCESS_TOKEN_EXPIRES': 3600,
        'PHI_ENCRYPTION_KEY': TEST_PHI_KEY,
        'AUDIT_LOG_FILE': str(tmp_path / 'audit.log'),
        'FETCH_TIMEOUT_SECONDS': 5,
        'DASHBOARD_POLL_SECONDS': 60,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    app.extensions['live_dashboard'].stop()
    app.extensions['fetch_executor'].shutdown(wait=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def patient(app):
    user = User()
    user.email = 'patient@example.com'
    user.set_password('correct-horse')
    db.session.add(user)
    db.session.flush()
    UserProfile.ensure_for_user(user, full_name='Pat Ient')
    db.session.commit()
    return user


@pytest.fixture
def patient_headers(patient):
    return {'Authorization': f'Bearer {generate_token(patient.id, PATIENT)}'}


@pytest.fixture
def volunteer(app):
    volunteer = Volunteer(name='Val Unteer')
    volunteer.email = 'volunteer@example.com'
    volunteer.set_password('battery-staple')
    db.session.add(volunteer)
    db.session.commit()
    return volunteer


@pytest.fixture
def volunteer_headers(volunteer):
    return {'Authorization': f'Bearer {generate_token(volunteer.id, VOLUNTEER)}'}


@pytest.fixture
def add_reading(app):
    """Insert a reading directly, ``minutes_ago`` before now."""
    def _add(user_id, device_id='device-001', hr=75, temp=36.8, spo2=98,
             bp_sys=120, bp_dia=75, minutes_ago=0):
        row = WristbandReading(
            device_id=device_id,
            user_id=str(user_id),
            hr=hr,
            temp=temp,
            spo2=spo2,
            bp_sys=bp_sys,
            bp_dia=bp_dia,
            created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        )
        db.session.add(row)
        db.session.commit()
        return row
    return _add
