"""
Seed a demo patient and 20 wristband readings.
Run from backend/: SEED_DATABASE_URL=... python seed.py

Uses the privileged store URL in SEED_DATABASE_URL; the API itself never
reads that variable.
"""
import os
import sys
from datetime import datetime, timedelta, timezone
sys.path.insert(0, os.path.dirname(__file__))

from wristband import create_app, db
from wristband.models import User, UserProfile, WristbandReading

DEMO_EMAIL = 'demo.user@example.com'
DEMO_PASSWORD = 'DemoPass123!'
DEMO_FULL_NAME = 'Demo User'

# (device_id, hr, temp, spo2, bp_sys, bp_dia, minutes_ago)
DEMO_READINGS = [
    ('device-001', 72, 36.6, 98, 120, 80, 120),
    ('device-001', 75, 36.7, 97, 122, 82, 110),
    ('device-001', 70, 36.5, 99, 118, 78, 100),
    ('device-002', 80, 36.9, 96, 125, 85, 90),
    ('device-002', 78, 36.8, 97, 124, 84, 80),
    ('device-002', 76, 36.7, 97, 123, 83, 70),
    ('device-003', 65, 36.4, 99, 115, 75, 60),
    ('device-003', 67, 36.5, 99, 116, 76, 50),
    ('device-003', 69, 36.6, 98, 117, 77, 40),
    ('device-001', 74, 36.7, 97, 121, 81, 30),
    ('device-004', 90, 37.1, 95, 130, 88, 28),
    ('device-004', 88, 37.0, 95, 129, 87, 26),
    ('device-005', 60, 36.3, 99, 110, 70, 24),
    ('device-005', 62, 36.4, 99, 112, 72, 22),
    ('device-001', 73, 36.6, 98, 120, 80, 20),
    ('device-002', 77, 36.8, 97, 123, 83, 18),
    ('device-003', 68, 36.5, 98, 116, 76, 15),
    ('device-004', 85, 36.9, 96, 128, 86, 10),
    ('device-005', 63, 36.4, 99, 113, 73, 5),
    ('device-001', 71, 36.6, 98, 119, 79, 2),
]


def create_demo_user():
    user = User.find_by_email(DEMO_EMAIL)
    if user:
        print(f"  Demo user already exists (id={user.id}), skipping.")
        return user

    user = User()
    user.email = DEMO_EMAIL
    user.set_password(DEMO_PASSWORD)
    db.session.add(user)
    db.session.flush()
    UserProfile.ensure_for_user(user, full_name=DEMO_FULL_NAME)
    db.session.commit()
    print(f"  Created demo user (id={user.id}, email={DEMO_EMAIL})")
    return user


def seed_readings(user):
    now = datetime.now(timezone.utc)
    for device_id, hr, temp, spo2, bp_sys, bp_dia, minutes_ago in DEMO_READINGS:
        db.session.add(WristbandReading(
            device_id=device_id,
            user_id=user.reading_user_id,
            hr=hr,
            temp=temp,
            spo2=spo2,
            bp_sys=bp_sys,
            bp_dia=bp_dia,
            created_at=now - timedelta(minutes=minutes_ago),
        ))
    db.session.commit()
    print(f"  Inserted {len(DEMO_READINGS)} readings for user_id={user.reading_user_id}")


def seed():
    database_url = os.getenv('SEED_DATABASE_URL')
    if not database_url:
        print('SEED_DATABASE_URL is required (privileged store credentials).')
        sys.exit(1)

    app = create_app({'SQLALCHEMY_DATABASE_URI': database_url})
    with app.app_context():
        db.create_all()
        user = create_demo_user()
        seed_readings(user)

        print("\nDone. Login with:")
        print(f"  Email: {DEMO_EMAIL}")
        print(f"  Password: {DEMO_PASSWORD}")


if __name__ == "__main__":
    seed()
