"""
Patient dashboard routes: latest readings, analytics, CSV export and profile.
The live Socket.IO view in routes/live.py reuses build_dashboard_snapshot.
"""
import logging
import time
from flask import Blueprint, Response, current_app, g, jsonify, request
from wristband import db
from wristband.models import UserProfile
from wristband.models.user_profile import PHI_FIELDS, PLAIN_FIELDS
from wristband.utils import analytics
from wristband.utils.audit_logger import audit_log, audit_phi_access
from wristband.utils.auth import patient_required
from wristband.utils.export import generate_readings_csv, export_filename
from wristband.utils.realtime import call_with_deadline
from wristband.utils.validators import validate_profile_update
from wristband.utils.vital_ranges import (
    ANALYTICS_REFRESH_INTERVAL, DASHBOARD_READING_LIMIT, DEFAULT_TIME_RANGE,
)

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)


def fetch_with_deadline(app, query):
    """Run ``query(store)`` on the fetch pool under the configured deadline."""
    def run():
        with app.app_context():
            return query(app.extensions['reading_store'])

    return call_with_deadline(
        run,
        app.config['FETCH_TIMEOUT_SECONDS'],
        app.extensions['fetch_executor'],
    )


def build_dashboard_snapshot(app, user_id) -> dict:
    """Latest reading per device, each with its vital statuses."""
    readings = fetch_with_deadline(
        app, lambda store: store.latest_for_user(user_id, DASHBOARD_READING_LIMIT)
    )
    latest = analytics.latest_by_device(readings)
    return {
        'devices': [analytics.reading_with_status(r) for r in latest.values()],
        'device_count': len(latest),
        'refresh_seconds': app.config['DASHBOARD_POLL_SECONDS'],
    }


def _window_readings(app, user_id):
    range_key = request.args.get('range', DEFAULT_TIME_RANGE)
    since = analytics.time_window_start(range_key)
    readings = fetch_with_deadline(app, lambda store: store.window_for_user(user_id, since))
    device = request.args.get('device', analytics.ALL_DEVICES)
    return range_key, device, readings, analytics.filter_by_device(readings, device)


@dashboard_bp.route('', methods=['GET'])
@patient_required
@audit_phi_access('READ', 'reading')
def get_dashboard():
    app = current_app._get_current_object()
    return jsonify(build_dashboard_snapshot(app, g.account.reading_user_id)), 200


@dashboard_bp.route('/analytics', methods=['GET'])
@patient_required
@audit_phi_access('READ', 'reading')
def get_analytics():
    """Stats, HR histogram and chart series for a time window and device."""
    app = current_app._get_current_object()
    range_key, device, readings, filtered = _window_readings(app, g.account.reading_user_id)

    return jsonify({
        'range': range_key,
        'device': device,
        'devices': analytics.device_ids(readings),
        'stats': analytics.compute_stats(filtered),
        'hr_distribution': analytics.hr_distribution(filtered),
        'chart': analytics.chart_series(filtered),
        'refresh_seconds': ANALYTICS_REFRESH_INTERVAL,
    }), 200


@dashboard_bp.route('/analytics/export.csv', methods=['GET'])
@patient_required
def export_csv():
    app = current_app._get_current_object()
    range_key, device, _, filtered = _window_readings(app, g.account.reading_user_id)
    if not filtered:
        return jsonify({'error': 'No readings to export'}), 404

    audit_log('EXPORT', 'reading', resource_id=str(g.account_id),
              details={'range': range_key, 'device': device, 'count': len(filtered)})

    output = generate_readings_csv(filtered)
    filename = export_filename(int(time.time() * 1000))
    return Response(
        output.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@dashboard_bp.route('/profile', methods=['GET'])
@patient_required
@audit_phi_access('READ', 'profile')
def get_profile():
    profile = UserProfile.ensure_for_user(g.account)
    db.session.commit()
    data = profile.to_dict()
    data['email'] = g.account.email
    return jsonify(data), 200


@dashboard_bp.route('/profile', methods=['PUT'])
@patient_required
@audit_phi_access('UPDATE', 'profile')
def update_profile():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_profile_update(data)
    if errors:
        return jsonify({'error': errors}), 400

    profile = UserProfile.ensure_for_user(g.account)
    changed = []

    for field in PHI_FIELDS:
        if field in data:
            value = data[field]
            setattr(profile, field, str(value).strip() if value else None)
            changed.append(field)

    numeric = {'age': int, 'height': float, 'weight': float, 'sleep_hours': float}
    for field in PLAIN_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if value in (None, ''):
            value = None
        elif field in numeric:
            value = numeric[field](value)
        else:
            value = str(value).strip()
        setattr(profile, field, value)
        changed.append(field)

    db.session.commit()

    # Field names only, never values
    audit_log('UPDATE', 'profile', resource_id=str(g.account_id),
              details={'fields': changed})

    return jsonify(profile.to_dict()), 200
