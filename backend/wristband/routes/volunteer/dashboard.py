"""Volunteer overview of every patient's latest readings."""
from flask import current_app, jsonify
from wristband.utils import analytics
from wristband.utils.audit_logger import audit_log
from wristband.utils.auth import volunteer_required
from wristband.utils.classifier import VitalStatus
from wristband.utils.vital_ranges import DASHBOARD_REFRESH_INTERVAL, VOLUNTEER_READING_LIMIT
from wristband.routes.dashboard import fetch_with_deadline
from . import volunteer_bp

_TRIAGE_ORDER = {
    VitalStatus.DANGER.value: 0,
    VitalStatus.MODERATE.value: 1,
    VitalStatus.NORMAL.value: 2,
}


@volunteer_bp.route('/dashboard', methods=['GET'])
@volunteer_required
def get_dashboard():
    """Latest reading per patient/device, most severe first, with triage counts."""
    app = current_app._get_current_object()
    readings = fetch_with_deadline(
        app, lambda store: store.latest_overall(VOLUNTEER_READING_LIMIT)
    )
    latest = analytics.latest_by_patient_device(readings)

    patients = [analytics.reading_with_status(r) for r in latest]
    patients.sort(key=lambda p: (_TRIAGE_ORDER[p['overall_status']], p['user_id'], p['device_id']))

    audit_log('READ', 'volunteer_dashboard', details={'patients': len(patients)})

    return jsonify({
        'patients': patients,
        'active_devices': len(patients),
        'analytics': analytics.status_breakdown(latest),
        'refresh_seconds': DASHBOARD_REFRESH_INTERVAL,
    }), 200
