"""
Socket.IO handlers for the live patient dashboard (namespace /dashboard).

Clients connect with ``auth={'token': <patient JWT>}`` and receive:
  snapshot       latest reading per device with statuses, plus ``reason``
                 (initial, push or poll)
  change         a reading was just stored for this patient
  refresh_error  the snapshot fetch failed; the next push or poll retries
"""
import logging
from flask import current_app, request
from flask_socketio import ConnectionRefusedError, emit, join_room
from wristband import socketio
from wristband.errors import AuthenticationError
from wristband.utils.audit_logger import audit_log
from wristband.utils.auth import PATIENT, authenticate_token
from wristband.utils.realtime import INITIAL, NAMESPACE, patient_room

logger = logging.getLogger(__name__)


def _connect_token(auth):
    if isinstance(auth, dict) and auth.get('token'):
        return auth['token']
    header = request.headers.get('Authorization', '')
    parts = header.split()
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1]
    return None


@socketio.on('connect', namespace=NAMESPACE)
def on_connect(auth=None):
    try:
        user = authenticate_token(_connect_token(auth), PATIENT)
    except AuthenticationError as e:
        logger.info('Refused dashboard socket: %s', e.message)
        raise ConnectionRefusedError(e.message)

    user_id = user.reading_user_id
    live = current_app.extensions['live_dashboard']
    join_room(patient_room(user_id))
    live.attach(request.sid, user_id)
    audit_log('READ', 'reading', resource_id=user_id, details={'channel': 'socket'})

    event, payload = live.render(user_id, INITIAL)
    emit(event, payload)


@socketio.on('disconnect', namespace=NAMESPACE)
def on_disconnect(*args):
    current_app.extensions['live_dashboard'].detach(request.sid)
