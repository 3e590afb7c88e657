"""
Live dashboard updates over Socket.IO.

Every connected patient dashboard sits in a room named after the patient.
Inserted readings and a periodic poll both ask for a refresh; a refresh
re-fetches the dashboard snapshot and emits it to that room. Requests that
arrive while a refresh for the same patient is running collapse into a
single follow-up refresh.
"""
import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime
from wristband.errors import FetchTimeoutError, WristbandError

logger = logging.getLogger(__name__)

NAMESPACE = '/dashboard'

INITIAL = 'initial'
PUSH = 'push'
POLL = 'poll'


def patient_room(user_id) -> str:
    return f'patient:{user_id}'


@dataclass(frozen=True)
class ChangeEvent:
    user_id: str
    device_id: str
    created_at: datetime = None

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'device_id': self.device_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class RefreshCoalescer:
    """At most one running refresh per patient, plus at most one queued."""

    def __init__(self):
        self._lock = threading.Lock()
        self._running = set()
        self._pending = set()

    def begin(self, key) -> bool:
        """True if the caller should refresh now.

        False means a refresh is already running; it will run once more
        when it finishes.
        """
        with self._lock:
            if key in self._running:
                self._pending.add(key)
                return False
            self._running.add(key)
            return True

    def finish(self, key) -> bool:
        """True if requests came in meanwhile and the caller must refresh again."""
        with self._lock:
            if key in self._pending:
                self._pending.discard(key)
                return True
            self._running.discard(key)
            return False


class LiveDashboard:
    """Pushes dashboard snapshots to connected patients.

    ``snapshot(app, user_id)`` builds the payload. Refreshes run through
    ``spawn`` (``socketio.start_background_task`` by default).
    """

    def __init__(self, socketio, app, snapshot, poll_interval):
        self.socketio = socketio
        self.app = app
        self.snapshot = snapshot
        self.poll_interval = poll_interval
        self.spawn = socketio.start_background_task
        self._coalescer = RefreshCoalescer()
        self._lock = threading.Lock()
        self._listeners = {}  # sid -> user_id
        self._poller = None
        self._stopped = threading.Event()

    def attach(self, sid, user_id):
        with self._lock:
            self._listeners[sid] = str(user_id)
            start_poller = self._poller is None
            if start_poller:
                self._poller = self.socketio.start_background_task(self._poll_forever)
        if start_poller:
            logger.info('Dashboard poll loop started (every %ss)', self.poll_interval)

    def detach(self, sid):
        with self._lock:
            self._listeners.pop(sid, None)

    def watched_users(self) -> set:
        with self._lock:
            return set(self._listeners.values())

    def render(self, user_id, reason):
        """(event name, payload) for one patient; a failed fetch becomes ``refresh_error``."""
        try:
            payload = self.snapshot(self.app, user_id)
        except WristbandError as e:
            return 'refresh_error', {'error': e.message, 'retryable': True}
        payload['reason'] = reason
        return 'snapshot', payload

    def publish(self, event: ChangeEvent):
        """Announce a stored reading to its patient's room and refresh them."""
        self.socketio.emit('change', event.to_dict(),
                           to=patient_room(event.user_id), namespace=NAMESPACE)
        self.request_refresh(event.user_id, PUSH)

    def request_refresh(self, user_id, reason):
        user_id = str(user_id)
        if user_id not in self.watched_users():
            return
        if self._coalescer.begin(user_id):
            self.spawn(self._refresh, user_id, reason)

    def poll_once(self):
        for user_id in self.watched_users():
            self.request_refresh(user_id, POLL)

    def stop(self):
        self._stopped.set()

    def _refresh(self, user_id, reason):
        while True:
            try:
                event, payload = self.render(user_id, reason)
                self.socketio.emit(event, payload, to=patient_room(user_id), namespace=NAMESPACE)
            except Exception:
                logger.exception('Dashboard refresh failed for user_id=%s', user_id)
            if not self._coalescer.finish(user_id):
                return
            reason = PUSH

    def _poll_forever(self):
        while not self._stopped.wait(self.poll_interval):
            self.poll_once()


def call_with_deadline(fn, timeout, executor):
    """Run ``fn`` on ``executor`` and wait at most ``timeout`` seconds.

    On expiry the call keeps running in the background and its late result
    is dropped; the caller gets FetchTimeoutError.
    """
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning('Fetch exceeded %ss deadline', timeout)
        raise FetchTimeoutError(
            f'Connection timeout after {timeout:g} seconds. Please try again.'
        )
