"""
Device ingestion: validate one reading, fill in BP, persist it once.
"""
import logging
from wristband.errors import ValidationError
from wristband.utils.bp_estimator import estimate_blood_pressure
from wristband.utils.realtime import ChangeEvent
from wristband.utils.validators import parse_ingest_params

logger = logging.getLogger(__name__)

INVALID_PARAMS_MESSAGE = (
    'Missing or invalid parameters (device_id, user_id, and valid vital signs required)'
)


class IngestionHandler:
    """Validator -> BP Estimator -> single insert -> Socket.IO change event.

    Not idempotent: two identical requests store two readings.
    """

    def __init__(self, store, live=None):
        self.store = store
        self.live = live

    def ingest(self, args):
        values, errors = parse_ingest_params(args)
        if errors:
            raise ValidationError(INVALID_PARAMS_MESSAGE, errors=errors)

        if values['bp_sys'] is None:
            values['bp_sys'], values['bp_dia'] = estimate_blood_pressure(values['hr'], values['spo2'])

        reading = self.store.insert(**values)
        logger.info('Stored reading from device %s', reading.device_id)

        if self.live is not None:
            self.live.publish(ChangeEvent(
                user_id=reading.user_id,
                device_id=reading.device_id,
                created_at=reading.created_at,
            ))
        return reading
