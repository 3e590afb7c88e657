"""
Access layer for the wristband_data table.

A ReadingStore is built around an explicit SQLAlchemy session and handed to
whoever needs it; the app keeps one in ``app.extensions['reading_store']``.
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from wristband.errors import PersistenceError
from wristband.models.reading import WristbandReading

logger = logging.getLogger(__name__)


class ReadingStore:

    def __init__(self, session):
        self.session = session

    def insert(self, device_id, user_id, hr, temp, spo2, bp_sys, bp_dia):
        """Append one reading and commit. Returns the stored Reading."""
        row = WristbandReading(
            device_id=device_id,
            user_id=user_id,
            hr=hr,
            temp=temp,
            spo2=spo2,
            bp_sys=bp_sys,
            bp_dia=bp_dia,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Database error inserting reading for device %s: %s', device_id, e)
            raise PersistenceError('Database error') from e
        return row.to_reading()

    def _fetch(self, query):
        try:
            return [row.to_reading() for row in query.all()]
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error('Database error reading wristband data: %s', e)
            raise PersistenceError('Failed to fetch readings') from e

    def latest_for_user(self, user_id, limit):
        """Newest first."""
        query = (self.session.query(WristbandReading)
                 .filter(WristbandReading.user_id == str(user_id))
                 .order_by(WristbandReading.created_at.desc(), WristbandReading.id.desc())
                 .limit(limit))
        return self._fetch(query)

    def window_for_user(self, user_id, since):
        """Readings created at or after ``since``, oldest first."""
        query = (self.session.query(WristbandReading)
                 .filter(WristbandReading.user_id == str(user_id),
                         WristbandReading.created_at >= since)
                 .order_by(WristbandReading.created_at.asc(), WristbandReading.id.asc()))
        return self._fetch(query)

    def latest_overall(self, limit):
        """Newest readings across every patient, newest first."""
        query = (self.session.query(WristbandReading)
                 .order_by(WristbandReading.created_at.desc(), WristbandReading.id.desc())
                 .limit(limit))
        return self._fetch(query)

    def count(self, user_id=None):
        query = self.session.query(WristbandReading)
        if user_id is not None:
            query = query.filter(WristbandReading.user_id == str(user_id))
        return query.count()
