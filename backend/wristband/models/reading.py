"""
Wristband reading model.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from sqlalchemy import event
from wristband import db


def _utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Reading:
    """Immutable vital-signs sample handed to the analytics and export code."""
    device_id: str
    user_id: str
    hr: int
    temp: float
    spo2: int
    bp_sys: int
    bp_dia: int
    created_at: datetime = None

    def to_dict(self):
        return {
            'device_id': self.device_id,
            'user_id': self.user_id,
            'hr': self.hr,
            'temp': self.temp,
            'spo2': self.spo2,
            'bp_sys': self.bp_sys,
            'bp_dia': self.bp_dia,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class WristbandReading(db.Model):
    """
    One row per reading posted by a wristband.
    Append-only: rows are never updated or deleted once flushed.
    """
    __tablename__ = 'wristband_data'

    id = db.Column(db.Integer, primary_key=True)
    device_id = db.Column(db.String(255), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)

    hr = db.Column(db.Integer, nullable=False)
    temp = db.Column(db.Float, nullable=False)
    spo2 = db.Column(db.Integer, nullable=False)
    bp_sys = db.Column(db.Integer, nullable=False)
    bp_dia = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    __table_args__ = (
        db.Index('ix_wristband_data_user_created', 'user_id', 'created_at'),
    )

    def to_reading(self) -> Reading:
        created_at = self.created_at
        # SQLite drops tzinfo on the way back out
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Reading(
            device_id=self.device_id,
            user_id=self.user_id,
            hr=self.hr,
            temp=self.temp,
            spo2=self.spo2,
            bp_sys=self.bp_sys,
            bp_dia=self.bp_dia,
            created_at=created_at,
        )

    def to_dict(self):
        return self.to_reading().to_dict()

    def __repr__(self):
        return f'<WristbandReading {self.id}: {self.device_id} hr={self.hr}>'


class ImmutableReadingError(RuntimeError):
    pass


@event.listens_for(WristbandReading, 'before_update')
def _reject_update(mapper, connection, target):
    raise ImmutableReadingError(f'Reading {target.id} is immutable once persisted')
