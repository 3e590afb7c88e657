"""
Patient profile model with encrypted PHI fields.
"""
import logging
from datetime import datetime
from wristband import db
from wristband.utils.encryption import encrypt_phi, decrypt_phi

logger = logging.getLogger(__name__)

# Stored as ciphertext; exposed through properties
PHI_FIELDS = (
    'full_name',
    'date_of_birth',
    'phone',
    'address',
    'existing_diseases',
    'medications',
    'allergies',
    'family_history',
)

PLAIN_FIELDS = (
    'age',
    'gender',
    'blood_group',
    'height',
    'weight',
    'smoking',
    'alcohol',
    'diet',
    'exercise',
    'sleep_hours',
    'occupation',
    'city',
    'country',
    'region',
)


def _phi_property(field):
    column = f'_{field}_encrypted'

    def getter(self):
        value = getattr(self, column)
        return decrypt_phi(value) if value else None

    def setter(self, value):
        setattr(self, column, encrypt_phi(str(value)) if value else None)

    return property(getter, setter)


class UserProfile(db.Model):
    """
    Health and demographic profile, one per patient.
    Identifying and medical free text is encrypted at rest.
    """
    __tablename__ = 'user_profiles'

    id = db.Column(db.Integer, db.ForeignKey('users.id'), primary_key=True)

    _full_name_encrypted = db.Column('full_name', db.Text, nullable=True)
    _date_of_birth_encrypted = db.Column('date_of_birth', db.Text, nullable=True)
    _phone_encrypted = db.Column('phone', db.Text, nullable=True)
    _address_encrypted = db.Column('address', db.Text, nullable=True)
    _existing_diseases_encrypted = db.Column('existing_diseases', db.Text, nullable=True)
    _medications_encrypted = db.Column('medications', db.Text, nullable=True)
    _allergies_encrypted = db.Column('allergies', db.Text, nullable=True)
    _family_history_encrypted = db.Column('family_history', db.Text, nullable=True)

    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(50), nullable=True)
    blood_group = db.Column(db.String(10), nullable=True)
    height = db.Column(db.Float, nullable=True)  # cm
    weight = db.Column(db.Float, nullable=True)  # kg
    smoking = db.Column(db.String(20), default='no')
    alcohol = db.Column(db.String(20), default='no')
    diet = db.Column(db.String(200), nullable=True)
    exercise = db.Column(db.String(200), nullable=True)
    sleep_hours = db.Column(db.Float, nullable=True)
    occupation = db.Column(db.String(200), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    region = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    full_name = _phi_property('full_name')
    date_of_birth = _phi_property('date_of_birth')
    phone = _phi_property('phone')
    address = _phi_property('address')
    existing_diseases = _phi_property('existing_diseases')
    medications = _phi_property('medications')
    allergies = _phi_property('allergies')
    family_history = _phi_property('family_history')

    @classmethod
    def ensure_for_user(cls, user, full_name=None):
        """Return the user's profile, creating an empty one if missing."""
        profile = db.session.get(cls, user.id)
        if profile is None:
            profile = cls(id=user.id)
            profile.full_name = full_name or ''
            db.session.add(profile)
            logger.info('Created missing profile for user_id=%s', user.id)
        return profile

    def to_dict(self):
        """Wraps PHI decryption per field so one bad value doesn't hide the rest."""
        data = {'id': self.id}
        for field in PLAIN_FIELDS:
            data[field] = getattr(self, field)
        for field in PHI_FIELDS:
            try:
                data[field] = getattr(self, field)
            except Exception:
                logger.error('Decryption error for profile_id=%s field=%s', self.id, field,
                             exc_info=True)
                data[field] = None
        data['updated_at'] = self.updated_at.isoformat() if self.updated_at else None
        return data

    def __repr__(self):
        return f'<UserProfile {self.id}>'
