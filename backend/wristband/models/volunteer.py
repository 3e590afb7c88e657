"""
Volunteer (caregiver) accounts and their patient assignments.
"""
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from wristband import db
from wristband.utils.encryption import encrypt_phi, decrypt_phi, hash_email


class Volunteer(db.Model):
    """
    Caregiver with read access across all patients' readings.
    Credentials are only ever hashed and checked on the server.
    """
    __tablename__ = 'volunteers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)

    _email_encrypted = db.Column('email', db.Text, nullable=False)
    _email_hash = db.Column('email_hash', db.String(64), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    assignments = db.relationship('VolunteerAssignment', backref='volunteer', lazy='dynamic',
                                  cascade='all, delete-orphan')

    @property
    def email(self) -> str:
        return decrypt_phi(self._email_encrypted) if self._email_encrypted else None

    @email.setter
    def email(self, value: str):
        self._email_encrypted = encrypt_phi(value) if value else None
        self._email_hash = hash_email(value) if value else None

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return bool(password) and check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'is_active': self.is_active,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def find_by_email(email: str):
        return Volunteer.query.filter_by(_email_hash=hash_email(email)).first()

    def __repr__(self):
        return f'<Volunteer {self.id}>'


class VolunteerAssignment(db.Model):
    """Links a volunteer to a patient they look after."""
    __tablename__ = 'volunteer_user_assignments'

    id = db.Column(db.Integer, primary_key=True)
    volunteer_id = db.Column(db.Integer, db.ForeignKey('volunteers.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User')

    __table_args__ = (
        db.UniqueConstraint('volunteer_id', 'user_id', name='uq_volunteer_user'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'volunteer_id': self.volunteer_id,
            'user_id': self.user_id,
            'user_email': self.user.email if self.user else None,
            'notes': self.notes or '',
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<VolunteerAssignment volunteer={self.volunteer_id} user={self.user_id}>'
