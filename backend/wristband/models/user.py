"""
Patient account model with encrypted email.
"""
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from wristband import db
from wristband.utils.encryption import encrypt_phi, decrypt_phi, hash_email


class User(db.Model):
    """
    Patient account. Readings reference it through ``str(user.id)``.
    The email is encrypted at rest and looked up via its HMAC hash.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)

    _email_encrypted = db.Column('email', db.Text, nullable=False)
    _email_hash = db.Column('email_hash', db.String(64), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    is_active = db.Column(db.Boolean, default=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    profile = db.relationship('UserProfile', backref='user', uselist=False,
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

    @property
    def reading_user_id(self) -> str:
        """Identifier the wristband sends as ``user_id``."""
        return str(self.id)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email using deterministic HMAC hash for lookup."""
        return User.query.filter_by(_email_hash=hash_email(email)).first()

    def __repr__(self):
        return f'<User {self.id}>'
