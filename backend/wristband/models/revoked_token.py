"""
Denylist of logged-out bearer tokens.
"""
from datetime import datetime, timezone
from wristband import db


class RevokedToken(db.Model):
    """One row per token id (``jti``) that must no longer authenticate.

    Shared by patients and volunteers; ``subject`` is "<role>:<id>".
    """
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    subject = db.Column(db.String(80), nullable=False)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    @classmethod
    def is_token_revoked(cls, jti) -> bool:
        if not jti:
            return False
        return db.session.query(cls.id).filter_by(jti=jti).first() is not None

    @classmethod
    def revoke(cls, jti, subject, exp_timestamp):
        """Add ``jti`` to the denylist until the token would have expired anyway."""
        if cls.is_token_revoked(jti):
            return
        expires_at = datetime.fromtimestamp(exp_timestamp, timezone.utc).replace(tzinfo=None)
        db.session.add(cls(jti=jti, subject=subject, expires_at=expires_at))
        db.session.commit()

    @classmethod
    def cleanup_expired(cls) -> int:
        """Drop entries whose token has expired; returns how many went."""
        removed = cls.query.filter(cls.expires_at < datetime.utcnow()).delete()
        db.session.commit()
        return removed

    def __repr__(self):
        return f'<RevokedToken {self.subject} {self.jti}>'
