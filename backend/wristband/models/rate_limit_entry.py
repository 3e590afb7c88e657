"""
Attempt log backing the login/signup rate limiter.
"""
from datetime import datetime, timedelta
from wristband import db


class RateLimitEntry(db.Model):
    """One attempt against a limited endpoint, kept so limits survive restarts."""
    __tablename__ = 'rate_limit_entries'

    id = db.Column(db.Integer, primary_key=True)
    client_key = db.Column(db.String(255), nullable=False)
    bucket = db.Column(db.String(64), nullable=False)
    attempted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_rate_limit_client_bucket_ts', 'client_key', 'bucket', 'attempted_at'),
    )

    @classmethod
    def attempts_since(cls, client_key, bucket, cutoff):
        return cls.query.filter(
            cls.client_key == client_key,
            cls.bucket == bucket,
            cls.attempted_at > cutoff,
        ).count()

    @classmethod
    def record(cls, client_key, bucket):
        db.session.add(cls(client_key=client_key, bucket=bucket, attempted_at=datetime.utcnow()))
        db.session.commit()

    @classmethod
    def cleanup_older_than(cls, seconds):
        cutoff = datetime.utcnow() - timedelta(seconds=seconds)
        count = cls.query.filter(cls.attempted_at < cutoff).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<RateLimitEntry {self.bucket}:{self.client_key}>'
