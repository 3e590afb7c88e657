"""
DB-backed rate limiting for the credential endpoints.
"""
from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify


class AttemptLimiter:
    """Allows ``max_attempts`` per client IP inside a sliding window."""

    def __init__(self, bucket, max_attempts=5, window_seconds=60):
        self.bucket = bucket
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    def is_limited(self, client_key):
        from wristband.models.rate_limit_entry import RateLimitEntry
        cutoff = datetime.utcnow() - timedelta(seconds=self.window_seconds)
        return RateLimitEntry.attempts_since(client_key, self.bucket, cutoff) >= self.max_attempts

    def record(self, client_key):
        from wristband.models.rate_limit_entry import RateLimitEntry
        RateLimitEntry.record(client_key, self.bucket)


# 5 login attempts per minute per IP, shared by patients and volunteers
login_limiter = AttemptLimiter('login', max_attempts=5, window_seconds=60)

# 3 signups per minute per IP
signup_limiter = AttemptLimiter('signup', max_attempts=3, window_seconds=60)


def rate_limit(limiter, message='Too many requests. Try again later.'):
    """Reject with 429 once the client IP has used up the limiter's window."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            client_ip = request.remote_addr or 'unknown'
            if limiter.is_limited(client_ip):
                return jsonify({'error': message}), 429
            limiter.record(client_ip)
            return f(*args, **kwargs)
        return wrapper
    return decorator
