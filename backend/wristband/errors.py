"""
Error taxonomy shared by the ingestion path and the dashboard views.

Every error carries the HTTP status it is surfaced with; the app factory
registers a handler that renders any WristbandError as {'error': message}.
"""


class WristbandError(Exception):
    """Base class for errors that are reported back to the caller."""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(WristbandError):
    """Missing or out-of-range vitals or identifiers."""
    status_code = 400
    default_message = 'Invalid request'

    def __init__(self, message: str = None, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(WristbandError):
    """No active session, or the session token is not usable."""
    status_code = 401
    default_message = 'Not authenticated. Please login again.'


class PersistenceError(WristbandError):
    """The store rejected a write or a read failed."""
    status_code = 500
    default_message = 'Database error'


class FetchTimeoutError(WristbandError, TimeoutError):
    """A read did not finish before the fetch deadline."""
    status_code = 504
    default_message = 'Request timed out. Please try again.'
