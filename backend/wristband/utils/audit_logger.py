"""
Audit trail for access to patient vitals and profile data.
Every entry records who (patient or volunteer), what, and from where.
"""
import os
import logging
import structlog
from datetime import datetime, timezone
from flask import current_app, request, g, has_request_context
from functools import wraps

AUDIT_LOGGER_NAME = 'audit'

# One JSON object per line
_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]


def _attach_file_handler(audit_logger, log_file):
    """Add a file handler for ``log_file`` unless one is already attached."""
    target = os.path.abspath(log_file)
    for handler in audit_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return
    handler = logging.FileHandler(log_file)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter('%(message)s'))
    audit_logger.addHandler(handler)


def setup_audit_logging(app):
    """Route audit events to AUDIT_LOG_FILE as structured JSON."""
    log_file = app.config.get('AUDIT_LOG_FILE') or os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    structlog.configure(
        processors=_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
    audit_logger.setLevel(logging.INFO)
    _attach_file_handler(audit_logger, log_file)

    app.config['AUDIT_LOGGER'] = structlog.get_logger(AUDIT_LOGGER_NAME)


def get_audit_logger():
    return current_app.config.get('AUDIT_LOGGER', structlog.get_logger(AUDIT_LOGGER_NAME))


def audit_log(action: str, resource_type: str, resource_id: str = None,
              details: dict = None, actor: str = None):
    """
    Log an audit event.

    Args:
        action: CREATE, READ, UPDATE, EXPORT, LOGIN, LOGIN_FAILED, LOGOUT
        resource_type: reading, profile, volunteer_dashboard, ...
        resource_id: ID of the specific resource (optional)
        details: Additional details about the action (optional)
        actor: "<role>:<id>" of the caller (defaults to the authenticated subject)
    """
    logger = get_audit_logger()

    if actor is None:
        actor = getattr(g, 'subject', 'anonymous')

    if has_request_context():
        client_ip = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent', 'unknown')
    else:
        client_ip = user_agent = 'offline'

    logger.info(
        "audit_event",
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        actor=actor,
        client_ip=client_ip,
        user_agent=user_agent,
        details=details or {},
    )


def audit_phi_access(action: str, resource_type: str):
    """Decorator that logs PHI access for a route before it runs."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            resource_id = kwargs.get('user_id') or getattr(g, 'account_id', None)
            audit_log(action, resource_type, resource_id=str(resource_id) if resource_id else None)
            return f(*args, **kwargs)
        return wrapper
    return decorator
