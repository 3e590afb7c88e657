"""
Authentication utilities for JWT bearer tokens.

Patients and volunteers both authenticate with a bearer token; the ``role``
claim decides which routes the token opens.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import current_app, request, g
from wristband.errors import AuthenticationError

PATIENT = 'patient'
VOLUNTEER = 'volunteer'


def _jwt_secret() -> str:
    secret = current_app.config.get('JWT_SECRET_KEY') or os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_token(account_id: int, role: str) -> str:
    """Issue a signed token for a patient or volunteer."""
    expires = int(current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES')
                  or os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600))
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(account_id),
        'role': role,
        'jti': secrets.token_hex(16),
        'exp': now + timedelta(seconds=expires),
        'iat': now,
    }
    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> dict:
    """Decode and validate a token; None when expired or tampered with."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def _bearer_token() -> str:
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        raise AuthenticationError('Missing authorization header')
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise AuthenticationError('Invalid authorization header format')
    return parts[1]


def _load_account(role: str, account_id):
    if role == PATIENT:
        from wristband.models.user import User
        from wristband import db
        return db.session.get(User, account_id)
    if role == VOLUNTEER:
        from wristband.models.volunteer import Volunteer
        from wristband import db
        return db.session.get(Volunteer, account_id)
    return None


def authenticate(role: str):
    """Resolve the Authorization bearer token into an active account of ``role``."""
    return authenticate_token(_bearer_token(), role)


def authenticate_token(token: str, role: str):
    """Resolve ``token`` into an active account of ``role``.

    Populates ``g.account``, ``g.account_id``, ``g.role``, ``g.subject``,
    ``g.token_jti`` and ``g.token_exp``.
    """
    if not token:
        raise AuthenticationError('Missing token')
    payload = decode_token(token)
    if not payload:
        raise AuthenticationError('Invalid or expired token')
    if payload.get('role') != role:
        raise AuthenticationError('Token is not valid for this resource')

    from wristband.models.revoked_token import RevokedToken
    if RevokedToken.is_token_revoked(payload.get('jti')):
        raise AuthenticationError('Token has been revoked')

    try:
        account_id = int(payload.get('sub'))
    except (TypeError, ValueError):
        raise AuthenticationError('Invalid or expired token')

    account = _load_account(role, account_id)
    if not account or not account.is_active:
        raise AuthenticationError('Account is deactivated')

    g.account = account
    g.account_id = account_id
    g.role = role
    g.subject = f'{role}:{account_id}'
    g.token_jti = payload.get('jti')
    g.token_exp = payload.get('exp')
    return account


def patient_required(f):
    """Decorator to require a valid patient session."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        authenticate(PATIENT)
        return f(*args, **kwargs)
    return wrapper


def volunteer_required(f):
    """Decorator to require a valid volunteer session."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        authenticate(VOLUNTEER)
        return f(*args, **kwargs)
    return wrapper


def revoke_current_token():
    from wristband.models.revoked_token import RevokedToken
    RevokedToken.revoke(g.token_jti, g.subject, g.token_exp)
