"""
Patient account routes: signup, login, logout, current session.
"""
import logging
from datetime import datetime
from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import IntegrityError
from wristband import db
from wristband.models import User, UserProfile
from wristband.utils.audit_logger import audit_log
from wristband.utils.auth import PATIENT, generate_token, patient_required, revoke_current_token
from wristband.utils.encryption import hash_email
from wristband.utils.rate_limiter import rate_limit, login_limiter, signup_limiter
from wristband.utils.validators import validate_credentials

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/signup', methods=['POST'])
@rate_limit(signup_limiter)
def signup():
    """Create a patient account and its (empty) profile."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_credentials(data)
    if errors:
        return jsonify({'error': errors}), 400

    email = data['email'].strip().lower()
    if User.find_by_email(email):
        return jsonify({'error': 'A user with this email already exists'}), 409

    user = User()
    user.email = email
    user.set_password(data['password'])
    db.session.add(user)

    try:
        db.session.flush()
        UserProfile.ensure_for_user(user, full_name=(data.get('full_name') or '').strip())
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'A user with this email already exists'}), 409

    audit_log('CREATE', 'user', resource_id=str(user.id),
              details={'action': 'signup'}, actor=f'{PATIENT}:{user.id}')

    return jsonify({
        'token': generate_token(user.id, PATIENT),
        'user': user.to_dict(),
    }), 201


@auth_bp.route('/login', methods=['POST'])
@rate_limit(login_limiter, message='Too many login attempts. Try again later.')
def login():
    """Email/password login. The profile is recreated if it went missing."""
    data = request.get_json(silent=True)
    if not data or not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email and password are required'}), 400

    email = data['email'].strip().lower()
    user = User.find_by_email(email)

    if not user or not user.check_password(data['password']):
        audit_log('LOGIN_FAILED', 'user',
                  details={'reason': 'bad_credentials', 'email_hash': hash_email(email)})
        return jsonify({'error': 'Invalid email or password'}), 401

    if not user.is_active:
        audit_log('LOGIN_FAILED', 'user', resource_id=str(user.id),
                  details={'reason': 'deactivated'}, actor=f'{PATIENT}:{user.id}')
        return jsonify({'error': 'Account is deactivated'}), 401

    user.last_login = datetime.utcnow()
    try:
        UserProfile.ensure_for_user(user)
    except Exception:
        # A missing profile must not block login
        logger.warning('Could not verify profile for user_id=%s', user.id, exc_info=True)
    db.session.commit()

    audit_log('LOGIN', 'user', resource_id=str(user.id), actor=f'{PATIENT}:{user.id}')

    return jsonify({
        'token': generate_token(user.id, PATIENT),
        'user': user.to_dict(),
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@patient_required
def logout():
    """Revoke the current token."""
    revoke_current_token()
    audit_log('LOGOUT', 'user', resource_id=str(g.account_id))
    return jsonify({'message': 'Successfully logged out'}), 200


@auth_bp.route('/me', methods=['GET'])
@patient_required
def me():
    """Current patient plus profile summary."""
    user = g.account
    profile = user.profile
    return jsonify({
        'user': user.to_dict(),
        'reading_user_id': user.reading_user_id,
        'full_name': profile.full_name if profile else None,
    }), 200
