"""Volunteer credential routes. Hashing and verification happen here, never in the client."""
from datetime import datetime
from flask import request, jsonify, g
from sqlalchemy.exc import IntegrityError
from wristband import db
from wristband.models import Volunteer
from wristband.utils.audit_logger import audit_log
from wristband.utils.auth import VOLUNTEER, generate_token, volunteer_required, revoke_current_token
from wristband.utils.encryption import hash_email
from wristband.utils.rate_limiter import rate_limit, login_limiter, signup_limiter
from wristband.utils.validators import validate_credentials
from . import volunteer_bp

# Same answer for unknown email and wrong password
_INVALID_CREDENTIALS = 'Invalid email or password'


@volunteer_bp.route('/signup', methods=['POST'])
@rate_limit(signup_limiter)
def signup():
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_credentials(data, require_name=True)
    if errors:
        return jsonify({'error': errors}), 400

    email = data['email'].strip().lower()
    if Volunteer.find_by_email(email):
        return jsonify({'error': 'A volunteer with this email already exists'}), 409

    volunteer = Volunteer(name=data['name'].strip())
    volunteer.email = email
    volunteer.set_password(data['password'])
    db.session.add(volunteer)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'A volunteer with this email already exists'}), 409

    audit_log('CREATE', 'volunteer', resource_id=str(volunteer.id),
              details={'action': 'signup'}, actor=f'{VOLUNTEER}:{volunteer.id}')

    return jsonify({
        'token': generate_token(volunteer.id, VOLUNTEER),
        'volunteer': volunteer.to_dict(),
    }), 201


@volunteer_bp.route('/login', methods=['POST'])
@rate_limit(login_limiter, message='Too many login attempts. Try again later.')
def login():
    data = request.get_json(silent=True)
    if not data or not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email and password are required'}), 400

    email = data['email'].strip().lower()
    volunteer = Volunteer.find_by_email(email)

    if not volunteer or not volunteer.check_password(data['password']):
        audit_log('LOGIN_FAILED', 'volunteer',
                  details={'reason': 'bad_credentials', 'email_hash': hash_email(email)})
        return jsonify({'error': _INVALID_CREDENTIALS}), 401

    if not volunteer.is_active:
        audit_log('LOGIN_FAILED', 'volunteer', resource_id=str(volunteer.id),
                  details={'reason': 'deactivated'}, actor=f'{VOLUNTEER}:{volunteer.id}')
        return jsonify({'error': 'Account is deactivated'}), 403

    volunteer.last_login = datetime.utcnow()
    db.session.commit()

    audit_log('LOGIN', 'volunteer', resource_id=str(volunteer.id),
              actor=f'{VOLUNTEER}:{volunteer.id}')

    return jsonify({
        'token': generate_token(volunteer.id, VOLUNTEER),
        'volunteer': volunteer.to_dict(),
    }), 200


@volunteer_bp.route('/logout', methods=['POST'])
@volunteer_required
def logout():
    revoke_current_token()
    audit_log('LOGOUT', 'volunteer', resource_id=str(g.account_id))
    return jsonify({'message': 'Successfully logged out'}), 200


@volunteer_bp.route('/me', methods=['GET'])
@volunteer_required
def me():
    return jsonify(g.account.to_dict()), 200
