"""Volunteer-to-patient assignment routes."""
from flask import request, jsonify, g
from sqlalchemy.exc import IntegrityError
from wristband import db
from wristband.models import User, VolunteerAssignment
from wristband.utils.audit_logger import audit_log
from wristband.utils.auth import volunteer_required
from . import volunteer_bp


@volunteer_bp.route('/assignments', methods=['GET'])
@volunteer_required
def list_assignments():
    assignments = (VolunteerAssignment.query
                   .filter_by(volunteer_id=g.account_id)
                   .order_by(VolunteerAssignment.created_at.desc())
                   .all())
    audit_log('READ', 'assignment', details={'count': len(assignments)})
    return jsonify([a.to_dict() for a in assignments]), 200


@volunteer_bp.route('/assignments', methods=['POST'])
@volunteer_required
def create_assignment():
    data = request.get_json(silent=True)
    if not data or data.get('user_id') is None:
        return jsonify({'error': 'user_id is required'}), 400

    try:
        user_id = int(data['user_id'])
    except (ValueError, TypeError):
        return jsonify({'error': 'user_id must be an integer'}), 400

    if not db.session.get(User, user_id):
        return jsonify({'error': 'Patient not found'}), 404

    notes = (data.get('notes') or '').strip()
    if len(notes) > 2000:
        return jsonify({'error': 'Notes must be 2000 characters or fewer'}), 400

    assignment = VolunteerAssignment(volunteer_id=g.account_id, user_id=user_id, notes=notes)
    db.session.add(assignment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Patient is already assigned to this volunteer'}), 409

    audit_log('CREATE', 'assignment', resource_id=str(assignment.id),
              details={'user_id': user_id})
    return jsonify(assignment.to_dict()), 201


@volunteer_bp.route('/assignments/<int:user_id>', methods=['DELETE'])
@volunteer_required
def remove_assignment(user_id):
    count = VolunteerAssignment.query.filter_by(
        volunteer_id=g.account_id, user_id=user_id
    ).delete()
    db.session.commit()

    if not count:
        return jsonify({'error': 'Assignment not found'}), 404

    audit_log('DELETE', 'assignment', details={'user_id': user_id})
    return jsonify({'message': 'Assignment removed'}), 200
