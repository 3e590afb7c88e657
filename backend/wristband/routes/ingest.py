"""
Device ingestion route.
"""
import logging
from flask import Blueprint, current_app, jsonify, request
from wristband.errors import PersistenceError, ValidationError
from wristband.ingestion import IngestionHandler

logger = logging.getLogger(__name__)

ingest_bp = Blueprint('ingest', __name__)


@ingest_bp.route('/data', methods=['GET'])
def ingest_reading():
    """Store one reading: ?id=&user_id=&hr=&temp=&spo2=[&bp_sys=&bp_dia=]."""
    handler = IngestionHandler(
        current_app.extensions['reading_store'],
        current_app.extensions['live_dashboard'],
    )
    try:
        handler.ingest(request.args)
    except ValidationError as e:
        return jsonify({'error': e.message}), 400
    except PersistenceError:
        return jsonify({'error': 'Database error'}), 500
    except Exception:
        logger.exception('Unexpected error ingesting reading')
        return jsonify({'error': 'Internal server error'}), 500

    return jsonify({'success': True}), 200
