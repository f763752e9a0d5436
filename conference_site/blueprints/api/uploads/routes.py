"""Article uploads keyed by the participant code.

Routes:
- GET /api/uploads/<code>   (also /api/uploads?code=...)
- POST /api/uploads         multipart form with ``code`` and ``file``
"""
from __future__ import annotations

import logging
from typing import Optional

from flask import Blueprint, current_app, jsonify, request

from conference_site.errors import ConferenceError
from conference_site.extensions import get_services, limiter

logger = logging.getLogger(__name__)

uploads_bp = Blueprint('uploads', __name__)


def _error_response(e: ConferenceError):
    body = {'error': e.code, 'message': e.message}
    fields = getattr(e, 'fields', None)
    if fields:
        body['errors'] = fields
    return jsonify(body), e.status


@uploads_bp.route('/uploads', methods=['GET'])
@uploads_bp.route('/uploads/<code>', methods=['GET'])
def lookup_participant(code: Optional[str] = None):
    """Resolve a code to its participant and list the files already uploaded."""
    if code is None:
        code = request.args.get('code', '')
    service = get_services(current_app)['registration']
    try:
        participant = service.resolve_by_code(code)
        files = service.list_files(participant)
    except ConferenceError as e:
        return _error_response(e)
    except Exception:
        logger.exception('Unexpected error resolving participant code')
        return jsonify({'error': 'internal_server_error'}), 500

    return jsonify({
        'participant': {
            'name': participant.name,
            'surname': participant.surname,
            'presentationTitle': participant.presentation_title,
            'code': participant.code,
        },
        'files': [f.to_dict() for f in files],
    }), 200


@uploads_bp.route('/uploads', methods=['POST'])
@limiter.limit("30 per hour")
def upload_article():
    code = request.form.get('code', '')
    upload = request.files.get('file')
    service = get_services(current_app)['registration']
    try:
        loaded = service.attach_file(
            code,
            upload.stream if upload else None,
            upload.filename if upload else None,
            content_type=upload.mimetype if upload else None,
        )
    except ConferenceError as e:
        return _error_response(e)
    except Exception:
        logger.exception('Unexpected error uploading article')
        return jsonify({'error': 'internal_server_error'}), 500

    return jsonify({'message': 'File uploaded', 'file': loaded.to_dict()}), 201
