"""Registration blueprint: accepts the participant registration form."""
from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from conference_site.errors import ConferenceError
from conference_site.extensions import get_services, limiter

logger = logging.getLogger(__name__)

registration_bp = Blueprint('registration', __name__)


def _submitted_fields() -> dict:
    """Form-encoded submissions are the norm; JSON bodies are accepted too."""
    if request.form:
        return request.form.to_dict()
    data = request.get_json(silent=True) or {}
    return {k: v for k, v in data.items() if isinstance(v, str)}


@registration_bp.route('/registration', methods=['POST'])
@limiter.limit("20 per hour")
def register_participant():
    """Register a participant.

    Responses:
    - 201 with the success message and the issued code
    - 400 ``validation_failed`` with per-field ``errors`` and the submitted ``values``
    - 500 when the record could not be stored
    """
    service = get_services(current_app)['registration']
    try:
        outcome = service.register(_submitted_fields())
    except ConferenceError as e:
        return jsonify({'error': e.code, 'message': e.message}), e.status
    except Exception:
        logger.exception('Unexpected error registering participant')
        return jsonify({'error': 'internal_server_error'}), 500

    if not outcome.accepted:
        return jsonify({
            'error': 'validation_failed',
            'message': outcome.message,
            'errors': outcome.errors,
            'values': outcome.participant.form_values(),
        }), 400

    return jsonify({
        'message': outcome.message,
        'code': outcome.participant.code,
        'email_sent': outcome.email_sent,
    }), 201
