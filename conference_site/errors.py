"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a machine-readable ``code``, a human-readable ``message``
and the HTTP ``status`` a route should answer with.
"""
from __future__ import annotations

from typing import Dict, Optional


class ConferenceError(Exception):
    def __init__(self, code: str, message: str, status: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


class ValidationError(ConferenceError):
    """User-correctable input problem; ``fields`` maps field name to message."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__('validation_failed', message, 400)
        self.fields = fields or {}


class CaptchaError(ConferenceError):
    """Captcha missing (``reason='empty'``) or not verified."""

    def __init__(self, reason: str, message: str):
        super().__init__('captcha_failed', message, 400)
        self.reason = reason


class ExternalServiceError(ConferenceError):
    def __init__(self, service: str, message: str):
        super().__init__('external_service_error', message, 502)
        self.service = service


class NotFoundError(ConferenceError):
    def __init__(self, message: str = 'Participant not found'):
        super().__init__('not_found', message, 404)


class PersistenceError(ConferenceError):
    def __init__(self, message: str = 'Internal server error'):
        super().__init__('internal_server_error', message, 500)
