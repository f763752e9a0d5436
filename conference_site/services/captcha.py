"""hCaptcha verification.

``CaptchaVerifier.verify`` never raises: every failure is reduced to a
``CaptchaResult`` whose ``reason`` tells the caller which message to show.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from conference_site.errors import CaptchaError

logger = logging.getLogger(__name__)

HCAPTCHA_API_URL = 'https://hcaptcha.com/siteverify'

REASON_EMPTY = 'empty'
REASON_REJECTED = 'rejected'
REASON_UNAVAILABLE = 'unavailable'


@dataclass
class CaptchaResult:
    success: bool
    reason: Optional[str] = None
    error_codes: List[str] = field(default_factory=list)
    error: Optional[Exception] = None


class CaptchaVerifier:
    def __init__(self, secret: str, site_key: str, url: str = HCAPTCHA_API_URL,
                 timeout: float = 5, session: Optional[requests.Session] = None):
        self.secret = secret
        self.site_key = site_key
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> 'CaptchaVerifier':
        return cls(
            secret=config.get('HCAPTCHA_SECRET_KEY') or '',
            site_key=config.get('HCAPTCHA_SITE_KEY') or '',
            url=config.get('HCAPTCHA_VERIFY_URL') or HCAPTCHA_API_URL,
            timeout=config.get('HTTP_TIMEOUT_SECONDS', 5),
        )

    def verify(self, token: Optional[str]) -> CaptchaResult:
        if not token:
            return CaptchaResult(False, REASON_EMPTY, error=CaptchaError(REASON_EMPTY, 'captcha is empty'))

        form = {
            'secret': self.secret,
            'response': token,
            'sitekey': self.site_key,
        }
        try:
            resp = self.session.post(self.url, data=form, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("hCaptcha verification request failed: %s", e)
            return CaptchaResult(False, REASON_UNAVAILABLE, error=e)

        if not isinstance(payload, dict) or not payload.get('success'):
            codes = list(payload.get('error-codes') or []) if isinstance(payload, dict) else []
            error = CaptchaError(REASON_REJECTED, f"hCaptcha: {codes}")
            return CaptchaResult(False, REASON_REJECTED, error_codes=codes, error=error)

        return CaptchaResult(True)
