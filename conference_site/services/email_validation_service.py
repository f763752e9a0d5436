"""Email validation service.

Provides high-level email validation with:
- regex format check
- disposable domain check (from an optional domains file)
- MX DNS lookup
- optional external API validation (configurable)

``EmailValidationService.validate`` returns a detailed ``ValidationResult``;
``EmailValidationService.is_deliverable`` reduces it to the single boolean the
registration form needs.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Optional

import dns.exception
import dns.resolver
import requests

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Outages of the lookup infrastructure, as opposed to answers about the address
FAIL_OPEN_REASONS = ('provider_unavailable', 'resolver_unavailable')


@dataclass
class ValidationResult:
    status: str  # 'valid', 'invalid', 'risky', 'unknown'
    reason: Optional[str] = None
    details: Optional[dict] = None


class EmailValidationService:
    def __init__(
        self,
        provider: Optional[dict] = None,
        strictness: str = 'medium',
        fail_open: bool = True,
        disposable_file: Optional[str] = None,
        timeout: float = 5,
    ):
        self.provider = provider or {}
        self.strictness = strictness
        self.fail_open = fail_open
        self.timeout = timeout
        self.disposable_file = disposable_file or os.path.join(os.getcwd(), 'config', 'disposable_domains.txt')
        self.disposable_domains = self._load_disposable_domains()

    @classmethod
    def from_config(cls, config) -> 'EmailValidationService':
        return cls(
            provider=config.get('EMAIL_VALIDATION'),
            strictness=config.get('EMAIL_VALIDATION_STRICTNESS', 'medium'),
            fail_open=config.get('EMAIL_VALIDATION_FAIL_OPEN', True),
            disposable_file=config.get('DISPOSABLE_DOMAINS_FILE'),
            timeout=config.get('HTTP_TIMEOUT_SECONDS', 5),
        )

    def _load_disposable_domains(self) -> set[str]:
        domains = set()
        try:
            if os.path.exists(self.disposable_file):
                with open(self.disposable_file, 'r', encoding='utf-8') as fh:
                    for line in fh:
                        line = line.strip()
                        if not line or line.startswith('#'):
                            continue
                        domains.add(line.lower())
        except OSError as e:
            logger.warning(f"Failed to load disposable domains from {self.disposable_file}: {e}")
        return domains

    def _is_disposable(self, domain: str) -> bool:
        return domain.lower() in self.disposable_domains

    def _mx_lookup(self, domain: str) -> Optional[bool]:
        """Return True if MX records exist for domain, False if the domain has
        none, and None when the resolver could not be reached.
        """
        try:
            answers = dns.resolver.resolve(domain, 'MX', lifetime=self.timeout)
            return len(answers) > 0
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer) as e:
            logger.debug("No MX records for %s: %s", domain, e)
            return False
        except dns.exception.DNSException as e:
            logger.warning("MX lookup for %s could not complete: %s", domain, e)
            return None

    def _call_external_api(self, email: str) -> tuple[Optional[dict], bool]:
        """Call the configured external email validation API.

        ``provider`` example::

            {'provider': 'abstract', 'api_key': 'xxx',
             'url': 'https://emailvalidation.abstractapi.com/v1/'}

        Returns (response_json, attempted).
        """
        cfg = self.provider
        provider = (cfg.get('provider') or '').lower()
        if not provider:
            return None, False
        try:
            if provider == 'abstract':
                api_key = cfg.get('api_key')
                if not api_key:
                    return None, True
                url = cfg.get('url') or 'https://emailvalidation.abstractapi.com/v1/'
                resp = requests.get(url, params={'api_key': api_key, 'email': email}, timeout=self.timeout)
            else:
                # Generic provider: caller supplies URL, method and optional headers
                url = cfg.get('url')
                if not url:
                    return None, True
                method = (cfg.get('method') or 'GET').upper()
                headers = cfg.get('headers') or {}
                if method == 'GET':
                    params = {**(cfg.get('params') or {}), 'email': email}
                    resp = requests.get(url, params=params, headers=headers, timeout=self.timeout)
                else:
                    payload = {**(cfg.get('body') or {}), 'email': email}
                    resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)

            if resp.status_code == 200:
                return resp.json(), True
            body = resp.text or ''
            if len(body) > 1000:
                body = body[:1000] + '...[truncated]'
            logger.warning("External provider '%s' returned status %s: %s", provider, resp.status_code, body)
            return None, True
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"External email API request failed: {e}")
            return None, True

    def _interpret_api_response(self, api_resp: Any) -> tuple[str, Optional[str], dict]:
        """Map common provider responses to (status, reason, details)."""
        if not api_resp:
            return 'unknown', 'no_response', {}

        if isinstance(api_resp, dict) and isinstance(api_resp.get('data'), dict):
            payload = api_resp['data']
        else:
            payload = api_resp
        if not isinstance(payload, dict):
            return 'unknown', 'api_uninterpretable', {}

        details = {'raw': payload}

        for key in ('deliverability', 'result', 'status', 'deliverable'):
            if key not in payload:
                continue
            val = payload.get(key)
            if isinstance(val, bool):
                return ('valid' if val else 'invalid'), f'api_{key}_{str(val).lower()}', details
            if isinstance(val, str):
                v = val.lower()
                if 'undeliver' in v or 'invalid' in v:
                    return 'invalid', f'api_{key}_undeliverable', details
                if 'deliver' in v or 'ok' in v or 'valid' in v:
                    return 'valid', f'api_{key}_deliverable', details
                if 'risk' in v or 'unknown' in v:
                    return 'risky', f'api_{key}_risky', details

        if payload.get('smtp_check') is not None:
            if payload.get('smtp_check'):
                return 'valid', 'api_smtp_check', details
            return 'risky', 'api_smtp_failed', details

        if payload.get('disposable') is True:
            return 'invalid', 'api_disposable', details

        return 'unknown', 'api_uninterpretable', details

    def validate(self, email: str) -> ValidationResult:
        """Perform email validation and return ValidationResult.

        ``strictness`` ('low', 'medium', 'high') decides how missing MX records
        and provider outages are classified.
        """
        email = (email or '').strip()
        if not email:
            return ValidationResult('invalid', reason='empty')

        if not EMAIL_RE.fullmatch(email):
            return ValidationResult('invalid', reason='format')

        _, domain = email.rsplit('@', 1)
        domain = domain.lower()
        details: dict = {'format_ok': True}

        if self._is_disposable(domain):
            return ValidationResult('invalid', reason='disposable_domain', details=details)

        has_mx = self._mx_lookup(domain)
        details['mx'] = has_mx

        api_resp, provider_attempted = self._call_external_api(email)
        if api_resp:
            status, reason, api_details = self._interpret_api_response(api_resp)
            details['api'] = api_details
            return ValidationResult(status, reason=reason, details=details)

        if provider_attempted:
            status = 'invalid' if self.strictness == 'high' else 'risky'
            return ValidationResult(status, reason='provider_unavailable', details=details)

        if has_mx is None:
            status = 'invalid' if self.strictness == 'high' else 'risky'
            return ValidationResult(status, reason='resolver_unavailable', details=details)
        if has_mx:
            return ValidationResult('valid', reason='mx_found', details=details)
        status = 'invalid' if self.strictness == 'high' else 'risky'
        return ValidationResult(status, reason='no_mx', details=details)

    def is_deliverable(self, email: str) -> bool:
        """Single yes/no answer used by the registration form."""
        res = self.validate(email)
        allowed = res.status == 'valid'
        if not allowed and self.strictness == 'low' and res.status == 'risky':
            allowed = True
        # Provider or resolver outage
        if not allowed and res.reason in FAIL_OPEN_REASONS and self.fail_open:
            allowed = True
        if not allowed:
            logger.info("Email %s rejected: status=%s reason=%s", email, res.status, res.reason)
        return allowed
