from types import SimpleNamespace

import requests

from conference_site.services.captcha import (
    REASON_EMPTY,
    REASON_REJECTED,
    REASON_UNAVAILABLE,
    CaptchaVerifier,
)


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self.payload = payload
        self.status = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")

    def json(self):
        if self.bad_json:
            raise ValueError("not json")
        return self.payload


def _verifier(response=None, exc=None, calls=None):
    def post(url, data=None, timeout=None):
        if calls is not None:
            calls.append({'url': url, 'data': data, 'timeout': timeout})
        if exc:
            raise exc
        return response

    return CaptchaVerifier('secret', 'site-key', url='https://captcha.test/verify', timeout=3,
                           session=SimpleNamespace(post=post))


def test_empty_token_is_reported_without_network_call():
    calls = []
    result = _verifier(FakeResponse({'success': True}), calls=calls).verify('')
    assert not result.success
    assert result.reason == REASON_EMPTY
    assert calls == []


def test_successful_verification_posts_secret_token_and_site_key():
    calls = []
    result = _verifier(FakeResponse({'success': True}), calls=calls).verify('tok')
    assert result.success
    assert calls[0]['data'] == {'secret': 'secret', 'response': 'tok', 'sitekey': 'site-key'}
    assert calls[0]['timeout'] == 3


def test_rejected_token_keeps_error_codes():
    result = _verifier(FakeResponse({'success': False, 'error-codes': ['invalid-input-response']})).verify('tok')
    assert not result.success
    assert result.reason == REASON_REJECTED
    assert result.error_codes == ['invalid-input-response']


def test_network_failure_is_unavailable():
    err = requests.ConnectionError('down')
    result = _verifier(exc=err).verify('tok')
    assert not result.success
    assert result.reason == REASON_UNAVAILABLE
    assert result.error is err


def test_unparseable_response_is_unavailable():
    result = _verifier(FakeResponse(bad_json=True)).verify('tok')
    assert result.reason == REASON_UNAVAILABLE


def test_http_error_is_unavailable():
    result = _verifier(FakeResponse({'success': True}, status=500)).verify('tok')
    assert result.reason == REASON_UNAVAILABLE
