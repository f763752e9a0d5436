import pytest

from conference_site.errors import PersistenceError
from conference_site.services import registration_service as svc
from conference_site.services.captcha import REASON_EMPTY, REASON_REJECTED, REASON_UNAVAILABLE, CaptchaResult

from conftest import VALID_FORM, FakeCaptcha


def test_valid_submission_is_persisted_with_code(make_service, participants, notifier):
    outcome = make_service().register(dict(VALID_FORM))

    assert outcome.accepted
    assert outcome.errors == {}
    assert outcome.message == "Thank you for registration for AMTC 2022!"
    assert len(participants.docs) == 1
    stored = participants.docs[0]
    assert stored.code and len(stored.code) == 32
    assert stored.is_registered
    assert notifier.sent == [{
        'name': 'John',
        'email': 'john@example.com',
        'subject_id': 'registration',
        'template_id': 'registration_confirmation',
        'code': stored.code,
    }]


def test_invalid_surname_is_rejected_without_persisting(make_service, participants, notifier):
    form = dict(VALID_FORM, surname='Smith2')
    outcome = make_service().register(form)

    assert not outcome.accepted
    assert outcome.errors == {'Surname': 'Surname can only be a-zA-Z.'}
    assert outcome.message == svc.ERROR_MESSAGE
    assert outcome.participant.surname == 'Smith2'
    assert outcome.participant.code == ''
    assert participants.docs == []
    assert notifier.sent == []


def test_malformed_email_never_issues_code(make_service, participants):
    codes = []

    def code_factory():
        codes.append('x')
        return 'code'

    outcome = make_service(code_factory=code_factory).register(dict(VALID_FORM, email='foo@bar'))
    assert not outcome.accepted
    assert 'Email' in outcome.errors
    assert participants.docs == []
    assert codes == []


def test_captcha_skipped_outside_production(make_service, captcha):
    form = dict(VALID_FORM, name='J0hn')
    form.pop('h-captcha-response')
    outcome = make_service(enforce_captcha=False).register(form)

    assert 'Captcha' not in outcome.errors
    assert outcome.errors == {'Name': 'Name can only be a-zA-Z.'}
    assert captcha.tokens == []


@pytest.mark.parametrize('reason,message', [
    (REASON_EMPTY, svc.CAPTCHA_EMPTY_MESSAGE),
    (REASON_REJECTED, svc.CAPTCHA_RETRY_MESSAGE),
    (REASON_UNAVAILABLE, svc.CAPTCHA_RETRY_MESSAGE),
])
def test_captcha_failure_blocks_but_other_errors_still_surface(make_service, participants, reason, message):
    captcha = FakeCaptcha(CaptchaResult(False, reason))
    form = dict(VALID_FORM, phone='12abc')
    outcome = make_service(captcha=captcha).register(form)

    assert not outcome.accepted
    assert outcome.errors == {'Captcha': message, 'Phone': 'Phone number should be valid format.'}
    assert participants.docs == []


def test_captcha_token_forwarded(make_service, captcha):
    make_service().register(dict(VALID_FORM))
    assert captcha.tokens == ['token-123']


def test_notification_failure_does_not_change_outcome(make_service, participants):
    from conftest import FakeNotifier
    outcome = make_service(notifier=FakeNotifier(succeed=False)).register(dict(VALID_FORM))

    assert outcome.accepted
    assert not outcome.email_sent
    assert len(participants.docs) == 1


def test_storage_failure_propagates(make_service, participants, notifier):
    participants.fail_with = PersistenceError()
    with pytest.raises(PersistenceError):
        make_service().register(dict(VALID_FORM))
    assert notifier.sent == []


def test_duplicate_code_fails_registration(make_service, participants):
    service = make_service(code_factory=lambda: 'same-code')
    assert service.register(dict(VALID_FORM)).accepted
    with pytest.raises(PersistenceError):
        service.register(dict(VALID_FORM, name='Jane'))
    assert len(participants.docs) == 1


def test_repeated_registrations_get_distinct_codes(make_service, participants):
    service = make_service()
    for _ in range(200):
        assert service.register(dict(VALID_FORM)).accepted
    codes = [p.code for p in participants.docs]
    assert len(set(codes)) == len(codes) == 200


def test_email_checker_error_fails_open(make_service, participants):
    def broken(email):
        raise RuntimeError('resolver exploded')

    outcome = make_service(email_checker=broken).register(dict(VALID_FORM))
    assert outcome.accepted
    assert len(participants.docs) == 1


def test_undeliverable_email_is_rejected(make_service, participants):
    outcome = make_service(email_checker=lambda e: False).register(dict(VALID_FORM))
    assert outcome.errors == {'Email': 'Wrong email format. Example: mail@example.com'}
    assert participants.docs == []


def test_fields_are_stripped_and_attempts_recorded(make_service, participants):
    form = dict(VALID_FORM, name='  John ', organization=' Makarov University ')
    make_service(delivery_attempts=5).register(form)
    stored = participants.docs[0]
    assert stored.name == 'John'
    assert stored.organization == 'Makarov University'
    assert stored.attempts == 5
