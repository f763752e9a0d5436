"""Shared fakes for the service and route tests.

The fakes mirror the repository / collaborator interfaces used by
``RegistrationService`` so no database, SMTP server or network is needed.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from conference_site.errors import PersistenceError
from conference_site.models import LoadedFile, Participant
from conference_site.services.captcha import CaptchaResult
from conference_site.services.registration_service import RegistrationService


class FakeParticipants:
    def __init__(self):
        self.docs: List[Participant] = []
        self.lookups: List[str] = []
        self.fail_with: Optional[Exception] = None

    def create_participant(self, participant: Participant) -> Participant:
        if self.fail_with:
            raise self.fail_with
        if any(p.code == participant.code for p in self.docs):
            raise PersistenceError()
        participant.id = len(self.docs) + 1
        self.docs.append(participant)
        return participant

    def find_all(self) -> List[Participant]:
        return [p for p in self.docs if p.deleted_at is None]

    def find_by_code(self, code: str) -> Optional[Participant]:
        self.lookups.append(code)
        for p in self.docs:
            if p.code == code and p.deleted_at is None:
                return p
        return None


class FakeFiles:
    def __init__(self):
        self.docs: List[LoadedFile] = []
        self.fail_with: Optional[Exception] = None

    def create_file(self, loaded: LoadedFile) -> LoadedFile:
        if self.fail_with:
            raise self.fail_with
        loaded.id = len(self.docs) + 1
        self.docs.append(loaded)
        return loaded

    def find_by_participant(self, code: str) -> List[LoadedFile]:
        return [f for f in self.docs if f.participant_code == code]


class FakeCaptcha:
    def __init__(self, result: Optional[CaptchaResult] = None):
        self.result = result or CaptchaResult(True)
        self.tokens: List[Optional[str]] = []

    def verify(self, token):
        self.tokens.append(token)
        return self.result


class FakeNotifier:
    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[Dict] = []

    def send(self, recipient_name, recipient_email, subject_id, template_id, **context):
        self.sent.append({
            'name': recipient_name,
            'email': recipient_email,
            'subject_id': subject_id,
            'template_id': template_id,
            **context,
        })
        return self.succeed


class FakeStorage:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def store(self, key, content, content_type=None):
        self.objects[key] = content
        return len(content)

    def delete(self, key):
        self.objects.pop(key, None)


VALID_FORM = {
    'name': 'John',
    'surname': 'Smith',
    'email': 'john@example.com',
    'phone': '',
    'presentation-form': 'Speaker',
    'h-captcha-response': 'token-123',
}


@pytest.fixture
def participants():
    return FakeParticipants()


@pytest.fixture
def files():
    return FakeFiles()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def captcha():
    return FakeCaptcha()


@pytest.fixture
def make_service(participants, files, captcha, notifier, storage):
    def _make(**overrides):
        kwargs = dict(
            participants=participants,
            files=files,
            captcha=captcha,
            email_checker=lambda email: True,
            notifier=notifier,
            storage=storage,
            enforce_captcha=True,
        )
        kwargs.update(overrides)
        return RegistrationService(**kwargs)
    return _make
