"""Participant registration and code lookup.

``RegistrationService`` holds every collaborator the flow needs (repositories,
captcha verifier, email checker, notifier and file storage). One instance is
built per application in ``init_extensions`` and handed to the routes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO, Callable, Dict, List, Mapping, Optional

from conference_site.errors import NotFoundError, ValidationError
from conference_site.models import CAPTCHA_FORM_FIELD, DEFAULT_DELIVERY_ATTEMPTS, LoadedFile, Participant
from conference_site.services.captcha import REASON_EMPTY
from conference_site.services.codes import generate_code
from conference_site.services.storage_service import generate_storage_key
from conference_site.services.validation import validate_participant

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("conference_site.audit.registration")

ERROR_MESSAGE = "Some form fields are entered incorrectly. Please change them."
SUCCESS_MESSAGE = "Thank you for registration for {conference}!"
CAPTCHA_EMPTY_MESSAGE = "Captcha is not passed"
CAPTCHA_RETRY_MESSAGE = "Please try again"

CONFIRMATION_SUBJECT = 'registration'
CONFIRMATION_TEMPLATE = 'registration_confirmation'


@dataclass
class RegistrationOutcome:
    accepted: bool
    participant: Participant
    errors: Dict[str, str] = field(default_factory=dict)
    message: str = ''
    email_sent: bool = False


class RegistrationService:
    def __init__(
        self,
        participants,
        files,
        captcha,
        email_checker: Callable[[str], bool],
        notifier,
        storage,
        enforce_captcha: bool = True,
        code_factory: Callable[[], str] = generate_code,
        upload_id_factory: Callable[[], str] = generate_code,
        delivery_attempts: int = DEFAULT_DELIVERY_ATTEMPTS,
        conference: str = 'AMTC 2022',
    ):
        self.participants = participants
        self.files = files
        self.captcha = captcha
        self.email_checker = email_checker
        self.notifier = notifier
        self.storage = storage
        self.enforce_captcha = enforce_captcha
        self.code_factory = code_factory
        self.upload_id_factory = upload_id_factory
        self.delivery_attempts = delivery_attempts
        self.conference = conference

    def _check_captcha(self, token: Optional[str]) -> Optional[str]:
        result = self.captcha.verify(token)
        if result.success:
            return None
        logger.info("Captcha check failed: reason=%s error=%s", result.reason, result.error)
        if result.reason == REASON_EMPTY:
            return CAPTCHA_EMPTY_MESSAGE
        return CAPTCHA_RETRY_MESSAGE

    def _email_exists(self, email: str) -> bool:
        try:
            return self.email_checker(email)
        except Exception as e:
            # Fail open
            logger.warning(f"Email verification error for {email}: {e}")
            return True

    def register(self, form: Mapping[str, str]) -> RegistrationOutcome:
        """Validate a submitted form and, when it is clean, persist and notify.

        Field and captcha problems are collected together and returned; they
        never raise. Storage failures raise ``PersistenceError``. A failed
        confirmation email is logged and does not affect the outcome.
        """
        participant = Participant.from_form(form, attempts=self.delivery_attempts)
        errors: Dict[str, str] = {}

        if self.enforce_captcha:
            captcha_message = self._check_captcha(form.get(CAPTCHA_FORM_FIELD))
            if captcha_message:
                errors['Captcha'] = captcha_message

        errors.update(validate_participant(participant, self._email_exists))

        if errors:
            logger.debug("Registration rejected: fields=%s", sorted(errors))
            return RegistrationOutcome(False, participant, errors, ERROR_MESSAGE)

        participant.code = self.code_factory()
        participant = self.participants.create_participant(participant)
        audit_logger.info("Participant registered", extra={'participant_id': str(participant.id)})

        sent = self.notifier.send(
            participant.name,
            participant.email,
            CONFIRMATION_SUBJECT,
            CONFIRMATION_TEMPLATE,
            code=participant.code,
        )
        if not sent:
            logger.warning("Confirmation email was not delivered to %s", participant.email)

        message = SUCCESS_MESSAGE.format(conference=self.conference)
        return RegistrationOutcome(True, participant, {}, message, email_sent=sent)

    def resolve_by_code(self, code: Optional[str]) -> Participant:
        """Return the live participant issued ``code`` or raise ``NotFoundError``."""
        code = (code or '').strip()
        if not code:
            raise NotFoundError()
        participant = self.participants.find_by_code(code)
        if participant is None:
            raise NotFoundError()
        return participant

    def list_files(self, participant: Participant) -> List[LoadedFile]:
        return self.files.find_by_participant(participant.code)

    def attach_file(self, code: Optional[str], stream: IO[bytes], filename: Optional[str],
                    content_type: Optional[str] = None) -> LoadedFile:
        """Store one uploaded file for the participant owning ``code``.

        Every upload gets its own storage key, so a second file with the same
        name never replaces an earlier one.
        """
        participant = self.resolve_by_code(code)
        if stream is None or not filename:
            raise ValidationError('A file is required', {'file': 'A file is required'})

        key = generate_storage_key(participant.code, self.upload_id_factory(), filename)
        content = stream.read()
        size = self.storage.store(key, content, content_type)

        loaded = LoadedFile(
            participant_code=participant.code,
            file=key,
            file_name=filename,
            size=size,
            content_type=content_type,
        )
        try:
            loaded = self.files.create_file(loaded)
        except Exception:
            # No record points at the stored object
            self.storage.delete(key)
            raise
        audit_logger.info("Article uploaded", extra={'participant_id': str(participant.id), 'file': key})
        return loaded
