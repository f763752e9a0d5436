"""Registration form field validation.

Each rule is independent and every rule runs, so the form can show all
problems at once. ``validate_participant`` returns a mapping of field name to
message; an empty mapping means the submission is valid.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Optional

from conference_site.models import PRESENTATION_FORMS, Participant

PHONE_RE = re.compile(r"^((8|\+7)[\- ]?)?(\(?\d{3}\)?[\- ]?)?[\d\- ]{7,10}$")
LATIN_RE = re.compile(r"^[a-zA-Z]+$")
EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+\Z")

PHONE_MESSAGE = "Phone number should be valid format."
SURNAME_MESSAGE = "Surname can only be a-zA-Z."
NAME_MESSAGE = "Name can only be a-zA-Z."
EMAIL_MESSAGE = "Wrong email format. Example: mail@example.com"
PRESENTATION_FORM_MESSAGE = "Presentation form must be one of {}.".format(", ".join(PRESENTATION_FORMS))


def validate_phone(phone: str) -> Optional[str]:
    """Phone is optional; when given it must look like a regional number."""
    if not phone:
        return None
    if PHONE_RE.fullmatch(phone):
        return None
    return PHONE_MESSAGE


def is_latin_name(value: str) -> bool:
    return bool(value) and bool(LATIN_RE.fullmatch(value))


def validate_surname(surname: str) -> Optional[str]:
    return None if is_latin_name(surname) else SURNAME_MESSAGE


def validate_name(name: str) -> Optional[str]:
    return None if is_latin_name(name) else NAME_MESSAGE


def validate_email(email: str, is_deliverable: Callable[[str], bool]) -> Optional[str]:
    """Format check first; the existence check only runs for well-formed addresses."""
    if not email or not EMAIL_RE.search(email):
        return EMAIL_MESSAGE
    if not is_deliverable(email):
        return EMAIL_MESSAGE
    return None


def validate_presentation_form(value: str) -> Optional[str]:
    if not value or value in PRESENTATION_FORMS:
        return None
    return PRESENTATION_FORM_MESSAGE


def validate_participant(participant: Participant, is_deliverable: Callable[[str], bool]) -> Dict[str, str]:
    checks = {
        'Phone': validate_phone(participant.phone),
        'Surname': validate_surname(participant.surname),
        'Name': validate_name(participant.name),
        'Email': validate_email(participant.email, is_deliverable),
        'PresentationForm': validate_presentation_form(participant.presentation_form),
    }
    return {field: message for field, message in checks.items() if message}
