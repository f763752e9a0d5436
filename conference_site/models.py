"""Participant and uploaded-file records and their MongoDB document mapping."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

PRESENTATION_FORMS = ('Speaker', 'Publication', 'Listener')

DEFAULT_DELIVERY_ATTEMPTS = 3

# Web form field name -> Participant attribute
FORM_FIELDS = {
    'surname': 'surname',
    'name': 'name',
    'organization': 'organization',
    'position': 'position',
    'phone': 'phone',
    'email': 'email',
    'presentation-form': 'presentation_form',
    'presentation-section': 'presentation_section',
    'presentation-title': 'presentation_title',
}

CAPTCHA_FORM_FIELD = 'h-captcha-response'


def _clean(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


@dataclass
class Participant:
    surname: str = ''
    name: str = ''
    organization: str = ''
    position: str = ''
    phone: str = ''
    email: str = ''
    presentation_form: str = ''
    presentation_section: str = ''
    presentation_title: str = ''
    code: str = ''
    attempts: int = DEFAULT_DELIVERY_ATTEMPTS
    id: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_registered(self) -> bool:
        return bool(self.code) and self.id is not None

    @classmethod
    def from_form(cls, form: Mapping[str, Any], attempts: int = DEFAULT_DELIVERY_ATTEMPTS) -> 'Participant':
        """Build a pending participant from submitted web form values."""
        values = {attr: _clean(form.get(key)) for key, attr in FORM_FIELDS.items()}
        return cls(attempts=attempts, **values)

    def to_document(self) -> Dict[str, Any]:
        doc = {
            'surname': self.surname,
            'name': self.name,
            'organization': self.organization,
            'position': self.position,
            'phone': self.phone,
            'email': self.email,
            'presentationForm': self.presentation_form,
            'presentationSection': self.presentation_section,
            'presentationTitle': self.presentation_title,
            'code': self.code,
            'attempts': self.attempts,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'deletedAt': self.deleted_at,
        }
        if self.id is not None:
            doc['_id'] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> 'Participant':
        return cls(
            surname=doc.get('surname') or '',
            name=doc.get('name') or '',
            organization=doc.get('organization') or '',
            position=doc.get('position') or '',
            phone=doc.get('phone') or '',
            email=doc.get('email') or '',
            presentation_form=doc.get('presentationForm') or '',
            presentation_section=doc.get('presentationSection') or '',
            presentation_title=doc.get('presentationTitle') or '',
            code=doc.get('code') or '',
            attempts=doc.get('attempts', DEFAULT_DELIVERY_ATTEMPTS),
            id=doc.get('_id'),
            created_at=doc.get('createdAt'),
            updated_at=doc.get('updatedAt'),
            deleted_at=doc.get('deletedAt'),
        )

    def form_values(self) -> Dict[str, str]:
        """Values keyed by web form field name, for re-display after rejection."""
        return {key: getattr(self, attr) for key, attr in FORM_FIELDS.items()}


@dataclass
class LoadedFile:
    participant_code: str
    file: str
    file_name: str
    size: int = 0
    content_type: Optional[str] = None
    id: Optional[Any] = None
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        doc = {
            'participantCode': self.participant_code,
            'file': self.file,
            'fileName': self.file_name,
            'size': self.size,
            'contentType': self.content_type,
            'createdAt': self.created_at,
        }
        if self.id is not None:
            doc['_id'] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> 'LoadedFile':
        return cls(
            participant_code=doc.get('participantCode') or '',
            file=doc.get('file') or '',
            file_name=doc.get('fileName') or '',
            size=doc.get('size') or 0,
            content_type=doc.get('contentType'),
            id=doc.get('_id'),
            created_at=doc.get('createdAt'),
        )

    def to_dict(self) -> Dict[str, Any]:
        created = self.created_at.isoformat() if isinstance(self.created_at, datetime) else self.created_at
        return {
            'id': str(self.id) if self.id is not None else None,
            'file': self.file,
            'fileName': self.file_name,
            'size': self.size,
            'contentType': self.content_type,
            'createdAt': created,
        }
