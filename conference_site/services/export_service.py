"""Participant list export.

One row builder produces a DataFrame; the CSV and xlsx serializers both read
from it so the two formats cannot drift apart. Files are built in memory.
"""
from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass
from typing import Iterable, List

import pandas as pd

from conference_site.errors import ValidationError
from conference_site.models import Participant

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    ('Name', 'name'),
    ('Surname', 'surname'),
    ('Organization', 'organization'),
    ('Position', 'position'),
    ('Phone', 'phone'),
    ('Email', 'email'),
    ('Presentation Form', 'presentation_form'),
    ('Presentation Section', 'presentation_section'),
    ('Presentation Title', 'presentation_title'),
    ('Code', 'code'),
]
HEADERS = [header for header, _ in EXPORT_COLUMNS]

SHEET_NAME = 'Participants'

# openpyxl stores any string starting with this as a formula
FORMULA_PREFIX = '='

MIMETYPES = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
}


@dataclass
class ExportFile:
    content: bytes
    mimetype: str
    filename: str


def neutralize_formula(value: str) -> str:
    """Keep submitted text from being stored as a spreadsheet formula."""
    if value.startswith(FORMULA_PREFIX):
        return "'" + value
    return value


def build_rows(participants: Iterable[Participant]) -> List[List[str]]:
    return [
        [neutralize_formula(getattr(p, attr) or '') for _, attr in EXPORT_COLUMNS]
        for p in participants
    ]


def build_frame(participants: Iterable[Participant]) -> pd.DataFrame:
    return pd.DataFrame(build_rows(participants), columns=HEADERS, dtype=str)


def to_csv(frame: pd.DataFrame) -> bytes:
    return frame.to_csv(index=False).encode('utf-8')


def to_xlsx(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    return buffer.getvalue()


SERIALIZERS = {
    'csv': to_csv,
    'xlsx': to_xlsx,
}


class ExportService:
    def __init__(self, participants):
        self.participants = participants

    def export_all(self, fmt: str = 'xlsx') -> ExportFile:
        fmt = (fmt or '').lower()
        serializer = SERIALIZERS.get(fmt)
        if serializer is None:
            raise ValidationError(f"Unsupported export format: {fmt}", {'format': 'must be csv or xlsx'})

        participants = self.participants.find_all()
        content = serializer(build_frame(participants))
        filename = f"participants-{int(time.time())}.{fmt}"
        logger.info("Exported %d participants as %s", len(participants), fmt)
        return ExportFile(content=content, mimetype=MIMETYPES[fmt], filename=filename)
