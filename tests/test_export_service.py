import csv
import io

import pytest
from openpyxl import load_workbook

from conference_site.errors import ValidationError
from conference_site.models import Participant
from conference_site.services.export_service import HEADERS, ExportService

EXPECTED_HEADERS = [
    'Name', 'Surname', 'Organization', 'Position', 'Phone', 'Email',
    'Presentation Form', 'Presentation Section', 'Presentation Title', 'Code',
]


def _participant(name, code, **kw):
    return Participant(name=name, surname='Smith', email=f'{name.lower()}@example.com', code=code, **kw)


def _csv_rows(content: bytes):
    return list(csv.reader(io.StringIO(content.decode('utf-8'))))


def test_headers_are_in_fixed_order():
    assert HEADERS == EXPECTED_HEADERS


def test_empty_csv_has_only_header(participants):
    export = ExportService(participants).export_all('csv')
    assert _csv_rows(export.content) == [EXPECTED_HEADERS]
    assert export.mimetype == 'text/csv'
    assert export.filename.startswith('participants-') and export.filename.endswith('.csv')


def test_empty_xlsx_has_only_header(participants):
    export = ExportService(participants).export_all('xlsx')
    sheet = load_workbook(io.BytesIO(export.content)).active
    rows = list(sheet.iter_rows(values_only=True))
    assert rows == [tuple(EXPECTED_HEADERS)]


def test_rows_follow_storage_order(participants):
    participants.docs.extend([
        _participant('Anna', 'c1', organization='Univ', phone='89111234567', presentation_form='Speaker',
                     presentation_section='Plenary', presentation_title='Ice'),
        _participant('Boris', 'c2'),
    ])
    rows = _csv_rows(ExportService(participants).export_all('csv').content)

    assert rows[0] == EXPECTED_HEADERS
    assert rows[1] == ['Anna', 'Smith', 'Univ', '', '89111234567', 'anna@example.com',
                       'Speaker', 'Plenary', 'Ice', 'c1']
    assert [r[0] for r in rows[1:]] == ['Anna', 'Boris']


def test_csv_and_xlsx_share_rows(participants):
    participants.docs.append(_participant('Anna', 'c1', position='Professor'))
    service = ExportService(participants)

    csv_rows = _csv_rows(service.export_all('csv').content)
    sheet = load_workbook(io.BytesIO(service.export_all('xlsx').content)).active
    xlsx_rows = [[cell if cell is not None else '' for cell in row] for row in sheet.iter_rows(values_only=True)]

    assert xlsx_rows == csv_rows


def test_deleted_participants_are_excluded(participants):
    from datetime import datetime, timezone
    participants.docs.append(_participant('Gone', 'c9', deleted_at=datetime.now(timezone.utc)))
    rows = _csv_rows(ExportService(participants).export_all('csv').content)
    assert rows == [EXPECTED_HEADERS]


def test_unknown_format_rejected(participants):
    with pytest.raises(ValidationError):
        ExportService(participants).export_all('pdf')


def test_formula_text_is_exported_as_plain_text(participants):
    payload = '=HYPERLINK("http://evil","x")'
    participants.docs.append(_participant('Anna', 'c1', organization=payload, phone='+7 (812) 123-45-67',
                                          presentation_title='=1+1'))
    service = ExportService(participants)

    row = _csv_rows(service.export_all('csv').content)[1]
    assert row[2] == "'" + payload
    assert row[4] == '+7 (812) 123-45-67'
    assert row[8] == "'=1+1"

    sheet = load_workbook(io.BytesIO(service.export_all('xlsx').content)).active
    assert sheet['C2'].data_type == 's'
    assert sheet['C2'].value == "'" + payload
    assert sheet['I2'].data_type == 's'
    assert sheet['E2'].value == '+7 (812) 123-45-67'
