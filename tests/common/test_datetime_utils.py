from datetime import date, datetime

import pytest

from study_room.common.datetime_utils import isoformat, parse_iso_date, parse_iso_datetime
from study_room.core.exceptions import ValidationError


@pytest.mark.parametrize("raw", ["2024-03-01", " 2024-03-01 ", "2024-03-01T23:30:00Z", "2024-03-01T23:30:00+07:00"])
def test_parse_iso_date_keeps_calendar_date(raw):
    assert parse_iso_date(raw) == date(2024, 3, 1)


@pytest.mark.parametrize("raw", ["2024-03-01xyz", "2024-03-01Tnoon", "2024-13-01", "01/03/2024", "", None, 20240301])
def test_parse_iso_date_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_iso_date(raw)


def test_parse_iso_datetime_normalises_to_naive_utc():
    assert parse_iso_datetime("2024-03-04T17:00:00+07:00", "slotStart") == datetime(2024, 3, 4, 10, 0)
    assert parse_iso_datetime("2024-03-04T10:00:00Z", "slotStart") == datetime(2024, 3, 4, 10, 0)


def test_isoformat_marks_utc():
    assert isoformat(datetime(2024, 3, 4, 10, 0, 0, 123456)) == "2024-03-04T10:00:00Z"
    assert isoformat(None) is None
