"""Tests for parsing service records."""

from datetime import timedelta

import pytest

from face_checkin.services.models import AttendanceRecord, Employee, VerificationResult, parse_timestamp


def test_parse_timestamp_truncates_nanoseconds():
    parsed = parse_timestamp('2026-10-19T08:15:30.123456789+07:00')
    assert parsed.microsecond == 123456
    assert parsed.utcoffset() == timedelta(hours=7)


def test_parse_timestamp_accepts_zulu_and_empty():
    assert parse_timestamp('2026-10-19T01:00:00Z').utcoffset() == timedelta(0)
    assert parse_timestamp('') is None
    assert parse_timestamp(None) is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp('yesterday')


def test_employee_requires_id_and_name():
    with pytest.raises(ValueError):
        Employee.from_dict({'name': 'Budi'})
    assert Employee.from_dict({'id': '3', 'name': 'Budi'}).id == 3


def test_attendance_requires_check_in_time():
    with pytest.raises(ValueError):
        AttendanceRecord.from_dict({'user_name': 'Budi'})


def result_payload(**overrides):
    payload = {
        'verification': True,
        'message': 'ok',
        'similarity_score': 0.87,
        'threshold': 0.6,
        'attendance': {'user_name': 'Budi', 'check_in_time': '2026-10-19T08:15:30Z'},
    }
    payload.update(overrides)
    return payload


def test_verification_result_parses():
    result = VerificationResult.from_dict(result_payload())
    assert result.verification is True
    assert result.attendance.user_name == 'Budi'


@pytest.mark.parametrize('overrides', [
    {'verification': 'true'},
    {'similarity_score': 1.5},
    {'threshold': -0.1},
    {'attendance': None},
])
def test_verification_result_rejects_malformed(overrides):
    with pytest.raises((ValueError, TypeError)):
        VerificationResult.from_dict(result_payload(**overrides))


def test_verification_result_requires_score_fields():
    payload = result_payload()
    del payload['threshold']
    with pytest.raises(ValueError):
        VerificationResult.from_dict(payload)
