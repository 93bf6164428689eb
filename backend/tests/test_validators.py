from datetime import datetime

from app.utils.validators import (
    normalize_dose_times, normalize_time, parse_timestamp, validate_bp_reading,
    validate_credentials, validate_emergency_contact, validate_glucose_reading, validate_medication,
)


def test_normalize_time_pads_and_rejects():
    assert normalize_time('8:05') == '08:05'
    assert normalize_time('23:59') == '23:59'
    assert normalize_time('24:00') is None
    assert normalize_time('8.05') is None
    assert normalize_time(805) is None


def test_normalize_dose_times_dedupes_in_order():
    assert normalize_dose_times(['20:00', '8:00', '08:00', '20:00']) == ['20:00', '08:00']


def test_parse_timestamp_converts_to_naive_utc():
    assert parse_timestamp('2026-01-01T10:00:00+02:00') == datetime(2026, 1, 1, 8, 0)
    assert parse_timestamp('2026-01-01T10:00:00Z') == datetime(2026, 1, 1, 10, 0)


def test_credentials():
    assert validate_credentials({'email': 'pat@example.com', 'password': 'secret1'}) == []
    errors = validate_credentials({'email': 'nope', 'password': '123'})
    assert 'Invalid email format' in errors
    assert 'Password must be at least 6 characters' in errors


def test_medication_valid():
    data = {
        'name': 'Amoxicillin',
        'quantity': 21,
        'dose_times': ['08:00', '16:00', '00:00'],
        'course': {'duration_days': 7, 'start_date': '2026-01-01'},
    }
    assert validate_medication(data) == []


def test_medication_errors():
    errors = validate_medication({'name': 'A', 'quantity': -1, 'dose_times': ['25:00']})
    assert 'Medication name must be at least 2 characters' in errors
    assert 'Quantity must be between 0 and 100000' in errors
    assert 'One or more times are in an invalid format (HH:MM)' in errors


def test_medication_course_needs_positive_duration():
    errors = validate_medication({'name': 'Abc', 'quantity': 1, 'dose_times': [],
                                  'course': {'duration_days': 0, 'start_date': '2026-01-01'}})
    assert 'Course duration must be between 1 and 3650' in errors


def test_medication_partial_update():
    assert validate_medication({'quantity': 4}, partial=True) == []
    assert validate_medication({'active': 'yes'}, partial=True) == ['Active must be true or false']


def test_bp_reading():
    assert validate_bp_reading({'systolic': 120, 'diastolic': 80, 'pulse': 70,
                                'arm': 'left', 'conditions': {'meal': 'after'}}) == []
    errors = validate_bp_reading({'systolic': 400, 'diastolic': 'x', 'arm': 'middle',
                                  'conditions': {'sleep': 'before'}})
    assert 'Systolic must be between 0 and 300' in errors
    assert 'Diastolic must be an integer' in errors
    assert 'Pulse is required' in errors
    assert 'Arm must be left or right' in errors
    assert 'Unknown condition: sleep' in errors


def test_glucose_reading():
    assert validate_glucose_reading({'glucose_level': 95, 'reading_type': 'fasting'}) == []
    errors = validate_glucose_reading({'glucose_level': 95, 'reading_type': 'lunch',
                                       'timestamp': 'yesterday'})
    assert 'Reading type must be fasting, post-meal or random' in errors
    assert 'Timestamp must be an ISO 8601 date-time' in errors


def test_emergency_contact():
    assert validate_emergency_contact({'name': 'Sam', 'phone': '+1 555 123 4567'}) == []
    errors = validate_emergency_contact({'name': 'S', 'phone': 'call me'})
    assert 'Name must be at least 2 characters' in errors
    assert 'Invalid phone number format' in errors


def test_infinite_number_is_not_an_integer():
    errors = validate_medication({'name': 'Aspirin', 'quantity': float('inf'), 'dose_times': []})
    assert errors == ['Quantity must be an integer']
    assert 'Systolic must be an integer' in validate_bp_reading(
        {'systolic': float('-inf'), 'diastolic': 80, 'pulse': 70})


def test_non_string_text_fields():
    assert validate_credentials({'email': None, 'password': 'secret1'}) == ['Email is required']
    assert validate_emergency_contact({'name': 'Sam', 'phone': 5551234567}) == ['Phone must be a string']
