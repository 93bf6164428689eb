"""
Input validation for accounts, medications, readings and the emergency contact.
Validators return a list of error strings (empty = valid).
"""
import re
from datetime import datetime, date, timezone
from email_validator import validate_email, EmailNotValidError

TIME_RE = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')
PHONE_RE = re.compile(r'^([+]?[\s0-9]+)?(\d{3}|[(]?[0-9]+[)])?([-]?[\s]?[0-9])+$')

ARMS = ('left', 'right')
POSITIONS = ('sitting', 'laying', 'standing')
CONDITION_VALUES = ('before', 'after')
CONDITION_KEYS = ('meal', 'medicine', 'activity')
READING_TYPES = ('fasting', 'post-meal', 'random')


def normalize_time(value) -> str:
    """Return zero-padded "HH:MM" or None when the value is not a valid time."""
    if not isinstance(value, str):
        return None
    match = TIME_RE.match(value.strip())
    if not match:
        return None
    return f'{int(match.group(1)):02d}:{match.group(2)}'


def normalize_dose_times(values) -> list:
    """Zero-pad and de-duplicate, keeping the first occurrence order."""
    seen = []
    for value in values:
        time = normalize_time(value)
        if time and time not in seen:
            seen.append(time)
    return seen


def parse_date(value):
    """Parse YYYY-MM-DD (or the date part of an ISO timestamp)."""
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if 'T' in text:
        text = text.split('T', 1)[0]
    return datetime.strptime(text, '%Y-%m-%d').date()


def parse_timestamp(value) -> datetime:
    """Parse an ISO 8601 timestamp into a naive UTC datetime."""
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _check_int(data, key, label, low, high, errors, required=True):
    value = data.get(key)
    if value is None:
        if required:
            errors.append(f'{label} is required')
        return
    if isinstance(value, bool):
        errors.append(f'{label} must be an integer')
        return
    try:
        number = int(value)
    except (ValueError, TypeError, OverflowError):
        errors.append(f'{label} must be an integer')
        return
    if number < low or number > high:
        errors.append(f'{label} must be between {low} and {high}')


def _text(data, key, label, errors, strip=True):
    """String value of ``key`` ('' when absent), or None after recording a type error."""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        errors.append(f'{label} must be a string')
        return None
    return value.strip() if strip else value


def validate_credentials(data: dict) -> list:
    """Validate email + password sign-up or sign-in input."""
    errors = []

    email = _text(data, 'email', 'Email', errors)
    if email is None:
        pass
    elif not email:
        errors.append('Email is required')
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    password = _text(data, 'password', 'Password', errors, strip=False)
    if password is None:
        pass
    elif len(password) < 6:
        errors.append('Password must be at least 6 characters')
    elif len(password) > 128:
        errors.append('Password must be 128 characters or fewer')

    return errors


def validate_display_name(data: dict) -> list:
    errors = []
    if data.get('display_name') is None:
        errors.append('Display name is required')
        return errors
    name = _text(data, 'display_name', 'Display name', errors)
    if name is not None and len(name) > 100:
        errors.append('Display name must be 100 characters or fewer')
    return errors


def validate_medication(data: dict, partial: bool = False) -> list:
    """Validate the add/edit medication form. ``partial`` allows missing fields on edit."""
    errors = []

    if not partial or 'name' in data:
        name = _text(data, 'name', 'Medication name', errors)
        if name is None:
            pass
        elif len(name) < 2:
            errors.append('Medication name must be at least 2 characters')
        elif len(name) > 200:
            errors.append('Medication name must be 200 characters or fewer')

    if not partial or 'quantity' in data:
        _check_int(data, 'quantity', 'Quantity', 0, 100000, errors)

    if not partial or 'dose_times' in data:
        times = data.get('dose_times')
        if times is None:
            times = []
        if not isinstance(times, list):
            errors.append('Dose times must be a list')
        elif any(normalize_time(t) is None for t in times):
            errors.append('One or more times are in an invalid format (HH:MM)')

    expiry = data.get('expiry_date')
    if expiry not in (None, ''):
        try:
            parse_date(expiry)
        except ValueError:
            errors.append('Expiry date must be in YYYY-MM-DD format')

    if 'active' in data and not isinstance(data['active'], bool):
        errors.append('Active must be true or false')

    instructions = _text(data, 'instructions', 'Instructions', errors)
    if instructions is not None and len(instructions) > 1000:
        errors.append('Instructions must be 1000 characters or fewer')

    course = data.get('course')
    if course is not None:
        if not isinstance(course, dict):
            errors.append('Course must be an object')
        else:
            _check_int(course, 'duration_days', 'Course duration', 1, 3650, errors)
            if not course.get('start_date'):
                errors.append('Course start date is required')
            else:
                try:
                    parse_date(course['start_date'])
                except ValueError:
                    errors.append('Course start date must be in YYYY-MM-DD format')

    return errors


def validate_bp_reading(data: dict) -> list:
    """Validate a blood pressure reading."""
    errors = []

    _check_int(data, 'systolic', 'Systolic', 0, 300, errors)
    _check_int(data, 'diastolic', 'Diastolic', 0, 300, errors)
    _check_int(data, 'pulse', 'Pulse', 0, 300, errors)

    if data.get('arm') not in (None, '') + ARMS:
        errors.append('Arm must be left or right')
    if data.get('position') not in (None, '') + POSITIONS:
        errors.append('Position must be sitting, laying or standing')

    conditions = data.get('conditions') or {}
    if not isinstance(conditions, dict):
        errors.append('Conditions must be an object')
    else:
        for key, value in conditions.items():
            if key not in CONDITION_KEYS:
                errors.append(f'Unknown condition: {key}')
            elif value not in (None, '') + CONDITION_VALUES:
                errors.append(f'Condition {key} must be before or after')

    description = _text(data, 'description', 'Description', errors)
    if description is not None and len(description) > 1000:
        errors.append('Description must be 1000 characters or fewer')

    errors.extend(_validate_timestamp(data))
    return errors


def validate_glucose_reading(data: dict) -> list:
    """Validate a blood glucose reading."""
    errors = []

    _check_int(data, 'glucose_level', 'Glucose level', 0, 1000, errors)

    if data.get('reading_type') not in READING_TYPES:
        errors.append('Reading type must be fasting, post-meal or random')

    errors.extend(_validate_timestamp(data))
    return errors


def _validate_timestamp(data):
    value = data.get('timestamp')
    if value in (None, ''):
        return []
    try:
        parse_timestamp(value)
    except (ValueError, TypeError):
        return ['Timestamp must be an ISO 8601 date-time']
    return []


def validate_emergency_contact(data: dict) -> list:
    errors = []

    name = _text(data, 'name', 'Name', errors)
    if name is None:
        pass
    elif len(name) < 2:
        errors.append('Name must be at least 2 characters')
    elif len(name) > 200:
        errors.append('Name must be 200 characters or fewer')

    phone = _text(data, 'phone', 'Phone', errors)
    if phone is None:
        pass
    elif not phone or not PHONE_RE.match(phone):
        errors.append('Invalid phone number format')
    elif len(phone) > 30:
        errors.append('Phone must be 30 characters or fewer')

    return errors
