"""
Input validation for device readings, signups, and profile updates.
"""
import math
import re
from datetime import datetime
from email_validator import validate_email, EmailNotValidError
from wristband.utils.vital_ranges import VITAL_RANGES


# Firmware sends values like "75" or "75bpm"; only the leading number counts
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_int(raw) -> int:
    """Parse the leading integer of a query value; missing or garbage becomes 0.

    "75bpm" is 75, "72.9" is 72 and "1e2" is 1.
    """
    match = _INT_PREFIX.match(str(raw)) if raw is not None else None
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # past the interpreter's digit limit; out of range either way
        return 0


def _parse_float(raw) -> float:
    match = _FLOAT_PREFIX.match(str(raw)) if raw is not None else None
    if not match:
        return 0.0
    value = float(match.group(1))
    return value if math.isfinite(value) else 0.0


def validate_vital_signs(heart_rate, body_temperature, blood_oxygen) -> bool:
    """True when all three vitals are present and physiologically plausible.

    Zero counts as missing: a device that reports 0 for any vital is
    rejected the same way as one that omits it.
    """
    hr = VITAL_RANGES['hr'].plausible
    temp = VITAL_RANGES['temp'].plausible
    spo2 = VITAL_RANGES['spo2'].plausible
    return bool(
        heart_rate and hr.contains(heart_rate) and
        blood_oxygen and spo2.contains(blood_oxygen) and
        body_temperature and temp.contains(body_temperature)
    )


def parse_ingest_params(args) -> tuple:
    """Parse the device query string.

    Returns (values, errors). ``values`` holds device_id, user_id, hr, temp,
    spo2 and, when the device sent them, bp_sys/bp_dia. ``errors`` is a list
    of strings, empty when the reading can be stored.
    """
    errors = []

    device_id = (args.get('id') or '').strip()
    user_id = (args.get('user_id') or '').strip()
    hr = _parse_int(args.get('hr'))
    temp = _parse_float(args.get('temp'))
    spo2 = _parse_int(args.get('spo2'))

    if not device_id:
        errors.append('Device id is required')
    if not user_id:
        errors.append('User id is required')
    if not validate_vital_signs(hr, temp, spo2):
        errors.append('Valid vital signs are required (hr 30-200, temp 30-45, spo2 70-100)')

    values = {
        'device_id': device_id,
        'user_id': user_id,
        'hr': hr,
        'temp': temp,
        'spo2': spo2,
        'bp_sys': None,
        'bp_dia': None,
    }

    raw_sys = args.get('bp_sys')
    raw_dia = args.get('bp_dia')
    if raw_sys is not None or raw_dia is not None:
        bp = VITAL_RANGES['bp']
        systolic = _parse_int(raw_sys)
        diastolic = _parse_int(raw_dia)
        if not (systolic and bp.systolic.plausible.contains(systolic)):
            errors.append('Systolic must be between 80 and 180')
        if not (diastolic and bp.diastolic.plausible.contains(diastolic)):
            errors.append('Diastolic must be between 50 and 110')
        values['bp_sys'] = systolic
        values['bp_dia'] = diastolic

    return values, errors


def validate_credentials(data: dict, require_name: bool = False) -> list:
    """Validate signup input. Returns list of error strings (empty = valid)."""
    errors = []

    if require_name:
        name = (data.get('name') or '').strip()
        if not name:
            errors.append('Name is required')
        if len(name) > 200:
            errors.append('Name must be 200 characters or fewer')

    email = (data.get('email') or '').strip()
    if not email:
        errors.append('Email is required')
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    password = data.get('password') or ''
    if len(password) < 8:
        errors.append('Password must be at least 8 characters')
    if len(password) > 128:
        errors.append('Password must be 128 characters or fewer')

    return errors


_TEXT_LIMITS = {
    'full_name': 200,
    'gender': 50,
    'blood_group': 10,
    'existing_diseases': 1000,
    'medications': 1000,
    'allergies': 1000,
    'family_history': 1000,
    'diet': 200,
    'exercise': 200,
    'phone': 20,
    'address': 500,
    'occupation': 200,
    'city': 100,
    'country': 100,
    'region': 100,
}

_NUMERIC_LIMITS = {
    'age': (0, 130, int),
    'height': (30, 272, float),
    'weight': (2, 650, float),
    'sleep_hours': (0, 24, float),
}


def validate_profile_update(data: dict) -> list:
    """Validate profile update input. Returns list of error strings (empty = valid)."""
    errors = []

    for field, limit in _TEXT_LIMITS.items():
        value = data.get(field)
        if value is not None and len(str(value)) > limit:
            errors.append(f'{field} must be {limit} characters or fewer')

    for field, (low, high, cast) in _NUMERIC_LIMITS.items():
        value = data.get(field)
        if value is None or value == '':
            continue
        try:
            number = cast(value)
        except (ValueError, TypeError):
            errors.append(f'{field} must be a number')
            continue
        if number < low or number > high:
            errors.append(f'{field} must be between {low} and {high}')

    dob = data.get('date_of_birth')
    if dob is not None and dob != '':
        if not re.match(r'^\d{4}-\d{2}-\d{2}$', str(dob)):
            errors.append('Date of birth must be in YYYY-MM-DD format')
        else:
            try:
                parsed = datetime.strptime(str(dob), '%Y-%m-%d')
                if parsed > datetime.now():
                    errors.append('Date of birth cannot be in the future')
            except ValueError:
                errors.append('Date of birth is not a valid date')

    for field in ('smoking', 'alcohol'):
        if data.get(field) not in ('yes', 'no', 'occasionally', None, ''):
            errors.append(f'Invalid {field} value')

    return errors
