# /clinic/utils/validators.py
"""Column-level input checks shared by the services."""
import re
from datetime import date, time, datetime
from decimal import Decimal, InvalidOperation

from clinic.utils.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def require_text(value, field, entity=None, max_length=None):
    """Returns the stripped string or raises if it is missing or blank."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", entity=entity, field=field)
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters",
                              entity=entity, field=field, value=value)
    return value


def optional_text(value, field, entity=None, max_length=None):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_text(value, field, entity=entity, max_length=max_length)


def validate_email(value, field='email', entity=None):
    email = require_text(value, field, entity=entity, max_length=100)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"{field} must look like name@domain.tld",
                              entity=entity, field=field, value=email)
    return email.lower()


def _has_fraction(value):
    if isinstance(value, float):
        return not value.is_integer()
    if isinstance(value, Decimal):
        return value.is_finite() and value != value.to_integral_value()
    return False


def validate_int_range(value, field, minimum=None, maximum=None, entity=None, required=True):
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", entity=entity, field=field)
        return None
    if isinstance(value, bool) or _has_fraction(value):
        raise ValidationError(f"{field} must be an integer", entity=entity, field=field, value=value)
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field} must be an integer", entity=entity, field=field, value=value)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", entity=entity, field=field, value=value)
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must be at most {maximum}", entity=entity, field=field, value=value)
    return number


def validate_amount(value, field, entity=None, allow_zero=True):
    try:
        amount = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a decimal amount", entity=entity, field=field, value=value)
    if amount < 0 or (amount == 0 and not allow_zero):
        rule = 'zero or more' if allow_zero else 'greater than zero'
        raise ValidationError(f"{field} must be {rule}", entity=entity, field=field, value=value)
    return amount


def parse_date(value, field, entity=None, required=True):
    """Accepts a date or an ISO 'YYYY-MM-DD' string."""
    if value is None or value == '':
        if required:
            raise ValidationError(f"{field} is required", entity=entity, field=field)
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format",
                              entity=entity, field=field, value=value)


def parse_time(value, field, entity=None):
    """Accepts a time or an 'HH:MM' / 'HH:MM:SS' string."""
    if value is None or value == '':
        raise ValidationError(f"{field} is required", entity=entity, field=field)
    if isinstance(value, time):
        parsed = value
    else:
        try:
            parsed = time.fromisoformat(str(value))
        except ValueError:
            raise ValidationError(f"{field} must be a time in HH:MM format",
                                  entity=entity, field=field, value=value)
    if parsed.tzinfo is not None:
        raise ValidationError(f"{field} must be a local clinic time without a UTC offset",
                              entity=entity, field=field, value=value)
    return parsed


def parse_bool(value, field, entity=None):
    """Accepts only real booleans; JSON strings such as "false" are rejected."""
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false", entity=entity, field=field, value=value)
    return value


def parse_enum(enum_cls, value, field, entity=None, default=None):
    """Maps a raw value onto a member of ``enum_cls`` by value."""
    if value is None:
        if default is not None:
            return default
        raise ValidationError(f"{field} is required", entity=entity, field=field)
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}", entity=entity, field=field, value=value)


def years_before(reference, years):
    """Same calendar day ``years`` earlier; Feb 29 falls back to Feb 28."""
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        return reference.replace(year=reference.year - years, day=28)
