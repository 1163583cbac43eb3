"""Small formatting helpers shared by models and routes."""

import random
import string
from datetime import date, datetime, timezone
from flask import request


def json_body():
    """The request JSON when it is an object, otherwise an empty dict."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def isoformat(value):
    """Serialise a datetime (or None) for JSON responses."""
    return value.isoformat() if value else None


def money(value):
    """Round a rupee amount to paise."""
    return round(float(value or 0), 2)


def random_digits(length):
    return ''.join(random.choices(string.digits, k=length))


def random_code(length):
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


def to_base36(number):
    """Encode a non-negative integer in base 36, upper-cased."""
    alphabet = string.digits + string.ascii_uppercase
    if number == 0:
        return '0'
    encoded = ''
    while number:
        number, remainder = divmod(number, 36)
        encoded = alphabet[remainder] + encoded
    return encoded


def timestamp_ms():
    return int(datetime.utcnow().timestamp() * 1000)


def parse_bool(value):
    """Interpret query-string and JSON flags such as 'true', '1', True."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    return str(value).lower() in ('1', 'true', 'yes', 'on')


def parse_datetime(value):
    """Parse an ISO 8601 string into a naive UTC datetime. Empty values give None."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def next_occurrence(month_day, today=None):
    """Next date (today or later) falling on an MM-DD."""
    today = today or datetime.utcnow().date()
    month, day = (int(part) for part in month_day.split('-'))
    for year in range(today.year, today.year + 5):
        try:
            candidate = date(year, month, day)
        except ValueError:
            # 02-29 outside a leap year
            continue
        if candidate >= today:
            return candidate
    raise ValueError(f'Invalid date {month_day}')
