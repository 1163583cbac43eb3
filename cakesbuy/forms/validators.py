"""Reusable field validators."""

from wtforms.validators import Regexp

phone_number = Regexp(r'^[6-9]\d{9}$', message='Please enter a valid 10 digit mobile number')
pincode = Regexp(r'^[1-9]\d{5}$', message='Please enter a valid 6 digit pincode')
month_day = Regexp(r'^(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$', message='Date must be in MM-DD format')
gst_number = Regexp(r'^\d{2}[A-Z]{5}\d{4}[A-Z][1-9A-Z]Z[0-9A-Z]$', message='Invalid GST number')
pan_number = Regexp(r'^[A-Z]{5}\d{4}[A-Z]$', message='Invalid PAN number')


def as_text(value):
    """JSON numbers sent for phone numbers, pincodes and OTPs are read as text."""
    if value is None or isinstance(value, str):
        return value
    return str(value)
