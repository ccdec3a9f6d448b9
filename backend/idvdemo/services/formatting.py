"""Normalise validated input into the shapes the Vouched API expects."""

import re
from datetime import date, datetime

from idvdemo.core.masking import digits_only

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
US_DATE_FORMATS = ("%m/%d/%Y", "%m-%d-%Y")


def format_phone(phone: str) -> str:
    """E.164: ten digits get +1, everything else gets a bare + prefix."""
    digits = digits_only(phone)
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"


def parse_date_of_birth(value: str) -> date | None:
    value = value.strip()
    if ISO_DATE.match(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    for fmt in US_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date_of_birth(value: str) -> str:
    parsed = parse_date_of_birth(value)
    return parsed.isoformat() if parsed else value


def format_ssn(ssn: str) -> str:
    # Either the last four or all nine digits, dashes removed
    return digits_only(ssn)
