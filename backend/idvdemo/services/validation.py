import re

from idvdemo.core.errors import RequestValidationFailed
from idvdemo.core.masking import digits_only
from idvdemo.schemas.verification import VerificationRequest
from idvdemo.services.formatting import parse_date_of_birth

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SSN_PATTERN = re.compile(r"^(?:\d{3}-?\d{2}-?\d{4}|\d{4})$")
MIN_PHONE_DIGITS = 10


def check_required(request: VerificationRequest) -> None:
    if request.missing_fields():
        raise RequestValidationFailed(
            f"{request.describe_required()} are required fields",
            "MISSING_REQUIRED_FIELDS",
        )


def check_ssn(ssn: str) -> None:
    if not SSN_PATTERN.match(ssn):
        raise RequestValidationFailed(
            "SSN must be in format XXX-XX-XXXX or XXXX (last 4 digits)",
            "INVALID_SSN_FORMAT",
        )


def check_date_of_birth(value: str) -> None:
    if parse_date_of_birth(value) is None:
        raise RequestValidationFailed(
            "dateOfBirth must be a valid date", "INVALID_DATE_FORMAT"
        )


def check_phone(phone: str) -> None:
    if len(digits_only(phone)) < MIN_PHONE_DIGITS:
        raise RequestValidationFailed(
            f"Phone number must contain at least {MIN_PHONE_DIGITS} digits",
            "INVALID_PHONE_FORMAT",
        )


def check_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email):
        raise RequestValidationFailed("Invalid email format", "INVALID_EMAIL_FORMAT")


def validate_request(request: VerificationRequest) -> None:
    """Raise RequestValidationFailed for the first problem found.

    Presence is checked before format; formats are checked in the order
    ssn, date of birth, phone, email, skipping optional fields left empty.
    """
    check_required(request)
    ssn = getattr(request, "ssn", None)
    if ssn:
        check_ssn(ssn)
    date_of_birth = getattr(request, "date_of_birth", None)
    if date_of_birth:
        check_date_of_birth(date_of_birth)
    if request.phone:
        check_phone(request.phone)
    if request.email:
        check_email(request.email)
