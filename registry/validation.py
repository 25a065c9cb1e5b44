"""Registration form validation and record construction."""

import re
from datetime import date, datetime, timezone
from typing import Dict, Mapping, Optional

from dateutil.relativedelta import relativedelta

from .dates import parse_date
from .errors import ValidationError
from .record import DEFAULT_STATUS, VEHICLE_TYPES

MAX_VALIDITY_YEARS = 3

PLATE_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z]{1,2}[0-9]{4}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s.]+$")
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

# Indian mobile numbers, optionally prefixed with 0, 91 or +91
PHONE_PATTERNS = [
    re.compile(r"^[6789]\d{9}$"),
    re.compile(r"^0[6789]\d{9}$"),
    re.compile(r"^91[6789]\d{9}$"),
    re.compile(r"^(\+91)?[6789]\d{9}$"),
]
BOGUS_PHONE_PATTERNS = [
    re.compile(r"^(\d)\1{9}$"),
    re.compile(r"^1234567890$"),
    re.compile(r"^0987654321$"),
]

DOMAIN_TYPOS = {
    "gmail.co": "gmail.com",
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "yahoo.co": "yahoo.com",
    "hotmai.com": "hotmail.com",
    "outlok.com": "outlook.com",
}


def validate_owner_name(value: Optional[str]) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("ownerName", "Owner name is required")
    if len(name) < 2:
        raise ValidationError("ownerName", "Name must be at least 2 characters")
    if not NAME_PATTERN.match(name):
        raise ValidationError("ownerName", "Name can only contain letters, spaces, and dots")
    return name


def validate_email(value: Optional[str], field: str = "ownerEmail") -> str:
    email = (value or "").strip()
    if not email:
        raise ValidationError(field, "Email address is required")
    if len(email) > 254:
        raise ValidationError(field, "Email address is too long")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(field, "Please enter a valid email address")
    domain = email.split("@")[1]
    if domain in DOMAIN_TYPOS:
        suggestion = email.replace(domain, DOMAIN_TYPOS[domain])
        raise ValidationError(field, f"Did you mean {suggestion}?")
    return email


def validate_phone(value: Optional[str]) -> str:
    phone = (value or "").strip()
    if not phone:
        raise ValidationError("ownerPhone", "Phone number is required")

    digits = re.sub(r"\D", "", phone)
    if len(digits) < 10:
        raise ValidationError("ownerPhone", "Phone number is too short")
    if len(digits) > 15:
        raise ValidationError("ownerPhone", "Phone number is too long")

    if not any(p.match(digits) or p.match(phone) for p in PHONE_PATTERNS):
        raise ValidationError("ownerPhone", "Please enter a valid Indian phone number")
    if any(p.match(digits) for p in BOGUS_PHONE_PATTERNS):
        raise ValidationError("ownerPhone", "Please enter a valid phone number")
    return phone


def validate_vehicle_type(value: Optional[str]) -> str:
    if not value:
        raise ValidationError("vehicleType", "Please select a vehicle type")
    if value not in VEHICLE_TYPES:
        raise ValidationError("vehicleType", f"Unknown vehicle type '{value}'")
    return value


def validate_registration_number(value: Optional[str]) -> str:
    """Normalize to upper case and check the plate format (e.g. MH12AB1234)."""
    plate = (value or "").strip().upper()
    if not plate:
        raise ValidationError("registrationNumber", "Registration number is required")
    if not PLATE_PATTERN.match(plate):
        raise ValidationError("registrationNumber", "Invalid format. Use: MH12AB1234")
    return plate


def _required_date(value: Optional[str], field: str, label: str, today: date) -> date:
    if not value:
        raise ValidationError(field, f"{label} is required")
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(field, f"{label} is not a valid date")
    if parsed.date() < today:
        raise ValidationError(field, f"{label} cannot be in the past")
    return parsed.date()


def validate_dates(testing: date, expiring: date) -> None:
    """Expiry must fall after testing, within MAX_VALIDITY_YEARS of it."""
    if expiring <= testing:
        raise ValidationError("expiringDate", "Expiring date must be after testing date")
    if expiring > testing + relativedelta(years=MAX_VALIDITY_YEARS):
        raise ValidationError("expiringDate", "Expiring date seems too far in the future")


def validate_registration(form: Mapping[str, Optional[str]], today: date) -> Dict[str, str]:
    """
    Check every registration form field.

    Returns a mapping of field name -> error message; empty when valid.
    """
    errors: Dict[str, str] = {}
    checks = [
        ("ownerName", validate_owner_name),
        ("ownerEmail", validate_email),
        ("ownerPhone", validate_phone),
        ("vehicleType", validate_vehicle_type),
        ("registrationNumber", validate_registration_number),
    ]
    for field, check in checks:
        try:
            check(form.get(field))
        except ValidationError as e:
            errors[e.field] = e.message

    testing = expiring = None
    try:
        testing = _required_date(form.get("testingDate"), "testingDate", "Testing date", today)
    except ValidationError as e:
        errors[e.field] = e.message
    try:
        expiring = _required_date(form.get("expiringDate"), "expiringDate", "Expiring date", today)
    except ValidationError as e:
        errors[e.field] = e.message

    if testing is not None and expiring is not None:
        try:
            validate_dates(testing, expiring)
        except ValidationError as e:
            errors[e.field] = e.message
    return errors


def build_registration(
    form: Mapping[str, Optional[str]],
    submitted_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Wire record for a validated form submission."""
    now = now or datetime.now(timezone.utc)
    record = {
        "ownerName": (form.get("ownerName") or "").strip(),
        "ownerEmail": (form.get("ownerEmail") or "").strip(),
        "ownerPhone": (form.get("ownerPhone") or "").strip(),
        "vehicleType": form.get("vehicleType"),
        "registrationNumber": validate_registration_number(form.get("registrationNumber")),
        "testingDate": form.get("testingDate"),
        "expiringDate": form.get("expiringDate"),
        "submittedAt": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "status": DEFAULT_STATUS,
    }
    if submitted_by:
        record["submittedBy"] = submitted_by
    return record
