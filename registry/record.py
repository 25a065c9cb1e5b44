"""Registration record and its per-load expiry status."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from .dates import classify_urgency, countdown_text, days_until
from .urgency import Urgency

DEFAULT_STATUS = "pending"

VEHICLE_TYPES = {
    "2-wheeler": "2W",
    "3-wheeler": "3W",
    "4-wheeler": "4W",
    "heavy-vehicle": "HV",
}

# Wire keys owned by Registration; everything else is kept in `extra`.
_KNOWN_KEYS = {
    "id",
    "ownerName",
    "ownerEmail",
    "email",
    "ownerPhone",
    "phone",
    "vehicleType",
    "registrationNumber",
    "testingDate",
    "expiringDate",
    "submittedAt",
    "createdAt",
    "status",
}

# Preferred key -> fallback alias. An alias shadowed by its preferred key stays in `extra`.
_ALIASES = {
    "ownerEmail": "email",
    "ownerPhone": "phone",
    "submittedAt": "createdAt",
}


class Registration:
    """One vehicle's roadworthiness registration, as stored."""

    def __init__(
        self,
        id: Optional[str] = None,
        owner_name: Optional[str] = None,
        owner_email: Optional[str] = None,
        owner_phone: Optional[str] = None,
        vehicle_type: Optional[str] = None,
        registration_number: Optional[str] = None,
        testing_date: Optional[str] = None,
        expiring_date: Optional[str] = None,
        submitted_at: Optional[str] = None,
        status: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.id = id
        self.owner_name = owner_name
        self.owner_email = owner_email
        self.owner_phone = owner_phone
        self.vehicle_type = vehicle_type
        self.registration_number = registration_number
        self.testing_date = testing_date
        self.expiring_date = expiring_date
        self.submitted_at = submitted_at
        self.status = status or DEFAULT_STATUS
        self.extra = dict(extra or {})

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "Registration":
        """Build from a wire mapping, applying alias and default rules."""
        extra = {k: v for k, v in dct.items() if k not in _KNOWN_KEYS}
        for key, alias in _ALIASES.items():
            if dct.get(key) and alias in dct:
                extra[alias] = dct[alias]
        return cls(
            id=_text(dct.get("id")),
            owner_name=_text(dct.get("ownerName")),
            owner_email=_text(dct.get("ownerEmail") or dct.get("email")),
            owner_phone=_text(dct.get("ownerPhone") or dct.get("phone")),
            vehicle_type=_text(dct.get("vehicleType")),
            registration_number=_text(dct.get("registrationNumber")),
            testing_date=_text(dct.get("testingDate")),
            expiring_date=_text(dct.get("expiringDate")),
            submitted_at=_text(dct.get("submittedAt") or dct.get("createdAt")),
            status=_text(dct.get("status")),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to wire format (camelCase keys, None values omitted)."""
        d: Dict[str, Any] = {}
        if self.id is not None:
            d["id"] = self.id
        if self.owner_name is not None:
            d["ownerName"] = self.owner_name
        if self.owner_email is not None:
            d["ownerEmail"] = self.owner_email
        if self.owner_phone is not None:
            d["ownerPhone"] = self.owner_phone
        if self.vehicle_type is not None:
            d["vehicleType"] = self.vehicle_type
        if self.registration_number is not None:
            d["registrationNumber"] = self.registration_number
        if self.testing_date is not None:
            d["testingDate"] = self.testing_date
        if self.expiring_date is not None:
            d["expiringDate"] = self.expiring_date
        if self.submitted_at is not None:
            d["submittedAt"] = self.submitted_at
        d["status"] = self.status
        d.update(self.extra)
        return d

    @property
    def vehicle_type_label(self) -> str:
        """Short vehicle type label (2W, 3W, 4W, HV)."""
        if not self.vehicle_type:
            return "N/A"
        return VEHICLE_TYPES.get(self.vehicle_type, self.vehicle_type)

    @property
    def short_id(self) -> str:
        """Last eight characters of the id, for table display."""
        return (self.id or "")[-8:]

    def __repr__(self) -> str:
        return f"Registration(id={self.id!r}, registration_number={self.registration_number!r})"


def _text(value: Any) -> Optional[str]:
    """Stored scalars as strings; absent stays None."""
    if value is None or value == "":
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


@dataclass
class ExpiryStatus:
    """A registration plus its derived, never-persisted expiry fields."""

    registration: Registration
    urgency: Urgency
    days_until_expiry: Optional[int] = None
    countdown: str = "N/A"

    @classmethod
    def derive(cls, registration: Registration, today: date) -> "ExpiryStatus":
        days = days_until(registration.expiring_date, today)
        return cls(
            registration=registration,
            urgency=classify_urgency(days),
            days_until_expiry=days,
            countdown=countdown_text(registration.expiring_date, today),
        )
