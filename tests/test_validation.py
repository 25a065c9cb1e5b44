#!/usr/bin/env python3
"""Tests for registration form validation."""
from datetime import date, datetime, timezone

import pytest

from registry import ValidationError
from registry.validation import (
    build_registration,
    validate_dates,
    validate_email,
    validate_owner_name,
    validate_phone,
    validate_registration,
    validate_registration_number,
    validate_vehicle_type,
)

TODAY = date(2025, 1, 1)


@pytest.fixture
def form():
    return {
        "ownerName": "Asha Rao",
        "ownerEmail": "asha@example.com",
        "ownerPhone": "9876543210",
        "vehicleType": "4-wheeler",
        "registrationNumber": "mh12ab1234",
        "testingDate": "2025-01-10",
        "expiringDate": "2026-01-10",
    }


class TestValidateOwnerName:
    """Tests for validate_owner_name."""

    def test_valid(self):
        assert validate_owner_name("  Dr. Asha Rao ") == "Dr. Asha Rao"

    @pytest.mark.parametrize(
        "value,message",
        [
            ("", "Owner name is required"),
            ("A", "Name must be at least 2 characters"),
            ("R2D2", "Name can only contain letters, spaces, and dots"),
        ],
    )
    def test_invalid(self, value, message):
        with pytest.raises(ValidationError) as exc:
            validate_owner_name(value)
        assert exc.value.field == "ownerName"
        assert exc.value.message == message


class TestValidateEmail:
    """Tests for validate_email."""

    def test_valid(self):
        assert validate_email("asha@example.com") == "asha@example.com"

    def test_required(self):
        with pytest.raises(ValidationError, match="required"):
            validate_email("")

    def test_malformed(self):
        with pytest.raises(ValidationError, match="valid email"):
            validate_email("asha@")

    def test_domain_typo_suggestion(self):
        with pytest.raises(ValidationError) as exc:
            validate_email("asha@gmail.co")
        assert exc.value.message == "Did you mean asha@gmail.com?"


class TestValidatePhone:
    """Tests for validate_phone."""

    @pytest.mark.parametrize("value", ["9876543210", "09876543210", "+91 98765 43210", "919876543210"])
    def test_valid(self, value):
        assert validate_phone(value) == value

    @pytest.mark.parametrize(
        "value,message",
        [
            ("", "Phone number is required"),
            ("12345", "Phone number is too short"),
            ("1234567890123456", "Phone number is too long"),
            ("1234567890", "Please enter a valid Indian phone number"),
            ("9999999999", "Please enter a valid phone number"),
        ],
    )
    def test_invalid(self, value, message):
        with pytest.raises(ValidationError) as exc:
            validate_phone(value)
        assert exc.value.message == message


class TestValidateVehicleAndPlate:
    """Tests for vehicle type and registration number."""

    def test_vehicle_type(self):
        assert validate_vehicle_type("3-wheeler") == "3-wheeler"
        with pytest.raises(ValidationError):
            validate_vehicle_type("")
        with pytest.raises(ValidationError):
            validate_vehicle_type("tractor")

    def test_plate_normalized(self):
        assert validate_registration_number(" mh12ab1234 ") == "MH12AB1234"
        assert validate_registration_number("KA05M4321") == "KA05M4321"

    @pytest.mark.parametrize("value", ["", "MH1AB1234", "MH12ABC1234", "MH12AB123"])
    def test_plate_invalid(self, value):
        with pytest.raises(ValidationError) as exc:
            validate_registration_number(value)
        assert exc.value.field == "registrationNumber"


class TestValidateDates:
    """Tests for the testing/expiring date relationship."""

    def test_valid(self):
        validate_dates(date(2025, 1, 10), date(2026, 1, 10))

    def test_exactly_three_years_allowed(self):
        validate_dates(date(2025, 1, 10), date(2028, 1, 10))

    def test_expiry_must_follow_testing(self):
        with pytest.raises(ValidationError, match="after testing date"):
            validate_dates(date(2025, 1, 10), date(2025, 1, 10))

    def test_expiry_too_far(self):
        with pytest.raises(ValidationError, match="too far"):
            validate_dates(date(2025, 1, 10), date(2028, 1, 11))


class TestValidateRegistration:
    """Tests for validate_registration."""

    def test_valid_form(self, form):
        assert validate_registration(form, TODAY) == {}

    def test_collects_all_errors(self, form):
        form["ownerName"] = ""
        form["ownerPhone"] = "123"
        form["registrationNumber"] = "bad"
        errors = validate_registration(form, TODAY)
        assert set(errors) == {"ownerName", "ownerPhone", "registrationNumber"}

    def test_testing_date_in_past(self, form):
        form["testingDate"] = "2024-12-31"
        errors = validate_registration(form, TODAY)
        assert errors == {"testingDate": "Testing date cannot be in the past"}

    def test_missing_dates(self, form):
        del form["testingDate"]
        form["expiringDate"] = ""
        errors = validate_registration(form, TODAY)
        assert errors["testingDate"] == "Testing date is required"
        assert errors["expiringDate"] == "Expiring date is required"

    def test_unparseable_date(self, form):
        form["expiringDate"] = "next year"
        errors = validate_registration(form, TODAY)
        assert errors == {"expiringDate": "Expiring date is not a valid date"}

    def test_date_relationship_checked(self, form):
        form["expiringDate"] = "2025-01-05"
        errors = validate_registration(form, TODAY)
        assert errors == {"expiringDate": "Expiring date must be after testing date"}


class TestBuildRegistration:
    """Tests for build_registration."""

    def test_builds_wire_record(self, form):
        now = datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)
        record = build_registration(form, submitted_by="abc@gmail.com", now=now)
        assert record == {
            "ownerName": "Asha Rao",
            "ownerEmail": "asha@example.com",
            "ownerPhone": "9876543210",
            "vehicleType": "4-wheeler",
            "registrationNumber": "MH12AB1234",
            "testingDate": "2025-01-10",
            "expiringDate": "2026-01-10",
            "submittedAt": "2025-01-01T09:30:00.000Z",
            "status": "pending",
            "submittedBy": "abc@gmail.com",
        }

    def test_no_submitter(self, form):
        record = build_registration(form, now=datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert "submittedBy" not in record
