"""Demo credential check for the login page."""

from dataclasses import dataclass
from typing import Dict, Optional

from .errors import ValidationError
from .validation import validate_email

DEMO_EMAIL = "abc@gmail.com"
DEMO_PASSWORD = "password"
DEMO_TOKEN = "demo-jwt-token"

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthResult:
    success: bool
    token: Optional[str] = None
    email: Optional[str] = None
    message: str = ""


def validate_login(email: Optional[str], password: Optional[str]) -> Dict[str, str]:
    """Field errors for the login form; empty when it can be submitted."""
    errors = {}
    try:
        validate_email(email, field="email")
    except ValidationError as e:
        errors[e.field] = e.message
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return errors


def authenticate(email: Optional[str], password: Optional[str]) -> AuthResult:
    """Check credentials against the single demo account."""
    email = (email or "").strip()
    if email == DEMO_EMAIL and password == DEMO_PASSWORD:
        return AuthResult(success=True, token=DEMO_TOKEN, email=email, message="Login successful")
    return AuthResult(success=False, message="Invalid email or password")
