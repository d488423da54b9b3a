"""Input normalisation helpers shared by services"""
import math
import re
from typing import Any, Optional

from ..domain.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


def clean(value: Any) -> str:
    """Trimmed string, empty for None/non-strings"""
    if not isinstance(value, str):
        return ""
    return value.strip()


def clean_optional(value: Any) -> Optional[str]:
    """Trimmed string, None when blank"""
    return clean(value) or None


def normalize_email(value: Any, required_message: str = "Email is required") -> str:
    """
    Lower-cased, trimmed email

    Raises:
        ValidationError: Missing or not shaped like an address
    """
    email = clean(value).lower()
    if not email:
        raise ValidationError(required_message)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email address", details={"email": email})
    return email


def require_password(value: Any, field: str = "Password", min_length: int = 6) -> str:
    password = value if isinstance(value, str) else ""
    if not password:
        raise ValidationError(f"{field} is required")
    if len(password) < min_length:
        raise ValidationError(f"{field} must be at least {min_length} characters")
    return password


def require_duration(value: Any) -> float:
    """
    Voice note length in seconds

    Raises:
        ValidationError: Negative, NaN or infinite
    """
    try:
        duration = float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError("Invalid duration", details={"duration": str(value)})
    if not math.isfinite(duration) or duration < 0:
        raise ValidationError("Duration must be a non-negative number", details={"duration": str(value)})
    return duration
