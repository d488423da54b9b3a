"""ID Generation Utilities"""
import uuid
from typing import Optional

from .time import utc_now


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix

    Args:
        prefix: Optional prefix for the ID (e.g., 'USR', 'RA', 'MSG')

    Returns:
        Unique ID string

    Examples:
        >>> generate_id('RA')
        'RA-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    unique_part = uuid.uuid4().hex[:12]

    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_user_id() -> str:
    """Generate user ID"""
    return generate_id("USR")


def generate_alert_id() -> str:
    """Generate repair alert ID"""
    return generate_id("RA")


def generate_message_id() -> str:
    """Generate alert chat message ID"""
    return generate_id("MSG")


def generate_admin_message_id() -> str:
    """Generate admin channel message ID"""
    return generate_id("AMSG")


def generate_otp_id() -> str:
    """Generate OTP record ID"""
    return generate_id("OTP")


def generate_meeting_id() -> str:
    """Generate meeting request ID"""
    return generate_id("MTG")


def generate_log_entry_id() -> str:
    """Generate log book entry ID"""
    return generate_id("LOG")


def generate_media_filename(extension: str = "") -> str:
    """Random file name for stored uploads, keeping a short extension"""
    safe_ext = extension if extension and len(extension) <= 10 else ""
    return f"{uuid.uuid4().hex}{safe_ext}"


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = utc_now().strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
