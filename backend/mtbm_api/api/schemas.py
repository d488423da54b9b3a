"""
Request Schemas

Request bodies arrive in camelCase. Fields are mostly optional here so the
services can answer with specific messages ("Subsystem and issue are
required") instead of generic schema errors.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Auth
# =============================================================================

class SignupRequest(CamelRequest):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    full_name: Optional[str] = None
    organization: Optional[str] = None
    photo_url: Optional[str] = None


class LoginRequest(CamelRequest):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class ProfileUpdateRequest(CamelRequest):
    full_name: Optional[str] = None
    organization: Optional[str] = None
    photo_url: Optional[str] = None


class ForgotPasswordRequest(CamelRequest):
    email: Optional[str] = None


class VerifyResetCodeRequest(CamelRequest):
    email: Optional[str] = None
    otp: Optional[str] = None


class ResetPasswordRequest(CamelRequest):
    """Accepts the emailed code as either ``otp`` or ``token``"""
    email: Optional[str] = None
    otp: Optional[str] = None
    token: Optional[str] = None
    new_password: Optional[str] = None


# =============================================================================
# Repair Alerts
# =============================================================================

class CreateAlertRequest(CamelRequest):
    subsystem: Optional[str] = None
    issue: Optional[str] = None
    priority: Optional[str] = None


class UpdateStatusRequest(CamelRequest):
    status: Optional[str] = None


class RateAlertRequest(CamelRequest):
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, max_length=2000)


# =============================================================================
# Messaging
# =============================================================================

class SendMessageRequest(CamelRequest):
    message: Optional[str] = Field(None, max_length=5000)


class ParticipantMessageRequest(SendMessageRequest):
    admin_id: Optional[str] = None


# =============================================================================
# OTP
# =============================================================================

class SendOtpRequest(CamelRequest):
    email: Optional[str] = None


class VerifyOtpRequest(CamelRequest):
    email: Optional[str] = None
    otp: Optional[str] = None


# =============================================================================
# Meetings & Log Book
# =============================================================================

class MeetingRequest(CamelRequest):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    message: Optional[str] = None


class MeetingStatusRequest(CamelRequest):
    status: Optional[str] = None


class LogEntryRequest(CamelRequest):
    issue: Optional[str] = None
    return_date: Optional[str] = Field(None, alias="return")
    duration: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
