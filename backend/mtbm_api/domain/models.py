"""Domain Models - Pydantic schemas for all entities

Documents are stored in MongoDB with snake_case keys and the entity id in
``_id``; the API speaks camelCase (``engineerId``, ``acceptedAt``, ``_id``).
"""
from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Set
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from .enums import (
    UserRole, AlertPriority, AlertStatus, MessageType, MeetingStatus
)
from ..utils.time import format_iso


UtcDatetime = Annotated[datetime, PlainSerializer(format_iso, return_type=str, when_used="json")]


class DocumentModel(BaseModel):
    """Base for every persisted entity"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    id: str = Field(..., alias="_id")

    def to_document(self) -> Dict[str, Any]:
        """Dump for MongoDB - keeps datetimes native so sorting works"""
        doc = self.model_dump()
        doc["_id"] = doc.pop("id")
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]):
        return cls.model_validate(doc)

    def to_api(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys"""
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


# ============================================================================
# Users & Identity
# ============================================================================

class User(DocumentModel):
    """Account record. (email, role) is unique."""
    email: str
    role: UserRole
    full_name: str
    organization: str
    photo_url: str = ""
    password_hash: str
    reset_token: Optional[str] = None
    reset_token_expires: Optional[UtcDatetime] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    PRIVATE_FIELDS: ClassVar[Set[str]] = {"password_hash", "reset_token", "reset_token_expires"}

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    def to_safe(self) -> Dict[str, Any]:
        """Public representation - never includes credentials"""
        return self.to_api(exclude=self.PRIVATE_FIELDS)

    def to_summary(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
        }


class ActorContext(BaseModel):
    """Authenticated caller, resolved from the bearer token"""
    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    user_id: str = Field(..., description="User id (token subject)")
    email: str = Field(..., description="User email")
    role: UserRole = Field(..., description="Account role")
    full_name: str = Field("", description="User display name")

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    @classmethod
    def from_user(cls, user: User) -> "ActorContext":
        return cls(
            user_id=user.id,
            email=user.email,
            role=user.role,
            full_name=user.full_name,
        )


# ============================================================================
# Repair Alerts
# ============================================================================

class RepairAlert(DocumentModel):
    """Maintenance ticket raised by an engineer and fixed by a technician"""
    subsystem: str
    issue: str
    priority: AlertPriority = AlertPriority.MEDIUM
    status: AlertStatus = AlertStatus.PENDING

    engineer_id: str
    engineer_name: str
    engineer_email: str

    # Filled when a technician accepts
    technician_id: Optional[str] = None
    technician_name: Optional[str] = None
    technician_email: Optional[str] = None

    accepted_at: Optional[UtcDatetime] = None
    resolved_at: Optional[UtcDatetime] = None

    # Engineer's rating of the fix, set at most once
    rating: Optional[int] = Field(None, ge=1, le=5)
    rating_comment: Optional[str] = None
    rated_at: Optional[UtcDatetime] = None

    created_at: UtcDatetime
    updated_at: UtcDatetime

    def chat_summary(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "subsystem": self.subsystem,
            "issue": self.issue,
            "status": self.status,
            "engineerName": self.engineer_name,
            "technicianName": self.technician_name,
            "priority": self.priority,
        }


# ============================================================================
# Messaging
# ============================================================================

class ChatMessage(DocumentModel):
    """Message in the chat thread of one repair alert"""
    repair_alert_id: str
    sender_id: str
    sender_name: str
    sender_role: UserRole
    message: str = ""
    message_type: MessageType = MessageType.TEXT
    image_url: Optional[str] = None
    voice_url: Optional[str] = None
    voice_duration: float = 0
    is_read: bool = False
    created_at: UtcDatetime
    updated_at: UtcDatetime


class AdminMessage(DocumentModel):
    """Message in an admin <-> engineer/technician thread"""
    participant_id: str
    participant_role: UserRole
    participant_name: str
    participant_email: str
    admin_id: str
    admin_name: str
    sender_id: str
    sender_role: UserRole
    sender_name: str
    message: str = ""
    message_type: MessageType = MessageType.TEXT
    image_url: Optional[str] = None
    voice_url: Optional[str] = None
    voice_duration: float = 0
    is_read: bool = False
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @property
    def media_url(self) -> Optional[str]:
        return self.image_url or self.voice_url


class ConversationSummary(BaseModel):
    """One row of the admin's conversation list"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    participant_id: str = Field(..., alias="_id")
    participant_role: str
    participant_name: str
    participant_email: str
    last_message: str = ""
    last_message_type: str = MessageType.TEXT.value
    last_message_at: UtcDatetime
    unread_count: int = 0


# ============================================================================
# One-time codes
# ============================================================================

class OtpRecord(DocumentModel):
    """Email verification code; removed by a TTL index after expires_at"""
    email: str
    otp: str
    expires_at: UtcDatetime
    verified: bool = False
    created_at: UtcDatetime


# ============================================================================
# Meetings & Log Book
# ============================================================================

class Meeting(DocumentModel):
    """Public meeting booking request"""
    name: str
    email: str
    phone: str = ""
    preferred_date: str
    preferred_time: str
    message: str = ""
    status: MeetingStatus = MeetingStatus.PENDING
    created_at: UtcDatetime
    updated_at: UtcDatetime


class LogEntry(DocumentModel):
    """Machine log book line (dispatch and return of equipment)"""
    issue: str
    return_date: str = Field(..., alias="return")
    duration: str = ""
    company: str
    location: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TechnicianRating(BaseModel):
    """Aggregated rating of one technician"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    average_rating: Optional[float] = None
    total_ratings: int = 0
    ratings: List[Dict[str, Any]] = Field(default_factory=list)
