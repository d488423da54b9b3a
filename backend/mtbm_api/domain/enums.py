"""Domain Enumerations - All status and type definitions"""
from enum import Enum


class UserRole(str, Enum):
    """Account roles. The same email may hold one account per role."""
    ENGINEER = "engineer"
    TECHNICIAN = "technician"
    ADMIN = "admin"


class AlertPriority(str, Enum):
    """Repair alert priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertStatus(str, Enum):
    """Repair alert lifecycle status"""
    PENDING = "pending"           # Raised by an engineer, waiting for a technician
    IN_PROGRESS = "in-progress"   # Accepted by a technician, chat unlocked
    RESOLVED = "resolved"         # Fixed, may be rated once


class MessageType(str, Enum):
    """Chat message payload kind"""
    TEXT = "text"
    IMAGE = "image"
    VOICE = "voice"


class MeetingStatus(str, Enum):
    """Meeting booking status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class MediaKind(str, Enum):
    """Kinds of uploaded media, each with its own size/type ceiling"""
    AVATAR = "avatar"
    CHAT_IMAGE = "chat_image"
    CHAT_VOICE = "chat_voice"


# Roles allowed to self-register
SIGNUP_ROLES = [UserRole.ENGINEER, UserRole.TECHNICIAN]

# Roles taking part in repair alert chat and the admin channel
PARTICIPANT_ROLES = [UserRole.ENGINEER, UserRole.TECHNICIAN]
