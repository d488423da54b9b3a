"""Repository modules - Data access layer"""
from .mongo_client import connect, close_connection, create_indexes, health_check
from .user_repo import UserRepository
from .repair_alert_repo import RepairAlertRepository
from .message_repo import MessageRepository
from .admin_message_repo import AdminMessageRepository
from .otp_repo import OtpRepository
from .meeting_repo import MeetingRepository, LogbookRepository

__all__ = [
    "connect",
    "close_connection",
    "create_indexes",
    "health_check",
    "UserRepository",
    "RepairAlertRepository",
    "MessageRepository",
    "AdminMessageRepository",
    "OtpRepository",
    "MeetingRepository",
    "LogbookRepository",
]
