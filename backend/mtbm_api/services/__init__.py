"""Service layer - Business logic"""
from .auth_service import AuthService
from .repair_alert_service import RepairAlertService
from .chat_service import ChatService
from .admin_chat_service import AdminChatService
from .otp_service import OtpService
from .report_service import ReportService
from .meeting_service import MeetingService, LogbookService
from .mail_service import MailService
from .media_service import MediaService

__all__ = [
    "AuthService",
    "RepairAlertService",
    "ChatService",
    "AdminChatService",
    "OtpService",
    "ReportService",
    "MeetingService",
    "LogbookService",
    "MailService",
    "MediaService",
]
