"""Chat Service - Per-alert message threads between engineer and technician"""
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import UploadFile
from pymongo.database import Database

from ..domain.models import ActorContext, ChatMessage, RepairAlert
from ..domain.enums import MediaKind, MessageType, UserRole
from ..domain.errors import AlertNotFoundError, ValidationError
from ..engine.permission_guard import AlertPermissionGuard
from ..repositories.repair_alert_repo import RepairAlertRepository
from ..repositories.message_repo import MessageRepository
from ..utils.idgen import generate_message_id
from ..utils.time import utc_now
from ..utils.validation import clean, require_duration
from ..utils.logger import get_logger
from .media_service import MediaService

logger = get_logger(__name__)

THREAD_LIMIT = 100


def other_side(side: str) -> str:
    if side == UserRole.ENGINEER.value:
        return UserRole.TECHNICIAN.value
    return UserRole.ENGINEER.value


class ChatService:
    """
    Messaging inside one repair alert

    Only the alert's engineer and assigned technician may use the thread,
    and only after the alert left pending. Listing a thread marks the
    counterpart's messages read.
    """

    def __init__(self, db: Database, media_service: Optional[MediaService] = None):
        self.alert_repo = RepairAlertRepository(db)
        self.message_repo = MessageRepository(db)
        self.permission_guard = AlertPermissionGuard()
        self.media_service = media_service

    def _open_thread(self, alert_id: str, actor: ActorContext) -> Tuple[RepairAlert, str]:
        alert = self.alert_repo.get_alert(alert_id)
        if alert is None:
            raise AlertNotFoundError("Repair alert not found", details={"alert_id": alert_id})
        side = self.permission_guard.require_chat_access(actor, alert)
        return alert, side

    def list_messages(
        self,
        alert_id: str,
        actor: ActorContext,
        since: Optional[datetime] = None
    ) -> Tuple[List[ChatMessage], RepairAlert]:
        """
        Messages oldest first, at most 100, strictly after ``since`` if given
        """
        alert, side = self._open_thread(alert_id, actor)
        messages = self.message_repo.list_for_alert(alert_id, since=since, limit=THREAD_LIMIT)
        self.message_repo.mark_read(alert_id, other_side(side))
        return messages, alert

    def _new_message(self, alert_id: str, actor: ActorContext, side: str, **content) -> ChatMessage:
        now = utc_now()
        message = ChatMessage(
            id=generate_message_id(),
            repair_alert_id=alert_id,
            sender_id=actor.user_id,
            sender_name=actor.display_name,
            sender_role=side,
            created_at=now,
            updated_at=now,
            **content
        )
        return self.message_repo.create_message(message)

    def send_text(self, alert_id: str, actor: ActorContext, text: Optional[str]) -> ChatMessage:
        _, side = self._open_thread(alert_id, actor)
        body = clean(text)
        if not body:
            raise ValidationError("Message cannot be empty")
        return self._new_message(alert_id, actor, side, message=body, message_type=MessageType.TEXT)

    def send_image(self, alert_id: str, actor: ActorContext, upload: UploadFile) -> ChatMessage:
        _, side = self._open_thread(alert_id, actor)
        stored = self.media_service.store(upload, MediaKind.CHAT_IMAGE, MediaService.CHAT_FOLDER)
        return self._new_message(
            alert_id, actor, side,
            message_type=MessageType.IMAGE,
            image_url=stored.path,
        )

    def send_voice(
        self,
        alert_id: str,
        actor: ActorContext,
        upload: UploadFile,
        duration: float = 0
    ) -> ChatMessage:
        _, side = self._open_thread(alert_id, actor)
        duration = require_duration(duration)
        stored = self.media_service.store(upload, MediaKind.CHAT_VOICE, MediaService.CHAT_FOLDER)
        return self._new_message(
            alert_id, actor, side,
            message_type=MessageType.VOICE,
            voice_url=stored.path,
            voice_duration=duration,
        )

    def unread_count(self, actor: ActorContext) -> int:
        """
        Unread counterpart messages across every thread the caller is in

        Admins take part in no alert chat and always get 0.
        """
        if actor.role not in (UserRole.ENGINEER, UserRole.TECHNICIAN):
            return 0
        alert_ids = self.alert_repo.chat_alert_ids(actor.user_id, actor.role)
        return self.message_repo.count_unread(alert_ids, other_side(actor.role))
