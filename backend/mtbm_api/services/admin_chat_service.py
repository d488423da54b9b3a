"""Admin Chat Service - Admin <-> engineer/technician channel"""
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import UploadFile
from pymongo.database import Database

from ..domain.models import ActorContext, AdminMessage, ConversationSummary, User
from ..domain.enums import MediaKind, MessageType, UserRole
from ..domain.errors import (
    MessageNotFoundError, NotFoundError, PermissionDeniedError, UserNotFoundError, ValidationError
)
from ..engine.permission_guard import AlertPermissionGuard
from ..repositories.admin_message_repo import AdminMessageRepository
from ..repositories.user_repo import UserRepository
from ..utils.idgen import generate_admin_message_id
from ..utils.time import utc_now
from ..utils.validation import clean, require_duration
from ..utils.logger import get_logger
from .media_service import MediaService

logger = get_logger(__name__)

THREAD_LIMIT = 100


class AdminChatService:
    """
    Threads keyed by (admin, participant) with no pending gate

    Participant-side sends pick the admin: an explicit adminId, else the
    admin of the participant's latest message, else any admin.
    """

    def __init__(self, db: Database, media_service: Optional[MediaService] = None):
        self.message_repo = AdminMessageRepository(db)
        self.user_repo = UserRepository(db)
        self.permission_guard = AlertPermissionGuard()
        self.media_service = media_service

    # =========================================================================
    # Lookups
    # =========================================================================

    def _load_user(self, user_id: str) -> User:
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise UserNotFoundError("User not found", details={"user_id": user_id})
        return user

    def get_participant(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: No such user
            ValidationError: The user is an admin
        """
        participant = self._load_user(user_id)
        if participant.role == UserRole.ADMIN:
            raise ValidationError(
                "Cannot start chat with another admin",
                details={"user_id": user_id}
            )
        return participant

    def resolve_admin(self, participant: User, admin_id: Optional[str] = None) -> User:
        admin: Optional[User] = None
        if admin_id:
            admin = self.user_repo.get_admin(admin_id)
        else:
            latest = self.message_repo.latest_for_participant(participant.id)
            if latest is not None:
                admin = self.user_repo.get_admin(latest.admin_id)
            if admin is None:
                admin = self.user_repo.find_any_admin()

        if admin is None:
            raise NotFoundError("No admin available")
        return admin

    def _new_message(
        self,
        participant: User,
        admin: User,
        sender: User,
        **content
    ) -> AdminMessage:
        now = utc_now()
        message = AdminMessage(
            id=generate_admin_message_id(),
            participant_id=participant.id,
            participant_role=participant.role,
            participant_name=participant.display_name,
            participant_email=participant.email,
            admin_id=admin.id,
            admin_name=admin.display_name,
            sender_id=sender.id,
            sender_role=sender.role,
            sender_name=sender.display_name,
            created_at=now,
            updated_at=now,
            **content
        )
        return self.message_repo.create_message(message)

    def _content(self, kind: str, text: Optional[str] = None, upload: Optional[UploadFile] = None,
                 duration: float = 0) -> dict:
        if kind == MessageType.TEXT:
            body = clean(text)
            if not body:
                raise ValidationError("Message cannot be empty")
            return {"message": body, "message_type": MessageType.TEXT}

        if kind == MessageType.IMAGE:
            stored = self.media_service.store(upload, MediaKind.CHAT_IMAGE, MediaService.ADMIN_CHAT_FOLDER)
            return {"message_type": MessageType.IMAGE, "image_url": stored.path}

        duration = require_duration(duration)
        stored = self.media_service.store(upload, MediaKind.CHAT_VOICE, MediaService.ADMIN_CHAT_FOLDER)
        return {"message_type": MessageType.VOICE, "voice_url": stored.path, "voice_duration": duration}

    # =========================================================================
    # Admin side
    # =========================================================================

    def conversations(self, admin: User) -> List[ConversationSummary]:
        return self.message_repo.conversations(admin.id)

    def admin_thread(
        self,
        admin: User,
        participant_id: str,
        since: Optional[datetime] = None
    ) -> Tuple[List[AdminMessage], Optional[User]]:
        messages = self.message_repo.list_thread(
            participant_id, admin_id=admin.id, since=since, limit=THREAD_LIMIT
        )
        self.message_repo.mark_read_by_admin(admin.id, participant_id)
        return messages, self.user_repo.get_user(participant_id)

    def admin_send(
        self,
        admin: User,
        participant_id: str,
        kind: str = MessageType.TEXT,
        text: Optional[str] = None,
        upload: Optional[UploadFile] = None,
        duration: float = 0
    ) -> AdminMessage:
        if kind == MessageType.TEXT and not clean(text):
            raise ValidationError("Message cannot be empty")
        participant = self.get_participant(participant_id)
        content = self._content(kind, text, upload, duration)
        return self._new_message(participant, admin, admin, **content)

    def start_conversation(
        self,
        admin: User,
        participant_id: str,
        text: Optional[str] = None
    ) -> User:
        """Validate the participant and optionally seed the thread"""
        participant = self.get_participant(participant_id)
        if clean(text):
            self._new_message(participant, admin, admin, message=clean(text))
        logger.info(
            f"Conversation started with {participant.email}",
            extra={"user_id": participant.id, "action": "start_conversation"}
        )
        return participant

    # =========================================================================
    # Participant side
    # =========================================================================

    def participant_thread(
        self,
        participant: User,
        since: Optional[datetime] = None
    ) -> List[AdminMessage]:
        self.permission_guard.require_admin_channel_participant(ActorContext.from_user(participant))
        messages = self.message_repo.list_thread(participant.id, since=since, limit=THREAD_LIMIT)
        self.message_repo.mark_read_by_participant(participant.id)
        return messages

    def participant_send(
        self,
        participant: User,
        kind: str = MessageType.TEXT,
        text: Optional[str] = None,
        upload: Optional[UploadFile] = None,
        duration: float = 0,
        admin_id: Optional[str] = None
    ) -> AdminMessage:
        self.permission_guard.require_admin_channel_participant(ActorContext.from_user(participant))
        if kind == MessageType.TEXT and not clean(text):
            raise ValidationError("Message cannot be empty")
        admin = self.resolve_admin(participant, admin_id)
        content = self._content(kind, text, upload, duration)
        return self._new_message(participant, admin, participant, **content)

    def participant_unread(self, participant: User) -> int:
        self.permission_guard.require_admin_channel_participant(ActorContext.from_user(participant))
        return self.message_repo.count_unread_for_participant(participant.id)

    # =========================================================================
    # Both sides
    # =========================================================================

    def delete_message(self, message_id: str, actor: ActorContext) -> None:
        message = self.message_repo.get_message(message_id)
        if message is None:
            raise MessageNotFoundError("Message not found", details={"message_id": message_id})
        if message.sender_id != actor.user_id:
            raise PermissionDeniedError(
                "You can only delete your own messages",
                details={"message_id": message_id}
            )

        self.message_repo.delete_message(message_id)
        if self.media_service is not None:
            self.media_service.delete(message.media_url)
        logger.info(
            "Admin channel message deleted",
            extra={"message_id": message_id, "user_id": actor.user_id, "action": "delete"}
        )
