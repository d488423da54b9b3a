"""Admin Chat API - Admin <-> engineer/technician channel"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pymongo.database import Database

from ..deps import get_db, get_actor_dep, get_current_user_dep, get_media_service, require_admin_dep
from ..schemas import SendMessageRequest, ParticipantMessageRequest
from .chat import parse_since
from ...domain.models import ActorContext, AdminMessage, User
from ...domain.enums import MessageType
from ...services.admin_chat_service import AdminChatService
from ...services.media_service import MediaService

router = APIRouter()


def get_admin_chat_service(
    db: Database = Depends(get_db),
    media_service: MediaService = Depends(get_media_service)
) -> AdminChatService:
    return AdminChatService(db, media_service)


def _sent(message: AdminMessage) -> dict:
    return {"message": "Message sent successfully", "data": message.to_api()}


# =============================================================================
# Admin side
# =============================================================================

@router.get("/conversations")
def list_conversations(
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    """One row per participant, most recent first"""
    conversations = service.conversations(admin)
    return {"conversations": [c.model_dump(mode="json", by_alias=True) for c in conversations]}


@router.get("/messages/{user_id}")
def get_thread(
    user_id: str,
    since: Optional[datetime] = Depends(parse_since),
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    messages, participant = service.admin_thread(admin, user_id, since=since)
    return {
        "messages": [m.to_api() for m in messages],
        "participant": participant.to_summary() if participant else None,
    }


@router.post("/messages/{user_id}", status_code=status.HTTP_201_CREATED)
def admin_send_text(
    user_id: str,
    payload: SendMessageRequest,
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.admin_send(admin, user_id, MessageType.TEXT, text=payload.message))


@router.post("/messages/{user_id}/image", status_code=status.HTTP_201_CREATED)
def admin_send_image(
    user_id: str,
    image: UploadFile = File(...),
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.admin_send(admin, user_id, MessageType.IMAGE, upload=image))


@router.post("/messages/{user_id}/voice", status_code=status.HTTP_201_CREATED)
def admin_send_voice(
    user_id: str,
    voice: UploadFile = File(...),
    duration: float = Form(0),
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.admin_send(admin, user_id, MessageType.VOICE, upload=voice, duration=duration))


@router.post("/start/{user_id}")
def start_conversation(
    user_id: str,
    payload: Optional[SendMessageRequest] = None,
    admin: User = Depends(require_admin_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    participant = service.start_conversation(admin, user_id, payload.message if payload else None)
    return {"message": "Conversation started", "participant": participant.to_summary()}


# =============================================================================
# Participant side
# =============================================================================

@router.get("/user/messages")
def get_my_thread(
    since: Optional[datetime] = Depends(parse_since),
    user: User = Depends(get_current_user_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    messages = service.participant_thread(user, since=since)
    return {"messages": [m.to_api() for m in messages]}


@router.post("/user/messages", status_code=status.HTTP_201_CREATED)
def participant_send_text(
    payload: ParticipantMessageRequest,
    user: User = Depends(get_current_user_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.participant_send(
        user, MessageType.TEXT, text=payload.message, admin_id=payload.admin_id
    ))


@router.post("/user/messages/image", status_code=status.HTTP_201_CREATED)
def participant_send_image(
    image: UploadFile = File(...),
    admin_id: Optional[str] = Form(None, alias="adminId"),
    user: User = Depends(get_current_user_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.participant_send(user, MessageType.IMAGE, upload=image, admin_id=admin_id))


@router.post("/user/messages/voice", status_code=status.HTTP_201_CREATED)
def participant_send_voice(
    voice: UploadFile = File(...),
    duration: float = Form(0),
    admin_id: Optional[str] = Form(None, alias="adminId"),
    user: User = Depends(get_current_user_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return _sent(service.participant_send(
        user, MessageType.VOICE, upload=voice, duration=duration, admin_id=admin_id
    ))


@router.get("/user/unread")
def participant_unread(
    user: User = Depends(get_current_user_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    return {"unreadCount": service.participant_unread(user)}


# =============================================================================
# Both sides
# =============================================================================

@router.delete("/messages/{message_id}")
def delete_message(
    message_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: AdminChatService = Depends(get_admin_chat_service)
):
    service.delete_message(message_id, actor)
    return {"message": "Message deleted successfully"}
