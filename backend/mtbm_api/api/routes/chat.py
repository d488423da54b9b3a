"""Chat API - Per-alert messaging between engineer and technician"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pymongo.database import Database

from ..deps import get_db, get_actor_dep, get_media_service
from ..schemas import SendMessageRequest
from ...domain.models import ActorContext
from ...domain.errors import ValidationError
from ...services.chat_service import ChatService
from ...services.media_service import MediaService
from ...utils.time import parse_iso

router = APIRouter()


def get_chat_service(
    db: Database = Depends(get_db),
    media_service: MediaService = Depends(get_media_service)
) -> ChatService:
    return ChatService(db, media_service)


def parse_since(since: Optional[str] = Query(None)) -> Optional[datetime]:
    """Polling cursor; only messages created strictly after it are returned"""
    if not since:
        return None
    try:
        return parse_iso(since)
    except (ValueError, OverflowError):
        raise ValidationError("Invalid since timestamp", details={"since": since})


def _sent(message) -> dict:
    return {"message": "Message sent successfully", "data": message.to_api()}


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/unread/count")
def unread_count(
    actor: ActorContext = Depends(get_actor_dep),
    service: ChatService = Depends(get_chat_service)
):
    return {"unreadCount": service.unread_count(actor)}


@router.get("/{alert_id}")
def list_messages(
    alert_id: str,
    since: Optional[datetime] = Depends(parse_since),
    actor: ActorContext = Depends(get_actor_dep),
    service: ChatService = Depends(get_chat_service)
):
    """
    Thread for one alert, oldest first

    Marks everything the other side sent as read.
    """
    messages, alert = service.list_messages(alert_id, actor, since=since)
    return {
        "messages": [m.to_api() for m in messages],
        "alert": alert.chat_summary(),
    }


@router.post("/{alert_id}", status_code=status.HTTP_201_CREATED)
def send_text(
    alert_id: str,
    payload: SendMessageRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: ChatService = Depends(get_chat_service)
):
    return _sent(service.send_text(alert_id, actor, payload.message))


@router.post("/{alert_id}/image", status_code=status.HTTP_201_CREATED)
def send_image(
    alert_id: str,
    image: UploadFile = File(...),
    actor: ActorContext = Depends(get_actor_dep),
    service: ChatService = Depends(get_chat_service)
):
    return _sent(service.send_image(alert_id, actor, image))


@router.post("/{alert_id}/voice", status_code=status.HTTP_201_CREATED)
def send_voice(
    alert_id: str,
    voice: UploadFile = File(...),
    duration: float = Form(0),
    actor: ActorContext = Depends(get_actor_dep),
    service: ChatService = Depends(get_chat_service)
):
    return _sent(service.send_voice(alert_id, actor, voice, duration))
