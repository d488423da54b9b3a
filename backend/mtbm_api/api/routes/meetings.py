"""Meetings API - Public booking form and admin review"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from pymongo.database import Database

from ..deps import get_db, get_mail_service, require_admin_dep
from ..schemas import MeetingRequest, MeetingStatusRequest
from ...domain.models import User
from ...services.mail_service import MailService
from ...services.meeting_service import MeetingService

router = APIRouter()


def get_meeting_service(
    db: Database = Depends(get_db),
    mail_service: MailService = Depends(get_mail_service)
) -> MeetingService:
    return MeetingService(db, mail_service)


@router.post("", status_code=status.HTTP_201_CREATED)
def book_meeting(
    payload: MeetingRequest,
    background_tasks: BackgroundTasks,
    service: MeetingService = Depends(get_meeting_service)
):
    """Saves the request and answers at once; emails go out afterwards"""
    meeting = service.book(
        name=payload.name,
        email=payload.email,
        preferred_date=payload.preferred_date,
        preferred_time=payload.preferred_time,
        phone=payload.phone,
        message=payload.message,
    )
    background_tasks.add_task(service.send_notifications, meeting)
    return {"message": "Meeting request submitted successfully!", "meeting": meeting.to_api()}


@router.get("")
def list_meetings(
    admin: User = Depends(require_admin_dep),
    service: MeetingService = Depends(get_meeting_service)
):
    return {"meetings": [m.to_api() for m in service.list_meetings()]}


@router.patch("/{meeting_id}")
def update_meeting_status(
    meeting_id: str,
    payload: MeetingStatusRequest,
    admin: User = Depends(require_admin_dep),
    service: MeetingService = Depends(get_meeting_service)
):
    meeting = service.update_status(meeting_id, payload.status)
    return {"meeting": meeting.to_api()}
