"""Meeting & Log Book Service"""
from typing import List, Optional

from pymongo.database import Database

from ..domain.models import Meeting, LogEntry
from ..domain.enums import MeetingStatus
from ..domain.errors import DomainError, NotFoundError, ValidationError
from ..repositories.meeting_repo import MeetingRepository, LogbookRepository
from ..templates import EmailTemplateKey
from ..utils.idgen import generate_meeting_id, generate_log_entry_id
from ..utils.time import utc_now
from ..utils.validation import clean, normalize_email
from ..utils.logger import get_logger
from .mail_service import MailService

logger = get_logger(__name__)

MEETING_STATUS_VALUES = [s.value for s in MeetingStatus]


class MeetingService:
    """Public meeting bookings; emails go out after the response"""

    def __init__(self, db: Database, mail_service: Optional[MailService] = None):
        self.meeting_repo = MeetingRepository(db)
        self.mail_service = mail_service

    def book(
        self,
        name: Optional[str],
        email: Optional[str],
        preferred_date: Optional[str],
        preferred_time: Optional[str],
        phone: Optional[str] = None,
        message: Optional[str] = None
    ) -> Meeting:
        required = [clean(name), clean(email), clean(preferred_date), clean(preferred_time)]
        if not all(required):
            raise ValidationError("Name, email, preferred date and time are required.")

        now = utc_now()
        meeting = Meeting(
            id=generate_meeting_id(),
            name=clean(name),
            email=normalize_email(email),
            phone=clean(phone),
            preferred_date=clean(preferred_date),
            preferred_time=clean(preferred_time),
            message=clean(message),
            status=MeetingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self.meeting_repo.create_meeting(meeting)
        logger.info(f"Meeting request from {meeting.email}", extra={"action": "meeting_booked"})
        return meeting

    def send_notifications(self, meeting: Meeting) -> None:
        """
        Notify the team mailbox and confirm to the visitor

        Runs as a background task; failures are logged and never raised.
        """
        if self.mail_service is None or not self.mail_service.enabled:
            logger.warning(
                f"Mail not configured; meeting {meeting.id} emails skipped",
                extra={"action": "meeting_email"}
            )
            return

        payload = meeting.model_dump()
        team_mailbox = self.mail_service.settings.service_mailbox_email
        for key, recipient in [
            (EmailTemplateKey.MEETING_REQUESTED, team_mailbox),
            (EmailTemplateKey.MEETING_CONFIRMATION, meeting.email),
        ]:
            try:
                self.mail_service.send_template(key, [recipient], payload)
            except DomainError as e:
                logger.error(
                    f"Meeting email {key.value} failed: {e.message}",
                    extra={"action": "meeting_email", "status": "failed"}
                )

    def list_meetings(self) -> List[Meeting]:
        return self.meeting_repo.list_meetings()

    def update_status(self, meeting_id: str, status: Optional[str]) -> Meeting:
        if status not in MEETING_STATUS_VALUES:
            raise ValidationError("Valid status required", details={"allowed": MEETING_STATUS_VALUES})
        meeting = self.meeting_repo.update_status(meeting_id, status)
        if meeting is None:
            raise NotFoundError("Meeting not found", details={"meeting_id": meeting_id})
        return meeting


class LogbookService:
    """Machine dispatch/return log"""

    def __init__(self, db: Database):
        self.logbook_repo = LogbookRepository(db)

    def list_entries(self) -> List[LogEntry]:
        return self.logbook_repo.list_entries()

    def add_entry(
        self,
        issue: Optional[str],
        return_date: Optional[str],
        company: Optional[str],
        location: Optional[str],
        duration: Optional[str] = None
    ) -> LogEntry:
        for value, label in [
            (issue, "Issue date"),
            (return_date, "Return date"),
            (company, "Company"),
            (location, "Location"),
        ]:
            if not clean(value):
                raise ValidationError(f"{label} is required")

        now = utc_now()
        entry = LogEntry(
            id=generate_log_entry_id(),
            issue=clean(issue),
            return_date=clean(return_date),
            duration=clean(duration),
            company=clean(company),
            location=clean(location),
            created_at=now,
            updated_at=now,
        )
        return self.logbook_repo.create_entry(entry)
