"""Log Book API - Equipment dispatch and return records"""
from fastapi import APIRouter, Depends, status
from pymongo.database import Database

from ..deps import get_db, get_current_user_dep
from ..schemas import LogEntryRequest
from ...domain.models import User
from ...services.meeting_service import LogbookService

router = APIRouter()


def get_logbook_service(db: Database = Depends(get_db)) -> LogbookService:
    return LogbookService(db)


@router.get("")
def list_entries(
    user: User = Depends(get_current_user_dep),
    service: LogbookService = Depends(get_logbook_service)
):
    return {"entries": [e.to_api() for e in service.list_entries()]}


@router.post("", status_code=status.HTTP_201_CREATED)
def add_entry(
    payload: LogEntryRequest,
    user: User = Depends(get_current_user_dep),
    service: LogbookService = Depends(get_logbook_service)
):
    entry = service.add_entry(
        issue=payload.issue,
        return_date=payload.return_date,
        company=payload.company,
        location=payload.location,
        duration=payload.duration,
    )
    return {"entry": entry.to_api()}
