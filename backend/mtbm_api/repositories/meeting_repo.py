"""Meeting & Log Book Repositories"""
from typing import List, Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import DESCENDING, ReturnDocument

from ..domain.models import Meeting, LogEntry
from ..utils.time import utc_now


class MeetingRepository:
    """Repository for meeting booking requests"""

    COLLECTION_NAME = "meetings"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_meeting(self, meeting: Meeting) -> Meeting:
        self._collection.insert_one(meeting.to_document())
        return meeting

    def list_meetings(self, limit: int = 200) -> List[Meeting]:
        cursor = self._collection.find().sort("created_at", DESCENDING).limit(limit)
        return [Meeting.from_document(doc) for doc in cursor]

    def update_status(self, meeting_id: str, status: str) -> Optional[Meeting]:
        doc = self._collection.find_one_and_update(
            {"_id": meeting_id},
            {"$set": {"status": status, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return Meeting.from_document(doc)


class LogbookRepository:
    """Repository for machine log book entries"""

    COLLECTION_NAME = "log_entries"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_entry(self, entry: LogEntry) -> LogEntry:
        self._collection.insert_one(entry.to_document())
        return entry

    def list_entries(self, limit: int = 200) -> List[LogEntry]:
        cursor = self._collection.find().sort("created_at", DESCENDING).limit(limit)
        return [LogEntry.from_document(doc) for doc in cursor]
