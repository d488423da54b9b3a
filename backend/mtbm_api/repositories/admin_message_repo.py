"""Admin Message Repository - Data access for the admin channel"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING

from ..domain.models import AdminMessage, ConversationSummary
from ..domain.enums import UserRole
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AdminMessageRepository:
    """Repository for admin <-> participant messages"""

    COLLECTION_NAME = "admin_messages"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_message(self, message: AdminMessage) -> AdminMessage:
        self._collection.insert_one(message.to_document())
        logger.info(
            f"Admin channel message from {message.sender_role}",
            extra={
                "message_id": message.id,
                "user_id": message.participant_id,
                "role": message.sender_role,
            }
        )
        return message

    def get_message(self, message_id: str) -> Optional[AdminMessage]:
        doc = self._collection.find_one({"_id": message_id})
        if doc is None:
            return None
        return AdminMessage.from_document(doc)

    def delete_message(self, message_id: str) -> bool:
        result = self._collection.delete_one({"_id": message_id})
        return result.deleted_count > 0

    def list_thread(
        self,
        participant_id: str,
        admin_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 100
    ) -> List[AdminMessage]:
        """
        Messages of a participant, oldest first

        Args:
            participant_id: Engineer or technician the thread belongs to
            admin_id: Restrict to one admin's thread (admin view)
            since: Only messages strictly newer than this
        """
        query: Dict[str, Any] = {"participant_id": participant_id}
        if admin_id:
            query["admin_id"] = admin_id
        if since is not None:
            query["created_at"] = {"$gt": since}

        cursor = self._collection.find(query).sort("created_at", ASCENDING).limit(limit)
        return [AdminMessage.from_document(doc) for doc in cursor]

    def mark_read_by_admin(self, admin_id: str, participant_id: str) -> int:
        """Admin opened the thread: participant-sent messages become read"""
        result = self._collection.update_many(
            {
                "admin_id": admin_id,
                "participant_id": participant_id,
                "sender_role": {"$ne": UserRole.ADMIN.value},
                "is_read": False,
            },
            {"$set": {"is_read": True}}
        )
        return result.modified_count

    def mark_read_by_participant(self, participant_id: str) -> int:
        """Participant opened their thread: admin-sent messages become read"""
        result = self._collection.update_many(
            {
                "participant_id": participant_id,
                "sender_role": UserRole.ADMIN.value,
                "is_read": False,
            },
            {"$set": {"is_read": True}}
        )
        return result.modified_count

    def count_unread_for_participant(self, participant_id: str) -> int:
        return self._collection.count_documents({
            "participant_id": participant_id,
            "sender_role": UserRole.ADMIN.value,
            "is_read": False,
        })

    def latest_for_participant(self, participant_id: str) -> Optional[AdminMessage]:
        doc = self._collection.find_one(
            {"participant_id": participant_id},
            sort=[("created_at", DESCENDING)]
        )
        if doc is None:
            return None
        return AdminMessage.from_document(doc)

    def conversations(self, admin_id: str) -> List[ConversationSummary]:
        """One row per participant, most recently active first"""
        pipeline = [
            {"$match": {"admin_id": admin_id}},
            {"$sort": {"created_at": DESCENDING}},
            {"$group": {
                "_id": "$participant_id",
                "participant_role": {"$first": "$participant_role"},
                "participant_name": {"$first": "$participant_name"},
                "participant_email": {"$first": "$participant_email"},
                "last_message": {"$first": "$message"},
                "last_message_type": {"$first": "$message_type"},
                "last_message_at": {"$first": "$created_at"},
                "unread_count": {"$sum": {
                    "$cond": [
                        {"$and": [
                            {"$eq": ["$is_read", False]},
                            {"$ne": ["$sender_role", UserRole.ADMIN.value]},
                        ]},
                        1,
                        0,
                    ]
                }},
            }},
            {"$sort": {"last_message_at": DESCENDING}},
        ]
        return [
            ConversationSummary.model_validate(row)
            for row in self._collection.aggregate(pipeline)
        ]
