"""Message Repository - Data access for per-alert chat threads"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import ASCENDING

from ..domain.models import ChatMessage
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MessageRepository:
    """Repository for repair alert chat messages"""

    COLLECTION_NAME = "messages"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_message(self, message: ChatMessage) -> ChatMessage:
        self._collection.insert_one(message.to_document())
        logger.info(
            f"Message sent in alert {message.repair_alert_id}",
            extra={
                "alert_id": message.repair_alert_id,
                "message_id": message.id,
                "role": message.sender_role,
            }
        )
        return message

    def list_for_alert(
        self,
        alert_id: str,
        since: Optional[datetime] = None,
        limit: int = 100
    ) -> List[ChatMessage]:
        """Oldest first; only messages strictly after ``since`` when given"""
        query: Dict[str, Any] = {"repair_alert_id": alert_id}
        if since is not None:
            query["created_at"] = {"$gt": since}

        cursor = self._collection.find(query).sort("created_at", ASCENDING).limit(limit)
        return [ChatMessage.from_document(doc) for doc in cursor]

    def mark_read(self, alert_id: str, sender_role: str) -> int:
        """Flip every unread message from sender_role in the thread"""
        result = self._collection.update_many(
            {"repair_alert_id": alert_id, "sender_role": sender_role, "is_read": False},
            {"$set": {"is_read": True}}
        )
        return result.modified_count

    def count_unread(self, alert_ids: List[str], sender_role: str) -> int:
        if not alert_ids:
            return 0
        return self._collection.count_documents({
            "repair_alert_id": {"$in": alert_ids},
            "sender_role": sender_role,
            "is_read": False,
        })

    def media_urls_for_alert(self, alert_id: str) -> List[str]:
        cursor = self._collection.find(
            {"repair_alert_id": alert_id, "message_type": {"$in": ["image", "voice"]}},
            {"image_url": 1, "voice_url": 1}
        )
        urls = [doc.get("image_url") or doc.get("voice_url") for doc in cursor]
        return [url for url in urls if url]

    def delete_for_alert(self, alert_id: str) -> int:
        result = self._collection.delete_many({"repair_alert_id": alert_id})
        return result.deleted_count
