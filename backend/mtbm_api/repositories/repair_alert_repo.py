"""Repair Alert Repository - Data access for repair alerts"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import DESCENDING, ReturnDocument

from ..domain.models import RepairAlert
from ..domain.enums import AlertStatus
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class RepairAlertRepository:
    """Repository for repair alert operations"""

    COLLECTION_NAME = "repair_alerts"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_alert(self, alert: RepairAlert) -> RepairAlert:
        self._collection.insert_one(alert.to_document())
        logger.info(
            f"Created repair alert {alert.id}",
            extra={"alert_id": alert.id, "user_id": alert.engineer_id}
        )
        return alert

    def get_alert(self, alert_id: str) -> Optional[RepairAlert]:
        doc = self._collection.find_one({"_id": alert_id})
        if doc is None:
            return None
        return RepairAlert.from_document(doc)

    def list_alerts(
        self,
        status: Optional[str] = None,
        engineer_id: Optional[str] = None,
        technician_id: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = 50
    ) -> List[RepairAlert]:
        """List alerts newest first"""
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status
        if engineer_id:
            query["engineer_id"] = engineer_id
        if technician_id:
            query["technician_id"] = technician_id
        if priority:
            query["priority"] = priority

        cursor = self._collection.find(query).sort("created_at", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return [RepairAlert.from_document(doc) for doc in cursor]

    def list_created_between(
        self,
        start: datetime,
        end: datetime,
        engineer_id: Optional[str] = None,
        technician_id: Optional[str] = None
    ) -> List[RepairAlert]:
        """Alerts with start <= created_at < end, newest first"""
        query: Dict[str, Any] = {"created_at": {"$gte": start, "$lt": end}}
        if engineer_id:
            query["engineer_id"] = engineer_id
        if technician_id:
            query["technician_id"] = technician_id

        cursor = self._collection.find(query).sort("created_at", DESCENDING)
        return [RepairAlert.from_document(doc) for doc in cursor]

    def count_by_status(self) -> Dict[str, int]:
        return {
            status.value: self._collection.count_documents({"status": status.value})
            for status in AlertStatus
        }

    def chat_alert_ids(self, user_id: str, role: str) -> List[str]:
        """
        Ids of the alerts whose chat the user takes part in

        Engineers: alerts they created that left pending.
        Technicians: alerts assigned to them.
        """
        if role == "engineer":
            query = {"engineer_id": user_id, "status": {"$ne": AlertStatus.PENDING.value}}
        else:
            query = {"technician_id": user_id}
        return [doc["_id"] for doc in self._collection.find(query, {"_id": 1})]

    def update_if_status(
        self,
        alert_id: str,
        expected_status: str,
        updates: Dict[str, Any]
    ) -> Optional[RepairAlert]:
        """
        Compare-and-swap on the status field

        Returns:
            The updated alert, or None if the alert is gone or its status
            no longer equals expected_status
        """
        updates = dict(updates)
        updates["updated_at"] = utc_now()
        doc = self._collection.find_one_and_update(
            {"_id": alert_id, "status": expected_status},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return RepairAlert.from_document(doc)

    def set_rating(
        self,
        alert_id: str,
        rating: int,
        comment: Optional[str],
        rated_at: datetime
    ) -> Optional[RepairAlert]:
        """Store a rating only if none exists yet on a resolved alert"""
        doc = self._collection.find_one_and_update(
            {
                "_id": alert_id,
                "status": AlertStatus.RESOLVED.value,
                "rating": None,
            },
            {"$set": {
                "rating": rating,
                "rating_comment": comment,
                "rated_at": rated_at,
                "updated_at": utc_now(),
            }},
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return RepairAlert.from_document(doc)

    def delete_alert(self, alert_id: str) -> bool:
        result = self._collection.delete_one({"_id": alert_id})
        return result.deleted_count > 0

    def list_rated_for_technician(self, technician_id: str) -> List[RepairAlert]:
        cursor = self._collection.find({
            "technician_id": technician_id,
            "rating": {"$ne": None},
        }).sort("rated_at", DESCENDING)
        return [RepairAlert.from_document(doc) for doc in cursor]
