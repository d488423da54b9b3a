"""OTP Repository - Data access for email verification codes"""
from typing import Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import DESCENDING, ReturnDocument

from ..domain.models import OtpRecord
from ..utils.time import utc_now


class OtpRepository:
    """Repository for one-time code records"""

    COLLECTION_NAME = "otps"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def create_otp(self, record: OtpRecord) -> OtpRecord:
        self._collection.insert_one(record.to_document())
        return record

    def consume(self, email: str, code: str) -> Optional[OtpRecord]:
        """
        Mark the newest matching, unverified, unexpired record as verified

        Returns:
            The verified record, or None when nothing matched
        """
        doc = self._collection.find_one_and_update(
            {
                "email": email.lower(),
                "otp": code,
                "verified": False,
                "expires_at": {"$gt": utc_now()},
            },
            {"$set": {"verified": True}},
            sort=[("created_at", DESCENDING)],
            return_document=ReturnDocument.AFTER
        )
        if doc is None:
            return None
        return OtpRecord.from_document(doc)

    def has_verified(self, email: str) -> bool:
        """True if the email completed verification at least once"""
        doc = self._collection.find_one({"email": email.lower(), "verified": True})
        return doc is not None
