"""MongoDB Client - Connection and Index Management"""
from typing import Any, Dict
from pymongo import MongoClient as PyMongoClient
from pymongo.database import Database
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import Settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


def connect(settings: Settings) -> PyMongoClient:
    """
    Open a client and verify the server answers

    Raises:
        ConnectionFailure: If MongoDB cannot be reached
    """
    logger.info(f"Connecting to MongoDB database: {settings.mongodb_db}")
    client = PyMongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=5000,
        socketTimeoutMS=30000,
    )
    try:
        client.admin.command("ping")
        logger.info("MongoDB connection successful")
    except ConnectionFailure as e:
        logger.error(f"MongoDB connection failed: {e}")
        client.close()
        raise
    return client


def close_connection(client: PyMongoClient) -> None:
    """Close MongoDB connection"""
    client.close()
    logger.info("MongoDB connection closed")


def create_indexes(db: Database) -> None:
    """Create all required indexes"""
    logger.info("Creating MongoDB indexes...")

    # Users - one account per (email, role)
    users = db["users"]
    users.create_index([("email", ASCENDING), ("role", ASCENDING)], unique=True)
    users.create_index("role")

    # Repair alerts
    repair_alerts = db["repair_alerts"]
    repair_alerts.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    repair_alerts.create_index([("engineer_id", ASCENDING), ("status", ASCENDING)])
    repair_alerts.create_index([("technician_id", ASCENDING), ("status", ASCENDING)])
    repair_alerts.create_index("created_at")

    # Per-alert chat
    messages = db["messages"]
    messages.create_index([("repair_alert_id", ASCENDING), ("created_at", ASCENDING)])
    messages.create_index([("repair_alert_id", ASCENDING), ("is_read", ASCENDING)])

    # Admin channel
    admin_messages = db["admin_messages"]
    admin_messages.create_index(
        [("admin_id", ASCENDING), ("participant_id", ASCENDING), ("created_at", DESCENDING)]
    )
    admin_messages.create_index([("participant_id", ASCENDING), ("created_at", DESCENDING)])

    # One-time codes expire on their own
    otps = db["otps"]
    otps.create_index("expires_at", expireAfterSeconds=0)
    otps.create_index([("email", ASCENDING), ("created_at", DESCENDING)])

    # Meetings & log book
    db["meetings"].create_index("created_at")
    db["log_entries"].create_index("created_at")

    logger.info("MongoDB indexes created successfully")


def health_check(db: Database) -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        db.command("ping")
        return {
            "status": "healthy",
            "database": db.name,
            "connection": "ok"
        }
    except PyMongoError as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": db.name,
            "error": str(e)
        }
