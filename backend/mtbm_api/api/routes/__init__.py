"""API Routes module"""
from fastapi import APIRouter, Depends
from pymongo.database import Database

from ..deps import get_db
from ...repositories.mongo_client import health_check
from .auth import router as auth_router
from .repair_alerts import router as repair_alerts_router
from .chat import router as chat_router
from .admin_chat import router as admin_chat_router
from .otp import router as otp_router
from .admin import router as admin_router
from .uploads import router as uploads_router
from .meetings import router as meetings_router
from .logbook import router as logbook_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(repair_alerts_router, prefix="/repair-alerts", tags=["Repair Alerts"])
api_router.include_router(chat_router, prefix="/chat", tags=["Chat"])
api_router.include_router(admin_chat_router, prefix="/admin-chat", tags=["Admin Chat"])
api_router.include_router(otp_router, prefix="/otp", tags=["OTP"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(uploads_router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(meetings_router, prefix="/meetings", tags=["Meetings"])
api_router.include_router(logbook_router, prefix="/logbook", tags=["Log Book"])


@api_router.get("/health", tags=["Health"])
def health(db: Database = Depends(get_db)):
    mongo = health_check(db)
    return {"ok": mongo["status"] == "healthy", "mongo": mongo}


__all__ = ["api_router"]
