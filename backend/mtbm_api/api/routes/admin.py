"""Admin API - Dashboard statistics and reports

Everything here is computed on demand from the alert and user
collections; nothing is cached or persisted.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from ..deps import get_db, require_admin_dep
from ...domain.models import User
from ...services.report_service import ReportService

router = APIRouter()


def get_report_service(db: Database = Depends(get_db)) -> ReportService:
    return ReportService(db)


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/stats/overview")
def stats_overview(
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return service.overview()


@router.get("/engineers")
def list_engineers(
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return {"engineers": service.engineers()}


@router.get("/technicians")
def list_technicians(
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return {"technicians": service.technicians()}


@router.get("/alerts")
def list_alerts(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return {"alerts": service.alerts(status=status_filter, priority=priority, limit=limit)}


# =============================================================================
# Reports
# =============================================================================

@router.get("/reports/monthly")
def monthly_report(
    month: Optional[str] = Query(None, description="Zero-based month (0 = January)"),
    year: Optional[str] = Query(None),
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return service.monthly_report(month, year)


@router.get("/reports/monthly/user")
def monthly_user_report(
    user_id: Optional[str] = Query(None, alias="userId"),
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    admin: User = Depends(require_admin_dep),
    service: ReportService = Depends(get_report_service)
):
    return service.monthly_user_report(user_id, month, year)
