"""Repair Alerts API - Create, list, accept, resolve, rate"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database

from ..deps import get_db, get_actor_dep, get_media_service
from ..schemas import CreateAlertRequest, UpdateStatusRequest, RateAlertRequest
from ...domain.models import ActorContext
from ...domain.enums import AlertStatus
from ...services.repair_alert_service import RepairAlertService
from ...services.media_service import MediaService

router = APIRouter()


def get_alert_service(
    db: Database = Depends(get_db),
    media_service: MediaService = Depends(get_media_service)
) -> RepairAlertService:
    return RepairAlertService(db, media_service)


# =============================================================================
# Collection
# =============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
def create_alert(
    payload: CreateAlertRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    """Engineers raise a new pending alert"""
    alert = service.create_alert(actor, payload.subsystem, payload.issue, payload.priority)
    return {"message": "Repair alert created successfully", "alert": alert.to_api()}


@router.get("")
def list_alerts(
    status_filter: Optional[str] = Query(None, alias="status"),
    engineer_id: Optional[str] = Query(None, alias="engineerId"),
    technician_id: Optional[str] = Query(None, alias="technicianId"),
    limit: int = Query(50, ge=1, le=500),
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    """
    Newest first. Any authenticated user sees every alert; technicians use
    this as the job board.
    """
    alerts = service.list_alerts(
        status=status_filter,
        engineer_id=engineer_id,
        technician_id=technician_id,
        limit=limit,
    )
    return {"alerts": [a.to_api() for a in alerts]}


@router.get("/my-alerts")
def list_my_alerts(
    status_filter: Optional[str] = Query(None, alias="status"),
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    alerts = service.list_my_alerts(actor, status=status_filter)
    return {"alerts": [a.to_api() for a in alerts]}


@router.get("/stats/summary")
def stats_summary(
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    return service.stats_summary()


@router.get("/technician/{technician_id}/rating")
def technician_rating(
    technician_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    return service.technician_rating(technician_id).model_dump(by_alias=True)


@router.get("/technician/{technician_id}/stats")
def technician_stats(
    technician_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    return service.technician_stats(technician_id)


# =============================================================================
# Single alert
# =============================================================================

@router.get("/{alert_id}")
def get_alert(
    alert_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    return {"alert": service.get_alert(alert_id).to_api()}


@router.patch("/{alert_id}")
def update_alert_status(
    alert_id: str,
    payload: UpdateStatusRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    """Accept (technician) or resolve (assignee or creator)"""
    alert = service.transition(alert_id, payload.status, actor)
    if alert.status == AlertStatus.IN_PROGRESS.value:
        message = "Alert accepted successfully"
    else:
        message = "Alert updated successfully"
    return {"message": message, "alert": alert.to_api()}


@router.delete("/{alert_id}")
def delete_alert(
    alert_id: str,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    service.delete_alert(alert_id, actor)
    return {"message": "Repair alert deleted successfully"}


@router.post("/{alert_id}/rate")
def rate_alert(
    alert_id: str,
    payload: RateAlertRequest,
    actor: ActorContext = Depends(get_actor_dep),
    service: RepairAlertService = Depends(get_alert_service)
):
    alert = service.rate_alert(alert_id, actor, payload.rating, payload.comment)
    return {"message": "Rating submitted successfully", "alert": alert.to_api()}
