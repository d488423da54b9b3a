"""Repair Alert Service - Lifecycle of maintenance tickets"""
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from ..domain.models import ActorContext, RepairAlert, TechnicianRating
from ..domain.enums import AlertPriority, AlertStatus
from ..domain.errors import (
    AlertNotFoundError, ConcurrencyError, PermissionDeniedError, ValidationError
)
from ..engine.permission_guard import AlertPermissionGuard
from ..engine.transition_resolver import TransitionResolver
from ..engine import report_metrics
from ..repositories.repair_alert_repo import RepairAlertRepository
from ..repositories.message_repo import MessageRepository
from ..utils.idgen import generate_alert_id
from ..utils.time import utc_now, format_iso
from ..utils.validation import clean, clean_optional
from ..utils.logger import get_logger
from .media_service import MediaService

logger = get_logger(__name__)

STATUS_VALUES = [s.value for s in AlertStatus]
PRIORITY_VALUES = [p.value for p in AlertPriority]


class RepairAlertService:
    """
    Create, list, transition, delete and rate repair alerts

    Status changes and ratings are written as conditional updates so two
    concurrent callers cannot both win.
    """

    def __init__(self, db: Database, media_service: Optional[MediaService] = None):
        self.alert_repo = RepairAlertRepository(db)
        self.message_repo = MessageRepository(db)
        self.media_service = media_service
        self.permission_guard = AlertPermissionGuard()
        self.transition_resolver = TransitionResolver(self.permission_guard)

    def get_alert(self, alert_id: str) -> RepairAlert:
        """
        Raises:
            AlertNotFoundError
        """
        alert = self.alert_repo.get_alert(alert_id)
        if alert is None:
            raise AlertNotFoundError("Repair alert not found", details={"alert_id": alert_id})
        return alert

    def create_alert(
        self,
        actor: ActorContext,
        subsystem: Optional[str],
        issue: Optional[str],
        priority: Optional[str] = None
    ) -> RepairAlert:
        if not self.permission_guard.can_create(actor):
            raise PermissionDeniedError("Only engineers can create repair alerts")

        subsystem_text = clean(subsystem)
        issue_text = clean(issue)
        if not subsystem_text or not issue_text:
            raise ValidationError("Subsystem and issue are required")

        priority_value = clean(priority).lower() or AlertPriority.MEDIUM.value
        if priority_value not in PRIORITY_VALUES:
            raise ValidationError(
                "Invalid priority",
                details={"priority": priority_value, "allowed": PRIORITY_VALUES}
            )

        now = utc_now()
        alert = RepairAlert(
            id=generate_alert_id(),
            subsystem=subsystem_text,
            issue=issue_text,
            priority=priority_value,
            status=AlertStatus.PENDING,
            engineer_id=actor.user_id,
            engineer_name=actor.display_name,
            engineer_email=actor.email,
            created_at=now,
            updated_at=now,
        )
        return self.alert_repo.create_alert(alert)

    def _check_status_filter(self, status: Optional[str]) -> Optional[str]:
        if status and status not in STATUS_VALUES:
            raise ValidationError("Invalid status filter", details={"status": status})
        return status or None

    def list_alerts(
        self,
        status: Optional[str] = None,
        engineer_id: Optional[str] = None,
        technician_id: Optional[str] = None,
        limit: int = 50
    ) -> List[RepairAlert]:
        return self.alert_repo.list_alerts(
            status=self._check_status_filter(status),
            engineer_id=engineer_id,
            technician_id=technician_id,
            limit=limit,
        )

    def list_my_alerts(self, actor: ActorContext, status: Optional[str] = None) -> List[RepairAlert]:
        return self.alert_repo.list_alerts(
            status=self._check_status_filter(status),
            engineer_id=actor.user_id,
            limit=None,
        )

    def stats_summary(self) -> Dict[str, int]:
        counts = self.alert_repo.count_by_status()
        return {
            "pending": counts[AlertStatus.PENDING.value],
            "inProgress": counts[AlertStatus.IN_PROGRESS.value],
            "resolved": counts[AlertStatus.RESOLVED.value],
            "total": sum(counts.values()),
        }

    def transition(
        self,
        alert_id: str,
        requested_status: Optional[str],
        actor: ActorContext
    ) -> RepairAlert:
        """
        Move an alert along pending -> in-progress -> resolved

        Raises:
            ValidationError: Unknown status value
            AlertNotFoundError: No such alert
            InvalidTransitionError: Edge not in the lattice
            PermissionDeniedError: Actor may not take this edge
            ConcurrencyError: Another request changed the status first
        """
        if not requested_status or requested_status not in STATUS_VALUES:
            raise ValidationError("Valid status required", details={"allowed": STATUS_VALUES})

        alert = self.get_alert(alert_id)
        updates = self.transition_resolver.resolve(alert, requested_status, actor)

        updated = self.alert_repo.update_if_status(alert_id, alert.status, updates)
        if updated is None:
            raise ConcurrencyError(
                "Repair alert was updated by someone else, please refresh",
                details={"alert_id": alert_id, "expected_status": alert.status}
            )

        logger.info(
            f"Repair alert {alert_id} is now {updated.status}",
            extra={"alert_id": alert_id, "status": updated.status, "user_id": actor.user_id}
        )
        return updated

    def delete_alert(self, alert_id: str, actor: ActorContext) -> None:
        alert = self.get_alert(alert_id)
        if not self.permission_guard.can_delete(actor, alert):
            raise PermissionDeniedError(
                "Not authorized to delete this alert",
                details={"alert_id": alert_id}
            )

        media_urls = self.message_repo.media_urls_for_alert(alert_id)
        self.alert_repo.delete_alert(alert_id)
        removed = self.message_repo.delete_for_alert(alert_id)
        if self.media_service is not None:
            for url in media_urls:
                self.media_service.delete(url)
        logger.info(
            f"Deleted repair alert {alert_id} and {removed} chat messages",
            extra={"alert_id": alert_id, "user_id": actor.user_id, "action": "delete"}
        )

    def rate_alert(
        self,
        alert_id: str,
        actor: ActorContext,
        rating: Any,
        comment: Optional[str] = None
    ) -> RepairAlert:
        """
        Record the creator's 1-5 rating of a resolved alert, once

        The already-rated check runs before the caller check so a repeat
        attempt fails the same way for everyone.
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        alert = self.get_alert(alert_id)
        if alert.rating is not None:
            raise ValidationError("This repair has already been rated", details={"alert_id": alert_id})
        if alert.status != AlertStatus.RESOLVED:
            raise ValidationError("Can only rate after issue is resolved", details={"alert_id": alert_id})
        if not self.permission_guard.can_rate(actor, alert):
            raise PermissionDeniedError("Only the requesting engineer can rate", details={"alert_id": alert_id})

        updated = self.alert_repo.set_rating(alert_id, rating, clean_optional(comment), utc_now())
        if updated is None:
            raise ValidationError("This repair has already been rated", details={"alert_id": alert_id})

        logger.info(
            f"Technician {updated.technician_name} rated {rating}",
            extra={"alert_id": alert_id, "user_id": actor.user_id, "action": "rate"}
        )
        return updated

    def technician_rating(self, technician_id: str) -> TechnicianRating:
        rated = self.alert_repo.list_rated_for_technician(technician_id)
        return TechnicianRating(
            average_rating=report_metrics.average_rating(rated),
            total_ratings=len(rated),
            ratings=[
                {
                    "rating": a.rating,
                    "comment": a.rating_comment,
                    "date": format_iso(a.rated_at) if a.rated_at else None,
                }
                for a in rated
            ],
        )

    def technician_stats(self, technician_id: str) -> Dict[str, Any]:
        alerts = self.alert_repo.list_alerts(technician_id=technician_id, limit=None)
        return report_metrics.technician_stats(alerts)
