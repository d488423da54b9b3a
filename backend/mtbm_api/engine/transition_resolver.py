"""Transition Resolver - Repair alert status lattice

pending -> in-progress -> resolved. Every other move, including same-status
updates, backward moves and skipping acceptance, is rejected.
"""
from typing import Any, Dict, NamedTuple, Tuple

from ..domain.models import ActorContext, RepairAlert
from ..domain.enums import AlertStatus
from ..domain.errors import InvalidTransitionError, PermissionDeniedError
from ..utils.time import utc_now
from .permission_guard import AlertPermissionGuard
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TransitionRule(NamedTuple):
    """One allowed edge of the lattice"""
    action: str
    denied_message: str


TRANSITIONS: Dict[Tuple[str, str], TransitionRule] = {
    (AlertStatus.PENDING.value, AlertStatus.IN_PROGRESS.value): TransitionRule(
        action="accept",
        denied_message="Only technicians can accept repair alerts",
    ),
    (AlertStatus.IN_PROGRESS.value, AlertStatus.RESOLVED.value): TransitionRule(
        action="resolve",
        denied_message="Only the assigned technician or the requesting engineer can resolve this alert",
    ),
}


class TransitionResolver:
    """
    Validate a requested status change and build the fields to write

    The caller applies the returned update as a compare-and-swap on the
    alert's current status.
    """

    def __init__(self, permission_guard: AlertPermissionGuard = None):
        self.permission_guard = permission_guard or AlertPermissionGuard()

    def get_rule(self, current: str, requested: str) -> TransitionRule:
        """
        Raises:
            InvalidTransitionError: If the edge is not in the lattice
        """
        rule = TRANSITIONS.get((current, requested))
        if rule is None:
            raise InvalidTransitionError(
                f"Cannot change status from {current} to {requested}",
                details={"from": current, "to": requested}
            )
        return rule

    def resolve(
        self,
        alert: RepairAlert,
        requested_status: str,
        actor: ActorContext
    ) -> Dict[str, Any]:
        """
        Check the transition and the actor, return the $set document

        Raises:
            InvalidTransitionError: Edge not allowed
            PermissionDeniedError: Actor may not perform this edge
        """
        rule = self.get_rule(alert.status, requested_status)

        if not self.permission_guard.can_perform(actor, alert, rule.action):
            raise PermissionDeniedError(
                rule.denied_message,
                details={"alert_id": alert.id, "action": rule.action}
            )

        now = utc_now()
        updates: Dict[str, Any] = {"status": requested_status}

        if rule.action == "accept":
            updates.update({
                "technician_id": actor.user_id,
                "technician_name": actor.display_name,
                "technician_email": actor.email,
                "accepted_at": now,
            })
        elif rule.action == "resolve":
            updates["resolved_at"] = now

        logger.info(
            f"Resolved transition: {alert.status} -> {requested_status}",
            extra={"alert_id": alert.id, "action": rule.action, "user_id": actor.user_id}
        )
        return updates
