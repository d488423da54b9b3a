"""Permission Guard - Authorization enforcement for alert and chat actions"""
from typing import Optional

from ..domain.models import ActorContext, RepairAlert
from ..domain.enums import UserRole, AlertStatus, PARTICIPANT_ROLES
from ..domain.errors import PermissionDeniedError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AlertPermissionGuard:
    """
    Permission enforcement for repair alerts

    Rules:
    - Only engineers raise alerts
    - Any technician may accept a pending alert
    - The assignee or the creator may resolve and delete
    - Only the creator may rate
    - Chat is limited to the creator and the assignee
    """

    def _is_creator(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return actor.user_id == alert.engineer_id

    def _is_assignee(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return alert.technician_id is not None and actor.user_id == alert.technician_id

    def can_create(self, actor: ActorContext) -> bool:
        return actor.role == UserRole.ENGINEER

    def can_accept(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return actor.role == UserRole.TECHNICIAN

    def can_resolve(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return self._is_assignee(actor, alert) or self._is_creator(actor, alert)

    def can_delete(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return self._is_creator(actor, alert) or self._is_assignee(actor, alert)

    def can_rate(self, actor: ActorContext, alert: RepairAlert) -> bool:
        return self._is_creator(actor, alert)

    def can_perform(self, actor: ActorContext, alert: RepairAlert, action: str) -> bool:
        """Dispatch by action name"""
        checks = {
            "accept": self.can_accept,
            "resolve": self.can_resolve,
            "delete": self.can_delete,
            "rate": self.can_rate,
        }
        check = checks.get(action)
        if check is None:
            logger.warning(f"Unknown action: {action}")
            return False
        return check(actor, alert)

    def chat_role(self, actor: ActorContext, alert: RepairAlert) -> Optional[str]:
        """
        Which side of the alert's chat the actor is on

        Returns:
            "engineer", "technician", or None for outsiders
        """
        if self._is_creator(actor, alert):
            return UserRole.ENGINEER.value
        if self._is_assignee(actor, alert):
            return UserRole.TECHNICIAN.value
        return None

    def require_chat_access(self, actor: ActorContext, alert: RepairAlert) -> str:
        """
        Gate for every per-alert chat operation

        Returns:
            The actor's side in the thread

        Raises:
            PermissionDeniedError: Actor is not a participant
            ValidationError: Alert is still pending
        """
        side = self.chat_role(actor, alert)
        if side is None:
            raise PermissionDeniedError(
                "You do not have access to this chat",
                details={"alert_id": alert.id}
            )
        if alert.status == AlertStatus.PENDING:
            raise ValidationError(
                "Chat is only available after a technician accepts the request",
                details={"alert_id": alert.id, "status": alert.status}
            )
        return side

    def require_admin_channel_participant(self, actor: ActorContext) -> None:
        """Participant side of the admin channel is for engineers and technicians"""
        if actor.role not in PARTICIPANT_ROLES:
            raise PermissionDeniedError(
                "Admins use the conversation endpoints",
                details={"role": actor.role}
            )
