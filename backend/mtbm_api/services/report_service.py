"""Report Service - Admin dashboards and monthly reports"""
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pymongo.database import Database

from ..domain.enums import AlertStatus, UserRole
from ..domain.errors import UserNotFoundError, ValidationError
from ..engine import report_metrics
from ..repositories.repair_alert_repo import RepairAlertRepository
from ..repositories.user_repo import UserRepository
from ..utils.time import utc_now, month_window
from ..utils.logger import get_logger

logger = get_logger(__name__)

# month_window needs room for the following January
MAX_REPORT_YEAR = 9999


def whole_number(value: Any) -> Optional[int]:
    """Integer form of a query value such as "3" or "3.0", None otherwise"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


class ReportService:
    """Read-only statistics computed on demand"""

    def __init__(self, db: Database):
        self.alert_repo = RepairAlertRepository(db)
        self.user_repo = UserRepository(db)

    @staticmethod
    def resolve_period(
        month: Any,
        year: Any
    ) -> Tuple[datetime, datetime, str]:
        """
        Month is zero-based (0 = January). Missing, non-integer or
        out-of-range values fall back to the current UTC month/year.

        Returns:
            (start, end, label) with the window half-open [start, end)
        """
        now = utc_now()
        month = whole_number(month)
        year = whole_number(year)
        target_month = month if month is not None and 0 <= month <= 11 else now.month - 1
        target_year = year if year is not None and 1970 <= year < MAX_REPORT_YEAR else now.year
        start, end = month_window(target_year, target_month)
        return start, end, start.strftime("%B %Y")

    def overview(self) -> Dict[str, int]:
        counts = self.alert_repo.count_by_status()
        return {
            "totalEngineers": self.user_repo.count_by_role(UserRole.ENGINEER),
            "totalTechnicians": self.user_repo.count_by_role(UserRole.TECHNICIAN),
            "totalAlerts": sum(counts.values()),
            "pendingAlerts": counts[AlertStatus.PENDING.value],
            "inProgressAlerts": counts[AlertStatus.IN_PROGRESS.value],
            "resolvedAlerts": counts[AlertStatus.RESOLVED.value],
        }

    def engineers(self) -> List[Dict[str, Any]]:
        rows = []
        for engineer in self.user_repo.list_by_role(UserRole.ENGINEER):
            alerts = self.alert_repo.list_alerts(engineer_id=engineer.id, limit=None)
            row = engineer.to_safe()
            row["stats"] = report_metrics.engineer_stats(alerts)
            rows.append(row)
        return rows

    def technicians(self) -> List[Dict[str, Any]]:
        rows = []
        for technician in self.user_repo.list_by_role(UserRole.TECHNICIAN):
            alerts = self.alert_repo.list_alerts(technician_id=technician.id, limit=None)
            row = technician.to_safe()
            row["stats"] = report_metrics.technician_stats(alerts)
            rows.append(row)
        return rows

    def monthly_report(self, month: Any = None, year: Any = None) -> Dict[str, Any]:
        start, end, period = self.resolve_period(month, year)
        alerts = self.alert_repo.list_created_between(start, end)

        technician_report = []
        for tech in self.user_repo.list_by_role(UserRole.TECHNICIAN):
            tech_alerts = [a for a in alerts if a.technician_id == tech.id]
            row = {"name": tech.full_name, "email": tech.email}
            row.update(report_metrics.technician_report_row(tech_alerts))
            technician_report.append(row)

        engineer_report = []
        for eng in self.user_repo.list_by_role(UserRole.ENGINEER):
            eng_alerts = [a for a in alerts if a.engineer_id == eng.id]
            row = {"name": eng.full_name, "email": eng.email}
            row.update(report_metrics.engineer_report_row(eng_alerts))
            engineer_report.append(row)

        logger.info(f"Generated monthly report for {period}", extra={"action": "monthly_report"})
        return {
            "summary": report_metrics.month_summary(alerts, period),
            "technicianReport": technician_report,
            "engineerReport": engineer_report,
        }

    def monthly_user_report(
        self,
        user_id: Optional[str],
        month: Any = None,
        year: Any = None
    ) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: userId missing, or the user is not an engineer/technician
            UserNotFoundError: No such user
        """
        if not user_id:
            raise ValidationError("userId is required")

        start, end, period = self.resolve_period(month, year)
        user = self.user_repo.get_user(user_id)
        if user is None:
            raise UserNotFoundError("User not found", details={"user_id": user_id})

        if user.role == UserRole.ENGINEER:
            alerts = self.alert_repo.list_created_between(start, end, engineer_id=user.id)
            stats = report_metrics.engineer_report_row(alerts)
        elif user.role == UserRole.TECHNICIAN:
            alerts = self.alert_repo.list_created_between(start, end, technician_id=user.id)
            stats = report_metrics.technician_report_row(alerts, with_rating=True)
        else:
            raise ValidationError("User must be an engineer or technician", details={"role": user.role})

        return {
            "user": user.to_summary(),
            "summary": {"period": period, "totalAlerts": len(alerts)},
            "stats": stats,
            "alerts": [a.to_api() for a in alerts],
        }

    def alerts(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        return [
            a.to_api()
            for a in self.alert_repo.list_alerts(status=status, priority=priority, limit=limit)
        ]
