"""Report Metrics - Derived statistics over repair alerts

Pure functions; nothing here touches the database. Rounding is half-up
so 2.5 minutes reports as 3 and a 4.25 average rating as 4.3.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from ..domain.models import RepairAlert
from ..domain.enums import AlertPriority, AlertStatus
from ..utils.time import minutes_between


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a person would, not banker's rounding"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def average_response_minutes(alerts: Iterable[RepairAlert]) -> int:
    """Mean of accepted_at - created_at over accepted alerts; 0 when none"""
    durations = [
        minutes_between(a.created_at, a.accepted_at)
        for a in alerts if a.accepted_at is not None
    ]
    mean = _mean(durations)
    return int(round_half_up(mean)) if mean is not None else 0


def average_fix_minutes(alerts: Iterable[RepairAlert]) -> int:
    """Mean of resolved_at - accepted_at over resolved alerts; 0 when none"""
    durations = [
        minutes_between(a.accepted_at, a.resolved_at)
        for a in alerts
        if a.status == AlertStatus.RESOLVED and a.accepted_at and a.resolved_at
    ]
    mean = _mean(durations)
    return int(round_half_up(mean)) if mean is not None else 0


def average_rating(alerts: Iterable[RepairAlert]) -> Optional[float]:
    """Mean of non-null ratings to one decimal; None when unrated"""
    mean = _mean([a.rating for a in alerts if a.rating is not None])
    return round_half_up(mean, 1) if mean is not None else None


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(round_half_up(part * 100 / whole))


def count_by_priority(alerts: List[RepairAlert]) -> Dict[str, int]:
    return {
        f"{priority.value}Issues": sum(1 for a in alerts if a.priority == priority)
        for priority in AlertPriority
    }


def count_by_status(alerts: List[RepairAlert], status: AlertStatus) -> int:
    return sum(1 for a in alerts if a.status == status)


def engineer_stats(alerts: List[RepairAlert]) -> Dict[str, Any]:
    """Stats block for an engineer's raised alerts (numeric values)"""
    stats: Dict[str, Any] = {"totalIssues": len(alerts)}
    stats.update(count_by_priority(alerts))
    stats["resolvedIssues"] = count_by_status(alerts, AlertStatus.RESOLVED)
    stats["avgResponseTime"] = average_response_minutes(alerts)
    return stats


def technician_stats(alerts: List[RepairAlert]) -> Dict[str, Any]:
    """Stats block for a technician's assigned alerts (numeric values)"""
    completed = count_by_status(alerts, AlertStatus.RESOLVED)
    return {
        "tasksAssigned": len(alerts),
        "tasksCompleted": completed,
        "tasksInProgress": count_by_status(alerts, AlertStatus.IN_PROGRESS),
        "avgFixTime": average_fix_minutes(alerts),
        "successRate": percentage(completed, len(alerts)),
        "avgRating": average_rating(alerts),
    }


def engineer_report_row(alerts: List[RepairAlert]) -> Dict[str, Any]:
    """Monthly report variant with display strings"""
    row: Dict[str, Any] = {"totalIssuesReported": len(alerts)}
    row.update(count_by_priority(alerts))
    row["resolvedIssues"] = count_by_status(alerts, AlertStatus.RESOLVED)
    row["avgResponseTime"] = f"{average_response_minutes(alerts)} min"
    return row


def technician_report_row(alerts: List[RepairAlert], with_rating: bool = False) -> Dict[str, Any]:
    """Monthly report variant with display strings"""
    completed = count_by_status(alerts, AlertStatus.RESOLVED)
    row: Dict[str, Any] = {
        "tasksAssigned": len(alerts),
        "tasksCompleted": completed,
    }
    if with_rating:
        row["tasksInProgress"] = count_by_status(alerts, AlertStatus.IN_PROGRESS)
    row["avgFixTime"] = f"{average_fix_minutes(alerts)} min"
    row["successRate"] = f"{percentage(completed, len(alerts))}%"
    if with_rating:
        row["avgRating"] = average_rating(alerts)
    return row


def month_summary(alerts: List[RepairAlert], period: str) -> Dict[str, Any]:
    resolved = count_by_status(alerts, AlertStatus.RESOLVED)
    return {
        "period": period,
        "totalAlerts": len(alerts),
        "resolvedAlerts": resolved,
        "pendingAlerts": count_by_status(alerts, AlertStatus.PENDING),
        "inProgressAlerts": count_by_status(alerts, AlertStatus.IN_PROGRESS),
        "criticalAlerts": sum(1 for a in alerts if a.priority == AlertPriority.CRITICAL),
        "avgResolutionRate": f"{percentage(resolved, len(alerts))}%",
    }
