"""Alert Engine - lifecycle rules, permissions and derived metrics"""
from .permission_guard import AlertPermissionGuard
from .transition_resolver import TransitionResolver, TRANSITIONS
from . import report_metrics

__all__ = [
    "AlertPermissionGuard",
    "TransitionResolver",
    "TRANSITIONS",
    "report_metrics",
]
