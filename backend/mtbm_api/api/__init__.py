"""API module - Routes and dependencies"""
from .deps import get_current_user_dep, get_actor_dep, require_admin_dep

__all__ = ["get_current_user_dep", "get_actor_dep", "require_admin_dep"]
