"""Who may do what to an alert, and who may chat about it"""
import pytest

from mtbm_api.domain.errors import PermissionDeniedError, ValidationError
from mtbm_api.engine.permission_guard import AlertPermissionGuard

from .factories import make_actor, make_alert

CREATOR = make_actor("ENG-1", "engineer")
ASSIGNEE = make_actor("TEC-1", "technician")
STRANGER_TECH = make_actor("TEC-9", "technician")
STRANGER_ENG = make_actor("ENG-9", "engineer")
ADMIN = make_actor("ADM-1", "admin")


@pytest.fixture
def guard():
    return AlertPermissionGuard()


@pytest.fixture
def accepted():
    return make_alert(status="in-progress", technician_id="TEC-1", response_minutes=3)


def test_only_engineers_create(guard):
    assert guard.can_create(CREATOR)
    assert not guard.can_create(ASSIGNEE)
    assert not guard.can_create(ADMIN)


def test_delete_is_creator_or_assignee(guard, accepted):
    assert guard.can_delete(CREATOR, accepted)
    assert guard.can_delete(ASSIGNEE, accepted)
    assert not guard.can_delete(STRANGER_ENG, accepted)
    assert not guard.can_delete(ADMIN, accepted)


def test_rate_is_creator_only(guard, accepted):
    assert guard.can_rate(CREATOR, accepted)
    assert not guard.can_rate(ASSIGNEE, accepted)


def test_unknown_action_is_denied(guard, accepted):
    assert guard.can_perform(CREATOR, accepted, "archive") is False


def test_chat_side_follows_relation_not_role(guard):
    # An engineer who happens to be the assignee id would still be the technician side
    alert = make_alert(status="in-progress", technician_id="ENG-7")
    actor = make_actor("ENG-7", "engineer")
    assert guard.chat_role(actor, alert) == "technician"
    assert guard.chat_role(CREATOR, alert) == "engineer"
    assert guard.chat_role(STRANGER_TECH, alert) is None


def test_chat_denied_to_outsiders(guard, accepted):
    with pytest.raises(PermissionDeniedError) as exc_info:
        guard.require_chat_access(STRANGER_TECH, accepted)
    assert exc_info.value.message == "You do not have access to this chat"


def test_chat_locked_while_pending(guard):
    alert = make_alert(status="pending")
    with pytest.raises(ValidationError) as exc_info:
        guard.require_chat_access(CREATOR, alert)
    assert "after a technician accepts" in exc_info.value.message


def test_chat_open_after_resolution(guard):
    alert = make_alert(status="resolved", technician_id="TEC-1", response_minutes=1, fix_minutes=2)
    assert guard.require_chat_access(ASSIGNEE, alert) == "technician"


def test_admin_channel_participants(guard):
    guard.require_admin_channel_participant(CREATOR)
    guard.require_admin_channel_participant(ASSIGNEE)
    with pytest.raises(PermissionDeniedError):
        guard.require_admin_channel_participant(ADMIN)
