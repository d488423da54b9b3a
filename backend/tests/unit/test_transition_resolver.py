"""Status lattice: pending -> in-progress -> resolved, nothing else"""
import pytest

from mtbm_api.domain.errors import InvalidTransitionError, PermissionDeniedError
from mtbm_api.engine.transition_resolver import TransitionResolver, TRANSITIONS

from .factories import make_actor, make_alert

ENGINEER = make_actor("ENG-1", "engineer", "Eve Engineer")
OTHER_ENGINEER = make_actor("ENG-2", "engineer")
TECHNICIAN = make_actor("TEC-1", "technician", "Tom Tech")
OTHER_TECHNICIAN = make_actor("TEC-2", "technician")


@pytest.fixture
def resolver():
    return TransitionResolver()


def test_only_two_edges_exist():
    assert set(TRANSITIONS) == {
        ("pending", "in-progress"),
        ("in-progress", "resolved"),
    }


def test_technician_accepts_pending_alert(resolver):
    alert = make_alert()
    updates = resolver.resolve(alert, "in-progress", TECHNICIAN)

    assert updates["status"] == "in-progress"
    assert updates["technician_id"] == "TEC-1"
    assert updates["technician_name"] == "Tom Tech"
    assert updates["technician_email"] == "tec-1@mtbm.test"
    assert updates["accepted_at"] is not None


def test_engineer_cannot_accept(resolver):
    with pytest.raises(PermissionDeniedError):
        resolver.resolve(make_alert(), "in-progress", ENGINEER)


@pytest.mark.parametrize("actor", [TECHNICIAN, ENGINEER])
def test_assignee_or_creator_resolves(resolver, actor):
    alert = make_alert(status="in-progress", technician_id="TEC-1", response_minutes=5)
    updates = resolver.resolve(alert, "resolved", actor)

    assert updates["status"] == "resolved"
    assert updates["resolved_at"] is not None
    assert "technician_id" not in updates


@pytest.mark.parametrize("actor", [OTHER_TECHNICIAN, OTHER_ENGINEER])
def test_outsiders_cannot_resolve(resolver, actor):
    alert = make_alert(status="in-progress", technician_id="TEC-1", response_minutes=5)
    with pytest.raises(PermissionDeniedError):
        resolver.resolve(alert, "resolved", actor)


@pytest.mark.parametrize("current,requested", [
    ("pending", "resolved"),
    ("pending", "pending"),
    ("in-progress", "in-progress"),
    ("in-progress", "pending"),
    ("resolved", "in-progress"),
    ("resolved", "pending"),
    ("resolved", "resolved"),
])
def test_other_moves_are_rejected(resolver, current, requested):
    alert = make_alert(status=current, technician_id="TEC-1")
    with pytest.raises(InvalidTransitionError) as exc_info:
        resolver.resolve(alert, requested, TECHNICIAN)
    assert exc_info.value.http_status == 400
    assert f"from {current} to {requested}" in exc_info.value.message
