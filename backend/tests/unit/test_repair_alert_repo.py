"""Conditional writes on the repair_alerts collection"""
import mongomock
import pytest

from mtbm_api.repositories.repair_alert_repo import RepairAlertRepository

from .factories import BASE_TIME, make_alert


@pytest.fixture
def repo():
    return RepairAlertRepository(mongomock.MongoClient()["mtbm_unit"])


def test_update_if_status_only_matches_expected_status(repo):
    alert = repo.create_alert(make_alert(status="pending"))

    accepted = repo.update_if_status(alert.id, "pending", {"status": "in-progress", "technician_id": "TEC-1"})
    assert accepted.status == "in-progress"
    assert accepted.technician_id == "TEC-1"

    # Second writer still believes the alert is pending
    assert repo.update_if_status(alert.id, "pending", {"status": "in-progress", "technician_id": "TEC-2"}) is None
    assert repo.get_alert(alert.id).technician_id == "TEC-1"


def test_update_if_status_on_missing_alert(repo):
    assert repo.update_if_status("RA-missing", "pending", {"status": "in-progress"}) is None


def test_set_rating_writes_once(repo):
    alert = repo.create_alert(make_alert(status="resolved", technician_id="TEC-1", response_minutes=10, fix_minutes=20))

    rated = repo.set_rating(alert.id, 4, "Quick fix", BASE_TIME)
    assert rated.rating == 4
    assert rated.rating_comment == "Quick fix"

    assert repo.set_rating(alert.id, 1, "Changed my mind", BASE_TIME) is None
    stored = repo.get_alert(alert.id)
    assert stored.rating == 4
    assert stored.rating_comment == "Quick fix"


def test_set_rating_requires_resolved_alert(repo):
    alert = repo.create_alert(make_alert(status="in-progress", technician_id="TEC-1", response_minutes=10))

    assert repo.set_rating(alert.id, 5, None, BASE_TIME) is None
    assert repo.get_alert(alert.id).rating is None
