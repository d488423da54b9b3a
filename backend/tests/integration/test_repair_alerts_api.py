"""Repair alert lifecycle over HTTP"""
import pytest

from mtbm_api.repositories.repair_alert_repo import RepairAlertRepository


@pytest.fixture
def create_alert(client, auth):
    def _create(token, subsystem="Cutter head", issue="Torque spike", priority=None):
        body = {"subsystem": subsystem, "issue": issue}
        if priority:
            body["priority"] = priority
        response = client.post("/api/repair-alerts", json=body, headers=auth(token))
        assert response.status_code == 201, response.text
        return response.json()["alert"]
    return _create


def test_full_lifecycle(client, auth, engineer, technician, register, create_alert):
    eng_token, eng = engineer
    tech_token, tech = technician
    other_tech_token, _ = register("technician")

    # Engineer raises an alert
    alert = create_alert(eng_token, priority="high")
    assert alert["status"] == "pending"
    assert alert["priority"] == "high"
    assert alert["engineerId"] == eng["_id"]
    assert alert["engineerName"] == eng["fullName"]
    assert alert["technicianId"] is None
    alert_id = alert["_id"]

    # Technicians see it on the board
    board = client.get("/api/repair-alerts", params={"status": "pending"}, headers=auth(tech_token))
    assert [a["_id"] for a in board.json()["alerts"]] == [alert_id]

    # Chat stays closed while pending
    response = client.post(f"/api/chat/{alert_id}", json={"message": "hi"}, headers=auth(eng_token))
    assert response.status_code == 400

    # Technician accepts
    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(tech_token))
    assert response.status_code == 200
    assert response.json()["message"] == "Alert accepted successfully"
    accepted = response.json()["alert"]
    assert accepted["technicianId"] == tech["_id"]
    assert accepted["acceptedAt"].endswith("Z")

    # A second technician is too late
    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(other_tech_token))
    assert response.status_code == 400

    # Outsider technician cannot resolve
    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "resolved"},
                            headers=auth(other_tech_token))
    assert response.status_code == 403

    # Assignee resolves
    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "resolved"},
                            headers=auth(tech_token))
    assert response.status_code == 200
    assert response.json()["message"] == "Alert updated successfully"
    assert response.json()["alert"]["resolvedAt"] is not None

    # Technician cannot rate their own work
    response = client.post(f"/api/repair-alerts/{alert_id}/rate", json={"rating": 5},
                           headers=auth(tech_token))
    assert response.status_code == 403

    # Engineer rates once
    response = client.post(f"/api/repair-alerts/{alert_id}/rate",
                           json={"rating": 4, "comment": "  quick fix  "}, headers=auth(eng_token))
    assert response.status_code == 200
    assert response.json()["message"] == "Rating submitted successfully"
    rated = response.json()["alert"]
    assert rated["rating"] == 4
    assert rated["ratingComment"] == "quick fix"
    assert rated["ratedAt"] is not None

    # Second rating fails the same way for everyone
    for token in [eng_token, tech_token]:
        response = client.post(f"/api/repair-alerts/{alert_id}/rate", json={"rating": 5},
                               headers=auth(token))
        assert response.status_code == 400
        assert response.json()["message"] == "This repair has already been rated"

    # Aggregates
    rating = client.get(f"/api/repair-alerts/technician/{tech['_id']}/rating", headers=auth(eng_token)).json()
    assert rating["averageRating"] == 4.0
    assert rating["totalRatings"] == 1
    assert rating["ratings"][0]["rating"] == 4
    assert rating["ratings"][0]["comment"] == "quick fix"

    stats = client.get(f"/api/repair-alerts/technician/{tech['_id']}/stats", headers=auth(eng_token)).json()
    assert stats["tasksAssigned"] == 1
    assert stats["tasksCompleted"] == 1
    assert stats["successRate"] == 100
    assert stats["avgRating"] == 4.0


def test_requires_authentication(client):
    response = client.get("/api/repair-alerts")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_ERROR"


def test_only_engineers_create(client, auth, technician):
    token, _ = technician
    response = client.post("/api/repair-alerts", json={"subsystem": "Pump", "issue": "Leak"},
                           headers=auth(token))
    assert response.status_code == 403
    assert response.json()["message"] == "Only engineers can create repair alerts"


@pytest.mark.parametrize("body,message", [
    ({"subsystem": "  ", "issue": "Leak"}, "Subsystem and issue are required"),
    ({"subsystem": "Pump"}, "Subsystem and issue are required"),
    ({"subsystem": "Pump", "issue": "Leak", "priority": "urgent"}, "Invalid priority"),
])
def test_create_validation(client, auth, engineer, body, message):
    token, _ = engineer
    response = client.post("/api/repair-alerts", json=body, headers=auth(token))
    assert response.status_code == 400
    assert response.json()["message"] == message


def test_priority_defaults_to_medium(engineer, create_alert):
    token, _ = engineer
    assert create_alert(token)["priority"] == "medium"


def test_transition_validation(client, auth, engineer, technician, create_alert):
    eng_token, _ = engineer
    tech_token, _ = technician
    alert_id = create_alert(eng_token)["_id"]

    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "done"},
                            headers=auth(tech_token))
    assert response.status_code == 400
    assert response.json()["message"] == "Valid status required"

    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "resolved"},
                            headers=auth(eng_token))
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_TRANSITION"

    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(eng_token))
    assert response.status_code == 403

    response = client.patch("/api/repair-alerts/RA-missing", json={"status": "in-progress"},
                            headers=auth(tech_token))
    assert response.status_code == 404


def test_lost_race_is_a_conflict(client, auth, db, engineer, technician, register, create_alert, monkeypatch):
    eng_token, _ = engineer
    tech_token, tech = technician
    rival_token, _ = register("technician")
    alert_id = create_alert(eng_token)["_id"]
    repo = RepairAlertRepository(db)
    snapshot = repo.get_alert(alert_id)

    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(tech_token))
    assert response.status_code == 200

    # The rival read the alert while it was still pending
    monkeypatch.setattr(RepairAlertRepository, "get_alert", lambda self, _id: snapshot)

    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(rival_token))
    assert response.status_code == 409
    assert response.json()["code"] == "CONCURRENCY_CONFLICT"

    monkeypatch.undo()
    stored = repo.get_alert(alert_id)
    assert stored.status == "in-progress"
    assert stored.technician_id == tech["_id"]


def test_rate_checks(client, auth, engineer, technician, create_alert):
    eng_token, _ = engineer
    tech_token, _ = technician
    alert_id = create_alert(eng_token)["_id"]

    response = client.post(f"/api/repair-alerts/{alert_id}/rate", json={"rating": 3}, headers=auth(eng_token))
    assert response.status_code == 400
    assert response.json()["message"] == "Can only rate after issue is resolved"

    for bad in [0, 6, None]:
        response = client.post(f"/api/repair-alerts/{alert_id}/rate", json={"rating": bad},
                               headers=auth(eng_token))
        assert response.status_code == 400

    response = client.post("/api/repair-alerts/RA-missing/rate", json={"rating": 3}, headers=auth(eng_token))
    assert response.status_code == 404


def test_delete(client, auth, engineer, register, create_alert, db):
    eng_token, _ = engineer
    stranger_token, _ = register("engineer")
    alert_id = create_alert(eng_token)["_id"]

    response = client.delete(f"/api/repair-alerts/{alert_id}", headers=auth(stranger_token))
    assert response.status_code == 403

    response = client.delete(f"/api/repair-alerts/{alert_id}", headers=auth(eng_token))
    assert response.status_code == 200
    assert response.json()["message"] == "Repair alert deleted successfully"

    assert client.get(f"/api/repair-alerts/{alert_id}", headers=auth(eng_token)).status_code == 404
    assert client.delete(f"/api/repair-alerts/{alert_id}", headers=auth(eng_token)).status_code == 404


def test_my_alerts_and_summary(client, auth, engineer, register, technician, create_alert):
    eng_token, eng = engineer
    other_token, _ = register("engineer")
    tech_token, _ = technician

    mine = create_alert(eng_token)["_id"]
    create_alert(eng_token)
    create_alert(other_token)
    client.patch(f"/api/repair-alerts/{mine}", json={"status": "in-progress"}, headers=auth(tech_token))

    response = client.get("/api/repair-alerts/my-alerts", headers=auth(eng_token))
    alerts = response.json()["alerts"]
    assert len(alerts) == 2
    assert all(a["engineerId"] == eng["_id"] for a in alerts)

    response = client.get("/api/repair-alerts/my-alerts", params={"status": "in-progress"}, headers=auth(eng_token))
    assert [a["_id"] for a in response.json()["alerts"]] == [mine]

    summary = client.get("/api/repair-alerts/stats/summary", headers=auth(eng_token)).json()
    assert summary == {"pending": 2, "inProgress": 1, "resolved": 0, "total": 3}

    limited = client.get("/api/repair-alerts", params={"limit": 1}, headers=auth(eng_token))
    assert len(limited.json()["alerts"]) == 1

    assert client.get("/api/repair-alerts", params={"limit": 0}, headers=auth(eng_token)).status_code == 400
