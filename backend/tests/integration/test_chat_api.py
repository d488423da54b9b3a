"""Per-alert chat between the engineer and the assigned technician"""
from datetime import datetime

import pytest

from mtbm_api.domain.models import ChatMessage
from mtbm_api.repositories.message_repo import MessageRepository


@pytest.fixture
def accepted_alert(client, auth, engineer, technician):
    eng_token, _ = engineer
    tech_token, _ = technician
    response = client.post("/api/repair-alerts", json={"subsystem": "Slurry pump", "issue": "Pressure drop"},
                           headers=auth(eng_token))
    alert_id = response.json()["alert"]["_id"]
    response = client.patch(f"/api/repair-alerts/{alert_id}", json={"status": "in-progress"},
                            headers=auth(tech_token))
    assert response.status_code == 200
    return alert_id


def test_text_messages_and_read_state(client, auth, engineer, technician, accepted_alert):
    eng_token, eng = engineer
    tech_token, tech = technician

    response = client.post(f"/api/chat/{accepted_alert}", json={"message": "  On my way  "},
                           headers=auth(tech_token))
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Message sent successfully"
    assert body["data"]["message"] == "On my way"
    assert body["data"]["senderRole"] == "technician"
    assert body["data"]["senderId"] == tech["_id"]
    assert body["data"]["messageType"] == "text"
    assert body["data"]["isRead"] is False

    assert client.get("/api/chat/unread/count", headers=auth(eng_token)).json() == {"unreadCount": 1}
    assert client.get("/api/chat/unread/count", headers=auth(tech_token)).json() == {"unreadCount": 0}

    # Sender reading the thread does not mark their own message read
    client.get(f"/api/chat/{accepted_alert}", headers=auth(tech_token))
    assert client.get("/api/chat/unread/count", headers=auth(eng_token)).json() == {"unreadCount": 1}

    response = client.get(f"/api/chat/{accepted_alert}", headers=auth(eng_token))
    assert response.status_code == 200
    data = response.json()
    assert [m["message"] for m in data["messages"]] == ["On my way"]
    assert data["alert"]["_id"] == accepted_alert
    assert data["alert"]["status"] == "in-progress"
    assert data["alert"]["engineerName"] == eng["fullName"]
    assert data["alert"]["technicianName"] == tech["fullName"]

    assert client.get("/api/chat/unread/count", headers=auth(eng_token)).json() == {"unreadCount": 0}
    again = client.get(f"/api/chat/{accepted_alert}", headers=auth(eng_token)).json()
    assert again["messages"][0]["isRead"] is True


def test_empty_message_rejected(client, auth, engineer, accepted_alert):
    eng_token, _ = engineer
    response = client.post(f"/api/chat/{accepted_alert}", json={"message": "   "}, headers=auth(eng_token))
    assert response.status_code == 400
    assert response.json()["message"] == "Message cannot be empty"


def test_outsiders_are_kept_out(client, auth, register, admin, accepted_alert):
    outsider_token, _ = register("technician")
    admin_token, _ = admin

    for token in [outsider_token, admin_token]:
        response = client.get(f"/api/chat/{accepted_alert}", headers=auth(token))
        assert response.status_code == 403
        assert response.json()["message"] == "You do not have access to this chat"

    assert client.get("/api/chat/unread/count", headers=auth(admin_token)).json() == {"unreadCount": 0}
    assert client.get("/api/chat/RA-missing", headers=auth(outsider_token)).status_code == 404


def test_since_cursor(client, auth, engineer, accepted_alert, db):
    eng_token, eng = engineer
    repo = MessageRepository(db)
    for minute in (1, 2, 3):
        stamp = datetime(2026, 10, 5, 9, minute)
        repo.create_message(ChatMessage(
            id=f"MSG-{minute}",
            repair_alert_id=accepted_alert,
            sender_id=eng["_id"],
            sender_name=eng["fullName"],
            sender_role="engineer",
            message=f"note {minute}",
            created_at=stamp,
            updated_at=stamp,
        ))

    everything = client.get(f"/api/chat/{accepted_alert}", headers=auth(eng_token)).json()["messages"]
    assert [m["message"] for m in everything] == ["note 1", "note 2", "note 3"]
    assert everything[1]["createdAt"] == "2026-10-05T09:02:00.000Z"

    newer = client.get(f"/api/chat/{accepted_alert}", params={"since": everything[1]["createdAt"]},
                       headers=auth(eng_token)).json()["messages"]
    assert [m["message"] for m in newer] == ["note 3"]

    response = client.get(f"/api/chat/{accepted_alert}", params={"since": "not-a-date"}, headers=auth(eng_token))
    assert response.status_code == 400


def test_image_message(client, auth, engineer, accepted_alert):
    eng_token, _ = engineer
    response = client.post(
        f"/api/chat/{accepted_alert}/image",
        files={"image": ("crack.png", b"\x89PNG crack", "image/png")},
        headers=auth(eng_token),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["messageType"] == "image"
    assert data["imageUrl"].startswith("/uploads/chat/")

    served = client.get(data["imageUrl"])
    assert served.status_code == 200
    assert served.content == b"\x89PNG crack"

    response = client.post(
        f"/api/chat/{accepted_alert}/image",
        files={"image": ("notes.txt", b"text", "text/plain")},
        headers=auth(eng_token),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"


def test_voice_message(client, auth, technician, accepted_alert):
    tech_token, _ = technician
    response = client.post(
        f"/api/chat/{accepted_alert}/voice",
        files={"voice": ("memo.webm", b"webm-bytes", "audio/webm")},
        data={"duration": "3.5"},
        headers=auth(tech_token),
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["messageType"] == "voice"
    assert data["voiceUrl"].startswith("/uploads/chat/")
    assert data["voiceDuration"] == 3.5

    response = client.post(
        f"/api/chat/{accepted_alert}/voice",
        files={"voice": ("memo.webm", b"webm-bytes", "audio/webm")},
        data={"duration": "-1"},
        headers=auth(tech_token),
    )
    assert response.status_code == 400



@pytest.mark.parametrize("duration", ["nan", "inf", "-inf"])
def test_voice_duration_must_be_finite(client, auth, engineer, technician, accepted_alert, db, duration):
    eng_token, _ = engineer
    tech_token, _ = technician
    response = client.post(
        f"/api/chat/{accepted_alert}/voice",
        files={"voice": ("memo.webm", b"webm-bytes", "audio/webm")},
        data={"duration": duration},
        headers=auth(tech_token),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Duration must be a non-negative number"
    assert db["messages"].count_documents({"repair_alert_id": accepted_alert}) == 0

    # The thread stays readable for both sides
    for token in (eng_token, tech_token):
        assert client.get(f"/api/chat/{accepted_alert}", headers=auth(token)).status_code == 200


def test_deleting_alert_removes_its_chat(client, auth, engineer, technician, accepted_alert, db):
    eng_token, _ = engineer
    tech_token, _ = technician
    client.post(f"/api/chat/{accepted_alert}", json={"message": "hello"}, headers=auth(eng_token))
    image_url = client.post(
        f"/api/chat/{accepted_alert}/image",
        files={"image": ("valve.png", b"\x89PNG valve", "image/png")},
        headers=auth(eng_token),
    ).json()["data"]["imageUrl"]
    voice_url = client.post(
        f"/api/chat/{accepted_alert}/voice",
        files={"voice": ("memo.webm", b"webm-bytes", "audio/webm")},
        data={"duration": "4"},
        headers=auth(tech_token),
    ).json()["data"]["voiceUrl"]
    assert db["messages"].count_documents({"repair_alert_id": accepted_alert}) == 3
    assert client.get(image_url).status_code == 200

    response = client.delete(f"/api/repair-alerts/{accepted_alert}", headers=auth(eng_token))
    assert response.status_code == 200
    assert db["messages"].count_documents({"repair_alert_id": accepted_alert}) == 0

    # Stored media goes with the thread
    assert client.get(image_url).status_code == 404
    assert client.get(voice_url).status_code == 404
