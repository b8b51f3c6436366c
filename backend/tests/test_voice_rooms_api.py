"""Tests for the voice room HTTP API."""

from __future__ import annotations

from app.models import VoiceRoom
from app.monitoring.metrics import voice_room_transitions_total


def _create(client, user, **payload):
    body = {"name": "Spanish practice", "topic": "practice", **payload}
    response = client.post("/api/voice-rooms", headers=user["headers"], json=body)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _participants(room):
    return [entry["user"]["id"] for entry in room["participants"]]


def test_create_makes_caller_host_and_first_participant(client, register, languages):
    host = register("host")

    room = _create(client, host, languages=[languages["es"], languages["en"]])

    assert room["host"]["id"] == host["id"]
    assert _participants(room) == [host["id"]]
    assert room["maxParticipants"] == 10
    assert room["isActive"] is True
    assert sorted(language["code"] for language in room["languages"]) == ["en", "es"]
    assert "password" not in room


def test_private_room_needs_password_on_create(client, register):
    host = register("host")

    response = client.post(
        "/api/voice-rooms",
        headers=host["headers"],
        json={"name": "Secret", "isPrivate": True},
    )

    assert response.status_code == 400


def test_join_and_capacity(client, register):
    host = register("host")
    guest = register("guest")
    late = register("late")
    room = _create(client, host, maxParticipants=2)

    joined = client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    assert joined.status_code == 200, joined.text
    assert _participants(joined.json()["data"]) == [host["id"], guest["id"]]

    twice = client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    assert twice.status_code == 400
    assert twice.json()["error"] == "User is already in this voice room"

    full = client.post(f"/api/voice-rooms/{room['id']}/join", headers=late["headers"])
    assert full.status_code == 400
    assert full.json()["error"] == "Voice room is at full capacity"


def test_private_room_password_is_checked(client, register, session_factory):
    host = register("host")
    guest = register("guest")
    room = _create(client, host, isPrivate=True, password="letmein")

    with session_factory() as session:
        assert session.get(VoiceRoom, room["id"]).password != "letmein"

    missing = client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    wrong = client.post(
        f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"], json={"password": "nope"}
    )
    right = client.post(
        f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"], json={"password": "letmein"}
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert right.status_code == 200


def test_host_leaving_transfers_host_and_last_leave_closes(client, register):
    host = register("host")
    guest = register("guest")
    room = _create(client, host)
    client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])

    after_host = client.post(f"/api/voice-rooms/{room['id']}/leave", headers=host["headers"])
    assert after_host.status_code == 200
    data = after_host.json()["data"]
    assert data["host"]["id"] == guest["id"]
    assert _participants(data) == [guest["id"]]

    not_member = client.post(f"/api/voice-rooms/{room['id']}/leave", headers=host["headers"])
    assert not_member.status_code == 400
    assert not_member.json()["error"] == "User is not in this voice room"

    closed = client.post(f"/api/voice-rooms/{room['id']}/leave", headers=guest["headers"]).json()["data"]
    assert closed["participants"] == []
    assert closed["isActive"] is False
    assert closed["endTime"] is not None

    rejoin = client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    assert rejoin.status_code == 400
    assert rejoin.json()["error"] == "Voice room has been closed"


def test_toggle_mute_and_deafen(client, register):
    host = register("host")
    outsider = register("outsider")
    room = _create(client, host)

    muted = client.post(f"/api/voice-rooms/{room['id']}/toggle-mute", headers=host["headers"])
    assert muted.json()["data"] == {"isMuted": True}

    deafened = client.post(f"/api/voice-rooms/{room['id']}/toggle-deafen", headers=host["headers"])
    assert deafened.json()["data"] == {"isDeafened": True, "isMuted": True}

    undeafened = client.post(f"/api/voice-rooms/{room['id']}/toggle-deafen", headers=host["headers"])
    assert undeafened.json()["data"] == {"isDeafened": False, "isMuted": False}

    rejected = client.post(f"/api/voice-rooms/{room['id']}/toggle-mute", headers=outsider["headers"])
    assert rejected.status_code == 400


def test_only_host_can_update_or_delete(client, register):
    host = register("host")
    guest = register("guest")
    room = _create(client, host)
    client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])

    forbidden = client.put(
        f"/api/voice-rooms/{room['id']}", headers=guest["headers"], json={"name": "Mine now"}
    )
    assert forbidden.status_code == 403

    updated = client.put(
        f"/api/voice-rooms/{room['id']}",
        headers=host["headers"],
        json={"name": "Renamed", "topic": "debate", "host": guest["id"], "participants": []},
    )
    assert updated.status_code == 200, updated.text
    data = updated.json()["data"]
    assert data["name"] == "Renamed"
    assert data["topic"] == "debate"
    assert data["host"]["id"] == host["id"]
    assert _participants(data) == [host["id"], guest["id"]]

    too_small = client.put(
        f"/api/voice-rooms/{room['id']}", headers=host["headers"], json={"maxParticipants": 1}
    )
    assert too_small.status_code == 400

    not_deleted = client.delete(f"/api/voice-rooms/{room['id']}", headers=guest["headers"])
    assert not_deleted.status_code == 403

    deleted = client.delete(f"/api/voice-rooms/{room['id']}", headers=host["headers"])
    assert deleted.status_code == 200
    assert client.get(f"/api/voice-rooms/{room['id']}", headers=host["headers"]).status_code == 404


def test_update_cannot_reopen_or_close_a_room(client, register):
    host = register("host")
    guest = register("guest")
    room = _create(client, host)

    client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    deactivated = client.put(
        f"/api/voice-rooms/{room['id']}", headers=host["headers"], json={"isActive": False}
    )
    assert deactivated.status_code == 200, deactivated.text
    data = deactivated.json()["data"]
    assert data["isActive"] is True
    assert data["endTime"] is None
    assert _participants(data) == [host["id"], guest["id"]]

    client.post(f"/api/voice-rooms/{room['id']}/leave", headers=guest["headers"])
    closed = client.post(f"/api/voice-rooms/{room['id']}/leave", headers=host["headers"]).json()["data"]
    assert closed["isActive"] is False

    reopened = client.put(
        f"/api/voice-rooms/{room['id']}", headers=host["headers"], json={"isActive": True}
    )
    assert reopened.status_code == 200, reopened.text
    assert reopened.json()["data"]["isActive"] is False
    assert reopened.json()["data"]["participants"] == []

    rejoin = client.post(f"/api/voice-rooms/{room['id']}/join", headers=guest["headers"])
    assert rejoin.status_code == 400
    assert rejoin.json()["error"] == "Voice room has been closed"


def test_list_filters(client, register, languages):
    host = register("host")
    _create(client, host, name="Casual English", topic="casual", languages=[languages["en"]])
    _create(client, host, name="Debate club", topic="debate", languages=[languages["fr"]])

    everything = client.get("/api/voice-rooms", headers=host["headers"]).json()
    by_topic = client.get("/api/voice-rooms", headers=host["headers"], params={"topic": "debate"}).json()
    by_language = client.get(
        "/api/voice-rooms", headers=host["headers"], params={"language_id": languages["en"]}
    ).json()
    inactive = client.get("/api/voice-rooms", headers=host["headers"], params={"is_active": False}).json()

    assert everything["total"] == 2
    assert [room["name"] for room in by_topic["data"]] == ["Debate club"]
    assert [room["name"] for room in by_language["data"]] == ["Casual English"]
    assert inactive["count"] == 0


def test_transition_outcomes_are_counted(client, register):
    voice_room_transitions_total.clear()
    host = register("host")
    room = _create(client, host)

    client.post(f"/api/voice-rooms/{room['id']}/join", headers=host["headers"])
    client.post(f"/api/voice-rooms/{room['id']}/toggle-mute", headers=host["headers"])

    assert voice_room_transitions_total.value("join", "AlreadyJoined") == 1
    assert voice_room_transitions_total.value("toggle_mute", "ok") == 1
