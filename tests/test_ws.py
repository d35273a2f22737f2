"""
Tests for the /ws real-time channel: handshake, broadcast fan-out, sync reset.
"""
from __future__ import annotations

from fastapi.testclient import TestClient

from rollcall import server


def test_first_message_is_init_snapshot(client: TestClient) -> None:
    created = client.post(
        "/api/classrooms", json={"name": "A", "path": "a", "students": ["Bob"]}
    ).json()

    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "init", "classrooms": [created]}


def test_mutations_are_broadcast_in_order(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "init", "classrooms": []}

        created = client.post(
            "/api/classrooms", json={"name": "A", "path": "a", "students": ["Bob"]}
        ).json()
        cid = created["id"]
        client.patch(f"/api/classrooms/{cid}", json={"studentIndex": 0, "present": True})
        updated = client.put(
            f"/api/classrooms/{cid}", json={"name": "A2", "path": "a", "students": ["Bob"]}
        ).json()
        client.delete(f"/api/classrooms/{cid}")

        assert ws.receive_json() == {"type": "classroom_added", "classroom": created}
        assert ws.receive_json() == {
            "type": "student_updated",
            "classroomId": cid,
            "studentIndex": 0,
            "present": True,
            "left": False,
        }
        assert ws.receive_json() == {"type": "classroom_updated", "classroom": updated}
        assert ws.receive_json() == {"type": "classroom_deleted", "classroomId": cid}


def test_failed_mutations_are_not_broadcast(client: TestClient) -> None:
    """A 404 delete or a 400 path conflict emits nothing; the next event is the next success."""
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        client.post("/api/classrooms", json={"name": "A", "path": "a", "students": []})
        assert ws.receive_json()["type"] == "classroom_added"

        assert client.delete("/api/classrooms/unknown").status_code == 404
        assert client.post(
            "/api/classrooms", json={"name": "B", "path": "a", "students": []}
        ).status_code == 400
        client.post("/api/classrooms", json={"name": "C", "path": "c", "students": []})

        event = ws.receive_json()
        assert event["type"] == "classroom_added"
        assert event["classroom"]["path"] == "c"


def test_sync_resets_every_observer(client: TestClient) -> None:
    classrooms = [{"id": "k1", "name": "A", "path": "a",
                   "students": [{"name": "Bob", "present": True, "left": False}]}]

    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        first.receive_json()
        second.receive_json()

        client.post("/api/classrooms/sync", json={"classrooms": classrooms})

        expected = {"type": "init", "classrooms": classrooms}
        assert first.receive_json() == expected
        assert second.receive_json() == expected


def test_malformed_message_keeps_connection_open(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_text("{not json")
        ws.send_text('{"type": "hello"}')
        ws.send_text("ping")
        assert ws.receive_text() == "pong"


def test_disconnect_unregisters_observer(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        assert len(server.get_dispatcher().registry) == 1
        ws.send_text("ping")
        ws.receive_text()

    client.post("/api/classrooms", json={"name": "A", "path": "a", "students": []})
    assert len(server.get_dispatcher().registry) == 0


def test_binary_frame_keeps_connection_open(client: TestClient) -> None:
    """An undecodable binary frame is logged and ignored like malformed text."""
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_bytes(b"\xff\xfe")
        ws.send_bytes(b'{"type": "hello"}')
        ws.send_text("ping")
        assert ws.receive_text() == "pong"
        assert len(server.get_dispatcher().registry) == 1
