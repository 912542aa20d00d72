import pytest
from fastapi.testclient import TestClient

from app import app
from backend import room_registry


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    room_registry.rooms.clear()


def create_room(session):
    session.send_json({"event": "create-room"})
    created = session.receive_json()
    assert created["event"] == "room-created"
    return created["data"]["roomCode"]


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_full_session(client):
    with client.websocket_connect("/ws") as viewer:
        viewer_id = viewer.receive_json()["data"]["connectionId"]

        with client.websocket_connect("/ws") as streamer:
            streamer_id = streamer.receive_json()["data"]["connectionId"]
            code = create_room(streamer)
            assert len(code) == 6 and code.isdigit()

            viewer.send_json({"event": "join-room", "data": code})
            assert viewer.receive_json() == {"event": "room-joined", "data": {"roomCode": code}}
            assert streamer.receive_json() == {
                "event": "monitor-joined",
                "data": {"monitorId": viewer_id, "roomCode": code, "totalViewers": 1},
            }

            viewer.send_json({
                "event": "signal",
                "data": {"roomCode": code, "target": "phone", "signal": {"type": "offer"}},
            })
            assert streamer.receive_json() == {
                "event": "signal",
                "data": {"from": viewer_id, "signal": {"type": "offer"}},
            }

            streamer.send_json({
                "event": "signal",
                "data": {"roomCode": code, "target": viewer_id, "signal": {"type": "answer"}},
            })
            assert viewer.receive_json() == {
                "event": "signal",
                "data": {"from": streamer_id, "signal": {"type": "answer"}},
            }

            details = client.get(f"/rooms/{code}").json()
            assert details["room_code"] == code
            assert details["viewer_count"] == 1
            assert details["has_streamer"] is True

        assert viewer.receive_json() == {"event": "phone-disconnected", "data": None}
        assert client.get(f"/rooms/{code}").status_code == 404

        viewer.send_json({"event": "join-room", "data": {"roomCode": code}})
        assert viewer.receive_json() == {"event": "error", "data": {"message": "Room not found"}}


def test_join_unknown_room(client):
    with client.websocket_connect("/ws") as viewer:
        viewer.receive_json()
        viewer.send_json({"event": "join-room", "data": "000000"})
        assert viewer.receive_json() == {"event": "error", "data": {"message": "Room not found"}}
    assert client.get("/rooms").json() == {"active_rooms": 0}


def test_leave_room_notifies_streamer(client):
    with client.websocket_connect("/ws") as streamer:
        streamer.receive_json()
        code = create_room(streamer)
        with client.websocket_connect("/ws") as viewer:
            viewer_id = viewer.receive_json()["data"]["connectionId"]
            viewer.send_json({"event": "join-room", "data": code})
            viewer.receive_json()
            streamer.receive_json()

            viewer.send_json({"event": "leave-room", "data": code})
            assert streamer.receive_json() == {
                "event": "monitor-left",
                "data": {"monitorId": viewer_id, "totalViewers": 0},
            }
        assert client.get(f"/rooms/{code}").json()["viewer_count"] == 0


def test_viewer_disconnect_notifies_streamer(client):
    with client.websocket_connect("/ws") as streamer:
        streamer.receive_json()
        code = create_room(streamer)
        with client.websocket_connect("/ws") as viewer:
            viewer_id = viewer.receive_json()["data"]["connectionId"]
            viewer.send_json({"event": "join-room", "data": code})
            viewer.receive_json()
            streamer.receive_json()
        assert streamer.receive_json() == {
            "event": "monitor-left",
            "data": {"monitorId": viewer_id, "totalViewers": 0},
        }


def test_signal_to_unknown_target_is_dropped(client):
    with client.websocket_connect("/ws") as streamer:
        streamer.receive_json()
        code = create_room(streamer)
        streamer.send_json({
            "event": "signal",
            "data": {"roomCode": code, "target": "not-a-viewer", "signal": {"candidate": "x"}},
        })
        streamer.send_json({"event": "signal", "data": {"roomCode": code}})
        # Nothing was sent back for the dropped signals; the next reply is for this request
        streamer.send_json({"event": "join-room", "data": "999999" if code != "999999" else "000000"})
        assert streamer.receive_json()["event"] == "error"


def test_invalid_frames(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_text("not json")
        assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid message"}}
        ws.send_json({"event": "dance"})
        assert ws.receive_json() == {"event": "error", "data": {"message": "Unknown event: dance"}}
        ws.send_json({"event": "join-room"})
        assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid message"}}
        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"event": "error", "data": {"message": "Invalid message"}}


def test_room_details_not_found(client):
    response = client.get("/rooms/123456")
    assert response.status_code == 404
    assert response.json() == {"detail": "Room not found"}


def test_binary_frame_keeps_room_alive(client):
    with client.websocket_connect("/ws") as streamer:
        streamer.receive_json()
        code = create_room(streamer)
        with client.websocket_connect("/ws") as viewer:
            viewer.receive_json()
            viewer.send_json({"event": "join-room", "data": code})
            assert viewer.receive_json()["event"] == "room-joined"
            streamer.receive_json()

            streamer.send_bytes(b"\x00\x01")
            assert streamer.receive_json() == {"event": "error", "data": {"message": "Invalid message"}}

            details = client.get(f"/rooms/{code}").json()
            assert details["viewer_count"] == 1
            assert details["has_streamer"] is True

            viewer.send_json({"event": "signal", "data": {"roomCode": code, "target": "phone", "signal": {"type": "offer"}}})
            assert streamer.receive_json()["event"] == "signal"
