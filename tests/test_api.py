import pytest
from fastapi.testclient import TestClient
from api import app

client = TestClient(app)

def _start(game):
    resp = client.post("/v1/games/sessions", json={"game": game})
    assert resp.status_code == 200
    return resp.json()

def test_start_ordering_session():
    data = _start("ordering")
    assert "session_id" in data
    assert data["game"] == "ordering"
    assert data["phase"] == "active"
    assert data["checked"] is False
    assert 3 <= len(data["swatches"]) <= 8
    assert "correct_order" not in data

def test_ordering_check_reveals_truth():
    data = _start("ordering")
    sid = data["session_id"]
    ids = [s["id"] for s in sorted(data["swatches"], key=lambda s: s["luminance"])]
    resp = client.post(f"/v1/games/sessions/{sid}/order", json={"ids": ids})
    assert resp.status_code == 200
    assert resp.json()["accuracy"] == 100
    assert resp.json()["verdict"] == "perfect"

    state = client.get(f"/v1/games/sessions/{sid}").json()
    assert state["checked"] is True
    assert state["phase"] == "judged"
    assert state["correct_order"] == ids

    state = client.post(f"/v1/games/sessions/{sid}/rounds").json()
    assert state["round_index"] == 2
    assert state["checked"] is False

def test_ordering_bad_ids_is_400():
    sid = _start("ordering")["session_id"]
    resp = client.post(f"/v1/games/sessions/{sid}/order", json={"ids": ["x"]})
    assert resp.status_code == 400

def test_ordering_hint():
    sid = _start("ordering")["session_id"]
    resp = client.post(f"/v1/games/sessions/{sid}/hint")
    assert resp.status_code == 200
    assert {"first", "last", "message"} <= set(resp.json())

def test_reflex_tick_stop_next():
    data = _start("reflex")
    sid = data["session_id"]
    mid = (data["target_start"] + data["target_end"]) / 2.0
    state = client.post(f"/v1/games/sessions/{sid}/tick", json={"delta_ms": mid / 0.10}).json()
    assert state["position"] == pytest.approx(mid)

    resp = client.post(f"/v1/games/sessions/{sid}/stop")
    assert resp.status_code == 200
    assert resp.json()["gained"] == 100

    assert client.post(f"/v1/games/sessions/{sid}/stop").status_code == 400

    state = client.post(f"/v1/games/sessions/{sid}/rounds").json()
    assert state["position"] == 0.0
    assert state["target_end"] - state["target_start"] == 6
    assert state["score"] == 100

def test_similarity_answer_and_time_up():
    data = _start("similarity")
    sid = data["session_id"]
    assert data["time_left"] == 30
    resp = client.post(f"/v1/games/sessions/{sid}/answer", json={"same": data["left"] == data["right"]})
    assert resp.json() == {"correct": True, "gained": 1, "score": 1}

    state = client.post(f"/v1/games/sessions/{sid}/tick", json={"delta_ms": 30000}).json()
    assert state["phase"] == "ended"
    assert state["time_left"] == 0
    assert client.post(f"/v1/games/sessions/{sid}/answer", json={"same": True}).status_code == 400

def test_wrong_event_for_game_is_400():
    sid = _start("similarity")["session_id"]
    assert client.post(f"/v1/games/sessions/{sid}/stop").status_code == 400
    assert client.post(f"/v1/games/sessions/{sid}/rounds").status_code == 400

def test_negative_tick_rejected():
    sid = _start("reflex")["session_id"]
    assert client.post(f"/v1/games/sessions/{sid}/tick", json={"delta_ms": -5}).status_code == 422

def test_unknown_session_is_404():
    assert client.get("/v1/games/sessions/nope").status_code == 404
    assert client.post("/v1/games/sessions/nope/stop").status_code == 404
    assert client.delete("/v1/games/sessions/nope").status_code == 404

def test_end_session():
    sid = _start("reflex")["session_id"]
    assert client.delete(f"/v1/games/sessions/{sid}").status_code == 200
    assert client.get(f"/v1/games/sessions/{sid}").status_code == 404

def test_unknown_game_is_422():
    assert client.post("/v1/games/sessions", json={"game": "chess"}).status_code == 422

def test_luminance_endpoint():
    resp = client.post("/v1/colors/luminance", json={"hex": "FFFFFF"})
    assert resp.status_code == 200
    assert resp.json()["hex"] == "#ffffff"
    assert resp.json()["luminance"] == pytest.approx(1.0)
    assert client.post("/v1/colors/luminance", json={"hex": "#zzzzzz"}).status_code == 422

@pytest.mark.parametrize("raw", ["Infinity", "-Infinity", "NaN"])
def test_non_finite_tick_rejected(raw):
    sid = _start("reflex")["session_id"]
    resp = client.post(
        f"/v1/games/sessions/{sid}/tick",
        content='{"delta_ms": %s}' % raw,
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422
    state = client.get(f"/v1/games/sessions/{sid}").json()
    assert state["position"] == 0.0

def test_shutdown_closes_open_sessions():
    import api
    with TestClient(app) as c:
        sid = c.post("/v1/games/sessions", json={"game": "reflex"}).json()["session_id"]
        session = api._engine.get_session(sid)
    assert session.closed
    assert session.scheduler.active_count == 0
    assert api._engine.get_session(sid) is None
