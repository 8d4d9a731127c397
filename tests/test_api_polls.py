import secrets

from liquid_democracy import database
from liquid_democracy.config import API_SETTINGS


def _create_poll(client, name: str = "API poll") -> dict:
    r = client.post("/api/v1/polls/", json={"name": f"{name} {secrets.token_hex(3)}", "description": "test"})
    assert r.status_code == 201, r.text
    return r.json()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["service"] == "liquid-democracy"
    assert "X-Request-ID" in r.headers
    assert "X-Process-Time" in r.headers


def test_detailed_health_checks_database(client):
    r = client.get("/health/detailed")
    assert r.status_code == 200
    assert r.json()["checks"]["database"] == "healthy"


def test_request_id_is_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"


def test_create_poll_and_duplicate(client):
    poll = _create_poll(client)
    assert poll["status"] == "open"
    assert poll["closed_at"] is None

    r = client.post("/api/v1/polls/", json={"name": poll["name"]})
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_create_poll_validation_error(client):
    r = client.post("/api/v1/polls/", json={"name": ""})
    assert r.status_code == 422
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Request validation failed"


def test_unknown_poll_returns_404(client):
    r = client.get("/api/v1/polls/987654")
    assert r.status_code == 404
    assert "not found" in r.json()["message"]
    assert client.get("/api/v1/polls/987654/results").status_code == 404


def test_cast_ballots_and_results(client):
    poll = _create_poll(client, "Ballots")
    base = f"/api/v1/polls/{poll['id']}"

    for payload in [
        {"voter": "Alice", "action": "pick", "choice": "Pizza"},
        {"voter": "Bob", "action": "delegate", "choice": "Carol"},
        {"voter": "Carol", "action": "pick", "choice": "Salad"},
        {"voter": "Dave", "action": "delegate", "choice": "Eve"},
        {"voter": "Eve", "action": "delegate", "choice": "Mallory"},
        {"voter": "Mallory", "action": "delegate", "choice": "Eve"},
    ]:
        r = client.post(f"{base}/ballots", json=payload)
        assert r.status_code == 201, r.text

    r = client.get(f"{base}/results")
    assert r.status_code == 200
    body = r.json()
    assert body["results"] == [
        {"alternative": "Salad", "votes": 2},
        {"alternative": "Pizza", "votes": 1},
    ]
    assert body["invalid_vote_count"] == 3
    assert body["total_voters"] == 6

    choices = client.get(f"{base}/choices").json()["choices"]
    assert choices["Bob"] == "Salad"
    assert choices["Dave"] is None

    ballots = client.get(f"{base}/ballots").json()
    assert [b["voter"] for b in ballots] == ["Alice", "Bob", "Carol", "Dave", "Eve", "Mallory"]


def test_ballot_validation(client):
    poll = _create_poll(client, "Validation")
    base = f"/api/v1/polls/{poll['id']}"
    assert client.post(f"{base}/ballots", json={"voter": "  ", "action": "pick"}).status_code == 422
    assert client.post(f"{base}/ballots", json={"voter": "Al", "action": "vote"}).status_code == 422

    # missing choice is accepted and counts as an invalid vote
    r = client.post(f"{base}/ballots", json={"voter": "Al", "action": "pick"})
    assert r.status_code == 201
    assert r.json()["choice"] is None
    assert client.get(f"{base}/results").json()["invalid_vote_count"] == 1


def test_import_commands_endpoint(client, example_commands):
    poll = _create_poll(client, "Import")
    base = f"/api/v1/polls/{poll['id']}"
    text = "\n".join(example_commands + ["grammar picks apple", "Dad"])

    r = client.post(f"{base}/commands", json={"text": text})
    assert r.status_code == 200, r.text
    assert r.json() == {"accepted": 7, "skipped": 1, "skipped_lines": ["Dad"]}

    results = client.get(f"{base}/results").json()["results"]
    assert [row["alternative"] for row in results] == ["Salad", "apple", "Pizza"]


def test_close_poll_blocks_further_ballots(client):
    poll = _create_poll(client, "Close")
    base = f"/api/v1/polls/{poll['id']}"
    client.post(f"{base}/ballots", json={"voter": "Alice", "action": "pick", "choice": "Pizza"})

    r = client.post(f"{base}/close")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["data"]["status"] == "closed"

    r = client.post(f"{base}/ballots", json={"voter": "Bob", "action": "pick", "choice": "Salad"})
    assert r.status_code == 409
    assert client.post(f"{base}/commands", json={"text": "Bob pick Salad"}).status_code == 409

    body = client.get(f"{base}/results").json()
    assert body["status"] == "closed"
    assert body["results"] == [{"alternative": "Pizza", "votes": 1}]

    listed = client.get("/api/v1/polls/", params={"status_filter": "closed", "limit": 1000}).json()
    assert poll["id"] in {p["id"] for p in listed}


def test_list_polls_pagination_bounds(client):
    assert client.get("/api/v1/polls/", params={"limit": 0}).status_code == 422
    assert client.get("/api/v1/polls/", params={"offset": -1}).status_code == 422


def test_detailed_health_reports_degraded_database(client, monkeypatch):
    def _broken_session():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(database, "SessionLocal", _broken_session)
    r = client.get("/health/detailed")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "degraded"
    assert body["checks"]["database"] == "unhealthy: database unavailable"


def test_import_commands_too_large_returns_413(client, monkeypatch):
    poll = _create_poll(client, "TooLarge")
    base = f"/api/v1/polls/{poll['id']}"
    monkeypatch.setitem(API_SETTINGS, "max_import_lines", 2)

    r = client.post(f"{base}/commands", json={"text": "A pick X\nB pick X\nC pick X"})
    assert r.status_code == 413
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Import of 3 lines exceeds the limit of 2"
    assert client.get(f"{base}/ballots").json() == []
