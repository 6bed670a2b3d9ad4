from fastapi.testclient import TestClient


def test_ticket_health_endpoint(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.get("/api/v1/ticket-ocr/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "healthy"
    assert data["ocr_engine_available"] is True
    assert data["default_game"] == "modified_2_step_beta"


def test_app_health_endpoint(fastapi_app):
    r = TestClient(fastapi_app).get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_games_endpoint(fastapi_app):
    r = TestClient(fastapi_app).get("/api/v1/ticket-ocr/games")
    assert r.status_code == 200
    names = [g["name"] for g in r.json()["games"]]
    assert "modified_2_step_beta" in names
    assert "powerball" in names


def test_parse_text_endpoint(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.post("/api/v1/ticket-ocr/parse-text", json={"text": "A. 01 10 18 24 QP 31 QP\nB: 05 12 19 27 08"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["game"] == "modified_2_step_beta"
    assert body["total_draws"] == 2
    assert body["draws"][1] == {"main": [5, 12, 19, 27], "special": [8]}


def test_parse_text_overrides(fastapi_app):
    client = TestClient(fastapi_app)
    payload = {
        "text": "A 01 02 03 04 05\nB 06 07 08 09 10",
        "overrides": {"max_groups": 1},
    }
    r = client.post("/api/v1/ticket-ocr/parse-text", json=payload)
    assert r.status_code == 200
    assert r.json()["total_draws"] == 1


def test_parse_text_canonical_completion(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.post(
        "/api/v1/ticket-ocr/parse-text",
        json={"text": "C. 07 04 08 26", "complete_with_canonical": True},
    )
    assert r.status_code == 200
    assert r.json()["total_draws"] == 5


def test_parse_text_rejects_unknown_game(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.post("/api/v1/ticket-ocr/parse-text", json={"text": "A 01 02 03 04 05", "game": "keno"})
    assert r.status_code == 400
    assert "Unknown game" in r.json()["detail"]


def test_parse_text_rejects_bad_override(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.post(
        "/api/v1/ticket-ocr/parse-text",
        json={"text": "A 01 02 03 04 05", "overrides": {"min_num": 40, "max_num": 10}},
    )
    assert r.status_code == 400


def test_scan_multiple_images(fastapi_app):
    client = TestClient(fastapi_app)
    files = [
        ("files", ("one.png", b"ticket-1", "image/png")),
        ("files", ("two.png", b"ticket-2", "image/png")),
        ("files", ("three.jpg", b"ticket-3", "image/jpeg")),
    ]
    r = client.post("/api/v1/ticket-ocr/scan", files=files)
    assert r.status_code == 200
    body = r.json()
    assert body["total_draws"] == 3
    assert [d["main"] for d in body["draws"]] == [[1, 10, 18, 24], [5, 12, 19, 27], [11, 14, 19, 30]]
    assert len(body["ocr_texts"]) == 3


def test_scan_rejects_non_image(fastapi_app):
    client = TestClient(fastapi_app)
    # Send a text file pretending to be uploaded; content-type text/plain should be rejected
    files = {"files": ("test.txt", b"hello", "text/plain")}
    r = client.post("/api/v1/ticket-ocr/scan", files=files)
    assert r.status_code == 400
    body = r.json()
    assert "Invalid file type" in body["detail"]


def test_scan_rejects_empty_file(fastapi_app):
    client = TestClient(fastapi_app)
    r = client.post("/api/v1/ticket-ocr/scan", files={"files": ("empty.png", b"", "image/png")})
    assert r.status_code == 400
    assert "empty" in r.json()["detail"]


def test_scan_without_ocr_engine(fastapi_app, ticket_processor, monkeypatch):
    monkeypatch.setattr(ticket_processor, "ocr_engine", None)
    client = TestClient(fastapi_app)
    r = client.post("/api/v1/ticket-ocr/scan", files={"files": ("one.png", b"ticket-1", "image/png")})
    assert r.status_code == 503
