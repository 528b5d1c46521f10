import logging

import pytest

import ndawonga.config as cfg
from ndawonga.chat import ChatLogStore
from ndawonga.errors import StorageFailure
from ndawonga.quotes import QuoteRequestStore
from ndawonga.seed import DEMO_PROJECTS, seed_demo


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


# ------------ quotes ------------


def test_submit_quote_round_trip(client, db_path):
    body = {
        "name": "Sipho Dlamini",
        "email": "sipho@example.com",
        "phone": "011 555 0000",
        "project_type": "Water & Sanitation",
        "area_sq_m": 250,
        "complexity": "low",
        "estimated_cost": 12345.67,
        "message": "Reticulation for 40 stands",
    }
    resp = client.post("/api/quotes", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "Quote request saved"
    assert isinstance(data["id"], int) and data["id"] > 0

    stored = QuoteRequestStore(db_path).get(data["id"])
    assert stored.estimated_cost == pytest.approx(12345.67)  # not recomputed
    assert stored.area_sq_m == 250
    assert stored.project_type == "Water & Sanitation"
    assert stored.message == body["message"]


def test_submit_quote_defaults(client, db_path):
    resp = client.post(
        "/api/quotes",
        json={"name": "N", "email": "n@x.io", "project_type": "", "complexity": "",
              "area_sq_m": None},
    )
    assert resp.status_code == 200
    stored = QuoteRequestStore(db_path).get(resp.json()["id"])
    assert stored.project_type is None
    assert stored.complexity == "medium"
    assert stored.area_sq_m == 0
    assert stored.estimated_cost == 0


def test_submit_quote_requires_name_and_email(client, db_path):
    resp = client.post("/api/quotes", json={"email": "x@y.z"})
    assert resp.status_code == 400
    assert "name" in resp.json()["error"]
    assert QuoteRequestStore(db_path).count() == 0


def test_submit_quote_rejects_negative_area(client):
    resp = client.post("/api/quotes", json={"name": "N", "email": "e@x", "area_sq_m": -3})
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"
    assert "error" in resp.json()


def test_submit_quote_storage_failure(client, monkeypatch):
    def boom(self, request):
        raise StorageFailure("db down")

    monkeypatch.setattr(QuoteRequestStore, "submit", boom)
    resp = client.post("/api/quotes", json={"name": "N", "email": "e@x"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Database insert error"
    assert "db down" not in resp.text


def test_estimate_endpoint(client):
    resp = client.post(
        "/api/quotes/estimate",
        json={"project_type": "Road Construction", "area_sq_m": 100, "complexity": "medium"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["estimated_cost"] == pytest.approx(106_400)
    assert data["base_rate"] == 950
    assert data["multiplier"] == 1.0
    assert data["contingency_rate"] == pytest.approx(0.12)


def test_estimate_endpoint_falls_back_and_clamps(client):
    data = client.post(
        "/api/quotes/estimate",
        json={"project_type": "UnknownCategory", "area_sq_m": 50, "complexity": "high"},
    ).json()
    assert data["category"] == "Other"
    assert data["estimated_cost"] == pytest.approx(42_000)

    for area in (-10, "abc", None):
        data = client.post(
            "/api/quotes/estimate", json={"area_sq_m": area, "complexity": "??"}
        ).json()
        assert data["estimated_cost"] == 0
        assert data["complexity"] == "medium"


def test_pricing_endpoint(client):
    data = client.get("/api/pricing").json()
    assert [c["category"] for c in data["categories"]] == list(cfg.BASE_RATES)
    assert data["complexity_multipliers"] == cfg.COMPLEXITY_MULTIPLIERS


# ------------ chat ------------


def test_chat_tender_and_project(client, db_path):
    client.post("/api/tenders", json={"title": "Bridge repairs", "closing_date": "2025-03-01"})
    resp = client.post("/api/chat", json={"message": "Any tender for this project?"})
    assert resp.status_code == 200
    assert resp.json()["reply"] == "Current tenders:\nBridge repairs (closes: 2025-03-01)"


def test_chat_logs_with_session_header(client, db_path):
    resp = client.post(
        "/api/chat", json={"message": "Any certificates available?"},
        headers={"X-Session-Id": "sess-42"},
    )
    assert resp.json()["reply"] == cfg.CERTIFICATES_REPLY
    logged = ChatLogStore(db_path).for_session("sess-42")
    assert len(logged) == 1
    assert logged[0].user_message == "Any certificates available?"


def test_chat_default_session(client, db_path):
    client.post("/api/chat", json={"message": "Hello"})
    logged = ChatLogStore(db_path).for_session("web-session")
    assert [e.bot_response for e in logged] == [cfg.GREETING_REPLY]


def test_chat_failure_returns_generic_error(client, monkeypatch):
    def boom(self, exchange):
        raise StorageFailure("disk full")

    monkeypatch.setattr(ChatLogStore, "append", boom)
    resp = client.post("/api/chat", json={"message": "hi"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Server error"
    assert "reply" not in resp.json()


def test_request_log_records_intent(client, caplog):
    with caplog.at_level(logging.INFO, logger="ndawonga.requests"):
        client.post("/api/chat", json={"message": "projects"})
    lines = [r.getMessage() for r in caplog.records if r.name == "ndawonga.requests"]
    assert any('"selected_intent": "project"' in line for line in lines)
    assert any('"path": "/api/chat"' in line for line in lines)


# ------------ catalogue & contact ------------


def test_projects_list_and_detail(client, db_path):
    assert seed_demo(db_path) == len(DEMO_PROJECTS)
    assert seed_demo(db_path) == 0

    projects = client.get("/api/projects").json()
    assert len(projects) == len(DEMO_PROJECTS)

    pid = projects[0]["id"]
    detail = client.get(f"/api/projects/{pid}").json()
    assert detail["title"] == projects[0]["title"]


def test_project_not_found(client):
    resp = client.get("/api/projects/9999")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Not found"


def test_create_project(client):
    resp = client.post(
        "/api/projects",
        json={"title": "Landfill cell", "description": "New cell", "type": "Waste Management",
              "year": 2025, "featured_image": "1700000000-cell.jpg"},
    )
    assert resp.json()["message"] == "Project created"
    detail = client.get(f"/api/projects/{resp.json()['id']}").json()
    assert detail["featured_image"] == "1700000000-cell.jpg"
    assert detail["status"] == "active"


def test_tenders_listing_featured_first(client):
    client.post("/api/tenders", json={"title": "Late", "closing_date": "2026-01-01"})
    client.post("/api/tenders", json={"title": "Early", "closing_date": "2025-01-01",
                                      "featured": True})
    titles = [t["title"] for t in client.get("/api/tenders").json()]
    assert titles == ["Early", "Late"]


def test_team_and_documents_empty(client):
    assert client.get("/api/team").json() == []
    assert client.get("/api/documents").json() == []


def test_contact_message(client):
    resp = client.post("/api/contact", json={"name": "Lerato", "message": "Call me"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Message saved"


def test_read_failure_is_generic(client, monkeypatch):
    from ndawonga.catalog import TeamStore

    def boom(self):
        raise StorageFailure("gone")

    monkeypatch.setattr(TeamStore, "all", boom)
    resp = client.get("/api/team")
    assert resp.status_code == 500
    assert resp.json()["error"] == "Database error"


@pytest.mark.parametrize("closing", ["9 January 2026", "2026-3-1", "soon"])
def test_tender_rejects_non_iso_closing_date(client, closing):
    resp = client.post("/api/tenders", json={"title": "Bad date", "closing_date": closing})
    assert resp.status_code == 400
    assert "closing_date" in " ".join(resp.json()["details"]["fields"])
    assert client.get("/api/tenders").json() == []


def test_tender_order_crosses_year_boundary(client):
    for title, closing in [("Dec 2025", "2025-12-01"), ("Jan 2026", "2026-01-09"),
                           ("Mar 2026", "2026-03-01")]:
        assert client.post("/api/tenders", json={"title": title, "closing_date": closing}).status_code == 200
    client.post("/api/tenders", json={"title": "Open-ended", "closing_date": ""})

    reply = client.post("/api/chat", json={"message": "tenders"}).json()["reply"]
    assert reply.splitlines() == [
        "Current tenders:",
        "Mar 2026 (closes: 2026-03-01)",
        "Jan 2026 (closes: 2026-01-09)",
        "Dec 2025 (closes: 2025-12-01)",
        "Open-ended (closes: N/A)",
    ]
    titles = [t["title"] for t in client.get("/api/tenders").json()]
    assert titles == ["Mar 2026", "Jan 2026", "Dec 2025", "Open-ended"]


def test_estimate_endpoint_huge_area_stays_finite(client):
    resp = client.post(
        "/api/quotes/estimate",
        json={"area_sq_m": 1e308, "project_type": "Road Construction"},
    )
    assert resp.status_code == 200
    cost = resp.json()["estimated_cost"]
    assert isinstance(cost, float)
    assert cost == pytest.approx(cfg.MAX_AREA_SQ_M * 950 * 1.12)


def test_chat_without_body_gets_greeting(client, db_path):
    resp = client.post("/api/chat")
    assert resp.status_code == 200
    assert resp.json()["reply"] == cfg.GREETING_REPLY
    logged = ChatLogStore(db_path).for_session("web-session")
    assert len(logged) == 1
    assert logged[0].user_message is None
