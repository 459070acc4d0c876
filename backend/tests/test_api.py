import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers import plans
from app.services.generation_orchestrator import GenerationOrchestrator, ModeConfig
from app.services.planner_service import PlannerService

PARIS = {
    "destination": "Paris, France",
    "start_date": "2025-07-12",
    "end_date": "2025-07-16",
    "adults": 2,
    "style": "moderate",
    "budget": "$3,000",
    "dietary": "vegetarian, no nuts",
}


@pytest.fixture
def client(make_llm, clean_plan, fake_store):
    orchestrator = GenerationOrchestrator(
        make_llm(clean_plan),
        cooldown_s=0,
        overhead_s=0.2,
        modes={"preview": ModeConfig(3.0, 200), "full": ModeConfig(3.0, 400)},
    )
    planner = PlannerService(orchestrator=orchestrator, store=fake_store, include_weather=False)
    app.dependency_overrides[plans.get_planner] = lambda: planner
    app.dependency_overrides[plans.get_plan_store] = lambda: fake_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_preview(client):
    resp = client.post("/api/preview", json=PARIS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == "plan1"
    assert data["mode"] == "preview"
    assert data["provenance"] == "ai"
    assert data["budget"]["total"] == 3000
    assert 'id="hotel-widget"' in data["html"]


def test_full_plan_and_lookup(client):
    created = client.post("/api/plan", json=PARIS).json()
    assert created["mode"] == "full"

    resp = client.get(f"/api/plan/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["html"] == created["html"]

    latest = client.get("/api/plan/latest")
    assert latest.status_code == 200
    assert latest.json()["id"] == created["id"]


def test_missing_plan_is_404(client):
    assert client.get("/api/plan/nope").status_code == 404
    assert client.get("/api/plan/latest").status_code == 404
    assert client.get("/api/plan/nope/pdf").status_code == 404


def test_invalid_trip_is_rejected(client):
    bad_dates = {**PARIS, "start_date": "2025-07-16", "end_date": "2025-07-12"}
    assert client.post("/api/preview", json=bad_dates).status_code == 422
    assert client.post("/api/preview", json={**PARIS, "destination": "   "}).status_code == 422
    assert client.post("/api/preview", json={**PARIS, "adults": 0}).status_code == 422


def test_pdf_export(client):
    plan_id = client.post("/api/preview", json=PARIS).json()["id"]
    resp = client.get(f"/api/plan/{plan_id}/pdf")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_ics_export(client):
    plan_id = client.post("/api/plan", json=PARIS).json()["id"]
    resp = client.get(f"/api/plan/{plan_id}/ics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/calendar")
    assert "BEGIN:VCALENDAR" in resp.text
    assert resp.text.count("BEGIN:VEVENT") == 5


def test_budget_endpoint(client):
    resp = client.post("/api/budget", json={"total": 0, "days": 3, "style": "mid", "travelers": 2, "destination": "Paris"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["derived"] is True
    assert data["cost_tier"] == "high"
    assert data["total"] > 0


def test_advise_endpoint(client):
    resp = client.post(
        "/api/advise",
        json={"destination": "Paris", "activity_type": "museums", "date": "2025-07-14", "time_slot": "10:00-12:00"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["urgency"] == "urgent"
    assert any("Bastille Day" in w for w in data["warnings"])


def test_health(client):
    data = client.get("/api/health").json()
    assert data["status"] == "ok"
    assert data["service"] == "wayplanner"
    assert "counters" in data["generation"]
