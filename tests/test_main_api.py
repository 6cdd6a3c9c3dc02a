from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_read_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

def test_assessment_routes_are_mounted():
    response = client.get("/api/v1/assessment/questions")
    assert response.status_code == 200
    assert len(response.json()) == 10

def test_score_through_app():
    response = client.post("/api/v1/assessment/score", json={"answers": {"tech_awareness": 5}})
    assert response.status_code == 200
    assert response.json()["level"] == "L5"
